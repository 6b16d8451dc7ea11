"""
Single-line text measurement for the line fitting engine.

A measurer answers one question: how wide is this line when drawn with a given
font, size, letter spacing and word spacing, on one line without wrapping.
"""

import logging
import threading

from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.ttfonts import TTFont

from .language_support import reshape_arabic_text

_LOGGER = logging.getLogger(__name__)


class MeasurementError(Exception):
    """Raised when a width cannot be computed (unknown font, missing glyphs)."""


class TextMeasurer:
    """
    Contract for width measurement.

    Implementations must be deterministic for the same glyph metrics and
    raise MeasurementError instead of returning a wrong width.
    """

    def measure(self, text, font_family, font_size, letter_spacing=0.0, word_spacing=0.0):
        raise NotImplementedError


class ReportLabMeasurer(TextMeasurer):
    """
    Measures text with the glyph metrics of fonts registered in ReportLab.

    Arabic text is reshaped to its presentation forms first, since joining
    forms have different advances. Letter spacing is added once per character
    and word spacing once per space, which is how the renderer places glyphs.
    """

    def __init__(self, require_glyphs=True):
        """
        :param require_glyphs: Fail when the font cannot draw a character of the text
        """
        self.require_glyphs = require_glyphs

    def measure(self, text, font_family, font_size, letter_spacing=0.0, word_spacing=0.0):
        try:
            font = pdfmetrics.getFont(font_family)
        except Exception as e:
            raise MeasurementError(f"Font '{font_family}' is not available: {e}") from e

        shaped = reshape_arabic_text(text)
        if self.require_glyphs:
            self._check_glyphs(font, shaped)

        try:
            width = pdfmetrics.stringWidth(shaped, font_family, font_size)
        except Exception as e:
            raise MeasurementError(f"Could not measure text with '{font_family}': {e}") from e

        width += letter_spacing * len(shaped)
        width += word_spacing * shaped.count(" ")
        return width

    @staticmethod
    def _check_glyphs(font, text):
        if isinstance(font, TTFont):
            char_to_glyph = font.face.charToGlyph

            def has_glyph(ch):
                return ord(ch) in char_to_glyph

        else:
            # Single byte Type1 fonts: the character must encode in the font or one of its substitutes
            fonts = [font] + list(getattr(font, "substitutionFonts", None) or [])

            def has_glyph(ch):
                return any(_encodes(f, ch) for f in fonts)

        missing = sorted({ch for ch in text if not ch.isspace() and not has_glyph(ch)})
        if missing:
            codepoints = ", ".join(f"U+{ord(ch):04X}" for ch in missing[:5])
            raise MeasurementError(
                f"Font '{font.fontName}' has no glyph for {len(missing)} character(s): {codepoints}"
            )


def _encodes(font, ch):
    encoding = getattr(font, "encName", None)
    if encoding is None:
        return True
    try:
        ch.encode(encoding)
    except UnicodeEncodeError:
        return False
    except LookupError:
        # No codec to check against, stringWidth reports the problem itself
        return True
    return True


class CachingMeasurer(TextMeasurer):
    """
    Memoizes another measurer per (text, font, size, letter, word) tuple.

    Safe to share between the threads of fit_page. The backend is called
    outside the lock, so two threads missing on the same key may both measure.
    """

    def __init__(self, measurer):
        self.measurer = measurer
        self._cache = {}
        self._lock = threading.Lock()
        self.hits = 0
        self.misses = 0

    def measure(self, text, font_family, font_size, letter_spacing=0.0, word_spacing=0.0):
        key = (text, font_family, font_size, letter_spacing, word_spacing)
        with self._lock:
            if key in self._cache:
                self.hits += 1
                return self._cache[key]

        # Failures are not cached, the backend decides again next time
        width = self.measurer.measure(text, font_family, font_size, letter_spacing, word_spacing)
        with self._lock:
            self.misses += 1
            self._cache[key] = width
        return width

    def clear(self):
        with self._lock:
            self._cache.clear()
            self.hits = 0
            self.misses = 0

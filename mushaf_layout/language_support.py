"""
Language support utilities for Mushaf page layout.
Handles Arabic detection, reshaping and right-to-left display ordering,
and the markers that identify opening and heading lines.
"""

import re
import logging

import arabic_reshaper
from bidi.algorithm import get_display

_LOGGER = logging.getLogger(__name__)

# Arabic Unicode ranges:
# U+0600-U+06FF: Arabic
# U+0750-U+077F: Arabic Supplement
# U+08A0-U+08FF: Arabic Extended-A
# U+FB50-U+FDFF: Arabic Presentation Forms-A
# U+FE70-U+FEFF: Arabic Presentation Forms-B
ARABIC_PATTERN = re.compile(
    r"[\u0600-\u06FF\u0750-\u077F\u08A0-\u08FF\uFB50-\uFDFF\uFE70-\uFEFF]"
)

# Opening line of a surah, vocalized (Uthmani and simple) and plain.
BASMALA_MARKERS = (
    "بِسْمِ ٱللَّهِ",
    "بِسْمِ اللَّهِ",
    "بسم الله",
)

# Surah title line ("سورة <name>").
SURAH_HEADING_MARKERS = (
    "سُورَةُ",
    "سورة ",
)

# Quranic text needs its harakat kept, the library default drops them.
_RESHAPER = arabic_reshaper.ArabicReshaper(
    configuration={
        "delete_harakat": False,
        "support_ligatures": True,
    }
)


def contains_arabic(text):
    """
    Check if text contains Arabic characters.

    :param text: Text to check
    :return: True if text contains Arabic characters
    """
    return bool(ARABIC_PATTERN.search(text))


def contains_basmala(text):
    """
    Check if text contains the opening Basmala.

    :param text: Raw line text
    :return: True if one of BASMALA_MARKERS occurs in text
    """
    return any(marker in text for marker in BASMALA_MARKERS)


def contains_surah_heading(text):
    """
    Check if text is a surah title line.

    :param text: Raw line text
    :return: True if one of SURAH_HEADING_MARKERS occurs in text
    """
    return any(marker in text for marker in SURAH_HEADING_MARKERS)


def reshape_arabic_text(text):
    """
    Replace Arabic letters with their contextual presentation forms.

    Glyph widths depend on the joining form, so text is reshaped before it is
    measured. Logical (reading) order is kept.

    :param text: Text potentially containing Arabic
    :return: Reshaped text, unchanged when it has no Arabic
    """
    if not contains_arabic(text):
        return text
    return _RESHAPER.reshape(text)


def process_arabic_text(text):
    """
    Process Arabic text for proper display (reshaping and bidi).

    :param text: Text potentially containing Arabic
    :return: Processed text in visual (left-to-right drawing) order
    """
    if not contains_arabic(text):
        return text

    try:
        reshaped_text = reshape_arabic_text(text)
        # Apply bidirectional algorithm for RTL display
        return get_display(reshaped_text, base_dir="R")
    except Exception as e:
        _LOGGER.warning(f"Failed to process Arabic text: {e}")
        return text

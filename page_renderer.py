"""
Renders fitted Mushaf pages onto a ReportLab canvas.

Each page gets a "Page N" header and 15 equal line slots. Lines are drawn
right to left, word by word, so the fitted word spacing does not depend on the
PDF word-spacing operator (which TrueType subsets ignore).
"""

import logging
from dataclasses import replace

from reportlab.pdfbase import pdfmetrics
from reportlab.pdfgen import canvas

from mushaf_formats import (
    PAGE_MARGIN,
    HEADER_HEIGHT,
    HEADER_FONT,
    HEADER_FONT_SIZE,
    PLACEHOLDER_TEXT,
    get_default_page_size,
    get_text_width,
    get_line_pitch,
)
from mushaf_layout.language_support import process_arabic_text
from mushaf_layout.line_classifier import AlignmentRole
from mushaf_layout.line_fitting import FitConstraints, fit_page, is_within_tolerance
from mushaf_layout.text_measurer import ReportLabMeasurer

_LOGGER = logging.getLogger(__name__)


class PageRenderer:
    """Fits and draws Mushaf pages with one font and page size."""

    def __init__(
        self,
        font_name,
        page_size=None,
        constraints=None,
        measurer=None,
        show_placeholders=False,
        show_debug_lines=False,
        executor=None,
    ):
        """
        :param font_name: Registered ReportLab font for page text
        :param page_size: Page size tuple (width, height) in points (default: mushaf_formats default)
        :param constraints: FitConstraints; its font_family is replaced by font_name
        :param measurer: TextMeasurer (default: ReportLabMeasurer)
        :param show_placeholders: Draw "[No text available]" on empty lines
        :param show_debug_lines: Draw margins and line slots
        :param executor: Optional executor to fit lines in parallel
        """
        self.font_name = font_name
        self.page_size = page_size or get_default_page_size()
        self.constraints = replace(constraints or FitConstraints(), font_family=font_name)
        self.measurer = measurer or ReportLabMeasurer()
        self.show_placeholders = show_placeholders
        self.show_debug_lines = show_debug_lines
        self.executor = executor

        self.text_width = get_text_width(self.page_size)
        self.line_pitch = get_line_pitch(self.page_size)

    def fit(self, page):
        specs = fit_page(page, self.text_width, self.measurer, self.constraints, self.executor)
        for line, spec in zip(page.lines, specs):
            if (
                line.alignment_role is AlignmentRole.JUSTIFIED
                and not line.is_empty
                and spec.font_size > self.constraints.min_font_size
                and not is_within_tolerance(spec, self.text_width)
            ):
                _LOGGER.warning(
                    f"Page {page.page_number} line {line.index} is {spec.measured_width:.1f}pt wide "
                    f"for a {self.text_width:.1f}pt target"
                )
        return specs

    def draw_page(self, c, page, specs=None):
        """
        Draw one page on the current canvas page.

        :param c: ReportLab canvas object
        :param page: Page to draw
        :param specs: RenderSpecs for the page lines (fitted when omitted)
        """
        if specs is None:
            specs = self.fit(page)

        width, height = self.page_size
        self._draw_header(c, page.page_number, width, height)

        for line, spec in zip(page.lines, specs):
            baseline = self._baseline(line.index)
            if line.is_empty:
                if self.show_placeholders:
                    c.setFont(HEADER_FONT, HEADER_FONT_SIZE)
                    c.setFillColorRGB(0.6, 0.6, 0.6)
                    c.drawCentredString(width / 2, baseline, PLACEHOLDER_TEXT)
                    c.setFillColorRGB(0, 0, 0)
                continue
            self._draw_line(c, line, spec, baseline)

        if self.show_debug_lines:
            self._draw_debug_lines(c, specs)

    def render_pages(self, pages, output_path):
        """
        Render pages into a PDF file, one Mushaf page per PDF page.

        :param pages: Iterable of Page
        :param output_path: Path of the PDF to write
        :return: Number of pages written
        """
        c = canvas.Canvas(output_path, pagesize=self.page_size)
        count = 0
        for page in pages:
            self.draw_page(c, page)
            c.showPage()
            count += 1
        c.save()
        _LOGGER.info(f"Rendered {count} pages to {output_path}")
        return count

    def _baseline(self, index):
        height = self.page_size[1]
        slot_top = height - PAGE_MARGIN - HEADER_HEIGHT - (index - 1) * self.line_pitch
        return slot_top - self.line_pitch * 0.7

    def _draw_header(self, c, page_number, width, height):
        c.setFont(HEADER_FONT, HEADER_FONT_SIZE)
        c.setFillColorRGB(0, 0, 0)
        c.drawCentredString(width / 2, height - PAGE_MARGIN - HEADER_FONT_SIZE, f"Page {page_number}")

    def _draw_line(self, c, line, spec, baseline):
        size = spec.font_size
        words = process_arabic_text(line.raw_text).split(" ")

        word_widths = [
            pdfmetrics.stringWidth(word, self.font_name, size) + spec.letter_spacing * len(word)
            for word in words
        ]
        gap = pdfmetrics.stringWidth(" ", self.font_name, size) + spec.letter_spacing + spec.word_spacing
        line_width = sum(word_widths) + gap * (len(words) - 1)

        right_edge = PAGE_MARGIN + self.text_width
        if line.alignment_role is AlignmentRole.CENTERED:
            x = PAGE_MARGIN + (self.text_width - line_width) / 2
        else:
            x = right_edge - line_width

        for word, word_width in zip(words, word_widths):
            text = c.beginText(x, baseline)
            text.setFont(self.font_name, size)
            text.setCharSpace(spec.letter_spacing)
            text.textOut(word)
            c.drawText(text)
            x += word_width + gap

    def _draw_debug_lines(self, c, specs):
        """Draw margins, line slots and the fitted size of each line."""
        width, height = self.page_size
        top = height - PAGE_MARGIN - HEADER_HEIGHT

        c.setStrokeColorRGB(1, 0, 0)
        c.setLineWidth(0.5)
        c.rect(PAGE_MARGIN, PAGE_MARGIN, self.text_width, height - 2 * PAGE_MARGIN)

        c.setStrokeColorRGB(0, 0, 1)
        c.setFont("Helvetica", 5)
        c.setFillColorRGB(1, 0, 0)
        for i, spec in enumerate(specs):
            y = top - i * self.line_pitch
            c.line(PAGE_MARGIN, y, PAGE_MARGIN + self.text_width, y)
            label = f"{spec.font_size:.2f}pt w={spec.measured_width:.1f}"
            if spec.fallback:
                label += " fallback"
            c.drawString(2, y - 6, label)

        # Reset colors
        c.setStrokeColorRGB(0, 0, 0)
        c.setFillColorRGB(0, 0, 0)

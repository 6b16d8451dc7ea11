from reportlab.lib.units import mm

from mushaf_layout.page_lines import PAGE_COUNT, LINES_PER_PAGE
from mushaf_layout.line_fitting import (
    DEFAULT_BASE_FONT_SIZE,
    DEFAULT_MIN_FONT_SIZE,
    DEFAULT_MAX_FONT_SIZE,
    DEFAULT_STEP_DOWN,
    DEFAULT_STEP_UP,
)

# Constants for standard page sizes (in mm, portrait)
paper_Standards = {
    "A3": (297, 420),
    "A4": (210, 297),
    "A5": (148, 210),
    "A6": (105, 148),
    "B5": (176, 250),
    "Medina": (148, 215),  # common printed Mushaf trim size
}

default_format = "A4"

PAGE_MARGIN = 16  # points on every side of the text block
HEADER_HEIGHT = 28  # points reserved above the text block for "Page N"
LINE_HEIGHT_FACTOR = 1.8
HEADER_FONT = "Helvetica-Bold"
HEADER_FONT_SIZE = 12
PLACEHOLDER_TEXT = "[No text available]"

DEFAULT_DOCS_DIR = "assets/docs"


def get_page_size(format_name):
    """Get the dimensions of the page format in points (width, height)."""
    if format_name in paper_Standards:
        width_mm, height_mm = paper_Standards[format_name]
        return (width_mm * mm, height_mm * mm)
    else:
        raise ValueError(f"Unsupported page format: {format_name}")


def get_default_page_size():
    """Get the default page size in points."""
    return get_page_size(default_format)


def get_text_width(page_size):
    """Width available to each line for a page size in points."""
    return page_size[0] - 2 * PAGE_MARGIN


def get_line_pitch(page_size):
    """Vertical distance between two baselines, 15 equal slots below the header."""
    available_height = page_size[1] - 2 * PAGE_MARGIN - HEADER_HEIGHT
    return available_height / LINES_PER_PAGE


def get_max_font_size(page_size):
    """Largest font size whose line height still fits one line slot."""
    return get_line_pitch(page_size) / LINE_HEIGHT_FACTOR


__all__ = [
    "PAGE_COUNT",
    "LINES_PER_PAGE",
    "DEFAULT_BASE_FONT_SIZE",
    "DEFAULT_MIN_FONT_SIZE",
    "DEFAULT_MAX_FONT_SIZE",
    "DEFAULT_STEP_DOWN",
    "DEFAULT_STEP_UP",
    "paper_Standards",
    "default_format",
    "PAGE_MARGIN",
    "HEADER_HEIGHT",
    "LINE_HEIGHT_FACTOR",
    "HEADER_FONT",
    "HEADER_FONT_SIZE",
    "PLACEHOLDER_TEXT",
    "DEFAULT_DOCS_DIR",
    "get_page_size",
    "get_default_page_size",
    "get_text_width",
    "get_line_pitch",
    "get_max_font_size",
]

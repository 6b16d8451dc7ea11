"""
Page line source: turns the raw text of a Mushaf page into its 15 line records.
"""

import logging
from dataclasses import dataclass
from typing import Tuple

from .line_classifier import AlignmentRole, classify

_LOGGER = logging.getLogger(__name__)

PAGE_COUNT = 604
LINES_PER_PAGE = 15


@dataclass(frozen=True)
class Line:
    index: int
    raw_text: str
    alignment_role: AlignmentRole

    @property
    def is_empty(self):
        return not self.raw_text


@dataclass(frozen=True)
class Page:
    page_number: int
    lines: Tuple[Line, ...]

    def __post_init__(self):
        if not 1 <= self.page_number <= PAGE_COUNT:
            raise ValueError(f"Page number must be between 1 and {PAGE_COUNT}, got {self.page_number}")
        if len(self.lines) != LINES_PER_PAGE:
            raise ValueError(f"A page has exactly {LINES_PER_PAGE} lines, got {len(self.lines)}")


def normalize(raw_page_text):
    """
    Split raw page text into exactly LINES_PER_PAGE trimmed lines.

    Blank rows are skipped, rows past the 15th non-blank one are dropped and
    short pages are padded with empty strings.

    :param raw_page_text: Page text, one Mushaf line per text row
    :return: List of LINES_PER_PAGE strings
    """
    lines = [row.strip() for row in (raw_page_text or "").splitlines()]
    lines = [row for row in lines if row]

    if len(lines) > LINES_PER_PAGE:
        _LOGGER.debug(f"Dropping {len(lines) - LINES_PER_PAGE} rows beyond line {LINES_PER_PAGE}")
        lines = lines[:LINES_PER_PAGE]

    return lines + [""] * (LINES_PER_PAGE - len(lines))


def build_page(page_number, raw_page_text):
    """
    Build an immutable Page with classified lines from raw page text.

    :param page_number: Mushaf page number (1..PAGE_COUNT)
    :param raw_page_text: Raw page text, may be empty
    :return: Page
    """
    lines = tuple(
        Line(index=index, raw_text=text, alignment_role=classify(index, text))
        for index, text in enumerate(normalize(raw_page_text), start=1)
    )
    return Page(page_number=page_number, lines=lines)


def blank_page(page_number):
    """Page with 15 empty lines, used when the page text cannot be loaded."""
    return build_page(page_number, "")

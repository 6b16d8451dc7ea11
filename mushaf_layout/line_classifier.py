"""
Line classification for Mushaf pages.
Decides whether a line is laid out as a centered heading or a justified body line.
"""

from enum import Enum

from .language_support import contains_basmala, contains_surah_heading


class AlignmentRole(Enum):
    CENTERED = "centered"
    JUSTIFIED = "justified"


def classify(index, text):
    """
    Assign the alignment role of a line from its position and content.

    The first line of a page is always centered. Any other line is centered
    only when it carries a Basmala or a surah title.

    :param index: 1-based line index within the page
    :param text: Trimmed line text (may be empty)
    :return: AlignmentRole
    """
    if index == 1:
        return AlignmentRole.CENTERED
    if contains_basmala(text):
        return AlignmentRole.CENTERED
    if contains_surah_heading(text):
        return AlignmentRole.CENTERED
    return AlignmentRole.JUSTIFIED

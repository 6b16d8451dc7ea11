"""
Mushaf page layout package.
Line classification, measurement and fitting for fixed 15-line Mushaf pages.
"""

from .language_support import contains_arabic, process_arabic_text, reshape_arabic_text
from .line_classifier import AlignmentRole, classify
from .text_measurer import MeasurementError, TextMeasurer, ReportLabMeasurer, CachingMeasurer
from .page_lines import PAGE_COUNT, LINES_PER_PAGE, Line, Page, normalize, build_page, blank_page
from .line_fitting import (
    RenderSpec,
    FitConstraints,
    fit,
    fit_line,
    fit_page,
    measurement_budget,
    is_within_tolerance,
)

__all__ = [
    # Language support
    'contains_arabic',
    'process_arabic_text',
    'reshape_arabic_text',
    # Line classification
    'AlignmentRole',
    'classify',
    # Measurement
    'MeasurementError',
    'TextMeasurer',
    'ReportLabMeasurer',
    'CachingMeasurer',
    # Page lines
    'PAGE_COUNT',
    'LINES_PER_PAGE',
    'Line',
    'Page',
    'normalize',
    'build_page',
    'blank_page',
    # Line fitting
    'RenderSpec',
    'FitConstraints',
    'fit',
    'fit_line',
    'fit_page',
    'measurement_budget',
    'is_within_tolerance',
]

"""
Line fitting for Mushaf pages.

Finds the font size, word spacing and letter spacing that make one line fill
its target width: body lines are stretched or shrunk to the full width, heading
lines are only grown until they look prominent. Every search loop is bounded
by the font size range, so fitting always terminates.
"""

import logging
import math
from dataclasses import dataclass
from typing import Optional

from .line_classifier import AlignmentRole
from .text_measurer import MeasurementError

_LOGGER = logging.getLogger(__name__)

# Constants
DEFAULT_BASE_FONT_SIZE = 20
DEFAULT_MIN_FONT_SIZE = 12
DEFAULT_MAX_FONT_SIZE = 28
DEFAULT_STEP_DOWN = 1.0
DEFAULT_STEP_UP = 0.5
DEFAULT_FONT_FAMILY = "Helvetica"

HEADING_FILL_RATIO = 0.6  # Headings stop growing once they cover this share of the width
BODY_FILL_RATIO = 0.95  # Body lines stop growing here, spacing closes the rest
LETTER_SPACING_WEIGHT = 0.3  # Share of the residual per character relative to per word
CORRECTION_SIZE_STEP = 0.25
SPACING_CORRECTION_FACTOR = 0.9
WIDTH_TOLERANCE_RATIO = 0.05


@dataclass(frozen=True)
class RenderSpec:
    font_size: float
    letter_spacing: float = 0.0
    word_spacing: float = 0.0
    measured_width: float = 0.0
    fallback: bool = False


def _check_size_range(min_font_size, max_font_size, step_down, step_up, heading_step_up):
    if min_font_size <= 0 or min_font_size > max_font_size:
        raise ValueError(
            f"Invalid font size range: min={min_font_size}, max={max_font_size}"
        )
    for name, step in (("step_down", step_down), ("step_up", step_up), ("heading_step_up", heading_step_up)):
        if step <= 0:
            raise ValueError(f"{name} must be positive, got {step}")


@dataclass(frozen=True)
class FitConstraints:
    base_font_size: float = DEFAULT_BASE_FONT_SIZE
    min_font_size: float = DEFAULT_MIN_FONT_SIZE
    max_font_size: float = DEFAULT_MAX_FONT_SIZE
    step_down: float = DEFAULT_STEP_DOWN
    step_up: float = DEFAULT_STEP_UP
    heading_step_up: Optional[float] = None
    font_family: str = DEFAULT_FONT_FAMILY

    def __post_init__(self):
        if self.heading_step_up is None:
            # Headings grow in coarser steps than body lines
            object.__setattr__(self, "heading_step_up", 2 * self.step_up)
        _check_size_range(
            self.min_font_size,
            self.max_font_size,
            self.step_down,
            self.step_up,
            self.heading_step_up,
        )


def measurement_budget(constraints):
    """
    Upper bound on measurement calls made by a single fit.

    One initial measurement, at most one per font size step across the whole
    range (plus one for float rounding at the bound), one with spacing applied
    and one corrective measurement.

    :param constraints: FitConstraints
    :return: Maximum number of measure() calls
    """
    span = constraints.max_font_size - constraints.min_font_size
    smallest_step = min(constraints.step_down, constraints.step_up, constraints.heading_step_up)
    return 1 + math.ceil(span / smallest_step) + 1 + 2


def is_within_tolerance(spec, target_width, tolerance_ratio=WIDTH_TOLERANCE_RATIO):
    """Check whether a fitted line lands close enough to its target width."""
    return abs(spec.measured_width - target_width) <= tolerance_ratio * target_width


def _clamp(value, lower, upper):
    return max(lower, min(value, upper))


def fit(
    line,
    target_width,
    base_font_size,
    min_font_size,
    max_font_size,
    step_down,
    step_up,
    measurer,
    font_family=DEFAULT_FONT_FAMILY,
    heading_step_up=None,
):
    """
    Compute font size and spacing of a line for a target width.

    :param line: Line to fit
    :param target_width: Width the line should occupy, in points
    :param base_font_size: Starting font size
    :param min_font_size: Smallest font size the search may reach
    :param max_font_size: Largest font size the search may reach
    :param step_down: Font size decrement while shrinking a body line
    :param step_up: Font size increment while growing a body line
    :param measurer: TextMeasurer used as the width oracle
    :param font_family: Font name passed to the measurer
    :param heading_step_up: Font size increment for centered lines (default: 2 * step_up)
    :return: RenderSpec
    """
    if heading_step_up is None:
        heading_step_up = 2 * step_up
    _check_size_range(min_font_size, max_font_size, step_down, step_up, heading_step_up)
    if target_width <= 0:
        raise ValueError(f"Target width must be positive, got {target_width}")

    base_size = _clamp(base_font_size, min_font_size, max_font_size)
    if line.is_empty:
        return RenderSpec(font_size=base_size)

    def measure(size, letter_spacing=0.0, word_spacing=0.0):
        width = measurer.measure(line.raw_text, font_family, size, letter_spacing, word_spacing)
        _LOGGER.debug(
            f"  Line {line.index} at {size}pt (letter={letter_spacing:.3f}, word={word_spacing:.3f}): "
            f"width={width:.1f} target={target_width:.1f}"
        )
        return width

    try:
        if line.alignment_role is AlignmentRole.CENTERED:
            return _fit_centered(measure, target_width, base_size, max_font_size, heading_step_up)
        return _fit_justified(
            measure,
            line.raw_text,
            target_width,
            base_size,
            min_font_size,
            max_font_size,
            step_down,
            step_up,
        )
    except MeasurementError as e:
        _LOGGER.warning(f"Could not measure line {line.index}, using base style: {e}")
        return RenderSpec(font_size=base_size, fallback=True)


def _fit_centered(measure, target_width, size, max_font_size, step):
    width = measure(size)
    while width < HEADING_FILL_RATIO * target_width and size < max_font_size:
        size = min(size + step, max_font_size)
        width = measure(size)
    return RenderSpec(font_size=size, measured_width=width)


def _fit_justified(measure, text, target_width, size, min_font_size, max_font_size, step_down, step_up):
    width = measure(size)

    if width > target_width:
        while width > target_width and size > min_font_size:
            size = max(size - step_down, min_font_size)
            width = measure(size)
    elif width < target_width:
        while width < BODY_FILL_RATIO * target_width and size < max_font_size:
            grown = min(size + step_up, max_font_size)
            grown_width = measure(grown)
            if grown_width > target_width:
                # Step overshoots, keep the last size that fits and space it out
                _LOGGER.debug(f"  {grown}pt would overflow, staying at {size}pt")
                break
            size, width = grown, grown_width

    residual = target_width - width
    if residual <= 0:
        if residual < 0:
            _LOGGER.debug(f"  Line overflows by {-residual:.1f} at {size}pt, accepting overflow")
        return RenderSpec(font_size=size, measured_width=width)

    word_count = max(len(text.split()), 1)
    char_count = max(len(text), 1)
    word_spacing = residual / word_count
    letter_spacing = residual / char_count * LETTER_SPACING_WEIGHT
    width = measure(size, letter_spacing, word_spacing)

    if width > target_width:
        # Single corrective pass, the remaining error is accepted
        size = max(size - CORRECTION_SIZE_STEP, min_font_size)
        word_spacing *= SPACING_CORRECTION_FACTOR
        letter_spacing *= SPACING_CORRECTION_FACTOR
        width = measure(size, letter_spacing, word_spacing)

    return RenderSpec(
        font_size=size,
        letter_spacing=letter_spacing,
        word_spacing=word_spacing,
        measured_width=width,
    )


def fit_line(line, target_width, constraints, measurer):
    """Fit a line using a FitConstraints bundle."""
    return fit(
        line,
        target_width,
        constraints.base_font_size,
        constraints.min_font_size,
        constraints.max_font_size,
        constraints.step_down,
        constraints.step_up,
        measurer,
        font_family=constraints.font_family,
        heading_step_up=constraints.heading_step_up,
    )


def fit_page(page, target_width, measurer, constraints=None, executor=None):
    """
    Fit every line of a page.

    Lines are independent of each other, so an executor (e.g. a
    concurrent.futures.ThreadPoolExecutor) can fit them in parallel.

    :param page: Page to fit
    :param target_width: Width available for each line
    :param measurer: TextMeasurer
    :param constraints: FitConstraints (default: FitConstraints())
    :param executor: Optional executor with a map() method
    :return: List of RenderSpec, one per line
    """
    if constraints is None:
        constraints = FitConstraints()

    def fit_one(line):
        return fit_line(line, target_width, constraints, measurer)

    if executor is None:
        specs = [fit_one(line) for line in page.lines]
    else:
        specs = list(executor.map(fit_one, page.lines))

    fallbacks = sum(1 for spec in specs if spec.fallback)
    _LOGGER.info(
        f"Fitted page {page.page_number}: {len(specs)} lines, width={target_width:.1f}pt, fallbacks={fallbacks}"
    )
    return specs

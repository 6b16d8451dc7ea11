import dataclasses
import itertools
from concurrent.futures import ThreadPoolExecutor

import pytest

from mushaf_layout.line_classifier import AlignmentRole
from mushaf_layout.line_fitting import (
    FitConstraints,
    RenderSpec,
    fit,
    fit_line,
    fit_page,
    is_within_tolerance,
    measurement_budget,
)
from mushaf_layout.page_lines import Line, build_page

CONSTRAINTS = FitConstraints(
    base_font_size=20,
    min_font_size=12,
    max_font_size=28,
    step_down=1.0,
    step_up=0.5,
)

TEN_WORDS = " ".join(["abcd"] * 10)  # 49 characters, 490pt wide at 20pt
THREE_WORDS = "abcd abcd abcd"  # 14 characters


def justified(text, index=2):
    return Line(index=index, raw_text=text, alignment_role=AlignmentRole.JUSTIFIED)


def centered(text, index=1):
    return Line(index=index, raw_text=text, alignment_role=AlignmentRole.CENTERED)


def test_empty_line_uses_base_size_without_measuring(measurer):
    spec = fit_line(justified(""), 300, CONSTRAINTS, measurer)

    assert spec == RenderSpec(font_size=20, letter_spacing=0.0, word_spacing=0.0, measured_width=0.0)
    assert measurer.calls == 0


def test_empty_line_base_size_is_clamped(measurer):
    spec = fit(justified(""), 300, 40, 12, 28, 1.0, 0.5, measurer)

    assert spec.font_size == 28


def test_centered_line_grows_until_max_size(measurer):
    spec = fit_line(centered("abcd"), 200, CONSTRAINTS, measurer)

    assert spec.font_size == 28
    assert spec.letter_spacing == 0
    assert spec.word_spacing == 0
    assert spec.measured_width == pytest.approx(56)
    # Heading step defaults to twice the body growth step
    assert measurer.calls == 1 + 8


def test_centered_line_stops_at_heading_fill_ratio(measurer):
    spec = fit_line(centered("abcdefghij"), 200, CONSTRAINTS, measurer)

    # 100pt at 20pt, grows 5pt per step until it covers 60% of 200pt
    assert spec.font_size == 24
    assert spec.measured_width == pytest.approx(120)
    assert measurer.calls == 5


def test_wide_centered_line_keeps_base_size(measurer):
    spec = fit_line(centered("abcdefghij"), 100, CONSTRAINTS, measurer)

    assert spec == RenderSpec(font_size=20, measured_width=100)
    assert measurer.calls == 1


def test_too_wide_line_shrinks_then_spaces(measurer):
    target = 490 / 1.2
    spec = fit_line(justified(TEN_WORDS), target, CONSTRAINTS, measurer)

    # Fits at 16pt (392pt), spacing overshoots, one corrective pass follows
    assert spec.font_size == 15.75
    assert spec.font_size < CONSTRAINTS.base_font_size
    assert spec.word_spacing == pytest.approx((target - 392) / 10 * 0.9)
    assert spec.letter_spacing == pytest.approx((target - 392) / 49 * 0.3 * 0.9)
    assert spec.measured_width <= target
    assert is_within_tolerance(spec, target)


def test_narrow_line_at_max_size_gets_positive_spacing(measurer):
    spec = fit_line(justified(THREE_WORDS), 220, CONSTRAINTS, measurer)

    assert spec.font_size == 28
    assert spec.word_spacing == pytest.approx(8)
    assert spec.letter_spacing == pytest.approx(24 / 14 * 0.3)
    assert spec.word_spacing > 0
    assert spec.letter_spacing > 0
    assert spec.measured_width == pytest.approx(219.2)
    assert is_within_tolerance(spec, 220)


def test_unfittable_line_overflows_at_min_size(measurer):
    spec = fit_line(justified("a" * 100), 300, CONSTRAINTS, measurer)

    assert spec.font_size == CONSTRAINTS.min_font_size
    assert spec.letter_spacing == 0
    assert spec.word_spacing == 0
    assert spec.measured_width == pytest.approx(600)


def test_exact_fit_needs_no_spacing(measurer):
    spec = fit_line(justified("a" * 20), 200, CONSTRAINTS, measurer)

    assert spec == RenderSpec(font_size=20, measured_width=200)
    assert measurer.calls == 1


def test_line_close_to_target_is_spaced_without_resizing(measurer):
    # 200pt at 20pt is above 95% of 205pt, only spacing closes the gap
    spec = fit_line(justified("abcdefghi abcdefghij"), 205, CONSTRAINTS, measurer)

    assert spec.font_size == 20
    assert spec.word_spacing == pytest.approx(2.5)
    assert spec.letter_spacing == pytest.approx(0.075)
    assert spec.measured_width == pytest.approx(204)
    assert measurer.calls == 2


@pytest.mark.parametrize("fail_after", [0, 1, 3])
def test_measurement_failure_falls_back_to_base_style(failing_measurer, fail_after):
    spec = fit_line(justified(TEN_WORDS), 300, CONSTRAINTS, failing_measurer(fail_after))

    assert spec == RenderSpec(font_size=20, fallback=True)


def test_measurement_failure_on_centered_line(failing_measurer):
    spec = fit_line(centered("abcd"), 300, CONSTRAINTS, failing_measurer(2))

    assert spec.fallback
    assert spec.font_size == 20
    assert spec.letter_spacing == spec.word_spacing == 0


def assert_fills_target(spec, target, constraints):
    if spec.measured_width > target:
        # Overflow only when shrinking bottomed out or the single correction overshot
        assert spec.font_size == constraints.min_font_size or spec.letter_spacing > 0
    if is_within_tolerance(spec, target) or spec.font_size == constraints.min_font_size:
        return
    # Short lines grown to the largest size cannot be spaced out all the way
    assert spec.font_size == constraints.max_font_size
    assert spec.measured_width < target


TEXTS = ["a", "abcd", THREE_WORDS, TEN_WORDS, " ".join(["xy"] * 40), "a" * 120]
TARGETS = [50, 120, 220, 408, 563, 900]


@pytest.mark.parametrize(
    "text, target, role",
    list(itertools.product(TEXTS, TARGETS, [AlignmentRole.CENTERED, AlignmentRole.JUSTIFIED])),
)
def test_fit_properties(measurer, text, target, role):
    line = Line(index=2, raw_text=text, alignment_role=role)
    spec = fit_line(line, target, CONSTRAINTS, measurer)

    assert CONSTRAINTS.min_font_size <= spec.font_size <= CONSTRAINTS.max_font_size
    assert spec.letter_spacing >= 0
    assert spec.word_spacing >= 0
    assert measurer.calls <= measurement_budget(CONSTRAINTS)
    if role is AlignmentRole.CENTERED:
        assert spec.letter_spacing == 0
        assert spec.word_spacing == 0
    else:
        assert_fills_target(spec, target, CONSTRAINTS)


def test_fit_is_deterministic(measurer):
    line = justified(TEN_WORDS)
    first = fit_line(line, 408, CONSTRAINTS, measurer)
    second = fit_line(line, 408, CONSTRAINTS, measurer)

    assert first == second


def test_fine_steps_stay_within_budget(measurer):
    constraints = FitConstraints(base_font_size=20, min_font_size=8, max_font_size=40, step_down=0.1, step_up=0.1)
    fit_line(justified("a" * 200), 100, constraints, measurer)

    assert measurer.calls <= measurement_budget(constraints)


def test_lines_are_immutable():
    line = justified("abcd")
    with pytest.raises(dataclasses.FrozenInstanceError):
        line.raw_text = "changed"


def test_heading_step_defaults_to_twice_step_up():
    assert FitConstraints(step_up=0.5).heading_step_up == 1.0
    assert FitConstraints(step_up=0.5, heading_step_up=2.0).heading_step_up == 2.0


@pytest.mark.parametrize(
    "kwargs",
    [
        {"min_font_size": 30, "max_font_size": 20},
        {"min_font_size": 0},
        {"step_down": 0},
        {"step_up": -1},
        {"heading_step_up": 0},
    ],
)
def test_invalid_constraints_are_rejected(kwargs):
    with pytest.raises(ValueError):
        FitConstraints(**kwargs)


def test_non_positive_target_width_is_rejected(measurer):
    with pytest.raises(ValueError):
        fit_line(justified("abcd"), 0, CONSTRAINTS, measurer)


def test_fit_page_in_parallel_matches_sequential(measurer, latin_page_text):
    page = build_page(3, latin_page_text)

    sequential = fit_page(page, 400, measurer, CONSTRAINTS)
    with ThreadPoolExecutor(max_workers=4) as executor:
        parallel = fit_page(page, 400, measurer, CONSTRAINTS, executor=executor)

    assert len(sequential) == 15
    assert parallel == sequential


def test_two_word_line_at_max_size_stays_short(measurer):
    spec = fit_line(justified("abcd abcd"), 300, CONSTRAINTS, measurer)

    assert spec.font_size == CONSTRAINTS.max_font_size
    assert spec.word_spacing == pytest.approx(87)
    assert spec.letter_spacing == pytest.approx(5.8)
    assert spec.measured_width == pytest.approx(265.2)
    assert not is_within_tolerance(spec, 300)
    assert_fills_target(spec, 300, CONSTRAINTS)


def test_growth_step_past_target_is_not_taken(measurer):
    constraints = FitConstraints(base_font_size=12, min_font_size=12, max_font_size=28, step_down=1, step_up=4)

    # 180pt at 12pt, 240pt at 16pt, the line stays at 12pt and is spaced out
    spec = fit_line(justified("a" * 30), 190, constraints, measurer)

    assert spec.font_size == 12
    assert spec.word_spacing == pytest.approx(10)
    assert spec.letter_spacing == pytest.approx(0.1)
    assert spec.measured_width == pytest.approx(183)
    assert is_within_tolerance(spec, 190)
    assert measurer.calls == 3


@pytest.mark.parametrize("step_up", [0.5, 2, 4, 8])
def test_growth_never_overflows_above_min_size(measurer, step_up):
    constraints = FitConstraints(base_font_size=12, min_font_size=12, max_font_size=28, step_down=1, step_up=step_up)

    for text in [THREE_WORDS, TEN_WORDS, "a" * 30]:
        spec = fit_line(justified(text), 190, constraints, measurer)
        assert_fills_target(spec, 190, constraints)

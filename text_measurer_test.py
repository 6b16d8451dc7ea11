from concurrent.futures import ThreadPoolExecutor

import pytest
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.ttfonts import TTFont

from mushaf_layout.line_classifier import AlignmentRole
from mushaf_layout.line_fitting import FitConstraints, fit_line
from mushaf_layout.page_lines import Line
from mushaf_layout.text_measurer import CachingMeasurer, MeasurementError, ReportLabMeasurer

ARABIC_LINE = "ذَٰلِكَ ٱلْكِتَٰبُ لَا رَيْبَ فِيهِ"


@pytest.fixture(scope="module")
def vera():
    # Vera ships with ReportLab and has no Arabic glyphs
    pdfmetrics.registerFont(TTFont("VeraTest", "Vera.ttf"))
    return "VeraTest"


def test_measures_like_reportlab():
    measurer = ReportLabMeasurer()

    assert measurer.measure("Hello world", "Helvetica", 12) == pytest.approx(
        pdfmetrics.stringWidth("Hello world", "Helvetica", 12)
    )


def test_spacing_is_added_per_character_and_per_space():
    measurer = ReportLabMeasurer()
    plain = measurer.measure("one two three", "Helvetica", 10)

    assert measurer.measure("one two three", "Helvetica", 10, letter_spacing=0.5) == pytest.approx(plain + 13 * 0.5)
    assert measurer.measure("one two three", "Helvetica", 10, word_spacing=2.0) == pytest.approx(plain + 2 * 2.0)


def test_width_grows_with_font_size():
    measurer = ReportLabMeasurer()

    assert measurer.measure("abc", "Helvetica", 20) == pytest.approx(2 * measurer.measure("abc", "Helvetica", 10))


def test_unknown_font_is_a_measurement_error():
    with pytest.raises(MeasurementError):
        ReportLabMeasurer().measure("abc", "NoSuchFont-Regular", 12)


def test_missing_glyphs_are_a_measurement_error(vera):
    measurer = ReportLabMeasurer()

    assert measurer.measure("Hello", vera, 12) > 0
    with pytest.raises(MeasurementError):
        measurer.measure(ARABIC_LINE, vera, 12)


def test_glyph_check_can_be_disabled(vera):
    assert ReportLabMeasurer(require_glyphs=False).measure(ARABIC_LINE, vera, 12) > 0


def test_fit_falls_back_when_glyphs_are_missing(vera):
    line = Line(index=3, raw_text=ARABIC_LINE, alignment_role=AlignmentRole.JUSTIFIED)
    constraints = FitConstraints(font_family=vera)

    spec = fit_line(line, 400, constraints, ReportLabMeasurer())

    assert spec.fallback
    assert spec.font_size == constraints.base_font_size
    assert spec.letter_spacing == spec.word_spacing == 0


class CountingMeasurer:
    def __init__(self):
        self.calls = 0

    def measure(self, text, font_family, font_size, letter_spacing=0.0, word_spacing=0.0):
        self.calls += 1
        if font_family == "broken":
            raise MeasurementError("broken font")
        return len(text) * font_size


def test_caching_measurer_memoizes_results():
    backend = CountingMeasurer()
    measurer = CachingMeasurer(backend)

    assert measurer.measure("abc", "f", 10) == 30
    assert measurer.measure("abc", "f", 10) == 30
    assert measurer.measure("abc", "f", 11) == 33

    assert backend.calls == 2
    assert (measurer.hits, measurer.misses) == (1, 2)

    measurer.clear()
    measurer.measure("abc", "f", 10)
    assert backend.calls == 3


def test_caching_measurer_does_not_cache_failures():
    backend = CountingMeasurer()
    measurer = CachingMeasurer(backend)

    for _ in range(2):
        with pytest.raises(MeasurementError):
            measurer.measure("abc", "broken", 10)
    assert backend.calls == 2


def test_arabic_in_builtin_font_is_a_measurement_error():
    measurer = ReportLabMeasurer()

    assert measurer.measure("Café", "Helvetica", 12) > 0
    with pytest.raises(MeasurementError):
        measurer.measure(ARABIC_LINE, "Helvetica", 12)


def test_fit_in_builtin_font_falls_back_for_arabic():
    line = Line(index=2, raw_text=ARABIC_LINE, alignment_role=AlignmentRole.JUSTIFIED)
    constraints = FitConstraints(font_family="Helvetica")

    spec = fit_line(line, 400, constraints, ReportLabMeasurer())

    assert spec.fallback
    assert spec.font_size == constraints.base_font_size
    assert spec.measured_width == 0


def test_caching_measurer_counts_every_call_across_threads():
    backend = CountingMeasurer()
    measurer = CachingMeasurer(backend)
    sizes = [10 + i % 8 for i in range(400)]

    with ThreadPoolExecutor(max_workers=8) as executor:
        widths = list(executor.map(lambda size: measurer.measure("abc", "f", size), sizes))

    assert widths == [3 * size for size in sizes]
    assert measurer.hits + measurer.misses == len(sizes)
    assert measurer.misses >= len(set(sizes))

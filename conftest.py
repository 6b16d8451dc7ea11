import pytest

from mushaf_layout.text_measurer import MeasurementError, TextMeasurer


class LinearMeasurer(TextMeasurer):
    """Every character is char_em * font_size wide, counts its calls."""

    def __init__(self, char_em=0.5):
        self.char_em = char_em
        self.calls = 0

    def measure(self, text, font_family, font_size, letter_spacing=0.0, word_spacing=0.0):
        self.calls += 1
        return len(text) * (self.char_em * font_size + letter_spacing) + text.count(" ") * word_spacing


class FailingMeasurer(LinearMeasurer):
    """Works for fail_after calls, then raises MeasurementError."""

    def __init__(self, fail_after=0):
        super().__init__()
        self.fail_after = fail_after

    def measure(self, text, font_family, font_size, letter_spacing=0.0, word_spacing=0.0):
        if self.calls >= self.fail_after:
            self.calls += 1
            raise MeasurementError("no glyph data")
        return super().measure(text, font_family, font_size, letter_spacing, word_spacing)


@pytest.fixture
def measurer():
    return LinearMeasurer()


@pytest.fixture
def failing_measurer():
    return FailingMeasurer


@pytest.fixture
def latin_page_text():
    rows = ["Opening title"]
    rows += [" ".join(["lorem ipsum dolor sit amet"] * 3)] * 14
    return "\n".join(rows)

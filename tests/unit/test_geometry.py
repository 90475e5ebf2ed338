"""Unit tests for coordinate scaling."""

import math

import pytest

from src.pdf.geometry import (
    BoundingBox,
    DrawPosition,
    Extent,
    FormField,
    scale_factors,
    scale_field,
    to_number,
)

SOURCE = Extent(1000, 1400)


class TestScaleField:
    """Tests for mapping boxes from pixel space to page space."""

    def test_same_extent_scenario(self):
        """Box on a 1000x1400 image lands at the expected page position."""
        position = scale_field(BoundingBox(100, 200, 300, 40), SOURCE, SOURCE)

        assert position.x == pytest.approx(102)
        assert position.y == pytest.approx(1188)
        assert position.max_width == pytest.approx(296)
        assert position.is_valid

    def test_full_extent_box(self):
        """A box covering the whole source starts at the padding and inset."""
        position = scale_field(BoundingBox(0, 0, 1000, 1400), SOURCE, SOURCE)

        assert position.x == pytest.approx(2)
        assert SOURCE.height - position.y == pytest.approx(12)
        assert position.max_width == pytest.approx(996)

    def test_doubling_page_doubles_scaled_offsets(self):
        """Scaled parts of x, y and width double when the page doubles."""
        bbox = BoundingBox(120, 340, 250, 30)
        page = Extent(1000, 1400)
        double = Extent(2000, 2800)

        single = scale_field(bbox, SOURCE, page)
        doubled = scale_field(bbox, SOURCE, double)

        assert doubled.x - 2 == pytest.approx(2 * (single.x - 2))
        assert (double.height - doubled.y) - 12 == pytest.approx(2 * ((page.height - single.y) - 12))
        assert doubled.max_width + 4 == pytest.approx(2 * (single.max_width + 4))

    def test_pdf_page_smaller_than_raster(self):
        """Raster boxes shrink onto a letter-size page."""
        page = Extent(612, 792)
        source = Extent(1224, 1584)

        position = scale_field(BoundingBox(200, 400, 600, 50), source, page)

        assert position.x == pytest.approx(102)
        assert position.y == pytest.approx(792 - 200 - 12)
        assert position.max_width == pytest.approx(296)

    def test_explicit_padding_and_inset(self):
        position = scale_field(BoundingBox(10, 10, 100, 20), SOURCE, SOURCE, padding=0, text_inset=0)

        assert position == DrawPosition(x=10, y=1390, max_width=100)

    def test_zero_source_width_is_invalid(self):
        """A zero width makes x infinite, so the position is unusable."""
        position = scale_field(BoundingBox(100, 200, 300, 40), Extent(0, 1400), SOURCE)

        assert math.isinf(position.x)
        assert not position.is_valid

    def test_zero_coordinate_with_zero_width_is_nan(self):
        position = scale_field(BoundingBox(0, 200, 300, 40), Extent(0, 1400), SOURCE)

        assert math.isnan(position.x)
        assert not position.is_valid

    def test_missing_source_extent_is_invalid(self):
        position = scale_field(BoundingBox(100, 200, 300, 40), Extent(math.nan, math.nan), SOURCE)

        assert not position.is_valid

    def test_non_numeric_coordinate_is_invalid(self):
        position = scale_field(BoundingBox(math.nan, 200, 300, 40), SOURCE, SOURCE)

        assert not position.is_valid

    def test_bad_width_keeps_position_valid(self):
        """Only x and y decide validity; a NaN width still places the text."""
        position = scale_field(BoundingBox(100, 200, math.nan, 40), SOURCE, SOURCE)

        assert position.is_valid
        assert math.isnan(position.max_width)


class TestScaleFactors:
    """Tests for IEEE-style scale factor division."""

    def test_regular_division(self):
        assert scale_factors(Extent(500, 700), Extent(1000, 1400)) == (2.0, 2.0)

    def test_zero_denominator(self):
        scale_x, scale_y = scale_factors(Extent(0, 0), Extent(1000, 0))

        assert scale_x == math.inf
        assert math.isnan(scale_y)


class TestToNumber:
    """Tests for coercing upstream coordinates."""

    @pytest.mark.parametrize(
        "value, expected",
        [(12, 12.0), (3.5, 3.5), ("42", 42.0), (" 7.25 ", 7.25)],
    )
    def test_numeric_values(self, value, expected):
        assert to_number(value) == expected

    @pytest.mark.parametrize("value", ["abc", "", None, True, [1], {"x": 1}])
    def test_non_numeric_values_become_nan(self, value):
        assert math.isnan(to_number(value))

    def test_integers_beyond_float_range_become_infinite(self):
        assert to_number(10**400) == math.inf
        assert to_number(-(10**400)) == -math.inf

    def test_huge_coordinate_gives_invalid_position(self):
        bbox = BoundingBox(to_number(10**400), 200, 300, 40)

        assert not scale_field(bbox, SOURCE, SOURCE).is_valid


class TestFormField:
    """Tests for the field display text."""

    def test_value_preferred_over_label(self):
        field = FormField("name", "Name", BoundingBox(0, 0, 10, 10), "Rahul")
        assert field.display_text == "Rahul"

    def test_label_used_when_value_empty(self):
        field = FormField("name", "Name", BoundingBox(0, 0, 10, 10), "")
        assert field.display_text == "Name"

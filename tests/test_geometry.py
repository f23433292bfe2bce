"""
Unit tests for rotation geometry and the rectangle value types.
"""

import pytest

from photosheet.errors import ValidationError
from photosheet.geometry import BoundingBox, PixelCrop, SlotRect, bounding_box, normalize_angle


class TestBoundingBox:
    """Test the rotated bounding box computation."""

    @pytest.mark.parametrize('width,height', [(1, 1), (413, 531), (1000, 1200), (3, 7)])
    def test_zero_rotation_is_identity(self, width, height):
        assert bounding_box(width, height, 0) == (width, height)

    @pytest.mark.parametrize('width,height', [(413, 531), (1000, 1200)])
    def test_full_turn_matches_zero(self, width, height):
        assert bounding_box(width, height, 360) == bounding_box(width, height, 0)
        assert bounding_box(width, height, -720) == bounding_box(width, height, 0)

    def test_quarter_turn_swaps_dimensions(self):
        box = bounding_box(1000, 1200, 90)

        assert box.width == pytest.approx(1200)
        assert box.height == pytest.approx(1000)
        assert box.pixel_size() == (1200, 1000)

    def test_periodic_in_360(self):
        for angle in (15, 45, 133.5, 271):
            first = bounding_box(400, 300, angle)
            second = bounding_box(400, 300, angle + 360)
            assert first.width == pytest.approx(second.width)
            assert first.height == pytest.approx(second.height)

    def test_forty_five_degrees(self):
        box = bounding_box(100, 100, 45)

        # Square diagonal
        assert box.width == pytest.approx(141.421356, rel=1e-6)
        assert box.height == pytest.approx(141.421356, rel=1e-6)

    def test_negative_angle_same_box(self):
        clockwise = bounding_box(640, 480, 30)
        counter = bounding_box(640, 480, -30)

        assert clockwise.width == pytest.approx(counter.width)
        assert clockwise.height == pytest.approx(counter.height)

    def test_pixel_size_rounds(self):
        assert BoundingBox(10.4, 20.6).pixel_size() == (10, 21)


class TestNormalizeAngle:

    @pytest.mark.parametrize('angle,expected', [(0, 0), (360, 0), (450, 90), (-90, 270), (12.5, 12.5)])
    def test_normalize(self, angle, expected):
        assert normalize_angle(angle) == pytest.approx(expected)


class TestPixelCrop:
    """Test the crop rectangle value type."""

    def test_edges(self):
        crop = PixelCrop(100, 100, 400, 600)

        assert crop.right == 500
        assert crop.bottom == 700
        assert crop.as_box() == (100, 100, 500, 700)

    def test_from_mapping_rounds_floats(self):
        crop = PixelCrop.from_mapping({'x': 10.4, 'y': '20.6', 'width': 300, 'height': 400.0})

        assert crop == PixelCrop(10, 21, 300, 400)

    def test_from_mapping_missing_field(self):
        with pytest.raises(ValidationError) as exc_info:
            PixelCrop.from_mapping({'x': 0, 'y': 0, 'width': 10})

        assert 'height' in str(exc_info.value)

    def test_from_mapping_non_numeric(self):
        with pytest.raises(ValidationError):
            PixelCrop.from_mapping({'x': 'left', 'y': 0, 'width': 10, 'height': 10})

    @pytest.mark.parametrize('value', ['inf', '-inf', 'nan', '1e400', float('inf')])
    def test_from_mapping_non_finite(self, value):
        with pytest.raises(ValidationError):
            PixelCrop.from_mapping({'x': value, 'y': 0, 'width': 10, 'height': 10})

    def test_from_mapping_huge_integer(self):
        with pytest.raises(ValidationError):
            PixelCrop.from_mapping({'x': 0, 'y': 0, 'width': 10 ** 400, 'height': 10})


class TestSlotRect:

    def test_derived_edges(self):
        slot = SlotRect(index=0, row=0, column=0, x=29, y=54, width=413, height=531)

        assert slot.right == 442
        assert slot.bottom == 585
        assert slot.center_x == 235
        assert slot.center_y == 319

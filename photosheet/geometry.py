"""
Rotation geometry for the photo sheet engine.

This module handles:
- Bounding boxes of rectangles rotated about their centre
- Angle normalization
- The rectangle value types shared by the cropper and the sheet layout
"""

import math
from dataclasses import dataclass
from typing import Any, Mapping, NamedTuple, Tuple

from photosheet.errors import ValidationError


class BoundingBox(NamedTuple):
    """Axis-aligned box containing a rotated rectangle (float pixels)."""
    width: float
    height: float

    def pixel_size(self) -> Tuple[int, int]:
        """Integer surface size for this box."""
        return (int(round(self.width)), int(round(self.height)))


def finite_number(value: Any, name: str) -> float:
    """Parse `value` as a float, rejecting NaN and infinities."""
    number = float(value)
    if not math.isfinite(number):
        raise ValidationError(
            f"{name} must be a finite number, got {value!r}",
            details={'field': name, 'value': str(value)}
        )
    return number


def normalize_angle(angle: float) -> float:
    """Map any angle in degrees into [0, 360)."""
    return float(angle) % 360.0


def bounding_box(width: float, height: float, angle: float) -> BoundingBox:
    """
    Smallest axis-aligned box containing a width x height rectangle
    rotated by `angle` degrees about its centre.

    w' = |cos t| * w + |sin t| * h
    h' = |sin t| * w + |cos t| * h
    """
    if angle % 360 == 0:
        return BoundingBox(float(width), float(height))

    radians = math.radians(angle)
    cos_a = abs(math.cos(radians))
    sin_a = abs(math.sin(radians))

    return BoundingBox(
        cos_a * width + sin_a * height,
        sin_a * width + cos_a * height,
    )


@dataclass(frozen=True)
class PixelCrop:
    """Crop rectangle in the pixel space of the rotated bounding box."""
    x: int
    y: int
    width: int
    height: int

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> 'PixelCrop':
        """Build a crop from a mapping with x, y, width and height keys."""
        try:
            values = [finite_number(data[key], key) for key in ('x', 'y', 'width', 'height')]
            values = [int(round(value)) for value in values]
        except KeyError as e:
            raise ValidationError(
                f"Crop rectangle is missing field {e.args[0]}",
                details={'received': sorted(data.keys())},
                suggestions=["Send x, y, width and height in pixels"]
            )
        except (TypeError, ValueError, OverflowError) as e:
            raise ValidationError(f"Crop rectangle fields must be numbers: {e}")
        return cls(*values)

    @property
    def right(self) -> int:
        return self.x + self.width

    @property
    def bottom(self) -> int:
        return self.y + self.height

    def as_box(self) -> Tuple[int, int, int, int]:
        """(left, top, right, bottom) box as used by Pillow."""
        return (self.x, self.y, self.right, self.bottom)


@dataclass(frozen=True)
class SlotRect:
    """Position and size of one slot on a print sheet."""
    index: int
    row: int
    column: int
    x: int
    y: int
    width: int
    height: int

    @property
    def center_x(self) -> int:
        return self.x + self.width // 2

    @property
    def center_y(self) -> int:
        return self.y + self.height // 2

    @property
    def right(self) -> int:
        return self.x + self.width

    @property
    def bottom(self) -> int:
        return self.y + self.height

    def as_box(self) -> Tuple[int, int, int, int]:
        return (self.x, self.y, self.right, self.bottom)

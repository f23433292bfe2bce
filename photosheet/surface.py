"""
Raster surfaces for the photo sheet engine.

This module handles:
- Allocating blank or filled pixel buffers
- Drawing images rotated about the surface centre or into slot rectangles
- Reading back and writing sub-rectangles of pixels
- Stroking cut-guide outlines

RasterSurface is the capability interface used by the cropper and the sheet
composer; PillowSurface is the Pillow-backed implementation. Nothing else in
the package touches pixels directly.
"""

import math
from abc import ABC, abstractmethod
from typing import Optional, Tuple

from PIL import Image, ImageColor, ImageDraw
from loguru import logger

from photosheet.errors import SurfaceAllocationError, ValidationError
from photosheet.geometry import SlotRect, normalize_angle

TRANSPARENT = (0, 0, 0, 0)

# Clockwise turns as lossless transposes
QUARTER_TURNS = {
    90.0: Image.Transpose.ROTATE_270,
    180.0: Image.Transpose.ROTATE_180,
    270.0: Image.Transpose.ROTATE_90,
}


def parse_color(color: str) -> Tuple[int, int, int, int]:
    """Parse a CSS-style color string into an RGBA tuple."""
    try:
        return ImageColor.getcolor(color, 'RGBA')
    except (ValueError, AttributeError) as e:
        raise ValidationError(
            f"Invalid color: {color!r}",
            details={'color': color, 'reason': str(e)},
            suggestions=["Use a hex color such as #ffffff or a color name such as white"]
        )


class RasterSurface(ABC):
    """Addressable 2-D pixel buffer."""

    @property
    @abstractmethod
    def size(self) -> Tuple[int, int]:
        ...

    @property
    def width(self) -> int:
        return self.size[0]

    @property
    def height(self) -> int:
        return self.size[1]

    @abstractmethod
    def fill(self, color: str) -> None:
        """Fill the whole surface with a solid color."""

    @abstractmethod
    def draw_rotated(self, image: Image.Image, angle: float) -> None:
        """Draw `image` rotated clockwise by `angle` degrees, centred on the surface."""

    @abstractmethod
    def draw_image(self, image: Image.Image, rect: SlotRect, quarter_turn: bool = False) -> None:
        """Scale `image` into `rect`, optionally turned 90 degrees clockwise."""

    @abstractmethod
    def read_pixels(self, x: int, y: int, width: int, height: int) -> Image.Image:
        """Copy out a sub-rectangle; area outside the surface reads as transparent."""

    @abstractmethod
    def put_pixels(self, pixels: Image.Image, x: int = 0, y: int = 0) -> None:
        """Composite a block of pixels onto the surface at (x, y)."""

    @abstractmethod
    def stroke_rect(self, rect: SlotRect, color: str, width: int = 1) -> None:
        """Draw a rectangle outline just inside `rect`."""

    @abstractmethod
    def to_image(self) -> Image.Image:
        """Flattened RGB copy of the surface, ready for encoding."""


class PillowSurface(RasterSurface):
    """RasterSurface backed by an RGBA Pillow image."""

    def __init__(self, image: Image.Image):
        self._image = image

    @property
    def size(self) -> Tuple[int, int]:
        return self._image.size

    def fill(self, color: str) -> None:
        self._image.paste(parse_color(color), (0, 0, self.width, self.height))

    def draw_rotated(self, image: Image.Image, angle: float) -> None:
        source = image if image.mode == 'RGBA' else image.convert('RGBA')

        turn = normalize_angle(angle)

        if turn % 90 != 0:
            self._composite(self._rotate_onto_surface(source, turn), 0, 0)
            logger.debug(f"Drew {image.size} image rotated {angle} deg on {self.size} surface")
            return

        if turn in QUARTER_TURNS:
            source = source.transpose(QUARTER_TURNS[turn])

        x = (self.width - source.width) // 2
        y = (self.height - source.height) // 2
        self._composite(source, x, y)
        logger.debug(f"Drew {image.size} image rotated {angle} deg at ({x}, {y}) on {self.size} surface")

    def _rotate_onto_surface(self, source: Image.Image, angle: float) -> Image.Image:
        """Resample `source` turned clockwise by `angle` into a layer the size of
        this surface, with the two centres coinciding exactly.

        The affine matrix maps each output point back into the source.
        """
        radians = math.radians(angle)
        cos_a = math.cos(radians)
        sin_a = math.sin(radians)
        cx, cy = self.width / 2, self.height / 2
        sx, sy = source.width / 2, source.height / 2

        matrix = (
            cos_a, sin_a, sx - cos_a * cx - sin_a * cy,
            -sin_a, cos_a, sy + sin_a * cx - cos_a * cy,
        )
        return source.transform(
            self.size,
            Image.Transform.AFFINE,
            matrix,
            resample=Image.Resampling.BICUBIC,
            fillcolor=TRANSPARENT
        )

    def draw_image(self, image: Image.Image, rect: SlotRect, quarter_turn: bool = False) -> None:
        source = image if image.mode == 'RGBA' else image.convert('RGBA')

        if quarter_turn:
            source = source.resize((rect.height, rect.width), Image.Resampling.LANCZOS)
            source = source.transpose(Image.Transpose.ROTATE_270)
        elif source.size != (rect.width, rect.height):
            source = source.resize((rect.width, rect.height), Image.Resampling.LANCZOS)

        self._composite(source, rect.x, rect.y)

    def read_pixels(self, x: int, y: int, width: int, height: int) -> Image.Image:
        if width <= 0 or height <= 0:
            raise SurfaceAllocationError(width, height, "cannot read an empty region")
        return self._image.crop((x, y, x + width, y + height))

    def put_pixels(self, pixels: Image.Image, x: int = 0, y: int = 0) -> None:
        source = pixels if pixels.mode == 'RGBA' else pixels.convert('RGBA')
        self._composite(source, x, y)

    def stroke_rect(self, rect: SlotRect, color: str, width: int = 1) -> None:
        draw = ImageDraw.Draw(self._image)
        draw.rectangle(
            [rect.x, rect.y, rect.right - 1, rect.bottom - 1],
            outline=parse_color(color),
            width=width
        )

    def to_image(self) -> Image.Image:
        return self._image.convert('RGB')

    def _composite(self, source: Image.Image, x: int, y: int) -> None:
        """Alpha-composite `source` with its top-left at (x, y), clipped to the surface."""
        left = max(x, 0)
        top = max(y, 0)
        right = min(x + source.width, self.width)
        bottom = min(y + source.height, self.height)

        if right <= left or bottom <= top:
            return

        visible = source.crop((left - x, top - y, right - x, bottom - y))
        self._image.alpha_composite(visible, dest=(left, top))


def allocate_surface(width: int, height: int, color: Optional[str] = None) -> RasterSurface:
    """
    Allocate a fresh surface, transparent unless a fill color is given.

    Raises:
        SurfaceAllocationError: If the dimensions are not positive or the
            buffer cannot be created
    """
    if width <= 0 or height <= 0:
        raise SurfaceAllocationError(width, height)

    fill = parse_color(color) if color else TRANSPARENT

    try:
        image = Image.new('RGBA', (width, height), fill)
    except (ValueError, MemoryError) as e:
        raise SurfaceAllocationError(width, height, str(e))

    logger.debug(f"Allocated {width}x{height} surface (fill={color})")
    return PillowSurface(image)

"""
Shared helpers for Photo Sheet tests.
"""

import io

from PIL import Image

RED = (255, 0, 0)
GREEN = (0, 255, 0)
BLUE = (0, 0, 255)
YELLOW = (255, 255, 0)
MAGENTA = (255, 0, 255)
WHITE = (255, 255, 255)
BLACK = (0, 0, 0)


def assert_color(actual, expected, tolerance=24):
    """Compare an RGB pixel allowing for JPEG compression error."""
    assert all(abs(a - e) <= tolerance for a, e in zip(actual[:3], expected)), \
        f"pixel {actual} is not close to {expected}"


def open_jpeg(data: bytes) -> Image.Image:
    image = Image.open(io.BytesIO(data))
    assert image.format == 'JPEG'
    return image.convert('RGB')


def image_bytes(image: Image.Image, fmt: str = 'PNG') -> bytes:
    buffer = io.BytesIO()
    image.save(buffer, format=fmt)
    return buffer.getvalue()

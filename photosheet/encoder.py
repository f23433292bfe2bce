"""
Encoder module for the photo sheet engine.

This module handles:
- Serializing surfaces to JPEG bytes at a fixed quality
- Wrapping encoded bytes as data: URLs for transport
"""

import base64
import io
from dataclasses import dataclass
from typing import Union

from PIL import Image
from loguru import logger

from photosheet.errors import EncodingError
from photosheet.surface import RasterSurface

JPEG_MIME_TYPE = 'image/jpeg'


class EncodeSettings:
    """Settings for encode operations."""

    def __init__(self,
                 quality: int = 92,
                 optimize: bool = False,
                 progressive: bool = False):
        self.output_format = 'JPEG'
        self.quality = quality
        self.optimize = optimize
        self.progressive = progressive


@dataclass(frozen=True)
class EncodedImage:
    """An encoded still image plus its pixel dimensions."""
    data: bytes
    width: int
    height: int
    mime_type: str = JPEG_MIME_TYPE

    @property
    def size(self):
        return (self.width, self.height)

    def to_data_url(self) -> str:
        """Base64 data: URL of the encoded bytes."""
        payload = base64.b64encode(self.data).decode('ascii')
        return f"data:{self.mime_type};base64,{payload}"


def encode_jpeg(source: Union[RasterSurface, Image.Image],
                settings: EncodeSettings = None) -> EncodedImage:
    """
    Encode a surface (or an already flattened image) as JPEG.

    Raises:
        EncodingError: If Pillow fails to serialize the pixels
    """
    if settings is None:
        settings = EncodeSettings()

    image = source.to_image() if isinstance(source, RasterSurface) else source

    # JPEG has no alpha channel
    if image.mode != 'RGB':
        image = image.convert('RGB')

    buffer = io.BytesIO()
    try:
        image.save(
            buffer,
            format=settings.output_format,
            quality=settings.quality,
            optimize=settings.optimize,
            progressive=settings.progressive
        )
    except (OSError, ValueError) as e:
        raise EncodingError(settings.output_format, str(e))

    data = buffer.getvalue()
    logger.debug(f"Encoded {image.size} image as JPEG q={settings.quality} ({len(data):,} bytes)")
    return EncodedImage(data=data, width=image.width, height=image.height)

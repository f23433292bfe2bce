"""
Image loading for the photo sheet engine.

Decodes image references (paths, bytes, streams, data: URLs or already
decoded Pillow images) into read-only Pillow images, and loads batches
concurrently while keeping results in request order.
"""

import asyncio
import base64
import binascii
import io
from pathlib import Path
from typing import Any, Callable, List, Sequence, Union

from PIL import Image, ImageOps, UnidentifiedImageError
from loguru import logger

from photosheet.encoder import EncodedImage
from photosheet.errors import ImageDecodeError

ImageRef = Union[Image.Image, EncodedImage, bytes, bytearray, str, Path, io.IOBase]

DATA_URL_PREFIX = 'data:'


def describe_source(source: Any) -> str:
    """Short human readable description of an image reference for logs and errors."""
    if isinstance(source, Image.Image):
        return f"<image {source.width}x{source.height}>"
    if isinstance(source, EncodedImage):
        return f"<encoded {source.width}x{source.height}>"
    if isinstance(source, (bytes, bytearray)):
        return f"<{len(source)} bytes>"
    if isinstance(source, str) and source.startswith(DATA_URL_PREFIX):
        return f"<data url, {len(source)} chars>"
    if isinstance(source, (str, Path)):
        return str(source)
    return f"<{type(source).__name__}>"


def _decode_data_url(url: str) -> bytes:
    header, sep, payload = url.partition(',')
    if not sep:
        raise ValueError("data URL has no payload")
    if not header.endswith(';base64'):
        raise ValueError("only base64 data URLs are supported")
    return base64.b64decode(payload, validate=True)


def _open(source: ImageRef) -> Image.Image:
    if isinstance(source, EncodedImage):
        return Image.open(io.BytesIO(source.data))
    if isinstance(source, (bytes, bytearray)):
        return Image.open(io.BytesIO(bytes(source)))
    if isinstance(source, str) and source.startswith(DATA_URL_PREFIX):
        return Image.open(io.BytesIO(_decode_data_url(source)))
    if isinstance(source, (str, Path)):
        return Image.open(source)
    if hasattr(source, 'read'):
        return Image.open(source)
    raise ValueError(f"unsupported image reference type {type(source).__name__}")


def decode_image(source: ImageRef) -> Image.Image:
    """
    Decode an image reference into a fully loaded Pillow image.

    EXIF orientation is applied so the result is upright as displayed.
    Already decoded images are returned unchanged.

    Raises:
        ImageDecodeError: If the reference is unsupported, missing or corrupt
    """
    if isinstance(source, Image.Image):
        return source

    description = describe_source(source)
    try:
        image = _open(source)
        image.load()
        image = ImageOps.exif_transpose(image)
    except FileNotFoundError:
        raise ImageDecodeError(description, "file not found")
    except UnidentifiedImageError:
        raise ImageDecodeError(description, "not a recognized image format")
    except (OSError, ValueError, binascii.Error) as e:
        raise ImageDecodeError(description, str(e))

    logger.debug(f"Decoded {description}: {image.size} {image.mode}")
    return image


async def load_images_async(sources: Sequence[ImageRef],
                            decoder: Callable[[ImageRef], Image.Image] = decode_image) -> List[Image.Image]:
    """
    Decode all references concurrently and return them in request order.

    Every decode is issued before any result is awaited; the returned list
    is ordered like `sources` regardless of completion order. The first
    failure propagates and no partial list is returned.
    """
    if not sources:
        return []

    tasks = [asyncio.to_thread(decoder, source) for source in sources]
    images = await asyncio.gather(*tasks)

    logger.debug(f"Loaded {len(images)} images")
    return list(images)


def load_images(sources: Sequence[ImageRef],
                decoder: Callable[[ImageRef], Image.Image] = decode_image) -> List[Image.Image]:
    """Blocking wrapper around load_images_async."""
    return asyncio.run(load_images_async(sources, decoder))

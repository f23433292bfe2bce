"""
Cropper module for the photo sheet engine.

This module handles:
- Rotating a source photo inside its tight bounding box
- Extracting the selected crop rectangle from the rotated photo
- Filling uncovered area with a solid background color
- Encoding the result as a JPEG still

Crop coordinates are always relative to the top-left corner of the tight
bounding box of the rotated image. At rotation 0 this is the source
image's own pixel space.
"""

from typing import Any, Mapping, Optional, Union

from PIL import Image
from loguru import logger

from photosheet.config import AppConfig, get_config
from photosheet.encoder import EncodedImage, EncodeSettings, encode_jpeg
from photosheet.geometry import PixelCrop, bounding_box, finite_number
from photosheet.loader import ImageRef, decode_image
from photosheet.surface import allocate_surface

CROP_COORDINATE_SPACE = 'rotated-bounding-box'


class Cropper:
    """Rotation-aware crop of a single photo."""

    def __init__(self, config: AppConfig = None):
        self.config = config or get_config()
        self.encode_settings = EncodeSettings(quality=self.config.CROP_JPEG_QUALITY)

    def rotate_and_extract(self,
                           image: Image.Image,
                           pixel_crop: Union[PixelCrop, Mapping[str, Any]],
                           rotation: float = 0,
                           background_color: Optional[str] = None) -> Image.Image:
        """
        Return the cropped region as an RGB image without encoding it.

        The rotated photo is drawn centred on a surface sized to its bounding
        box, optionally over a background fill, and the crop rectangle is read
        back from that surface into a surface of exactly the crop size.
        """
        if not isinstance(pixel_crop, PixelCrop):
            pixel_crop = PixelCrop.from_mapping(pixel_crop)

        rotation = finite_number(rotation, 'rotation')

        box_width, box_height = bounding_box(image.width, image.height, rotation).pixel_size()

        rotated = allocate_surface(box_width, box_height, background_color)
        rotated.draw_rotated(image, rotation)

        pixels = rotated.read_pixels(pixel_crop.x, pixel_crop.y, pixel_crop.width, pixel_crop.height)

        # The read-back is transparent wherever the crop leaves the box
        output = allocate_surface(pixel_crop.width, pixel_crop.height, background_color)
        output.put_pixels(pixels)

        logger.debug(f"Cropped {pixel_crop} from {image.size} rotated {rotation} deg "
                     f"(box {box_width}x{box_height})")
        return output.to_image()

    def crop(self,
             image: Image.Image,
             pixel_crop: PixelCrop,
             rotation: float = 0,
             background_color: Optional[str] = None) -> EncodedImage:
        """
        Crop a rotated region of `image` and encode it as JPEG.

        Args:
            image: Decoded source photo (left untouched)
            pixel_crop: Region in rotated-bounding-box coordinates
            rotation: Clockwise rotation in degrees, any range
            background_color: Fill for area not covered by the photo

        Returns:
            JPEG of exactly pixel_crop.width x pixel_crop.height pixels

        Raises:
            ValidationError: If the rotation or a crop field is not a finite number
            SurfaceAllocationError: If the crop has a non-positive size
            EncodingError: If JPEG serialization fails
        """
        result = self.rotate_and_extract(image, pixel_crop, rotation, background_color)
        encoded = encode_jpeg(result, self.encode_settings)

        logger.info(f"Crop complete: {encoded.width}x{encoded.height} "
                    f"({len(encoded.data):,} bytes, rotation {rotation})")
        return encoded

    def crop_image_ref(self,
                       source: ImageRef,
                       pixel_crop: PixelCrop,
                       rotation: float = 0,
                       background_color: Optional[str] = None) -> EncodedImage:
        """Decode `source` and crop it; decode failures raise ImageDecodeError."""
        image = decode_image(source)
        return self.crop(image, pixel_crop, rotation, background_color)


def create_cropper(config: AppConfig = None) -> Cropper:
    """Factory function to create a Cropper instance."""
    return Cropper(config)


def crop(image: Image.Image,
         pixel_crop: PixelCrop,
         rotation: float = 0,
         background_color: Optional[str] = None) -> EncodedImage:
    """Crop with the global configuration."""
    return create_cropper().crop(image, pixel_crop, rotation, background_color)


def crop_image_ref(source: ImageRef,
                   pixel_crop: PixelCrop,
                   rotation: float = 0,
                   background_color: Optional[str] = None) -> EncodedImage:
    """Decode and crop with the global configuration."""
    return create_cropper().crop_image_ref(source, pixel_crop, rotation, background_color)

"""
Error handling for the photo sheet engine.

Provides specific exception types for the crop and sheet pipelines
with error context for debugging and API responses.
"""

from typing import Dict, List, Any


class PhotoSheetError(Exception):
    """Base exception for all photo sheet errors."""

    def __init__(self, message: str, details: Dict[str, Any] = None, suggestions: List[str] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.suggestions = suggestions or []

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary for JSON serialization."""
        return {
            'error_type': self.__class__.__name__,
            'message': self.message,
            'details': self.details,
            'suggestions': self.suggestions
        }


class ValidationError(PhotoSheetError):
    """Raised when caller input validation fails."""
    pass


class ProcessingError(PhotoSheetError):
    """Raised when the crop or sheet pipeline fails."""
    pass


class UnknownPresetError(ValidationError):
    """Raised when a sheet layout preset id is not one of the shipped presets."""

    def __init__(self, preset_id: str, available: List[str]):
        super().__init__(
            f"Unknown sheet preset: {preset_id}",
            details={
                'preset_id': preset_id,
                'available_presets': available
            },
            suggestions=[
                f"Use one of: {', '.join(available)}"
            ]
        )


class ImageDecodeError(ProcessingError):
    """Raised when a source image cannot be read or decoded."""

    def __init__(self, source: str, reason: str):
        super().__init__(
            f"Could not decode image {source}: {reason}",
            details={
                'source': source,
                'reason': reason
            },
            suggestions=[
                "Use a JPG, PNG, or WebP image",
                "Ensure the file is not corrupted or truncated",
                "Pass images as file paths, raw bytes, or data: URLs"
            ]
        )


class SurfaceAllocationError(ProcessingError):
    """Raised when a raster surface cannot be allocated."""

    def __init__(self, width: int, height: int, reason: str = "dimensions must be positive"):
        super().__init__(
            f"Cannot allocate {width}x{height} surface: {reason}",
            details={
                'width': width,
                'height': height,
                'reason': reason
            },
            suggestions=[
                "Check that the crop rectangle has a positive width and height"
            ]
        )


class EncodingError(ProcessingError):
    """Raised when a surface cannot be serialized to an image file."""

    def __init__(self, output_format: str, reason: str):
        super().__init__(
            f"Failed to encode {output_format} image: {reason}",
            details={
                'format': output_format,
                'reason': reason
            }
        )


def error_status_code(error: PhotoSheetError) -> int:
    """HTTP status code for an error raised by the engine."""
    if isinstance(error, (ValidationError, ImageDecodeError)):
        return 400
    return 500

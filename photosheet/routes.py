"""
Flask routes for Photo Sheet
Exposes cropping and print sheet composition over HTTP
"""

import io
from pathlib import Path
from typing import List, Optional

import pydantic
from flask import Blueprint, current_app, jsonify, request, send_file
from loguru import logger
from pydantic import BaseModel, Field, field_validator
from werkzeug.exceptions import RequestEntityTooLarge

from .config import get_config
from .cropper import create_cropper
from .errors import PhotoSheetError, ValidationError, error_status_code
from .geometry import PixelCrop, finite_number
from .layout import DEFAULT_PRESET_ID, PrintQueueItem, list_presets
from .loader import DATA_URL_PREFIX
from .sheet import create_sheet_composer


bp = Blueprint('main', __name__, url_prefix='/api')


class QueueEntryRequest(BaseModel):
    """One print queue entry as sent by the client"""
    image: str
    copies: int = Field(default=1, ge=1)

    @field_validator('image')
    @classmethod
    def image_must_be_data_url(cls, value: str) -> str:
        # The loader treats any other string as a file path
        if not value.startswith(DATA_URL_PREFIX):
            raise ValueError("image must be a data: URL")
        return value


class SheetRequest(BaseModel):
    """Body of a sheet composition request"""
    preset: str = DEFAULT_PRESET_ID
    cut_guides: Optional[bool] = None
    queue: List[QueueEntryRequest]


@bp.errorhandler(PhotoSheetError)
def handle_photo_sheet_error(error):
    status = error_status_code(error)
    if status >= 500:
        logger.error(f"{type(error).__name__} on {request.path}: {error}")
    else:
        logger.warning(f"{type(error).__name__} on {request.path}: {error}")
    return jsonify(error.to_dict()), status


@bp.errorhandler(RequestEntityTooLarge)
def handle_too_large(error):
    limit_mb = current_app.config['MAX_UPLOAD_SIZE'] / (1024 * 1024)
    logger.warning(f"Upload rejected on {request.path}: exceeds {limit_mb:.1f}MB")
    body = ValidationError(
        f"Upload exceeds {limit_mb:.1f}MB limit",
        details={'limit_mb': limit_mb},
        suggestions=["Resize or compress the photo before uploading"]
    ).to_dict()
    return jsonify(body), 413


@bp.route('/health', methods=['GET'])
def health():
    return jsonify({'status': 'ok'})


@bp.route('/presets', methods=['GET'])
def presets():
    """List the print sheet presets"""
    return jsonify({
        'default': DEFAULT_PRESET_ID,
        'presets': [preset.to_dict() for preset in list_presets()]
    })


@bp.route('/templates', methods=['GET'])
def templates():
    """Crop aspect templates and background swatches for the selection tool"""
    config = get_config()
    return jsonify({
        'templates': [template.model_dump() for template in config.CROP_TEMPLATES],
        'backgrounds': config.BACKGROUND_SWATCHES,
        'default_background': config.DEFAULT_CROP_BACKGROUND,
        'default_copies': config.DEFAULT_COPIES
    })


@bp.route('/crop', methods=['POST'])
def crop():
    """Crop an uploaded photo and return the JPEG"""
    photo = request.files.get('photo')
    if photo is None or photo.filename == '':
        raise ValidationError("No photo uploaded", suggestions=["Send the photo as the 'photo' form field"])

    validate_extension(photo.filename)

    pixel_crop = PixelCrop.from_mapping(request.form)
    if pixel_crop.width <= 0 or pixel_crop.height <= 0:
        raise ValidationError(
            f"Crop size must be positive, got {pixel_crop.width}x{pixel_crop.height}",
            details={'width': pixel_crop.width, 'height': pixel_crop.height}
        )

    try:
        rotation = finite_number(request.form.get('rotation', 0), 'rotation')
    except (ValueError, OverflowError):
        raise ValidationError(f"Rotation must be a number, got {request.form.get('rotation')!r}")

    background = parse_background(request.form.get('background'))

    logger.info(f"Crop request: {photo.filename} {pixel_crop} rotation={rotation} background={background}")

    encoded = create_cropper().crop_image_ref(photo.stream, pixel_crop, rotation, background)

    if request.args.get('format') == 'data_url':
        return jsonify({
            'image': encoded.to_data_url(),
            'width': encoded.width,
            'height': encoded.height
        })

    return send_file(io.BytesIO(encoded.data), mimetype=encoded.mime_type, download_name='crop.jpg')


@bp.route('/sheet', methods=['POST'])
def sheet():
    """Compose a print sheet from a queue of cropped photos"""
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        raise ValidationError("Request body must be a JSON object")

    try:
        sheet_request = SheetRequest(**payload)
    except pydantic.ValidationError as e:
        raise ValidationError(
            "Invalid sheet request",
            details={'errors': [
                {'field': '.'.join(str(part) for part in err['loc']), 'message': err['msg']}
                for err in e.errors()
            ]}
        )

    queue = [PrintQueueItem(entry.image, entry.copies) for entry in sheet_request.queue]

    logger.info(f"Sheet request: preset={sheet_request.preset}, "
                f"{len(queue)} photos, {sum(item.copies for item in queue)} copies")

    result = create_sheet_composer().compose(queue, sheet_request.preset, sheet_request.cut_guides)

    response = send_file(
        io.BytesIO(result.image.data),
        mimetype=result.image.mime_type,
        as_attachment=True,
        download_name=current_app.config['DOWNLOAD_FILENAME']
    )
    response.headers['X-Slots-Placed'] = str(result.placed)
    response.headers['X-Slots-Skipped'] = str(result.skipped)
    return response


def validate_extension(filename: str) -> None:
    """Reject uploads whose extension is not an allowed image type"""
    allowed = current_app.config.get('ALLOWED_EXTENSIONS', ['.jpg', '.jpeg', '.png'])
    ext = Path(filename).suffix.lower()
    if ext not in allowed:
        raise ValidationError(
            f"Unsupported file type: {ext or 'none'}",
            details={'filename': filename, 'allowed_extensions': allowed},
            suggestions=[f"Upload one of: {', '.join(allowed)}"]
        )


def parse_background(value: Optional[str]) -> Optional[str]:
    """Form value to background color; absent means the default, 'none' means no fill"""
    if value is None:
        return current_app.config['DEFAULT_CROP_BACKGROUND']
    value = value.strip()
    if value == '' or value.lower() == 'none':
        return None
    return value

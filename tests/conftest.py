"""
Pytest configuration and fixtures for Photo Sheet tests.

Provides the Flask app and client, a test configuration, and
generated sample photos with known colors in known places.
"""

import pytest
from PIL import Image, ImageDraw

from photosheet import create_app
from photosheet.config import AppConfig

from tests.helpers import RED, GREEN, BLUE, YELLOW, MAGENTA


@pytest.fixture(scope='session')
def app():
    """Create and configure a test Flask application."""
    app = create_app({
        'TESTING': True,
        'SECRET_KEY': 'test-key',
        'LOG_FILE': None,
        'DEBUG': True,
    })
    yield app


@pytest.fixture
def client(app):
    """Create a test client for the Flask application."""
    return app.test_client()


@pytest.fixture
def test_config():
    """Configuration for engine tests, independent of the YAML files."""
    return AppConfig(LOG_FILE=None, SECRET_KEY='test-key')


@pytest.fixture
def portrait_photo():
    """1000x1200 photo: left half red, right half green."""
    img = Image.new('RGB', (1000, 1200), RED)
    draw = ImageDraw.Draw(img)
    draw.rectangle([500, 0, 999, 1199], fill=GREEN)
    return img


@pytest.fixture
def landscape_photo():
    """200x100 photo: left half red, right half green."""
    img = Image.new('RGB', (200, 100), RED)
    draw = ImageDraw.Draw(img)
    draw.rectangle([100, 0, 199, 99], fill=GREEN)
    return img


@pytest.fixture
def solid_photos():
    """Small solid color photos, one per color, in a fixed order."""
    return [Image.new('RGB', (100, 130), color) for color in (RED, GREEN, BLUE, YELLOW, MAGENTA)]


@pytest.fixture
def photo_file(tmp_path, portrait_photo):
    """The portrait photo saved as a JPEG on disk."""
    path = tmp_path / 'portrait.jpg'
    portrait_photo.save(path, 'JPEG', quality=95)
    return path

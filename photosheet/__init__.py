"""
Photo Sheet - Flask Application Factory
Rotation-aware photo cropping and printable passport photo sheets
"""

import os
from pathlib import Path
from flask import Flask
from loguru import logger
from dotenv import load_dotenv

from .config import AppConfig, load_config, set_config


def create_app(test_config=None):
    """Flask application factory"""

    load_dotenv()

    app = Flask(__name__)

    environment = os.getenv('FLASK_ENV', 'development')
    config = load_config(environment)
    if test_config:
        config = AppConfig(**{**config.model_dump(), **test_config})
    set_config(config)

    app.config.update(config.model_dump())
    app.config['MAX_CONTENT_LENGTH'] = config.MAX_UPLOAD_SIZE

    setup_logging(app)

    from . import routes
    app.register_blueprint(routes.bp)

    logger.info(f"Photo Sheet initialized in {config.FLASK_ENV} mode")

    return app


def setup_logging(app):
    """Configure loguru logging"""
    log_file = app.config.get('LOG_FILE')
    if not log_file:
        return

    Path(log_file).parent.mkdir(parents=True, exist_ok=True)

    logger.add(
        log_file,
        rotation="1 day",
        retention="30 days",
        level=app.config.get('LOG_LEVEL', 'INFO'),
        format="{time:YYYY-MM-DD HH:mm:ss} | {level} | {name}:{function}:{line} | {message}"
    )

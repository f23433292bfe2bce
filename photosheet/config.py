"""
Configuration management for the photo sheet engine
Loads settings from YAML files with environment variable overrides
"""

import os
import yaml
from pathlib import Path
from typing import Dict, List, Optional
from pydantic import BaseModel, Field
from loguru import logger


class CropTemplate(BaseModel):
    """Aspect ratio offered to the crop selection tool"""
    name: str
    aspect: float


class AppConfig(BaseModel):
    """Main application configuration"""

    # Flask settings
    SECRET_KEY: str = Field(default_factory=lambda: os.urandom(24).hex())
    FLASK_ENV: str = "development"
    DEBUG: bool = True
    TESTING: bool = False

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FILE: Optional[str] = "logs/app.log"

    # Encoding
    CROP_JPEG_QUALITY: int = Field(default=92, ge=1, le=95)
    SHEET_JPEG_QUALITY: int = Field(default=90, ge=1, le=95)

    # Sheet rendering
    SHEET_BACKGROUND: str = "#ffffff"
    CUT_GUIDES: bool = False
    CUT_GUIDE_COLOR: str = "#dddddd"
    CUT_GUIDE_WIDTH: int = 1
    DOWNLOAD_FILENAME: str = "passport-photos.jpg"

    # Cropping
    DEFAULT_CROP_BACKGROUND: str = "#ffffff"
    DEFAULT_COPIES: int = 4
    BACKGROUND_SWATCHES: List[str] = ["#ffffff", "#1e90ff", "#ff4757", "#dff9fb", "#f1f2f6"]
    CROP_TEMPLATES: List[CropTemplate] = [
        CropTemplate(name="Passport (35x45 mm)", aspect=35 / 45),
        CropTemplate(name="Visa / OCI (2x2 inch)", aspect=1.0),
    ]

    # Uploads
    MAX_UPLOAD_SIZE: int = 20 * 1024 * 1024  # 20MB
    ALLOWED_EXTENSIONS: List[str] = [".jpg", ".jpeg", ".png", ".webp"]


def load_yaml_config(file_path: str) -> Dict:
    """Load configuration from YAML file"""
    path = Path(file_path)
    if not path.exists():
        logger.debug(f"Config file not found: {file_path}")
        return {}

    try:
        with open(path, 'r', encoding='utf-8') as f:
            return yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        logger.error(f"Error loading config file {file_path}: {e}")
        return {}


def load_config(environment: str = "development", config_dir: str = "config") -> AppConfig:
    """Load configuration with environment-specific overrides"""

    base_config = load_yaml_config(f"{config_dir}/settings.yaml")
    env_config = load_yaml_config(f"{config_dir}/settings_{environment}.yaml")

    # env overrides base
    config_dict = {**base_config, **env_config}

    env_overrides = {
        'FLASK_ENV': os.getenv('FLASK_ENV', environment),
        'LOG_LEVEL': os.getenv('LOG_LEVEL'),
        'LOG_FILE': os.getenv('LOG_FILE'),
        'SECRET_KEY': os.getenv('SECRET_KEY'),
    }

    # Only include non-None values
    env_overrides = {k: v for k, v in env_overrides.items() if v is not None}
    config_dict.update(env_overrides)

    if 'FLASK_ENV' in config_dict:
        config_dict['DEBUG'] = config_dict['FLASK_ENV'] == 'development'

    try:
        return AppConfig(**config_dict)
    except ValueError as e:
        logger.error(f"Configuration validation error: {e}")
        return AppConfig()


# Global config instance
_config_instance = None


def get_config() -> AppConfig:
    """Get the global configuration instance"""
    global _config_instance
    if _config_instance is None:
        _config_instance = load_config(os.getenv('FLASK_ENV', 'development'))
    return _config_instance


def set_config(config: AppConfig) -> None:
    """Replace the global configuration instance (used by the app factory)"""
    global _config_instance
    _config_instance = config

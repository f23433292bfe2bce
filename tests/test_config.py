"""
Unit tests for configuration loading.
"""

import pytest

from photosheet.config import AppConfig, load_config, load_yaml_config


class TestLoadYamlConfig:

    def test_missing_file_is_empty(self, tmp_path):
        assert load_yaml_config(str(tmp_path / 'nope.yaml')) == {}

    def test_invalid_yaml_is_empty(self, tmp_path):
        path = tmp_path / 'broken.yaml'
        path.write_text("key: [unclosed\n", encoding='utf-8')

        assert load_yaml_config(str(path)) == {}

    def test_reads_mapping(self, tmp_path):
        path = tmp_path / 'settings.yaml'
        path.write_text("SHEET_JPEG_QUALITY: 80\n", encoding='utf-8')

        assert load_yaml_config(str(path)) == {'SHEET_JPEG_QUALITY': 80}


class TestLoadConfig:
    """Test layered configuration with environment overrides."""

    @pytest.fixture(autouse=True)
    def clean_env(self, monkeypatch):
        for key in ('FLASK_ENV', 'LOG_LEVEL', 'LOG_FILE', 'SECRET_KEY'):
            monkeypatch.delenv(key, raising=False)

    def test_defaults(self, tmp_path):
        config = load_config('development', config_dir=str(tmp_path))

        assert config.CROP_JPEG_QUALITY == 92
        assert config.SHEET_JPEG_QUALITY == 90
        assert config.CUT_GUIDES is False
        assert config.DEFAULT_COPIES == 4
        assert config.DOWNLOAD_FILENAME == 'passport-photos.jpg'
        assert [t.name for t in config.CROP_TEMPLATES] == ['Passport (35x45 mm)', 'Visa / OCI (2x2 inch)']
        assert config.DEBUG is True

    def test_environment_file_overrides_base(self, tmp_path):
        (tmp_path / 'settings.yaml').write_text("CUT_GUIDES: false\nLOG_LEVEL: INFO\n", encoding='utf-8')
        (tmp_path / 'settings_production.yaml').write_text("CUT_GUIDES: true\n", encoding='utf-8')

        config = load_config('production', config_dir=str(tmp_path))

        assert config.CUT_GUIDES is True
        assert config.LOG_LEVEL == 'INFO'
        assert config.DEBUG is False

    def test_environment_variables_override_files(self, tmp_path, monkeypatch):
        (tmp_path / 'settings.yaml').write_text("LOG_LEVEL: INFO\n", encoding='utf-8')
        monkeypatch.setenv('LOG_LEVEL', 'DEBUG')

        config = load_config('development', config_dir=str(tmp_path))

        assert config.LOG_LEVEL == 'DEBUG'

    def test_invalid_values_fall_back_to_defaults(self, tmp_path):
        (tmp_path / 'settings.yaml').write_text("SHEET_JPEG_QUALITY: 500\n", encoding='utf-8')

        config = load_config('development', config_dir=str(tmp_path))

        assert config.SHEET_JPEG_QUALITY == AppConfig().SHEET_JPEG_QUALITY

    def test_shipped_settings_file(self, monkeypatch):
        """The repository settings agree with the built-in defaults."""
        from pathlib import Path
        config_dir = Path(__file__).parent.parent / 'config'

        config = load_config('development', config_dir=str(config_dir))

        assert config.BACKGROUND_SWATCHES == AppConfig().BACKGROUND_SWATCHES
        assert config.CROP_TEMPLATES[0].aspect == pytest.approx(35 / 45)

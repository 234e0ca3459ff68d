"""Unit tests for AppConfig and logging setup."""

import logging

from sticky_checklist.config import HOME_ENV_VAR, AppConfig
from sticky_checklist.log import LOGGER_NAME, configure_logging


class TestAppConfig:
    """Tests for AppConfig paths."""

    def test_layout(self, tmp_path):
        config = AppConfig(data_dir=tmp_path)

        assert config.notes_file == tmp_path / "notes.json"
        assert config.temp_file == tmp_path / "notes.json.tmp"
        assert config.backup_dir == tmp_path / "Backups"
        assert config.keep_backups == 50

    def test_env_override(self, tmp_path, monkeypatch):
        monkeypatch.setenv(HOME_ENV_VAR, str(tmp_path / "custom"))

        config = AppConfig()

        assert config.data_dir == tmp_path / "custom"

    def test_ensure_dirs(self, tmp_path):
        config = AppConfig(data_dir=tmp_path / "a" / "b")

        config.ensure_dirs()

        assert config.backup_dir.is_dir()


class TestConfigureLogging:
    """Tests for configure_logging."""

    def test_writes_to_log_file_once(self, config):
        logger = configure_logging(config)
        try:
            handler_count = len(logger.handlers)
            configure_logging(config)
            assert len(logger.handlers) == handler_count

            logging.getLogger(f"{LOGGER_NAME}.store").info("hello from store")
            for handler in logger.handlers:
                handler.flush()

            assert "hello from store" in config.log_file.read_text(encoding="utf-8")
        finally:
            for handler in list(logger.handlers):
                logger.removeHandler(handler)
                handler.close()

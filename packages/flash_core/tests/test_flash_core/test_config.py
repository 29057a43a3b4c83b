import pytest
from flash_core import FlashSettings
from pydantic import ValidationError


class TestFlashSettings:
    def test_default_development_state(self, monkeypatch):
        """Verify that by default, settings are in development mode."""
        for var in ("DEBUG", "ENVIRONMENT", "LOG_LEVEL"):
            monkeypatch.delenv(var, raising=False)
        settings = FlashSettings()
        assert settings.DEBUG is True
        assert settings.ENVIRONMENT == "development"
        assert settings.LOG_LEVEL == "INFO"
        assert settings.is_development() is True

    def test_is_development_logic(self):
        """Test the different combinations of DEBUG and ENVIRONMENT."""
        assert FlashSettings(DEBUG=True).is_development() is True
        assert (
            FlashSettings(DEBUG=False, ENVIRONMENT="development").is_development()
            is True
        )
        assert (
            FlashSettings(DEBUG=False, ENVIRONMENT="production").is_development()
            is False
        )

    def test_log_level_is_normalized(self):
        assert FlashSettings(LOG_LEVEL="debug").LOG_LEVEL == "DEBUG"

    def test_unknown_log_level(self):
        with pytest.raises(ValidationError, match="Unknown log level"):
            FlashSettings(LOG_LEVEL="chatty")

    def test_env_variable_overrides(self, monkeypatch):
        """Verify that actual environment variables override the defaults."""
        monkeypatch.setenv("LOG_LEVEL", "warning")
        monkeypatch.setenv("LOG_FILE", "/tmp/flash.log")

        settings = FlashSettings()
        assert settings.LOG_LEVEL == "WARNING"
        assert settings.LOG_FILE == "/tmp/flash.log"

    def test_singleton_instance(self):
        """Ensure the exported flash_settings is an instance of FlashSettings."""
        from flash_core.config import flash_settings

        assert isinstance(flash_settings, FlashSettings)

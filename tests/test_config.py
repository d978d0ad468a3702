"""Tests for environment-driven settings."""

import pytest
from pydantic import ValidationError

from expense_tracker.config import (
    AppSettings,
    GeminiSettings,
    StorageSettings,
    validate_all_settings,
)


@pytest.fixture(autouse=True)
def isolated_env(tmp_path, monkeypatch):
    """Run each test away from any developer .env file."""
    monkeypatch.chdir(tmp_path)
    for name in ("GEMINI_API_KEY", "LOG_LEVEL", "EXPENSE_STORAGE_BACKEND"):
        monkeypatch.delenv(name, raising=False)


class TestSettings:

    def test_app_defaults(self):
        settings = AppSettings()
        assert settings.log_level == "INFO"
        assert settings.supported_formats_list == ["jpg", "jpeg", "png", "webp"]
        assert settings.max_upload_size_bytes == 10 * 1024 * 1024

    def test_log_level_is_normalized(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "debug")
        assert AppSettings().log_level == "DEBUG"

    def test_unknown_log_level_rejected(self):
        with pytest.raises(ValidationError):
            AppSettings(log_level="chatty")

    def test_storage_backend_from_env(self, monkeypatch):
        monkeypatch.setenv("EXPENSE_STORAGE_BACKEND", "memory")
        assert StorageSettings().backend == "memory"

    def test_gemini_requires_api_key(self):
        with pytest.raises(ValidationError):
            GeminiSettings()

    def test_gemini_reads_dotenv(self, tmp_path):
        (tmp_path / ".env").write_text("GEMINI_API_KEY=from-dotenv\n", encoding="utf-8")
        assert GeminiSettings().api_key == "from-dotenv"

    def test_validate_all_settings_reports_missing_key(self):
        results = validate_all_settings()
        assert results["storage"] is True
        assert results["app"] is True
        assert results["gemini"] is False
        assert "gemini_error" in results

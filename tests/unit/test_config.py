"""Tests for Settings loading."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from request_pipeline.config import Settings, get_settings


class TestSettings:
    def test_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("PORT", raising=False)
        settings = Settings(_env_file=None)
        assert settings.port == 5000
        assert settings.cors_allow_credentials is True
        assert settings.body_limit_bytes == 100 * 1024
        assert settings.session_cookie == "__session"
        assert settings.identity_jwt_algorithms == ["RS256"]

    def test_reads_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("PORT", "8080")
        monkeypatch.setenv("CORS_ORIGIN", "http://54.172.192.158")
        monkeypatch.setenv("CORS_ALLOW_CREDENTIALS", "false")
        monkeypatch.setenv("IDENTITY_JWT_ALGORITHMS", '["HS256", "RS256"]')
        settings = Settings(_env_file=None)
        assert settings.port == 8080
        assert settings.cors_origin == "http://54.172.192.158"
        assert settings.cors_allow_credentials is False
        assert settings.identity_jwt_algorithms == ["HS256", "RS256"]

    def test_reads_env_file(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("PORT", raising=False)
        env_file = tmp_path / ".env"
        env_file.write_text("PORT=7000\nLOG_FORMAT=console\n")
        settings = Settings(_env_file=env_file)
        assert settings.port == 7000
        assert settings.log_format == "console"

    def test_invalid_port(self) -> None:
        with pytest.raises(ValidationError):
            Settings(_env_file=None, port=70000)

    def test_frozen(self) -> None:
        settings = Settings(_env_file=None)
        with pytest.raises(ValidationError):
            settings.port = 1  # type: ignore[misc]

    def test_get_settings_is_cached(self) -> None:
        get_settings.cache_clear()
        try:
            assert get_settings() is get_settings()
        finally:
            get_settings.cache_clear()

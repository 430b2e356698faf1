"""Tests for testmap.core.settings — environment-driven configuration."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from testmap.core.settings import TestmapSettings, clear_settings_cache, get_settings


class TestDefaults:
    def test_defaults(self):
        settings = TestmapSettings()
        assert settings.log_level == "INFO"
        assert settings.log_format == "auto"
        assert settings.components_dir is None
        assert settings.include_bundled_components is True
        assert settings.max_workers == 8
        assert settings.strict_ambiguity is True
        assert settings.jira_project == "OCPBUGS"

    def test_json_logs(self):
        assert TestmapSettings().json_logs is None
        assert TestmapSettings(log_format="json").json_logs is True
        assert TestmapSettings(log_format="console").json_logs is False


class TestEnvironment:
    def test_env_prefix(self, monkeypatch):
        monkeypatch.setenv("TESTMAP_MAX_WORKERS", "16")
        monkeypatch.setenv("TESTMAP_STRICT_AMBIGUITY", "false")
        monkeypatch.setenv("TESTMAP_COMPONENTS_DIR", "/etc/testmap")
        settings = TestmapSettings()
        assert settings.max_workers == 16
        assert settings.strict_ambiguity is False
        assert settings.components_dir == Path("/etc/testmap")

    def test_dotenv_file(self, tmp_path):
        (tmp_path / ".env").write_text("TESTMAP_PRODUCT=OCP\n")
        assert TestmapSettings().product == "OCP"

    def test_log_level_normalized(self, monkeypatch):
        monkeypatch.setenv("TESTMAP_LOG_LEVEL", "debug")
        assert TestmapSettings().log_level == "DEBUG"

    def test_invalid_log_level(self, monkeypatch):
        monkeypatch.setenv("TESTMAP_LOG_LEVEL", "chatty")
        with pytest.raises(ValidationError):
            TestmapSettings()

    def test_workers_must_be_positive(self):
        with pytest.raises(ValidationError):
            TestmapSettings(max_workers=0)


class TestCaching:
    def test_cached(self):
        assert get_settings() is get_settings()

    def test_force_reload(self, monkeypatch):
        first = get_settings()
        monkeypatch.setenv("TESTMAP_PRODUCT", "OKD")
        reloaded = get_settings(_force_reload=True)
        assert reloaded is not first
        assert reloaded.product == "OKD"

    def test_clear_cache(self):
        first = get_settings()
        clear_settings_cache()
        assert get_settings() is not first

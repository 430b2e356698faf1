"""
Centralized settings for testmap.

One validated, cached settings object resolves every tunable from
``TESTMAP_*`` environment variables or a ``.env`` file.

Examples:
    >>> import os
    >>> os.environ["TESTMAP_MAX_WORKERS"] = "16"
    >>> get_settings(_force_reload=True).max_workers
    16

Tags:
    testmap, configuration, settings, pydantic, caching
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class TestmapSettings(BaseSettings):
    """testmap configuration.

    Fields
    ──────
    log_level                  : Structlog log level
    log_format                 : console | json | auto (json when stderr is not a tty)
    components_dir             : Extra directory of component YAML files
    include_bundled_components : Register the component rule sets shipped with the package
    max_workers                : Thread pool size for batch resolution
    strict_ambiguity           : Equal-priority claims by two components abort the run
    product                    : Product stamped on emitted records
    jira_project               : JIRA project used when a rule file omits one
    """

    __test__ = False

    model_config = SettingsConfigDict(
        env_prefix="TESTMAP_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Observability ────────────────────────────────────────────
    log_level: str = Field(default="INFO")
    log_format: Literal["console", "json", "auto"] = Field(default="auto")

    # ── Components ───────────────────────────────────────────────
    components_dir: Path | None = Field(default=None)
    include_bundled_components: bool = Field(default=True)

    # ── Resolution ───────────────────────────────────────────────
    max_workers: int = Field(default=8, ge=1)
    strict_ambiguity: bool = Field(default=True)

    # ── Record defaults ──────────────────────────────────────────
    product: str = Field(default="")
    jira_project: str = Field(default="OCPBUGS", min_length=1)

    @field_validator("log_level")
    @classmethod
    def _normalize_level(cls, v: str) -> str:
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR"}:
            raise ValueError(f"Unsupported log level: {v}")
        return level

    @property
    def json_logs(self) -> bool | None:
        """Renderer choice for ``configure_logging`` (None means auto-detect)."""
        if self.log_format == "auto":
            return None
        return self.log_format == "json"


_settings_cache: dict[str, TestmapSettings] = {}


def get_settings(*, _force_reload: bool = False) -> TestmapSettings:
    """Load, validate, and cache a :class:`TestmapSettings` instance."""
    if not _force_reload and "default" in _settings_cache:
        return _settings_cache["default"]

    settings = TestmapSettings()
    _settings_cache["default"] = settings
    return settings


def clear_settings_cache() -> None:
    """Clear the settings cache (primarily for testing)."""
    _settings_cache.clear()

"""
Settings models.

Two layers of configuration:

* :class:`DatabaseSettings` / :class:`EngineOptions` — one database section
  from the YAML config file (see :mod:`repokit.config.loader`).  Immutable
  once loaded.
* :class:`RepokitSettings` — process-level knobs read from ``REPOKIT_*``
  environment variables or ``.env`` (config file location, default section,
  logging).

YAML keys are matched case-insensitively and ignore ``_``/``-``, so
``openLog``, ``OpenLog`` and ``open_log`` are the same key.  The config key
``noLowerCase`` sets :attr:`EngineOptions.preserve_field_case`.

Tags:
    repokit, configuration, settings, pydantic
"""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_CONNECT = "sqlite|./db/data.db&OFF"
DEFAULT_SECTION = "Main"
DEFAULT_CONFIG_PATH = Path("config.yaml")

_OPTION_KEYS = {
    "openlog": "open_log",
    "skipdefaulttransaction": "skip_default_transaction",
    "nolowercase": "preserve_field_case",
    "preservefieldcase": "preserve_field_case",
}
_SETTINGS_KEYS = {
    "connect": "connect",
    "config": "config",
}


def _normalize_key(key: Any) -> str:
    return str(key).replace("_", "").replace("-", "").lower()


def _rename_keys(data: Any, known: Mapping[str, str]) -> Any:
    if not isinstance(data, Mapping):
        return data
    renamed: dict[str, Any] = {}
    for key, value in data.items():
        renamed[known.get(_normalize_key(key), str(key))] = value
    return renamed


class EngineOptions(BaseModel):
    """Engine-wide behaviour toggles applied to every connection.

    Fields
    ──────
    open_log                 : log every SQL statement
    skip_default_transaction : run single-statement writes without their own transaction
    preserve_field_case      : keep class/attribute names verbatim as table/column names
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    open_log: bool = False
    skip_default_transaction: bool = False
    preserve_field_case: bool = False

    @model_validator(mode="before")
    @classmethod
    def _accept_config_keys(cls, data: Any) -> Any:
        return _rename_keys(data, _OPTION_KEYS)

    def to_yaml_dict(self) -> dict[str, bool]:
        return {
            "openLog": self.open_log,
            "skipDefaultTransaction": self.skip_default_transaction,
            "noLowerCase": self.preserve_field_case,
        }


class DatabaseSettings(BaseModel):
    """One database section: connection spec string + engine options."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    connect: str = Field(default=DEFAULT_CONNECT, description="Connection spec <kind>|<parameters>")
    config: EngineOptions = Field(default_factory=EngineOptions)

    @model_validator(mode="before")
    @classmethod
    def _accept_config_keys(cls, data: Any) -> Any:
        data = _rename_keys(data, _SETTINGS_KEYS)
        if isinstance(data, dict) and data.get("config") is None:
            data.pop("config", None)
        return data

    @field_validator("connect")
    @classmethod
    def _connect_not_blank(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("connect is required and cannot be empty")
        return v.strip()

    @classmethod
    def default(cls) -> DatabaseSettings:
        """Settings written into a fresh config file."""
        return cls(
            connect=DEFAULT_CONNECT,
            config=EngineOptions(skip_default_transaction=True, preserve_field_case=True),
        )

    def to_yaml_dict(self) -> dict[str, Any]:
        return {"connect": self.connect, "config": self.config.to_yaml_dict()}


class RepokitSettings(BaseSettings):
    """Process-level settings (``REPOKIT_*`` environment variables).

    Fields
    ──────
    config_path     : YAML file holding the database sections
    default_section : section used when none is given
    log_level       : structlog log level
    log_format      : "json" or "console"
    """

    model_config = SettingsConfigDict(
        env_prefix="REPOKIT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    config_path: Path = Field(default=DEFAULT_CONFIG_PATH)
    default_section: str = Field(default=DEFAULT_SECTION)
    log_level: str = Field(default="INFO")
    log_format: str = Field(default="console")


_settings_cache: dict[str, RepokitSettings] = {}


def get_settings(*, _force_reload: bool = False) -> RepokitSettings:
    """Load and cache :class:`RepokitSettings`."""
    if _force_reload or "default" not in _settings_cache:
        _settings_cache["default"] = RepokitSettings()
    return _settings_cache["default"]


def clear_settings_cache() -> None:
    """Clear the settings cache (primarily for testing)."""
    _settings_cache.clear()


__all__ = [
    "DEFAULT_CONNECT",
    "DEFAULT_SECTION",
    "DEFAULT_CONFIG_PATH",
    "EngineOptions",
    "DatabaseSettings",
    "RepokitSettings",
    "get_settings",
    "clear_settings_cache",
]

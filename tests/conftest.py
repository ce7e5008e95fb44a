"""
Shared pytest fixtures for repokit tests.

This module provides:
- Isolation of REPOKIT_* settings and the config file location
- In-memory and file-backed SQLite engines
- Ready repositories for the shared test entities

No database server is needed; client/server adapters are tested at the
URL-building level.
"""

from __future__ import annotations

from collections.abc import Generator
from pathlib import Path

import pytest
from sqlalchemy.engine import Engine

from repokit.config import DatabaseSettings, EngineOptions, clear_settings_cache
from repokit.engine import create_repo_engine
from repokit.repository import GenericRepository
from tests._support.entities import Device, DeviceLog


# =============================================================================
# Settings isolation
# =============================================================================


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Generator[Path, None, None]:
    """Point REPOKIT_CONFIG_PATH at a temp file and reset cached settings."""
    config_path = tmp_path / "config.yaml"
    for key in ("REPOKIT_DEFAULT_SECTION", "REPOKIT_LOG_LEVEL", "REPOKIT_LOG_FORMAT"):
        monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("REPOKIT_CONFIG_PATH", str(config_path))
    monkeypatch.chdir(tmp_path)
    clear_settings_cache()
    yield config_path
    clear_settings_cache()


@pytest.fixture
def config_path(isolated_settings: Path) -> Path:
    return isolated_settings


# =============================================================================
# Engines
# =============================================================================


@pytest.fixture
def memory_engine() -> Generator[Engine, None, None]:
    """Private in-memory SQLite database."""
    engine = create_repo_engine(DatabaseSettings(connect="sqlite|:memory:"))
    yield engine
    engine.dispose()


@pytest.fixture
def sqlite_path(tmp_path: Path) -> Path:
    """Database file inside a not-yet-existing directory."""
    return tmp_path / "db" / "data.db"


@pytest.fixture
def file_engine(sqlite_path: Path) -> Generator[Engine, None, None]:
    engine = create_repo_engine(DatabaseSettings(connect=f"sqlite|{sqlite_path}"))
    yield engine
    engine.dispose()


# =============================================================================
# Repositories
# =============================================================================


@pytest.fixture
def device_repo(memory_engine: Engine) -> GenericRepository[Device]:
    return GenericRepository(memory_engine, Device)


@pytest.fixture
def log_repo(memory_engine: Engine) -> GenericRepository[DeviceLog]:
    return GenericRepository(memory_engine, DeviceLog)


@pytest.fixture
def file_device_repo(file_engine: Engine) -> GenericRepository[Device]:
    """Repository on a file database (separate pooled connections)."""
    return GenericRepository(file_engine, Device)


@pytest.fixture
def autocommit_repo(file_engine: Engine) -> GenericRepository[Device]:
    return GenericRepository(file_engine, Device, options=EngineOptions(skip_default_transaction=True))

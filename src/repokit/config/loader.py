"""
YAML config file: database section lookup and default generation.

Lookup order for a section (keys are case-insensitive)::

    <module-name>.<section>    (nested: ``MyModule: {Main: {...}}``)
    <section>                  (top level: ``Main: {...}``)
    generated default          (appended to the file with comments)

The config file location comes from the explicit ``config_path`` argument,
else ``REPOKIT_CONFIG_PATH``, else ``./config.yaml``.

Tags:
    repokit, configuration, yaml, loader
"""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from repokit.errors import InvalidConfigError, StorageError
from repokit.logging import get_logger
from repokit.paths import ensure_parent_dir, resolve_path

from .identity import ModuleIdentity
from .settings import DEFAULT_SECTION, DatabaseSettings, get_settings

logger = get_logger(__name__)

_BANNER_WIDTH = 31

_MISSING = object()

_HELP_LINES = (
    "# connect: connection string",
    "#   sqlite|./db/data.db&OFF  OFF=(DELETE/MEMORY/WAL/OFF)",
    "#   sqlserver|user:password@host?database=name",
    "#   mysql|user:password@tcp(127.0.0.1:3306)/name?charset=utf8mb4&parseTime=True&loc=Local",
    "#   postgres|host=127.0.0.1 user=app password=secret dbname=name port=5432 sslmode=disable",
    "# config: other settings",
    "#   openLog: log every SQL statement",
    "#   skipDefaultTransaction: do not wrap single writes in their own transaction",
    "#   noLowerCase: keep entity class and field names as-is instead of lower snake_case",
)


def resolve_config_path(config_path: str | Path | None = None) -> Path:
    """Explicit path, else ``REPOKIT_CONFIG_PATH``, else ``./config.yaml``."""
    return resolve_path(config_path or get_settings().config_path)


def read_config(path: str | Path) -> dict[str, Any]:
    """Parse the YAML config file.  A missing or empty file is ``{}``."""
    path = Path(path)
    if not path.is_file():
        return {}
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise InvalidConfigError(
            str(path), "<unparseable>", f"Config file {path} is not valid YAML: {e}", cause=e
        ) from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise InvalidConfigError(str(path), type(data).__name__, f"Config file {path} must hold a mapping")
    return data


def _get_ci(mapping: Mapping[str, Any], key: str) -> Any:
    if key in mapping:
        return mapping[key]
    wanted = key.lower()
    for candidate, value in mapping.items():
        if str(candidate).lower() == wanted:
            return value
    return _MISSING


def lookup(data: Mapping[str, Any], dotted_key: str, default: Any = None) -> Any:
    """Walk ``a.b.c`` through nested mappings, case-insensitively.

    A key that is present with an empty value yields ``None``; a missing
    key yields *default*.
    """
    current: Any = data
    for part in dotted_key.split("."):
        if not isinstance(current, Mapping):
            return default
        current = _get_ci(current, part)
        if current is _MISSING:
            return default
    return current


def find_section(
    data: Mapping[str, Any],
    section: str,
    identity: ModuleIdentity | None = None,
) -> tuple[Any, str | None]:
    """Return ``(raw_section, key_used)``; ``(None, None)`` when absent.

    A section written with no value (``Main:``) is found, with ``raw`` None.
    """
    if identity is not None:
        module_name = identity.get_module_info()[0]
        if module_name:
            key = f"{module_name}.{section}"
            raw = lookup(data, key, _MISSING)
            if raw is not _MISSING:
                return raw, key
    raw = lookup(data, section, _MISSING)
    if raw is not _MISSING:
        return raw, section
    return None, None


def render_default_block(section: str, settings: DatabaseSettings | None = None) -> str:
    """The commented YAML block written for a missing section."""
    settings = settings or DatabaseSettings.default()
    banner = "#" * _BANNER_WIDTH
    lines = [
        f"{banner} {section} DB Config {banner}",
        f"# {section} database settings",
        *_HELP_LINES,
    ]
    body = yaml.safe_dump(
        {section: settings.to_yaml_dict()},
        sort_keys=False,
        default_flow_style=False,
    )
    return "\n".join(lines) + "\n" + body


def write_default_block(
    path: str | Path,
    section: str,
    settings: DatabaseSettings | None = None,
) -> bool:
    """Append the default block for *section* unless the file already has it.

    Returns True if the file was written.  Failing to write is logged and
    reported as False: the defaults are still usable in memory.
    """
    block = render_default_block(section, settings)
    path = Path(path)
    try:
        existing = path.read_text(encoding="utf-8") if path.is_file() else ""
        if block in existing:
            return False
        ensure_parent_dir(path)
        separator = "" if not existing or existing.endswith("\n\n") else (
            "\n" if existing.endswith("\n") else "\n\n"
        )
        with path.open("a", encoding="utf-8") as fh:
            fh.write(separator + block)
    except (OSError, StorageError) as e:
        logger.warning("default_config_write_failed", path=str(path), section=section, error=str(e))
        return False

    logger.info("default_config_written", path=str(path), section=section)
    return True


def load_database_settings(
    section: str = DEFAULT_SECTION,
    identity: ModuleIdentity | None = None,
    *,
    config_path: str | Path | None = None,
    write_default: bool = True,
) -> DatabaseSettings:
    """Resolve one database section from the YAML config file.

    Raises :class:`InvalidConfigError` when the file or the section contents
    are malformed.  A missing section yields :meth:`DatabaseSettings.default`
    (and, with ``write_default``, appends the commented default block).
    """
    path = resolve_config_path(config_path)
    data = read_config(path)
    raw, key = find_section(data, section, identity)

    if key is None:
        settings = DatabaseSettings.default()
        if write_default:
            write_default_block(path, section, settings)
        return settings

    if not isinstance(raw, Mapping):
        raise InvalidConfigError(key, raw, f"Config section {key!r} must be a mapping").with_context(
            section=section
        )
    try:
        return DatabaseSettings.model_validate(dict(raw))
    except ValidationError as e:
        raise InvalidConfigError(key, dict(raw), f"Invalid config section {key!r}: {e}", cause=e).with_context(
            section=section
        ) from e


__all__ = [
    "resolve_config_path",
    "read_config",
    "lookup",
    "find_section",
    "render_default_block",
    "write_default_block",
    "load_database_settings",
]

"""
Configuration for repokit.

Manifesto:
    The database a host uses is decided in its config file, not in code.
    A section holds one connection spec plus a few engine toggles; it is
    read once at startup and never changes afterwards.  When the section
    is missing a commented default is written so the operator has
    something to edit.

    Configuration is passed explicitly: the loader takes the module
    identity and the file path as arguments instead of reading a global.

Modules
-------
settings   DatabaseSettings / EngineOptions models, REPOKIT_* process settings
loader     YAML section lookup and default block generation
identity   ModuleIdentity protocol (namespace for section lookups)

Tags:
    repokit, configuration, yaml, pydantic
"""

from .identity import ModuleIdentity, ModuleInfo
from .loader import (
    find_section,
    load_database_settings,
    read_config,
    render_default_block,
    resolve_config_path,
    write_default_block,
)
from .settings import (
    DEFAULT_CONNECT,
    DEFAULT_SECTION,
    DatabaseSettings,
    EngineOptions,
    RepokitSettings,
    clear_settings_cache,
    get_settings,
)

__all__ = [
    # Identity
    "ModuleIdentity",
    "ModuleInfo",
    # Settings
    "DEFAULT_CONNECT",
    "DEFAULT_SECTION",
    "DatabaseSettings",
    "EngineOptions",
    "RepokitSettings",
    "get_settings",
    "clear_settings_cache",
    # Loader
    "resolve_config_path",
    "read_config",
    "find_section",
    "render_default_block",
    "write_default_block",
    "load_database_settings",
]

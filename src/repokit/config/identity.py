"""Module identity: the namespace used for config section lookups."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, runtime_checkable


@runtime_checkable
class ModuleIdentity(Protocol):
    """Anything that can name the host module.

    Only the name is used: ``<name>.<section>`` is looked up before the bare
    ``<section>`` in the config file.
    """

    def get_module_info(self) -> tuple[str, str, str]:
        """Return ``(name, description, version)``."""
        ...


@dataclass(frozen=True)
class ModuleInfo:
    """Plain :class:`ModuleIdentity` implementation."""

    name: str
    description: str = ""
    version: str = ""

    def get_module_info(self) -> tuple[str, str, str]:
        return self.name, self.description, self.version


__all__ = [
    "ModuleIdentity",
    "ModuleInfo",
]

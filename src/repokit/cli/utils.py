"""
CLI utility helpers — output formatting and shared options.
"""

from __future__ import annotations

import json
from typing import Any, NoReturn

import typer
from rich.console import Console

from repokit.config import ModuleInfo
from repokit.errors import RepokitError

console = Console()
err_console = Console(stderr=True)


# ── Shared option helpers ────────────────────────────────────────────────


def section_option() -> Any:
    return typer.Option(None, "--section", "-s", help="Config section (defaults to REPOKIT_DEFAULT_SECTION)")


def config_option() -> Any:
    return typer.Option(None, "--config", "-c", help="Config file (defaults to REPOKIT_CONFIG_PATH)")


def module_option() -> Any:
    return typer.Option(None, "--module", "-m", help="Module name; <module>.<section> is tried first")


def identity_for(module: str | None) -> ModuleInfo | None:
    return ModuleInfo(module) if module else None


# ── Output helpers ───────────────────────────────────────────────────────


def fail(error: RepokitError) -> NoReturn:
    """Print a repokit error and exit non-zero."""
    err_console.print(f"[bold red]Error[/bold red] ({error.category.value}): {error.message}")
    raise typer.Exit(code=1)


def print_mapping(data: dict[str, Any], *, title: str = "", as_json: bool = False) -> None:
    """Render a dict as JSON or as key-value pairs."""
    if as_json:
        console.print_json(json.dumps(data, default=str))
        return
    if title:
        console.print(f"[bold]{title}[/bold]")
    for k, v in data.items():
        console.print(f"  [cyan]{k}[/cyan]: {v}")

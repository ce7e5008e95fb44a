"""
CLI: ``repokit config`` — database config sections.
"""

from __future__ import annotations

from pathlib import Path

import typer

from repokit.cli.utils import (
    config_option,
    console,
    fail,
    identity_for,
    module_option,
    print_mapping,
    section_option,
)
from repokit.config import (
    find_section,
    get_settings,
    load_database_settings,
    read_config,
    resolve_config_path,
    write_default_block,
)
from repokit.errors import RepokitError

app = typer.Typer(no_args_is_help=True)


@app.command("init")
def init_config(
    section: str | None = section_option(),
    config: Path | None = config_option(),
) -> None:
    """Append the commented default block for a section to the config file."""
    section = section or get_settings().default_section
    path = resolve_config_path(config)

    if write_default_block(path, section):
        console.print(f"[green]✓[/green] Wrote default [bold]{section}[/bold] section to {path}")
    else:
        console.print(f"[dim]{path} already holds the default {section} section (or is not writable).[/dim]")


@app.command("show")
def show_config(
    section: str | None = section_option(),
    config: Path | None = config_option(),
    module: str | None = module_option(),
    json_out: bool = typer.Option(False, "--json", help="JSON output"),
) -> None:
    """Show what a database section resolves to."""
    section = section or get_settings().default_section
    path = resolve_config_path(config)
    identity = identity_for(module)

    try:
        _raw, key = find_section(read_config(path), section, identity)
        settings = load_database_settings(section, identity, config_path=path, write_default=False)
    except RepokitError as e:
        fail(e)

    data = {
        "file": str(path),
        "section": key or f"{section} (not found, defaults)",
        **settings.to_yaml_dict(),
    }
    print_mapping(data, title="Database Config", as_json=json_out)

"""
CLI: ``repokit db`` — connectivity checks.
"""

from __future__ import annotations

from pathlib import Path

import typer
from sqlalchemy import text

from repokit.adapters import DatabaseType
from repokit.cli.utils import (
    config_option,
    console,
    fail,
    identity_for,
    module_option,
    print_mapping,
    section_option,
)
from repokit.database import init_database
from repokit.errors import RepokitError

app = typer.Typer(no_args_is_help=True)


@app.command("check")
def check(
    section: str | None = section_option(),
    config: Path | None = config_option(),
    module: str | None = module_option(),
    json_out: bool = typer.Option(False, "--json", help="JSON output"),
) -> None:
    """Open the configured database and report what answered."""
    try:
        db = init_database(section, identity_for(module), config_path=config, write_default=False)
    except RepokitError as e:
        fail(e)

    with db:
        data = {
            "section": db.section,
            "backend": db.spec.kind.value,
            "url": db.engine.url.render_as_string(hide_password=True),
            "skip_default_transaction": db.settings.config.skip_default_transaction,
            "preserve_field_case": db.settings.config.preserve_field_case,
        }
        if db.spec.kind is DatabaseType.SQLITE:
            with db.engine.connect() as conn:
                data["journal_mode"] = conn.execute(text("PRAGMA journal_mode")).scalar()

    if not json_out:
        console.print("[green]✓[/green] Database reachable")
    print_mapping(data, title="" if json_out else "Database", as_json=json_out)

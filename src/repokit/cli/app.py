"""
Root Typer application for the repokit CLI.
"""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as pkg_version

import typer
from typer import Typer

from repokit.config import get_settings
from repokit.logging import configure_logging

app = Typer(
    name="repokit",
    help="repokit — configuration-driven repository layer over SQLite, SQL Server, MySQL and PostgreSQL.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


# ── Version callback ─────────────────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        try:
            v = pkg_version("repokit")
        except PackageNotFoundError:
            v = "0.1.0"
        typer.echo(f"repokit {v}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(  # noqa: UP007
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
    log_level: str | None = typer.Option(
        None, "--log-level", help="Log level (defaults to REPOKIT_LOG_LEVEL)."
    ),
) -> None:
    """repokit CLI — database config sections and connectivity checks."""
    settings = get_settings()
    configure_logging(
        level=log_level or settings.log_level,
        json_format=settings.log_format == "json",
    )


# ── Sub-command registration ─────────────────────────────────────────────

from repokit.cli.config import app as config_app  # noqa: E402
from repokit.cli.db import app as db_app  # noqa: E402

app.add_typer(config_app, name="config", help="Configuration file management.")
app.add_typer(db_app, name="db", help="Database connectivity.")

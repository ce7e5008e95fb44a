"""
CLI layer for repokit.

Operator commands for the database configuration of a host application:
write the default config section, show what a section resolves to, and
check that the configured database answers.  All logic lives in
``repokit.config`` / ``repokit.database``; this package only handles
argument parsing and terminal output.

Entry point::

    repokit --help
"""

from repokit.cli.app import app

__all__ = ["app"]

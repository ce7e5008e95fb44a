"""
Connection spec parsing.

Grammar::

    sqlite|<filePath>&<journalMode>        journalMode ∈ DELETE/MEMORY/WAL/OFF/""
    sqlserver|<user>:<password>@<host>?<query>
    mysql|<dsn>
    postgres|<dsn>

Only the first ``|`` separates the kind, so DSNs may contain ``|``.
"""

from __future__ import annotations

from repokit.errors import ConnectionSpecError

from .types import ConnectionSpec, DatabaseType, JournalMode

_KIND_ALIASES = {
    "postgresql": DatabaseType.POSTGRES,
}


def _parse_kind(spec: str, token: str) -> DatabaseType:
    if token in _KIND_ALIASES:
        return _KIND_ALIASES[token]
    try:
        return DatabaseType(token)
    except ValueError:
        known = ", ".join(t.value for t in DatabaseType)
        raise ConnectionSpecError(
            spec, f"Unknown database kind {token!r} (expected one of: {known})"
        ) from None


def _parse_sqlite(spec: str, params: str) -> ConnectionSpec:
    path, _, mode = params.partition("&")
    path = path.strip()
    if not path:
        raise ConnectionSpecError(spec, "sqlite connection spec is missing the file path")

    mode = mode.strip().upper()
    if mode:
        try:
            JournalMode(mode)
        except ValueError:
            allowed = "/".join(m.value for m in JournalMode)
            raise ConnectionSpecError(
                spec, f"Unknown sqlite journal mode {mode!r} (expected {allowed} or empty)"
            ) from None
    return ConnectionSpec(
        kind=DatabaseType.SQLITE,
        primary_param=path,
        options=(mode,) if mode else (),
    )


def _parse_sqlserver(spec: str, params: str) -> ConnectionSpec:
    if "@" not in params:
        raise ConnectionSpecError(
            spec, "sqlserver connection spec must look like <user>:<password>@<host>?<query>"
        )
    return ConnectionSpec(kind=DatabaseType.SQLSERVER, primary_param=params)


def parse_connection_spec(spec: str) -> ConnectionSpec:
    """Parse ``<kind>|<params>`` into a :class:`ConnectionSpec`.

    Raises :class:`ConnectionSpecError` when the ``|`` is missing, the kind
    is unknown, or the kind-specific parameters are malformed.
    """
    if not isinstance(spec, str) or "|" not in spec:
        raise ConnectionSpecError(
            str(spec), "Connection spec must look like <kind>|<parameters>"
        )

    token, _, params = spec.partition("|")
    kind = _parse_kind(spec, token)
    params = params.strip()

    match kind:
        case DatabaseType.SQLITE:
            return _parse_sqlite(spec, params)
        case DatabaseType.SQLSERVER:
            return _parse_sqlserver(spec, params)
        case _:
            if not params:
                raise ConnectionSpecError(spec, f"{kind.value} connection spec is missing the DSN")
            return ConnectionSpec(kind=kind, primary_param=params)


__all__ = [
    "parse_connection_spec",
]

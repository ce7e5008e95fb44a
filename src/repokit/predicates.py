"""
Caller-supplied predicates with positional ``?`` placeholders.

Repository queries accept a SQL boolean expression over column names plus
positional arguments, the same shape application code already writes::

    repo.get_conditions("summary = ? AND id > ?", "boot", 10)
    repo.get_conditions("id IN ?", [1, 2, 3])

:func:`bind_predicate` rewrites each ``?`` into a named SQLAlchemy bind
(``:p0``, ``:p1``, ...) and binds the values, so arguments are always sent
as parameters and never spliced into the SQL text.  List, tuple and set
arguments become expanding binds (``IN`` lists).

A ``?`` inside a single-quoted literal is left alone.  Literal colons are
escaped so they are not mistaken for bind names.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from sqlalchemy import TextClause, bindparam, text

from repokit.errors import QueryError

_EXPANDING_TYPES = (list, tuple, set, frozenset)


def rewrite_placeholders(sql: str) -> tuple[str, int]:
    """Rewrite ``?`` into ``:p0, :p1, ...``.

    Returns the rewritten SQL and the number of placeholders found.
    """
    rewritten: list[str] = []
    idx = 0
    in_quote = False
    for ch in sql:
        if ch == "'":
            in_quote = not in_quote
            rewritten.append(ch)
        elif ch == ":":
            rewritten.append("\\:")
        elif ch == "?" and not in_quote:
            rewritten.append(f":p{idx}")
            idx += 1
        else:
            rewritten.append(ch)
    return "".join(rewritten), idx


def bind_predicate(predicate: str, args: Sequence[Any] = ()) -> TextClause:
    """Build a bound ``TextClause`` from a ``?`` predicate and its arguments."""
    if not predicate or not predicate.strip():
        raise QueryError("Predicate must be a non-empty SQL expression")

    sql, count = rewrite_placeholders(predicate)
    if count != len(args):
        raise QueryError(
            f"Predicate has {count} placeholder(s) but {len(args)} argument(s) were given"
        ).with_context(predicate=predicate)

    params = []
    for i, value in enumerate(args):
        if isinstance(value, _EXPANDING_TYPES):
            params.append(bindparam(f"p{i}", value=list(value), expanding=True))
        else:
            params.append(bindparam(f"p{i}", value=value))
    return text(sql).bindparams(*params)


def order_clause(order: str) -> TextClause:
    """Wrap an ``ORDER BY`` fragment such as ``"last_time DESC"``."""
    if not order or not order.strip():
        raise QueryError("Order must be a non-empty SQL fragment")
    return text(order.replace(":", "\\:"))


__all__ = [
    "rewrite_placeholders",
    "bind_predicate",
    "order_clause",
]

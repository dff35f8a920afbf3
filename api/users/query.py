"""
Query specifications for ranking reads over the `users` table.

A `QuerySpec` carries a filter, a sort and a limit. `compile_query` turns it
into one parameterized SELECT; column names and operators are checked against
allowlists because they are rendered into the SQL text.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .decades import DECADE_COLUMNS

TABLE = "users"

RECORD_COLUMNS: tuple[str, ...] = ("name", "email", "score", *DECADE_COLUMNS.values())

_OPERATORS = frozenset({"=", ">", ">=", "<", "<="})
_DIRECTIONS = frozenset({"ASC", "DESC"})


@dataclass(frozen=True)
class Condition:
    column: str
    op: str
    value: Any


@dataclass(frozen=True)
class QuerySpec:
    where: tuple[Condition, ...] = ()
    order_by: tuple[tuple[str, str], ...] = (("score", "DESC"),)
    limit: int = 50


@dataclass(frozen=True)
class CompiledQuery:
    sql: str
    args: tuple[Any, ...] = field(default_factory=tuple)


def _check_column(column: str) -> str:
    if column not in RECORD_COLUMNS:
        raise ValueError(f"Unknown column: {column!r}")
    return column


def select_columns() -> str:
    return ", ".join(RECORD_COLUMNS)


def compile_query(spec: QuerySpec) -> CompiledQuery:
    if spec.limit < 1:
        raise ValueError("limit must be >= 1.")

    args: list[Any] = []
    clauses: list[str] = []
    for cond in spec.where:
        if cond.op not in _OPERATORS:
            raise ValueError(f"Unsupported operator: {cond.op!r}")
        args.append(cond.value)
        clauses.append(f"{_check_column(cond.column)} {cond.op} ${len(args)}")

    ordering: list[str] = []
    for column, direction in spec.order_by:
        direction = direction.upper()
        if direction not in _DIRECTIONS:
            raise ValueError(f"Unsupported sort direction: {direction!r}")
        ordering.append(f"{_check_column(column)} {direction}")
    # Equal sort keys fall back to insertion order.
    ordering.append("id ASC")

    args.append(spec.limit)
    parts = [f"SELECT {select_columns()}", f"FROM {TABLE}"]
    if clauses:
        parts.append("WHERE " + " AND ".join(clauses))
    parts.append("ORDER BY " + ", ".join(ordering))
    parts.append(f"LIMIT ${len(args)}")
    return CompiledQuery(sql="\n".join(parts), args=tuple(args))

"""
User record persistence (raw SQL).

`email` is the business key but carries no unique constraint: when duplicate
rows exist, lookups and updates address the earliest-inserted one.
"""

from __future__ import annotations

import logging

from core import db

from .decades import DECADE_COLUMNS
from .query import TABLE, QuerySpec, compile_query, select_columns

logger = logging.getLogger(__name__)

INSERT_TIMEOUT_S = 5.0


def _schema_statements() -> list[tuple[str, str]]:
    counters = ",\n".join(f"    {column} integer NOT NULL DEFAULT 0" for column in DECADE_COLUMNS.values())
    statements = [
        (
            "table",
            f"""
            CREATE TABLE IF NOT EXISTS {TABLE} (
                id bigserial PRIMARY KEY,
                name text NOT NULL,
                email text NOT NULL,
                score integer NOT NULL DEFAULT 0,
            {counters},
                created_at timestamptz NOT NULL DEFAULT now()
            )
            """,
        ),
        ("score_index", f"CREATE INDEX IF NOT EXISTS score_index ON {TABLE} (score DESC)"),
    ]
    for column in DECADE_COLUMNS.values():
        name = f"{column}_index"
        statements.append((name, f"CREATE INDEX IF NOT EXISTS {name} ON {TABLE} ({column} DESC)"))
    return statements


class UserRepository:
    def __init__(self, database: db.Database) -> None:
        self._db = database

    async def ensure_schema(self) -> None:
        """
        Create the users table plus one descending index on `score` and on
        each decade counter. Raises `db.StoreError` if any statement fails.
        """
        for name, sql in _schema_statements():
            await self._db.execute(sql)
            logger.info("schema_ensured object=%s", name)

    async def find_by_email(self, email: str) -> dict | None:
        return await self._db.fetch_one(
            f"""
            SELECT {select_columns()}
            FROM {TABLE}
            WHERE email = $1
            ORDER BY id ASC
            LIMIT 1
            """,
            email,
        )

    async def insert(self, *, name: str, email: str, score: int) -> dict:
        row = await self._db.fetch_one(
            f"""
            INSERT INTO {TABLE} (name, email, score)
            VALUES ($1, $2, $3)
            RETURNING {select_columns()}
            """,
            name,
            email,
            score,
            timeout=INSERT_TIMEOUT_S,
        )
        if row is None:
            raise db.StoreError("Failed to insert user.")
        return row

    async def update_score(self, *, email: str, score: int, decade_column: str | None = None) -> dict | None:
        """
        Overwrite `score` and, when `decade_column` is given, increment that
        counter by one. Both changes commit in a single statement and the row
        is returned as it stands after the update.
        """
        assignments = ["score = $2"]
        if decade_column is not None:
            if decade_column not in DECADE_COLUMNS.values():
                raise ValueError(f"Unknown decade column: {decade_column!r}")
            assignments.append(f"{decade_column} = {decade_column} + 1")

        return await self._db.fetch_one(
            f"""
            UPDATE {TABLE}
            SET {", ".join(assignments)}
            WHERE id = (
                SELECT id
                FROM {TABLE}
                WHERE email = $1
                ORDER BY id ASC
                LIMIT 1
            )
            RETURNING {select_columns()}
            """,
            email,
            score,
        )

    async def find(self, spec: QuerySpec) -> list[dict]:
        query = compile_query(spec)
        return await self._db.fetch_all(query.sql, *query.args)

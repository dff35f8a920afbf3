"""
Async database access helpers (raw SQL) using asyncpg.

This module owns the connection pool. FastAPI connects it once on startup and
closes it on shutdown (see `api/main.py`).

SQL parameter style:
- asyncpg uses positional placeholders: $1, $2, $3, ...
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

import asyncpg

from . import config

logger = logging.getLogger(__name__)

_STORE_ERRORS = (asyncpg.PostgresError, asyncpg.InterfaceError, OSError, asyncio.TimeoutError)

_database: Database | None = None
_connect_error: BaseException | None = None
_connect_lock = asyncio.Lock()


# Store failures are explicit and separable from caller errors.
class StoreError(RuntimeError):
    pass


def _sanitize_database_url(url: str) -> str:
    parts = urlsplit(url)
    if not parts.query:
        return url

    params = [(k, v) for (k, v) in parse_qsl(parts.query, keep_blank_values=True) if k != "sslmode"]
    query = urlencode(params)
    return urlunsplit((parts.scheme, parts.netloc, parts.path, query, parts.fragment))


def database_url() -> str:
    return _sanitize_database_url(config.require_env("DATABASE_URL"))


def _record_to_dict(record: asyncpg.Record) -> dict[str, Any]:
    return dict(record)


class Database:
    """
    Thin wrapper around a shared asyncpg pool.

    Every call is bounded by a timeout; driver errors and timeouts surface as
    `StoreError`. No call is retried.
    """

    def __init__(self, pool: asyncpg.Pool, *, timeout_s: float = 10.0) -> None:
        self._pool = pool
        self.timeout_s = timeout_s

    def _timeout(self, timeout: float | None) -> float:
        return self.timeout_s if timeout is None else timeout

    async def fetch_one(self, sql: str, *args: Any, timeout: float | None = None) -> dict[str, Any] | None:
        """
        Run a query and return a single row as a dict (or None).
        """
        try:
            row = await self._pool.fetchrow(sql, *args, timeout=self._timeout(timeout))
        except _STORE_ERRORS as exc:
            raise StoreError(f"fetch_one failed: {exc!r}") from exc
        return _record_to_dict(row) if row is not None else None

    async def fetch_all(self, sql: str, *args: Any, timeout: float | None = None) -> list[dict[str, Any]]:
        """
        Run a query and return all rows as a list of dicts.
        """
        try:
            rows = await self._pool.fetch(sql, *args, timeout=self._timeout(timeout))
        except _STORE_ERRORS as exc:
            raise StoreError(f"fetch_all failed: {exc!r}") from exc
        return [_record_to_dict(r) for r in rows]

    async def execute(self, sql: str, *args: Any, timeout: float | None = None) -> None:
        """
        Run a statement (INSERT/UPDATE/DDL). No result returned.
        """
        try:
            await self._pool.execute(sql, *args, timeout=self._timeout(timeout))
        except _STORE_ERRORS as exc:
            raise StoreError(f"execute failed: {exc!r}") from exc

    async def close(self) -> None:
        await self._pool.close()


async def _create_database() -> Database:
    timeout_s = config.env_float("DB_COMMAND_TIMEOUT_S", 10.0)
    try:
        pool = await asyncpg.create_pool(
            dsn=database_url(),
            min_size=config.env_int("DB_POOL_MIN_SIZE", 1),
            max_size=config.env_int("DB_POOL_MAX_SIZE", 5),
            command_timeout=timeout_s,
            timeout=timeout_s,
        )
    except _STORE_ERRORS as exc:
        raise StoreError(f"Could not connect to database: {exc!r}") from exc
    logger.info("db_pool_created min_size=%s max_size=%s", pool.get_min_size(), pool.get_max_size())
    return Database(pool, timeout_s=timeout_s)


async def connect() -> Database:
    """
    Create the shared database handle exactly once per process.

    Concurrent first callers wait on the same lock; the outcome (handle or
    failure) is remembered and returned to every later caller.
    """
    global _database, _connect_error
    async with _connect_lock:
        if _connect_error is not None:
            raise _connect_error
        if _database is None:
            try:
                _database = await _create_database()
            except Exception as exc:
                _connect_error = exc
                raise
    return _database


async def disconnect() -> None:
    global _database
    if _database is None:
        return None
    await _database.close()
    _database = None

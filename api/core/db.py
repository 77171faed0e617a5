"""
Async database access helpers (raw SQL) using asyncpg.

Two logical stores are kept apart so card data can live behind its own
credentials:
- `card_store`: the card-data database (CARD_DATABASE_URL)
- `operations_store`: the general operations database (DATABASE_URL)

FastAPI initializes both pools on startup and closes them on shutdown
(see `api/main.py`).

SQL parameter style:
- statements are written with `?` placeholders
- they are rewritten to asyncpg's positional $1, $2, ... before execution
- values are always passed as bound arguments, never formatted into the text
"""

from __future__ import annotations

import asyncio
import logging
import os
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

import asyncpg

logger = logging.getLogger(__name__)

# asyncio.TimeoutError (command_timeout) is not an OSError before Python 3.11.
_DRIVER_ERRORS = (asyncpg.PostgresError, asyncpg.InterfaceError, OSError, asyncio.TimeoutError)


class StorageError(RuntimeError):
    def __init__(self, store: str, message: str) -> None:
        super().__init__(f"[{store}] {message}")
        self.store = store


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _sanitize_database_url(url: str) -> str:
    parts = urlsplit(url)
    if not parts.query:
        return url

    params = [(k, v) for (k, v) in parse_qsl(parts.query, keep_blank_values=True) if k != "sslmode"]
    query = urlencode(params)
    return urlunsplit((parts.scheme, parts.netloc, parts.path, query, parts.fragment))


def database_url(env_var: str = "DATABASE_URL") -> str:
    url = os.environ.get(env_var, "").strip()
    if not url and env_var != "DATABASE_URL":
        # A single database is fine for local development.
        url = os.environ.get("DATABASE_URL", "").strip()
    if not url:
        raise RuntimeError(f"{env_var} is not set.")
    return _sanitize_database_url(url)


def to_numeric_placeholders(sql: str) -> str:
    """
    Rewrite `?` placeholders into asyncpg's `$1, $2, ...` style.

    A `?` inside a single-quoted literal is kept as-is.
    """
    out: list[str] = []
    index = 0
    in_literal = False
    for ch in sql:
        if ch == "'":
            in_literal = not in_literal
            out.append(ch)
        elif ch == "?" and not in_literal:
            index += 1
            out.append(f"${index}")
        else:
            out.append(ch)
    return "".join(out)


def rows_affected(status: str | None) -> int:
    """
    Parse the row count from an asyncpg command status, e.g. "UPDATE 3" or "INSERT 0 1".
    """
    last = (status or "").strip().rsplit(" ", 1)[-1]
    return int(last) if last.isdigit() else 0


class StoreSession:
    """
    Statement helpers bound to one connection (used inside `Store.transaction()`).
    """

    def __init__(self, name: str, conn: asyncpg.Connection) -> None:
        self.name = name
        self._conn = conn

    async def execute(self, sql: str, *args: Any) -> None:
        try:
            await self._conn.execute(to_numeric_placeholders(sql), *args)
        except _DRIVER_ERRORS as exc:
            raise StorageError(self.name, str(exc)) from exc

    async def update(self, sql: str, *args: Any) -> int:
        try:
            status = await self._conn.execute(to_numeric_placeholders(sql), *args)
        except _DRIVER_ERRORS as exc:
            raise StorageError(self.name, str(exc)) from exc
        return rows_affected(status)


class Store:
    """
    One logical database: owns its connection pool.
    """

    def __init__(self, name: str, env_var: str) -> None:
        self.name = name
        self.env_var = env_var
        self._pool: asyncpg.Pool | None = None

    async def init_pool(self) -> None:
        if self._pool is not None:
            return None
        self._pool = await asyncpg.create_pool(
            dsn=database_url(self.env_var),
            min_size=_env_int("DB_POOL_MIN_SIZE", 1),
            max_size=_env_int("DB_POOL_MAX_SIZE", 5),
            command_timeout=_env_int("DB_COMMAND_TIMEOUT", 30),
        )
        logger.info("db_pool_ready store=%s", self.name)

    async def close_pool(self) -> None:
        if self._pool is None:
            return None
        await self._pool.close()
        self._pool = None

    def pool(self) -> asyncpg.Pool:
        if self._pool is None:
            raise RuntimeError(f"DB pool '{self.name}' is not initialized. Call init_pool() on startup.")
        return self._pool

    async def execute(self, sql: str, *args: Any) -> None:
        """
        Run a statement (DDL or a write whose row count is not needed).
        """
        try:
            await self.pool().execute(to_numeric_placeholders(sql), *args)
        except _DRIVER_ERRORS as exc:
            raise StorageError(self.name, str(exc)) from exc

    async def update(self, sql: str, *args: Any) -> int:
        """
        Run an INSERT/UPDATE/DELETE and return the number of affected rows.
        """
        try:
            status = await self.pool().execute(to_numeric_placeholders(sql), *args)
        except _DRIVER_ERRORS as exc:
            raise StorageError(self.name, str(exc)) from exc
        return rows_affected(status)

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[StoreSession]:
        """
        Run statements on one connection inside a transaction.
        Leaving the block with an exception rolls the transaction back.

        Acquire, commit and rollback failures are raised as `StorageError`;
        errors raised by the block itself pass through unchanged.
        """
        body_error: BaseException | None = None
        try:
            async with self.pool().acquire() as conn:  # type: asyncpg.Connection
                async with conn.transaction():
                    try:
                        yield StoreSession(self.name, conn)
                    except BaseException as exc:
                        body_error = exc
                        raise
        except _DRIVER_ERRORS as exc:
            if exc is body_error:
                raise
            raise StorageError(self.name, str(exc)) from exc


card_store = Store("card", "CARD_DATABASE_URL")
operations_store = Store("operations", "DATABASE_URL")

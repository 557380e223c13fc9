"""
PostgreSQL access for the document tables.

Each helper runs on its own connection, committed when the block succeeds
and rolled back when it raises. Tests install a connection override so a
whole test shares one transaction that the fixture rolls back afterwards.
"""

from contextlib import contextmanager
from typing import Any, Iterator

import psycopg
from psycopg.rows import dict_row

from nodestore.config import config

# =============================================================================
# Connection Override (for testing)
# =============================================================================

_override: psycopg.Connection | None = None


def set_connection_override(conn: psycopg.Connection) -> None:
    """Route every helper through ``conn``. Committing and closing it is up to the caller."""
    global _override
    _override = conn


def clear_connection_override() -> None:
    global _override
    _override = None


# =============================================================================
# Connection Management
# =============================================================================


@contextmanager
def get_connection() -> Iterator[psycopg.Connection]:
    if _override is not None:
        yield _override
        return

    # psycopg commits on a clean exit, rolls back on error, then closes
    with psycopg.connect(config.database_url) as conn:
        yield conn


@contextmanager
def get_cursor() -> Iterator[psycopg.Cursor]:
    """A cursor whose rows come back as dicts keyed by column name."""
    with get_connection() as conn, conn.cursor(row_factory=dict_row) as cur:
        yield cur


# =============================================================================
# Query Helpers
# =============================================================================


def execute(query: str, params: tuple = None) -> int:
    """Run a statement and return the number of affected rows."""
    with get_cursor() as cur:
        cur.execute(query, params)
        return cur.rowcount


def fetch_one(query: str, params: tuple = None) -> dict[str, Any] | None:
    with get_cursor() as cur:
        cur.execute(query, params)
        return cur.fetchone()


def fetch_all(query: str, params: tuple = None) -> list[dict[str, Any]]:
    with get_cursor() as cur:
        cur.execute(query, params)
        return cur.fetchall()


def fetch_value(query: str, params: tuple = None, default: Any = None) -> Any:
    """First column of the first row, e.g. for ``SELECT COUNT(*)``."""
    row = fetch_one(query, params)
    if row is None:
        return default
    return next(iter(row.values()), default)

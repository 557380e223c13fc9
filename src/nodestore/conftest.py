# src/nodestore/conftest.py
"""
Shared pytest fixtures.

Tests live next to the code they cover as *_test.py files. Fixtures that
touch PostgreSQL need a server at DATABASE_URL (see .env.test) and skip the
test when none answers; everything else runs without one.
"""

import os

# Must be set before nodestore.config is imported
os.environ["NODESTORE_ENV"] = "test"

from datetime import datetime, timezone
from pathlib import Path

import psycopg
import pytest
from psycopg import sql
from psycopg.rows import dict_row

from nodestore import db
from nodestore.config import config

MIGRATIONS_DIR = Path(__file__).resolve().parents[2] / "migrations"

# =============================================================================
# Database Fixtures
# =============================================================================


def _recreate_database(database_url: str) -> None:
    """Drop and create the database named in ``database_url``, via the postgres maintenance db."""
    server_url, db_name = database_url.rsplit("/", 1)
    db_name = db_name.split("?")[0]

    try:
        admin = psycopg.connect(f"{server_url}/postgres", autocommit=True, connect_timeout=3)
    except psycopg.OperationalError as e:
        pytest.skip(f"PostgreSQL not reachable: {e}")

    with admin:
        admin.execute(
            "SELECT pg_terminate_backend(pid) FROM pg_stat_activity "
            "WHERE datname = %s AND pid <> pg_backend_pid()",
            (db_name,),
        )
        admin.execute(sql.SQL("DROP DATABASE IF EXISTS {}").format(sql.Identifier(db_name)))
        admin.execute(sql.SQL("CREATE DATABASE {}").format(sql.Identifier(db_name)))


def _apply_migrations(database_url: str) -> None:
    scripts = sorted(MIGRATIONS_DIR.glob("*.sql"))
    if not scripts:
        raise FileNotFoundError(f"No migrations found in {MIGRATIONS_DIR}")

    with psycopg.connect(database_url) as conn:
        for script in scripts:
            conn.execute(script.read_text())


@pytest.fixture(scope="session")
def test_db():
    """Fresh test database with every migration applied, built once per session."""
    _recreate_database(config.database_url)
    _apply_migrations(config.database_url)
    yield config.database_url


@pytest.fixture
def db_connection(test_db):
    """
    Connection shared by every nodestore.db call during one test.

    The nodes table is emptied up front and the test's own writes are
    rolled back when it finishes.
    """
    conn = psycopg.connect(test_db)
    conn.execute("TRUNCATE nodes")
    conn.commit()

    db.set_connection_override(conn)
    try:
        yield conn
    finally:
        db.clear_connection_override()
        conn.rollback()
        conn.close()


@pytest.fixture
def db_cursor(db_connection):
    """Dict-row cursor on the test connection, for asserting on raw rows."""
    with db_connection.cursor(row_factory=dict_row) as cur:
        yield cur


# =============================================================================
# Repository Fixtures
# =============================================================================


@pytest.fixture
def node_repo(db_connection):
    from nodestore.node import NodeRepository

    return NodeRepository()


# =============================================================================
# Seed Data
# =============================================================================


def make_node(**overrides):
    """A Node with fixed, predictable values; keyword arguments replace fields."""
    from nodestore.node import Node

    values = {
        "id": "n1",
        "name": "First",
        "slug": "first",
        "state": 1,
        "type": "page",
        "tags": {"red"},
        "meta": {"color": "red"},
        "created_at": datetime(2024, 1, 1, tzinfo=timezone.utc),
        "updated_at": datetime(2024, 1, 1, tzinfo=timezone.utc),
    }
    values.update(overrides)
    return Node(**values)


@pytest.fixture
def sample_nodes(node_repo) -> list:
    """
    Three stored nodes:

    n1 First  state 1, page, tags {red},        meta color=red,              created 2024-01-01
    n2 Second state 2, post, tags {blue, red},  meta color=blue,             created 2024-02-01
    n3 Third  state 3, post, tags {green},      meta color=green, size=xl,   created 2024-03-01
    """
    nodes = [
        make_node(),
        make_node(
            id="n2",
            name="Second",
            slug="second",
            state=2,
            type="post",
            tags={"blue", "red"},
            meta={"color": "blue"},
            created_at=datetime(2024, 2, 1, tzinfo=timezone.utc),
        ),
        make_node(
            id="n3",
            name="Third",
            slug="third",
            state=3,
            type="post",
            tags={"green"},
            meta={"color": "green", "size": "xl"},
            created_at=datetime(2024, 3, 1, tzinfo=timezone.utc),
        ),
    ]
    return [node_repo.save(node) for node in nodes]


# =============================================================================
# Flask App Fixtures
# =============================================================================


@pytest.fixture
def app():
    from nodestore.app import create_app

    app = create_app()
    app.config["TESTING"] = True
    return app


@pytest.fixture
def client(app):
    return app.test_client()

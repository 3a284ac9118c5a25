"""SQLAlchemy engine and session factory for the SQLite store.

Every pooled connection gets ``PRAGMA foreign_keys=ON`` and a bounded
``busy_timeout``.  pysqlite's own transaction handling is switched off and
each transaction is opened with ``BEGIN IMMEDIATE`` instead, so the write lock
is taken up front: a read-then-write unit of work (append a view at
``max(position) + 1``) cannot interleave with another process doing the same,
and contention surfaces as "database is locked" after the timeout rather than
as a deadlock on lock upgrade.
"""

from __future__ import annotations

from pathlib import Path

from loguru import logger
from sqlalchemy import Engine, event
from sqlalchemy import create_engine as sa_create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from muxwm.workspace.db.tables import Base
from muxwm.workspace.settings import MEMORY_DATABASE


def database_url(path: str | Path) -> str:
    """Build a pysqlite URL for *path* (``:memory:`` for a private in-memory store)."""
    if str(path) == MEMORY_DATABASE:
        return "sqlite+pysqlite://"
    return f"sqlite+pysqlite:///{Path(path).expanduser()}"


def create_engine(path: str | Path, *, busy_timeout: float = 2.0, **kwargs: object) -> Engine:
    """Create a SQLite engine bound to a single connection.

    ``StaticPool`` keeps exactly one DBAPI connection for the engine's
    lifetime: the repository owns one connection, and an in-memory store
    survives between transactions.

    All defaults can be overridden via *kwargs*.
    """
    if str(path) != MEMORY_DATABASE:
        Path(path).expanduser().parent.mkdir(parents=True, exist_ok=True)

    defaults: dict[str, object] = {
        "echo": False,
        "poolclass": StaticPool,
        "connect_args": {"check_same_thread": False},
    }
    defaults.update(kwargs)
    engine = sa_create_engine(database_url(path), **defaults)  # type: ignore[arg-type]

    timeout_ms = int(busy_timeout * 1000)

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, _connection_record) -> None:  # noqa: ANN001
        # Autocommit at the driver level; BEGIN is emitted by _on_begin.
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.execute(f"PRAGMA busy_timeout={timeout_ms}")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _on_begin(conn) -> None:  # noqa: ANN001
        conn.exec_driver_sql("BEGIN IMMEDIATE")

    return engine


def create_session_factory(engine: Engine) -> sessionmaker[Session]:
    """Create a session factory bound to *engine*.

    ``expire_on_commit=False`` so that ORM instances remain readable after
    commit without reopening a transaction (which would hold the write lock).
    """
    return sessionmaker(engine, expire_on_commit=False)


def init_schema(engine: Engine) -> None:
    """Create the projects, views and pins tables if they do not exist.

    Idempotent: existing tables and rows are left untouched.
    """
    Base.metadata.create_all(engine, checkfirst=True)
    logger.debug("Schema ready on {}", engine.url)

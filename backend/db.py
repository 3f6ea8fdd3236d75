"""Database engine and session for SQLite (dev) / PostgreSQL (prod)."""
from collections.abc import Generator
import os

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from utils.config import DATABASE_URL

# Runtime safety: when TESTING=true, never use production DB.
if os.environ.get("TESTING") == "true":
    url = DATABASE_URL
    if "charging.db" in url or (":memory:" not in url and "test" not in url.lower().split("?")[0]):
        raise RuntimeError(
            "Tests must not run against production. Set TESTING_DATABASE_URL to sqlite:///:memory: "
            "(or another test URL containing :memory: or 'test')."
        )


def build_engine(database_url: str) -> Engine:
    """Create an engine; SQLite gets foreign keys and BEGIN IMMEDIATE transactions.

    pysqlite's default transaction handling breaks SAVEPOINT and lets two writers
    deadlock on lock upgrade, so SQLite connections run in autocommit mode and every
    transaction is opened explicitly with BEGIN IMMEDIATE.
    """
    is_sqlite = "sqlite" in database_url
    connect_args = {"check_same_thread": False, "timeout": 30} if is_sqlite else {}
    engine_kw = {"connect_args": connect_args, "echo": False}
    # In-memory SQLite: use one connection so all sessions share the same DB.
    if is_sqlite and ":memory:" in database_url:
        engine_kw["poolclass"] = StaticPool
    engine = create_engine(database_url, **engine_kw)

    if is_sqlite:

        @event.listens_for(engine, "connect")
        def _sqlite_connect(dbapi_conn, connection_record):
            dbapi_conn.isolation_level = None
            dbapi_conn.execute("PRAGMA foreign_keys=ON")

        @event.listens_for(engine, "begin")
        def _sqlite_begin(conn):
            conn.exec_driver_sql("BEGIN IMMEDIATE")

    return engine


_engine = build_engine(DATABASE_URL)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=_engine)


def get_db() -> Generator[Session, None, None]:
    """FastAPI dependency: yield a DB session and close after request."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

"""Database connection and session management for planmyday.

This module supports both:
- Local SQLite (default for dev)
- PostgreSQL in production via `DATABASE_URL`
"""

import os
from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.ext.declarative import declarative_base
from dotenv import load_dotenv

load_dotenv()

# Database URL - SQLite by default (local dev)
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./planmyday.db")

# Columns create_all() cannot add to a table that already exists.
# (table, column, SQLite type, Postgres type)
_LATE_COLUMNS = [
    ("tasks", "ignored", "BOOLEAN NOT NULL DEFAULT 0", "BOOLEAN NOT NULL DEFAULT FALSE"),
    ("tasks", "due_date", "DATETIME", "TIMESTAMP"),
    ("task_groups", "is_parent_group", "BOOLEAN NOT NULL DEFAULT 0", "BOOLEAN NOT NULL DEFAULT FALSE"),
    ("task_groups", "auto_schedule_enabled", "BOOLEAN NOT NULL DEFAULT 0", "BOOLEAN NOT NULL DEFAULT FALSE"),
    ("task_groups", "auto_schedule_hours", "JSON", "JSON"),
    ("task_groups", "priority", "INTEGER", "INTEGER"),
    ("users", "awake_hours", "JSON", "JSON"),
    ("users", "working_hours", "JSON", "JSON"),
]


def _is_sqlite_url(database_url: str) -> bool:
    return "sqlite" in (database_url or "")


def get_engine_kwargs(database_url: str) -> dict:
    """Return deterministic create_engine kwargs for a DB URL.

    This is separated to allow deterministic unit testing without connecting.
    """
    engine_kwargs: dict = {
        "echo": os.getenv("DEBUG", "False").lower() == "true",
        "pool_pre_ping": True,
    }

    if _is_sqlite_url(database_url):
        # SQLite-specific setting required for FastAPI concurrency in a single process.
        engine_kwargs["connect_args"] = {"check_same_thread": False}
        return engine_kwargs

    engine_kwargs["pool_size"] = int(os.getenv("DB_POOL_SIZE", "5"))
    engine_kwargs["max_overflow"] = int(os.getenv("DB_MAX_OVERFLOW", "5"))
    engine_kwargs["pool_timeout"] = int(os.getenv("DB_POOL_TIMEOUT_SEC", "30"))
    return engine_kwargs


def build_engine(database_url: str) -> Engine:
    return create_engine(database_url, **get_engine_kwargs(database_url))


# Create engine (module-level singleton)
engine = build_engine(DATABASE_URL)


@event.listens_for(Engine, "connect")
def set_sqlite_pragmas(dbapi_conn, connection_record):
    """Enable foreign keys and WAL mode on SQLite connections."""
    if _is_sqlite_url(DATABASE_URL):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.close()

# Create session factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Base class for declarative models
Base = declarative_base()


def _sqlite_table_has_column(dbapi_conn, table_name: str, column_name: str) -> bool:
    cursor = dbapi_conn.cursor()
    try:
        cursor.execute(f"PRAGMA table_info({table_name})")
        cols = [row[1] for row in cursor.fetchall()]  # row[1] is column name
        return column_name in cols
    finally:
        cursor.close()


def ensure_legacy_schema_compat(*, engine_override: Engine = None, database_url_override: str = None) -> None:
    """Add late columns to SQLite tables created by older releases.

    `create_all()` does not alter existing tables, so missing columns are
    patched in place. Tables that do not exist yet are left alone.
    """
    database_url = database_url_override or DATABASE_URL
    if not _is_sqlite_url(database_url):
        return

    use_engine = engine_override or engine

    dbapi_conn = use_engine.raw_connection()
    try:
        cursor = dbapi_conn.cursor()
        try:
            for table, column, sqlite_type, _ in _LATE_COLUMNS:
                if not _sqlite_table_has_column(dbapi_conn, table, "id"):
                    continue
                if not _sqlite_table_has_column(dbapi_conn, table, column):
                    cursor.execute(f"ALTER TABLE {table} ADD COLUMN {column} {sqlite_type}")
            dbapi_conn.commit()
        finally:
            cursor.close()
    finally:
        dbapi_conn.close()


def get_db() -> Session:
    """Get database session (dependency for FastAPI)."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db():
    """Initialize database schema.

    Creates missing tables, then adds late columns to existing ones
    (SQLite via PRAGMA checks, Postgres via ADD COLUMN IF NOT EXISTS).
    """
    Base.metadata.create_all(bind=engine)
    ensure_legacy_schema_compat()

    if not _is_sqlite_url(DATABASE_URL):
        with engine.begin() as conn:
            for table, column, _, postgres_type in _LATE_COLUMNS:
                conn.execute(text(f"ALTER TABLE {table} ADD COLUMN IF NOT EXISTS {column} {postgres_type}"))

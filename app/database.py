from typing import Any

from sqlalchemy import event
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, create_engine, Session

from app.core.config import get_settings

settings = get_settings()

# ---------------------------------------------------------
# Supabase Postgres connection (via pooler)
#
# - sslmode=require   : enforce SSL when running in the cloud
# - pool_size=1       : keep only 1 connection to the Supabase pooler
# - max_overflow=0    : do not open extra connections beyond the pool
# - pool_pre_ping=True: validate connections before using them
#
# Reason:
# Supabase Session mode limits the number of clients. If each backend
# process opens many connections (SQLAlchemy default pool_size 5+),
# you can easily hit:
#   "MaxClientsInSessionMode: max clients reached"
#
# SQLite URLs (local development, tests) share one connection across
# threads and enforce foreign keys so ON DELETE SET NULL behaves like
# Postgres.
# ---------------------------------------------------------


def _normalize_url(db_url: str) -> str:
    """Append sslmode=require to Postgres URLs if it is not already present."""
    if not db_url.startswith("postgres") or "sslmode=" in db_url:
        return db_url
    if "?" in db_url:
        return db_url + "&sslmode=require"
    return db_url + "?sslmode=require"


def _engine_options(db_url: str) -> dict[str, Any]:
    if db_url.startswith("sqlite"):
        return {
            "connect_args": {"check_same_thread": False},
            "poolclass": StaticPool,
        }
    return {
        "pool_pre_ping": True,
        "pool_size": 1,
        "max_overflow": 0,
    }


def build_engine(db_url: str):
    """
    Create an engine for the given URL with the options above.

    Exposed separately so tests can build throwaway in-memory engines.
    """
    db_url = _normalize_url(db_url)
    new_engine = create_engine(
        db_url,
        echo=False,  # set to True if you want to debug SQL queries
        **_engine_options(db_url),
    )

    if new_engine.dialect.name == "sqlite":

        @event.listens_for(new_engine, "connect")
        def _enable_sqlite_foreign_keys(dbapi_connection, _record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    return new_engine


engine = build_engine(settings.DATABASE_URL)


def create_db_and_tables(target_engine=None) -> None:
    """
    Create all tables defined in SQLModel metadata if they do not exist.

    This is called once on application startup.
    """
    SQLModel.metadata.create_all(target_engine or engine)


def get_session():
    """
    FastAPI dependency that yields a SQLModel Session.

    Usage:

        from fastapi import Depends

        @router.get("/example")
        def example_endpoint(session: Session = Depends(get_session)):
            ...
    """
    with Session(engine) as session:
        yield session

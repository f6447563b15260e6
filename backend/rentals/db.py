# backend/rentals/db.py
from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Iterator

from sqlalchemy import Engine, create_engine, event
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from .config import settings


class Base(DeclarativeBase):
    def model_dump(self) -> dict[str, Any]:
        """Column values keyed by column name (the shape the API returns)."""
        return {c.name: getattr(self, c.name) for c in self.__table__.columns}


def make_engine(url: str) -> Engine:
    if not url.startswith("sqlite"):
        return create_engine(url, pool_pre_ping=True, pool_size=5, max_overflow=10)

    # sqlite is for local runs and tests: TestClient calls sync handlers from a
    # worker thread, and ON DELETE CASCADE needs the pragma on every connection.
    eng = create_engine(url, connect_args={"check_same_thread": False})

    @event.listens_for(eng, "connect")
    def _enable_fk(dbapi_conn, _record) -> None:
        cur = dbapi_conn.cursor()
        cur.execute("PRAGMA foreign_keys=ON")
        cur.close()

    return eng


engine = make_engine(settings.database_url)
SessionLocal = sessionmaker(bind=engine, autoflush=False, expire_on_commit=True)


def create_tables() -> None:
    """Bootstrap the schema without alembic (sqlite dev databases only)."""
    from . import models  # noqa: F401  registers every table on Base.metadata

    Base.metadata.create_all(bind=engine)


@contextmanager
def session_scope() -> Iterator[Session]:
    """Session for scripts: commit on success, roll back on error."""
    db = SessionLocal()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def get_db() -> Iterator[Session]:
    """
    FastAPI dependency. Handlers commit themselves. A failed statement leaves
    a postgres transaction aborted, so anything raised rolls back here.
    """
    db = SessionLocal()
    try:
        yield db
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()

"""Database session management."""

from collections.abc import Generator
from contextlib import contextmanager
from typing import Any

from sqlalchemy import Engine, create_engine, text
from sqlalchemy.orm import Session, sessionmaker

from insight_engine.config import settings


def create_db_engine(database_url: str) -> Engine:
    """Create an engine; pool sizing only applies to server databases."""
    kwargs: dict[str, Any] = {"pool_pre_ping": True}
    if database_url.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
    else:
        kwargs.update(pool_size=5, max_overflow=10)
    return create_engine(database_url, **kwargs)


# Create engine
engine = create_db_engine(settings.database_url)

# Create session factory
SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    expire_on_commit=False,
    bind=engine,
)


@contextmanager
def get_session_context(
    factory: sessionmaker[Session] | None = None,
) -> Generator[Session, None, None]:
    """Get a database session that commits on success and rolls back on error."""
    session = (factory or SessionLocal)()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def init_db(bind: Engine | None = None) -> None:
    """Verify connectivity and create missing tables."""
    from insight_engine.db.models import Base

    bind = bind or engine
    with bind.connect() as conn:
        conn.execute(text("SELECT 1"))
    Base.metadata.create_all(bind)

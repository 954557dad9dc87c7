"""Database engine and session management."""
from collections.abc import Generator
from contextlib import contextmanager

from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from namsan_portal.config import get_settings
from namsan_portal.db import models  # noqa: F401  # pylint: disable=unused-import


def create_db_engine(url: str, *, echo: bool = False) -> Engine:
    """Create an engine; pooled for Postgres, single shared connection for SQLite."""
    if url.startswith("sqlite"):
        return create_engine(
            url,
            echo=echo,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    return create_engine(
        url,
        echo=echo,
        pool_pre_ping=True,
        pool_size=5,
        max_overflow=10,
    )


@contextmanager
def get_session(engine: Engine) -> Generator[Session, None, None]:
    """Yield a database session; commits on success, rolls back on error."""
    session = Session(engine, expire_on_commit=False)
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def init_db(engine: Engine) -> None:
    """Create all tables. Safe to call on startup (idempotent for existing tables)."""
    SQLModel.metadata.create_all(engine)


def init_db_cli() -> None:
    """Entry point for `init-db`: create tables in DATABASE_URL."""
    settings = get_settings()
    engine = create_db_engine(settings.database_url, echo=settings.sql_echo)
    init_db(engine)
    print(f"Tables created in {engine.url.render_as_string(hide_password=True)}")

"""
SQLAlchemy ORM Database Configuration
Engines are built from DATABASE_URL; SQLite is the local default, PostgreSQL
(psycopg3 driver) in deployed environments.
"""

from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker, Session
from sqlalchemy.pool import StaticPool

# Logger
from supplier_auth.logging.utils import get_app_logger
logger = get_app_logger("supplier_auth.database")

# Base class for ORM models
Base = declarative_base()


def normalize_database_url(url: str) -> str:
    # postgresql:// -> postgresql+psycopg:// for the psycopg3 driver
    if url and url.startswith("postgresql://"):
        return url.replace("postgresql://", "postgresql+psycopg://", 1)
    return url


def create_db_engine(database_url: str) -> Engine:
    url = normalize_database_url(database_url)

    if url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if ":memory:" in url or url in ("sqlite://", "sqlite+pysqlite://"):
            # one shared connection so every session sees the same in-memory db
            kwargs["poolclass"] = StaticPool
        engine = create_engine(url, echo=False, **kwargs)
    else:
        engine = create_engine(
            url,
            pool_size=10,
            max_overflow=20,
            pool_pre_ping=True,
            pool_recycle=3600,
            echo=False,
            connect_args={
                "keepalives_idle": 600,
                "keepalives_interval": 30,
                "keepalives_count": 3
            }
        )

    logger.info(f"database_engine_initialized | dialect={engine.dialect.name}")
    return engine


def create_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine)


def create_tables(engine: Engine):
    # models register themselves on Base when imported
    from supplier_auth.models import otp, users  # noqa: F401
    Base.metadata.create_all(bind=engine)


@contextmanager
def get_db_session(session_factory: sessionmaker, read_only: bool = False) -> Iterator[Session]:
    """
    Get database session with transaction management.

    Args:
        session_factory: sessionmaker bound to the engine
        read_only: skip the commit on exit

    Yields:
        SQLAlchemy session object
    """
    db = session_factory()
    try:
        yield db
        if not read_only:
            db.commit()
    except Exception:
        if not read_only:
            db.rollback()
        raise
    finally:
        db.close()

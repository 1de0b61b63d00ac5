# fintracker/db.py
from typing import Any, Dict, Iterator, Optional

from fastapi import Request
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from .config import Settings
from .logging_utils import get_logger

LOGGER = get_logger(__name__)

Base = declarative_base()


def _normalize_database_url(url: str) -> str:
    # Hosted Postgres often hands out postgres://; SQLAlchemy wants a driver name
    if url.startswith("postgres://"):
        url = url.replace("postgres://", "postgresql+psycopg://", 1)
    if url.startswith("postgresql://") and "+psycopg" not in url and "+psycopg2" not in url:
        url = url.replace("postgresql://", "postgresql+psycopg://", 1)
    return url


def _is_memory_sqlite(url: str) -> bool:
    database = make_url(url).database
    return database in (None, "", ":memory:")


def _connect_args(url: str, settings: Settings) -> Dict[str, Any]:
    if url.startswith("sqlite"):
        return {"check_same_thread": False}

    connect_args: Dict[str, Any] = {"connect_timeout": settings.database_connect_timeout}
    if settings.database_statement_timeout_ms:
        connect_args["options"] = f"-c statement_timeout={settings.database_statement_timeout_ms}"

    if settings.is_production:
        connect_args["sslmode"] = settings.database_sslmode
        if settings.database_sslrootcert:
            connect_args["sslrootcert"] = settings.database_sslrootcert
        LOGGER.info("[DB] Production mode detected, enabling SSL (sslmode=%s)", settings.database_sslmode)
    else:
        LOGGER.info("[DB] Not in production mode, SSL not enabled.")
    return connect_args


def build_engine(settings: Settings) -> Engine:
    url = _normalize_database_url(settings.database_url)
    kwargs: Dict[str, Any] = {
        "connect_args": _connect_args(url, settings),
        "pool_pre_ping": True,
    }
    if url.startswith("sqlite"):
        if _is_memory_sqlite(url):
            # one shared connection, otherwise every checkout sees an empty database
            kwargs["poolclass"] = StaticPool
    else:
        kwargs["pool_timeout"] = settings.database_pool_timeout
    return create_engine(url, **kwargs)


class Database:
    """Owns the engine (connection pool) and hands out request-scoped sessions."""

    def __init__(self, engine: Engine):
        self.engine = engine
        self.SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        return cls(build_engine(settings))

    def create_all(self) -> None:
        # models must be imported so their tables are registered on Base.metadata
        from . import models  # noqa: F401

        Base.metadata.create_all(bind=self.engine)

    def session(self) -> Iterator[Session]:
        db = self.SessionLocal()
        try:
            yield db
        finally:
            db.close()

    def dispose(self) -> None:
        self.engine.dispose()


def get_db(request: Request) -> Iterator[Session]:
    database: Optional[Database] = getattr(request.app.state, "database", None)
    if database is None:
        raise RuntimeError("application has no database attached")
    yield from database.session()

import logging

from fastapi import Request
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from .config import Settings

logger = logging.getLogger(__name__)

Base = declarative_base()

IN_MEMORY_SQLITE_URLS = ("sqlite://", "sqlite:///:memory:")


def build_engine(settings: Settings) -> Engine:
    """Create the SQLAlchemy engine for the configured store."""
    database_url = settings.database_url
    engine_kwargs = {"pool_pre_ping": True}

    # Handle SQLite special case for check_same_thread
    connect_args = {}
    if database_url.startswith("sqlite"):
        connect_args = {"check_same_thread": False}
        if database_url in IN_MEMORY_SQLITE_URLS:
            # One shared connection, otherwise every session sees an empty database
            engine_kwargs["poolclass"] = StaticPool

    logger.info(f"Using database: {database_url.split('@')[-1][:40]}")

    return create_engine(
        database_url,
        connect_args=connect_args,
        echo=False,
        **engine_kwargs,
    )


def build_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db(request: Request):
    """Dependency to get database session"""
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()


def create_tables(engine: Engine):
    """Create all tables in the database"""
    from . import models  # noqa: F401  registers the mappers on Base

    Base.metadata.create_all(bind=engine)

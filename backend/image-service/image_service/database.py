from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool
from fastapi import Request
import structlog

logger = structlog.get_logger(__name__)

# Base class for ORM models
Base = declarative_base()


def build_engine(database_url: str) -> Engine:
    """Create the database engine for the configured URL"""
    if database_url.startswith("sqlite"):
        connect_args = {"check_same_thread": False}
        if database_url in ("sqlite://", "sqlite:///:memory:"):
            # One shared connection so every session sees the same in-memory tables
            return create_engine(database_url, connect_args=connect_args, poolclass=StaticPool)
        return create_engine(database_url, connect_args=connect_args)

    return create_engine(
        database_url,
        pool_size=5,
        max_overflow=10,
        pool_pre_ping=True,
        pool_recycle=3600
    )


def build_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db(engine: Engine):
    """Create tables that do not exist yet"""
    # Register models on Base.metadata
    from image_service import models  # noqa: F401

    try:
        Base.metadata.create_all(bind=engine)
        logger.info("Database synced")
    except Exception as e:
        logger.error("Unable to sync database", error=str(e))
        raise


def get_db(request: Request):
    """Dependency to get database session"""
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()

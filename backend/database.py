# backend/database.py
import logging

from fastapi import Request
from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

logger = logging.getLogger(__name__)

Base = declarative_base()


def normalize_database_url(url: str) -> str:
    # Hosted Postgres hands out postgres://, SQLAlchemy requires postgresql://
    if url and url.startswith("postgres://"):
        url = url.replace("postgres://", "postgresql://", 1)
    return url


def make_engine(url: str, timeout: float = 5.0):
    url = normalize_database_url(url)
    engine_kwargs = {"pool_pre_ping": True}

    # Driver-level timeouts depend on the backend
    if url.startswith("sqlite"):
        engine_kwargs["connect_args"] = {"check_same_thread": False, "timeout": timeout}
        if url in ("sqlite://", "sqlite:///:memory:"):
            # In-memory database must be shared by every thread
            engine_kwargs["poolclass"] = StaticPool
        else:
            engine_kwargs["pool_timeout"] = timeout
    elif url.startswith("postgresql"):
        engine_kwargs["connect_args"] = {
            "connect_timeout": max(1, int(timeout)),
            "options": f"-c statement_timeout={int(timeout * 1000)}",
        }
        engine_kwargs["pool_timeout"] = timeout
    else:
        engine_kwargs["pool_timeout"] = timeout

    return create_engine(url, **engine_kwargs)


def make_session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db(engine) -> bool:
    """Create missing tables. A failure is logged and requests fail individually."""
    # Register models on Base.metadata
    import models.users  # noqa: F401

    try:
        Base.metadata.create_all(bind=engine)
    except Exception:
        logger.exception("Connection to the user store failed")
        return False
    logger.info("Connected to the user store")
    return True


def get_db(request: Request):
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()

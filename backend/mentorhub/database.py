# backend/mentorhub/database.py
from datetime import datetime
import logging
import threading
from typing import Any, Generator, Optional

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeMeta, Session, declarative_base, sessionmaker

from .core.config import settings

logger = logging.getLogger(__name__)

_engine: Optional[Engine] = None
_engine_lock = threading.Lock()

SessionLocal = sessionmaker(autoflush=False, expire_on_commit=False)

Base: DeclarativeMeta = declarative_base()


def _build_engine(url: str) -> Engine:
    if url.startswith("sqlite"):
        return create_engine(url, connect_args={"check_same_thread": False})
    return create_engine(
        url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
        pool_timeout=30,
        pool_recycle=3600,
        pool_pre_ping=True,
        connect_args={"connect_timeout": 10, "application_name": "mentorhub_backend"},
    )


def get_engine() -> Engine:
    """Create the engine on first use and bind the session factory to it."""
    global _engine
    if _engine is not None:
        return _engine
    with _engine_lock:
        if _engine is None:
            engine = _build_engine(settings.database_url)

            @event.listens_for(engine, "connect")
            def receive_connect(dbapi_connection: Any, connection_record: Any) -> None:
                connection_record.info["connect_time"] = datetime.now()
                logger.debug("Database connection established")

            SessionLocal.configure(bind=engine)
            _engine = engine
    return _engine


def get_db() -> Generator[Session, None, None]:
    """Get database session with proper cleanup."""
    get_engine()
    db = SessionLocal()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()

"""
Portal-local database

Holds only what the marketplace does not: onboarding drafts and per-user
preferences. SQLite by default; any SQLAlchemy URL works in production.
"""

import logging
import os
import time
from contextlib import contextmanager

from sqlalchemy import create_engine, event
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from .config import DATABASE_URL

logger = logging.getLogger(__name__)

SLOW_QUERY_THRESHOLD = float(os.getenv("DB_SLOW_QUERY_THRESHOLD", "0.5"))


def engine_options(url: str) -> dict:
    """Pool settings per backend; SQLite connections are shared across the sync threadpool"""
    if url.startswith("sqlite"):
        return {"connect_args": {"check_same_thread": False}}
    return {
        "pool_pre_ping": True,
        "pool_recycle": int(os.getenv("DB_POOL_RECYCLE", "300")),
        "pool_size": int(os.getenv("DB_POOL_SIZE", "5")),
        "max_overflow": int(os.getenv("DB_MAX_OVERFLOW", "10")),
    }


engine = create_engine(DATABASE_URL, **engine_options(DATABASE_URL))
logger.info(f"✅ Portal database engine ready ({engine.url.get_backend_name()})")


@event.listens_for(engine, "before_cursor_execute")
def _start_timer(conn, _cursor, _statement, _parameters, _context, _executemany):
    conn.info.setdefault("query_started", []).append(time.perf_counter())


@event.listens_for(engine, "after_cursor_execute")
def _log_slow_query(conn, _cursor, statement, _parameters, _context, _executemany):
    elapsed = time.perf_counter() - conn.info["query_started"].pop()
    if elapsed > SLOW_QUERY_THRESHOLD:
        logger.warning(f"🐌 Slow portal query ({elapsed:.2f}s): {statement[:200]}")


SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


def init_db() -> None:
    """Create the portal tables; concurrent workers racing on startup is not an error"""
    from . import models  # noqa: F401 - register tables with Base

    try:
        Base.metadata.create_all(bind=engine, checkfirst=True)
        logger.info("✅ Portal tables ready")
    except Exception as e:
        if "already exists" in str(e):
            logger.info("Portal tables already created by another worker")
        else:
            raise


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def session_scope() -> Session:
    """Session for background jobs, rolled back on error"""
    db = SessionLocal()
    try:
        yield db
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()

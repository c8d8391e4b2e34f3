"""
Engine, session factory and the get_db dependency.
"""
import logging
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from app.core.config import settings
from app.db.base import Base

logger = logging.getLogger(__name__)


def _engine_options(database_url: str) -> dict:
    options = {"echo": settings.DB_ECHO, "pool_pre_ping": True}
    if database_url.startswith("sqlite"):
        # FastAPI runs sync endpoints in a threadpool
        options["connect_args"] = {"check_same_thread": False}
    else:
        # MySQL drops idle connections after wait_timeout
        options["pool_recycle"] = 3600
    return options


engine = create_engine(settings.DATABASE_URL, **_engine_options(settings.DATABASE_URL))

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Session:
    """Request-scoped session; closed when the request ends."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db():
    """Create any missing tables."""
    import app.models  # noqa: F401  registers every model on Base.metadata
    Base.metadata.create_all(bind=engine)
    logger.info(f"Ensured tables: {', '.join(sorted(Base.metadata.tables))}")

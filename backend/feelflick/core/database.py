from sqlalchemy.orm import sessionmaker
from sqlalchemy import create_engine, inspect
import logging

from feelflick.core.config import settings

logger = logging.getLogger(__name__)

DATABASE_URL = settings.database_url


def engine_options(url: str, statement_timeout_ms: int = 0) -> dict:
    """create_engine kwargs for `url`.

    pool_recycle: recycle connections after N seconds to prevent stale connections
    pool_pre_ping: verify connections before using them
    statement_timeout: PostgreSQL aborts any query running longer than this (ms)
    """
    options = {"pool_pre_ping": True, "pool_recycle": 3600}
    # pool_size / max_overflow only apply to server databases; SQLite uses its own pool classes
    if not url.startswith("sqlite"):
        options.update(pool_size=20, max_overflow=30, pool_timeout=30)
    if url.startswith("postgresql") and statement_timeout_ms > 0:
        options["connect_args"] = {"options": f"-c statement_timeout={int(statement_timeout_ms)}"}
    return options


engine = create_engine(DATABASE_URL, **engine_options(DATABASE_URL, settings.db_statement_timeout_ms))
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_session_factory():
    """FastAPI dependency returning the session factory the stores open sessions from."""
    return SessionLocal


def init_db(bind=None):
    """Create any missing tables. Safe to call on every startup."""
    from feelflick.models import Base

    bind = bind or engine
    existing = set(inspect(bind).get_table_names())
    Base.metadata.create_all(bind=bind)
    created = sorted(set(Base.metadata.tables) - existing)
    if created:
        logger.info(f"Created tables: {', '.join(created)}")

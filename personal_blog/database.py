"""
Store lifecycle for the blog API.

The engine is built once per process from PATH_DATABASE/NAME_DB, tables are
created by init_db() at application startup and pooled connections are released
by dispose_db() at shutdown. Route handlers never touch the engine directly:
each request receives its own session from the get_db() dependency.
"""

import os
import logging
from pathlib import Path
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from dotenv import load_dotenv

from personal_blog.models import Base

load_dotenv()

logger = logging.getLogger(__name__)

PATH_DATABASE = os.getenv("PATH_DATABASE")
NAME_DB = os.getenv("NAME_DB")

if not PATH_DATABASE or not NAME_DB:
    raise ValueError("PATH_DATABASE and NAME_DB must be set in .env file")

# Largest value SQLite stores in an INTEGER column
SQLITE_MAX_INTEGER = 2**63 - 1

# SQL name of the Unicode-aware lowercase function registered on every connection
UNICODE_LOWER = "unicode_lower"

database_path = Path(PATH_DATABASE) / NAME_DB
database_path.parent.mkdir(parents=True, exist_ok=True)
DATABASE_URL = f"sqlite:///{database_path}"

logger.info(f"Blog store: {DATABASE_URL}")

# Sessions are used from FastAPI's threadpool, so the connection may cross threads
engine = create_engine(DATABASE_URL, connect_args={"check_same_thread": False})


def _unicode_lower(value):
    return value.lower() if value is not None else None


@event.listens_for(engine, "connect")
def configure_connection(dbapi_connection, connection_record):
    """
    Per-connection SQLite setup.

    Foreign key checks are off unless enabled per connection, and the built-in
    lower() only folds ASCII, so search uses a Python-backed replacement.
    """
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()
    dbapi_connection.create_function(UNICODE_LOWER, 1, _unicode_lower, deterministic=True)


SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db():
    """Create the users, blogs and activities tables if they are missing."""
    logger.info("Creating blog store tables")
    Base.metadata.create_all(bind=engine)
    logger.info("Blog store tables ready")


def dispose_db():
    """Release pooled connections on shutdown."""
    engine.dispose()
    logger.info("Blog store connections released")


def get_db():
    """
    Request-scoped session dependency.

    Yields:
        Session: SQLAlchemy session, closed when the request finishes
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

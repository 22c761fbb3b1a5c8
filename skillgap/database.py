# database.py
import logging
from typing import Generator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from skillgap.config import build_sqlalchemy_db_url, settings

logger = logging.getLogger("uvicorn.error")


def mask_db_url(db_url: str) -> str:
    try:
        return str(make_url(db_url).set(password="***"))
    except Exception:
        return db_url


def is_sqlite_url(db_url: str) -> bool:
    return db_url.startswith("sqlite")


def build_engine(db_url: str) -> Engine:
    # sqlite connections are shared with the threadpool FastAPI runs sync routes on.
    connect_args = {"check_same_thread": False} if is_sqlite_url(db_url) else {}
    return create_engine(db_url, pool_pre_ping=True, future=True, connect_args=connect_args)


DB_URL = build_sqlalchemy_db_url(settings)
engine = build_engine(DB_URL)
logger.info("SQLAlchemy ORM db_url=%s", mask_db_url(DB_URL))
SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False, future=True)
Base = declarative_base()


def init_db() -> None:
    """Create missing tables on sqlite; shared databases are migrated externally."""
    from skillgap import models  # noqa: F401

    if is_sqlite_url(DB_URL):
        Base.metadata.create_all(bind=engine)


def get_db() -> Generator[Session, None, None]:
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()

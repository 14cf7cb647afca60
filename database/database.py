import os
import contextlib
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from database.models import Base

DATABASE_URL = os.environ.get("DATABASE_URL", "sqlite:///staffing_match.db")

engine = create_engine(DATABASE_URL)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def configure(url: str) -> None:
    """Rebind the module's engine and session factory to another database."""
    global engine, DATABASE_URL
    DATABASE_URL = url
    engine = create_engine(url)
    SessionLocal.configure(bind=engine)


def init_db() -> None:
    """Create any missing tables."""
    Base.metadata.create_all(bind=engine)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

@contextlib.contextmanager
def db_session_scope():
    """Provide a transactional scope around a series of operations."""
    session: Session = SessionLocal()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()

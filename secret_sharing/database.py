from sqlalchemy import create_engine
from sqlalchemy.orm import DeclarativeBase, sessionmaker

from secret_sharing.config import settings


def build_engine(database_url: str):
    """Create an engine, applying SQLite threading args only where they apply."""
    connect_args = {}
    if database_url.startswith("sqlite"):
        # Sessions are handed to FastAPI's threadpool workers
        connect_args["check_same_thread"] = False
    return create_engine(database_url, connect_args=connect_args)


engine = build_engine(settings.database_url)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


class Base(DeclarativeBase):
    pass


def get_db():
    """Dependency for FastAPI endpoints to get a database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

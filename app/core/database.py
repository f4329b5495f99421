from contextlib import contextmanager
from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker, Session
from typing import Generator, Iterator
from .config import settings

database_url = settings.get_database_url

if database_url.startswith("sqlite"):
    # Sessions are handed across threads by the test client; wait on locks
    # held by concurrent writers instead of failing immediately.
    engine = create_engine(
        database_url,
        connect_args={"check_same_thread": False, "timeout": 30},
    )
else:
    # PostgreSQL database setup with appropriate connection pool settings
    engine = create_engine(
        database_url,
        pool_size=5,
        max_overflow=10,
        pool_timeout=30,
        pool_recycle=1800,  # Recycle connections after 30 minutes
    )

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()

# Database dependency
def get_db() -> Generator[Session, None, None]:
    """Get database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

@contextmanager
def transaction(db: Session) -> Iterator[Session]:
    """Commit the work done inside the block, or roll all of it back.

    Any exception raised inside the block (business rule or database
    failure) rolls the session back before it propagates, so nothing
    partial is ever committed.
    """
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise

# Database initialization
def init_db():
    """Initialize database tables."""
    # Import models so they are registered on the metadata
    from ..models import user, slot, appointment  # noqa: F401
    Base.metadata.create_all(bind=engine)

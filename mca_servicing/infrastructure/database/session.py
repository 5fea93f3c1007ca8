"""Database sessions for the servicing store (fundings, payback plans, paybacks)"""

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from mca_servicing.config import settings

# Pool sizes come from settings; connections recycled hourly
engine = create_engine(
    settings.database_url,
    pool_pre_ping=True,  # Verify connections before using
    pool_size=settings.db_pool_size,
    max_overflow=settings.db_max_overflow,
    pool_recycle=3600,
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Session:
    """One session per request; routers commit or roll back explicitly"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

from sqlalchemy import create_engine, Column, Integer, String, DateTime, Text, Index
from sqlalchemy.ext.declarative import declarative_base
from sqlalchemy.orm import sessionmaker, Session
from datetime import datetime, timezone
from typing import List


def utc_now():
    """Return current UTC time (timezone-aware). Replaces deprecated datetime.utcnow()."""
    return datetime.now(timezone.utc)

Base = declarative_base()


class SearchLog(Base):
    __tablename__ = 'search_logs'

    id = Column(Integer, primary_key=True)
    query = Column(String, nullable=False)
    book_url = Column(String, nullable=False)
    store_type = Column(String, nullable=False)  # amazon, barnesnoble, goodreads, ...
    created_at = Column(DateTime, default=utc_now)

    __table_args__ = (
        Index('ix_search_logs_created_at', 'created_at'),
    )

    def to_dict(self) -> dict:
        return {
            'query': self.query,
            'bookUrl': self.book_url,
            'storeType': self.store_type,
            'timestamp': self.created_at.isoformat() if self.created_at else None,
        }


class SearchError(Base):
    __tablename__ = 'search_errors'

    id = Column(Integer, primary_key=True)
    query = Column(String, nullable=False)
    error = Column(Text, nullable=False)
    created_at = Column(DateTime, default=utc_now)

    __table_args__ = (
        Index('ix_search_errors_created_at', 'created_at'),
    )

    def to_dict(self) -> dict:
        return {
            'query': self.query,
            'error': self.error,
            'timestamp': self.created_at.isoformat() if self.created_at else None,
        }


def _trim(db: Session, model, keep: int):
    """Delete everything but the newest `keep` rows of a log table."""
    stale = (
        db.query(model)
        .order_by(model.created_at.desc(), model.id.desc())
        .offset(keep)
        .all()
    )
    for row in stale:
        db.delete(row)


def record_search(db: Session, query: str, book_url: str, store_type: str, keep: int = 10) -> SearchLog:
    entry = SearchLog(query=query, book_url=book_url, store_type=store_type)
    db.add(entry)
    db.flush()
    _trim(db, SearchLog, keep)
    db.commit()
    return entry


def record_error(db: Session, query: str, error: str, keep: int = 20) -> SearchError:
    entry = SearchError(query=query, error=error)
    db.add(entry)
    db.flush()
    _trim(db, SearchError, keep)
    db.commit()
    return entry


def get_recent_searches(db: Session, limit: int = 10) -> List[SearchLog]:
    return (
        db.query(SearchLog)
        .order_by(SearchLog.created_at.desc(), SearchLog.id.desc())
        .limit(limit)
        .all()
    )


def get_recent_errors(db: Session, limit: int = 20) -> List[SearchError]:
    return (
        db.query(SearchError)
        .order_by(SearchError.created_at.desc(), SearchError.id.desc())
        .limit(limit)
        .all()
    )


# Database setup - import settings for database URL
from api.config import settings

engine = create_engine(
    settings.database_url,
    echo=False,
    pool_pre_ping=True,    # Verify connections before use (handles stale connections)
    pool_recycle=3600,     # Recycle connections after 1 hour
    connect_args={"check_same_thread": False} if settings.database_url.startswith("sqlite") else {},
)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

def init_db():
    Base.metadata.create_all(bind=engine)

def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

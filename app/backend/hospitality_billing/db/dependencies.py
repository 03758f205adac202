"""Database dependencies for FastAPI endpoints."""

from collections.abc import Generator

from sqlalchemy.orm import Session

from hospitality_billing.db.session import SessionLocal


def get_db_session() -> Generator[Session, None, None]:
    """Yield a read-mostly SQLAlchemy session scoped to one request."""

    session = SessionLocal()
    try:
        yield session
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()

"""SQLAlchemy engine, session factory and declarative base."""
from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from app.config import settings


def _connect_args(url: str) -> dict:
    """Driver-level timeouts so no query blocks indefinitely."""
    if url.startswith("sqlite"):
        return {"check_same_thread": False, "timeout": settings.DB_TIMEOUT_SECONDS}
    return {
        "connect_timeout": settings.DB_TIMEOUT_SECONDS,
        "options": f"-c statement_timeout={settings.DB_TIMEOUT_SECONDS * 1000}",
    }


engine = create_engine(
    settings.DATABASE_URL,
    connect_args=_connect_args(settings.DATABASE_URL),
    pool_pre_ping=True,
    **({} if settings.DATABASE_URL.startswith("sqlite") else {"pool_timeout": settings.DB_TIMEOUT_SECONDS}),
)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


def get_db():
    """FastAPI dependency yielding a request-scoped session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

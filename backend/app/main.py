"""FastAPI application entry point."""
import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import OperationalError, TimeoutError as PoolTimeoutError

from app.config import settings
from app.database import Base, engine
from app.errors import AppError, ServiceUnavailable

# Import routers
from app.routers import events, organizers, users

# Import all models so Base.metadata knows about them
from app.models.organizer import Organizer    # noqa: F401
from app.models.user import User              # noqa: F401
from app.models.event import Event            # noqa: F401
from app.models.enrollment import Enrollment  # noqa: F401

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Eventful",
    description="Event enrollment, reminder scheduling and QR-code check-in",
    version="0.1.0",
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS.split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register routers
app.include_router(events.router, prefix="/events", tags=["Events"])
app.include_router(users.router, prefix="/users", tags=["Users"])
app.include_router(organizers.router, prefix="/organizers", tags=["Organizers"])


@app.exception_handler(AppError)
def handle_app_error(request: Request, exc: AppError):
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(OperationalError)
@app.exception_handler(PoolTimeoutError)
def handle_store_unavailable(request: Request, exc: Exception):
    """The store timed out or dropped the connection; tell the caller to retry."""
    logger.error("Database unavailable on %s %s: %s", request.method, request.url.path, exc)
    error = ServiceUnavailable()
    return JSONResponse(
        status_code=error.status_code,
        content=error.to_dict(),
        headers={"Retry-After": "5"},
    )


@app.on_event("startup")
def on_startup():
    """Create database tables on startup (for SQLite dev mode)."""
    if settings.DATABASE_URL.startswith("sqlite"):
        Base.metadata.create_all(bind=engine)


@app.get("/health")
def health_check():
    return {"status": "ok"}

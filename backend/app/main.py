# backend/app/main.py
from __future__ import annotations

from contextlib import asynccontextmanager
import logging
from typing import AsyncGenerator

from fastapi import APIRouter, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from . import models  # noqa: F401  (registers tables on Base.metadata)
from .core.config import settings
from .core.constants import BRAND_NAME
from .database import Base, engine
from .errors import register_error_handlers
from .middleware.prometheus_middleware import PrometheusMiddleware
from .routes import health, prometheus
from .routes.v1 import (
    availability as availability_v1,
    bookings as bookings_v1,
    students as students_v1,
    users as users_v1,
)

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def app_lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Handle application startup/shutdown."""
    logger.info(f"{BRAND_NAME} API starting up...")
    logger.info(
        f"Environment: {settings.environment}, timezone: {settings.operational_timezone}, "
        f"calendar provider: {settings.calendar_provider}"
    )

    Base.metadata.create_all(bind=engine)

    yield

    logger.info(f"{BRAND_NAME} API shutting down...")
    engine.dispose()


app = FastAPI(
    title=settings.app_name,
    description="Class booking and teacher availability for a language school",
    version=settings.app_version,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=app_lifespan,
)

# Register unified error envelope handlers
register_error_handlers(app)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "HEAD", "OPTIONS", "POST", "PATCH", "DELETE"],
    allow_headers=["*"],
)
app.add_middleware(PrometheusMiddleware)

api_v1 = APIRouter(prefix="/api/v1")
api_v1.include_router(bookings_v1.router, prefix="/bookings")
api_v1.include_router(availability_v1.router, prefix="/teachers/availability")
api_v1.include_router(students_v1.router, prefix="/students")
api_v1.include_router(users_v1.router, prefix="/users")

app.include_router(api_v1)
app.include_router(health.router)
app.include_router(prometheus.router)


@app.get("/")
def root() -> dict[str, str]:
    return {"message": f"Welcome to the {settings.app_name}", "docs": "/docs"}

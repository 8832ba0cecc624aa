"""
Cadence FastAPI Application Entry Point.

Run with: uvicorn cadence.main:app --reload
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.exception_handlers import http_exception_handler
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from cadence import __version__
from cadence.api.routes import chat, history, profile, upcoming
from cadence.config import get_settings
from cadence.db.session import engine

settings = get_settings()

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager for startup/shutdown."""
    logger.info("%s starting (%s)", settings.app_name, settings.environment)
    yield
    await engine.dispose()


app = FastAPI(
    title=settings.app_name,
    description="Student planner and study assistant API",
    version=__version__,
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(chat.router)
app.include_router(upcoming.router)
app.include_router(profile.router)
app.include_router(history.router)


@app.exception_handler(StarletteHTTPException)
async def not_found_handler(request: Request, exc: StarletteHTTPException):
    """Unknown paths and unsupported methods answer a plain-text 404."""
    if exc.status_code in (404, 405):
        return PlainTextResponse("Not found", status_code=404)
    return await http_exception_handler(request, exc)


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "healthy"}

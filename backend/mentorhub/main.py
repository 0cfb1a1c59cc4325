# backend/mentorhub/main.py
"""
MentorHub API application.

Run with ``uvicorn mentorhub.main:app`` from the ``backend`` directory.
"""

import logging

from fastapi import FastAPI

from . import __version__
from .core.config import settings
from .errors import register_error_handlers
from .routes import availability, bookings, health, notifications, payments, reviews

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    app = FastAPI(
        title="MentorHub API",
        description="Mentor availability, session booking, reviews and payments",
        version=__version__,
    )
    register_error_handlers(app)

    app.include_router(health.router)
    app.include_router(bookings.router)
    app.include_router(availability.router)
    app.include_router(reviews.router)
    app.include_router(payments.router)
    app.include_router(notifications.router)

    logger.info(f"MentorHub API configured for {settings.environment}")
    return app


app = create_app()

"""Middleware registration."""

from fastapi import FastAPI

from momentum.config import Settings
from momentum.middleware.cors import setup_cors
from momentum.middleware.error_handler import setup_error_handlers
from momentum.middleware.logging import setup_logging
from momentum.middleware.request_id import RequestIdMiddleware


def setup_middleware(app: FastAPI, settings: Settings) -> None:
    """Register all middleware in the correct order.

    Starlette executes middleware in reverse-add order (last added = outermost).
    CORS is outermost so error envelopes carry CORS headers too.
    """
    setup_logging(settings)
    setup_error_handlers(app)
    app.add_middleware(RequestIdMiddleware)
    setup_cors(app, settings)

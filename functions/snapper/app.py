"""
FastAPI application entry point for the gallery backend.
"""

from __future__ import annotations

from fastapi import FastAPI

from snapper.config import get_settings
from snapper.errors import register_error_handlers
from snapper.routes import router


def create_app() -> FastAPI:
    settings = get_settings()
    app = FastAPI(title="Snapper Gallery API", version="0.1.0")
    register_error_handlers(app)
    app.include_router(router, prefix=settings.api_prefix)
    return app


app = create_app()

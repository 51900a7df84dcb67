"""FastAPI application configuration (channel core API)."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from prometheus_client import make_asgi_app

from ..infrastructure.storage import register_ledger_scripts
from .dependencies import (
    get_database_client_dependency,
    get_settings_dependency,
    get_store_dependency,
)
from .routers import admin, channels


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    await register_ledger_scripts(get_store_dependency())
    yield
    await get_database_client_dependency().close()


def create_app() -> FastAPI:
    """Create and configure FastAPI application."""
    settings = get_settings_dependency()
    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Bilateral state-channel core API",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.api_cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(channels.router, prefix="/api/v1")
    app.include_router(admin.router, prefix="/api/v1")
    app.mount("/metrics", make_asgi_app())

    @app.get("/")
    async def root() -> dict[str, str]:
        return {
            "message": f"Welcome to {settings.app_name} API",
            "version": settings.app_version,
            "docs": "/docs",
        }

    @app.get("/health")
    async def health_check() -> dict[str, str]:
        return {
            "status": "healthy",
            "service": settings.app_name,
            "version": settings.app_version,
        }

    return app

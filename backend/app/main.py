"""FastAPI entrypoint for the finance diary backend."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api.errors import register_error_handlers
from .api.routers import entries, health
from .config import Settings, load_settings
from .domain.entries import EntryService, EntryStoreGateway, build_entry_store_gateway
from .infra.auth import Authenticator, StaticTokenAuthenticator
from .infra.logging import configure_logging, get_logger

logger = get_logger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    *,
    gateway: Optional[EntryStoreGateway] = None,
    authenticator: Optional[Authenticator] = None,
) -> FastAPI:
    """Instantiate the FastAPI app, bind the store handle, and register routers."""

    settings = settings or load_settings()
    configure_logging(settings.logging)
    store = gateway or build_entry_store_gateway(settings)

    @asynccontextmanager
    async def lifespan(_: FastAPI) -> AsyncIterator[None]:
        store.open()
        logger.info(
            "application_started",
            extra={"environment": settings.environment},
        )
        try:
            yield
        finally:
            store.close()

    application = FastAPI(
        title="Finance Diary API", version="1.0.0", lifespan=lifespan
    )
    application.state.settings = settings
    application.state.entry_service = EntryService(store)
    application.state.authenticator = authenticator or StaticTokenAuthenticator(
        settings.auth.tokens
    )
    application.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors.allowed_origins),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_error_handlers(application, settings)
    for router in (
        health.router,
        entries.router,
    ):
        application.include_router(router)
    return application


app = create_app()

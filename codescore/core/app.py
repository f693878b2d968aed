from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

from codescore.api.main import api_router
from codescore.core.logging import configure_logging
from codescore.services.profile_service import ProfileService, build_profile_service

from .config import settings
from .version import __version__


def create_app(profile_service: ProfileService | None = None) -> FastAPI:
    """
    Build the API application.

    When no service is given, the lifespan wires one from settings and owns
    its shutdown.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owned = profile_service is None
        service = profile_service or build_profile_service()
        app.state.profile_service = service
        if owned and settings.AUTO_RECOMPUTE_SCORES:
            service.aggregator.start_periodic()
        yield
        if owned:
            try:
                await service.close()
                logger.info("Profile service closed")
            except Exception as exc:
                logger.warning(f"Failed to close profile service: {exc}")

    app = FastAPI(
        title="CodeScore",
        description="Aggregated competitive programming scores across platforms",
        version=__version__,
        lifespan=lifespan,
        docs_url=None if settings.APP_ENV != "development" else "/docs",
        redoc_url=None if settings.APP_ENV != "development" else "/redoc",
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.include_router(api_router)
    return app


configure_logging()
app = create_app()

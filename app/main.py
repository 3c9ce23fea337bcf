from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

from app.api.v1.router import api_router
from app.core.config import Settings, get_settings
from app.media.service import MediaUploadService
from app.media.thumbnail import FfmpegFrameExtractor
from app.storages.utils import get_storage


def build_media_service(settings: Settings) -> MediaUploadService:
    """
    Wire the upload service from configuration.
    """
    return MediaUploadService(
        storage=get_storage(settings),
        settings=settings.MEDIA,
        frame_extractor=FfmpegFrameExtractor(
            binary=settings.MEDIA.FFMPEG_BINARY,
            quality=settings.MEDIA.THUMBNAIL_QUALITY,
        ),
        cache_control=settings.SUPABASE.CACHE_CONTROL,
    )


def create_app(settings: Settings | None = None, media_service: MediaUploadService | None = None) -> FastAPI:
    """
    Build the FastAPI application.
    A prebuilt `media_service` (e.g. backed by a fake store) replaces the configured one.
    """
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator:
        """
        Context manager to handle the lifespan of the application.
        """
        service = media_service or build_media_service(settings)
        app.state.media_service = service
        logger.info(f"Media storage provider: {settings.STORAGE_PROVIDER.value}")
        yield
        # Release storage connections
        await service.close()

    app = FastAPI(
        title="Chat Media",
        description="Validates and stores chat attachments.",
        lifespan=lifespan,
    )

    # Add CORS middleware if allowed origins are set
    if settings.ALLOWED_CORS_ORIGINS:
        app.add_middleware(
            middleware_class=CORSMiddleware,
            allow_origins=[str(url).rstrip("/") for url in settings.ALLOWED_CORS_ORIGINS],
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    # Include API router
    app.include_router(router=api_router, prefix=settings.API_URL)

    # Initialize Sentry if DSN is provided
    if settings.SENTRY_DSN:
        from app.core.sentry import init_sentry

        init_sentry(settings)

    # Configure Logfire if token is provided
    if settings.LOGFIRE_TOKEN:
        from app.core.logfire import configure_logfire

        configure_logfire(app, settings)

    return app


chat_media = create_app()

import logfire
from fastapi import FastAPI
from loguru import logger

from app.core.config import Settings


def configure_logfire(app: FastAPI, settings: Settings) -> None:
    """
    Configures Logfire for the application and forwards loguru records to it.
    """
    logfire.configure(
        token=settings.LOGFIRE_TOKEN.get_secret_value(),
        environment=settings.ENVIRONMENT.value,
    )
    logfire.instrument_httpx()
    logfire.instrument_fastapi(app=app)
    logger.configure(handlers=[logfire.loguru_handler()])

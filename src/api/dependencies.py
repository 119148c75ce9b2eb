"""FastAPI dependencies shared by the report routes."""
import logging
from collections.abc import AsyncIterator

from fastapi import Depends, Request

from src.config.settings import Settings
from src.sources.interface import DataSourceInterface
from src.utils.source_manager import SourceManager

logger = logging.getLogger(__name__)


def get_settings(request: Request) -> Settings:
    """Settings loaded at startup, or validated now if startup did not load them.

    Raises:
        ConfigurationError: If required environment variables are missing
    """
    settings = getattr(request.app.state, "settings", None)
    if settings is None:
        settings = Settings.from_env()
        request.app.state.settings = settings
    return settings


async def get_data_source(settings: Settings = Depends(get_settings)) -> AsyncIterator[DataSourceInterface]:
    """A fresh data source per request, closed once the response is produced."""
    source = SourceManager.get_source(settings)
    try:
        yield source
    finally:
        await source.aclose()

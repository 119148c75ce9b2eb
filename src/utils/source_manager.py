"""Data source manager implementation."""
import logging

from src.config.settings import DataSourceMode, Settings
from src.sources.asana_source import AsanaDataSource
from src.sources.interface import DataSourceInterface
from src.sources.local_source import LocalDataSource
from src.utils.error_handlers import ConfigurationError

logger = logging.getLogger(__name__)


class SourceManager:
    """Factory for creating data source instances based on configuration."""

    @staticmethod
    def get_source(settings: Settings) -> DataSourceInterface:
        """Get appropriate data source implementation based on settings.

        Returns:
            DataSourceInterface implementation (AsanaDataSource or LocalDataSource)
        """
        if settings.data_source == DataSourceMode.ASANA:
            logger.info(f"Using Asana data source ({settings.container_mode.value} mode)")
            return AsanaDataSource(settings)
        elif settings.data_source == DataSourceMode.LOCAL:
            if not settings.local_data_file:
                raise ConfigurationError("LOCAL_DATA_FILE is required when DATA_SOURCE=local")
            logger.info(f"Using local data source: {settings.local_data_file}")
            return LocalDataSource(path=settings.local_data_file)
        else:
            raise ConfigurationError(f"Unknown data source: {settings.data_source}")

"""Collect, classify and order the clients that belong in the report."""
import asyncio
import logging
import time

from src.config.settings import Settings
from src.models.contact import ClassifiedRecord
from src.pipeline.record_aggregator import aggregate
from src.pipeline.segment_sorter import sort_by_segmentation
from src.sources.interface import DataSourceInterface
from src.utils.error_handlers import AggregationTimeoutError

logger = logging.getLogger(__name__)

NO_RESULTS_MESSAGE = "No clients missing phone or email found."


async def collect_missing_contacts(source: DataSourceInterface, settings: Settings) -> list[ClassifiedRecord]:
    """List the portfolio's containers and return sorted clients missing contact info."""
    containers = await source.list_containers(settings.portfolio_id)
    logger.info(f"Found {len(containers)} containers in portfolio {settings.portfolio_id}")

    records = await aggregate(containers, source.iter_records)
    return sort_by_segmentation(records)


async def build_report_rows(source: DataSourceInterface, settings: Settings) -> list[ClassifiedRecord]:
    """Run collect_missing_contacts under the configured aggregation timeout.

    Raises:
        AggregationTimeoutError: If the upstream calls take longer than allowed
        DataSourceError: If any upstream call fails
    """
    start_time = time.time()
    try:
        rows = await asyncio.wait_for(
            collect_missing_contacts(source, settings),
            timeout=settings.aggregation_timeout_seconds,
        )
    except asyncio.TimeoutError as e:
        logger.warning(f"Aggregation timed out after {settings.aggregation_timeout_seconds}s")
        raise AggregationTimeoutError(settings.aggregation_timeout_seconds) from e

    logger.info(f"Collected {len(rows)} report rows in {time.time() - start_time:.2f}s")
    return rows

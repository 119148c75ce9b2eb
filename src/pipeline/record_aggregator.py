"""Flatten containers and their tasks into classified report rows."""
import inspect
import logging
from collections.abc import AsyncIterable, AsyncIterator, Awaitable, Callable, Iterable
from typing import Any, Union

from src.models.contact import ClassifiedRecord, Container, Record
from src.pipeline.contact_classifier import classify
from src.pipeline.field_extractor import extract_contact_info

logger = logging.getLogger(__name__)

RecordBatch = Union[Iterable[Record], AsyncIterable[Record], Awaitable[Iterable[Record]]]
FetchRecords = Callable[[str], RecordBatch]


async def _iter_records(batch: Any) -> AsyncIterator[Record]:
    """Walk a batch whether it is a list, an async generator or an awaitable list."""
    if inspect.isawaitable(batch):
        batch = await batch
    if batch is None:
        return
    if hasattr(batch, "__aiter__"):
        async for record in batch:
            yield record
    else:
        for record in batch:
            yield record


async def aggregate(
    containers: Iterable[Container] | None,
    fetch_records: FetchRecords,
) -> list[ClassifiedRecord]:
    """Classify every record of every container, in container-then-record order.

    Containers are processed one at a time. A failure while fetching any
    container's records propagates to the caller, and rows already collected
    from earlier containers are discarded with it.

    Args:
        containers: Containers to walk; None or empty yields no rows
        fetch_records: Given a container id, produces that container's records

    Returns:
        Records missing phone or email, unsorted
    """
    if not containers:
        return []

    classified: list[ClassifiedRecord] = []
    for container in containers:
        seen = 0
        async for record in _iter_records(fetch_records(container.gid)):
            seen += 1
            result = classify(record.name, extract_contact_info(record))
            if result is not None:
                classified.append(result)
        logger.debug(f"Container {container.gid}: {seen} records scanned")

    logger.info(f"Aggregated {len(classified)} clients missing contact info")
    return classified

"""Ordering of report rows by segmentation tier."""
from collections.abc import Iterable

from src.models.contact import ClassifiedRecord

SEGMENT_ORDER: tuple[str, ...] = ("A", "B", "C", "D", "Red Flag", "Unknown")

_SEGMENT_RANK = {segment: index for index, segment in enumerate(SEGMENT_ORDER)}


def segment_rank(segmentation: str) -> int:
    """Position of a segmentation in SEGMENT_ORDER; unlisted values rank after all of them."""
    return _SEGMENT_RANK.get(segmentation, len(SEGMENT_ORDER))


def sort_by_segmentation(records: Iterable[ClassifiedRecord]) -> list[ClassifiedRecord]:
    # sorted() is stable, so aggregation order survives within a tier
    return sorted(records, key=lambda record: segment_rank(record.segmentation))

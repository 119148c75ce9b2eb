import json
import logging
from collections.abc import AsyncIterator
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from src.models.contact import Container, Record
from src.sources.interface import DataSourceInterface
from src.utils.error_handlers import DataSourceError

logger = logging.getLogger(__name__)


class LocalDataSource(DataSourceInterface):
    """JSON fixture implementation of the data source interface.

    Expected layout::

        {
            "containers": [{"gid": "m1", "name": "Jane"}],
            "records": {"m1": [{"name": "Client", "custom_fields": [...]}]}
        }
    """

    def __init__(self, path: str | Path | None = None, data: dict[str, Any] | None = None) -> None:
        if path is None and data is None:
            raise ValueError("LocalDataSource needs a fixture path or data")
        self.path = Path(path) if path is not None else None
        self._data = data

    def _load(self) -> dict[str, Any]:
        if self._data is None:
            try:
                self._data = json.loads(self.path.read_text())
            except (OSError, json.JSONDecodeError) as e:
                raise DataSourceError(f"Cannot read local data file {self.path}: {e}") from e
            logger.info(f"Loaded local data fixture from {self.path}")

        if not isinstance(self._data, dict):
            raise DataSourceError("Local data fixture must be a JSON object")
        return self._data

    async def list_containers(self, collection_id: str) -> list[Container]:
        containers = self._load().get("containers") or []
        try:
            return [Container.model_validate(container) for container in containers]
        except ValidationError as e:
            raise DataSourceError(f"Invalid container in local data fixture: {e.errors()[0]['msg']}") from e

    async def iter_records(self, container_id: str) -> AsyncIterator[Record]:
        records_by_container = self._load().get("records") or {}
        if container_id not in records_by_container:
            logger.debug(f"No records listed for container {container_id}")

        for record in records_by_container.get(container_id) or []:
            try:
                parsed = Record.model_validate(record)
            except ValidationError as e:
                raise DataSourceError(
                    f"Invalid record in local data fixture: {e.errors()[0]['msg']}",
                    container_id=container_id,
                ) from e
            yield parsed

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator

from src.models.contact import Container, Record


class DataSourceInterface(ABC):
    """Abstract interface for the upstream project-management data."""

    @abstractmethod
    async def list_containers(self, collection_id: str) -> list[Container]:
        """
        List the containers (members or projects) of a collection.

        Args:
            collection_id: Portfolio identifier

        Returns:
            Containers in upstream order
        """
        pass

    @abstractmethod
    def iter_records(self, container_id: str) -> AsyncIterator[Record]:
        """
        Produce every record belonging to a container, across all pages.

        Args:
            container_id: Identifier of a container from list_containers

        Returns:
            Async iterator of records in upstream order
        """
        pass

    async def aclose(self) -> None:
        """Release any held connections (optional implementation)."""
        return None

    async def __aenter__(self) -> "DataSourceInterface":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

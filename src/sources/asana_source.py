"""Asana REST API implementation of the data source interface."""
import logging
from collections.abc import AsyncIterator
from typing import Any

import httpx

from src.config.settings import ContainerMode, Settings
from src.models.contact import Container, Record
from src.sources.interface import DataSourceInterface
from src.utils.error_handlers import DataSourceError

logger = logging.getLogger(__name__)

TASK_OPT_FIELDS = "name,custom_fields.name,custom_fields.display_value,custom_fields.text_value"
PORTFOLIO_OPT_FIELDS = "name,members,members.name,workspace"
ITEM_OPT_FIELDS = "name,resource_type"


def _upstream_error_message(response: httpx.Response) -> str:
    """Best human-readable message for a failed Asana response."""
    try:
        payload = response.json()
    except ValueError:
        payload = None

    if isinstance(payload, dict):
        messages = [
            error.get("message")
            for error in payload.get("errors") or []
            if isinstance(error, dict) and error.get("message")
        ]
        if messages:
            return "; ".join(messages)

    return f"{response.status_code} {response.reason_phrase}".strip()


class AsanaDataSource(DataSourceInterface):
    """Reads portfolio members/projects and their tasks from Asana."""

    def __init__(self, settings: Settings, transport: httpx.AsyncBaseTransport | None = None) -> None:
        self.settings = settings
        self.container_mode = settings.container_mode
        self.page_size = settings.asana_page_size
        self._workspace_gid: str | None = None
        self._client = httpx.AsyncClient(
            base_url=settings.asana_base_url,
            headers={
                "Authorization": f"Bearer {settings.asana_pat}",
                "Accept": "application/json",
            },
            timeout=settings.asana_request_timeout_seconds,
            transport=transport,
        )

    async def _get(self, path: str, params: dict[str, Any], container_id: str | None = None) -> dict[str, Any]:
        try:
            response = await self._client.get(path, params=params)
        except httpx.HTTPError as e:
            logger.error(f"Asana request to {path} failed: {e}")
            raise DataSourceError(str(e) or type(e).__name__, container_id=container_id) from e

        if response.is_error:
            message = _upstream_error_message(response)
            logger.error(f"Asana returned {response.status_code} for {path}: {message}")
            raise DataSourceError(message, status_code=response.status_code, container_id=container_id)

        try:
            payload = response.json()
        except ValueError as e:
            raise DataSourceError(f"Invalid JSON from {path}", container_id=container_id) from e

        if not isinstance(payload, dict):
            raise DataSourceError(f"Unexpected response shape from {path}", container_id=container_id)
        return payload

    async def _paginate(
        self, path: str, params: dict[str, Any], container_id: str | None = None
    ) -> AsyncIterator[dict[str, Any]]:
        """Yield every item of a paginated collection endpoint."""
        page_params = {**params, "limit": self.page_size}
        pages = 0
        while True:
            payload = await self._get(path, page_params, container_id=container_id)
            pages += 1
            for item in payload.get("data") or []:
                if isinstance(item, dict):
                    yield item

            next_page = payload.get("next_page") or {}
            offset = next_page.get("offset") if isinstance(next_page, dict) else None
            if not offset:
                break
            page_params = {**page_params, "offset": offset}

        logger.debug(f"Read {pages} page(s) from {path}")

    async def list_containers(self, collection_id: str) -> list[Container]:
        if self.container_mode == ContainerMode.PROJECTS:
            return await self._list_projects(collection_id)
        return await self._list_members(collection_id)

    async def _list_members(self, portfolio_id: str) -> list[Container]:
        payload = await self._get(f"/portfolios/{portfolio_id}", {"opt_fields": PORTFOLIO_OPT_FIELDS})
        portfolio = payload.get("data") or {}

        workspace = portfolio.get("workspace") or {}
        self._workspace_gid = workspace.get("gid")

        members = portfolio.get("members") or []
        return [
            Container(gid=str(member["gid"]), name=member.get("name"))
            for member in members
            if isinstance(member, dict) and member.get("gid")
        ]

    async def _list_projects(self, portfolio_id: str) -> list[Container]:
        containers = []
        async for item in self._paginate(f"/portfolios/{portfolio_id}/items", {"opt_fields": ITEM_OPT_FIELDS}):
            if not item.get("gid"):
                continue
            if item.get("resource_type", "project") != "project":
                logger.debug(f"Skipping portfolio item {item['gid']} of type {item.get('resource_type')}")
                continue
            containers.append(Container(gid=str(item["gid"]), name=item.get("name")))
        return containers

    async def iter_records(self, container_id: str) -> AsyncIterator[Record]:
        if self.container_mode == ContainerMode.PROJECTS:
            path = f"/projects/{container_id}/tasks"
            params: dict[str, Any] = {"opt_fields": TASK_OPT_FIELDS}
        else:
            if not self._workspace_gid:
                raise DataSourceError(
                    "Portfolio workspace is unknown; list containers before fetching tasks",
                    container_id=container_id,
                )
            path = "/tasks"
            params = {
                "assignee": container_id,
                "workspace": self._workspace_gid,
                "opt_fields": TASK_OPT_FIELDS,
            }

        async for item in self._paginate(path, params, container_id=container_id):
            yield Record.model_validate(item)

    async def aclose(self) -> None:
        await self._client.aclose()

"""Unit tests for the Asana data source using a mocked transport."""
from dataclasses import replace

import httpx
import pytest

from src.config.settings import ContainerMode
from src.sources.asana_source import AsanaDataSource
from src.utils.error_handlers import DataSourceError
from tests.factories import make_task


def _source(settings, handler, **overrides):
    asana_settings = replace(settings, **overrides)
    return AsanaDataSource(asana_settings, transport=httpx.MockTransport(handler))


@pytest.mark.unit
class TestAsanaMembersMode:

    @pytest.mark.asyncio
    async def test_lists_members_and_their_tasks(self, settings):
        requests = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            if request.url.path == "/api/1.0/portfolios/portfolio-1":
                return httpx.Response(200, json={"data": {
                    "gid": "portfolio-1",
                    "name": "Clients",
                    "workspace": {"gid": "ws-1"},
                    "members": [{"gid": "u1", "name": "Jane"}, {"gid": "u2", "name": "John"}],
                }})
            if request.url.path == "/api/1.0/tasks":
                assignee = request.url.params["assignee"]
                return httpx.Response(200, json={"data": [make_task(f"{assignee}-client", email="")]})
            return httpx.Response(404, json={"errors": [{"message": "Unknown path"}]})

        source = _source(settings, handler, container_mode=ContainerMode.MEMBERS)
        containers = await source.list_containers("portfolio-1")
        tasks = [record async for record in source.iter_records("u1")]
        await source.aclose()

        assert [(c.gid, c.name) for c in containers] == [("u1", "Jane"), ("u2", "John")]
        assert [t.name for t in tasks] == ["u1-client"]
        assert tasks[0].custom_fields[0].name == "HOH Email"

        task_request = requests[-1]
        assert task_request.url.params["workspace"] == "ws-1"
        assert "custom_fields" in task_request.url.params["opt_fields"]
        assert task_request.headers["Authorization"] == "Bearer test-token"

    @pytest.mark.asyncio
    async def test_tasks_before_listing_members_fails(self, settings):
        source = _source(settings, lambda request: httpx.Response(200, json={"data": []}))

        with pytest.raises(DataSourceError, match="workspace"):
            [record async for record in source.iter_records("u1")]

    @pytest.mark.asyncio
    async def test_portfolio_without_members(self, settings):
        def handler(request):
            return httpx.Response(200, json={"data": {"gid": "portfolio-1", "workspace": {"gid": "ws"}}})

        source = _source(settings, handler)

        assert await source.list_containers("portfolio-1") == []


@pytest.mark.unit
class TestAsanaProjectsMode:

    @pytest.mark.asyncio
    async def test_follows_pagination(self, settings):
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path == "/api/1.0/portfolios/portfolio-1/items":
                return httpx.Response(200, json={"data": [
                    {"gid": "p1", "name": "Leads", "resource_type": "project"},
                    {"gid": "nested", "name": "Sub", "resource_type": "portfolio"},
                ], "next_page": None})
            assert request.url.path == "/api/1.0/projects/p1/tasks"
            assert request.url.params["limit"] == "2"
            if request.url.params.get("offset") == "page-2":
                return httpx.Response(200, json={"data": [make_task("Third")], "next_page": None})
            return httpx.Response(200, json={
                "data": [make_task("First"), make_task("Second")],
                "next_page": {"offset": "page-2", "uri": "..."},
            })

        source = _source(settings, handler, container_mode=ContainerMode.PROJECTS, asana_page_size=2)
        containers = await source.list_containers("portfolio-1")
        tasks = [record async for record in source.iter_records("p1")]

        assert [c.gid for c in containers] == ["p1"]
        assert [t.name for t in tasks] == ["First", "Second", "Third"]


@pytest.mark.unit
class TestAsanaErrors:

    @pytest.mark.asyncio
    async def test_upstream_error_message_is_surfaced(self, settings):
        def handler(request):
            return httpx.Response(401, json={"errors": [{"message": "Not Authorized"}]})

        source = _source(settings, handler)

        with pytest.raises(DataSourceError) as exc_info:
            await source.list_containers("portfolio-1")

        assert exc_info.value.message == "Not Authorized"
        assert exc_info.value.status_code == 401

    @pytest.mark.asyncio
    async def test_error_without_json_body(self, settings):
        source = _source(settings, lambda request: httpx.Response(503, text="upstream down"))

        with pytest.raises(DataSourceError, match="503 Service Unavailable"):
            await source.list_containers("portfolio-1")

    @pytest.mark.asyncio
    async def test_transport_error_wrapped(self, settings):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        source = _source(settings, handler, container_mode=ContainerMode.PROJECTS)

        with pytest.raises(DataSourceError, match="connection refused") as exc_info:
            [record async for record in source.iter_records("p1")]

        assert exc_info.value.container_id == "p1"

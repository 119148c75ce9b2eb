import os
from collections.abc import Generator
from typing import Any
from unittest.mock import patch

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from src.api.dependencies import get_data_source
from src.api.main import create_app
from src.config.settings import DataSourceMode, Settings
from src.sources.local_source import LocalDataSource
from tests.factories import make_task


@pytest.fixture
def settings() -> Settings:
    """Settings for tests, never read from the environment."""
    return Settings(
        asana_pat="test-token",
        portfolio_id="portfolio-1",
        data_source=DataSourceMode.LOCAL,
        local_data_file="unused.json",
        aggregation_timeout_seconds=5.0,
        cors_origins=("*",),
    )


@pytest.fixture
def portfolio_data() -> dict[str, Any]:
    """Two members with a mix of complete and incomplete clients."""
    return {
        "containers": [
            {"gid": "m1", "name": "Jane Advisor"},
            {"gid": "m2", "name": "John Advisor"},
        ],
        "records": {
            "m1": [
                make_task("Alice", email="", phone="555-1234"),
                make_task("Bob", segmentation="B", email="bob@example.com", phone=""),
                make_task("Carol", segmentation="A", email="carol@example.com", phone="555-0000"),
            ],
            "m2": [
                make_task("Dave", segmentation="A"),
                make_task("Erin", segmentation="Red Flag", email="erin@example.com"),
            ],
        },
    }


@pytest.fixture
def app(settings: Settings) -> FastAPI:
    return create_app(settings)


@pytest.fixture
def use_source(app: FastAPI) -> Generator[Any, None, None]:
    """Install a data source for the /generatePDF dependency."""

    def _install(source: Any) -> None:
        app.dependency_overrides[get_data_source] = lambda: source

    yield _install
    app.dependency_overrides.clear()


@pytest.fixture
def test_client(app: FastAPI, use_source, portfolio_data: dict[str, Any]) -> TestClient:
    """Create a test client backed by the in-memory portfolio."""
    use_source(LocalDataSource(data=portfolio_data))
    return TestClient(app)


@pytest.fixture
def clean_env() -> Generator[None, None, None]:
    """Environment without any of the service's variables."""
    keys = [
        "ASANA_PAT", "PORTFOLIO_ID", "ENV", "DATA_SOURCE", "LOCAL_DATA_FILE", "ASANA_BASE_URL",
        "ASANA_PAGE_SIZE", "ASANA_REQUEST_TIMEOUT_SECONDS", "CONTAINER_MODE", "REPORT_MARGIN",
        "REPORT_ROW_HEIGHT", "REPORT_TITLE", "REPORT_FILENAME", "AGGREGATION_TIMEOUT_SECONDS",
        "LOG_LEVEL", "CORS_ORIGINS",
    ]
    env = {key: value for key, value in os.environ.items() if key not in keys}
    with patch.dict(os.environ, env, clear=True), patch("src.config.settings.load_dotenv"):
        yield

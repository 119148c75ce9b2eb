import base64
import json
import os
from unittest.mock import patch

import pytest

from src.lambda_functions.generate_report import handler
from src.utils.error_handlers import MISSING_CONFIG_MESSAGE


class TestGenerateReportLambda:
    """Test cases for the serverless report handler."""

    @pytest.fixture
    def portfolio_file(self, tmp_path, portfolio_data):
        path = tmp_path / "portfolio.json"
        path.write_text(json.dumps(portfolio_data))
        return path

    @pytest.fixture
    def local_env(self, clean_env, portfolio_file):
        with patch.dict(os.environ, {
            "ASANA_PAT": "pat",
            "PORTFOLIO_ID": "123",
            "DATA_SOURCE": "local",
            "LOCAL_DATA_FILE": str(portfolio_file),
        }):
            yield

    @pytest.mark.usefixtures("local_env")
    def test_returns_base64_pdf(self):
        response = handler({"httpMethod": "GET", "path": "/generatePDF"}, None)

        assert response["statusCode"] == 200
        assert response["isBase64Encoded"] is True
        assert response["headers"]["Content-Type"] == "application/pdf"
        assert response["headers"]["Content-Disposition"] == "attachment; filename=missing_clients.pdf"
        assert base64.b64decode(response["body"]).startswith(b"%PDF")

    @pytest.mark.usefixtures("clean_env")
    def test_missing_configuration(self):
        response = handler({}, None)

        assert response["statusCode"] == 500
        assert response["body"] == MISSING_CONFIG_MESSAGE

    @pytest.mark.usefixtures("local_env")
    def test_no_results(self, portfolio_file):
        portfolio_file.write_text(json.dumps({"containers": [], "records": {}}))

        response = handler({}, None)

        assert response["statusCode"] == 200
        assert response["isBase64Encoded"] is False
        assert response["body"] == "No clients missing phone or email found."

    @pytest.mark.usefixtures("local_env")
    def test_upstream_failure(self, portfolio_file, portfolio_data):
        portfolio_data["records"]["m2"] = ["not a task"]
        portfolio_file.write_text(json.dumps(portfolio_data))

        response = handler({}, None)

        assert response["statusCode"] == 500
        assert response["body"].startswith("Error fetching clients: Invalid record in local data fixture")
        assert "X-Correlation-ID" in response["headers"]

    @pytest.mark.usefixtures("local_env")
    def test_malformed_container_is_a_handled_error(self, portfolio_file, portfolio_data):
        portfolio_data["containers"].append({"name": "No id"})
        portfolio_file.write_text(json.dumps(portfolio_data))

        response = handler({}, None)

        assert response["statusCode"] == 500
        assert response["body"].startswith("Error fetching clients: Invalid container")
        assert "X-Correlation-ID" in response["headers"]

    @pytest.mark.usefixtures("local_env")
    def test_numeric_ids_and_empty_containers(self, portfolio_file):
        portfolio_file.write_text(json.dumps({
            "containers": [{"gid": 1, "name": "Jane"}, {"gid": 2, "name": "John"}],
            "records": {"1": [{"gid": 10, "name": "Alice", "custom_fields": []}]},
        }))

        response = handler({}, None)

        assert response["statusCode"] == 200
        assert response["isBase64Encoded"] is True

"""Tests for the desk-staff console."""

import json

import httpx
import pytest
from rich.console import Console

from scripts.kiosk_cli import KioskCLI


class TestKioskCLI:
    """Tests for console commands against a mocked backend."""

    @pytest.fixture
    def requests(self):
        return []

    @pytest.fixture
    def cli(self, requests):
        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            routes = {
                ("GET", "/health"): httpx.Response(200, json={"status": "healthy"}),
                ("POST", "/api/add-patient"): httpx.Response(
                    200,
                    json={"status": "Success", "token": "HOS001", "name": "Asha Rao", "age": 30, "storage": "store"},
                ),
                ("GET", "/api/patients"): httpx.Response(
                    200,
                    json={"patients": [{"name": "Asha Rao", "age": 30, "token": "HOS001"}], "store_available": True},
                ),
                ("POST", "/api/undo"): httpx.Response(
                    200, json={"status": "UNDONE", "token": "HOS001", "deleted": 1}
                ),
                ("DELETE", "/api/patients/HOS404"): httpx.Response(
                    404, json={"status": "NOT_FOUND", "message": "No patient found with token HOS404"}
                ),
            }
            return routes.get((request.method, request.url.path), httpx.Response(404, json={}))

        client = httpx.Client(base_url="http://kiosk.test", transport=httpx.MockTransport(handler))
        cli = KioskCLI("http://kiosk.test", client=client, console=Console(record=True, width=120))
        yield cli
        client.close()

    def test_check_connection(self, cli):
        assert cli.check_connection() is True

    def test_add_sends_quoted_name(self, cli, requests):
        cli.run_command('/add "Asha Rao" 30')

        assert json.loads(requests[-1].content) == {"name": "Asha Rao", "age": "30"}
        assert "HOS001" in cli.console.export_text()

    def test_list_renders_queue(self, cli):
        cli.run_command("/list")
        assert "Asha Rao" in cli.console.export_text()

    def test_undo_reports_removed_token(self, cli):
        cli.run_command("/undo")
        assert "Removed HOS001" in cli.console.export_text()

    def test_delete_missing_token_shows_message(self, cli):
        cli.run_command("/delete HOS404")
        assert "No patient found with token HOS404" in cli.console.export_text()

    def test_unknown_command(self, cli, requests):
        cli.run_command("/dance")

        assert requests == []
        assert "Unknown command" in cli.console.export_text()

    def test_missing_arguments(self, cli, requests):
        cli.run_command("/add Asha")

        assert requests == []
        assert "Wrong arguments" in cli.console.export_text()

"""CLI 테스트 (typer CliRunner)."""

import json
from unittest.mock import patch

import httpx
import pytest
from typer.testing import CliRunner

from conftest import ISSUER
from appauth_desktop.cli import app

runner = CliRunner()


@pytest.fixture
def config_file(tmp_path, monkeypatch):
    for name in ("APPAUTH_CLIENT_ID", "APPAUTH_ISSUER", "APPAUTH_REDIRECT_URI", "APPAUTH_SCOPE"):
        monkeypatch.delenv(name, raising=False)
    path = tmp_path / "config.json"
    path.write_text(
        json.dumps(
            {"clientId": "c1", "openidUri": ISSUER, "redirectUri": "app://callback"}
        ),
        encoding="utf-8",
    )
    return path


def mock_client(discovery_document, token_status=200, token_body=None):
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path.endswith("/openid-configuration"):
            return httpx.Response(200, json=discovery_document)
        return httpx.Response(token_status, json=token_body)

    return lambda config: httpx.AsyncClient(transport=httpx.MockTransport(handler))


class TestCli:
    """appauth-desktop 명령."""

    def test_help(self):
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        assert "login" in result.output
        assert "refresh" in result.output

    def test_missing_configuration(self, tmp_path, monkeypatch):
        for name in ("APPAUTH_CLIENT_ID", "APPAUTH_ISSUER", "APPAUTH_REDIRECT_URI"):
            monkeypatch.delenv(name, raising=False)

        result = runner.invoke(
            app, ["refresh", "--refresh-token", "RT1", "--config", str(tmp_path / "none.json")]
        )

        assert result.exit_code == 1
        assert "Missing required configuration" in result.output

    def test_refresh(self, config_file, discovery_document):
        client_factory = mock_client(
            discovery_document, token_body={"access_token": "AT2-abcdefghijkl", "expires_in": 60}
        )

        with patch("appauth_desktop.cli.create_http_client", side_effect=client_factory):
            result = runner.invoke(
                app, ["refresh", "--refresh-token", "RT1", "--config", str(config_file)]
            )

        assert result.exit_code == 0, result.output
        assert "Refreshed" in result.output
        assert "AT2-abcdefgh" in result.output

    def test_refresh_rejected(self, config_file, discovery_document):
        client_factory = mock_client(
            discovery_document, token_status=400, token_body={"error": "invalid_grant"}
        )

        with patch("appauth_desktop.cli.create_http_client", side_effect=client_factory):
            result = runner.invoke(
                app, ["refresh", "--refresh-token", "RT1", "--config", str(config_file)]
            )

        assert result.exit_code == 1
        assert "invalid_grant" in result.output

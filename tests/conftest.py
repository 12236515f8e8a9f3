"""Shared test fixtures."""

from collections.abc import Callable

import httpx
import pytest

from appauth_desktop.config import AuthConfig
from appauth_desktop.providers.base import ProviderConfiguration
from appauth_desktop.surfaces.base import BrowserSurface
from appauth_desktop.transport import HttpTransport

ISSUER = "https://idp.example"


class FakeBrowserSurface(BrowserSurface):
    """테스트용 surface.

    navigate_to 이후 scripted_events가 있으면 순서대로 navigation 이벤트 발생.
    closes_after_events=True면 모든 이벤트 후 사용자가 창을 닫은 것으로 처리.
    """

    def __init__(
        self,
        scripted_events: list[tuple[str, str]] | None = None,
        closes_after_events: bool = False,
    ):
        super().__init__()
        self.scripted_events = scripted_events or []
        self.closes_after_events = closes_after_events
        self.begin_count = 0
        self.release_count = 0
        self.navigated_urls: list[str] = []

    async def begin(self) -> None:
        self.begin_count += 1
        self._mark_open()

    async def navigate_to(self, uri: str) -> None:
        self.navigated_urls.append(uri)
        for source, event_uri in self.scripted_events:
            self._emit_navigation(event_uri, source)
        if self.closes_after_events:
            self._emit_closed()

    async def _release(self) -> None:
        self.release_count += 1

    # 테스트에서 직접 호출
    def fire(self, uri: str, source: str = "will-navigate") -> None:
        self._emit_navigation(uri, source)

    def close_by_user(self) -> None:
        self._emit_closed()


@pytest.fixture
def auth_config() -> AuthConfig:
    """테스트용 클라이언트 설정."""
    return AuthConfig(
        client_id="c1",
        openid_issuer_uri=ISSUER,
        redirect_uri="app://callback",
        scope="openid profile",
    )


@pytest.fixture
def discovery_document() -> dict:
    return {
        "issuer": ISSUER,
        "authorization_endpoint": f"{ISSUER}/authorize",
        "token_endpoint": f"{ISSUER}/token",
        "revocation_endpoint": f"{ISSUER}/revoke",
        "userinfo_endpoint": f"{ISSUER}/userinfo",
    }


@pytest.fixture
def provider_configuration(discovery_document) -> ProviderConfiguration:
    return ProviderConfiguration.from_discovery(discovery_document)


def _strip_query(url: httpx.URL) -> str:
    return str(url).split("?")[0]


class RecordingTransport:
    """httpx.MockTransport 핸들러 + 요청 기록."""

    def __init__(self, routes: dict[tuple[str, str], Callable[[httpx.Request], httpx.Response]]):
        self.routes = routes
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        handler = self.routes.get((request.method, _strip_query(request.url)))
        if handler is None:
            return httpx.Response(404, json={"error": "not_found"})
        return handler(request)

    def calls_to(self, url: str) -> list[httpx.Request]:
        return [r for r in self.requests if _strip_query(r.url) == url]

    @staticmethod
    def form(request: httpx.Request) -> dict[str, str]:
        return dict(httpx.QueryParams(request.content.decode()))


def json_response(body: dict, status: int = 200) -> Callable[[httpx.Request], httpx.Response]:
    return lambda request: httpx.Response(status, json=body)


@pytest.fixture
def make_transport():
    """라우트 딕셔너리로 HttpTransport + 기록기 생성."""
    def factory(routes) -> tuple[HttpTransport, RecordingTransport]:
        recorder = RecordingTransport(routes)
        client = httpx.AsyncClient(transport=httpx.MockTransport(recorder))
        return HttpTransport(client), recorder

    return factory

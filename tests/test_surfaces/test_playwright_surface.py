"""Playwright surface 테스트 (Playwright 객체는 mock)."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from playwright.async_api import Error as PlaywrightError

from appauth_desktop.surfaces.playwright import (
    PlaywrightPageSurface,
    PlaywrightWindowSurface,
)


class FakePage:
    """page.on / remove_listener만 흉내내는 페이지."""

    def __init__(self):
        self.handlers: dict[str, list] = {}
        self.main_frame = MagicMock(name="main_frame")
        self.goto = AsyncMock()

    def on(self, event, handler):
        self.handlers.setdefault(event, []).append(handler)

    def remove_listener(self, event, handler):
        self.handlers[event].remove(handler)

    def emit(self, event, payload):
        for handler in list(self.handlers.get(event, [])):
            handler(payload)

    @property
    def handler_count(self):
        return sum(len(h) for h in self.handlers.values())


def make_request(url, frame, navigation=True):
    request = MagicMock()
    request.url = url
    request.frame = frame
    request.is_navigation_request.return_value = navigation
    return request


def make_response(url, status, location=None):
    response = MagicMock()
    response.url = url
    response.status = status
    response.headers = {"location": location} if location else {}
    return response


@pytest.fixture
def page():
    return FakePage()


async def start_surface(page):
    surface = PlaywrightPageSurface(page)
    await surface.begin()
    events = []
    surface.add_navigation_listener(events.append)
    return surface, events


class TestPageEventBridge:
    """Playwright 이벤트 → navigation 이벤트 변환."""

    @pytest.mark.asyncio
    async def test_main_frame_request(self, page):
        surface, events = await start_surface(page)
        page.emit("request", make_request("app://callback?code=abc", page.main_frame))

        assert [(e.uri, e.source) for e in events] == [
            ("app://callback?code=abc", "will-navigate")
        ]

    @pytest.mark.asyncio
    async def test_subframe_and_resource_requests_ignored(self, page):
        surface, events = await start_surface(page)
        page.emit("request", make_request("https://idp.example/frame", MagicMock()))
        page.emit(
            "request",
            make_request("https://idp.example/app.js", page.main_frame, navigation=False),
        )

        assert events == []

    @pytest.mark.asyncio
    async def test_redirect_location(self, page):
        """3xx Location 헤더 (상대 경로 포함)."""
        surface, events = await start_surface(page)
        page.emit(
            "response",
            make_response("https://idp.example/authorize", 302, "app://callback?code=abc"),
        )
        page.emit("response", make_response("https://idp.example/a/b", 303, "/login?x=1"))
        page.emit("response", make_response("https://idp.example/ok", 200))

        assert [(e.uri, e.source) for e in events] == [
            ("app://callback?code=abc", "redirect"),
            ("https://idp.example/login?x=1", "redirect"),
        ]

    @pytest.mark.asyncio
    async def test_frame_navigated(self, page):
        surface, events = await start_surface(page)
        frame = page.main_frame
        frame.url = "https://idp.example/consent"

        page.emit("framenavigated", frame)
        page.emit("framenavigated", MagicMock(url="https://ads.example"))

        assert [e.uri for e in events] == ["https://idp.example/consent"]

    @pytest.mark.asyncio
    async def test_page_close(self, page):
        surface, events = await start_surface(page)
        closed = []
        surface.add_close_listener(lambda: closed.append(True))

        page.emit("close", page)

        assert closed == [True]

    @pytest.mark.asyncio
    async def test_dispose_detaches_without_closing_page(self, page):
        """임베디드 surface는 페이지를 닫지 않음."""
        surface, events = await start_surface(page)
        assert page.handler_count == 4

        await surface.dispose()

        assert page.handler_count == 0
        assert surface.page is None

    @pytest.mark.asyncio
    async def test_goto_commit(self, page):
        surface, events = await start_surface(page)
        await surface.navigate_to("https://idp.example/authorize?x=1")
        page.goto.assert_awaited_once_with("https://idp.example/authorize?x=1", wait_until="commit")

    @pytest.mark.asyncio
    async def test_goto_error_after_settle_is_ignored(self, page):
        """결과 확정 후 커스텀 scheme 이동 실패는 무시."""
        surface, events = await start_surface(page)
        page.goto.side_effect = PlaywrightError("net::ERR_ABORTED")
        surface.remove_all_listeners()

        await surface.navigate_to("https://idp.example/authorize")

    @pytest.mark.asyncio
    async def test_goto_error_while_waiting_propagates(self, page):
        surface, events = await start_surface(page)
        page.goto.side_effect = PlaywrightError("net::ERR_NAME_NOT_RESOLVED")

        with pytest.raises(PlaywrightError):
            await surface.navigate_to("https://idp.example/authorize")

    @pytest.mark.asyncio
    async def test_navigate_before_begin(self, page):
        with pytest.raises(RuntimeError, match="begin"):
            await PlaywrightPageSurface(page).navigate_to("https://idp.example")


class TestPlaywrightWindowSurface:
    """독립 Chromium 창 surface."""

    @pytest.fixture
    def playwright_stack(self, page):
        browser = MagicMock()
        browser.is_connected.return_value = True
        browser.close = AsyncMock()
        context = MagicMock()
        context.new_page = AsyncMock(return_value=page)
        browser.new_context = AsyncMock(return_value=context)

        playwright = MagicMock()
        playwright.chromium.launch = AsyncMock(return_value=browser)
        playwright.stop = AsyncMock()

        manager = MagicMock()
        manager.start = AsyncMock(return_value=playwright)
        return manager, playwright, browser

    @pytest.mark.asyncio
    async def test_begin_and_dispose(self, page, playwright_stack):
        manager, playwright, browser = playwright_stack

        with patch("playwright.async_api.async_playwright", return_value=manager):
            surface = PlaywrightWindowSurface(width=1024, channel="chrome")
            await surface.begin()

        playwright.chromium.launch.assert_awaited_once_with(headless=False, channel="chrome")
        browser.new_context.assert_awaited_once_with(viewport={"width": 1024, "height": 600})
        browser.on.assert_called_once_with("disconnected", surface._on_disconnected)
        assert surface.page is page

        await surface.dispose()
        await surface.dispose()

        browser.close.assert_awaited_once()
        playwright.stop.assert_awaited_once()
        assert page.handler_count == 0

    @pytest.mark.asyncio
    async def test_browser_disconnect_closes_surface(self, playwright_stack):
        manager, _, browser = playwright_stack

        with patch("playwright.async_api.async_playwright", return_value=manager):
            surface = PlaywrightWindowSurface()
            await surface.begin()

        closed = []
        surface.add_close_listener(lambda: closed.append(True))
        browser.is_connected.return_value = False

        surface._on_disconnected(browser)
        await surface.dispose()

        assert closed == [True]
        browser.close.assert_not_awaited()

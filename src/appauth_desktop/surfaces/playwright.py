"""Playwright Browser Surfaces

- PlaywrightWindowSurface: 별도의 Chromium 창을 직접 띄우고 소유함
- PlaywrightPageSurface: 호출자가 소유한 페이지에 붙어서 동작 (임베디드)

navigation 이벤트 출처:
    request     - 메인 프레임 navigation 요청 ("will-navigate")
    response    - 3xx 응답의 Location 헤더 ("redirect", 커스텀 scheme 포함)
    framenavigated - 메인 프레임 이동 완료
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING
from urllib.parse import urljoin

from appauth_desktop.surfaces.base import BrowserSurface

if TYPE_CHECKING:
    from playwright.async_api import Browser, Frame, Page, Playwright, Request, Response

logger = logging.getLogger(__name__)


class _PageEventBridge(BrowserSurface):
    """Playwright Page 이벤트를 BrowserSurface 이벤트로 변환"""

    def __init__(self) -> None:
        super().__init__()
        self._page: Page | None = None
        self._handlers: list[tuple[str, object]] = []

    @property
    def page(self) -> Page | None:
        return self._page

    def _attach(self, page: Page) -> None:
        self._detach()
        self._page = page
        self._handlers = [
            ("request", self._on_request),
            ("response", self._on_response),
            ("framenavigated", self._on_frame_navigated),
            ("close", self._on_close),
        ]
        for event, handler in self._handlers:
            page.on(event, handler)

    def _detach(self) -> None:
        if self._page is None:
            return
        for event, handler in self._handlers:
            self._page.remove_listener(event, handler)
        self._handlers = []

    def _is_main_frame(self, frame: Frame) -> bool:
        return self._page is not None and frame == self._page.main_frame

    def _on_request(self, request: Request) -> None:
        if request.is_navigation_request() and self._is_main_frame(request.frame):
            self._emit_navigation(request.url, "will-navigate")

    def _on_response(self, response: Response) -> None:
        if not 300 <= response.status < 400:
            return
        location = response.headers.get("location")
        if location:
            self._emit_navigation(urljoin(response.url, location), "redirect")

    def _on_frame_navigated(self, frame: Frame) -> None:
        if self._is_main_frame(frame):
            self._emit_navigation(frame.url, "navigated")

    def _on_close(self, page: Page) -> None:
        self._emit_closed()

    async def navigate_to(self, uri: str) -> None:
        if self._page is None:
            raise RuntimeError("Surface not started. Call begin() first.")
        from playwright.async_api import Error as PlaywrightError

        # 결과는 navigation 이벤트로 받으므로 commit까지만 기다림
        try:
            await self._page.goto(uri, wait_until="commit")
        except PlaywrightError as e:
            # 이미 로그인된 경우 즉시 커스텀 scheme으로 redirect되어 goto가 실패함.
            # 그 전에 결과가 확정되어 리스너가 해제됐다면 무시.
            if self.listener_count:
                raise
            logger.debug("Ignoring navigation error after redirect: %s", e)


class PlaywrightWindowSurface(_PageEventBridge):
    """독립 Chromium 창 surface.

    begin()마다 새 브라우저 창을 띄우고 dispose() 시 브라우저와 Playwright를 종료함.

    Example:
        surface = PlaywrightWindowSurface(width=800, height=600)
        handler = AuthorizationRequestHandler(surface)
    """

    DEFAULT_VIEWPORT = {"width": 800, "height": 600}

    def __init__(
        self,
        width: int | None = None,
        height: int | None = None,
        headless: bool = False,
        channel: str | None = None,
    ) -> None:
        super().__init__()
        self.viewport = {
            "width": width or self.DEFAULT_VIEWPORT["width"],
            "height": height or self.DEFAULT_VIEWPORT["height"],
        }
        self.headless = headless
        self.channel = channel
        self._playwright: Playwright | None = None
        self._browser: Browser | None = None

    async def begin(self) -> None:
        from playwright.async_api import async_playwright

        await self._shutdown()
        self._mark_open()

        self._playwright = await async_playwright().start()
        launch_options = {"headless": self.headless}
        if self.channel:
            launch_options["channel"] = self.channel
        self._browser = await self._playwright.chromium.launch(**launch_options)
        self._browser.on("disconnected", self._on_disconnected)

        context = await self._browser.new_context(viewport=self.viewport)
        page = await context.new_page()
        self._attach(page)
        logger.debug("Login window opened")

    def _on_disconnected(self, browser: Browser) -> None:
        self._emit_closed()

    async def _release(self) -> None:
        await self._shutdown()
        logger.debug("Login window closed")

    async def _shutdown(self) -> None:
        self._detach()
        self._page = None
        if self._browser is not None:
            self._browser.remove_listener("disconnected", self._on_disconnected)
            if self._browser.is_connected():
                await self._browser.close()
            self._browser = None
        if self._playwright is not None:
            await self._playwright.stop()
            self._playwright = None


class PlaywrightPageSurface(_PageEventBridge):
    """호출자가 소유한 페이지에 붙는 임베디드 surface.

    dispose() 시 리스너만 해제하고 페이지는 닫지 않음.
    """

    def __init__(self, page: Page) -> None:
        super().__init__()
        self._owner_page = page

    async def begin(self) -> None:
        self._mark_open()
        self._attach(self._owner_page)

    async def _release(self) -> None:
        self._detach()
        self._page = None

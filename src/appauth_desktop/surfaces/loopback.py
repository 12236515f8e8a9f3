"""System Browser + Loopback Callback Surface

시스템 기본 브라우저로 인증 URL을 열고, 로컬 HTTP 서버로 redirect를 수신.
redirect_uri는 ``http://127.0.0.1:<port>/...`` 형태여야 함.

시스템 브라우저는 창 닫힘을 알 수 없으므로 취소는 핸들러의 timeout으로 처리.
"""

import asyncio
import html
import logging
import threading
import webbrowser
from http.server import BaseHTTPRequestHandler, HTTPServer
from urllib.parse import parse_qs, urlsplit

from rich.console import Console
from rich.panel import Panel

from appauth_desktop.exceptions import ConfigurationError
from appauth_desktop.surfaces.base import BrowserSurface

logger = logging.getLogger(__name__)
console = Console()

LOOPBACK_HOSTS = ("127.0.0.1", "localhost")
IGNORED_PATHS = ("/favicon.ico", "/robots.txt")

_PAGE_TEMPLATE = """<!DOCTYPE html>
<html>
<head>
    <meta charset="utf-8">
    <title>{title}</title>
    <style>
        body {{
            font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif;
            display: flex;
            justify-content: center;
            align-items: center;
            height: 100vh;
            margin: 0;
            background: {background};
            color: white;
        }}
        .container {{ text-align: center; padding: 40px; }}
    </style>
</head>
<body>
    <div class="container">
        <h1>{title}</h1>
        <p>{message}</p>
    </div>
</body>
</html>
"""


def _render_page(title: str, message: str, success: bool) -> bytes:
    background = "#2e7d32" if success else "#c62828"
    return _PAGE_TEMPLATE.format(
        title=html.escape(title), message=html.escape(message), background=background
    ).encode("utf-8")


class _CallbackHandler(BaseHTTPRequestHandler):
    """redirect 요청을 surface로 전달"""

    server: "_CallbackServer"

    def log_message(self, format, *args):
        """기본 stderr 로그 비활성화."""
        pass

    def do_GET(self):
        parsed = urlsplit(self.path)

        if parsed.path in IGNORED_PATHS:
            self.send_response(204)
            self.end_headers()
            return

        self.server.surface._deliver(self.server.base_url + self.path)

        params = parse_qs(parsed.query)
        if "error" in params:
            description = params.get("error_description", params["error"])[0]
            body = _render_page("Authorization failed", description, success=False)
            status = 400
        elif "code" in params:
            body = _render_page(
                "Authorization complete",
                "You can close this window and return to the application.",
                success=True,
            )
            status = 200
        else:
            body = _render_page("Waiting for authorization", "", success=False)
            status = 404

        self.send_response(status)
        self.send_header("Content-Type", "text/html; charset=utf-8")
        self.end_headers()
        self.wfile.write(body)


class _CallbackServer(HTTPServer):
    def __init__(self, address, surface: "LoopbackBrowserSurface", base_url: str):
        self.surface = surface
        self.base_url = base_url
        super().__init__(address, _CallbackHandler)


class LoopbackBrowserSurface(BrowserSurface):
    """시스템 브라우저 surface.

    Example:
        surface = LoopbackBrowserSurface("http://127.0.0.1:8765/callback")
        handler = AuthorizationRequestHandler(surface)
        response = await handler.perform_authorization_request(
            config, request, timeout=300
        )
    """

    def __init__(self, redirect_uri: str, open_browser: bool = True):
        super().__init__()
        parts = urlsplit(redirect_uri)
        if parts.scheme != "http" or parts.hostname not in LOOPBACK_HOSTS:
            raise ConfigurationError(
                f"Loopback surface needs an http://127.0.0.1 redirect URI: {redirect_uri}"
            )
        if not parts.port:
            raise ConfigurationError(f"Redirect URI has no port: {redirect_uri}")

        self.redirect_uri = redirect_uri
        self.host = parts.hostname
        self.port = parts.port
        self.open_browser = open_browser
        self._base_url = f"{parts.scheme}://{parts.netloc}"
        self._server: _CallbackServer | None = None
        self._thread: threading.Thread | None = None
        self._loop: asyncio.AbstractEventLoop | None = None

    async def begin(self) -> None:
        await self._shutdown()
        self._mark_open()
        self._loop = asyncio.get_running_loop()

        try:
            self._server = _CallbackServer((self.host, self.port), self, self._base_url)
        except OSError as e:
            raise ConfigurationError(
                f"Cannot listen on {self.host}:{self.port} for the OAuth callback: {e}"
            ) from e
        self._thread = threading.Thread(
            target=self._server.serve_forever, name="oauth-callback", daemon=True
        )
        self._thread.start()
        logger.debug("Callback server on %s:%d", self.host, self.port)

    def _deliver(self, uri: str) -> None:
        """서버 스레드에서 호출: 이벤트 루프로 넘김"""
        loop = self._loop
        if loop is None or loop.is_closed():
            return
        loop.call_soon_threadsafe(self._emit_navigation, uri, "callback")

    async def navigate_to(self, uri: str) -> None:
        console.print()
        console.print(
            Panel.fit(
                "[bold cyan]Sign in with your browser.[/bold cyan]\n\n"
                "If it does not open, visit:\n"
                f"[link={uri}]{uri}[/link]",
                title="[AUTH] Login Required",
                border_style="cyan",
            )
        )
        if self.open_browser:
            # webbrowser.open은 플랫폼에 따라 블로킹될 수 있음
            await asyncio.to_thread(webbrowser.open, uri)

    async def _release(self) -> None:
        await self._shutdown()

    async def _shutdown(self) -> None:
        server, thread = self._server, self._thread
        self._server = None
        self._thread = None
        if server is None:
            return
        await asyncio.to_thread(server.shutdown)
        server.server_close()
        if thread is not None:
            thread.join(timeout=2)
        logger.debug("Callback server closed")

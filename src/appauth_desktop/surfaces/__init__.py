"""Browser Surfaces

인증 핸들러가 사용하는 브라우저 surface 구현.
- PlaywrightWindowSurface: 독립 Chromium 창
- PlaywrightPageSurface: 호출자가 소유한 페이지 (임베디드)
- LoopbackBrowserSurface: 시스템 브라우저 + 로컬 콜백 서버
"""

from appauth_desktop.surfaces.base import BrowserSurface, NavigationEvent
from appauth_desktop.surfaces.loopback import LoopbackBrowserSurface
from appauth_desktop.surfaces.playwright import (
    PlaywrightPageSurface,
    PlaywrightWindowSurface,
)

__all__ = [
    "BrowserSurface",
    "NavigationEvent",
    "LoopbackBrowserSurface",
    "PlaywrightPageSurface",
    "PlaywrightWindowSurface",
]

"""Browser Surface 추상 클래스

인증 핸들러가 사용자 로그인 화면을 띄우는 데 필요한 인터페이스 정의.
모든 surface 구현은 이 클래스를 상속해야 함.
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NavigationEvent:
    """Navigation / redirect 이벤트.

    Attributes:
        uri: 이동 대상 URI
        source: 이벤트 출처 (예: "will-navigate", "redirect", "callback")
    """

    uri: str
    source: str = "navigate"


NavigationListener = Callable[[NavigationEvent], None]
CloseListener = Callable[[], None]


class BrowserSurface(ABC):
    """Browser Surface 베이스 클래스

    navigation 이벤트는 push 방식으로 등록된 리스너에 전달됨.
    dispose()는 모든 리스너를 해제하고 surface를 정리하며, 여러 번 호출해도
    안전해야 함.
    """

    def __init__(self) -> None:
        self._navigation_listeners: list[NavigationListener] = []
        self._close_listeners: list[CloseListener] = []
        self._closed = False
        self._disposed = False

    @property
    def closed(self) -> bool:
        """surface가 닫혔는지 여부"""
        return self._closed

    @abstractmethod
    async def begin(self) -> None:
        """surface 생성 또는 초기화"""
        pass

    @abstractmethod
    async def navigate_to(self, uri: str) -> None:
        """URL 로드

        Args:
            uri: 로드할 URL
        """
        pass

    async def dispose(self) -> None:
        """모든 리스너 해제 + surface 정리

        아직 닫히지 않은 surface는 close 리스너에 먼저 알린 뒤 해제함.
        대기 중인 인증 요청은 이를 통해 취소됨.
        """
        if self._disposed:
            self.remove_all_listeners()
            return
        self._disposed = True
        self._emit_closed()
        self.remove_all_listeners()
        await self._release()

    @abstractmethod
    async def _release(self) -> None:
        """하위 UI 리소스 해제 (dispose에서 한 번만 호출됨)"""
        pass

    def _mark_open(self) -> None:
        """begin()에서 호출: 이전 시도의 닫힘 상태 초기화"""
        self._closed = False
        self._disposed = False

    def add_navigation_listener(self, listener: NavigationListener) -> None:
        self._navigation_listeners.append(listener)

    def add_close_listener(self, listener: CloseListener) -> None:
        self._close_listeners.append(listener)

    def remove_all_listeners(self) -> None:
        self._navigation_listeners.clear()
        self._close_listeners.clear()

    @property
    def listener_count(self) -> int:
        return len(self._navigation_listeners) + len(self._close_listeners)

    def _emit_navigation(self, uri: str, source: str = "navigate") -> None:
        event = NavigationEvent(uri=uri, source=source)
        # 리스너가 dispose()를 호출할 수 있으므로 복사본으로 순회
        for listener in list(self._navigation_listeners):
            listener(event)

    def _emit_closed(self) -> None:
        """사용자가 surface를 닫았을 때 구현체가 호출"""
        if self._closed:
            return
        self._closed = True
        logger.debug("Browser surface closed externally")
        for listener in list(self._close_listeners):
            listener()

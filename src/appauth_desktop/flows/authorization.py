"""Authorization Request Handler

Browser surface를 이용한 단일 authorization 요청 처리.

상태 전이:
    IDLE -> AWAITING_REDIRECT -> RESOLVED   (code 수신)
                              -> REJECTED   (error 수신)
                              -> CANCELLED  (사용자가 창을 닫음 / 타임아웃)

결과는 정확히 한 번만 완료되며, surface는 모든 종료 경로에서 한 번 dispose 됨.
"""

import asyncio
import logging
import secrets
from dataclasses import dataclass, field
from enum import Enum
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from appauth_desktop.exceptions import (
    AuthorizationCancelledError,
    AuthorizationError,
    AuthorizationInProgressError,
)
from appauth_desktop.flows.redirect import (
    AuthorizationErrorResponse,
    AuthorizationResponse,
    AuthorizationResult,
    RedirectInterceptor,
)
from appauth_desktop.providers.base import ProviderConfiguration
from appauth_desktop.surfaces.base import BrowserSurface, NavigationEvent

logger = logging.getLogger(__name__)

RESPONSE_TYPE_CODE = "code"

# extras가 덮어쓸 수 없는 고정 파라미터
BUILT_IN_PARAMETERS = ("response_type", "client_id", "redirect_uri", "scope", "state")


def generate_state() -> str:
    """CSRF 바인딩용 state 생성"""
    return secrets.token_urlsafe(32)


@dataclass(frozen=True)
class AuthorizationRequest:
    """Authorization 요청.

    인증 시도마다 하나씩 생성되며 이후 변경되지 않음.
    """

    client_id: str
    redirect_uri: str
    scope: str
    response_type: str = RESPONSE_TYPE_CODE
    state: str = field(default_factory=generate_state)
    extras: dict[str, str] = field(default_factory=dict)

    def to_query(self) -> dict[str, str]:
        """URL 쿼리 파라미터로 변환"""
        params = {
            "response_type": self.response_type,
            "client_id": self.client_id,
            "redirect_uri": self.redirect_uri,
            "scope": self.scope,
            "state": self.state,
        }
        for key, value in self.extras.items():
            if key in BUILT_IN_PARAMETERS:
                logger.warning("Ignoring extra that overrides built-in parameter: %s", key)
                continue
            params[key] = value
        return params


def build_request_url(
    configuration: ProviderConfiguration, request: AuthorizationRequest
) -> str:
    """Authorization endpoint에 요청 파라미터를 붙인 URL 생성.

    endpoint에 이미 있는 쿼리는 유지함.
    """
    parts = urlsplit(configuration.authorization_endpoint)
    query = parse_qsl(parts.query, keep_blank_values=True)
    query.extend(request.to_query().items())
    return urlunsplit(parts._replace(query=urlencode(query)))


class HandlerState(Enum):
    IDLE = "idle"
    AWAITING_REDIRECT = "awaiting_redirect"
    RESOLVED = "resolved"
    REJECTED = "rejected"
    CANCELLED = "cancelled"


class AuthorizationRequestHandler:
    """Browser surface 기반 authorization 요청 핸들러.

    surface 종류(독립 창 / 임베디드 페이지 / 시스템 브라우저)에 관계없이
    BrowserSurface 인터페이스에만 의존함.

    Example:
        handler = AuthorizationRequestHandler(PlaywrightWindowSurface())
        response = await handler.perform_authorization_request(config, request)
    """

    def __init__(self, surface: BrowserSurface):
        self.surface = surface
        self._state = HandlerState.IDLE
        self._future: asyncio.Future | None = None

    @property
    def state(self) -> HandlerState:
        return self._state

    @property
    def in_progress(self) -> bool:
        return self._state is HandlerState.AWAITING_REDIRECT

    async def perform_authorization_request(
        self,
        configuration: ProviderConfiguration,
        request: AuthorizationRequest,
        timeout: float | None = None,
    ) -> AuthorizationResponse:
        """Authorization 요청 수행.

        Args:
            configuration: Provider endpoint 설정
            request: Authorization 요청
            timeout: 사용자 입력 대기 시간 (초, None이면 무제한)

        Returns:
            AuthorizationResponse: code와 state (state는 검증 없이 그대로 전달)

        Raises:
            AuthorizationInProgressError: 이미 진행 중인 요청이 있는 경우
            AuthorizationError: provider가 error로 redirect 한 경우
            AuthorizationCancelledError: redirect 전에 surface가 닫히거나 타임아웃
        """
        if self.in_progress:
            raise AuthorizationInProgressError(
                "Authorization request already in progress"
            )

        loop = asyncio.get_running_loop()
        future: asyncio.Future = loop.create_future()
        interceptor = RedirectInterceptor(request.redirect_uri)

        self._future = future
        self._state = HandlerState.AWAITING_REDIRECT

        def on_navigation(event: NavigationEvent) -> None:
            if future.done():
                # 같은 URI가 will-navigate와 redirect 양쪽에서 올 수 있음
                return
            result = interceptor.observe(event.uri)
            if result is not None:
                logger.debug("Terminal navigation from %s", event.source)
                self._settle(future, result=result)

        def on_closed() -> None:
            if future.done():
                return
            logger.info("Browser surface closed before redirect")
            self._settle(
                future,
                error=AuthorizationCancelledError("Authorization flow cancelled"),
            )

        self.surface.add_navigation_listener(on_navigation)
        self.surface.add_close_listener(on_closed)

        url = build_request_url(configuration, request)
        logger.debug("Authorization URL: %.80s...", url)

        try:
            await self.surface.begin()
            await self.surface.navigate_to(url)
            if timeout is None:
                result = await future
            else:
                result = await asyncio.wait_for(future, timeout)
        except asyncio.TimeoutError as e:
            self._state = HandlerState.CANCELLED
            raise AuthorizationCancelledError(
                f"Authorization timed out after {timeout}s"
            ) from e
        except asyncio.CancelledError:
            self._state = HandlerState.CANCELLED
            raise
        except BaseException:
            if self._state is HandlerState.AWAITING_REDIRECT:
                self._state = HandlerState.IDLE
            raise
        finally:
            if not future.done():
                future.cancel()
            self._future = None
            await self.surface.dispose()

        if isinstance(result, AuthorizationErrorResponse):
            self._state = HandlerState.REJECTED
            logger.error("Authorization rejected: %s", result.error)
            raise AuthorizationError(
                f"Authorization failed: {result.error}",
                error_code=result.error,
                error_description=result.error_description,
                error_uri=result.error_uri,
                state=result.state,
            )

        self._state = HandlerState.RESOLVED
        return result

    def _settle(
        self,
        future: asyncio.Future,
        result: AuthorizationResult | None = None,
        error: BaseException | None = None,
    ) -> None:
        """one-shot 완료: 리스너를 즉시 해제한 뒤 future를 완료"""
        if future.done():
            return
        self.surface.remove_all_listeners()
        if error is not None:
            self._state = HandlerState.CANCELLED
            future.set_exception(error)
        else:
            future.set_result(result)

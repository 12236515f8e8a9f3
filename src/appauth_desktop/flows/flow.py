"""Authorization Flow

Provider 설정, 현재 토큰을 보관하고 로그인 / 토큰 갱신을 조율하는 오케스트레이터.

플로우:
1. discovery 문서 조회 (최초 1회, 캐시)
2. PKCE verifier 생성 + AuthorizationRequest 구성
3. Browser surface로 사용자 로그인 → redirect에서 code 추출
4. code → 토큰 교환
5. 토큰 저장 후 ON_TOKEN_RESPONSE 알림
"""

import logging
from collections.abc import Callable

from appauth_desktop.config import AuthConfig
from appauth_desktop.exceptions import (
    AuthorizationInProgressError,
    ConfigurationError,
    MissingRefreshTokenError,
    StateMismatchError,
    TokenError,
    TransportError,
)
from appauth_desktop.flows.authorization import (
    AuthorizationRequest,
    AuthorizationRequestHandler,
)
from appauth_desktop.flows.pkce import CodeVerifier
from appauth_desktop.providers.base import ProviderConfiguration
from appauth_desktop.tokens.exchange import TokenExchangeClient
from appauth_desktop.tokens.models import TokenResponse
from appauth_desktop.transport import HttpTransport

logger = logging.getLogger(__name__)


class AuthStateEmitter:
    """인증 상태 변경 알림.

    payload 없이 "새 토큰 상태가 있음"만 알림. 구독자는 AuthFlow에서 다시 읽어야 함.
    """

    ON_TOKEN_RESPONSE = "on_token_response"

    def __init__(self) -> None:
        self._listeners: dict[str, list[Callable[[], None]]] = {}

    def on(self, event: str, listener: Callable[[], None]) -> Callable[[], None]:
        """리스너 등록

        Returns:
            Callable: 호출하면 등록 해제
        """
        self._listeners.setdefault(event, []).append(listener)

        def unsubscribe() -> None:
            listeners = self._listeners.get(event, [])
            if listener in listeners:
                listeners.remove(listener)

        return unsubscribe

    def emit(self, event: str) -> None:
        for listener in list(self._listeners.get(event, [])):
            try:
                listener()
            except Exception:
                logger.warning("Listener for %s failed", event, exc_info=True)

    def listener_count(self, event: str) -> int:
        return len(self._listeners.get(event, []))


class AuthFlow:
    """OAuth 2.0 Authorization Code + PKCE 플로우.

    UI 레이어는 access_token / is_logged_in을 읽거나 auth_state_emitter를
    구독만 하며, 상태를 직접 바꾸지 않음.

    Example:
        async with create_http_client(config) as client:
            flow = AuthFlow(
                config,
                HttpTransport(client),
                AuthorizationRequestHandler(PlaywrightWindowSurface()),
            )
            await flow.sign_in()
            print(flow.access_token)
    """

    def __init__(
        self,
        config: AuthConfig,
        transport: HttpTransport,
        authorization_handler: AuthorizationRequestHandler,
        token_client: TokenExchangeClient | None = None,
        refresh_token: str | None = None,
        authorization_timeout: float | None = None,
    ):
        self.config = config
        self.transport = transport
        self.authorization_handler = authorization_handler
        self.token_client = token_client or TokenExchangeClient(transport)
        self.authorization_timeout = authorization_timeout
        self.auth_state_emitter = AuthStateEmitter()

        self._service_configuration: ProviderConfiguration | None = None
        self._token_response: TokenResponse | None = None
        self._refresh_token = refresh_token
        self._verifier: CodeVerifier | None = None

    @property
    def service_configuration(self) -> ProviderConfiguration | None:
        return self._service_configuration

    @property
    def token_response(self) -> TokenResponse | None:
        return self._token_response

    @property
    def access_token(self) -> str | None:
        if self._token_response is None:
            return None
        return self._token_response.access_token

    @property
    def refresh_token(self) -> str | None:
        return self._refresh_token

    @property
    def is_logged_in(self) -> bool:
        """유효한 토큰 응답이 있는지 여부"""
        return self._token_response is not None and self._token_response.is_valid()

    @property
    def sign_in_in_progress(self) -> bool:
        return self._verifier is not None

    async def fetch_service_configuration(self) -> ProviderConfiguration:
        """Provider 설정 조회 (이미 있으면 캐시 반환)

        Raises:
            ConfigurationError: discovery 조회 실패
        """
        if self._service_configuration is not None:
            return self._service_configuration

        issuer = self.config.openid_issuer_uri
        try:
            configuration = await self.transport.fetch_discovery_document(issuer)
        except (ConfigurationError, TransportError) as e:
            raise ConfigurationError(
                f"Unknown service configuration: {e}", provider=issuer
            ) from e

        self._service_configuration = configuration
        logger.debug("Service configuration loaded for %s", issuer)
        return configuration

    def _client_extras(self) -> dict[str, str]:
        extras: dict[str, str] = {}
        if self.config.client_secret:
            extras["client_secret"] = self.config.client_secret
        return extras

    def _build_authorization_request(
        self, verifier: CodeVerifier, username: str | None
    ) -> AuthorizationRequest:
        extras = {
            "code_challenge": verifier.challenge,
            "code_challenge_method": verifier.method,
            "prompt": "consent",
            "access_type": "offline",
        }
        if username:
            extras["login_hint"] = username
        return AuthorizationRequest(
            client_id=self.config.client_id,
            redirect_uri=self.config.redirect_uri,
            scope=self.config.scope,
            extras=extras,
        )

    async def sign_in(self, username: str | None = None) -> None:
        """로그인 수행

        Args:
            username: login_hint로 전달할 사용자 이름

        Raises:
            AuthorizationInProgressError: 이미 로그인 진행 중
            ConfigurationError: provider 설정 조회 실패
            AuthorizationError: provider가 인증을 거부 (StateMismatchError 포함)
            AuthorizationCancelledError: 사용자가 창을 닫음
            TokenError: 토큰 교환 실패
        """
        if self.sign_in_in_progress:
            raise AuthorizationInProgressError("Sign-in already in progress")

        # fetch 중 재진입을 막기 위해 verifier를 먼저 생성
        verifier = CodeVerifier.generate()
        self._verifier = verifier
        try:
            configuration = await self.fetch_service_configuration()
            request = self._build_authorization_request(verifier, username)

            response = await self.authorization_handler.perform_authorization_request(
                configuration, request, timeout=self.authorization_timeout
            )

            if response.state != request.state:
                logger.error("State mismatch in authorization response")
                raise StateMismatchError(
                    "Authorization response state does not match request",
                    error_code="state_mismatch",
                    state=response.state,
                )

            await self._perform_token_request(configuration, response.code, verifier)
        finally:
            self._verifier = None

        logger.info("Sign-in complete")
        self.auth_state_emitter.emit(AuthStateEmitter.ON_TOKEN_RESPONSE)

    async def _perform_token_request(
        self, configuration: ProviderConfiguration, code: str, verifier: CodeVerifier
    ) -> None:
        extras = self._client_extras()
        extras["code_verifier"] = verifier.verifier

        response = await self.token_client.exchange_code(
            configuration,
            self.config.client_id,
            self.config.redirect_uri,
            code,
            extras,
        )
        self._store(response)

    def _store(self, response: TokenResponse) -> None:
        response = response.with_refresh_token_fallback(self._refresh_token)
        self._token_response = response
        self._refresh_token = response.refresh_token

    def sign_out(self) -> None:
        """메모리의 토큰 상태 삭제 (provider에는 요청하지 않음)"""
        self._token_response = None
        self._refresh_token = None
        logger.info("Signed out")

    async def revoke_tokens(self) -> None:
        """provider에서 토큰 폐기 후 sign_out

        refresh token이 있으면 refresh token을, 없으면 access token을 폐기.
        폐기 실패 시 로컬 상태는 유지됨.
        """
        token = self._refresh_token or self.access_token
        if token:
            configuration = await self.fetch_service_configuration()
            hint = "refresh_token" if self._refresh_token else "access_token"
            await self.token_client.revoke(
                configuration,
                self.config.client_id,
                token,
                token_type_hint=hint,
                extras=self._client_extras(),
            )
        self.sign_out()

    async def update_access_token(self) -> None:
        """만료된 경우에만 refresh token으로 access token 갱신

        Raises:
            MissingRefreshTokenError: refresh token이 없는 경우
            ConfigurationError: provider 설정 조회 실패
            TokenError: provider가 갱신을 거부 (refresh token은 그대로 유지)
        """
        if self._token_response is not None and self._token_response.is_valid():
            return

        if not self._refresh_token:
            raise MissingRefreshTokenError("Missing refresh token")

        configuration = await self.fetch_service_configuration()
        response = await self.token_client.refresh(
            configuration,
            self.config.client_id,
            self.config.redirect_uri,
            self._refresh_token,
            self._client_extras(),
        )
        self._store(response)
        logger.info("Access token refreshed")
        self.auth_state_emitter.emit(AuthStateEmitter.ON_TOKEN_RESPONSE)

    async def fetch_user_info(self) -> dict:
        """userinfo endpoint 조회 (필요 시 먼저 토큰 갱신)

        Raises:
            ConfigurationError: provider가 userinfo endpoint를 제공하지 않는 경우
            AuthenticationError: 토큰이 없거나 조회 실패
        """
        await self.update_access_token()
        configuration = await self.fetch_service_configuration()
        if not configuration.userinfo_endpoint:
            raise ConfigurationError(
                "Provider has no userinfo endpoint", provider=configuration.issuer
            )

        token = self._token_response
        status, body = await self.transport.get_json(
            configuration.userinfo_endpoint,
            headers={"Authorization": f"{token.token_type} {token.access_token}"},
        )
        if status != 200 or body is None:
            raise TokenError(
                f"Userinfo request failed with status {status}",
                error_code="http_error",
                status_code=status,
                provider=configuration.issuer,
            )
        return body

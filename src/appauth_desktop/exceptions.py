"""Custom authentication exceptions.

인증 플로우 관련 예외 클래스 정의.
모든 예외는 AuthenticationError를 상속하므로 호출자는 한 번에 잡을 수 있음.
"""


class AuthenticationError(Exception):
    """기본 인증 예외.

    모든 인증 관련 예외의 베이스 클래스.

    Attributes:
        provider: 인증 제공자 (issuer URI 등)
    """

    def __init__(self, message: str, provider: str | None = None):
        self.provider = provider
        super().__init__(message)


class ConfigurationError(AuthenticationError):
    """Provider 설정 에러.

    discovery 문서를 가져오지 못했거나, 설정 파일에 필수 값이 없음.
    """
    pass


class PKCEError(AuthenticationError):
    """PKCE challenge 변환을 사용할 수 없음."""
    pass


class TransportError(AuthenticationError):
    """네트워크/DNS/TLS 실패.

    원래의 httpx 예외는 ``__cause__`` 로 연결됨.
    """
    pass


class MissingRefreshTokenError(AuthenticationError):
    """Refresh token 없이 갱신을 요청함."""
    pass


class AuthorizationInProgressError(AuthenticationError):
    """이미 진행 중인 인증 요청이 있음."""
    pass


class AuthorizationCancelledError(AuthenticationError):
    """사용자가 redirect 전에 브라우저 창을 닫음 (또는 타임아웃)."""
    pass


class OAuthError(AuthenticationError):
    """OAuth 프로토콜 에러.

    Provider가 돌려준 에러 코드와 설명을 그대로 보관.

    Attributes:
        error_code: OAuth 에러 코드 (예: 'invalid_grant', 'access_denied')
        error_description: 사람이 읽을 수 있는 설명
        error_uri: 에러 설명 페이지 URI
        provider: 인증 제공자
    """

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        error_description: str | None = None,
        error_uri: str | None = None,
        provider: str | None = None,
    ):
        self.error_code = error_code
        self.error_description = error_description
        self.error_uri = error_uri
        super().__init__(message, provider)


class AuthorizationError(OAuthError):
    """Authorization endpoint가 ``error`` 파라미터로 redirect 함.

    Attributes:
        state: redirect에 포함된 state 값 (그대로 전달)
    """

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        error_description: str | None = None,
        error_uri: str | None = None,
        state: str | None = None,
        provider: str | None = None,
    ):
        self.state = state
        super().__init__(message, error_code, error_description, error_uri, provider)


class StateMismatchError(AuthorizationError):
    """Redirect의 state가 요청한 state와 다름 (CSRF 의심)."""
    pass


class TokenError(OAuthError):
    """Token endpoint가 에러를 반환함.

    Attributes:
        status_code: HTTP 상태 코드
    """

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        error_description: str | None = None,
        error_uri: str | None = None,
        status_code: int | None = None,
        provider: str | None = None,
    ):
        self.status_code = status_code
        super().__init__(message, error_code, error_description, error_uri, provider)

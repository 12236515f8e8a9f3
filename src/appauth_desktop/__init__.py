"""AppAuth Desktop - OAuth 2.0 / OpenID Connect for desktop apps.

Authorization Code + PKCE 플로우를 임베디드 브라우저 surface로 수행.

Example:
    from appauth_desktop import AuthFlow, AuthorizationRequestHandler, HttpTransport
    from appauth_desktop.surfaces import PlaywrightWindowSurface

    async with create_http_client(config) as client:
        flow = AuthFlow(
            config,
            HttpTransport(client),
            AuthorizationRequestHandler(PlaywrightWindowSurface()),
        )
        await flow.sign_in()
"""

from appauth_desktop.config import AuthConfig, load_config
from appauth_desktop.exceptions import (
    AuthenticationError,
    AuthorizationCancelledError,
    AuthorizationError,
    AuthorizationInProgressError,
    ConfigurationError,
    MissingRefreshTokenError,
    OAuthError,
    PKCEError,
    StateMismatchError,
    TokenError,
    TransportError,
)
from appauth_desktop.flows import (
    AuthFlow,
    AuthorizationRequest,
    AuthorizationRequestHandler,
    AuthStateEmitter,
    CodeVerifier,
    RedirectInterceptor,
)
from appauth_desktop.providers import ProviderConfiguration
from appauth_desktop.tokens import TokenExchangeClient, TokenResponse
from appauth_desktop.transport import HttpTransport, create_http_client

__version__ = "1.0.0"

__all__ = [
    # Core
    "AuthFlow",
    "AuthStateEmitter",
    "AuthorizationRequest",
    "AuthorizationRequestHandler",
    "RedirectInterceptor",
    "CodeVerifier",
    "TokenExchangeClient",
    "TokenResponse",
    "ProviderConfiguration",
    "HttpTransport",
    "create_http_client",
    # Config
    "AuthConfig",
    "load_config",
    # Exceptions
    "AuthenticationError",
    "ConfigurationError",
    "PKCEError",
    "TransportError",
    "OAuthError",
    "AuthorizationError",
    "StateMismatchError",
    "AuthorizationCancelledError",
    "AuthorizationInProgressError",
    "MissingRefreshTokenError",
    "TokenError",
]

"""OAuth Flows

Authorization Code + PKCE 플로우 구현.
"""

from appauth_desktop.flows.authorization import (
    AuthorizationRequest,
    AuthorizationRequestHandler,
    HandlerState,
    build_request_url,
)
from appauth_desktop.flows.flow import AuthFlow, AuthStateEmitter
from appauth_desktop.flows.pkce import CodeVerifier
from appauth_desktop.flows.redirect import (
    AuthorizationErrorResponse,
    AuthorizationResponse,
    AuthorizationResult,
    RedirectInterceptor,
)

__all__ = [
    # Flow
    "AuthFlow",
    "AuthStateEmitter",
    # Authorization
    "AuthorizationRequest",
    "AuthorizationRequestHandler",
    "HandlerState",
    "build_request_url",
    # Redirect
    "RedirectInterceptor",
    "AuthorizationResponse",
    "AuthorizationErrorResponse",
    "AuthorizationResult",
    # PKCE
    "CodeVerifier",
]

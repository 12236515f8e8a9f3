"""Tokens

토큰 모델과 token endpoint 클라이언트.
"""

from appauth_desktop.tokens.exchange import TokenExchangeClient
from appauth_desktop.tokens.models import TokenRequest, TokenResponse

__all__ = [
    "TokenExchangeClient",
    "TokenRequest",
    "TokenResponse",
]

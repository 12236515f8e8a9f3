"""Provider Configuration

OpenID Provider endpoint 설정.
"""

from appauth_desktop.providers.base import (
    ProviderConfiguration,
    discovery_url,
)

__all__ = [
    "ProviderConfiguration",
    "discovery_url",
]

"""HTTP Transport

Provider와의 HTTP 통신 (discovery 조회, form POST, userinfo 조회).
httpx.AsyncClient는 외부에서 주입받고, 수명도 호출자가 관리함.
"""

import logging
from typing import Any

import httpx

from appauth_desktop.config import AuthConfig
from appauth_desktop.exceptions import ConfigurationError, TransportError
from appauth_desktop.providers.base import ProviderConfiguration, discovery_url

logger = logging.getLogger(__name__)


def create_http_client(config: AuthConfig) -> httpx.AsyncClient:
    """설정에 맞는 httpx.AsyncClient 생성

    disable_ssl_verification은 개발용 IdP(자체 서명 인증서)에서만 사용.
    """
    if config.disable_ssl_verification:
        logger.warning("TLS certificate verification is disabled")
    return httpx.AsyncClient(
        timeout=config.timeout,
        verify=not config.disable_ssl_verification,
        headers={"Accept": "application/json"},
    )


def _decode_json(response: httpx.Response) -> dict | None:
    try:
        body = response.json()
    except ValueError:
        return None
    return body if isinstance(body, dict) else None


class HttpTransport:
    """Provider HTTP 통신.

    네트워크 실패는 TransportError로 변환하고 원래 예외를 연결함.
    재시도는 하지 않음.

    Example:
        async with create_http_client(config) as client:
            transport = HttpTransport(client)
            provider = await transport.fetch_discovery_document(issuer)
    """

    def __init__(self, client: httpx.AsyncClient):
        self.client = client

    async def fetch_discovery_document(self, issuer_uri: str) -> ProviderConfiguration:
        """discovery 문서 조회

        Raises:
            TransportError: 네트워크 실패
            ConfigurationError: 응답이 올바른 discovery 문서가 아닌 경우
        """
        url = discovery_url(issuer_uri)
        logger.debug("Fetching discovery document: %s", url)
        try:
            response = await self.client.get(url)
        except httpx.HTTPError as e:
            raise TransportError(f"Discovery request failed: {e}", provider=issuer_uri) from e

        if response.status_code != 200:
            raise ConfigurationError(
                f"Discovery request failed with status {response.status_code}",
                provider=issuer_uri,
            )

        body = _decode_json(response)
        if body is None:
            raise ConfigurationError("Discovery response is not JSON", provider=issuer_uri)
        return ProviderConfiguration.from_discovery(body)

    async def post_form(
        self, endpoint: str, fields: dict[str, str]
    ) -> tuple[int, dict | None]:
        """application/x-www-form-urlencoded POST

        Returns:
            tuple[int, dict | None]: (HTTP 상태 코드, JSON 본문 또는 None)
        """
        try:
            response = await self.client.post(
                endpoint,
                data=fields,
                headers={"Content-Type": "application/x-www-form-urlencoded"},
            )
        except httpx.HTTPError as e:
            raise TransportError(f"Request to {endpoint} failed: {e}") from e
        return response.status_code, _decode_json(response)

    async def get_json(
        self, url: str, headers: dict[str, str] | None = None
    ) -> tuple[int, Any]:
        """JSON GET (userinfo 등)"""
        try:
            response = await self.client.get(url, headers=headers)
        except httpx.HTTPError as e:
            raise TransportError(f"Request to {url} failed: {e}") from e
        return response.status_code, _decode_json(response)

"""Token Exchange Client

authorization_code / refresh_token grant 및 토큰 폐기 요청.
"""

import logging

from appauth_desktop.exceptions import ConfigurationError, TokenError
from appauth_desktop.providers.base import ProviderConfiguration
from appauth_desktop.tokens.models import (
    GRANT_TYPE_AUTHORIZATION_CODE,
    GRANT_TYPE_REFRESH_TOKEN,
    TokenRequest,
    TokenResponse,
)
from appauth_desktop.transport import HttpTransport

logger = logging.getLogger(__name__)


class TokenExchangeClient:
    """Token endpoint 클라이언트.

    provider 에러는 TokenError로 그대로 전달하며 재시도하지 않음
    (authorization code는 보통 한 번만 교환 가능).
    """

    def __init__(self, transport: HttpTransport):
        self.transport = transport

    async def exchange_code(
        self,
        configuration: ProviderConfiguration,
        client_id: str,
        redirect_uri: str,
        code: str,
        extras: dict[str, str] | None = None,
    ) -> TokenResponse:
        """Authorization code를 토큰으로 교환

        Args:
            configuration: Provider 설정
            client_id: 클라이언트 ID
            redirect_uri: 인증 요청에 사용한 redirect URI
            code: authorization code
            extras: code_verifier, client_secret 등

        Raises:
            TokenError: provider가 에러를 반환한 경우
            TransportError: 네트워크 실패
        """
        request = TokenRequest(
            client_id=client_id,
            redirect_uri=redirect_uri,
            grant_type=GRANT_TYPE_AUTHORIZATION_CODE,
            code=code,
            extras=extras or {},
        )
        return await self.perform_token_request(configuration, request)

    async def refresh(
        self,
        configuration: ProviderConfiguration,
        client_id: str,
        redirect_uri: str,
        refresh_token: str,
        extras: dict[str, str] | None = None,
    ) -> TokenResponse:
        """Refresh token으로 access token 갱신"""
        request = TokenRequest(
            client_id=client_id,
            redirect_uri=redirect_uri,
            grant_type=GRANT_TYPE_REFRESH_TOKEN,
            refresh_token=refresh_token,
            extras=extras or {},
        )
        return await self.perform_token_request(configuration, request)

    async def perform_token_request(
        self, configuration: ProviderConfiguration, request: TokenRequest
    ) -> TokenResponse:
        logger.debug("Token request: grant_type=%s", request.grant_type)
        status, body = await self.transport.post_form(
            configuration.token_endpoint, request.to_form()
        )

        if body and body.get("error"):
            raise self._token_error(status, body)

        if not 200 <= status < 300:
            raise TokenError(
                f"Token request failed with status {status}",
                error_code="http_error",
                status_code=status,
                provider=configuration.issuer,
            )

        if not body or not isinstance(body.get("access_token"), str) or not body["access_token"]:
            raise TokenError(
                "Token response missing 'access_token' field",
                error_code="invalid_response",
                status_code=status,
                provider=configuration.issuer,
            )

        try:
            response = TokenResponse.from_json(body)
        except (TypeError, ValueError) as e:
            raise TokenError(
                f"Malformed token response: {e}",
                error_code="invalid_response",
                status_code=status,
                provider=configuration.issuer,
            ) from e

        logger.info("Token response received (%s)", request.grant_type)
        return response

    async def revoke(
        self,
        configuration: ProviderConfiguration,
        client_id: str,
        token: str,
        token_type_hint: str | None = None,
        extras: dict[str, str] | None = None,
    ) -> None:
        """토큰 폐기 (RFC 7009)

        Raises:
            ConfigurationError: provider가 revocation endpoint를 제공하지 않는 경우
            TokenError: provider가 에러를 반환한 경우
        """
        if not configuration.revocation_endpoint:
            raise ConfigurationError(
                "Provider has no revocation endpoint", provider=configuration.issuer
            )

        fields = {"token": token, "client_id": client_id}
        if token_type_hint:
            fields["token_type_hint"] = token_type_hint
        if extras:
            fields.update(extras)

        status, body = await self.transport.post_form(
            configuration.revocation_endpoint, fields
        )
        if body and body.get("error"):
            raise self._token_error(status, body)
        if not 200 <= status < 300:
            raise TokenError(
                f"Token revocation failed with status {status}",
                error_code="http_error",
                status_code=status,
                provider=configuration.issuer,
            )

    @staticmethod
    def _token_error(status: int, body: dict) -> TokenError:
        error = body["error"]
        description = body.get("error_description")
        message = f"Token request failed: {error}"
        if description:
            message += f" - {description}"
        logger.error("Token endpoint error: %s", error)
        return TokenError(
            message,
            error_code=error,
            error_description=description,
            error_uri=body.get("error_uri"),
            status_code=status,
        )

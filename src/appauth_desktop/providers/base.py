"""Provider Configuration

OpenID Provider의 endpoint 정보.
discovery 문서에서 필요한 필드만 읽음.
"""

from dataclasses import dataclass

from appauth_desktop.exceptions import ConfigurationError

DISCOVERY_PATH = "/.well-known/openid-configuration"


def discovery_url(issuer_uri: str) -> str:
    """issuer URI에서 discovery 문서 URL 생성"""
    return issuer_uri.rstrip("/") + DISCOVERY_PATH


@dataclass(frozen=True)
class ProviderConfiguration:
    """Provider endpoint 설정.

    한 번 가져오면 AuthFlow 인스턴스 수명 동안 캐시되며 자동 갱신 안 함.
    """

    authorization_endpoint: str
    token_endpoint: str
    registration_endpoint: str | None = None
    revocation_endpoint: str | None = None
    userinfo_endpoint: str | None = None
    end_session_endpoint: str | None = None
    issuer: str | None = None

    def to_dict(self) -> dict:
        """딕셔너리로 변환 (discovery 문서 형식)"""
        return {
            "authorization_endpoint": self.authorization_endpoint,
            "token_endpoint": self.token_endpoint,
            "registration_endpoint": self.registration_endpoint,
            "revocation_endpoint": self.revocation_endpoint,
            "userinfo_endpoint": self.userinfo_endpoint,
            "end_session_endpoint": self.end_session_endpoint,
            "issuer": self.issuer,
        }

    @classmethod
    def from_discovery(cls, data: dict) -> "ProviderConfiguration":
        """discovery 문서에서 생성

        Raises:
            ConfigurationError: authorization/token endpoint가 없는 경우
        """
        if not isinstance(data, dict):
            raise ConfigurationError("Discovery document is not a JSON object")

        missing = [
            key
            for key in ("authorization_endpoint", "token_endpoint")
            if not data.get(key)
        ]
        if missing:
            raise ConfigurationError(
                f"Discovery document missing {', '.join(missing)}",
                provider=data.get("issuer"),
            )

        return cls(
            authorization_endpoint=data["authorization_endpoint"],
            token_endpoint=data["token_endpoint"],
            registration_endpoint=data.get("registration_endpoint"),
            revocation_endpoint=data.get("revocation_endpoint"),
            userinfo_endpoint=data.get("userinfo_endpoint"),
            end_session_endpoint=data.get("end_session_endpoint"),
            issuer=data.get("issuer"),
        )

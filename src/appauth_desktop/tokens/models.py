"""Token 데이터 모델"""

from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta

GRANT_TYPE_AUTHORIZATION_CODE = "authorization_code"
GRANT_TYPE_REFRESH_TOKEN = "refresh_token"


@dataclass(frozen=True)
class TokenResponse:
    """토큰 응답.

    교환할 때마다 새 인스턴스가 기존 것을 통째로 대체함.
    expires_at이 None이면 만료 없음으로 취급.
    """

    access_token: str
    refresh_token: str | None = None
    expires_at: datetime | None = None
    token_type: str = "Bearer"
    scope: str | None = None
    id_token: str | None = None
    issued_at: datetime = field(default_factory=datetime.now)

    def is_valid(self, now: datetime | None = None, leeway: timedelta = timedelta(0)) -> bool:
        """현재 시각이 만료 시각 이전인지 확인 (기본 유예 없음)

        Args:
            now: 기준 시각 (기본: 현재)
            leeway: 만료 전 여유 시간. 양수면 그만큼 일찍 만료로 봄.
        """
        if self.expires_at is None:
            return True
        now = now or datetime.now()
        return now < self.expires_at - leeway

    def with_refresh_token_fallback(self, previous: str | None) -> "TokenResponse":
        """refresh_token이 없으면 이전 값을 이어받은 사본 반환"""
        if self.refresh_token or not previous:
            return self
        return replace(self, refresh_token=previous)

    def to_dict(self) -> dict:
        """딕셔너리로 변환"""
        return {
            "access_token": self.access_token,
            "refresh_token": self.refresh_token,
            "expires_at": self.expires_at.isoformat() if self.expires_at else None,
            "token_type": self.token_type,
            "scope": self.scope,
            "id_token": self.id_token,
            "issued_at": self.issued_at.isoformat(),
        }

    @classmethod
    def from_json(cls, data: dict, now: datetime | None = None) -> "TokenResponse":
        """token endpoint JSON 응답에서 생성

        expires_in(초)은 수신 시각 기준 절대 시각으로 변환함.
        """
        issued_at = now or datetime.now()
        expires_at = None
        if data.get("expires_in") is not None:
            expires_at = issued_at + timedelta(seconds=float(data["expires_in"]))
        return cls(
            access_token=data["access_token"],
            refresh_token=data.get("refresh_token"),
            expires_at=expires_at,
            token_type=data.get("token_type", "Bearer"),
            scope=data.get("scope"),
            id_token=data.get("id_token"),
            issued_at=issued_at,
        )


@dataclass(frozen=True)
class TokenRequest:
    """Token endpoint 요청."""

    client_id: str
    redirect_uri: str
    grant_type: str
    code: str | None = None
    refresh_token: str | None = None
    extras: dict[str, str] = field(default_factory=dict)

    def to_form(self) -> dict[str, str]:
        """form 필드로 변환"""
        form = {
            "grant_type": self.grant_type,
            "client_id": self.client_id,
            "redirect_uri": self.redirect_uri,
        }
        if self.code:
            form["code"] = self.code
        if self.refresh_token:
            form["refresh_token"] = self.refresh_token
        for key, value in self.extras.items():
            form.setdefault(key, value)
        return form

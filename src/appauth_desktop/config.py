"""Client Configuration

데스크톱 앱의 OAuth 클라이언트 설정 로드.
JSON 파일 + 환경변수 (환경변수가 우선).
"""

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path

from appauth_desktop.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("config.json")
DEFAULT_SCOPE = "openid profile"
DEFAULT_TIMEOUT = 30.0

# 파일 키 별칭 (snake_case 외에 기존 데스크톱 앱의 camelCase 키도 허용)
_KEY_ALIASES: dict[str, tuple[str, ...]] = {
    "client_id": ("client_id", "clientId"),
    "client_secret": ("client_secret", "clientSecret"),
    "openid_issuer_uri": (
        "openid_issuer_uri",
        "openidIssuerUri",
        "openid_uri",
        "openidUri",
    ),
    "redirect_uri": ("redirect_uri", "redirectUri"),
    "scope": ("scope",),
    "disable_ssl_verification": (
        "disable_ssl_verification",
        "disableSslVerification",
        "disableSslCheck",
    ),
    "timeout": ("timeout",),
}

_ENV_VARS: dict[str, str] = {
    "client_id": "APPAUTH_CLIENT_ID",
    "client_secret": "APPAUTH_CLIENT_SECRET",
    "openid_issuer_uri": "APPAUTH_ISSUER",
    "redirect_uri": "APPAUTH_REDIRECT_URI",
    "scope": "APPAUTH_SCOPE",
}


@dataclass(frozen=True)
class AuthConfig:
    """OAuth 클라이언트 설정.

    프로세스 시작 시 한 번 로드되며 이후 읽기 전용.
    """

    client_id: str
    openid_issuer_uri: str
    redirect_uri: str
    scope: str = DEFAULT_SCOPE
    client_secret: str | None = None
    disable_ssl_verification: bool = False
    timeout: float = DEFAULT_TIMEOUT

    @classmethod
    def from_dict(cls, data: dict) -> "AuthConfig":
        """딕셔너리에서 생성 (camelCase 키 허용)"""
        values: dict = {}
        for field_name, aliases in _KEY_ALIASES.items():
            for alias in aliases:
                if data.get(alias) not in (None, ""):
                    values[field_name] = data[alias]
                    break

        missing = [
            name
            for name in ("client_id", "openid_issuer_uri", "redirect_uri")
            if not values.get(name)
        ]
        if missing:
            raise ConfigurationError(
                f"Missing required configuration: {', '.join(missing)}"
            )

        values["openid_issuer_uri"] = str(values["openid_issuer_uri"]).rstrip("/")
        if "disable_ssl_verification" in values:
            values["disable_ssl_verification"] = _as_bool(
                values["disable_ssl_verification"]
            )
        if "timeout" in values:
            values["timeout"] = float(values["timeout"])
        return cls(**values)


def _as_bool(value) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return bool(value)


def load_config(path: Path | str | None = None) -> AuthConfig:
    """설정 로드.

    Args:
        path: JSON 설정 파일 경로 (기본: ./config.json). 파일이 없으면
            환경변수만 사용.

    Returns:
        AuthConfig: 로드된 설정

    Raises:
        ConfigurationError: 파일 파싱 실패 또는 필수 값 누락
    """
    config_path = Path(path) if path else DEFAULT_CONFIG_PATH
    data: dict = {}

    if config_path.exists():
        try:
            with open(config_path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigurationError(
                f"Cannot read config file {config_path}: {e}"
            ) from e
        if not isinstance(data, dict):
            raise ConfigurationError(f"Config file {config_path} must hold an object")
        logger.debug("Loaded config file: %s", config_path)
    else:
        logger.debug("Config file not found, using environment: %s", config_path)

    for field_name, env_var in _ENV_VARS.items():
        value = os.getenv(env_var)
        if value:
            data[field_name] = value

    return AuthConfig.from_dict(data)

"""PKCE (Proof Key for Code Exchange) - RFC 7636

인증 시도마다 새 code_verifier / code_challenge 쌍을 생성.
"""

import base64
import hashlib
import logging
import secrets
from dataclasses import dataclass

from appauth_desktop.exceptions import PKCEError

logger = logging.getLogger(__name__)

METHOD_S256 = "S256"
METHOD_PLAIN = "plain"

# RFC 7636 4.1: 43-128자
MIN_VERIFIER_LENGTH = 43
MAX_VERIFIER_LENGTH = 128
MIN_ENTROPY_BYTES = 32


def _base64url(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def compute_s256_challenge(verifier: str) -> str:
    """code_challenge = BASE64URL(SHA256(code_verifier))

    Raises:
        ValueError: 현재 hashlib 빌드에서 sha256을 사용할 수 없는 경우
    """
    digest = hashlib.new("sha256", verifier.encode("ascii")).digest()
    return _base64url(digest)


@dataclass(frozen=True)
class CodeVerifier:
    """PKCE code verifier와 challenge.

    Attributes:
        verifier: 랜덤 code_verifier (토큰 교환 시 전송)
        challenge: 변환된 code_challenge (인증 요청 시 전송)
        method: 변환 방식 ("S256" 또는 "plain")
    """

    verifier: str
    challenge: str
    method: str = METHOD_S256

    def __repr__(self) -> str:
        return f"CodeVerifier(method={self.method!r}, verifier='{self.verifier[:8]}...')"

    @classmethod
    def generate(
        cls,
        num_bytes: int = 64,
        method: str = METHOD_S256,
        allow_plain: bool = False,
    ) -> "CodeVerifier":
        """새 PKCE 쌍 생성.

        Args:
            num_bytes: 랜덤 바이트 수 (최소 32)
            method: "S256" (권장) 또는 "plain"
            allow_plain: S256 변환을 쓸 수 없을 때 plain으로 대체할지 여부.
                False면 PKCEError 발생.

        Returns:
            CodeVerifier: 새 verifier/challenge 쌍

        Raises:
            ValueError: num_bytes가 32 미만이거나 method가 잘못된 경우
            PKCEError: S256을 쓸 수 없고 allow_plain=False인 경우
        """
        if num_bytes < MIN_ENTROPY_BYTES:
            raise ValueError(f"PKCE verifier needs at least {MIN_ENTROPY_BYTES} random bytes")
        if method not in (METHOD_S256, METHOD_PLAIN):
            raise ValueError(f"Unsupported code_challenge_method: {method}")

        verifier = _base64url(secrets.token_bytes(num_bytes))[:MAX_VERIFIER_LENGTH]

        if method == METHOD_PLAIN:
            return cls(verifier=verifier, challenge=verifier, method=METHOD_PLAIN)

        try:
            challenge = compute_s256_challenge(verifier)
        except ValueError as e:
            if not allow_plain:
                raise PKCEError("SHA-256 is unavailable for the PKCE S256 challenge") from e
            logger.warning("SHA-256 unavailable, falling back to plain PKCE challenge")
            return cls(verifier=verifier, challenge=verifier, method=METHOD_PLAIN)

        return cls(verifier=verifier, challenge=challenge, method=METHOD_S256)

"""Redirect Interceptor

브라우저 surface의 navigation 이벤트에서 authorization 결과를 추출.
첫 번째로 매칭되는 이벤트만 유효하며 이후 이벤트는 무시됨.
"""

import logging
from dataclasses import dataclass
from urllib.parse import parse_qs, urlsplit

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuthorizationResponse:
    """Authorization 성공 결과."""

    code: str
    state: str | None = None


@dataclass(frozen=True)
class AuthorizationErrorResponse:
    """Authorization 실패 결과 (provider가 돌려준 값 그대로)."""

    error: str
    error_description: str | None = None
    error_uri: str | None = None
    state: str | None = None


AuthorizationResult = AuthorizationResponse | AuthorizationErrorResponse


def extract_parameters(uri: str) -> dict[str, str]:
    """URI의 query와 fragment에서 파라미터 추출.

    Provider에 따라 ``?`` 또는 ``#`` 인코딩을 사용하므로 둘 다 읽음.
    같은 키가 있으면 query 값이 우선.

    Raises:
        ValueError: URI를 파싱할 수 없는 경우
    """
    parts = urlsplit(uri)
    params: dict[str, str] = {}
    for raw in (parts.fragment, parts.query):
        for key, values in parse_qs(raw, keep_blank_values=False).items():
            params[key] = values[0]
    return params


def _normalize_path(path: str) -> str:
    return path.rstrip("/")


def _path_within(path: str, prefix: str) -> bool:
    """prefix와 같거나 "/" 경계에서 이어지는 하위 경로인지 확인"""
    return path == prefix or path.startswith(prefix + "/")


class RedirectInterceptor:
    """Navigation 이벤트 분류기.

    redirect_uri가 주어지면 scheme + host + path 접두사가 일치하는 이벤트만
    검사함. provider 로그인 페이지의 중간 redirect는 무시됨.

    Example:
        interceptor = RedirectInterceptor("app://callback")
        result = interceptor.observe("app://callback?code=abc&state=s")
    """

    def __init__(self, redirect_uri: str | None = None):
        self.redirect_uri = redirect_uri
        self._target = None
        if redirect_uri:
            target = urlsplit(redirect_uri)
            self._target = (
                target.scheme.lower(),
                target.netloc.lower(),
                _normalize_path(target.path),
            )
        self._result: AuthorizationResult | None = None

    @property
    def result(self) -> AuthorizationResult | None:
        """첫 번째로 매칭된 결과 (없으면 None)"""
        return self._result

    @property
    def done(self) -> bool:
        return self._result is not None

    def matches(self, uri: str) -> bool:
        """URI가 redirect_uri 접두사와 일치하는지 확인"""
        if self._target is None:
            return True
        try:
            parts = urlsplit(uri)
        except ValueError:
            return False
        scheme, netloc, path = self._target
        return (
            parts.scheme.lower() == scheme
            and parts.netloc.lower() == netloc
            and _path_within(_normalize_path(parts.path), path)
        )

    def classify(self, uri: str) -> AuthorizationResult | None:
        """단일 URI 분류 (상태 없음).

        Returns:
            AuthorizationErrorResponse: ``error`` 파라미터가 있는 경우
            AuthorizationResponse: ``code`` 파라미터가 있는 경우
            None: 관련 없는 이벤트 (파싱 실패 포함)
        """
        if not self.matches(uri):
            return None

        try:
            params = extract_parameters(uri)
        except ValueError:
            logger.debug("Skipping unparseable navigation: %.60s", uri)
            return None

        state = params.get("state")

        if "error" in params:
            return AuthorizationErrorResponse(
                error=params["error"],
                error_description=params.get("error_description"),
                error_uri=params.get("error_uri"),
                state=state,
            )

        if "code" in params:
            return AuthorizationResponse(code=params["code"], state=state)

        return None

    def observe(self, uri: str) -> AuthorizationResult | None:
        """이벤트 스트림 입력.

        첫 번째 terminal 결과만 반환하고, 이후 호출은 항상 None.
        """
        if self._result is not None:
            logger.debug("Ignoring navigation after terminal result")
            return None

        result = self.classify(uri)
        if result is None:
            logger.debug("Irrelevant navigation: %.60s", uri)
            return None

        self._result = result
        if isinstance(result, AuthorizationErrorResponse):
            logger.debug("Authorization error redirect: %s", result.error)
        else:
            logger.debug("Authorization code redirect: %s...", result.code[:8])
        return result

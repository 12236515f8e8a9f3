"""Redirect Interceptor 테스트."""

from appauth_desktop.flows.redirect import (
    AuthorizationErrorResponse,
    AuthorizationResponse,
    RedirectInterceptor,
    extract_parameters,
)


class TestExtractParameters:
    """query / fragment 파라미터 추출."""

    def test_query(self):
        assert extract_parameters("app://callback?code=abc&state=s") == {
            "code": "abc",
            "state": "s",
        }

    def test_fragment(self):
        assert extract_parameters("app://callback#code=abc&state=s") == {
            "code": "abc",
            "state": "s",
        }

    def test_query_wins_over_fragment(self):
        params = extract_parameters("app://callback?code=q#code=f&state=s")
        assert params == {"code": "q", "state": "s"}


class TestClassify:
    """단일 URI 분류."""

    def test_success(self):
        interceptor = RedirectInterceptor("app://callback")
        result = interceptor.classify("app://callback?code=abc&state=s")
        assert result == AuthorizationResponse(code="abc", state="s")

    def test_error_with_details(self):
        interceptor = RedirectInterceptor("app://callback")
        result = interceptor.classify(
            "app://callback?error=access_denied"
            "&error_description=User+denied&error_uri=https%3A%2F%2Fidp%2Ferr&state=s"
        )
        assert result == AuthorizationErrorResponse(
            error="access_denied",
            error_description="User denied",
            error_uri="https://idp/err",
            state="s",
        )

    def test_error_takes_precedence_over_code(self):
        interceptor = RedirectInterceptor("app://callback")
        result = interceptor.classify("app://callback?code=abc&error=server_error")
        assert isinstance(result, AuthorizationErrorResponse)

    def test_irrelevant_without_code_or_error(self):
        interceptor = RedirectInterceptor("app://callback")
        assert interceptor.classify("app://callback?foo=bar") is None

    def test_other_host_is_irrelevant(self):
        """provider 로그인 페이지의 error 파라미터는 무시."""
        interceptor = RedirectInterceptor("app://callback")
        assert interceptor.classify("https://idp.example/login?error=bad_password") is None

    def test_path_prefix_match(self):
        interceptor = RedirectInterceptor("http://127.0.0.1:8765/callback")
        assert interceptor.classify("http://127.0.0.1:8765/callback/?code=abc")
        assert interceptor.classify("http://127.0.0.1:8765/other?code=abc") is None
        assert interceptor.classify("http://127.0.0.1:8765/callbackevil?code=abc") is None
        assert interceptor.classify("http://127.0.0.1:8765/callback/done?code=abc")

    def test_scheme_and_host_case_insensitive(self):
        interceptor = RedirectInterceptor("app://callback")
        assert interceptor.classify("APP://Callback?code=abc") is not None

    def test_no_redirect_uri_matches_everything(self):
        interceptor = RedirectInterceptor()
        assert interceptor.classify("https://anything/?code=abc") is not None

    def test_malformed_uri_is_irrelevant(self):
        """파싱 불가 URI는 예외 없이 무시."""
        interceptor = RedirectInterceptor()
        assert interceptor.classify("http://[::1/?code=abc") is None


class TestObserve:
    """이벤트 스트림: 첫 매칭만 유효."""

    def test_first_match_wins(self):
        interceptor = RedirectInterceptor("app://callback")

        assert interceptor.observe("https://idp.example/login") is None
        assert interceptor.observe("https://idp.example/consent") is None
        first = interceptor.observe("app://callback?code=abc&state=s")
        assert first == AuthorizationResponse(code="abc", state="s")

        assert interceptor.observe("app://callback?code=other&state=s") is None
        assert interceptor.observe("app://callback?error=access_denied") is None
        assert interceptor.result == first
        assert interceptor.done

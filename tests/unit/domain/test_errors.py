"""Tests for the classified error taxonomy."""

from __future__ import annotations

from availarr.domain.errors import (
    ConfigurationError,
    CsrfError,
    EmptyQueryError,
    NetworkError,
    NotFoundError,
    RemoteRejectionError,
    classify_rejection,
)


class TestClassifyRejection:
    def test_csrf_marker_in_body(self) -> None:
        err = classify_rejection(
            status=403, body="CSRF token invalid", url="https://seerr.example.com"
        )
        assert isinstance(err, CsrfError)
        assert err.kind == "csrf"
        assert err.status == 403

    def test_marker_is_case_insensitive(self) -> None:
        err = classify_rejection(status=403, body='{"message":"invalid csrf"}')
        assert isinstance(err, CsrfError)

    def test_plain_rejection(self) -> None:
        err = classify_rejection(status=500, body="Internal Server Error")
        assert type(err) is RemoteRejectionError
        assert err.kind == "remote_rejection"
        assert "500" in err.message
        assert "Internal Server Error" in err.message

    def test_empty_body(self) -> None:
        err = classify_rejection(status=502, body="")
        assert err.message == "Server responded with 502: (no body)"

    def test_long_body_truncated(self) -> None:
        err = classify_rejection(status=500, body="x" * 1000)
        assert len(err.message) < 300


class TestUserMessage:
    def test_includes_resolved_url(self) -> None:
        err = NetworkError("Request service timed out", url="http://10.0.0.2:5055")
        assert err.user_message() == "[http://10.0.0.2:5055] Request service timed out"

    def test_without_url(self) -> None:
        assert NetworkError("boom").user_message() == "boom"

    def test_csrf_fix_instruction(self) -> None:
        err = CsrfError(status=403, body="CSRF token invalid", url="https://seerr.lan")
        text = err.user_message()
        assert text.startswith("[https://seerr.lan] Server responded with 403")
        assert "https://seerr.lan/settings/network" in text
        assert 'disable "Enable CSRF Protection"' in text

    def test_configuration_points_to_settings(self) -> None:
        err = ConfigurationError("Media server URL or API key is missing")
        assert err.kind == "configuration"
        assert "settings" in err.user_message()

    def test_not_found(self) -> None:
        err = NotFoundError(title="Dune", media_type="movie")
        assert err.kind == "not_found"
        assert "Dune" in err.message

    def test_empty_query(self) -> None:
        err = EmptyQueryError("   ")
        assert err.kind == "empty_query"
        assert err.message == "Search query is empty"

"""Tests for request-scoped API dependencies."""

from __future__ import annotations

import pytest
from starlette.requests import Request

from backend.app.api.dependencies import get_current_owner
from backend.app.domain.entries import AuthError
from backend.app.infra.auth import StaticTokenAuthenticator

pytestmark = [pytest.mark.api]

AUTHENTICATOR = StaticTokenAuthenticator({"secret": "owner-1"})


def _make_request(headers: dict[str, str] | None = None) -> Request:
    header_list = [
        (key.lower().encode("latin-1"), value.encode("latin-1"))
        for key, value in (headers or {}).items()
    ]
    scope = {
        "type": "http",
        "method": "GET",
        "path": "/",
        "query_string": b"",
        "headers": header_list,
        "client": ("test", 1234),
        "server": ("testserver", 80),
        "scheme": "http",
    }
    return Request(scope)


def test_bearer_token_resolves_owner() -> None:
    request = _make_request({"Authorization": "Bearer  secret "})

    assert get_current_owner(request, AUTHENTICATOR) == "owner-1"


def test_bearer_prefix_is_case_insensitive() -> None:
    request = _make_request({"Authorization": "bearer secret"})

    assert get_current_owner(request, AUTHENTICATOR) == "owner-1"


def test_fallback_header_is_honored() -> None:
    request = _make_request({"X-Auth-Token": "secret"})

    assert get_current_owner(request, AUTHENTICATOR) == "owner-1"


def test_missing_token_raises_auth_error() -> None:
    with pytest.raises(AuthError) as excinfo:
        get_current_owner(_make_request(), AUTHENTICATOR)

    assert excinfo.value.message == "No token, authorization denied"
    assert excinfo.value.status_code == 401


def test_unknown_token_raises_auth_error() -> None:
    with pytest.raises(AuthError) as excinfo:
        get_current_owner(_make_request({"Authorization": "Bearer nope"}), AUTHENTICATOR)

    assert excinfo.value.message == "Invalid authentication token"

"""Shared API dependencies."""

from __future__ import annotations

from fastapi import Depends, Request

from ..config import Settings
from ..domain.entries import AuthError, EntryService
from ..infra.auth import Authenticator

__all__ = [
    "AUTH_HEADER",
    "FALLBACK_TOKEN_HEADER",
    "get_authenticator",
    "get_current_owner",
    "get_entry_service",
    "get_settings",
]

AUTH_HEADER = "authorization"
FALLBACK_TOKEN_HEADER = "x-auth-token"
BEARER_PREFIX = "bearer "


def get_settings(request: Request) -> Settings:
    """Return the settings the application was built with."""

    return request.app.state.settings


def get_entry_service(request: Request) -> EntryService:
    """Return the EntryService bound to the application's store handle."""

    return request.app.state.entry_service


def get_authenticator(request: Request) -> Authenticator:
    return request.app.state.authenticator


def get_current_owner(
    request: Request,
    authenticator: Authenticator = Depends(get_authenticator),
) -> str:
    """Resolve the caller's owner id from the request credentials."""

    token = _extract_token(request)
    if not token:
        raise AuthError("No token, authorization denied")
    return authenticator.authenticate(token)


def _extract_token(request: Request) -> str:
    header = (request.headers.get(AUTH_HEADER) or "").strip()
    if header.lower().startswith(BEARER_PREFIX):
        return header[len(BEARER_PREFIX):].strip()
    return (request.headers.get(FALLBACK_TOKEN_HEADER) or "").strip()

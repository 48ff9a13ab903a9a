"""Authentication collaborator resolving bearer tokens to owner ids."""

from __future__ import annotations

import hmac
from typing import Mapping, Protocol

from ..domain.entries.errors import AuthError
from .logging import get_logger

__all__ = ["Authenticator", "StaticTokenAuthenticator"]

logger = get_logger(__name__)


class Authenticator(Protocol):  # pragma: no cover - interface only
    """Token verification is owned by an external identity provider."""

    def authenticate(self, token: str) -> str:
        """Return the owner id for `token` or raise `AuthError`."""


class StaticTokenAuthenticator(Authenticator):
    """Resolves tokens from a configured token -> owner id mapping."""

    def __init__(self, tokens: Mapping[str, str]) -> None:
        self._tokens = dict(tokens)

    def authenticate(self, token: str) -> str:
        for known_token, owner_id in self._tokens.items():
            if hmac.compare_digest(known_token.encode(), token.encode()):
                return owner_id
        logger.info("auth_token_rejected")
        raise AuthError("Invalid authentication token")

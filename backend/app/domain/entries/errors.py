"""Error taxonomy shared by the entry service, gateways, and API handlers."""

from __future__ import annotations

from http import HTTPStatus
from typing import Any, Dict

__all__ = [
    "AuthError",
    "EntryNotFoundError",
    "EntryServiceError",
    "EntryValidationError",
    "StoreError",
]


class EntryServiceError(Exception):
    """Domain exception propagated to API handlers."""

    status_code: HTTPStatus = HTTPStatus.INTERNAL_SERVER_ERROR
    error_code: str = "ENTRY-ERROR"

    def __init__(
        self,
        message: str,
        *,
        details: Dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


class EntryValidationError(EntryServiceError):
    status_code = HTTPStatus.BAD_REQUEST
    error_code = "ENTRY-INVALID-REQUEST"


class EntryNotFoundError(EntryServiceError):
    """Raised for missing entries and for entries owned by someone else."""

    status_code = HTTPStatus.NOT_FOUND
    error_code = "ENTRY-NOT-FOUND"

    def __init__(self, entry_id: str) -> None:
        super().__init__("Entry not found", details={"entry_id": entry_id})
        self.entry_id = entry_id


class AuthError(EntryServiceError):
    status_code = HTTPStatus.UNAUTHORIZED
    error_code = "AUTH-REQUIRED"


class StoreError(EntryServiceError):
    status_code = HTTPStatus.INTERNAL_SERVER_ERROR
    error_code = "STORE-FAILURE"

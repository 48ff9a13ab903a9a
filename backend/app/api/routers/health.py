"""Liveness and environment diagnostics endpoints."""

from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException, status

from ...config import Settings
from ..dependencies import get_entry_service, get_settings
from ...domain.entries import EntryService
from ...domain.entries.models import utcnow

router = APIRouter(tags=["health"])


@router.get("/health")
def healthcheck(
    settings: Settings = Depends(get_settings),
    service: EntryService = Depends(get_entry_service),
) -> dict[str, Any]:
    """Always 200; reports whether the entry store is reachable."""

    connected = service.gateway.ping()
    return {
        "status": "OK",
        "message": "Finance Diary API is running",
        "timestamp": utcnow().isoformat(),
        "environment": settings.environment,
        "entryStore": "connected" if connected else "disconnected",
        "entryStoreConnected": connected,
    }


@router.get("/debug/env")
def debug_environment(settings: Settings = Depends(get_settings)) -> Dict[str, Any]:
    """Report which settings are configured without exposing their values."""

    if settings.is_production:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Debug endpoint not available in production",
        )
    return {
        "environment": settings.environment,
        "entryStoreBackend": settings.entry_store.backend,
        "databaseUrlSet": bool(settings.database_url),
        "authTokensConfigured": len(settings.auth.tokens),
        "allowedOrigins": list(settings.cors.allowed_origins),
    }

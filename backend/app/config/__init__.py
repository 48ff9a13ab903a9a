"""Config package exporting loader helpers."""

from .loader import AuthConfig, CorsConfig, EntryStoreConfig, Settings, load_settings

__all__ = ["AuthConfig", "CorsConfig", "EntryStoreConfig", "Settings", "load_settings"]

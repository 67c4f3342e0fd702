"""
FastAPI dependencies for the external collaborators.

Both clients are built once from the process settings and shared.
"""
from functools import lru_cache
from typing import Optional

from fastapi import Depends, Header

from .config import Settings, get_settings
from .responses import unauthorized
from .services.automation import AutomationClient
from .services.callbacks import verify_shared_secret
from .services.storage import StorageService


@lru_cache()
def get_automation_client() -> AutomationClient:
    return AutomationClient(get_settings())


@lru_cache()
def get_storage_service() -> StorageService:
    return StorageService(get_settings())


def require_callback_secret(
    x_api_key: Optional[str] = Header(default=None),
    settings: Settings = Depends(get_settings),
) -> None:
    """Reject callbacks whose X-API-Key does not match the shared secret."""
    if not verify_shared_secret(settings, x_api_key):
        unauthorized("Invalid API key")

# src/marketplace/core/storage/factory.py

from typing import Dict, Optional
from marketplace.core.config import settings
from .base import BaseStorageProvider, ALL_STORAGE_PROVIDERS

# registers "local"
from .local import LocalStorageProvider  # noqa: F401

_storage_instances: Dict[str, BaseStorageProvider] = {}


def get_storage_provider(name: Optional[str] = None) -> BaseStorageProvider:
    """
    Shared provider instance for uploaded assets, built on first use from settings
    (UPLOAD_DIR, UPLOAD_URL_PREFIX). `name` defaults to settings.STORAGE_PROVIDER.
    """
    target_name = name or settings.STORAGE_PROVIDER

    if target_name not in _storage_instances:
        provider_cls = ALL_STORAGE_PROVIDERS.get(target_name)
        if provider_cls is None:
            raise ValueError(
                f"Unknown STORAGE_PROVIDER '{target_name}'; "
                f"registered: {sorted(ALL_STORAGE_PROVIDERS)}"
            )
        _storage_instances[target_name] = provider_cls()

    return _storage_instances[target_name]

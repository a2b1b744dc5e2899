# src/marketplace/core/storage/base.py

from abc import ABC, abstractmethod
from typing import Dict, NamedTuple, Type, TypeVar


class ObjectMetadata(NamedTuple):
    size: int
    content_type: str


class StorageError(Exception):
    """Raised by providers when an object cannot be written, read or removed."""


class BaseStorageProvider(ABC):
    """
    Abstract base class for binary storage providers.
    Every concrete implementation must subclass this and define `name`.

    Keys are flat, provider-relative object names. Providers never invent
    names themselves; callers pass a fresh unique key for every write.
    """
    name: str = "base"

    @abstractmethod
    async def write_object(self, key: str, data: bytes) -> ObjectMetadata:
        """
        Persist `data` under `key`.
        Must refuse to overwrite an existing object (raise StorageError).
        """
        raise NotImplementedError

    @abstractmethod
    async def download_object(self, key: str) -> bytes:
        """
        Read back the object content.
        Raises FileNotFoundError if the object does not exist.
        """
        raise NotImplementedError

    @abstractmethod
    async def delete_object(self, key: str) -> bool:
        """
        Delete the object.
        Returns True if something was removed, False if it was already gone.
        """
        raise NotImplementedError

    @abstractmethod
    async def object_exists(self, key: str) -> bool:
        raise NotImplementedError

    @abstractmethod
    def get_public_url(self, key: str) -> str:
        """
        Public URL (or URL path) under which the object is served.
        """
        raise NotImplementedError


# Providers by `name`; STORAGE_PROVIDER selects one of these at startup.
ALL_STORAGE_PROVIDERS: Dict[str, Type[BaseStorageProvider]] = {}

T = TypeVar("T", bound=BaseStorageProvider)


def register_storage_provider(cls: Type[T]) -> Type[T]:
    """Class decorator adding a provider to ALL_STORAGE_PROVIDERS under its `name`."""
    if not getattr(cls, "name", None) or cls.name == BaseStorageProvider.name:
        raise ValueError(f"{cls.__name__} needs its own storage provider name.")
    if cls.name in ALL_STORAGE_PROVIDERS:
        raise ValueError(f"A storage provider named '{cls.name}' is already registered.")
    ALL_STORAGE_PROVIDERS[cls.name] = cls
    return cls

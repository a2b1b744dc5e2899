# src/marketplace/services/asset/asset_manager.py

import logging
from dataclasses import dataclass
from typing import List, Optional

from marketplace.core.storage.base import BaseStorageProvider, StorageError
from marketplace.services.asset.utils import generate_asset_name
from marketplace.services.exceptions import AssetStorageError, NotFoundError, ValidationFailure

logger = logging.getLogger(__name__)


@dataclass
class UploadPayload:
    """A file received from the client, fully read into memory."""
    filename: Optional[str]
    content: bytes
    content_type: Optional[str] = None
    field: str = "file"


class AssetManager:
    """
    [Service Layer] Owns the binary assets referenced by product and user records.

    A reference is the public URL path returned by `store` (e.g. "/uploads/<uuid>-cover.png").
    The placeholder sentinel and the empty string are valid references that never
    point at a stored object. Built once at startup and injected through AppContext.
    """

    def __init__(self, storage: BaseStorageProvider, placeholder: str, max_upload_size: int):
        self.storage = storage
        self.placeholder = placeholder
        self.max_upload_size = max_upload_size
        self._url_base = storage.get_public_url("")

    def is_placeholder(self, reference: Optional[str]) -> bool:
        return reference == self.placeholder

    def _key_for(self, reference: Optional[str]) -> Optional[str]:
        """Storage key for one of our references, None for placeholder/empty/foreign ones."""
        if not reference or self.is_placeholder(reference):
            return None
        if not reference.startswith(self._url_base):
            return None
        key = reference[len(self._url_base):]
        if not key or "/" in key:
            return None
        return key

    # ==========================================================================
    # Contract
    # ==========================================================================

    async def store(self, content: bytes, original_name: Optional[str], field: str = "file") -> str:
        """Write the payload under a fresh unique name and return its reference."""
        if not content:
            raise ValidationFailure("Uploaded file is empty.", [{"field": field, "message": "File is empty"}])
        if len(content) > self.max_upload_size:
            raise ValidationFailure(
                "Uploaded file is too large.",
                [{"field": field, "message": f"File exceeds {self.max_upload_size} bytes"}],
            )

        key = generate_asset_name(original_name)
        try:
            await self.storage.write_object(key, content)
        except StorageError as e:
            logger.error(f"Failed to store asset {key}: {e}", exc_info=True)
            raise AssetStorageError("Failed to store uploaded file.") from e

        reference = self.storage.get_public_url(key)
        logger.info(f"Stored asset {reference} ({len(content)} bytes)")
        return reference

    async def remove(self, reference: Optional[str]) -> None:
        """
        Best-effort delete. Placeholder, empty and foreign references are ignored,
        a missing object is not an error, and storage failures are only logged.
        """
        key = self._key_for(reference)
        if key is None:
            return
        try:
            removed = await self.storage.delete_object(key)
        except StorageError as e:
            logger.error(f"Failed to remove asset {reference}: {e}", exc_info=True)
            return
        if removed:
            logger.info(f"Removed asset {reference}")
        else:
            logger.debug(f"Asset {reference} was already gone")

    async def exists(self, reference: Optional[str]) -> bool:
        key = self._key_for(reference)
        if key is None:
            return False
        return await self.storage.object_exists(key)

    async def open(self, reference: Optional[str]) -> bytes:
        key = self._key_for(reference)
        if key is None:
            raise NotFoundError("Asset not found.")
        try:
            return await self.storage.download_object(key)
        except (FileNotFoundError, StorageError):
            raise NotFoundError("Asset not found.")

    def staging(self) -> "StagedAssets":
        """Open a staged-asset ledger for one operation: `async with assets.staging() as staged:`"""
        return StagedAssets(self)


class StagedAssets:
    """
    Scoped ledger of the assets touched by one operation.

    - `store()` writes a new asset and records it as staged.
    - `retire()` schedules a superseded asset for release.
    - `commit()` marks the record mutation as persisted.

    On exit, a committed ledger removes the retired assets. Any other exit
    (exception, or no commit) removes every staged asset and keeps the retired ones.
    """

    def __init__(self, manager: AssetManager):
        self.manager = manager
        self.staged: List[str] = []
        self.retired: List[str] = []
        self.committed = False

    async def __aenter__(self) -> "StagedAssets":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> bool:
        if self.committed and exc_type is None:
            await self._release(self.retired)
        else:
            if self.staged:
                logger.warning(f"Rolling back {len(self.staged)} staged asset(s)")
            await self._release(self.staged)
        self.staged = []
        self.retired = []
        return False

    async def store(self, payload: UploadPayload) -> str:
        reference = await self.manager.store(payload.content, payload.filename, field=payload.field)
        self.staged.append(reference)
        return reference

    def retire(self, reference: Optional[str]) -> None:
        if self.manager._key_for(reference) is not None:
            self.retired.append(reference)

    def commit(self) -> None:
        self.committed = True

    async def _release(self, references: List[str]) -> None:
        for reference in references:
            await self.manager.remove(reference)

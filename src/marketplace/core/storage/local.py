import asyncio
import logging
import mimetypes
from functools import partial
from pathlib import Path
from typing import Optional

from marketplace.core.config import settings
from .base import register_storage_provider, BaseStorageProvider, ObjectMetadata, StorageError

logger = logging.getLogger(__name__)


@register_storage_provider
class LocalStorageProvider(BaseStorageProvider):
    name: str = "local"

    def __init__(self, root: Optional[Path] = None, public_prefix: Optional[str] = None):
        self.root = Path(root or settings.UPLOAD_DIR).resolve()
        self.public_prefix = (public_prefix or settings.UPLOAD_URL_PREFIX).rstrip("/")
        self.root.mkdir(parents=True, exist_ok=True)

    async def _run_in_executor(self, func, *args, **kwargs):
        """
        Run blocking filesystem calls in the default thread pool so the event loop is not blocked.
        """
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, partial(func, *args, **kwargs))

    def _path_for(self, key: str) -> Path:
        path = (self.root / key).resolve()
        # keys are flat names; anything resolving outside root is rejected
        if path.parent != self.root:
            raise StorageError(f"Invalid storage key: {key!r}")
        return path

    def _write(self, key: str, data: bytes) -> ObjectMetadata:
        path = self._path_for(key)
        try:
            # 'xb' = exclusive create, an existing object is never overwritten
            with path.open("xb") as buffer:
                buffer.write(data)
        except FileExistsError as e:
            raise StorageError(f"Object already exists: {key}") from e
        except OSError as e:
            # do not leave a truncated file behind
            try:
                path.unlink(missing_ok=True)
            except OSError:
                logger.warning(f"Could not clean up partial object {key}", exc_info=True)
            raise StorageError(f"Failed to write object {key}: {e}") from e
        content_type = mimetypes.guess_type(key)[0] or "application/octet-stream"
        return ObjectMetadata(size=len(data), content_type=content_type)

    def _delete(self, key: str) -> bool:
        path = self._path_for(key)
        try:
            path.unlink()
            return True
        except FileNotFoundError:
            return False

    async def write_object(self, key: str, data: bytes) -> ObjectMetadata:
        return await self._run_in_executor(self._write, key, data)

    async def download_object(self, key: str) -> bytes:
        path = self._path_for(key)
        return await self._run_in_executor(path.read_bytes)

    async def delete_object(self, key: str) -> bool:
        try:
            return await self._run_in_executor(self._delete, key)
        except OSError as e:
            raise StorageError(f"Failed to delete object {key}: {e}") from e

    async def object_exists(self, key: str) -> bool:
        try:
            path = self._path_for(key)
        except StorageError:
            return False
        return await self._run_in_executor(path.is_file)

    def get_public_url(self, key: str) -> str:
        return f"{self.public_prefix}/{key.lstrip('/')}"

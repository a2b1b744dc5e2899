# tests/core/test_storage.py

import pytest

from marketplace.core.storage.base import StorageError, ALL_STORAGE_PROVIDERS, register_storage_provider
from marketplace.core.storage.factory import get_storage_provider
from marketplace.core.storage.local import LocalStorageProvider


async def test_local_provider_is_registered():
    assert ALL_STORAGE_PROVIDERS["local"] is LocalStorageProvider
    assert isinstance(get_storage_provider("local"), LocalStorageProvider)


async def test_unknown_provider_raises():
    with pytest.raises(ValueError):
        get_storage_provider("s3")


@pytest.mark.parametrize("name", ["local", "base", ""])
async def test_register_rejects_taken_or_missing_names(name):
    class DuplicateProvider(LocalStorageProvider):
        pass
    DuplicateProvider.name = name

    with pytest.raises(ValueError):
        register_storage_provider(DuplicateProvider)
    assert ALL_STORAGE_PROVIDERS["local"] is LocalStorageProvider


class TestLocalStorageProvider:

    async def test_write_read_delete(self, storage: LocalStorageProvider, upload_dir):
        meta = await storage.write_object("abc-report.pdf", b"%PDF-1.4")

        assert meta.size == 8
        assert meta.content_type == "application/pdf"
        assert (upload_dir / "abc-report.pdf").read_bytes() == b"%PDF-1.4"
        assert await storage.object_exists("abc-report.pdf") is True
        assert await storage.download_object("abc-report.pdf") == b"%PDF-1.4"

        assert await storage.delete_object("abc-report.pdf") is True
        assert await storage.object_exists("abc-report.pdf") is False

    async def test_write_never_overwrites(self, storage: LocalStorageProvider, upload_dir):
        await storage.write_object("taken.bin", b"first")

        with pytest.raises(StorageError):
            await storage.write_object("taken.bin", b"second")
        assert (upload_dir / "taken.bin").read_bytes() == b"first"

    async def test_delete_missing_object_returns_false(self, storage: LocalStorageProvider):
        assert await storage.delete_object("never-written.bin") is False

    async def test_download_missing_object(self, storage: LocalStorageProvider):
        with pytest.raises(FileNotFoundError):
            await storage.download_object("never-written.bin")

    @pytest.mark.parametrize("key", ["../escape.txt", "nested/file.txt", ".."])
    async def test_keys_outside_root_are_rejected(self, storage: LocalStorageProvider, key: str):
        with pytest.raises(StorageError):
            await storage.write_object(key, b"x")
        assert await storage.object_exists(key) is False

    async def test_public_url(self, storage: LocalStorageProvider):
        assert storage.get_public_url("abc.png") == "/uploads/abc.png"

    async def test_unwritable_key_raises_storage_error(self, storage: LocalStorageProvider, upload_dir):
        # longer than NAME_MAX on common filesystems
        with pytest.raises(StorageError):
            await storage.write_object("a" * 300, b"x")
        assert list(upload_dir.iterdir()) == []

# tests/api/test_uploads.py

from io import BytesIO
import pytest
from fastapi import UploadFile

from marketplace.api.dependencies.uploads import read_upload, form_fields
from marketplace.services.exceptions import ValidationFailure

pytestmark = pytest.mark.asyncio

LIMIT = 16


class RecordingFile(BytesIO):
    """BytesIO that remembers the sizes it was asked to read."""

    def __init__(self, content: bytes):
        super().__init__(content)
        self.requested = []

    def read(self, size=-1):
        self.requested.append(size)
        return super().read(size)


class TestReadUpload:

    async def test_reads_named_upload(self):
        upload = UploadFile(file=BytesIO(b"payload"), filename="guide.pdf")

        payload = await read_upload(upload, "file", LIMIT)

        assert payload.filename == "guide.pdf"
        assert payload.content == b"payload"
        assert payload.field == "file"

    async def test_missing_or_untouched_input_is_no_upload(self):
        assert await read_upload(None, "image", LIMIT) is None
        assert await read_upload(UploadFile(file=BytesIO(b""), filename=""), "image", LIMIT) is None

    async def test_oversized_stream_is_read_only_past_the_limit(self):
        source = RecordingFile(b"x" * (LIMIT * 100))
        upload = UploadFile(file=source, filename="big.bin")

        with pytest.raises(ValidationFailure) as exc_info:
            await read_upload(upload, "file", LIMIT)

        assert exc_info.value.errors[0]["field"] == "file"
        assert source.requested == [LIMIT + 1]
        assert source.closed

    async def test_declared_size_over_limit_is_rejected_without_reading(self):
        source = RecordingFile(b"x")
        upload = UploadFile(file=source, filename="big.bin", size=LIMIT + 1)

        with pytest.raises(ValidationFailure):
            await read_upload(upload, "image", LIMIT)

        assert source.requested == []


async def test_form_fields_drops_blank_values():
    assert form_fields(title="Icons", description="", price=None) == {"title": "Icons"}

# src/marketplace/api/dependencies/uploads.py

from typing import Optional
from fastapi import UploadFile

from marketplace.services.asset.asset_manager import UploadPayload
from marketplace.services.exceptions import ValidationFailure


def _too_large(field: str, max_size: int) -> ValidationFailure:
    return ValidationFailure(
        "Uploaded file is too large.",
        [{"field": field, "message": f"File exceeds {max_size} bytes"}],
    )


async def read_upload(upload: Optional[UploadFile], field: str, max_size: int) -> Optional[UploadPayload]:
    """
    Read a multipart file part into an UploadPayload, never buffering more than max_size + 1 bytes.
    Browsers send an empty, unnamed part for an untouched file input; that counts as no upload.
    """
    if upload is None:
        return None
    try:
        if upload.size is not None and upload.size > max_size:
            raise _too_large(field, max_size)
        content = await upload.read(max_size + 1)
        if len(content) > max_size:
            raise _too_large(field, max_size)
    finally:
        await upload.close()
    if not upload.filename and not content:
        return None
    return UploadPayload(
        filename=upload.filename,
        content=content,
        content_type=upload.content_type,
        field=field,
    )


def form_fields(**values: Optional[str]) -> dict:
    """Drop form fields that were omitted or left blank."""
    return {k: v for k, v in values.items() if v is not None and v != ""}

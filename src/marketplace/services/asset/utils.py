import os
import re
import uuid

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")
MAX_NAME_LENGTH = 120
MAX_EXTENSION_LENGTH = 16


def sanitize_filename(filename: str | None) -> str:
    """Reduce a client-supplied filename to a safe, flat basename."""
    if not filename:
        return "asset"
    # clients on Windows send backslash paths
    name = os.path.basename(filename.replace("\\", "/"))
    name = name.replace("\0", "").strip()
    name = _UNSAFE_CHARS.sub("_", name).strip("._")
    if not name:
        return "asset"
    if len(name) > MAX_NAME_LENGTH:
        stem, ext = os.path.splitext(name)
        ext = ext[:MAX_EXTENSION_LENGTH]
        name = (stem[:MAX_NAME_LENGTH - len(ext)] + ext).strip("._") or "asset"
    return name[:MAX_NAME_LENGTH]


def generate_asset_name(filename: str | None) -> str:
    """
    Unique storage name: a random UUID followed by the sanitized original name.
    Example: 3f2c9a0e4b6d4f3c9a1e2b7d8c6f5a4e-cover.png
    """
    return f"{uuid.uuid4().hex}-{sanitize_filename(filename)}"


def original_filename(asset_name: str) -> str:
    """Strip the random prefix added by generate_asset_name."""
    prefix, sep, rest = asset_name.partition("-")
    if sep and len(prefix) == 32 and rest:
        return rest
    return asset_name

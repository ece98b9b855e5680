from __future__ import annotations

import time
from uuid import uuid4

from core.exceptions import InvalidKeyError, MissingKeyError

_EXTENSIONS = {
    "image/jpeg": "jpg",
    "image/png": "png",
    "image/webp": "webp",
}


def extension_for(mime_type: str) -> str:
    return _EXTENSIONS.get(mime_type, "bin")


def build_object_key(
    namespace: str,
    user_id: str,
    mime_type: str,
    *,
    now_ms: int | None = None,
    token: str | None = None,
) -> str:
    """Key layout: ``<namespace><user_id>/<epoch_ms>-<uuid4>.<ext>``."""
    stamp = now_ms if now_ms is not None else int(time.time() * 1000)
    unique = token or str(uuid4())
    return f"{namespace}{user_id}/{stamp}-{unique}.{extension_for(mime_type)}"


def validate_object_key(raw_key: str | None, namespace: str) -> str:
    key = (raw_key or "").strip()
    if not key:
        raise MissingKeyError()
    if not key.startswith(namespace):
        raise InvalidKeyError(details={"key": key})
    return key

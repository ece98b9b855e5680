"""Storage abstraction (S3/MinIO or local filesystem fallback)."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Iterator, Protocol


@dataclass(frozen=True)
class StoredObjectRef:
    object_key: str
    url: str


@dataclass
class StoredObject:
    key: str
    content_type: str
    size: int
    etag: str
    last_modified: datetime
    body: Iterator[bytes]
    close: Callable[[], None] = field(default=lambda: None)


class ObjectStorage(Protocol):
    def put(self, key: str, data: bytes, content_type: str) -> StoredObjectRef:
        ...

    def get(self, key: str) -> StoredObject:  # raises ObjectNotFoundError / StorageError
        ...

    def presigned_url(self, key: str, expires: int = 3600) -> str:
        ...


def build_storage(settings) -> ObjectStorage:
    """Create the backend selected by ``settings.storage.backend``."""
    storage = settings.storage
    uploads = settings.uploads
    if storage.backend == "s3":
        from core.storage.s3 import S3Storage

        return S3Storage.from_settings(
            storage,
            object_cache_control=uploads.object_cache_control,
            chunk_size=uploads.stream_chunk_size,
        )
    from core.storage.local import LocalStorage

    return LocalStorage(
        storage.local_root,
        public_base_url=storage.local_public_base_url,
        chunk_size=uploads.stream_chunk_size,
    )


__all__ = ["ObjectStorage", "StoredObject", "StoredObjectRef", "build_storage"]

from __future__ import annotations

import hashlib
import json
from datetime import datetime, timezone
from pathlib import Path
from typing import BinaryIO, Iterator
from urllib.parse import quote

from core.exceptions import ObjectNotFoundError, StorageError
from core.storage import StoredObject, StoredObjectRef

META_SUFFIX = ".meta.json"


def _iter_file(fp: BinaryIO, chunk_size: int) -> Iterator[bytes]:
    while True:
        chunk = fp.read(chunk_size)
        if not chunk:
            break
        yield chunk


class LocalStorage:
    def __init__(self, root: Path, public_base_url: str | None = None, chunk_size: int = 64 * 1024) -> None:
        self.root = Path(root)
        self.root.mkdir(parents=True, exist_ok=True)
        self.public_base_url = public_base_url.rstrip("/") if public_base_url else None
        self.chunk_size = chunk_size

    def _path(self, key: str) -> Path:
        root = self.root.resolve()
        path = (root / key).resolve()
        if path == root or root not in path.parents:
            raise ObjectNotFoundError("Object key escapes storage root", details={"key": key})
        return path

    def _url(self, key: str) -> str:
        if self.public_base_url:
            return f"{self.public_base_url}/{quote(key, safe='/')}"
        return (self.root / key).resolve().as_uri()

    def put(self, key: str, data: bytes, content_type: str) -> StoredObjectRef:
        path = self._path(key)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)
            meta = {"content_type": content_type, "etag": f'"{hashlib.md5(data).hexdigest()}"'}
            path.with_name(path.name + META_SUFFIX).write_text(json.dumps(meta), encoding="utf-8")
        except OSError as exc:
            raise StorageError(f"Could not write object: {exc}", details={"key": key}) from exc
        return StoredObjectRef(object_key=key, url=self._url(key))

    def get(self, key: str) -> StoredObject:
        path = self._path(key)
        if not path.is_file():
            raise ObjectNotFoundError("Object not found", details={"key": key})
        meta_path = path.with_name(path.name + META_SUFFIX)
        try:
            meta = json.loads(meta_path.read_text(encoding="utf-8")) if meta_path.exists() else {}
            stat = path.stat()
            fp = path.open("rb")
        except (OSError, ValueError) as exc:
            raise StorageError(f"Could not open object: {exc}", details={"key": key}) from exc
        return StoredObject(
            key=key,
            content_type=meta.get("content_type", "application/octet-stream"),
            size=stat.st_size,
            etag=meta.get("etag") or f'"{stat.st_mtime_ns:x}-{stat.st_size:x}"',
            last_modified=datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc),
            body=_iter_file(fp, self.chunk_size),
            close=fp.close,
        )

    def presigned_url(self, key: str, expires: int = 3600) -> str:
        # No signing on the filesystem backend; existence is still enforced.
        if not self._path(key).is_file():
            raise ObjectNotFoundError("Object not found", details={"key": key})
        return self._url(key)


__all__ = ["LocalStorage"]

from __future__ import annotations

from dataclasses import dataclass
from typing import Awaitable, Callable, Sequence

from loguru import logger
from starlette.concurrency import run_in_threadpool

from core.auth import Session
from core.exceptions import (
    MissingFileError,
    PayloadTooLargeError,
    UnauthorizedError,
    UnsupportedMediaTypeError,
    UploadFailedError,
)
from core.proofs.keys import build_object_key
from core.settings import UploadSettings
from core.storage import ObjectStorage, StoredObjectRef

UPLOAD_LOG_TAG = "[upload][silaturahim]"


@dataclass
class UploadRequest:
    """One file part from the upload form.

    ``read`` is only awaited once the declared type and size pass, so a
    rejected upload is never pulled into memory by the handler.
    """

    filename: str | None
    mime_type: str
    declared_size: int | None
    read: Callable[[], Awaitable[bytes]]

    @classmethod
    def from_bytes(cls, data: bytes, mime_type: str, filename: str | None = None) -> "UploadRequest":
        async def _read() -> bytes:
            return data

        return cls(filename=filename, mime_type=mime_type, declared_size=len(data), read=_read)


def size_limit_message(max_bytes: int) -> str:
    mib = max_bytes / (1024 * 1024)
    label = f"{int(mib)}MB" if mib.is_integer() else f"{mib:.1f}MB"
    return f"Ukuran foto maksimal {label}."


class ProofUploadHandler:
    def __init__(self, storage: ObjectStorage, settings: UploadSettings) -> None:
        self.storage = storage
        self.settings = settings

    def _check_size(self, size: int | None) -> None:
        if size is not None and size > self.settings.max_file_size_bytes:
            raise PayloadTooLargeError(
                size_limit_message(self.settings.max_file_size_bytes),
                details={"size": str(size)},
            )

    async def handle(self, session: Session | None, files: Sequence[UploadRequest]) -> StoredObjectRef:
        if session is None or not session.is_authenticated:
            raise UnauthorizedError()
        if len(files) != 1:
            raise MissingFileError(details={"file_count": str(len(files))})

        upload = files[0]
        mime_type = (upload.mime_type or "").strip().lower()
        if mime_type not in self.settings.allowed_content_types:
            raise UnsupportedMediaTypeError(details={"mime_type": mime_type})
        self._check_size(upload.declared_size)

        data = await upload.read()
        self._check_size(len(data))

        object_key = build_object_key(self.settings.namespace, session.user_id, mime_type)
        try:
            stored = await run_in_threadpool(self.storage.put, object_key, data, mime_type)
        except Exception as exc:
            logger.opt(exception=exc).error(
                "{tag} failed: user={user_id} key={key}",
                tag=UPLOAD_LOG_TAG,
                user_id=session.user_id,
                key=object_key,
            )
            raise UploadFailedError(details={"key": object_key}) from exc

        logger.info(
            "{tag} stored {size} bytes as {key}",
            tag=UPLOAD_LOG_TAG,
            size=len(data),
            key=stored.object_key,
        )
        return stored


__all__ = ["ProofUploadHandler", "UploadRequest", "UPLOAD_LOG_TAG", "size_limit_message"]

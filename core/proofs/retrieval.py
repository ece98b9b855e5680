from __future__ import annotations

from dataclasses import dataclass
from datetime import timezone
from email.utils import format_datetime
from typing import AsyncIterator

from loguru import logger
from starlette.concurrency import iterate_in_threadpool, run_in_threadpool

from core.auth import Session
from core.exceptions import ObjectNotFoundError, ProofNotFoundError, UnauthorizedError
from core.proofs.keys import validate_object_key
from core.settings import UploadSettings
from core.storage import ObjectStorage, StoredObject

PROOF_LOG_TAG = "[upload][silaturahim][proof]"
PROOF_URL_LOG_TAG = "[upload][silaturahim][proof-url]"


@dataclass
class ProofStream:
    obj: StoredObject
    cache_control: str

    @property
    def headers(self) -> dict[str, str]:
        last_modified = self.obj.last_modified
        if last_modified.tzinfo is None:
            last_modified = last_modified.replace(tzinfo=timezone.utc)
        return {
            "Content-Type": self.obj.content_type,
            "Content-Length": str(self.obj.size),
            "ETag": self.obj.etag,
            "Last-Modified": format_datetime(last_modified.astimezone(timezone.utc), usegmt=True),
            "Cache-Control": self.cache_control,
        }

    async def iter_bytes(self) -> AsyncIterator[bytes]:
        """Pipe the store body through; the body is closed on completion or disconnect."""
        try:
            async for chunk in iterate_in_threadpool(self.obj.body):
                yield chunk
        except Exception:
            logger.exception("{tag} stream aborted: key={key}", tag=PROOF_LOG_TAG, key=self.obj.key)
            raise
        finally:
            # Also reached on client disconnect.
            self.obj.close()


@dataclass(frozen=True)
class PresignedProofUrl:
    url: str
    expires_in: int


class ProofRetrievalHandler:
    def __init__(self, storage: ObjectStorage, settings: UploadSettings) -> None:
        self.storage = storage
        self.settings = settings

    def _authorize(self, session: Session | None, raw_key: str | None) -> str:
        if session is None or not session.is_authenticated:
            raise UnauthorizedError()
        return validate_object_key(raw_key, self.settings.namespace)

    async def handle(self, session: Session | None, raw_key: str | None) -> ProofStream:
        key = self._authorize(session, raw_key)
        try:
            obj = await run_in_threadpool(self.storage.get, key)
        except Exception as exc:
            reason = "missing" if isinstance(exc, ObjectNotFoundError) else "store-error"
            logger.opt(exception=exc).error(
                "{tag} failed ({reason}): key={key}",
                tag=PROOF_LOG_TAG,
                reason=reason,
                key=key,
            )
            raise ProofNotFoundError(details={"key": key, "reason": reason}) from exc
        return ProofStream(obj=obj, cache_control=self.settings.proof_cache_control)

    async def presign(self, session: Session | None, raw_key: str | None) -> PresignedProofUrl:
        key = self._authorize(session, raw_key)
        expires = self.settings.presign_expiry_seconds
        try:
            url = await run_in_threadpool(self.storage.presigned_url, key, expires)
        except Exception as exc:
            logger.opt(exception=exc).error("{tag} failed: key={key}", tag=PROOF_URL_LOG_TAG, key=key)
            raise ProofNotFoundError(details={"key": key}) from exc
        return PresignedProofUrl(url=url, expires_in=expires)


__all__ = ["PresignedProofUrl", "ProofRetrievalHandler", "ProofStream", "PROOF_LOG_TAG"]

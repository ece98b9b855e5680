from __future__ import annotations

import pytest
from loguru import logger

from core.auth import Role, Session
from core.exceptions import (
    MissingFileError,
    PayloadTooLargeError,
    StorageError,
    UnauthorizedError,
    UnsupportedMediaTypeError,
    UploadFailedError,
)
from core.proofs import ProofUploadHandler, UploadRequest
from core.proofs.upload import size_limit_message
from core.settings import UploadSettings
from tests.utils_http import RecordingStorage

MAX = 2 * 1024 * 1024


@pytest.fixture
def log_messages():
    messages: list[str] = []
    sink_id = logger.add(lambda message: messages.append(str(message)), format="{message}")
    yield messages
    logger.remove(sink_id)


def _handler(storage, **overrides) -> ProofUploadHandler:
    return ProofUploadHandler(storage, UploadSettings(**overrides))


@pytest.mark.asyncio()
@pytest.mark.parametrize("session", [None, Session(user_id=""), Session(user_id="   ", role=Role.ADMIN)])
async def test_missing_session_is_unauthorized(session, recording_storage):
    handler = _handler(recording_storage)
    with pytest.raises(UnauthorizedError):
        await handler.handle(session, [UploadRequest.from_bytes(b"x", "image/png")])
    assert recording_storage.put_calls == []


@pytest.mark.asyncio()
async def test_unauthorized_wins_over_other_failures(recording_storage):
    handler = _handler(recording_storage)
    with pytest.raises(UnauthorizedError):
        await handler.handle(None, [])


@pytest.mark.asyncio()
@pytest.mark.parametrize("count", [0, 2])
async def test_requires_exactly_one_file(count, recording_storage, student_session):
    files = [UploadRequest.from_bytes(b"x", "image/png") for _ in range(count)]
    with pytest.raises(MissingFileError) as excinfo:
        await _handler(recording_storage).handle(student_session, files)
    assert excinfo.value.message == "File foto wajib diisi."
    assert recording_storage.put_calls == []


@pytest.mark.asyncio()
@pytest.mark.parametrize("mime_type", ["image/gif", "application/pdf", "", "image/svg+xml"])
async def test_rejects_unsupported_media_type(mime_type, recording_storage, student_session):
    upload = UploadRequest.from_bytes(b"GIF89a", mime_type)
    with pytest.raises(UnsupportedMediaTypeError):
        await _handler(recording_storage).handle(student_session, [upload])
    assert recording_storage.put_calls == []


@pytest.mark.asyncio()
async def test_media_type_checked_before_size(recording_storage, student_session):
    upload = UploadRequest.from_bytes(b"\0" * (MAX + 1), "image/gif")
    with pytest.raises(UnsupportedMediaTypeError):
        await _handler(recording_storage).handle(student_session, [upload])


@pytest.mark.asyncio()
async def test_rejects_oversized_payload_without_reading(recording_storage, student_session):
    reads = []

    async def _read() -> bytes:
        reads.append(True)
        return b""

    upload = UploadRequest(filename="big.jpg", mime_type="image/jpeg", declared_size=3 * 1024 * 1024, read=_read)
    handler = _handler(recording_storage)
    for _ in range(2):
        with pytest.raises(PayloadTooLargeError) as excinfo:
            await handler.handle(student_session, [upload])
        assert excinfo.value.message == "Ukuran foto maksimal 2MB."
    assert reads == []
    assert recording_storage.put_calls == []


@pytest.mark.asyncio()
async def test_actual_length_is_checked_when_declared_size_lies(recording_storage, student_session):
    async def _read() -> bytes:
        return b"\0" * (MAX + 1)

    upload = UploadRequest(filename="x.png", mime_type="image/png", declared_size=10, read=_read)
    with pytest.raises(PayloadTooLargeError):
        await _handler(recording_storage).handle(student_session, [upload])
    assert recording_storage.put_calls == []


@pytest.mark.asyncio()
async def test_exact_ceiling_is_accepted(recording_storage, student_session):
    upload = UploadRequest.from_bytes(b"\0" * MAX, "image/webp")
    stored = await _handler(recording_storage).handle(student_session, [upload])
    assert stored.object_key.endswith(".webp")


@pytest.mark.asyncio()
async def test_successful_upload_returns_store_reference(recording_storage, student_session):
    payload = b"\x89PNG\r\n\x1a\n" + b"\0" * 500_000
    stored = await _handler(recording_storage).handle(
        student_session, [UploadRequest.from_bytes(payload, "image/png", "bukti.png")]
    )

    assert stored.object_key.startswith("silaturahim/user-123/")
    assert stored.object_key.endswith(".png")
    assert stored.url == f"https://cdn.test/majelis/{stored.object_key}"
    [(key, data, content_type)] = recording_storage.put_calls
    assert key == stored.object_key
    assert data == payload
    assert content_type == "image/png"


@pytest.mark.asyncio()
async def test_same_user_uploads_never_share_a_key(recording_storage, student_session):
    handler = _handler(recording_storage)
    upload = UploadRequest.from_bytes(b"same", "image/jpeg")
    first = await handler.handle(student_session, [upload])
    second = await handler.handle(student_session, [upload])
    assert first.object_key != second.object_key
    assert len(recording_storage.objects) == 2


@pytest.mark.asyncio()
async def test_store_failure_becomes_upload_failed(student_session, log_messages):
    storage = RecordingStorage(fail_with=StorageError("bucket exploded: secret-host:9000"))
    with pytest.raises(UploadFailedError) as excinfo:
        await _handler(storage).handle(student_session, [UploadRequest.from_bytes(b"x", "image/jpeg")])

    assert excinfo.value.message == "Upload foto ke server gagal. Coba lagi."
    assert "secret-host" not in excinfo.value.message
    assert any(msg.startswith("[upload][silaturahim] failed") for msg in log_messages)


@pytest.mark.asyncio()
async def test_unexpected_store_exception_is_also_wrapped(student_session):
    storage = RecordingStorage(fail_with=RuntimeError("boom"))
    with pytest.raises(UploadFailedError):
        await _handler(storage).handle(student_session, [UploadRequest.from_bytes(b"x", "image/jpeg")])
    assert len(storage.put_calls) == 1


def test_size_limit_message_follows_configured_ceiling():
    assert size_limit_message(2 * 1024 * 1024) == "Ukuran foto maksimal 2MB."
    assert size_limit_message(5 * 1024 * 1024) == "Ukuran foto maksimal 5MB."
    assert size_limit_message(1536 * 1024) == "Ukuran foto maksimal 1.5MB."

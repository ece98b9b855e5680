"""Silaturahim proof upload and retrieval endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import StreamingResponse
from starlette.datastructures import UploadFile

from core.auth import Session
from core.exceptions import UnauthorizedError
from core.proofs import ProofRetrievalHandler, ProofUploadHandler, UploadRequest
from services.api.dependencies import get_current_session, get_retrieval_handler, get_upload_handler
from services.api.schemas import ErrorResponse, ProofUrlResponse, UploadResponse


router = APIRouter(prefix="/uploads/silaturahim", tags=["uploads"])

_ERRORS = {
    400: {"model": ErrorResponse},
    401: {"model": ErrorResponse},
}


def _as_upload_request(part: UploadFile) -> UploadRequest:
    return UploadRequest(
        filename=part.filename,
        mime_type=part.content_type or "",
        declared_size=part.size,
        read=part.read,
    )


@router.post(
    "",
    response_model=UploadResponse,
    response_model_by_alias=True,
    responses={**_ERRORS, 500: {"model": ErrorResponse}},
)
async def upload_proof(
    request: Request,
    session: Session | None = Depends(get_current_session),
    handler: ProofUploadHandler = Depends(get_upload_handler),
) -> UploadResponse:
    """Store a proof photo for the current user."""
    if session is None:
        # Skip multipart parsing for anonymous callers.
        raise UnauthorizedError()
    async with request.form() as form:
        files = [part for part in form.getlist("file") if isinstance(part, UploadFile)]
        stored = await handler.handle(session, [_as_upload_request(part) for part in files])
    return UploadResponse(object_key=stored.object_key, url=stored.url)


@router.get(
    "/proof",
    response_class=StreamingResponse,
    responses={**_ERRORS, 404: {"model": ErrorResponse}},
)
async def get_proof(
    key: str | None = Query(default=None),
    session: Session | None = Depends(get_current_session),
    handler: ProofRetrievalHandler = Depends(get_retrieval_handler),
) -> StreamingResponse:
    """Stream a stored proof photo back to an authenticated caller."""
    proof = await handler.handle(session, key)
    return StreamingResponse(
        proof.iter_bytes(),
        status_code=200,
        headers=proof.headers,
        media_type=proof.obj.content_type,
    )


@router.get(
    "/proof/url",
    response_model=ProofUrlResponse,
    response_model_by_alias=True,
    responses={**_ERRORS, 404: {"model": ErrorResponse}},
)
async def get_proof_url(
    key: str | None = Query(default=None),
    session: Session | None = Depends(get_current_session),
    handler: ProofRetrievalHandler = Depends(get_retrieval_handler),
) -> ProofUrlResponse:
    presigned = await handler.presign(session, key)
    return ProofUrlResponse(url=presigned.url, expires_in=presigned.expires_in)

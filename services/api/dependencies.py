"""Request-scoped collaborators resolved from ``app.state``.

Collaborators passed to ``create_app`` win; anything missing is built from
settings the first time a request needs it.
"""

from __future__ import annotations

from fastapi import Depends, Request

from core.auth import Session, SessionAuthenticator
from core.proofs import ProofRetrievalHandler, ProofUploadHandler
from core.settings import Settings, get_settings
from core.storage import ObjectStorage, build_storage


def get_app_settings(request: Request) -> Settings:
    state = request.app.state
    if getattr(state, "settings", None) is None:
        state.settings = get_settings()
    return state.settings


def get_storage(request: Request, settings: Settings = Depends(get_app_settings)) -> ObjectStorage:
    state = request.app.state
    if getattr(state, "storage", None) is None:
        state.storage = build_storage(settings)
    return state.storage


def get_authenticator(request: Request, settings: Settings = Depends(get_app_settings)) -> SessionAuthenticator:
    state = request.app.state
    if getattr(state, "authenticator", None) is None:
        state.authenticator = SessionAuthenticator.from_settings(settings.auth)
    return state.authenticator


async def get_current_session(
    request: Request,
    authenticator: SessionAuthenticator = Depends(get_authenticator),
) -> Session | None:
    return authenticator.current_session(request.headers, request.cookies)


def get_upload_handler(
    settings: Settings = Depends(get_app_settings),
    storage: ObjectStorage = Depends(get_storage),
) -> ProofUploadHandler:
    return ProofUploadHandler(storage, settings.uploads)


def get_retrieval_handler(
    settings: Settings = Depends(get_app_settings),
    storage: ObjectStorage = Depends(get_storage),
) -> ProofRetrievalHandler:
    return ProofRetrievalHandler(storage, settings.uploads)


__all__ = [
    "get_app_settings",
    "get_authenticator",
    "get_current_session",
    "get_retrieval_handler",
    "get_storage",
    "get_upload_handler",
]

"""Silaturahim proof image upload and retrieval."""

from core.proofs.keys import build_object_key, extension_for, validate_object_key
from core.proofs.retrieval import PresignedProofUrl, ProofRetrievalHandler, ProofStream
from core.proofs.upload import ProofUploadHandler, UploadRequest

__all__ = [
    "PresignedProofUrl",
    "ProofRetrievalHandler",
    "ProofStream",
    "ProofUploadHandler",
    "UploadRequest",
    "build_object_key",
    "extension_for",
    "validate_object_key",
]

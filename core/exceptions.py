"""Custom exception hierarchy for Majelis Digital services."""

from __future__ import annotations


class MajelisError(Exception):
    """Base exception for all Majelis-specific errors."""

    default_message = "Terjadi kesalahan pada server."

    def __init__(self, message: str | None = None, details: dict[str, str] | None = None) -> None:
        message = message or self.default_message
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ConfigurationError(MajelisError):
    """Raised when configuration is invalid or missing."""
    pass


class UnauthorizedError(MajelisError):
    """Raised when a request carries no usable session."""

    default_message = "Unauthorized"


class ValidationError(MajelisError):
    """Base class for request validation errors."""
    pass


class MissingFileError(ValidationError):
    """Raised when the upload form does not carry exactly one file."""

    default_message = "File foto wajib diisi."


class UnsupportedMediaTypeError(ValidationError):
    """Raised when the uploaded file is not an allowed image type."""

    default_message = "Format foto harus JPG, PNG, atau WebP."


class PayloadTooLargeError(ValidationError):
    """Raised when the uploaded file exceeds the size ceiling."""

    default_message = "Ukuran foto maksimal 2MB."


class MissingKeyError(ValidationError):
    """Raised when the object key query parameter is empty."""

    default_message = "Parameter key wajib diisi."


class InvalidKeyError(ValidationError):
    """Raised when the object key is outside the proof namespace."""

    default_message = "Object key tidak valid."


class UploadFailedError(MajelisError):
    """Raised when the object store rejects an upload."""

    default_message = "Upload foto ke server gagal. Coba lagi."


class ProofNotFoundError(MajelisError):
    """Raised when a stored proof cannot be opened."""

    default_message = "File bukti tidak ditemukan atau tidak bisa dibuka."


class StorageError(MajelisError):
    """Raised when storage operations fail."""
    pass


class ObjectNotFoundError(StorageError):
    """Raised when the requested object does not exist in storage."""
    pass

from __future__ import annotations

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    message: str


class UploadResponse(BaseModel):
    object_key: str = Field(..., alias="objectKey")
    url: str

    model_config = {"populate_by_name": True}


class ProofUrlResponse(BaseModel):
    url: str
    expires_in: int = Field(..., alias="expiresIn")

    model_config = {"populate_by_name": True}


class HealthResponse(BaseModel):
    status: str = "ok"


__all__ = ["ErrorResponse", "HealthResponse", "ProofUrlResponse", "UploadResponse"]

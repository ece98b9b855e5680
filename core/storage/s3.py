from __future__ import annotations

from typing import Any, Optional
from urllib.parse import quote, urlparse

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from core.exceptions import ObjectNotFoundError, StorageError
from core.storage import StoredObject, StoredObjectRef

_MISSING_CODES = {"NoSuchKey", "NotFound", "404"}


def normalize_endpoint(endpoint: str) -> str:
    """MinIO endpoints are often configured as bare ``host:port``."""
    endpoint = endpoint.strip()
    if not endpoint.lower().startswith(("http://", "https://")):
        endpoint = f"http://{endpoint}"
    return endpoint.rstrip("/")


def encode_key(key: str) -> str:
    return "/".join(quote(segment, safe="!~*'()") for segment in key.split("/"))


class S3Storage:
    def __init__(
        self,
        bucket: str,
        *,
        endpoint_url: Optional[str] = None,
        public_base_url: Optional[str] = None,
        region: Optional[str] = None,
        access_key: Optional[str] = None,
        secret_key: Optional[str] = None,
        object_cache_control: Optional[str] = None,
        chunk_size: int = 64 * 1024,
        client: Any = None,
    ) -> None:
        self.bucket = bucket
        self.endpoint_url = normalize_endpoint(endpoint_url) if endpoint_url else None
        self.public_base_url = public_base_url.rstrip("/") if public_base_url else None
        self.object_cache_control = object_cache_control
        self.chunk_size = chunk_size
        if client is None:
            session = boto3.session.Session(region_name=region) if region else boto3.session.Session()
            client = session.client(
                "s3",
                endpoint_url=self.endpoint_url,
                aws_access_key_id=access_key,
                aws_secret_access_key=secret_key,
                config=Config(signature_version="s3v4", s3={"addressing_style": "path"}),
            )
        self.client = client

    @classmethod
    def from_settings(cls, settings, *, object_cache_control: Optional[str] = None, chunk_size: int = 64 * 1024) -> "S3Storage":
        return cls(
            settings.bucket,
            endpoint_url=settings.endpoint,
            public_base_url=settings.public_base_url,
            region=settings.region,
            access_key=settings.access_key,
            secret_key=settings.secret_key,
            object_cache_control=object_cache_control,
            chunk_size=chunk_size,
        )

    def object_url(self, key: str) -> str:
        if self.public_base_url:
            base = self.public_base_url
        elif self.endpoint_url:
            parsed = urlparse(self.endpoint_url)
            base = f"{parsed.scheme}://{parsed.netloc}"
        else:
            return f"s3://{self.bucket}/{key}"
        return f"{base}/{self.bucket}/{encode_key(key)}"

    def put(self, key: str, data: bytes, content_type: str) -> StoredObjectRef:
        params: dict[str, Any] = {
            "Bucket": self.bucket,
            "Key": key,
            "Body": data,
            "ContentLength": len(data),
            "ContentType": content_type,
        }
        if self.object_cache_control:
            params["CacheControl"] = self.object_cache_control
        try:
            self.client.put_object(**params)
        except (ClientError, BotoCoreError) as exc:
            raise StorageError(f"put_object failed: {exc}", details={"key": key, "bucket": self.bucket}) from exc
        return StoredObjectRef(object_key=key, url=self.object_url(key))

    def get(self, key: str) -> StoredObject:
        try:
            response = self.client.get_object(Bucket=self.bucket, Key=key)
        except ClientError as exc:
            code = str(exc.response.get("Error", {}).get("Code", ""))
            if code in _MISSING_CODES:
                raise ObjectNotFoundError("Object not found", details={"key": key, "bucket": self.bucket}) from exc
            raise StorageError(f"get_object failed: {exc}", details={"key": key, "bucket": self.bucket}) from exc
        except BotoCoreError as exc:
            raise StorageError(f"get_object failed: {exc}", details={"key": key, "bucket": self.bucket}) from exc

        body = response["Body"]
        return StoredObject(
            key=key,
            content_type=response.get("ContentType") or "application/octet-stream",
            size=int(response.get("ContentLength", 0)),
            etag=response.get("ETag", ""),
            last_modified=response["LastModified"],
            body=body.iter_chunks(self.chunk_size),
            close=body.close,
        )

    def presigned_url(self, key: str, expires: int = 3600) -> str:
        try:
            self.client.head_object(Bucket=self.bucket, Key=key)
        except ClientError as exc:
            code = str(exc.response.get("Error", {}).get("Code", ""))
            if code in _MISSING_CODES:
                raise ObjectNotFoundError("Object not found", details={"key": key, "bucket": self.bucket}) from exc
            raise StorageError(f"head_object failed: {exc}", details={"key": key, "bucket": self.bucket}) from exc
        except BotoCoreError as exc:
            raise StorageError(f"head_object failed: {exc}", details={"key": key, "bucket": self.bucket}) from exc
        return self.client.generate_presigned_url(
            ClientMethod="get_object",
            Params={"Bucket": self.bucket, "Key": key},
            ExpiresIn=expires,
        )


__all__ = ["S3Storage", "encode_key", "normalize_endpoint"]

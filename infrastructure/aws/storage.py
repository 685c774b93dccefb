"""Service objects for interacting with S3-compatible object storage."""

from __future__ import annotations

import asyncio
import logging
import os
from typing import Any

from botocore.exceptions import BotoCoreError, ClientError

from config.aws import VOICE_MESSAGES_BUCKET
from core.exceptions import ConfigurationError, ProviderError, ServiceError
from core.queue.retry import is_retryable_status

from .clients import get_s3_client

logger = logging.getLogger(__name__)

PROVIDER_NAME = "s3"


def _storage_error(action: str, path: str, exc: Exception) -> ProviderError:
    status = None
    if isinstance(exc, ClientError):
        status = exc.response.get("ResponseMetadata", {}).get("HTTPStatusCode")
    return ProviderError(
        f"Failed to {action} {path}: {exc}",
        provider=PROVIDER_NAME,
        original_error=exc,
        status_code=status,
        retryable=is_retryable_status(status),
    )


class VoiceStorageService:
    """Download and upload voice message audio by object path."""

    def __init__(self, *, bucket_name: str | None = None, s3_client: Any | None = None) -> None:
        client = s3_client or get_s3_client()
        if client is None:
            raise ConfigurationError("S3 client not initialised", key="AWS credentials")

        self._s3_client = client
        resolved_bucket = bucket_name or os.getenv("VOICE_MESSAGES_BUCKET") or VOICE_MESSAGES_BUCKET
        if not resolved_bucket:
            raise ConfigurationError(
                "VOICE_MESSAGES_BUCKET must be configured",
                key="VOICE_MESSAGES_BUCKET",
            )
        self._bucket_name = resolved_bucket

        logger.debug("VoiceStorageService initialised", extra={"bucket": self._bucket_name})

    @property
    def bucket_name(self) -> str:
        return self._bucket_name

    async def download(self, path: str) -> bytes:
        """Return the object stored at ``path``."""

        try:
            response = await asyncio.to_thread(
                self._s3_client.get_object,
                Bucket=self._bucket_name,
                Key=path,
            )
            body = response["Body"]
            data = await asyncio.to_thread(body.read)
        except (BotoCoreError, ClientError) as exc:
            logger.error("S3 download failed bucket=%s key=%s: %s", self._bucket_name, path, exc)
            raise _storage_error("download", path, exc) from exc

        if not data:
            raise ServiceError(f"Stored object {path} is empty")
        return data

    async def upload(self, path: str, data: bytes, content_type: str) -> str:
        """Store ``data`` at ``path`` (overwriting) and return the path."""

        if not data:
            raise ServiceError("Cannot upload empty payload")

        logger.info("Uploading to S3 bucket=%s key=%s (%d bytes)", self._bucket_name, path, len(data))
        try:
            await asyncio.to_thread(
                self._s3_client.put_object,
                Bucket=self._bucket_name,
                Key=path,
                Body=data,
                ContentType=content_type,
            )
        except (BotoCoreError, ClientError) as exc:
            logger.error("S3 upload failed bucket=%s key=%s: %s", self._bucket_name, path, exc)
            raise _storage_error("upload", path, exc) from exc
        return path


__all__ = ["VoiceStorageService"]

"""Tests for ``VoiceStorageService`` against an in-memory S3 stand-in."""

from __future__ import annotations

import io

import pytest
from botocore.exceptions import ClientError, EndpointConnectionError

from core.exceptions import ConfigurationError, ProviderError, ServiceError
from infrastructure.aws.storage import VoiceStorageService

pytestmark = pytest.mark.anyio


class FakeS3Client:
    def __init__(self) -> None:
        self.objects: dict[tuple[str, str], bytes] = {}
        self.put_calls: list[dict] = []
        self.fail_with: Exception | None = None

    def get_object(self, *, Bucket: str, Key: str):
        if self.fail_with is not None:
            raise self.fail_with
        try:
            data = self.objects[(Bucket, Key)]
        except KeyError:
            raise ClientError(
                {"Error": {"Code": "NoSuchKey", "Message": "missing"}, "ResponseMetadata": {"HTTPStatusCode": 404}},
                "GetObject",
            ) from None
        return {"Body": io.BytesIO(data)}

    def put_object(self, *, Bucket: str, Key: str, Body: bytes, ContentType: str):
        if self.fail_with is not None:
            raise self.fail_with
        self.put_calls.append({"Bucket": Bucket, "Key": Key, "ContentType": ContentType})
        self.objects[(Bucket, Key)] = Body
        return {}


@pytest.fixture
def s3() -> FakeS3Client:
    return FakeS3Client()


@pytest.fixture
def storage(s3) -> VoiceStorageService:
    return VoiceStorageService(bucket_name="voice-test", s3_client=s3)


async def test_upload_then_download(storage, s3):
    path = await storage.upload("alice/m1/tts-bruno-abc.mp3", b"ID3", "audio/mpeg")

    assert path == "alice/m1/tts-bruno-abc.mp3"
    assert s3.put_calls == [{"Bucket": "voice-test", "Key": path, "ContentType": "audio/mpeg"}]
    assert await storage.download(path) == b"ID3"


async def test_upload_overwrites_existing_object(storage, s3):
    await storage.upload("a.mp3", b"one", "audio/mpeg")
    await storage.upload("a.mp3", b"two", "audio/mpeg")

    assert await storage.download("a.mp3") == b"two"


async def test_missing_object_is_a_terminal_provider_error(storage):
    with pytest.raises(ProviderError) as excinfo:
        await storage.download("nope.webm")

    assert excinfo.value.status_code == 404
    assert excinfo.value.retryable is False


async def test_connection_failures_are_retryable(storage, s3):
    s3.fail_with = EndpointConnectionError(endpoint_url="https://s3.example")

    with pytest.raises(ProviderError) as excinfo:
        await storage.upload("a.mp3", b"data", "audio/mpeg")

    assert excinfo.value.status_code is None
    assert excinfo.value.retryable is True


async def test_empty_payloads_are_rejected(storage, s3):
    s3.objects[("voice-test", "empty.webm")] = b""

    with pytest.raises(ServiceError):
        await storage.upload("a.mp3", b"", "audio/mpeg")
    with pytest.raises(ServiceError):
        await storage.download("empty.webm")


def test_missing_client_is_a_configuration_error(monkeypatch):
    monkeypatch.setattr("infrastructure.aws.storage.get_s3_client", lambda: None)

    with pytest.raises(ConfigurationError):
        VoiceStorageService(bucket_name="voice-test")


def test_missing_bucket_is_a_configuration_error(monkeypatch, s3):
    monkeypatch.delenv("VOICE_MESSAGES_BUCKET", raising=False)
    monkeypatch.setattr("infrastructure.aws.storage.VOICE_MESSAGES_BUCKET", "")

    with pytest.raises(ConfigurationError) as excinfo:
        VoiceStorageService(s3_client=s3)

    assert excinfo.value.key == "VOICE_MESSAGES_BUCKET"

"""Durable request queue: submit once, retry transient failures later."""

from .connectivity import ConnectivityMonitor
from .engine import EXHAUSTED_MESSAGE, DurableRequestQueue
from .http_requests import JsonRequest, build_json_request_queue, post_json_with_retry, unwrap_envelope
from .models import Durability, PayloadCodec, QueuedUnit
from .retry import RETRYABLE_STATUS_CODES, is_retryable_error, is_retryable_status
from .store import ResilientQueueStore, SqlQueueStore, get_durable_queue_store
from .transcriptions import (
    TranscriptionJob,
    TranscriptionResult,
    build_transcription_queue,
    transcribe_with_retry,
    transcription_durability,
)

__all__ = [
    "ConnectivityMonitor",
    "DurableRequestQueue",
    "Durability",
    "EXHAUSTED_MESSAGE",
    "JsonRequest",
    "PayloadCodec",
    "QueuedUnit",
    "RETRYABLE_STATUS_CODES",
    "ResilientQueueStore",
    "SqlQueueStore",
    "TranscriptionJob",
    "TranscriptionResult",
    "build_json_request_queue",
    "build_transcription_queue",
    "get_durable_queue_store",
    "is_retryable_error",
    "is_retryable_status",
    "post_json_with_retry",
    "transcribe_with_retry",
    "transcription_durability",
    "unwrap_envelope",
]

"""AWS infrastructure helpers (clients and services)."""

from .clients import aws_clients, get_s3_client
from .storage import VoiceStorageService

__all__ = [
    "aws_clients",
    "get_s3_client",
    "VoiceStorageService",
]

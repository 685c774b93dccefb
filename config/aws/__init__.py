"""Object storage settings for voice message audio.

``AWS_ENDPOINT_URL`` points boto3 at an S3-compatible provider (Supabase
storage, MinIO) instead of AWS.
"""

from __future__ import annotations

import os

AWS_REGION = os.getenv("AWS_REGION", "eu-central-1")
VOICE_MESSAGES_BUCKET = os.getenv("VOICE_MESSAGES_BUCKET", "voice-messages")
AWS_ENDPOINT_URL = os.getenv("AWS_ENDPOINT_URL") or None

__all__ = ["AWS_ENDPOINT_URL", "AWS_REGION", "VOICE_MESSAGES_BUCKET"]

"""Repository exports for the chat feature."""

from .messages import MessageRepository
from .participants import ParticipantRepository, RecipientProfile
from .transformations import TransformationRepository
from .voice_renderings import VoiceRenderingRepository

__all__ = [
    "MessageRepository",
    "ParticipantRepository",
    "RecipientProfile",
    "TransformationRepository",
    "VoiceRenderingRepository",
]

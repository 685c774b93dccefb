"""SQLAlchemy ORM models for the chat domain.

Only the tables the personalization pipeline reads or writes are mapped here:
profiles, conversations and their participants, messages, and the per-message
derived artifacts (translations, scaled texts and voice renderings).
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Optional
from uuid import uuid4

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from infrastructure.db.base import Base

PROCESSING_STATUSES = ("processing", "ready", "failed")
PROFICIENCY_VALUES = ("beginner", "intermediate", "advanced")


def _utcnow() -> datetime:
    """Return a timezone-aware UTC timestamp for ORM defaults."""

    return datetime.now(UTC)


def _new_id() -> str:
    return str(uuid4())


class Profile(Base):
    """Per-user personalization preferences."""

    __tablename__ = "profiles"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    username: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    language_preference: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    language_proficiency: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    tts_voice: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    tts_rate: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        server_default=func.now(),
    )

    __table_args__ = (
        CheckConstraint(
            "language_proficiency IS NULL OR language_proficiency IN ('beginner', 'intermediate', 'advanced')",
            name="check_profile_proficiency",
        ),
        CheckConstraint("tts_rate IS NULL OR (tts_rate >= -50 AND tts_rate <= 50)", name="check_profile_tts_rate"),
    )


class Conversation(Base):
    """A chat thread shared by two or more participants."""

    __tablename__ = "conversations"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    title: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        server_default=func.now(),
    )

    participants: Mapped[list["ConversationParticipant"]] = relationship(
        "ConversationParticipant",
        back_populates="conversation",
        cascade="all, delete-orphan",
    )


class ConversationParticipant(Base):
    """Membership of a profile in a conversation."""

    __tablename__ = "conversation_participants"

    conversation_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("conversations.id", ondelete="CASCADE"),
        primary_key=True,
    )
    user_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("profiles.id", ondelete="CASCADE"),
        primary_key=True,
    )
    joined_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        server_default=func.now(),
    )

    conversation: Mapped["Conversation"] = relationship("Conversation", back_populates="participants")
    profile: Mapped["Profile"] = relationship("Profile")


class Message(Base):
    """A text or voice message posted to a conversation."""

    __tablename__ = "messages"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    conversation_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("conversations.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    sender_id: Mapped[str] = mapped_column(String(36), ForeignKey("profiles.id"), nullable=False)
    content_type: Mapped[str] = mapped_column(String(10), nullable=False, default="text")
    original_text: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    original_language: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    audio_path: Mapped[Optional[str]] = mapped_column(String(512), nullable=True)
    bypass_recipient_preferences: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    processing_status: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        server_default=func.now(),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        server_default=func.now(),
        onupdate=_utcnow,
    )

    __table_args__ = (
        CheckConstraint("content_type IN ('text', 'voice')", name="check_message_content_type"),
        CheckConstraint(
            "processing_status IS NULL OR processing_status IN ('processing', 'ready', 'failed')",
            name="check_message_processing_status",
        ),
    )


class MessageTranslation(Base):
    """Cached translation of a message. Written once per target language."""

    __tablename__ = "message_translations"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    message_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("messages.id", ondelete="CASCADE"),
        nullable=False,
    )
    target_language: Mapped[str] = mapped_column(String(32), nullable=False)
    translated_text: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        server_default=func.now(),
    )

    __table_args__ = (
        UniqueConstraint("message_id", "target_language", name="uq_message_translation_target"),
    )


class MessageScaledText(Base):
    """Cached proficiency-scaled text of a message."""

    __tablename__ = "message_scaled_texts"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    message_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("messages.id", ondelete="CASCADE"),
        nullable=False,
    )
    target_language: Mapped[str] = mapped_column(String(32), nullable=False)
    target_proficiency: Mapped[str] = mapped_column(String(20), nullable=False)
    scaled_text: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        server_default=func.now(),
    )

    __table_args__ = (
        UniqueConstraint(
            "message_id",
            "target_language",
            "target_proficiency",
            name="uq_message_scaled_text_target",
        ),
    )


class MessageVoiceRendering(Base):
    """Per-recipient personalized rendering of a voice message."""

    __tablename__ = "message_voice_renderings"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    message_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("messages.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id: Mapped[str] = mapped_column(String(36), ForeignKey("profiles.id"), nullable=False)
    source_language: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    target_language: Mapped[str] = mapped_column(String(32), nullable=False)
    target_proficiency: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    needs_translation: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    needs_scaling: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    transcript_text: Mapped[str] = mapped_column(Text, nullable=False, default="")
    translated_text: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    scaled_text: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    final_text: Mapped[str] = mapped_column(Text, nullable=False, default="")
    final_language: Mapped[str] = mapped_column(String(32), nullable=False)
    final_audio_path: Mapped[Optional[str]] = mapped_column(String(512), nullable=True)
    processing_status: Mapped[str] = mapped_column(String(20), nullable=False, default="processing")
    error_message: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        server_default=func.now(),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        server_default=func.now(),
        onupdate=_utcnow,
    )

    __table_args__ = (
        UniqueConstraint("message_id", "user_id", name="uq_message_voice_rendering_recipient"),
        CheckConstraint(
            "processing_status IN ('processing', 'ready', 'failed')",
            name="check_rendering_processing_status",
        ),
    )


__all__ = [
    "Conversation",
    "ConversationParticipant",
    "Message",
    "MessageScaledText",
    "MessageTranslation",
    "MessageVoiceRendering",
    "PROCESSING_STATUSES",
    "PROFICIENCY_VALUES",
    "Profile",
]

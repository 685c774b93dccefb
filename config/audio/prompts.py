"""Prompts for audio transcription.

Edit these to customize AI behavior when transcribing audio.
"""

from __future__ import annotations

from config.languages import LANGUAGES


TRANSCRIBE_INSTRUCTIONS = """Transcribe the spoken audio into text in the original language (do not translate).
Detect the spoken language and respond with JSON: {{"text":"...","language":"<code>"}}.
Use only these language codes: {codes}. If unsure, omit language or use "unknown".
Return only JSON with no extra commentary."""


def build_transcribe_instructions() -> str:
    """Return the transcription instructions listing the supported codes."""

    codes = ", ".join(code for code, _ in LANGUAGES)
    return TRANSCRIBE_INSTRUCTIONS.format(codes=codes)


__all__ = ["TRANSCRIBE_INSTRUCTIONS", "build_transcribe_instructions"]

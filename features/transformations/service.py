"""Single-shot text transformations backed by the configured providers.

Each operation validates its inputs, renders the prompt from
``config.text.prompts`` and parses the model reply leniently: scaling,
correction and the alternatives fall back to safe defaults when the reply is
not valid JSON.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Dict, Optional

from config.audio import DEFAULT_AUDIO_MIME_TYPE, MAX_AUDIO_INPUT_BYTES
from config.languages import LEVEL_DESCRIPTIONS, PROFICIENCY_LEVELS, get_language_name
from config.text import (
    ALTERNATIVES_COUNT,
    MAX_CONTEXT_INPUT_CHARS,
    MAX_LANGUAGE_CODE_CHARS,
    MAX_TEXT_INPUT_CHARS,
    prompts,
)
from core.exceptions import PayloadTooLargeError, ProviderError, ValidationError
from core.providers.audio.base import BaseAudioProvider, SpeechProviderRequest
from core.providers.base import BaseTextProvider
from core.providers.factory import get_audio_provider, get_text_provider
from core.utils.json_parsing import coerce_str, try_parse_json, try_parse_json_list

logger = logging.getLogger(__name__)

UNPARSABLE_CORRECTION_PRAISE = "Unable to fully correct. Please try again."
TRANSLATION_STYLES = ("direct", "formal", "casual")

_LIST_MARKER = re.compile(r"^\s*(?:\d+[.)]|[-*•])\s*")


def _require_text(value: Optional[str], field: str, limit: int = MAX_TEXT_INPUT_CHARS) -> str:
    text = (value or "").strip()
    if not text:
        raise ValidationError(f"Missing required field: {field}", field=field)
    if len(text) > limit:
        raise PayloadTooLargeError(f"{field} exceeds {limit} characters", field=field, limit=limit)
    return text


def _optional_code(value: Optional[str], field: str) -> Optional[str]:
    code = (value or "").strip()
    if not code:
        return None
    if len(code) > MAX_LANGUAGE_CODE_CHARS:
        raise PayloadTooLargeError(
            f"{field} exceeds {MAX_LANGUAGE_CODE_CHARS} characters",
            field=field,
            limit=MAX_LANGUAGE_CODE_CHARS,
        )
    return code


class TextTransformationService:
    """Translate, scale, correct, rephrase and transcribe user content."""

    def __init__(
        self,
        text_provider: Optional[BaseTextProvider] = None,
        audio_provider: Optional[BaseAudioProvider] = None,
    ) -> None:
        self._text_provider = text_provider
        self._audio_provider = audio_provider

    @property
    def text_provider(self) -> BaseTextProvider:
        if self._text_provider is None:
            self._text_provider = get_text_provider()
        return self._text_provider

    @property
    def audio_provider(self) -> BaseAudioProvider:
        if self._audio_provider is None:
            self._audio_provider = get_audio_provider()
        return self._audio_provider

    async def translate(self, text: Optional[str], source_lang: Optional[str], target_lang: Optional[str]) -> Dict[str, str]:
        """Return ``{translated_text, source_language, target_language}``.

        Matching languages short-circuit to the input without a model call;
        an empty model reply is a non-retryable provider error.
        """

        if not (text or "").strip() or not (source_lang or "").strip() or not (target_lang or "").strip():
            raise ValidationError("Missing required fields: text, source_lang, target_lang")
        clean_text = _require_text(text, "text")
        source = _optional_code(source_lang, "source_lang")
        target = _optional_code(target_lang, "target_lang")

        if source == target:
            return {"translated_text": clean_text, "source_language": source, "target_language": target}

        prompt = prompts.TRANSLATE_PROMPT.format(
            source_language=get_language_name(source),
            target_language=get_language_name(target),
            text=clean_text,
        )
        translated = (await self.text_provider.generate(prompt)).strip()
        if not translated:
            raise ProviderError(
                "Translation returned empty text",
                provider=self.text_provider.name,
                retryable=False,
            )
        logger.debug("Translated %d chars %s -> %s", len(clean_text), source, target)
        return {"translated_text": translated, "source_language": source, "target_language": target}

    async def scale(self, text: Optional[str], target_level: Optional[str], language: Optional[str] = None) -> Dict[str, Any]:
        clean_text = _require_text(text, "text")
        language_code = _optional_code(language, "language")
        level = (target_level or "").strip().lower()
        if level not in PROFICIENCY_LEVELS:
            raise ValidationError(
                "Invalid target level. Must be beginner, intermediate, or advanced",
                field="targetLevel",
            )

        language_info = (
            f"The text is in {get_language_name(language_code)}."
            if language_code
            else "Detect the language of the text."
        )
        prompt = prompts.SCALE_PROMPT.format(
            language_info=language_info,
            level=level.upper(),
            level_description=LEVEL_DESCRIPTIONS[level],
            text=clean_text,
        )
        raw = await self.text_provider.generate(prompt)
        parsed = try_parse_json(raw)
        if not isinstance(parsed, dict):
            logger.warning("Scale reply was not JSON; returning original text")
            parsed = {}

        changes = parsed.get("changes")
        return {
            "original": clean_text,
            "scaledText": coerce_str(parsed.get("scaledText")) or coerce_str(parsed.get("scaled_text")) or clean_text,
            "targetLevel": level,
            "originalLevel": coerce_str(parsed.get("originalLevel")) or "unknown",
            "wasScaled": bool(parsed.get("wasScaled", False)),
            "changes": changes if isinstance(changes, list) else [],
        }

    async def correct(self, text: Optional[str], feedback_language: Optional[str] = None) -> Dict[str, Any]:
        clean_text = _require_text(text, "text")
        feedback_code = _optional_code(feedback_language, "feedbackLanguage")
        if feedback_code:
            instruction = prompts.FEEDBACK_IN_LANGUAGE.format(language=get_language_name(feedback_code))
        else:
            instruction = prompts.FEEDBACK_IN_INPUT_LANGUAGE

        raw = await self.text_provider.generate(
            prompts.CORRECTION_PROMPT.format(text=clean_text, feedback_instruction=instruction)
        )
        analysis: Dict[str, Any] = {
            "correctedSentence": clean_text,
            "overallScore": 100,
            "issues": [],
            "wordSuggestions": [],
            "praise": "",
            "tip": "",
        }
        parsed = try_parse_json(raw)
        if isinstance(parsed, dict):
            score = parsed.get("overallScore")
            analysis.update(
                correctedSentence=coerce_str(parsed.get("correctedSentence")) or clean_text,
                overallScore=score if isinstance(score, (int, float)) and not isinstance(score, bool) else 100,
                issues=parsed["issues"] if isinstance(parsed.get("issues"), list) else [],
                wordSuggestions=parsed["wordSuggestions"] if isinstance(parsed.get("wordSuggestions"), list) else [],
                praise=coerce_str(parsed.get("praise")) or "",
                tip=coerce_str(parsed.get("tip")) or "",
            )
        else:
            logger.warning("Correction reply was not JSON")
            analysis["praise"] = UNPARSABLE_CORRECTION_PRAISE

        return {"original": clean_text, "analysis": analysis}

    async def alternatives(self, text: Optional[str], context: Optional[str] = None) -> Dict[str, Any]:
        """Return ``ALTERNATIVES_COUNT`` rewrites of ``text`` in its own language.

        A reply that is not a JSON array is split into lines with list
        markers stripped; missing entries are padded with the original.
        """

        clean_text = _require_text(text, "text")
        clean_context = (context or "").strip()
        if len(clean_context) > MAX_CONTEXT_INPUT_CHARS:
            raise PayloadTooLargeError(
                f"context exceeds {MAX_CONTEXT_INPUT_CHARS} characters",
                field="context",
                limit=MAX_CONTEXT_INPUT_CHARS,
            )

        raw = await self.text_provider.generate(
            prompts.ALTERNATIVES_PROMPT.format(
                context_info=f"Context: {clean_context}\n" if clean_context else "",
                text=clean_text,
            )
        )
        parsed = try_parse_json_list(raw)
        if parsed is None:
            logger.warning("Alternatives reply was not a JSON array; splitting lines")
            candidates = [_LIST_MARKER.sub("", line).strip() for line in (raw or "").splitlines()]
        else:
            candidates = [item.strip() for item in parsed if isinstance(item, str)]

        options = [candidate for candidate in candidates if candidate][:ALTERNATIVES_COUNT]
        options.extend([clean_text] * (ALTERNATIVES_COUNT - len(options)))
        return {"original": clean_text, "alternatives": options}

    async def translate_with_alternatives(self, text: Optional[str], target_language: Optional[str]) -> Dict[str, Any]:
        clean_text = _require_text(text, "text")
        target = _optional_code(target_language, "targetLanguage")
        if not target:
            raise ValidationError("Missing required field: targetLanguage", field="targetLanguage")

        raw = (
            await self.text_provider.generate(
                prompts.TRANSLATE_WITH_ALTERNATIVES_PROMPT.format(
                    target_language=get_language_name(target),
                    text=clean_text,
                )
            )
        ).strip()
        parsed = try_parse_json(raw)
        if isinstance(parsed, dict):
            translations = {style: coerce_str(parsed.get(style)) or "" for style in TRANSLATION_STYLES}
        else:
            # Unstructured reply: use it for every style
            logger.warning("Translation alternatives reply was not JSON")
            translations = dict.fromkeys(TRANSLATION_STYLES, raw)

        return {"original": clean_text, "targetLanguage": target, "translations": translations}

    async def transcribe(
        self,
        audio: bytes,
        *,
        mime_type: Optional[str] = None,
        filename: Optional[str] = None,
    ) -> Dict[str, Optional[str]]:
        if not audio:
            raise ValidationError("Missing audio file", field="audio")
        if len(audio) > MAX_AUDIO_INPUT_BYTES:
            raise PayloadTooLargeError(
                f"audio exceeds {MAX_AUDIO_INPUT_BYTES} bytes",
                field="audio",
                limit=MAX_AUDIO_INPUT_BYTES,
            )

        result = await self.audio_provider.transcribe(
            SpeechProviderRequest(
                file_bytes=audio,
                mime_type=mime_type or DEFAULT_AUDIO_MIME_TYPE,
                filename=filename,
            )
        )
        return {"text": result.text, "language": result.language}


__all__ = ["TRANSLATION_STYLES", "TextTransformationService", "UNPARSABLE_CORRECTION_PRAISE"]

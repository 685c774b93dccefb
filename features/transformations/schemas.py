"""Pydantic schemas for the text transformation endpoints."""

from __future__ import annotations

from typing import Any, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class TranslateRequest(BaseModel):
    text: str = Field("", description="Text to translate")
    source_lang: str = Field("", description="Language code of the input text")
    target_lang: str = Field("", description="Language code to translate into")


class TranslateResponse(BaseModel):
    translated_text: str
    source_language: str
    target_language: str


class ScaleRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    text: str = Field("", description="Text to rewrite")
    target_level: str = Field("", alias="targetLevel", description="beginner, intermediate or advanced")
    language: Optional[str] = Field(None, description="Language of the text; detected when omitted")


class ScaleResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    original: str
    scaled_text: str = Field(..., alias="scaledText")
    target_level: str = Field(..., alias="targetLevel")
    original_level: str = Field("unknown", alias="originalLevel")
    was_scaled: bool = Field(False, alias="wasScaled")
    changes: List[Any] = Field(default_factory=list)


class CorrectionRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    text: str = Field("", description="Sentence to analyse")
    feedback_language: Optional[str] = Field(
        None,
        alias="feedbackLanguage",
        description="Language code for explanations; defaults to the input language",
    )


class CorrectionAnalysis(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    corrected_sentence: str = Field(..., alias="correctedSentence")
    overall_score: float = Field(100, alias="overallScore")
    issues: List[Any] = Field(default_factory=list)
    word_suggestions: List[Any] = Field(default_factory=list, alias="wordSuggestions")
    praise: str = ""
    tip: str = ""


class CorrectionResponse(BaseModel):
    original: str
    analysis: CorrectionAnalysis


class AlternativesRequest(BaseModel):
    text: str = Field("", description="Sentence to rephrase")
    context: Optional[str] = Field(None, description="Surrounding conversation, used only as a hint")


class AlternativesResponse(BaseModel):
    original: str
    alternatives: List[str]


class TranslateWithAlternativesRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    text: str = Field("", description="Text to translate")
    target_language: str = Field("", alias="targetLanguage", description="Language code to translate into")


class TranslationAlternatives(BaseModel):
    direct: str = ""
    formal: str = ""
    casual: str = ""


class TranslateWithAlternativesResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    original: str
    target_language: str = Field(..., alias="targetLanguage")
    translations: TranslationAlternatives


class TranscriptionResponse(BaseModel):

    text: str
    language: Optional[str] = None


class MessageTransformationRequest(BaseModel):
    """Ask for a message's translation or scaled text for the calling viewer."""

    model_config = ConfigDict(populate_by_name=True)

    message_id: str = Field(..., alias="messageId")
    kind: Literal["translation", "scaling"] = "translation"
    target_language: str = Field(..., alias="targetLanguage")
    target_proficiency: Optional[str] = Field(None, alias="targetProficiency")


class MessageTransformationResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message_id: str = Field(..., alias="messageId")
    status: str
    text: Optional[str] = None


__all__ = [
    "AlternativesRequest",
    "AlternativesResponse",
    "CorrectionAnalysis",
    "CorrectionRequest",
    "CorrectionResponse",
    "MessageTransformationRequest",
    "MessageTransformationResponse",
    "ScaleRequest",
    "ScaleResponse",
    "TranscriptionResponse",
    "TranslateWithAlternativesRequest",
    "TranslateWithAlternativesResponse",
    "TranslationAlternatives",
    "TranslateRequest",
    "TranslateResponse",
]

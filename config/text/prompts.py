"""Prompts for text transformations.

Edit these to customize AI behavior when translating, scaling or correcting
chat messages.
"""

from __future__ import annotations


TRANSLATE_PROMPT = """Translate the following text from {source_language} to {target_language}.
Return only the translated text without any explanations, prefixes, or additional text.

Original text ({source_language}): {text}

Translation ({target_language}):"""


SCALE_PROMPT = """You are a language complexity scaler for language learners. Your task is to rewrite the given text to match a specific proficiency level while preserving the EXACT meaning, tone, and intent.

{language_info}

Target proficiency level: {level}
Level description: {level_description}

Original text: "{text}"

IMPORTANT RULES:
1. Preserve the EXACT meaning - do not add, remove, or change any information
2. Keep the same tone (formal/informal, friendly/professional)
3. Keep the same intent and emotional context
4. Respond in the SAME language as the input text
5. If the text is already at the target level, return it unchanged or with minimal adjustments
6. For beginner level: break complex sentences into shorter ones, replace difficult words with simpler synonyms
7. For intermediate level: balance complexity, use common idiomatic expressions
8. For advanced level: use more sophisticated vocabulary and complex structures where natural

Return ONLY a JSON object with these fields:
{{
  "scaledText": "the rewritten text at target level",
  "originalLevel": "beginner|intermediate|advanced (estimated level of original)",
  "wasScaled": true/false (whether significant changes were made),
  "changes": ["brief description of key changes made, or empty array if no changes"]
}}

Return ONLY the JSON object, no additional text or explanation."""


CORRECTION_PROMPT = """You are an expert language teacher analyzing a student's sentence. Analyze the following text and provide detailed corrections and suggestions.

Input text: "{text}"

IMPORTANT: {feedback_instruction}
The correction should improve the original text while staying in the same language as the input.

Analyze the text and return a JSON object with this EXACT structure:
{{
  "correctedSentence": "The fully corrected version of the sentence",
  "overallScore": 85,
  "issues": [
    {{
      "type": "grammar|spelling|word_choice|punctuation|style",
      "original": "the incorrect word/phrase",
      "correction": "the corrected version",
      "explanation": "Brief explanation of why this is wrong and how to fix it",
      "position": "beginning|middle|end of sentence"
    }}
  ],
  "wordSuggestions": [
    {{
      "original": "a word that could be improved",
      "alternatives": ["better option 1", "better option 2"],
      "reason": "Why these alternatives might be better"
    }}
  ],
  "praise": "What the student did well (if anything)",
  "tip": "One helpful tip for improvement"
}}

Rules:
1. Detect the language automatically and analyze in that language
2. Do not translate to a different language; keep correctedSentence in the input language
3. If the sentence is perfect, return empty issues array and high score
4. Score from 0-100 based on correctness
5. Be encouraging but honest
6. Focus on the most important issues (max 5)
7. Suggest word alternatives even if grammar is correct (for vocabulary building)
8. Return ONLY valid JSON, no markdown or explanations outside the JSON"""


ALTERNATIVES_PROMPT = """You are a helpful writing assistant. Given the following sentence, provide exactly 3 alternative ways to express the same idea:
1. More polished and professional
2. More casual and friendly
3. More concise and clear

{context_info}Original sentence: "{text}"

IMPORTANT:
- Respond in the SAME language as the original sentence
- Return ONLY a JSON array with exactly 3 strings, no explanations or additional text
- Format: ["alternative 1", "alternative 2", "alternative 3"]"""


TRANSLATE_WITH_ALTERNATIVES_PROMPT = """You are a professional translator. Translate the following text to {target_language} and provide alternatives.

Original text: "{text}"

Provide exactly 3 translations:
1. Direct translation - accurate and natural
2. Formal version - more polished and professional tone
3. Casual version - more friendly and conversational tone

IMPORTANT:
- Translate to {target_language}
- Return ONLY a JSON object with this exact format, no explanations:
{{"direct": "translation 1", "formal": "translation 2", "casual": "translation 3"}}"""


FEEDBACK_IN_LANGUAGE = "Write ALL your feedback, explanations, praise, and tips in {language}."
FEEDBACK_IN_INPUT_LANGUAGE = (
    "Write your feedback, explanations, praise, and tips in the same language as the input text."
)


__all__ = [
    "ALTERNATIVES_PROMPT",
    "CORRECTION_PROMPT",
    "FEEDBACK_IN_INPUT_LANGUAGE",
    "FEEDBACK_IN_LANGUAGE",
    "SCALE_PROMPT",
    "TRANSLATE_PROMPT",
    "TRANSLATE_WITH_ALTERNATIVES_PROMPT",
]

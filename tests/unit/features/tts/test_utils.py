import math

import pytest

from features.tts.utils import normalize_rate, pick_voice


@pytest.mark.parametrize(
    ("language", "requested", "expected"),
    [
        ("es", None, "es-ES-ElviraNeural"),
        ("fr", "fr-FR-HenriNeural", "fr-FR-HenriNeural"),
        ("en", "  ", "en-US-AriaNeural"),
        ("pt-BR", None, "pt-BR-FranciscaNeural"),
        ("de_AT", None, "de-DE-KatjaNeural"),
        ("xx", None, "en-US-AriaNeural"),
        (None, None, "en-US-AriaNeural"),
    ],
)
def test_pick_voice(language, requested, expected):
    assert pick_voice(language, requested) == expected


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (None, "+0%"),
        (0, "+0%"),
        (20, "+20%"),
        (-15, "-15%"),
        (2.5, "+3%"),
        (-2.5, "-2%"),
        (80, "+50%"),
        (-120, "-50%"),
        ("12", "+12%"),
        ("fast", "+0%"),
        (True, "+0%"),
        (math.nan, "+0%"),
        (math.inf, "+0%"),
    ],
)
def test_normalize_rate(value, expected):
    assert normalize_rate(value) == expected

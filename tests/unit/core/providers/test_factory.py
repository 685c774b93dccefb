import pytest

import core.providers  # noqa: F401  (registers providers)
from core.exceptions import ConfigurationError
from core.providers import factory
from core.providers.audio import GeminiSpeechProvider
from core.providers.text import GeminiTextProvider
from core.providers.tts import EdgeTTSProvider


@pytest.fixture(autouse=True)
def _reset_cache(monkeypatch):
    monkeypatch.setattr("core.clients.ai.get_gemini_clients", lambda: [])
    factory.reset_provider_cache()
    yield
    factory.reset_provider_cache()


def test_default_providers_resolve():
    assert isinstance(factory.get_text_provider(), GeminiTextProvider)
    assert isinstance(factory.get_audio_provider(), GeminiSpeechProvider)
    assert isinstance(factory.get_tts_provider(), EdgeTTSProvider)


def test_instances_are_shared_per_name():
    assert factory.get_tts_provider("edge") is factory.get_tts_provider()


def test_unknown_provider_is_a_configuration_error():
    with pytest.raises(ConfigurationError) as excinfo:
        factory.get_text_provider("nope")

    assert excinfo.value.key == "text_provider"

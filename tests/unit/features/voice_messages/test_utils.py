import pytest

from features.voice_messages.utils import build_final_audio_path, content_hash, guess_audio_mime_type


def test_final_audio_path_is_stable_for_the_same_text():
    first = build_final_audio_path("msg-1", "alice", "bruno", "Hola")
    second = build_final_audio_path("msg-1", "alice", "bruno", "Hola")
    changed = build_final_audio_path("msg-1", "alice", "bruno", "Hola!")

    assert first == second == f"alice/msg-1/tts-bruno-{content_hash('Hola')}.mp3"
    assert first != changed
    assert len(content_hash("Hola")) == 12


@pytest.mark.parametrize(
    ("path", "expected"),
    [
        ("alice/msg-1/original.webm", "audio/webm"),
        ("alice/msg-1/original.M4A", "audio/mp4"),
        ("clip.wav", "audio/wav"),
        ("clip.unknown", "audio/webm"),
        (None, "audio/webm"),
    ],
)
def test_guess_audio_mime_type(path, expected):
    assert guess_audio_mime_type(path) == expected

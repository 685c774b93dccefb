import json

from core.observability import render_payload_preview


def test_preview_redacts_secrets_recursively():
    body = json.dumps({"text": "Hola", "token": "abc", "nested": [{"api_key": "k", "lang": "es"}]}).encode()

    preview = json.loads(render_payload_preview(body, "application/json"))

    assert preview == {"text": "Hola", "token": "***", "nested": [{"api_key": "***", "lang": "es"}]}


def test_preview_summarises_binary_uploads():
    assert render_payload_preview(b"\x00" * 10, "multipart/form-data; boundary=x") == (
        "<multipart/form-data; boundary=x 10 bytes>"
    )
    assert render_payload_preview(b"", "application/json") == "<empty>"


def test_preview_truncates_long_json():
    body = json.dumps({"text": "a" * 5000}).encode()

    preview = render_payload_preview(body, "application/json")

    assert preview.endswith(f"... ({len(body)} bytes)")


def test_preview_flags_invalid_json():
    assert render_payload_preview(b"{nope", "application/json") == "<invalid json 5 bytes>"

from typing import Iterator

import pytest
from httpx import ASGITransport, AsyncClient

from core.exceptions import ConfigurationError
from features.transformations.dependencies import get_transformation_service
from main import app

pytestmark = pytest.mark.anyio


@pytest.fixture(autouse=True)
def reset_dependency_overrides() -> Iterator[None]:
    try:
        yield
    finally:
        app.dependency_overrides.clear()


async def test_health_reports_queue_state() -> None:
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        response = await client.get("/health")

    assert response.status_code == 200
    payload = response.json()
    assert payload["status"] == "healthy"
    assert payload["queuedTransformations"] == 0
    assert isinstance(payload["online"], bool)


async def test_unconfigured_dependency_returns_envelope() -> None:
    def _missing_keys():
        raise ConfigurationError("Gemini API keys are not configured", key="GEMINI_API_KEYS")

    app.dependency_overrides[get_transformation_service] = _missing_keys

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        response = await client.post("/api/v1/translate", json={"text": "Hi", "source_lang": "en", "target_lang": "es"})

    assert response.status_code == 500
    payload = response.json()
    assert payload["success"] is False
    assert payload["data"] == {
        "error": "configuration_error",
        "message": "Gemini API keys are not configured",
        "context": {"key": "GEMINI_API_KEYS"},
    }

"""Tests for AWS client initialisation."""

import pytest

from infrastructure.aws import clients


@pytest.fixture(autouse=True)
def _clear_clients():
    clients.aws_clients.clear()
    yield
    clients.aws_clients.clear()


def test_s3_client_is_none_without_credentials(monkeypatch):
    monkeypatch.setattr(clients, "AWS_ACCESS_KEY_ID", "")
    monkeypatch.setattr(clients, "AWS_SECRET_ACCESS_KEY", "")

    assert clients.get_s3_client() is None
    assert clients.aws_clients == {}


def test_s3_client_is_built_once_with_credentials(monkeypatch):
    built = []

    def fake_client(service_name, **kwargs):
        built.append((service_name, kwargs))
        return object()

    monkeypatch.setattr(clients, "AWS_ACCESS_KEY_ID", "id")
    monkeypatch.setattr(clients, "AWS_SECRET_ACCESS_KEY", "secret")
    monkeypatch.setattr(clients.boto3, "client", fake_client)

    first = clients.get_s3_client()
    second = clients.get_s3_client()

    assert first is second
    assert [name for name, _ in built] == ["s3"]
    assert built[0][1]["aws_access_key_id"] == "id"

"""Shared fixtures: isolated configuration and a fake provider endpoint."""

from __future__ import annotations

import pytest

from studio import images, provider_client


class FakeResponse:
    """Minimal stand-in for requests.Response."""

    def __init__(self, status_code: int = 200, payload=None, text: str | None = None) -> None:
        self.status_code = status_code
        self._payload = payload
        self.text = text if text is not None else ("" if payload is None else str(payload))

    def json(self):
        if self._payload is None:
            raise ValueError("No JSON object could be decoded")
        return self._payload


class FakeProvider:
    """Captures outbound calls and replies with a configurable response."""

    def __init__(self) -> None:
        self.calls: list[dict] = []
        self.response = FakeResponse(payload={
            "choices": [{"message": {"content": "Done: https://cdn.example.com/img/out.png"}}],
        })
        self.error: Exception | None = None

    def post(self, url, headers=None, json=None, timeout=None):
        self.calls.append({"url": url, "headers": headers, "json": json, "timeout": timeout})
        if self.error is not None:
            raise self.error
        return self.response


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch, tmp_path):
    """Keep tests away from real settings files and provider credentials."""
    monkeypatch.setattr(provider_client, "SETTINGS_PATHS", [])
    for env_name in provider_client.ENV_KEYS.values():
        monkeypatch.delenv(env_name, raising=False)
    monkeypatch.setenv("IMAGE_API_KEY", "test-key")
    monkeypatch.setenv("IMAGE_API_BASE_URL", "https://provider.test")
    monkeypatch.setenv("HISTORY_PATH", str(tmp_path / "history.json"))
    provider_client.reset_config()
    yield
    provider_client.reset_config()


@pytest.fixture
def provider(monkeypatch):
    fake = FakeProvider()
    monkeypatch.setattr(images.requests, "post", fake.post)
    return fake

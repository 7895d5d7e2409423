"""HTTP surface tests against the FastAPI app with a fake provider."""

import pytest
from fastapi.testclient import TestClient

from backend.main import create_app
from studio.errors import ProviderError
from studio.history import HistoryStore, MemoryBackend


class FakeGenerator:
    def __init__(self, fail_seeds=()) -> None:
        self.fail_seeds = set(fail_seeds)
        self.calls = 0

    def __call__(self, request, timeout=None):
        self.calls += 1
        if request.seed in self.fail_seeds:
            raise ProviderError("No image produced: no image URL found in response")
        return f"https://img.example.com/{request.seed}.png"


@pytest.fixture
def history():
    return HistoryStore(MemoryBackend(), max_entries=100)


@pytest.fixture
def generator():
    return FakeGenerator(fail_seeds={2})


@pytest.fixture
def client(history, generator):
    return TestClient(create_app(history=history, generate=generator))


def test_health(client):
    assert client.get("/api/health").json() == {"status": "ok"}


@pytest.mark.parametrize("body", [{}, {"prompt": ""}, {"prompt": "  "}, {"width": 512}])
def test_generate_requires_prompt(client, generator, body):
    response = client.post("/api/generate", json=body)

    assert response.status_code == 400
    assert generator.calls == 0


def test_generate_applies_defaults_and_records_history(client, history):
    response = client.post("/api/generate", json={"prompt": "a fox", "systemPrompt": "Be bold.", "seed": 5})

    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    assert data["imageUrl"] == "https://img.example.com/5.png"
    assert data["prompt"] == "a fox"
    assert data["systemPrompt"] == "Be bold."
    assert data["parameters"] == {
        "width": 1024,
        "height": 1024,
        "guidance_scale": 7.5,
        "num_inference_steps": 50,
        "seed": 5,
    }
    assert data["timestamp"]
    assert history.list()[0].id == data["id"]


def test_generate_provider_failure_is_500(client, history):
    response = client.post("/api/generate", json={"prompt": "a fox", "seed": 2})

    assert response.status_code == 500
    assert "No image produced" in response.json()["detail"]
    assert history.list() == []


def test_generate_rejects_non_positive_dimensions(client):
    response = client.post("/api/generate", json={"prompt": "a fox", "width": 0})

    assert response.status_code == 422


def test_generate_capability_descriptor(client):
    data = client.get("/api/generate").json()

    assert data["endpoint"] == "/api/generate"
    assert data["methods"] == ["POST"]
    assert data["parameters"]["width"] == "number (default: 1024)"
    assert data["parameters"]["num_inference_steps"] == "number (default: 50)"


def test_batch_isolates_failed_slot(client, history):
    response = client.post("/api/generate/batch", json={"prompt": "a fox", "seed": 1, "count": 3})

    assert response.status_code == 200
    data = response.json()
    assert data["totalCount"] == 3
    assert data["completedCount"] == 2
    assert data["status"] == "partial"
    assert [img["status"] for img in data["images"]] == ["completed", "failed", "completed"]
    assert len(history) == 2


@pytest.mark.parametrize("count", [0, 9])
def test_batch_rejects_bad_count(client, generator, count):
    response = client.post("/api/generate/batch", json={"prompt": "a fox", "count": count})

    assert response.status_code == 400
    assert generator.calls == 0


def test_history_post_requires_prompt_and_image_url(client):
    assert client.post("/api/history", json={"prompt": "a fox"}).status_code == 400
    assert client.post("/api/history", json={"imageUrl": "https://x.example.com/a.png"}).status_code == 400


def test_history_round_trip(client):
    first = client.post("/api/history", json={"prompt": "one", "imageUrl": "https://x.example.com/1.png"}).json()
    second = client.post("/api/history", json={
        "prompt": "two",
        "imageUrl": "https://x.example.com/2.png",
        "settings": {"width": 768, "style": "cinematic"},
    }).json()

    listed = client.get("/api/history").json()
    assert listed["count"] == 2
    assert [e["id"] for e in listed["data"]] == [second["data"]["id"], first["data"]["id"]]
    assert listed["data"][0]["settings"] == {"width": 768, "style": "cinematic"}

    assert client.get(f"/api/history/{first['data']['id']}").json()["data"]["prompt"] == "one"

    deleted = client.delete("/api/history", params={"id": first["data"]["id"]})
    assert deleted.status_code == 200
    assert client.get("/api/history").json()["count"] == 1


def test_history_delete_errors(client):
    assert client.delete("/api/history").status_code == 400
    assert client.delete("/api/history", params={"id": "missing"}).status_code == 404
    assert client.get("/api/history/missing").status_code == 404


def test_history_cap():
    small = HistoryStore(MemoryBackend(), max_entries=3)
    client = TestClient(create_app(history=small, generate=FakeGenerator()))

    for n in range(5):
        client.post("/api/history", json={"prompt": f"p{n}", "imageUrl": f"https://x.example.com/{n}.png"})

    data = client.get("/api/history").json()["data"]
    assert [e["prompt"] for e in data] == ["p4", "p3", "p2"]


def test_history_clear(client):
    client.post("/api/history", json={"prompt": "one", "imageUrl": "https://x.example.com/1.png"})

    assert client.delete("/api/history/all").json()["cleared"] is True
    assert client.get("/api/history").json() == {"success": True, "data": [], "count": 0}


def test_presets(client):
    styles = client.get("/api/styles").json()["styles"]
    resolutions = client.get("/api/resolutions").json()["resolutions"]

    assert any(s["id"] == "cinematic" for s in styles)
    assert {"label": "Square", "width": 1024, "height": 1024, "aspect_ratio": "1:1"} in resolutions


def test_generate_accepts_long_prompt_and_reports_requested_style(client):
    response = client.post("/api/generate", json={"prompt": "a fox " * 500, "style": "cinematic", "seed": 1})

    assert response.status_code == 200
    assert response.json()["parameters"]["style"] == "cinematic"

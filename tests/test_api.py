"""Tests for the HTTP API."""

from fastapi.testclient import TestClient

from manga_strip.api.app import create_app
from manga_strip.services.fallback import NIGHT_SCENE_URL
from tests.conftest import FakeExportSink, RecordingKeyValueStore


def test_health(container) -> None:
    client = TestClient(create_app(container))

    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_full_frame_flow(container, key_value_store: RecordingKeyValueStore) -> None:
    client = TestClient(create_app(container))

    created = client.post("/projects", json={"name": "Alpha"})
    assert created.status_code == 201
    project_id = created.json()["id"]

    generated = client.post(
        "/session/generate", json={"description": "a ninja in the moonlight"}
    )
    assert generated.status_code == 200
    body = generated.json()
    assert body["state"] == "draft_ready"
    assert body["draft"]["image_url"] == NIGHT_SCENE_URL
    assert body["ai_enabled"] is False

    finalized = client.post("/session/finalize")
    assert finalized.status_code == 200
    assert finalized.json()["order"] == 1
    assert finalized.json()["is_finalized"] is True

    session = client.get("/session").json()
    assert session["project"]["id"] == project_id
    assert session["style"]["source"] == "first_frame"
    assert key_value_store.writes == 2


def test_noop_actions_return_conflict(container) -> None:
    client = TestClient(create_app(container))

    assert client.post("/projects", json={"name": "  "}).status_code == 409
    assert (
        client.post("/session/generate", json={"description": "a ninja"}).status_code
        == 409
    )
    assert client.post("/session/finalize").status_code == 409


def test_reference_upload_and_manual_style(container) -> None:
    client = TestClient(create_app(container))

    uploaded = client.post(
        "/session/reference",
        content=b"\x89PNG\r\n\x1a\nimage",
        headers={"Content-Type": "image/png"},
    )
    assert uploaded.status_code == 200
    assert uploaded.json()["source"] == "reference_image"
    assert uploaded.json()["has_reference_image"] is True

    manual = client.put(
        "/session/style",
        json={"style_text": "ink wash", "character_text": "a ronin"},
    )
    assert manual.json()["source"] == "manual"

    reset = client.delete("/session/style")
    assert reset.json()["style"] is None


def test_delete_frame_and_project(container) -> None:
    client = TestClient(create_app(container))
    project_id = client.post("/projects", json={"name": "Alpha"}).json()["id"]
    client.post("/session/generate", json={"description": "a forest"})
    frame_id = client.post("/session/finalize").json()["id"]

    deleted = client.delete(f"/session/frames/{frame_id}")
    assert deleted.status_code == 200
    assert deleted.json()["project"]["frames"] == []

    assert client.delete(f"/projects/{project_id}").status_code == 200
    assert client.get("/projects").json() == {"projects": []}
    assert client.get("/session").json()["state"] == "no_project"


def test_export_and_model_switch(container, export_sink: FakeExportSink) -> None:
    client = TestClient(create_app(container))
    client.post("/projects", json={"name": "Alpha"})

    switched = client.put("/session/model", json={"model": "dall-e-3"})
    assert switched.json()["model"] == "dall-e-3"

    draft = client.post("/session/generate", json={"description": "a city"}).json()
    exported = client.post(f"/session/frames/{draft['draft']['id']}/export")

    assert exported.json() == {"uploaded": True}
    assert export_sink.uploads[0]["file_name"] == "frame-1.jpg"

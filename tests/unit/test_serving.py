"""Unit tests for the serving layer."""

from __future__ import annotations

import base64

import pytest
from fastapi.testclient import TestClient

from docrag.serving.app import create_app
from docrag.session.manager import SessionManager


@pytest.fixture()
def client(embedding_client, generator) -> TestClient:
    manager = SessionManager(embedding_client=embedding_client, generation_client=generator)
    return TestClient(create_app(manager))


def _new_session(client: TestClient) -> str:
    response = client.post("/sessions")
    assert response.status_code == 201
    return response.json()["session_id"]


def _upload(client: TestClient, session_id: str, text: str, *, name: str = "pets.txt", content_type: str = "text/plain"):
    return client.post(
        f"/sessions/{session_id}/document",
        files={"file": (name, text.encode(), content_type)},
    )


def test_health_endpoint(client: TestClient) -> None:
    """GET /health should return 200 with status ok."""
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_new_session_is_empty(client: TestClient) -> None:
    session_id = _new_session(client)
    body = client.get(f"/sessions/{session_id}").json()
    assert body["status"] == "empty"
    assert body["messages"] == []


def test_upload_then_query(client: TestClient, cats_and_dogs: str, generator) -> None:
    session_id = _new_session(client)

    upload = _upload(client, session_id, cats_and_dogs)
    assert upload.status_code == 200
    assert upload.json()["status"] == "ready"
    assert upload.json()["chunk_count"] == 3

    response = client.post(f"/sessions/{session_id}/query", json={"question": "Tell me about cats", "k": 2})
    assert response.status_code == 200
    body = response.json()
    assert body["message"] == {"role": "model", "text": generator.reply, "image": None, "is_error": False}
    assert body["sources"] == [0, 2]

    transcript = client.get(f"/sessions/{session_id}").json()["messages"]
    assert [m["role"] for m in transcript] == ["model", "user", "model"]


def test_unsupported_file_type(client: TestClient) -> None:
    session_id = _new_session(client)
    response = _upload(client, session_id, "%PDF-1.7", name="paper.pdf", content_type="application/pdf")
    assert response.status_code == 415
    assert client.get(f"/sessions/{session_id}").json()["status"] == "empty"


def test_empty_document(client: TestClient) -> None:
    session_id = _new_session(client)
    response = _upload(client, session_id, "tiny\n\nbits")
    assert response.status_code == 422
    assert client.get(f"/sessions/{session_id}").json()["status"] == "failed"


def test_query_before_upload_conflicts(client: TestClient) -> None:
    session_id = _new_session(client)
    response = client.post(f"/sessions/{session_id}/query", json={"question": "Anything?"})
    assert response.status_code == 409


def test_blank_question(client: TestClient, cats_and_dogs: str) -> None:
    session_id = _new_session(client)
    _upload(client, session_id, cats_and_dogs)
    response = client.post(f"/sessions/{session_id}/query", json={"question": "  "})
    assert response.status_code == 422


def test_embedding_failure_on_upload(make_embedding_client, generator, cats_and_dogs: str) -> None:
    manager = SessionManager(embedding_client=make_embedding_client(fail_on="dogs"), generation_client=generator)
    client = TestClient(create_app(manager))
    session_id = _new_session(client)
    assert _upload(client, session_id, cats_and_dogs).status_code == 502


def test_unknown_session(client: TestClient) -> None:
    assert client.get("/sessions/does-not-exist").status_code == 404


def test_delete_session(client: TestClient) -> None:
    session_id = _new_session(client)
    assert client.delete(f"/sessions/{session_id}").status_code == 204
    assert client.get(f"/sessions/{session_id}").status_code == 404


def test_sessions_are_isolated(client: TestClient, cats_and_dogs: str) -> None:
    first = _new_session(client)
    second = _new_session(client)
    _upload(client, first, cats_and_dogs)
    assert client.get(f"/sessions/{second}").json()["chunk_count"] == 0


def test_generate_text(client: TestClient, generator) -> None:
    response = client.post("/generate", json={"prompt": "Say hi"})
    assert response.status_code == 200
    assert response.json() == {"text": generator.reply}


def test_generate_with_data_url_image(client: TestClient, generator) -> None:
    data_url = "data:image/png;base64," + base64.b64encode(b"\x89PNG").decode()
    response = client.post("/generate", json={"prompt": "Describe", "image_base64": data_url})
    assert response.status_code == 200
    assert response.json()["text"] == f"{generator.reply} (image/png, 4 bytes)"


def test_generate_raw_base64_needs_mime_type(client: TestClient) -> None:
    response = client.post("/generate", json={"prompt": "Describe", "image_base64": "aGk="})
    assert response.status_code == 422


def test_generate_failure(embedding_client, make_generator) -> None:
    manager = SessionManager(embedding_client=embedding_client, generation_client=make_generator(fail=True))
    client = TestClient(create_app(manager))
    assert client.post("/generate", json={"prompt": "Say hi"}).status_code == 502

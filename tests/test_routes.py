import pytest
from fastapi.testclient import TestClient

from app.chat import INVALID_QUESTION_MESSAGE, MISSING_CONFIG_MESSAGE, SERVER_ERROR_MESSAGE
from app.main import create_app
from conftest import FakeGeminiClient, make_settings

HEADERS = {"X-Requested-With": "XMLHttpRequest"}


def test_ask_returns_answer(client, fake_client):
    response = client.post("/api/ask", json={"question": "Oi"}, headers=HEADERS)

    assert response.status_code == 200
    assert response.json() == {"answer": "Hello"}
    assert fake_client.calls[0]["question"] == "Oi"


@pytest.mark.parametrize("headers", [{}, {"X-Requested-With": ""}])
def test_post_without_requested_with_header_is_forbidden(client, fake_client, headers):
    response = client.post("/api/ask", json={"question": "Oi"}, headers=headers)

    assert response.status_code == 403
    assert response.json() == {"error": "Forbidden: Missing required header"}
    assert fake_client.calls == []


@pytest.mark.parametrize("body", [{"question": 123}, ["x"], {}])
def test_missing_header_is_checked_before_body_validation(client, fake_client, body):
    response = client.post("/api/ask", json=body)

    assert response.status_code == 403
    assert response.json() == {"error": "Forbidden: Missing required header"}
    assert fake_client.calls == []


@pytest.mark.parametrize("body", [
    {},
    {"question": ""},
    {"question": None},
    {"question": 123},
    {"question": ["Oi"]},
    {"pergunta": "Oi"},
    ["Oi"],
    "Oi",
])
def test_invalid_body_returns_400(client, fake_client, body):
    response = client.post("/api/ask", json=body, headers=HEADERS)

    assert response.status_code == 400
    assert response.json() == {"error": INVALID_QUESTION_MESSAGE}
    assert fake_client.calls == []


def test_malformed_json_returns_400(client, fake_client):
    response = client.post(
        "/api/ask",
        content=b"{question: ",
        headers={**HEADERS, "Content-Type": "application/json"},
    )

    assert response.status_code == 400
    assert "error" in response.json()
    assert fake_client.calls == []


def test_missing_configuration_returns_500():
    fake = FakeGeminiClient()
    client = TestClient(create_app(make_settings(gemini_api_key=None), fake))

    response = client.post("/api/ask", json={"question": "Oi"}, headers=HEADERS)

    assert response.status_code == 500
    assert response.json() == {"error": MISSING_CONFIG_MESSAGE}
    assert fake.calls == []


def test_missing_candidates_returns_placeholder():
    client = TestClient(create_app(make_settings(), FakeGeminiClient(payload={})))

    response = client.post("/api/ask", json={"question": "Oi"}, headers=HEADERS)

    assert response.status_code == 200
    assert response.json() == {"answer": "No answer"}


def test_upstream_429_is_propagated():
    client = TestClient(create_app(make_settings(), FakeGeminiClient(status=429, body="quota")))

    response = client.post("/api/ask", json={"question": "Oi"}, headers=HEADERS)

    assert response.status_code == 429
    assert "429" in response.json()["error"]
    assert "quota" not in response.json()["error"]


def test_unexpected_error_returns_generic_500():
    client = TestClient(create_app(make_settings(), FakeGeminiClient(error=RuntimeError("detalle interno"))))

    response = client.post("/api/ask", json={"question": "Oi"}, headers=HEADERS)

    assert response.status_code == 500
    assert response.json() == {"error": SERVER_ERROR_MESSAGE}
    assert "detalle interno" not in response.text


def test_get_on_ask_does_not_reach_handler(client, fake_client):
    # Los GET sin ruta propia caen en los archivos estáticos
    response = client.get("/api/ask")

    assert response.status_code == 404
    assert fake_client.calls == []

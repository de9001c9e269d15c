import json

import pytest
from fastapi.testclient import TestClient

from app.config import Settings
from app.main import create_app
from app.services.gemini import UpstreamResponse

API_URL = "https://generativelanguage.example.com/v1beta/models/gemini:generateContent"
API_KEY = "test-key"


class FakeGeminiClient:
    """Reemplaza al cliente real; guarda las llamadas y devuelve una respuesta fija"""

    def __init__(self, status=200, payload=None, body=None, error=None):
        self.status = status
        self.body = body if body is not None else json.dumps(payload if payload is not None else {})
        self.error = error
        self.calls = []

    async def generate_content(self, api_url, api_key, question):
        self.calls.append({"api_url": api_url, "api_key": api_key, "question": question})
        if self.error:
            raise self.error
        return UpstreamResponse(status=self.status, body=self.body)


def hello_payload(text="Hello"):
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


def make_settings(**overrides):
    values = {
        "gemini_api_key": API_KEY,
        "gemini_api_url": API_URL,
        "log_file": None,
    }
    values.update(overrides)
    return Settings(**values)


@pytest.fixture
def fake_client():
    return FakeGeminiClient(payload=hello_payload())


@pytest.fixture
def settings():
    return make_settings()


@pytest.fixture
def client(settings, fake_client):
    return TestClient(create_app(settings, fake_client))

import io

import fitz  # PyMuPDF
import pytest
from fastapi.testclient import TestClient
from PIL import Image

from studybuddy.core.config import settings
from studybuddy.main import app
from studybuddy.services import gemini_service


class FakeGemini:
    """Stands in for the two provider calls; replies are consumed in order."""

    def __init__(self):
        self.replies = []
        self.calls = []
        self.chat_calls = []

    def queue(self, *replies):
        self.replies.extend(replies)
        return self

    def _next(self):
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply

    async def call(self, contents, json_mode=False):
        self.calls.append({"contents": contents, "json_mode": json_mode})
        return self._next()

    async def chat(self, history, parts, system_instruction):
        self.chat_calls.append(
            {"history": history, "parts": parts, "system_instruction": system_instruction}
        )
        return self._next()


@pytest.fixture
def fake_gemini(monkeypatch):
    fake = FakeGemini()
    monkeypatch.setattr(gemini_service, "_call_gemini", fake.call)
    monkeypatch.setattr(gemini_service, "_call_gemini_chat", fake.chat)
    return fake


@pytest.fixture
def state_file(tmp_path, monkeypatch):
    path = tmp_path / "state.json"
    monkeypatch.setattr(settings, "STATE_FILE", str(path))
    return path


@pytest.fixture
def client(state_file):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def onboarded_client(client):
    response = client.post(
        "/api/v1/profile/onboard",
        json={"name": "Asha", "grade": "Class 10", "targetExam": "NEET"},
    )
    assert response.status_code == 200
    return client


@pytest.fixture
def pdf_bytes():
    doc = fitz.open()
    page = doc.new_page()
    page.insert_text((50, 50), "Photosynthesis turns light into chemical energy.")
    data = doc.tobytes()
    doc.close()
    return data


@pytest.fixture
def png_bytes():
    buf = io.BytesIO()
    Image.new("RGB", (120, 80), color="white").save(buf, format="PNG")
    return buf.getvalue()

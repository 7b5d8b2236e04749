import asyncio
import json
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient

import main
from services import generation
from services.sessions import SessionStore, get_store


class FakeCompletions:
    """Stands in for `client.chat.completions`; replies come from a queue."""

    def __init__(self, replies, delay=0.0):
        self.replies = list(replies)
        self.delay = delay
        self.calls = []

    async def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.delay:
            await asyncio.sleep(self.delay)
        reply = self.replies.pop(0) if self.replies else ""
        if isinstance(reply, Exception):
            raise reply
        return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=reply))])


@pytest.fixture
def fake_model(monkeypatch):
    """Patch the model client. Call with the replies the model should give, in order."""

    def install(*replies, delay=0.0):
        completions = FakeCompletions(replies, delay=delay)
        client = SimpleNamespace(chat=SimpleNamespace(completions=completions))
        monkeypatch.setattr(generation, "get_client", lambda: client)
        return completions

    return install


@pytest.fixture
def store():
    store = SessionStore()
    main.app.dependency_overrides[get_store] = lambda: store
    yield store
    main.app.dependency_overrides.clear()


@pytest.fixture
def client(store):
    return TestClient(main.app)


@pytest.fixture
def model_payload():
    """A reply in the shape the study-materials prompt asks for."""
    return {
        "studyMaterials": {
            "shortNotes": {
                "key_points": ["Photosynthesis turns light into chemical energy"],
                "important_terms": ["Chlorophyll - green pigment that absorbs light"],
                "concepts_explained": ["Light reactions - happen in the thylakoid"],
                "examples": ["Leaves turning toward the sun"],
            },
            "summary": {
                "brief": "Plants make sugar from light.",
                "detailed": "Photosynthesis converts carbon dioxide and water into glucose using light.",
            },
            "flashcards": {
                "basic": [{"front": "What is chlorophyll?", "back": "A green pigment"}],
                "advanced": [{"front": "Why are leaves green?", "back": "Chlorophyll reflects green light"}],
            },
            "quizQuestions": {
                "multipleChoice": [
                    {
                        "question": "Where do light reactions happen?",
                        "options": {"A": "Stroma", "B": "Thylakoid", "C": "Nucleus"},
                        "correctAnswer": "B",
                        "answerExplanation": "They take place in the thylakoid membranes.",
                    }
                ],
                "trueFalse": [
                    {
                        "question": "Photosynthesis releases oxygen.",
                        "correctAnswer": True,
                        "answerExplanation": "Water is split, releasing oxygen.",
                    }
                ],
            },
            "resources": {
                "recommendedCourses": [{"title": "Plant Biology", "url": "https://example.org/plants"}],
                "youtubeLinks": [
                    {
                        "title": "Photosynthesis",
                        "url": "https://youtube.com/watch?v=abc",
                        "channel": "CrashCourse",
                        "duration": "12:45",
                    }
                ],
            },
        }
    }


@pytest.fixture
def model_text(model_payload):
    return json.dumps(model_payload)

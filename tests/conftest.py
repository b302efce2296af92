import pytest
from fastapi.testclient import TestClient

ORG = "org-1"
ORG_HEADERS = {"X-Organization-Id": ORG}


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def submission_limiter(clock):
    from utils.limiter import InMemoryRateLimiter

    return InMemoryRateLimiter(limit=10, window_seconds=15 * 60, clock=clock)


@pytest.fixture
def settings(tmp_path, monkeypatch):
    monkeypatch.setenv("DATABASE_URL", f"sqlite+aiosqlite:///{tmp_path / 'forms.db'}")
    monkeypatch.setenv("ENV", "test")
    monkeypatch.delenv("REDIS_URL", raising=False)
    monkeypatch.delenv("CLIENT_KEY_STRATEGY", raising=False)

    from utils.settings import Settings

    return Settings()


@pytest.fixture
def app(settings, submission_limiter):
    from main import create_app
    from utils.limiter import limiter

    limiter.reset()
    return create_app(settings=settings, submission_limiter=submission_limiter)


@pytest.fixture
def client(app):
    with TestClient(app) as client:
        yield client


def contact_form(**overrides):
    payload = {
        "title": "Contact",
        "fields": [
            {"id": "name", "type": "text", "label": "Name", "required": True},
            {"id": "email", "type": "email", "label": "Email", "required": True},
            {"id": "heading", "type": "title", "label": "About you"},
            {"id": "age", "type": "number", "label": "Age"},
            {"id": "color", "type": "select", "label": "Color", "options": ["red", "blue"]},
        ],
        "settings": {"allowMultipleSubmissions": True},
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def create_form(client):
    def _create(payload=None, headers=None):
        response = client.post("/api/forms", json=payload or contact_form(), headers=headers or ORG_HEADERS)
        assert response.status_code == 201, response.text
        return response.json()

    return _create

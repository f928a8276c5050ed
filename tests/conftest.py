# tests/conftest.py
from datetime import date

import mongomock
import pytest
from botocore.exceptions import ClientError
from fastapi.testclient import TestClient

import app.db.mongodb as mongodb
from app.core.auth import create_access_token, hash_password, ADMIN_USER_ID
from app.core.config import get_settings
from app.main import app
from app.services.email_service import EmailDeliveryError, get_email_service
from app.services.image_storage import ImageStorage, get_image_storage
from app.services.llm_client import get_llm_client
from app.services.mongo_service import TrainerService
from app.services.rate_limiter import InMemoryDailyRateLimiter, get_interview_rate_limiter


class FakeEmailService:
    """Records sent mail; addresses in `fail_for` raise like an SMTP rejection."""

    def __init__(self):
        self.sent = []
        self.fail_for = set()

    def send(self, to_email, subject, html_body):
        if to_email in self.fail_for:
            raise EmailDeliveryError(f"Could not deliver email to {to_email}")
        self.sent.append((to_email, subject))
        return True


class DummyS3Client:
    def __init__(self):
        self.objects = {}
        self.calls = []
        self.fail_put = False
        self.fail_delete = False

    def put_object(self, Bucket, Key, Body, ContentType=None):
        if self.fail_put:
            raise ClientError({"Error": {"Code": "500", "Message": "boom"}}, "PutObject")
        self.calls.append(("put", Key))
        self.objects[Key] = Body
        return {"ETag": '"dummy-etag"'}

    def delete_object(self, Bucket, Key):
        if self.fail_delete:
            raise ClientError({"Error": {"Code": "500", "Message": "boom"}}, "DeleteObject")
        self.calls.append(("delete", Key))
        self.objects.pop(Key, None)
        return {"ResponseMetadata": {"HTTPStatusCode": 204}}


class FakeLLMClient:
    def __init__(self, analysis=None, error=None):
        self.analysis = analysis or {}
        self.error = error
        self.transcripts = []

    def analyze_interview(self, transcript):
        self.transcripts.append(transcript)
        if self.error:
            raise self.error
        return self.analysis


class Clock:
    """Mutable 'today' for the daily limiter."""

    def __init__(self, today):
        self.today = today

    def __call__(self):
        return self.today


@pytest.fixture(autouse=True)
def db(monkeypatch):
    """Every test gets a fresh in-memory MongoDB with the real indexes."""
    monkeypatch.setattr(mongodb, "_client", mongomock.MongoClient())
    monkeypatch.setattr(mongodb, "_db", None)
    mongodb.init_mongo_indexes()
    yield mongodb.get_mongo_db()


@pytest.fixture
def settings():
    return get_settings()


@pytest.fixture
def email_service():
    service = FakeEmailService()
    app.dependency_overrides[get_email_service] = lambda: service
    yield service
    app.dependency_overrides.pop(get_email_service, None)


@pytest.fixture
def s3(monkeypatch, settings):
    monkeypatch.setattr(settings, "s3_bucket", "test-bucket")
    monkeypatch.setattr(settings, "s3_public_base_url", "https://cdn.test")
    dummy = DummyS3Client()
    storage = ImageStorage(client=dummy)
    app.dependency_overrides[get_image_storage] = lambda: storage
    yield dummy
    app.dependency_overrides.pop(get_image_storage, None)


@pytest.fixture
def llm():
    fake = FakeLLMClient(analysis={
        "strengths": "Clear answers",
        "weaknesses": "Rushed the intro",
        "score": 7,
        "feedback": "Slow down"
    })
    app.dependency_overrides[get_llm_client] = lambda: fake
    yield fake
    app.dependency_overrides.pop(get_llm_client, None)


@pytest.fixture
def clock():
    return Clock(date(2026, 3, 10))


@pytest.fixture
def limiter(clock):
    interview_limiter = InMemoryDailyRateLimiter(limit=3, today=clock)
    app.dependency_overrides[get_interview_rate_limiter] = lambda: interview_limiter
    yield interview_limiter
    app.dependency_overrides.pop(get_interview_rate_limiter, None)


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def admin_headers():
    token = create_access_token({"sub": ADMIN_USER_ID, "role": "admin"})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def make_trainer():
    """Insert a trainer and return (document, auth headers)."""

    def _make(name="Trainer", email=None, status="active", password="password123"):
        email = email or f"{name.lower().replace(' ', '.')}@example.com"
        doc = TrainerService().insert(
            name=name,
            email=email,
            password_hash=hash_password(password),
            status=status
        )
        token = create_access_token({"sub": str(doc["_id"]), "role": "trainer"})
        return doc, {"Authorization": f"Bearer {token}"}

    return _make

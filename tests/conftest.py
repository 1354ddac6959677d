"""Pytest configuration and shared fixtures."""

import json
import os
import time
from types import SimpleNamespace
from unittest.mock import AsyncMock

# La configuración se lee al importar la app
os.environ.update({
    "DATABASE_URL": "sqlite://",
    "OPENAI_API_KEY": "test-openai-key",
    "CLOUDINARY_CLOUD_NAME": "test-cloud",
    "CLOUDINARY_API_KEY": "test-key",
    "CLOUDINARY_API_SECRET": "test-secret",
    "SECRET_KEY": "test-jwt-secret",
})

import jwt
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.exceptions import StorageError
from app.core.security import UserContext
from app.db import crud
from app.db.base import Base
from app.db.session import get_db
from app.main import app
from app.modules.document_analysis import analyzer
from app.modules.document_processing import text_extractor
from app.modules.storage.object_store import get_object_store
from app.schemas.llm_responses import AnalysisPayload

SIGNATURE_IMAGE = "data:image/png;base64,iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mNk"

SAMPLE_ANALYSIS = {
    "opportunities": [
        {"title": "Net Zero leadership", "description": "Offer a whole-life carbon plan.", "impact": "high",
         "reference": "London Plan 2021 SI 2"},
    ],
    "risks": [
        {"title": "Tight programme", "description": "Twelve week delivery window.", "severity": "high",
         "mitigation": "Prefabricated components"},
        {"title": "Unclear BREEAM target", "description": "Rating not stated.", "severity": "low"},
    ],
    "recommendations": [
        {"title": "Add carbon statement", "action": "Include an embodied carbon assessment.",
         "regulation": "London Plan SI 2", "priority": 1},
        {"title": "Clarify BREEAM", "action": "Ask the client for the target rating."},
    ],
    "carbonImpact": {
        "scope1": {"assessment": "Diesel plant on site.", "suggestions": ["Use HVO fuel"]},
        "scope2": {"assessment": "Grid electricity for cabins.", "suggestions": []},
        "scope3": {"assessment": "Steel and concrete dominate.", "suggestions": ["Low-carbon concrete"]},
        "overallRating": "good",
    },
    "complianceScore": 72,
    "summary": "A solid tender with clear Net Zero opportunities.",
}


class InMemoryObjectStore:
    """Doble del almacenamiento de objetos para los tests."""

    def __init__(self):
        self.objects = {}
        self.deleted = []
        self.fail_on = set()

    def put(self, path, data):
        if "put" in self.fail_on:
            raise StorageError("Failed to upload file")
        self.objects[path] = data

    def get(self, path):
        if "get" in self.fail_on or path not in self.objects:
            raise StorageError("Failed to download file")
        return self.objects[path]

    def delete(self, paths):
        if "delete" in self.fail_on:
            raise StorageError("Failed to delete files")
        for path in paths:
            self.objects.pop(path, None)
        self.deleted.extend(paths)


def llm_response(content):
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


def fake_openai_client(create):
    return SimpleNamespace(chat=SimpleNamespace(completions=SimpleNamespace(create=create)))


def make_token(user_id, secret="test-jwt-secret", **claims):
    payload = {"sub": user_id, "aud": "authenticated", "exp": int(time.time()) + 3600, **claims}
    return jwt.encode(payload, secret, algorithm="HS256")


def add_document(db, user_id, **overrides):
    data = {
        "file_name": "tender.pdf",
        "file_path": f"{user_id}/1700000000000_tender.pdf",
        "file_size": 1024,
        "mime_type": "application/pdf",
        "status": "pending",
    }
    data.update(overrides)
    return crud.create_document(db, document_data=data, user_id=user_id)


def add_analysis(db, document, payload=None):
    payload = payload or AnalysisPayload.model_validate(SAMPLE_ANALYSIS)
    return crud.create_analysis(db, document.id, document.user_id, payload)


@pytest.fixture
def db_session():
    engine = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)

    # SQLite solo aplica ON DELETE CASCADE con las claves foráneas activadas
    @event.listens_for(engine, "connect")
    def _enable_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    Base.metadata.create_all(bind=engine)
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSession()
    yield session
    session.close()
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def store():
    return InMemoryObjectStore()


@pytest.fixture
def user():
    return UserContext(id="user-1", email="bidder@example.com", access_token="token")


@pytest.fixture
def other_user():
    return UserContext(id="user-2", email="other@example.com", access_token="token-2")


@pytest.fixture
def auth_headers(user):
    return {"Authorization": f"Bearer {make_token(user.id, email=user.email)}"}


@pytest.fixture
def fake_llm(monkeypatch):
    """Sustituye los clientes de OpenAI de extracción y análisis."""
    extraction = AsyncMock(return_value=llm_response("TENDER DOCUMENT\nSection 1: Scope of works"))
    analysis = AsyncMock(return_value=llm_response(json.dumps(SAMPLE_ANALYSIS)))
    monkeypatch.setattr(text_extractor, "client", fake_openai_client(extraction))
    monkeypatch.setattr(analyzer, "client", fake_openai_client(analysis))
    return SimpleNamespace(extraction=extraction, analysis=analysis)


@pytest.fixture
def client(db_session, store):
    """Create FastAPI test client with the in-memory database and object store."""
    app.dependency_overrides[get_db] = lambda: db_session
    app.dependency_overrides[get_object_store] = lambda: store
    yield TestClient(app)
    app.dependency_overrides = {}

"""Test configuration and fixtures."""

import asyncio

import pytest
from fastapi.testclient import TestClient
from mongomock_motor import AsyncMongoMockClient

from jobboard.config import Settings
from jobboard.core.security import Role, TokenService, get_password_hash
from jobboard.main import create_app
from jobboard.services.file_storage import FileStorage
from jobboard.services.job_store import JobStore
from jobboard.services.user_store import UserStore

TEST_SECRET = "test-secret-key-with-at-least-32-characters"
TEST_PASSWORD = "Secret1234!"
MB = 1024 * 1024

PNG = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64
PDF = b"%PDF-1.4\n" + b"0" * 64

JOB = {
    "title": "Backend Engineer",
    "company": "Acme Corp",
    "description": "Build and run our APIs",
    "requirements": "Python, MongoDB",
    "location": "Berlin",
    "salary": "70k",
    "job_type": "Full-time",
    "work_location": "Hybrid",
    "experience_level": "Senior",
    "contact_email": "jobs@acme.example",
}


@pytest.fixture
def mongo_db():
    """Fresh in-memory Motor database per test."""
    return AsyncMongoMockClient()["jobboard_test"]


@pytest.fixture
def test_settings(tmp_path):
    return Settings(
        _env_file=None,
        SECRET_KEY=TEST_SECRET,
        UPLOAD_DIR=str(tmp_path / "uploads"),
        SWEEP_ENABLED=False,
        RATE_LIMIT_ENABLED=False,
        SEED_DATABASE=False,
        LOG_FORMAT="console",
    )


@pytest.fixture
def token_service():
    return TokenService(secret=TEST_SECRET, issuer="jobfinder-app", audience="jobfinder-users")


@pytest.fixture
def storage(tmp_path):
    storage = FileStorage(tmp_path / "uploads")
    storage.ensure_dirs()
    return storage


@pytest.fixture
def user_store(mongo_db):
    return UserStore(mongo_db)


@pytest.fixture
def job_store(mongo_db):
    return JobStore(mongo_db)


@pytest.fixture
def app(test_settings, mongo_db):
    return create_app(test_settings, database=mongo_db)


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


def auth_headers(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def register_user(client, email: str, role: str = "jobseeker", first: str = "Test") -> tuple:
    """Register through the API; returns (token, user)."""
    response = client.post(
        "/api/v1/users",
        json={
            "name": {"first": first, "last": "User"},
            "email": email,
            "password": TEST_PASSWORD,
            "role": role,
        },
    )
    assert response.status_code == 201, response.text
    body = response.json()
    return body["token"], body["user"]


@pytest.fixture
def admin_token(client, mongo_db):
    """An admin inserted straight into the store (admins cannot self-register)."""
    asyncio.run(
        UserStore(mongo_db).create(
            name={"first": "Admin", "last": "User"},
            email="admin@example.com",
            password_hash=get_password_hash(TEST_PASSWORD),
            role=Role.ADMIN,
        )
    )
    response = client.post(
        "/api/v1/users/login",
        json={"email": "admin@example.com", "password": TEST_PASSWORD},
    )
    assert response.status_code == 200, response.text
    return response.json()["token"]


def upload_resume(client, token, data=PDF, filename="cv.pdf", content_type="application/pdf"):
    return client.post(
        "/api/v1/users/profile/resume",
        headers=auth_headers(token),
        files={"resume": (filename, data, content_type)},
    )

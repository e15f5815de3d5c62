import os
import sys
from pathlib import Path

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient


# Ensure `import jobboard.app...` works regardless of where pytest is run from.
PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

# Keep a developer's .env out of the test run (read when jobboard.app.main is imported).
os.environ["DISABLE_DOTENV"] = "1"

TEST_SECRET = "test-secret-key"
PASSWORD = "Testpass123!"


@pytest.fixture()
def settings(tmp_path: Path):
    """
    Settings wired to a temporary SQLite DB and a temporary storage root.
    Stored references resolve against tmp_path; uploads live in tmp_path/uploads.
    """
    from jobboard.app.config import Settings

    return Settings(
        database_url=f"sqlite+pysqlite:///{(tmp_path / 'test.sqlite3').as_posix()}",
        secret_key=TEST_SECRET,
        storage_dir=tmp_path,
        upload_dir=tmp_path / "uploads",
        allow_admin_signup=True,
    )


@pytest.fixture()
def app(settings) -> FastAPI:
    from jobboard.app.database import init_db
    from jobboard.app.main import create_app

    fastapi_app = create_app(settings)
    settings.upload_dir.mkdir(parents=True, exist_ok=True)
    init_db(fastapi_app.state.engine)
    yield fastapi_app
    fastapi_app.state.engine.dispose()


@pytest.fixture()
def client(app: FastAPI) -> TestClient:
    return TestClient(app)


@pytest.fixture()
def db_session(app: FastAPI):
    """
    Direct SQLAlchemy session bound to the same temporary SQLite DB used by the test app.
    """
    db = app.state.session_factory()
    try:
        yield db
    finally:
        db.close()


def signup(client, *, email: str, role: str, name: str = "Test User", password: str = PASSWORD):
    return client.post(
        "/auth/signup",
        json={"email": email, "password": password, "role": role, "name": name},
    )


def auth_headers(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def make_user(client):
    """Sign up a user and return (user_payload, auth headers)."""
    def _make(role: str, email: str | None = None, name: str = "Test User"):
        email = email or f"{role}_{os.urandom(4).hex()}@example.com"
        r = signup(client, email=email, role=role, name=name)
        assert r.status_code == 200, r.text
        data = r.json()
        return data["user"], auth_headers(data["access_token"])
    return _make


JOB_FIELDS = {
    "title": "Backend Engineer",
    "company": "Acme",
    "location": "Remote",
    "salary_range": "100k-120k",
    "description": "Build and run APIs",
    "requirements": ["Python", "SQL"],
}


@pytest.fixture()
def make_job(client):
    def _make(headers: dict, **overrides):
        r = client.post("/jobs", json={**JOB_FIELDS, **overrides}, headers=headers)
        assert r.status_code == 201, r.text
        return r.json()["job"]
    return _make


PDF_BYTES = b"%PDF-1.4\nResume text\n"


@pytest.fixture()
def apply(client):
    def _apply(job_id: int, headers: dict, filename: str = "resume.pdf", content: bytes = PDF_BYTES):
        return client.post(
            f"/applications/{job_id}/apply",
            headers=headers,
            files={"resume": (filename, content, "application/pdf")},
        )
    return _apply

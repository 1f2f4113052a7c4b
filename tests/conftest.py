import os
import shutil
import sys
import tempfile
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

# Ensure predictable environment variables for tests before importing the app.
BASE_DIR = Path(__file__).resolve().parents[1]
TEST_ROOT = Path(tempfile.mkdtemp(prefix="medicine-exchange-tests-"))

if str(BASE_DIR) not in sys.path:
    sys.path.insert(0, str(BASE_DIR))

os.environ["DATA_DIR"] = str(TEST_ROOT / "data")
os.environ["MEDICINE_IMAGES_DIR"] = str(TEST_ROOT / "images")
os.environ["JWT_SECRET"] = "test-secret"
os.environ["PROFESSIONAL_NAME"] = "Dr Test"
os.environ["PROFESSIONAL_PASSWORD"] = "test-password"
os.environ.pop("SEED_PHARMACIST_PHONE", None)

import app.main as main  # noqa: E402  (import after env vars are set)
from app.database import Database, get_db  # noqa: E402
from app.services.image_storage import image_storage  # noqa: E402
from app.services.otp_service import OtpStore, get_otp_store  # noqa: E402

FIXED_CODE = "123456"
PROFESSIONAL_CREDENTIALS = {"name": "Dr Test", "password": "test-password"}


class FakeClock:
    def __init__(self):
        self.now = datetime(2025, 1, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now += timedelta(**kwargs)


@pytest.fixture()
def db(tmp_path):
    database = Database(tmp_path / "data")
    database.create_all()
    return database


@pytest.fixture()
def clock():
    return FakeClock()


@pytest.fixture()
def otp_store(clock):
    return OtpStore(code_factory=lambda: FIXED_CODE, clock=clock)


@pytest.fixture()
def images():
    """The shared image directory, emptied around each test."""
    shutil.rmtree(image_storage.directory, ignore_errors=True)
    image_storage.directory.mkdir(parents=True, exist_ok=True)
    yield image_storage
    shutil.rmtree(image_storage.directory, ignore_errors=True)
    image_storage.directory.mkdir(parents=True, exist_ok=True)


@pytest.fixture()
def client(monkeypatch, db, otp_store, images):
    """Provide a TestClient with storage rooted in a per-test directory."""
    monkeypatch.setattr(main, "run_seed", lambda: None)
    main.app.dependency_overrides[get_db] = lambda: db
    main.app.dependency_overrides[get_otp_store] = lambda: otp_store

    with TestClient(main.app) as test_client:
        yield test_client

    main.app.dependency_overrides.clear()


@pytest.fixture()
def professional_token(client):
    response = client.post("/api/professional-login", json=PROFESSIONAL_CREDENTIALS)
    assert response.status_code == 200
    return response.json()["token"]

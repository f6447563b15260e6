# backend/tests/conftest.py
from __future__ import annotations

import os
import tempfile

_TMP = tempfile.mkdtemp(prefix="rentals-tests-")

# settings are read at import time
os.environ["APP_ENV"] = "local"
os.environ["AUTH_MODE"] = "dev"
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_TMP, 'rentals-test.db')}"
os.environ["SUPABASE_URL"] = "https://test-project.supabase.co"
os.environ["SUPABASE_SERVICE_ROLE_KEY"] = "service-role-test-key"
os.environ["GOOGLE_MAPS_API_KEY"] = "maps-test-key"

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from rentals.clients.supabase_storage import StorageError, get_storage  # noqa: E402
from rentals.db import Base, SessionLocal, create_tables, engine  # noqa: E402
from rentals.main import create_app  # noqa: E402

create_tables()

STORAGE_BASE = "https://test-project.supabase.co/storage/v1"

ADMIN = {"X-User-Email": "admin@test.local", "X-User-Role": "supply_admin"}
ANALYST = {"X-User-Email": "analyst@test.local", "X-User-Role": "supply_analyst"}


def partner(*property_ids: str) -> dict[str, str]:
    return {
        "X-User-Email": "partner@test.local",
        "X-User-Role": "supply_partner",
        "X-Property-Id": ",".join(property_ids),
    }


class FakeStorage:
    """In-memory stand-in for SupabaseStorage with per-call failure switches."""

    def __init__(self) -> None:
        self.objects: dict[tuple[str, str], bytes] = {}
        self.removed: list[tuple[str, str]] = []
        self.fail_upload = False
        self.fail_sign = False
        self.fail_remove = False

    def upload(self, bucket: str, path: str, content: bytes, content_type: str | None = None) -> str:
        if self.fail_upload:
            raise StorageError("upload refused")
        self.objects[(bucket, path)] = content
        return path

    def create_signed_url(self, bucket: str, path: str, expires_in: int) -> str:
        if self.fail_sign:
            raise StorageError("sign refused")
        return f"{STORAGE_BASE}/object/sign/{bucket}/{path}?token=test-token"

    def remove(self, bucket: str, paths: list[str]) -> None:
        if self.fail_remove:
            raise StorageError("remove refused")
        for path in paths:
            self.objects.pop((bucket, path), None)
            self.removed.append((bucket, path))

    def put(self, bucket: str, path: str) -> str:
        """Seed an existing object and return its signed URL."""
        self.objects[(bucket, path)] = b"seed"
        return f"{STORAGE_BASE}/object/sign/{bucket}/{path}?token=seed"


@pytest.fixture(autouse=True)
def _clean_tables():
    with engine.begin() as conn:
        for table in reversed(Base.metadata.sorted_tables):
            conn.execute(table.delete())
    yield


@pytest.fixture
def storage() -> FakeStorage:
    return FakeStorage()


@pytest.fixture
def client(storage: FakeStorage):
    app = create_app()
    app.dependency_overrides[get_storage] = lambda: storage
    with TestClient(app) as c:
        yield c


@pytest.fixture
def db():
    s = SessionLocal()
    try:
        yield s
    finally:
        s.close()

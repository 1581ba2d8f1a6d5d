"""
Shared fixtures: a throwaway SQLite database, a temporary storage root and a
fake outbound HTTP layer (text.lk / Resend) that records every call.
"""
import os
import tempfile

_TMP = tempfile.mkdtemp(prefix="academy-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{_TMP}/test.db"
os.environ["STORAGE_ROOT"] = os.path.join(_TMP, "storage")
os.environ["OTP_DEV_MODE"] = "true"
os.environ["SEED_COURSES_ON_STARTUP"] = "false"
os.environ["TEXTLK_API_TOKEN"] = "test-textlk-token"
os.environ["RESEND_API_KEY"] = "test-resend-key"
os.environ["ENV"] = "test"

import pytest  # noqa: E402
import requests  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from academy.core.db import Base, SessionLocal, engine  # noqa: E402
from academy.core.deps import get_storage  # noqa: E402
from academy.domains.courses.seed import seed_default_courses  # noqa: E402
from academy.main import app  # noqa: E402
from academy.utils.storage import ObjectStorage  # noqa: E402


class FakeResponse:
    def __init__(self, status_code: int = 200, text: str = '{"status": "success"}') -> None:
        self.status_code = status_code
        self.text = text


class OutboundHttp:
    """Stands in for `requests.post`; set `status_code` or `error` to simulate gateway failures."""

    def __init__(self) -> None:
        self.calls: list[dict] = []
        self.status_code = 200
        self.error: Exception | None = None

    def __call__(self, url, json=None, headers=None, timeout=None, **kwargs):
        self.calls.append({"url": url, "json": json, "headers": headers})
        if self.error is not None:
            raise self.error
        return FakeResponse(self.status_code)

    def sms(self) -> list[dict]:
        return [c["json"] for c in self.calls if "text.lk" in c["url"]]

    def emails(self) -> list[dict]:
        return [c["json"] for c in self.calls if "resend" in c["url"]]


@pytest.fixture(autouse=True)
def tables():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(autouse=True)
def outbound(monkeypatch) -> OutboundHttp:
    fake = OutboundHttp()
    monkeypatch.setattr(requests, "post", fake)
    return fake


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def storage(tmp_path) -> ObjectStorage:
    store = ObjectStorage(tmp_path / "objects", "http://testserver")
    app.dependency_overrides[get_storage] = lambda: store
    yield store
    app.dependency_overrides.pop(get_storage, None)


@pytest.fixture
def client(storage):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def courses(db):
    seed_default_courses(db)
    return db


def signup(client: TestClient, *, email: str, mobile: str, name: str = "Test User", password: str = "secret123") -> dict:
    sent = client.post("/otp/send", json={"mobile_number": mobile, "purpose": "registration"})
    assert sent.status_code == 200, sent.text
    code = sent.json()["dev_otp"]
    verified = client.post("/otp/verify", json={"mobile_number": mobile, "otp": code, "purpose": "registration"})
    assert verified.status_code == 200, verified.text
    resp = client.post(
        "/auth/signup",
        json={"email": email, "password": password, "display_name": name, "mobile_number": mobile},
    )
    assert resp.status_code == 201, resp.text
    body = resp.json()
    return {
        "id": body["user_id"],
        "role": body["role"],
        "token": body["access_token"],
        "headers": {"Authorization": f"Bearer {body['access_token']}"},
    }


@pytest.fixture
def admin(client) -> dict:
    # The first account created becomes the admin.
    return signup(client, email="admin@iobuilds.lk", mobile="0771000000", name="Admin")


@pytest.fixture
def user(client, admin) -> dict:
    return signup(client, email="student@example.com", mobile="0772000000", name="Nimal Perera")


@pytest.fixture
def new_account(client):
    def make(**kwargs) -> dict:
        return signup(client, **kwargs)

    return make

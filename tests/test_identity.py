from academy.core.db import SessionLocal
from academy.domains.identity import service as identity_service
from academy.domains.identity.models import Profile
from academy.domains.payments.service import set_admin_mobile


def test_signup_requires_verified_mobile(client):
    resp = client.post(
        "/auth/signup",
        json={
            "email": "someone@example.com",
            "password": "secret123",
            "display_name": "Someone",
            "mobile_number": "0773000000",
        },
    )
    assert resp.status_code == 400
    assert resp.json()["error"] == "Please verify your mobile number first"


def test_first_account_is_admin_then_users(client, admin, user):
    assert admin["role"] == "admin"
    assert user["role"] == "user"


def test_signup_consumes_otp(client, admin, new_account):
    new_account(email="a@example.com", mobile="0774000000")
    # Same mobile again: the verified OTP is gone and the number is taken.
    resp = client.post(
        "/auth/signup",
        json={"email": "b@example.com", "password": "secret123", "display_name": "Bee", "mobile_number": "0774000000"},
    )
    assert resp.status_code == 409


def test_duplicate_email(client, admin):
    resp = client.post("/otp/send", json={"mobile_number": "0775000000"})
    client.post("/otp/verify", json={"mobile_number": "0775000000", "otp": resp.json()["dev_otp"]})
    resp = client.post(
        "/auth/signup",
        json={"email": "ADMIN@iobuilds.lk", "password": "secret123", "display_name": "Dup", "mobile_number": "0775000000"},
    )
    assert resp.status_code == 409
    assert resp.json()["code"] == "CONFLICT"


def test_signup_validation(client):
    resp = client.post(
        "/auth/signup",
        json={"email": "x@example.com", "password": "123", "display_name": "X", "mobile_number": "077"},
    )
    assert resp.status_code == 422
    assert resp.json()["error"] == "Invalid request"


def test_signup_notifies_admin_when_configured(client, admin, db, outbound, new_account):
    set_admin_mobile(db, "0711111111")
    new_account(email="new@example.com", mobile="0776000000", name="Kamal")
    [sms] = outbound.sms()
    assert sms["recipient"] == "94711111111"
    assert sms["message"] == "New User Registration!\nName: Kamal\nEmail: new@example.com\nMobile: 94776000000"


def test_signin(client, user):
    ok = client.post("/auth/signin", json={"email": "student@example.com", "password": "secret123"})
    assert ok.status_code == 200
    assert ok.json()["role"] == "user"

    bad = client.post("/auth/signin", json={"email": "student@example.com", "password": "wrong-pass"})
    assert bad.status_code == 401
    assert bad.json()["error"] == "Invalid email or password. Please try again."


def test_me_requires_token(client):
    assert client.get("/auth/me").status_code == 401
    assert client.get("/auth/me", headers={"Authorization": "Bearer junk"}).status_code == 401


def test_me(client, user):
    resp = client.get("/auth/me", headers=user["headers"])
    assert resp.status_code == 200
    body = resp.json()
    assert body["email"] == "student@example.com"
    assert body["mobile_number"] == "94772000000"
    assert body["role"] == "user"


def test_password_reset(client, user, db):
    sent = client.post("/otp/send", json={"mobile_number": "0772000000", "purpose": "password_reset"})
    code = sent.json()["dev_otp"]
    client.post("/otp/verify", json={"mobile_number": "0772000000", "otp": code, "purpose": "password_reset"})

    resp = client.post("/auth/reset-password", json={"mobile_number": "0772000000", "new_password": "brandnew1"})
    assert resp.status_code == 200, resp.text
    assert client.post("/auth/signin", json={"email": "student@example.com", "password": "brandnew1"}).status_code == 200

    # The OTP was consumed.
    again = client.post("/auth/reset-password", json={"mobile_number": "0772000000", "new_password": "another1"})
    assert again.status_code == 400


def test_password_reset_unknown_mobile(client):
    sent = client.post("/otp/send", json={"mobile_number": "0779999999", "purpose": "password_reset"})
    client.post(
        "/otp/verify",
        json={"mobile_number": "0779999999", "otp": sent.json()["dev_otp"], "purpose": "password_reset"},
    )
    resp = client.post("/auth/reset-password", json={"mobile_number": "0779999999", "new_password": "brandnew1"})
    assert resp.status_code == 404
    assert resp.json()["error"] == "No account found with this mobile number"


def test_profile_update(client, user, db):
    resp = client.patch("/profile", json={"display_name": "Nimal P."}, headers=user["headers"])
    assert resp.status_code == 200
    assert resp.json()["display_name"] == "Nimal P."
    db.expire_all()
    assert db.get(Profile, user["id"]).display_name == "Nimal P."


def test_avatar_upload(client, user, storage):
    resp = client.post(
        "/profile/avatar",
        files={"file": ("me.jpg", b"jpeg bytes", "image/jpeg")},
        headers=user["headers"],
    )
    assert resp.status_code == 200, resp.text
    url = resp.json()["avatar_url"]
    assert url.startswith(f"http://testserver/storage/avatars/{user['id']}/")
    assert url.endswith(".jpg")

    # Avatars are public.
    public = client.get(url.replace("http://testserver", ""))
    assert public.status_code == 200
    assert public.content == b"jpeg bytes"
    assert client.get("/profile", headers=user["headers"]).json()["avatar_url"] == url


def test_avatar_must_be_small_image(client, user, storage):
    not_image = client.post(
        "/profile/avatar", files={"file": ("a.pdf", b"%PDF", "application/pdf")}, headers=user["headers"]
    )
    assert not_image.status_code == 400

    too_big = client.post(
        "/profile/avatar",
        files={"file": ("a.png", b"x" * (2 * 1024 * 1024 + 1), "image/png")},
        headers=user["headers"],
    )
    assert too_big.status_code == 400


def test_concurrent_signup_is_a_conflict(client, admin, monkeypatch):
    """Another request creates the same email between the uniqueness check and the insert."""
    find = identity_service.find_verified_otp

    def find_then_race(db, mobile, purpose):
        otp = find(db, mobile, purpose)
        with SessionLocal() as other:
            other.add(Profile(email="race@example.com", password_hash="x", display_name="Other"))
            other.commit()
        return otp

    monkeypatch.setattr(identity_service, "find_verified_otp", find_then_race)
    resp = client.post("/otp/send", json={"mobile_number": "0776000000"})
    client.post("/otp/verify", json={"mobile_number": "0776000000", "otp": resp.json()["dev_otp"]})
    resp = client.post(
        "/auth/signup",
        json={"email": "race@example.com", "password": "secret123", "display_name": "Race", "mobile_number": "0776000000"},
    )
    assert resp.status_code == 409
    assert resp.json()["code"] == "CONFLICT"

import time
from decimal import Decimal
from urllib.parse import urlsplit

from academy.domains.registrations.models import Enrollment, EnrollmentStatus, Registration
from academy.utils.storage import PAYMENT_SLIPS

SLIP_BYTES = b"\x89PNG payment slip"


def submit(client, user, course_id="iot-robotics", **extra) -> dict:
    data = {
        "course_id": course_id,
        "name": "Nimal Perera",
        "email": "nimal@example.com",
        "phone": "0772000000",
        "terms_accepted": "true",
        **extra,
    }
    resp = client.post(
        "/registrations",
        data=data,
        files={"payment_slip": ("slip.png", SLIP_BYTES, "image/png")},
        headers=user["headers"],
    )
    assert resp.status_code == 201, resp.text
    return resp.json()["registration"]


def test_verify_then_unverify(client, admin, user, courses, storage):
    reg = submit(client, user)

    resp = client.post(f"/admin/registrations/{reg['id']}/verify", json={"verified": True}, headers=admin["headers"])
    assert resp.status_code == 200, resp.text
    assert resp.json()["payment_verified"] is True
    assert resp.json()["enrollment_status"] == "enrolled"

    courses.expire_all()
    assert courses.get(Registration, reg["id"]).payment_verified is True
    assert courses.query(Enrollment).one().status == EnrollmentStatus.ENROLLED

    resp = client.post(f"/admin/registrations/{reg['id']}/verify", json={"verified": False}, headers=admin["headers"])
    assert resp.json()["enrollment_status"] == "pending"
    courses.expire_all()
    assert courses.query(Enrollment).one().status == EnrollmentStatus.PENDING


def test_verify_unknown_registration(client, admin):
    resp = client.post("/admin/registrations/nope/verify", json={"verified": True}, headers=admin["headers"])
    assert resp.status_code == 404
    assert resp.json()["code"] == "NOT_FOUND"


def test_verify_requires_admin(client, user, courses, storage):
    reg = submit(client, user)
    resp = client.post(f"/admin/registrations/{reg['id']}/verify", json={"verified": True}, headers=user["headers"])
    assert resp.status_code == 403
    assert resp.json()["error"] == "Admin role required"


def test_verify_can_notify_student(client, admin, user, courses, storage, outbound):
    reg = submit(client, user)
    outbound.calls.clear()
    resp = client.post(
        f"/admin/registrations/{reg['id']}/verify",
        json={"verified": True, "notify_user": True},
        headers=admin["headers"],
    )
    assert resp.json()["user_notified"] is True
    [sms] = outbound.sms()
    assert sms["recipient"] == "94772000000"
    assert sms["message"].startswith('Hi Nimal Perera! Great news - your payment for "IoT and Robotics (Ages 4-10)"')


def test_pending_and_search(client, admin, user, courses, storage):
    reg = submit(client, user)
    pending = client.get("/admin/registrations/pending", headers=admin["headers"]).json()["registrations"]
    assert [r["id"] for r in pending] == [reg["id"]]
    assert pending[0]["has_payment_slip"] is True

    found = client.get("/admin/registrations", params={"search": "nimal"}, headers=admin["headers"]).json()
    assert len(found["registrations"]) == 1
    found = client.get("/admin/registrations", params={"search": "robotics"}, headers=admin["headers"]).json()
    assert len(found["registrations"]) == 1
    missing = client.get("/admin/registrations", params={"search": "zzz"}, headers=admin["headers"]).json()
    assert missing["registrations"] == []

    client.post(f"/admin/registrations/{reg['id']}/verify", json={"verified": True}, headers=admin["headers"])
    pending = client.get("/admin/registrations/pending", headers=admin["headers"]).json()["registrations"]
    assert pending == []


def test_signed_slip_url(client, admin, user, courses, storage):
    reg = submit(client, user)
    resp = client.get(f"/admin/registrations/{reg['id']}/slip", headers=admin["headers"])
    assert resp.status_code == 200, resp.text
    body = resp.json()
    assert body["expires_in_seconds"] == 300

    parts = urlsplit(body["url"])
    slip = client.get(f"{parts.path}?{parts.query}")
    assert slip.status_code == 200
    assert slip.content == SLIP_BYTES

    assert client.get(parts.path).status_code == 403
    tampered = parts.query.replace("signature=", "signature=0")
    assert client.get(f"{parts.path}?{tampered}").status_code == 403


def test_expired_slip_url_is_refused(client, user, courses, storage):
    reg = submit(client, user)
    key = courses.get(Registration, reg["id"]).payment_slip_url
    expired = urlsplit(storage.create_signed_url(PAYMENT_SLIPS, key, expires_in=-10))
    assert client.get(f"{expired.path}?{expired.query}").status_code == 403
    assert storage.verify_signature(PAYMENT_SLIPS, key, int(time.time()) + 60, "bad") is False


def test_stats(client, admin, user, courses, storage):
    reg = submit(client, user)
    client.post(f"/admin/registrations/{reg['id']}/verify", json={"verified": True}, headers=admin["headers"])
    submit(client, admin, course_id="embedded-systems")

    resp = client.get("/admin/stats", headers=admin["headers"])
    assert resp.status_code == 200
    body = resp.json()
    by_course = {row["course_id"]: row for row in body["courses"]}
    assert by_course["iot-robotics"]["registrations"] == 1
    assert by_course["iot-robotics"]["verified"] == 1
    assert Decimal(by_course["iot-robotics"]["revenue"]) == Decimal("100.00")
    assert by_course["embedded-systems"]["registrations"] == 1
    assert Decimal(by_course["embedded-systems"]["revenue"]) == Decimal("0")
    assert by_course["product-development"]["registrations"] == 0
    assert body["total_registrations"] == 2
    assert Decimal(body["total_revenue"]) == Decimal("100.00")


def test_users_and_roles(client, admin, user):
    users = client.get("/admin/users", headers=admin["headers"]).json()["users"]
    roles = {u["email"]: u["role"] for u in users}
    assert roles == {"admin@iobuilds.lk": "admin", "student@example.com": "user"}

    resp = client.put(f"/admin/users/{user['id']}/role", json={"role": "moderator"}, headers=admin["headers"])
    assert resp.status_code == 200
    assert resp.json()["role"] == "moderator"

    bad = client.put(f"/admin/users/{user['id']}/role", json={"role": "owner"}, headers=admin["headers"])
    assert bad.status_code == 422

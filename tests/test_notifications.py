import pytest

from academy.core.errors import ValidationFailed
from academy.domains.notifications.service import notify_admin, send_registration_email
from academy.domains.payments.service import set_admin_mobile


def test_admin_notification_skipped_without_number(db, outbound):
    sent, message = notify_admin(
        db, "new_registration", user_name="Kamal", user_email="k@example.com", user_mobile="94770000000"
    )
    assert sent is True
    assert message == "Admin mobile not configured"
    assert outbound.calls == []


def test_admin_notification_templates(db, outbound):
    set_admin_mobile(db, "0711234567")
    notify_admin(
        db,
        "new_payment",
        user_name="Kamal",
        user_email="k@example.com",
        user_mobile="94770000000",
        course_name="Embedded Systems Bootcamp",
    )
    [sms] = outbound.sms()
    assert sms["recipient"] == "94711234567"
    assert sms["sender_id"] == "IO Builds"
    assert sms["message"] == (
        "New Payment Submitted!\nName: Kamal\nEmail: k@example.com\nMobile: 94770000000\n"
        "Course: Embedded Systems Bootcamp"
    )


def test_unknown_notification_type(db):
    with pytest.raises(ValidationFailed):
        notify_admin(db, "party", user_name="a", user_email="b", user_mobile="c")


def test_gateway_error_is_reported_not_raised(db, outbound):
    set_admin_mobile(db, "0711234567")
    outbound.status_code = 502
    sent, _ = notify_admin(db, "new_registration", user_name="a", user_email="b", user_mobile="c")
    assert sent is False


def test_registration_email_escapes_html(courses, outbound):
    sent = send_registration_email(
        courses, name="<script>alert(1)</script>", email="a@example.com", phone="0770000000", course="iot-robotics"
    )
    assert sent is True
    [email] = outbound.emails()
    assert "<script>" not in email["html"]
    assert "&lt;script&gt;alert(1)&lt;/script&gt;" in email["html"]
    assert email["from"] == "IO Builds Academy <onboarding@resend.dev>"


@pytest.mark.parametrize(
    "fields, error",
    [
        ({"name": ""}, "Missing required fields"),
        ({"email": "not-an-email"}, "Invalid email format"),
        ({"course": "unknown"}, "Invalid course selection"),
        ({"name": "x" * 101}, "Input exceeds length limits"),
        ({"phone": "0" * 21}, "Input exceeds length limits"),
    ],
)
def test_registration_email_validation(courses, outbound, fields, error):
    data = {"name": "Kamal", "email": "k@example.com", "phone": "0770000000", "course": "iot-robotics", **fields}
    with pytest.raises(ValidationFailed, match=error):
        send_registration_email(courses, **data)
    assert outbound.calls == []


def test_sms_endpoint_notify_admin(client, user, db, outbound):
    set_admin_mobile(db, "0711234567")
    resp = client.post(
        "/notifications/sms",
        params={"action": "notify_admin"},
        json={"type": "new_registration", "user_name": "Kamal", "user_email": "k@example.com", "user_mobile": "077"},
        headers=user["headers"],
    )
    assert resp.status_code == 200
    assert resp.json()["success"] is True
    assert len(outbound.sms()) == 1


def test_sms_endpoint_notify_user_is_admin_only(client, admin, user, outbound):
    body = {"user_name": "Kamal", "user_mobile": "0770000000", "course_name": "IoT"}
    denied = client.post("/notifications/sms", params={"action": "notify_user"}, json=body, headers=user["headers"])
    assert denied.status_code == 403

    ok = client.post("/notifications/sms", params={"action": "notify_user"}, json=body, headers=admin["headers"])
    assert ok.status_code == 200
    [sms] = outbound.sms()
    assert sms["recipient"] == "94770000000"
    assert sms["message"].startswith('Hi Kamal! Great news - your payment for "IoT" has been verified.')


def test_sms_endpoint_validates_body(client, user):
    resp = client.post(
        "/notifications/sms", params={"action": "notify_admin"}, json={"type": "new_payment"}, headers=user["headers"]
    )
    assert resp.status_code == 422


def test_registration_email_endpoint(client, user, courses, outbound):
    resp = client.post(
        "/notifications/registration-email",
        json={"name": "Kamal", "email": "bad", "phone": "0770000000", "course": "iot-robotics"},
        headers=user["headers"],
    )
    assert resp.status_code == 400
    assert resp.json()["error"] == "Invalid email format"

from academy.domains.learning.service import progress_percent


def enroll(client, user, admin, course_id="iot-robotics", verify=True) -> str:
    resp = client.post(
        "/registrations",
        data={
            "course_id": course_id,
            "name": "Nimal Perera",
            "email": "nimal@example.com",
            "phone": "0772000000",
            "terms_accepted": "true",
        },
        files={"payment_slip": ("slip.jpg", b"slip", "image/jpeg")},
        headers=user["headers"],
    )
    assert resp.status_code == 201, resp.text
    reg_id = resp.json()["registration"]["id"]
    if verify:
        client.post(f"/admin/registrations/{reg_id}/verify", json={"verified": True}, headers=admin["headers"])
    return reg_id


def test_progress_percent_rounds_half_up():
    assert progress_percent(0, 4) == 0
    assert progress_percent(1, 8) == 13
    assert progress_percent(1, 3) == 33
    assert progress_percent(2, 3) == 67
    assert progress_percent(4, 4) == 100
    assert progress_percent(0, 0) == 0


def test_learn_is_locked_until_payment_verified(client, admin, user, courses, storage):
    enroll(client, user, admin, verify=False)
    resp = client.get("/learn/iot-robotics", headers=user["headers"])
    assert resp.status_code == 403
    assert resp.json()["error"] == "Your payment is awaiting verification"

    assert client.get("/learn/embedded-systems", headers=user["headers"]).status_code == 404


def test_completing_every_week_completes_enrollment(client, admin, user, courses, storage):
    enroll(client, user, admin)
    view = client.get("/learn/iot-robotics", headers=user["headers"]).json()
    weeks = [w["week"] for w in view["curriculum"]]
    assert view["enrollment"]["status"] == "enrolled"
    assert view["progress_percent"] == 0

    first = client.put(
        f"/learn/iot-robotics/weeks/{weeks[0]}",
        json={"is_completed": True, "time_spent_minutes": 45, "notes": "fun"},
        headers=user["headers"],
    ).json()
    assert first["enrollment"]["status"] == "in_progress"
    assert first["progress"]["lesson_title"] == view["curriculum"][0]["title"]
    assert first["progress"]["completed_at"] is not None

    for week in weeks[1:]:
        last = client.put(
            f"/learn/iot-robotics/weeks/{week}",
            json={"is_completed": True, "time_spent_minutes": 30},
            headers=user["headers"],
        ).json()
    assert last["enrollment"]["status"] == "completed"
    assert last["enrollment"]["completed_at"] is not None

    # Un-completing a week reopens the course.
    reopened = client.put(
        f"/learn/iot-robotics/weeks/{weeks[0]}", json={"is_completed": False}, headers=user["headers"]
    ).json()
    assert reopened["enrollment"]["status"] == "in_progress"
    assert reopened["progress"]["completed_at"] is None
    assert reopened["progress"]["time_spent_minutes"] == 45


def test_week_out_of_range(client, admin, user, courses, storage):
    enroll(client, user, admin)
    resp = client.put("/learn/iot-robotics/weeks/99", json={"is_completed": True}, headers=user["headers"])
    assert resp.status_code == 400


def test_dashboard(client, admin, user, courses, storage):
    enroll(client, user, admin)
    client.put(
        "/learn/iot-robotics/weeks/1", json={"is_completed": True, "time_spent_minutes": 50}, headers=user["headers"]
    )
    client.put(
        "/learn/iot-robotics/weeks/2", json={"is_completed": False, "time_spent_minutes": 20}, headers=user["headers"]
    )

    resp = client.get("/dashboard", headers=user["headers"])
    assert resp.status_code == 200
    body = resp.json()
    [item] = body["enrolled"]
    assert item["course"]["id"] == "iot-robotics"
    assert item["completed_weeks"] == 1
    assert item["progress_percent"] == progress_percent(1, item["course"]["total_weeks"])
    assert sorted(c["id"] for c in body["available"]) == ["embedded-systems", "product-development"]
    assert body["lessons_completed"] == 1
    assert body["total_minutes"] == 70

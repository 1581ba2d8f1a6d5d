def account(**overrides) -> dict:
    data = {"bank_name": "Commercial Bank", "account_name": "IO Builds (Pvt) Ltd", "account_number": "1000123456"}
    data.update(overrides)
    return data


def test_bank_account_lifecycle(client, admin):
    created = client.post("/admin/bank-accounts", json=account(branch="  "), headers=admin["headers"])
    assert created.status_code == 201, created.text
    acc = created.json()
    assert acc["branch"] is None
    assert acc["is_active"] is True

    second = client.post("/admin/bank-accounts", json=account(bank_name="HNB", branch="Kandy"), headers=admin["headers"])
    assert [a["bank_name"] for a in client.get("/bank-accounts").json()["accounts"]] == ["Commercial Bank", "HNB"]

    off = client.post(f"/admin/bank-accounts/{acc['id']}/active", json={"is_active": False}, headers=admin["headers"])
    assert off.json()["is_active"] is False
    assert [a["bank_name"] for a in client.get("/bank-accounts").json()["accounts"]] == ["HNB"]
    assert len(client.get("/admin/bank-accounts", headers=admin["headers"]).json()["accounts"]) == 2

    updated = client.put(
        f"/admin/bank-accounts/{second.json()['id']}", json=account(bank_name="HNB", branch=""), headers=admin["headers"]
    )
    assert updated.json()["branch"] is None

    assert client.delete(f"/admin/bank-accounts/{acc['id']}", headers=admin["headers"]).status_code == 200
    assert client.delete(f"/admin/bank-accounts/{acc['id']}", headers=admin["headers"]).status_code == 404


def test_required_bank_fields(client, admin):
    resp = client.post("/admin/bank-accounts", json={"bank_name": "BOC"}, headers=admin["headers"])
    assert resp.status_code == 422


def test_admin_mobile_setting(client, admin, user):
    assert client.get("/admin/settings/admin-mobile", headers=admin["headers"]).json() == {"admin_mobile_number": None}
    resp = client.put(
        "/admin/settings/admin-mobile", json={"admin_mobile_number": "071 234 5678"}, headers=admin["headers"]
    )
    assert resp.json() == {"admin_mobile_number": "94712345678"}
    assert client.get("/admin/settings/admin-mobile", headers=user["headers"]).status_code == 403

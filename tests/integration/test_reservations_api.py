def test_availability_bad_date_is_400(client):
    res = client.get("/api/v1/reservations/availability", params={"date": "31/05/2024"})
    assert res.status_code == 400


def test_availability_today_marks_past(client):
    res = client.get("/api/v1/reservations/availability", params={"date": "2024-05-31"})
    assert res.status_code == 200
    status = {s["start"]: s["status"] for s in res.json()["slots"]}
    assert status[360] == "past"
    assert status[780] == "free"


def test_expire_requires_admin_token(client):
    assert client.post("/api/v1/reservations/expire").status_code == 401
    assert client.post("/api/v1/reservations/expire", headers={"Authorization": "Bearer wrong"}).status_code == 401


def test_expire_leaves_recent_holds(client, fake_db, order_payload, admin_headers):
    client.post("/api/v1/orders", json=order_payload(starts=(540,)))
    res = client.post("/api/v1/reservations/expire", headers=admin_headers)
    assert res.json() == {"expired": 0}
    assert fake_db.rows[0]["status"] == "pending"

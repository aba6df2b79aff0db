def test_create_list_and_check(client):
    resp = client.post("/api/closing-periods", json={
        "startDate": "2025-03-01",
        "endDate": "2025-03-31",
        "notes": "Tutup buku Maret",
    })
    assert resp.status_code == 201
    period = resp.get_json()
    assert period["month"] == 3
    assert period["year"] == 2025
    assert period["startDate"] == "2025-02-28T17:00:00.000Z"
    assert period["endDate"] == "2025-03-31T16:59:59.999Z"

    listed = client.get("/api/closing-periods").get_json()
    assert [p["_id"] for p in listed] == [period["_id"]]

    assert client.get("/api/closing-periods/check?date=2025-03-31").get_json() == {
        "date": "2025-03-31",
        "closed": True,
    }
    assert client.get("/api/closing-periods/check?date=2025-04-01").get_json()["closed"] is False


def test_check_requires_a_date(client):
    resp = client.get("/api/closing-periods/check")
    assert resp.status_code == 400
    assert "error" in resp.get_json()


def test_create_requires_dates(client):
    resp = client.post("/api/closing-periods", json={"startDate": "2025-03-01"})
    assert resp.status_code == 400


def test_close_month_and_closed_months(client, close_january):
    assert close_january["month"] == 1
    assert client.get("/api/closed-months").get_json() == [{"year": 2025, "month": 1}]

    again = client.post("/api/close-month", json={"year": 2025, "month": 1})
    assert again.status_code == 400
    assert again.get_json()["error"] == "Bulan 1/2025 sudah ditutup."


def test_close_month_defaults_to_current_month(client):
    resp = client.post("/api/close-month", json={})
    assert resp.status_code == 201
    assert resp.get_json()["success"] is True


def test_delete_period(client, close_january):
    pid = close_january["_id"]
    assert client.delete(f"/api/closing-periods/{pid}").status_code == 200
    assert client.get("/api/closed-months").get_json() == []
    assert client.delete(f"/api/closing-periods/{pid}").status_code == 404
    assert client.delete("/api/closing-periods/bad-id").status_code == 400

    # month can be closed again once reopened
    assert client.post("/api/close-month", json={"year": 2025, "month": 1}).status_code == 201


def test_closing_actions_are_logged(client, close_january):
    client.delete(f"/api/closing-periods/{close_january['_id']}")
    actions = [log["action"] for log in client.get("/api/activity-logs").get_json()]
    assert "CLOSE_MONTH" in actions
    assert "DELETE_CLOSING_PERIOD" in actions

from conftest import report_payload


def test_closed_month_blocks_report_create(client, close_january):
    resp = client.post("/api/reports", json=report_payload(date="2025-01-15"))
    assert resp.status_code == 400
    assert resp.get_json() == {"error": "Periode untuk tanggal 2025-01-15 sudah ditutup."}

    resp = client.post("/api/reports", json=report_payload(date="2025-02-01"))
    assert resp.status_code == 201
    body = resp.get_json()
    assert body["status"] == "pending"
    assert body["date"] == "2025-01-31T17:00:00.000Z"


def test_last_day_of_closed_month_is_blocked(client, close_january):
    resp = client.post("/api/reports", json=report_payload(date="2025-01-31"))
    assert resp.status_code == 400


def test_bulk_create_is_rejected_when_any_item_is_closed(client, close_january):
    resp = client.post("/api/reports", json=[
        report_payload(date="2025-02-03"),
        report_payload(date="2025-01-20"),
    ])
    assert resp.status_code == 400
    assert client.get("/api/reports").get_json() == []


def test_bulk_create_returns_list(client):
    resp = client.post("/api/reports", json=[
        report_payload(date="2025-02-03"),
        report_payload(date="2025-02-04", employeeName="Sari"),
    ])
    assert resp.status_code == 201
    assert len(resp.get_json()) == 2


def test_update_and_delete_of_closed_record_blocked_until_reopen(client):
    created = client.post("/api/reports", json=report_payload(date="2025-01-15")).get_json()
    period = client.post("/api/close-month", json={"year": 2025, "month": 1}).get_json()["period"]

    rid = created["_id"]
    assert client.put(f"/api/reports/{rid}", json={"hk": 2}).status_code == 400
    assert client.post(f"/api/reports/{rid}/approve").status_code == 400
    assert client.delete(f"/api/reports/{rid}").status_code == 400

    assert client.delete(f"/api/closing-periods/{period['_id']}").get_json() == {"ok": True}

    resp = client.put(f"/api/reports/{rid}", json={"hk": 2})
    assert resp.status_code == 200
    assert resp.get_json()["hk"] == 2
    assert client.delete(f"/api/reports/{rid}").status_code == 200


def test_moving_open_record_into_closed_month_is_blocked(client, close_january):
    rid = client.post("/api/reports", json=report_payload(date="2025-02-10")).get_json()["_id"]

    resp = client.put(f"/api/reports/{rid}", json={"date": "2025-01-10"})
    assert resp.status_code == 400
    assert "2025-01-10" in resp.get_json()["error"]

    assert client.get(f"/api/reports/{rid}").get_json()["date"] == "2025-02-09T17:00:00.000Z"


def test_approve_and_reject(client):
    rid = client.post("/api/reports", json=report_payload()).get_json()["_id"]

    approved = client.post(f"/api/reports/{rid}/approve").get_json()
    assert approved["status"] == "approved"

    rejected = client.post(f"/api/reports/{rid}/reject", json={"reason": "HK salah"}).get_json()
    assert rejected["status"] == "rejected"
    assert rejected["rejectedReason"] == "HK salah"


def test_validation_errors(client):
    resp = client.post("/api/reports", json={"employeeName": "Budi"})
    assert resp.status_code == 400
    assert resp.get_json()["error"].startswith("Missing required fields")

    assert client.post("/api/reports", json=report_payload(hk=-1)).status_code == 400
    assert client.post("/api/reports", json=report_payload(status="done")).status_code == 400
    assert client.get("/api/reports/not-an-id").status_code == 400
    assert client.get("/api/reports/0123456789abcdef01234567").status_code == 404


def test_list_filters(client):
    client.post("/api/reports", json=report_payload(date="2025-02-03"))
    client.post("/api/reports", json=report_payload(date="2025-02-20", division="Divisi 2"))

    rows = client.get("/api/reports?startDate=2025-02-01&endDate=2025-02-10").get_json()
    assert len(rows) == 1

    rows = client.get("/api/reports", query_string={"division": "Divisi 2"}).get_json()
    assert [r["division"] for r in rows] == ["Divisi 2"]

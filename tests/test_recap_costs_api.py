from routes.recap_costs import summarize_costs


def _cost(**overrides):
    body = {
        "date": "2025-03-17",
        "category": "Panen",
        "jenisPekerjaan": "Potong buah",
        "hk": 2,
        "rpKhl": 100000,
        "rpPremi": 25000,
    }
    body.update(overrides)
    return body


def test_cost_date_normalized_to_month_start(client):
    resp = client.post("/api/recap-costs", json=_cost())
    assert resp.status_code == 201
    body = resp.get_json()
    assert body["date"] == "2025-02-28T17:00:00.000Z"
    assert body["rpBorongan"] == 0


def test_month_query_required(client):
    resp = client.get("/api/recap-costs")
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "Month and Year are required"

    resp = client.get("/api/recap-costs?month=13&year=2025")
    assert resp.get_json()["error"] == "Invalid month or year"


def test_list_by_month_sorted_by_category(client):
    client.post("/api/recap-costs", json=[
        _cost(category="Rawat", jenisPekerjaan="Semprot"),
        _cost(category="Panen"),
        _cost(date="2025-04-02"),
    ])

    rows = client.get("/api/recap-costs?month=3&year=2025").get_json()
    assert [r["category"] for r in rows] == ["Panen", "Rawat"]


def test_summary_totals(client):
    client.post("/api/recap-costs", json=[
        _cost(),
        _cost(rpKhl=50000, rpPremi=0, rpBorongan=10000, hk=1),
        _cost(category="Rawat", jenisPekerjaan="Semprot", rpKhl=0, rpPremi=0, rpBorongan=40000, hk=0),
    ])

    summary = client.get("/api/recap-costs/summary?month=3&year=2025").get_json()
    panen = summary["categories"][0]
    assert panen["category"] == "Panen"
    assert panen["count"] == 2
    assert panen["total"] == 185000
    assert summary["grand_total"] == 225000
    assert summary["total_hk"] == 3


def test_closed_month_blocks_costs(client):
    created = client.post("/api/recap-costs", json=_cost()).get_json()
    client.post("/api/close-month", json={"year": 2025, "month": 3})

    resp = client.post("/api/recap-costs", json=_cost(date="2025-03-30"))
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "Periode untuk tanggal 2025-03-30 sudah ditutup."

    assert client.put(f"/api/recap-costs/{created['_id']}", json={"rpKhl": 1}).status_code == 400
    assert client.delete(f"/api/recap-costs/{created['_id']}").status_code == 400


def test_summarize_costs_handles_blank_category():
    out = summarize_costs([{"category": "", "rpKhl": "10", "hk": None}])
    assert out["categories"][0]["category"] == "Uncategorized"
    assert out["grand_total"] == 10.0


def test_partial_period_gates_on_entered_date(client):
    client.post("/api/closing-periods", json={"startDate": "2025-03-10", "endDate": "2025-03-31"})

    resp = client.post("/api/recap-costs", json=_cost(date="2025-03-17"))
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "Periode untuk tanggal 2025-03-17 sudah ditutup."

    resp = client.post("/api/recap-costs", json=_cost(date="2025-03-05"))
    assert resp.status_code == 201
    assert resp.get_json()["date"] == "2025-02-28T17:00:00.000Z"


def test_period_on_first_days_does_not_close_whole_month(client):
    client.post("/api/closing-periods", json={"startDate": "2025-03-01", "endDate": "2025-03-05"})

    assert client.post("/api/recap-costs", json=_cost(date="2025-03-03")).status_code == 400
    assert client.post("/api/recap-costs", json=_cost(date="2025-03-20")).status_code == 201


def test_moving_cost_into_closed_period_is_blocked(client):
    cid = client.post("/api/recap-costs", json=_cost(date="2025-04-10")).get_json()["_id"]
    client.post("/api/closing-periods", json={"startDate": "2025-03-10", "endDate": "2025-03-31"})

    resp = client.put(f"/api/recap-costs/{cid}", json={"date": "2025-03-20"})
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "Periode untuk tanggal 2025-03-20 sudah ditutup."

    resp = client.put(f"/api/recap-costs/{cid}", json={"date": "2025-03-05"})
    assert resp.status_code == 200
    assert resp.get_json()["date"] == "2025-02-28T17:00:00.000Z"

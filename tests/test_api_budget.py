ENTRY = {
    "date": "2024-05-01",
    "month": "2024-05",
    "total_income": 1000,
    "currency": "USD",
    "items": [
        {"name": "Rent", "amount": {"amount": 400, "currency": "USD"}, "category": "bills"},
        {"name": "Market", "amount": {"amount": 205000, "currency": "KHR"}},
    ],
}


def test_entry_converts_items_into_entry_currency(client):
    resp = client.post("/api/budget/entry", json=ENTRY)
    assert resp.status_code == 201
    body = resp.json()
    assert body["total_spending"] == {"amount": 450.0, "currency": "USD"}
    assert body["remaining"] == {"amount": 550.0, "currency": "USD"}
    assert body["entries_added"] == 2


def test_entries_are_listed_and_deleted_by_index(client):
    client.post("/api/budget/entry", json=ENTRY)
    rows = client.get("/api/budget/entries").json()
    assert [r["item_name"] for r in rows] == ["Rent", "Market"]
    assert rows[1]["item_currency"] == "KHR"
    assert rows[0]["remaining"] == 550

    assert client.delete("/api/budget/entry/0").status_code == 204
    rows = client.get("/api/budget/entries").json()
    assert [(r["index"], r["item_name"]) for r in rows] == [(0, "Market")]
    assert client.delete("/api/budget/entry/9").status_code == 404


def test_entries_month_filter(client):
    client.post("/api/budget/entry", json=ENTRY)
    assert client.get("/api/budget/entries", params={"month": "2024-06"}).json() == []
    assert client.get("/api/budget/entries", params={"month": "May"}).status_code == 400


def test_entry_validation(client):
    assert client.post("/api/budget/entry", json={**ENTRY, "items": []}).status_code == 400
    assert client.post("/api/budget/entry", json={**ENTRY, "month": "2024-5"}).status_code == 400
    assert client.post("/api/budget/entry", json={**ENTRY, "currency": "EUR"}).status_code == 400

from unittest import mock

from budgetsheet.core.errors import PersistenceError
from budgetsheet.routers.deps import get_gateway


def test_list_includes_builtins(client):
    resp = client.get("/api/categories")
    assert resp.status_code == 200
    ids = {c["id"] for c in resp.json()}
    assert {"food", "transport", "other"} <= ids


def test_get_unknown_falls_back_to_other(client):
    resp = client.get("/api/categories/not-a-category")
    assert resp.status_code == 200
    assert resp.json()["id"] == "other"


def test_custom_category_lifecycle(client):
    created = client.post("/api/categories", json={"name": "Pets", "color": "#123456"})
    assert created.status_code == 201
    cat = created.json()
    assert cat["id"].startswith("custom_")
    assert cat["is_custom"] is True

    updated = client.put(f"/api/categories/{cat['id']}", json={"name": "Animals"})
    assert updated.status_code == 200
    assert updated.json()["name"] == "Animals"

    assert client.delete(f"/api/categories/{cat['id']}").status_code == 204
    ids = {c["id"] for c in client.get("/api/categories").json()}
    assert cat["id"] not in ids


def test_builtin_category_is_protected(client):
    resp = client.delete("/api/categories/food")
    assert resp.status_code == 400
    assert resp.json()["error"] == "protected_category"
    resp = client.put("/api/categories/food", json={"name": "Snacks"})
    assert resp.status_code == 400


def test_delete_unknown_custom_is_404(client):
    resp = client.delete("/api/categories/custom_missing")
    assert resp.status_code == 404
    assert resp.json()["error"] == "not_found"


def test_invalid_payload_is_400(client):
    resp = client.post("/api/categories", json={"name": "x", "color": "blue"})
    assert resp.status_code == 400
    assert resp.json()["error"] == "validation_error"


def test_store_failure_is_generic_500(app, client):
    broken = mock.MagicMock()
    broken.list.side_effect = PersistenceError("quota exceeded for user alice")
    app.dependency_overrides[get_gateway] = lambda: broken
    resp = client.get("/api/categories")
    assert resp.status_code == 500
    body = resp.json()
    assert body["error"] == "persistence_error"
    assert "quota" not in body["detail"]

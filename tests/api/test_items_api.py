# tests/api/test_items_api.py
import pytest

pytestmark = pytest.mark.asyncio

ITEM = {
    "name": "Multimeter",
    "sku": "MM-01",
    "category": "Electronics",
    "type": "ASSET",
    "location": "Drawer 4",
    "quantity_total": 3,
    "quantity_available": 3,
    "min_stock_threshold": 1,
    "unit_price": "45.00",
}


async def test_create_list_get(client):
    r = await client.post("/items", json=ITEM)
    assert r.status_code == 201, r.text
    created = r.json()
    assert created["id"] > 0
    assert created["type"] == "ASSET"

    r = await client.get("/items")
    assert [i["sku"] for i in r.json()] == ["MM-01"]

    r = await client.get(f"/items/{created['id']}")
    assert r.status_code == 200
    assert r.json()["location"] == "Drawer 4"


async def test_duplicate_sku_conflicts(client):
    assert (await client.post("/items", json=ITEM)).status_code == 201
    r = await client.post("/items", json=ITEM)
    assert r.status_code == 409
    assert "SKU already exists" in r.json()["detail"]


async def test_create_rejects_available_above_total(client):
    r = await client.post("/items", json={**ITEM, "quantity_available": 9})
    assert r.status_code == 422


async def test_create_rejects_values_beyond_column_range(client):
    too_many = 2**31
    r = await client.post("/items", json={**ITEM, "quantity_total": too_many, "quantity_available": 1})
    assert r.status_code == 422
    r = await client.post("/items", json={**ITEM, "unit_price": "10000000000"})
    assert r.status_code == 422


async def test_missing_item(client):
    assert (await client.get("/items/999")).status_code == 404
    assert (await client.patch("/items/999", json={"name": "x"})).status_code == 404
    assert (await client.delete("/items/999")).status_code == 404


async def test_patch_enforces_quantities(client):
    item_id = (await client.post("/items", json=ITEM)).json()["id"]

    r = await client.patch(f"/items/{item_id}", json={"quantity_available": 5})
    assert r.status_code == 400

    r = await client.patch(f"/items/{item_id}", json={"quantity_total": 5, "notes": "recalibrated"})
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["quantity_total"] == 5
    assert body["quantity_available"] == 3
    assert body["notes"] == "recalibrated"


async def test_lookup_by_scanned_code(client):
    await client.post("/items", json=ITEM)

    r = await client.get("/items/lookup", params={"code": "mm-01"})
    assert r.status_code == 200
    assert r.json()["sku"] == "MM-01"

    r = await client.get("/items/lookup", params={"code": "NOPE"})
    assert r.status_code == 404
    assert r.json()["detail"] == "No item found with SKU: NOPE"


async def test_low_stock_and_summary(client):
    await client.post("/items", json={**ITEM, "quantity_available": 0})
    await client.post("/items", json={**ITEM, "sku": "MM-02", "quantity_available": 3})

    r = await client.get("/items/low-stock")
    assert [i["sku"] for i in r.json()] == ["MM-01"]

    r = await client.get("/items/summary")
    summary = r.json()
    assert summary["item_count"] == 2
    assert summary["low_stock_count"] == 1
    assert summary["active_loans"] == 0


async def test_delete_single_and_bulk(client):
    first = (await client.post("/items", json=ITEM)).json()["id"]
    second = (await client.post("/items", json={**ITEM, "sku": "MM-02"})).json()["id"]
    third = (await client.post("/items", json={**ITEM, "sku": "MM-03"})).json()["id"]

    assert (await client.delete(f"/items/{first}")).status_code == 204

    r = await client.post("/items/delete", json={"ids": [second, third, first]})
    assert r.json() == {"deleted": 2}
    assert (await client.get("/items")).json() == []

import pytest

from backoffice.models.inventory_models import InventoryItem, UsageUnit


async def _branch(client, name="Centro"):
    return (await client.post("/branches", json={"name": name})).json()["data"]


async def _flour(client, branch_id, stock=2, alert=1):
    resp = await client.post("/inventory/items", json={
        "sku": "FLOUR-50",
        "name": "Flour",
        "presentation_name": "Saco",
        "presentation_content": 50,
        "presentation_unit": "kg",
        "presentation_cost": 100000,
        "branch_stock": [{"branch_id": branch_id, "stock": stock, "alert": alert}],
    })
    assert resp.status_code == 200
    return resp.json()["data"]


async def test_create_item_converts_presentation(client):
    branch = await _branch(client)
    item = await _flour(client, branch["id"])

    assert item["usage_unit"] == "g"
    assert item["buying_unit"] == "Saco 50kg"
    assert item["conversion_factor"] == 50000
    assert item["unit_cost"] == 2.0
    assert item["presentation_cost"] == 100000
    assert item["total_stock"] == 100000
    assert item["branch_stock"][0]["min_stock_alert"] == 50000

    movements = (await client.get("/inventory/movements", params={"ingredient_id": item["id"]})).json()["data"]
    assert len(movements) == 1
    assert movements[0]["movement_type"] == "adjustment"
    assert movements[0]["quantity"] == 100000


async def test_duplicate_sku_and_unknown_branch(client):
    branch = await _branch(client)
    await _flour(client, branch["id"])

    resp = await client.post("/inventory/items", json={"sku": "FLOUR-50", "name": "Other"})
    assert resp.status_code == 400

    resp = await client.post("/inventory/items", json={
        "sku": "SUGAR", "name": "Sugar", "branch_stock": [{"branch_id": 999, "stock": 1}],
    })
    assert resp.status_code == 404


async def test_receive_stock_applies_weighted_average_cost(client):
    branch = await _branch(client)
    item = await _flour(client, branch["id"])

    resp = await client.post(f"/inventory/items/{item['id']}/receive", json={
        "branch_id": branch["id"], "quantity": 1, "price": 160000,
    })
    assert resp.status_code == 200
    data = resp.json()["data"]
    # 100000 g at 2.0 plus 50000 g at 3.2
    assert data["received_usage_quantity"] == 50000
    assert data["current_stock"] == 150000
    assert data["unit_cost"] == 2.4

    refreshed = (await client.get(f"/inventory/items/{item['id']}")).json()["data"]
    assert refreshed["unit_cost"] == 2.4
    assert refreshed["presentation_cost"] == 120000

    types = [m["movement_type"] for m in (await client.get("/inventory/movements")).json()["data"]]
    assert sorted(types) == ["adjustment", "purchase"]


async def test_receive_into_new_branch_creates_stock_row(client):
    centro = await _branch(client)
    norte = await _branch(client, "Norte")
    item = await _flour(client, centro["id"], stock=0)

    resp = await client.post(f"/inventory/items/{item['id']}/receive", json={
        "branch_id": norte["id"], "quantity": 2, "price": 90000,
    })
    assert resp.status_code == 200
    assert resp.json()["data"]["unit_cost"] == 1.8

    stock = (await client.get("/inventory/stock", params={"branch_id": norte["id"]})).json()["data"]
    assert stock[0]["current_stock"] == 100000


async def test_receive_rejects_item_without_conversion_factor(client):
    branch = await _branch(client)
    item = (await client.post("/inventory/items", json={
        "sku": "BROKEN", "name": "Broken", "presentation_content": 0,
    })).json()["data"]
    assert item["conversion_factor"] == 0

    resp = await client.post(f"/inventory/items/{item['id']}/receive", json={
        "branch_id": branch["id"], "quantity": 1, "price": 1000,
    })
    assert resp.status_code == 400


async def test_stock_alerts(client):
    branch = await _branch(client)
    await _flour(client, branch["id"], stock=2, alert=1)
    await client.post("/inventory/items", json={
        "sku": "MILK",
        "name": "Milk",
        "presentation_name": "Bolsa",
        "presentation_content": 1,
        "presentation_unit": "l",
        "presentation_cost": 4000,
        "branch_stock": [{"branch_id": branch["id"], "stock": 1, "alert": 3}],
    })

    alerts = (await client.get("/inventory/alerts", params={"branch_id": branch["id"]})).json()["data"]
    assert [a["ingredient_name"] for a in alerts] == ["Milk"]
    assert alerts[0]["usage_unit"] == "ml"
    assert alerts[0]["current_stock"] == 1000


async def test_update_recomputes_conversion(client):
    branch = await _branch(client)
    item = await _flour(client, branch["id"])

    resp = await client.put(f"/inventory/items/{item['id']}", json={"presentation_content": 25})
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["conversion_factor"] == 25000
    assert data["buying_unit"] == "Saco 25kg"
    assert data["unit_cost"] == 2.0
    assert data["presentation_cost"] == 50000

    resp = await client.put(f"/inventory/items/{item['id']}", json={"presentation_cost": 75000})
    assert resp.json()["data"]["unit_cost"] == 3.0


async def test_legacy_item_presentation_is_parsed(client, db):
    legacy = InventoryItem(
        sku="OIL",
        name="Oil",
        usage_unit=UsageUnit.ml,
        buying_unit="Bidón 5gal",
        conversion_factor=18927.05,
        unit_cost=10,
    )
    db.add(legacy)
    await db.commit()

    data = (await client.get(f"/inventory/items/{legacy.id}")).json()["data"]
    assert data["presentation_name"] == "Bidón"
    assert data["presentation_content"] == 5
    assert data["presentation_unit"] == "gal"
    assert data["presentation_cost"] == pytest.approx(189270.5)


async def test_delete_item(client):
    branch = await _branch(client)
    item = await _flour(client, branch["id"])

    assert (await client.delete(f"/inventory/items/{item['id']}")).status_code == 200
    assert (await client.get(f"/inventory/items/{item['id']}")).status_code == 404
    assert (await client.get("/inventory/items")).json()["data"] == []


async def test_cost_edit_keeps_conversion_of_unparseable_legacy_item(client, db):
    legacy = InventoryItem(
        sku="SUGAR",
        name="Sugar",
        usage_unit=UsageUnit.g,
        buying_unit="Paquete grande de azucar",
        conversion_factor=500,
        unit_cost=4,
    )
    db.add(legacy)
    await db.commit()

    resp = await client.put(f"/inventory/items/{legacy.id}", json={"unit_cost": 5})
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["unit_cost"] == 5
    assert data["conversion_factor"] == 500
    assert data["usage_unit"] == "g"
    assert data["buying_unit"] == "Paquete grande de azucar"

    resp = await client.put(f"/inventory/items/{legacy.id}", json={"presentation_cost": 3000})
    data = resp.json()["data"]
    assert data["unit_cost"] == 6.0
    assert data["conversion_factor"] == 500
    assert data["buying_unit"] == "Paquete grande de azucar"

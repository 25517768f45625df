from datetime import timedelta

import pytest

from backoffice.services.catalog_services.promotion_service import business_today
from tests.conftest import PIN_HEADER


async def _seed(client):
    centro = (await client.post("/branches", json={"name": "Centro"})).json()["data"]
    norte = (await client.post("/branches", json={"name": "Norte"})).json()["data"]
    channel = (await client.post("/catalog/channels", json={"name": "Salon", "type": "retail"})).json()["data"]
    category = (await client.post("/catalog/categories", json={"name": "Burgers"})).json()["data"]

    burger = (await client.post(
        "/catalog/products", json={"name": "Classic Burger", "category_id": category["id"], "price": 20000}
    )).json()["data"]
    soda = (await client.post("/catalog/products", json={"name": "Soda", "price": 5000})).json()["data"]

    flour = (await client.post("/inventory/items", json={
        "sku": "FLOUR-50",
        "name": "Flour",
        "presentation_name": "Saco",
        "presentation_content": 50,
        "presentation_unit": "kg",
        "presentation_cost": 100000,
        "branch_stock": [{"branch_id": centro["id"], "stock": 1}],
    })).json()["data"]

    resp = await client.put(
        f"/catalog/products/{burger['id']}/recipe",
        json=[{"ingredient_id": flour["id"], "quantity_required": 200}],
    )
    assert resp.status_code == 200
    assert resp.json()["data"]["total_cost"] == 400

    return {"centro": centro, "norte": norte, "channel": channel, "burger": burger, "soda": soda, "flour": flour}


def _by_name(listing):
    return {row["name"]: row for row in listing}


async def test_channel_listing_with_override_stock_and_cost(client):
    seed = await _seed(client)
    channel_id, centro_id = seed["channel"]["id"], seed["centro"]["id"]

    resp = await client.put("/catalog/prices", headers=PIN_HEADER, json={
        "product_id": seed["burger"]["id"],
        "channel_id": channel_id,
        "branch_id": centro_id,
        "price": 25000,
    })
    assert resp.status_code == 200

    resp = await client.get(f"/catalog/channels/{channel_id}/products", params={"branch_id": centro_id})
    assert resp.status_code == 200
    rows = _by_name(resp.json()["data"])

    burger = rows["Classic Burger"]
    assert burger["base_price"] == 20000
    assert burger["current_price"] == 25000
    assert burger["has_override"] is True
    assert burger["formatted_price"] == "$ 25.000"
    assert burger["currency"] == "COP"
    assert burger["stock"] == 250
    assert burger["cost"] == 400
    assert burger["category"] == "Burgers"
    assert burger["applied_promotion"] is None

    soda = rows["Soda"]
    assert soda["current_price"] == 5000
    assert soda["has_override"] is False
    assert soda["category"] == "Uncategorized"
    assert soda["stock"] == 0


async def test_stock_is_summed_across_branches_without_branch(client):
    seed = await _seed(client)
    channel_id = seed["channel"]["id"]

    resp = await client.get(f"/catalog/channels/{channel_id}/products", params={"branch_id": seed["norte"]["id"]})
    assert _by_name(resp.json()["data"])["Classic Burger"]["stock"] == 0

    resp = await client.get(f"/catalog/channels/{channel_id}/products")
    assert _by_name(resp.json()["data"])["Classic Burger"]["stock"] == 250


async def test_category_promotion_and_branch_prices(client):
    seed = await _seed(client)
    channel_id = seed["channel"]["id"]

    await client.put("/catalog/prices", headers=PIN_HEADER, json={
        "product_id": seed["burger"]["id"], "branch_id": seed["centro"]["id"], "price": 25000,
    })
    resp = await client.post("/catalog/promotions", json={
        "name": "Burger week",
        "type": "category_discount",
        "value": 10,
        "config": {"discount_type": "percentage", "target_categories": ["Burgers"]},
        "start_date": (business_today() - timedelta(days=1)).isoformat(),
    })
    assert resp.status_code == 200

    resp = await client.get(f"/catalog/channels/{channel_id}/products/{seed['burger']['id']}/branch-prices")
    assert resp.status_code == 200
    prices = resp.json()["data"]
    assert [p["branch_name"] for p in prices] == ["Centro", "Norte"]
    assert prices[0]["price"] == pytest.approx(22500)
    assert prices[1]["price"] == pytest.approx(18000)
    assert all(p["is_promotion"] for p in prices)

    resp = await client.get(f"/catalog/channels/{channel_id}/products", params={"branch_id": seed["norte"]["id"]})
    rows = _by_name(resp.json()["data"])
    assert rows["Classic Burger"]["applied_promotion"]["name"] == "Burger week"
    assert rows["Classic Burger"]["applied_promotion"]["discount_type"] == "percentage"
    assert rows["Soda"]["applied_promotion"] is None


async def test_ignore_promotions_override(client):
    seed = await _seed(client)
    channel_id = seed["channel"]["id"]

    await client.post("/catalog/promotions", json={
        "name": "Everything 50",
        "type": "global_discount",
        "value": 50,
        "config": {"discount_type": "percentage"},
        "start_date": business_today().isoformat(),
    })
    await client.put("/catalog/prices", headers=PIN_HEADER, json={
        "product_id": seed["soda"]["id"], "channel_id": channel_id, "price": 6000, "ignore_promotions": True,
    })

    rows = _by_name((await client.get(f"/catalog/channels/{channel_id}/products")).json()["data"])
    assert rows["Soda"]["current_price"] == 6000
    assert rows["Soda"]["ignore_promotions"] is True
    assert rows["Soda"]["applied_promotion"] is None
    assert rows["Classic Burger"]["current_price"] == pytest.approx(10000)


async def test_price_changes_require_pin(client):
    seed = await _seed(client)
    payload = {"product_id": seed["burger"]["id"], "channel_id": seed["channel"]["id"], "price": 21000}

    assert (await client.put("/catalog/prices", json=payload)).status_code == 401
    assert (await client.put("/catalog/prices", json=payload, headers={"X-Auth-Pin": "0000"})).status_code == 403

    resp = await client.put("/catalog/prices", json=payload, headers=PIN_HEADER)
    assert resp.status_code == 200
    override_id = resp.json()["data"]["id"]

    # same scope updates the existing row
    resp = await client.put("/catalog/prices", json={**payload, "price": 22000}, headers=PIN_HEADER)
    assert resp.json()["data"]["id"] == override_id

    listed = (await client.get("/catalog/prices", params={"product_id": seed["burger"]["id"]})).json()["data"]
    assert [o["price"] for o in listed] == [22000]

    assert (await client.delete(f"/catalog/prices/{override_id}")).status_code == 401
    assert (await client.delete(f"/catalog/prices/{override_id}", headers=PIN_HEADER)).status_code == 200
    assert (await client.get("/catalog/prices")).json()["data"] == []


async def test_hidden_product_is_excluded_when_requested(client):
    seed = await _seed(client)
    channel_id = seed["channel"]["id"]

    resp = await client.patch("/catalog/prices/visibility", json={
        "product_id": seed["soda"]["id"], "channel_id": channel_id, "is_active": False,
    })
    assert resp.status_code == 200
    assert resp.json()["data"]["price"] == 5000

    all_rows = _by_name((await client.get(f"/catalog/channels/{channel_id}/products")).json()["data"])
    assert all_rows["Soda"]["is_active_in_channel"] is False

    visible = (await client.get(
        f"/catalog/channels/{channel_id}/products", params={"include_inactive": False}
    )).json()["data"]
    assert [row["name"] for row in visible] == ["Classic Burger"]


async def test_listing_filters_by_category(client):
    seed = await _seed(client)
    resp = await client.get(f"/catalog/channels/{seed['channel']['id']}/products", params={"category": "Burgers"})
    assert [row["name"] for row in resp.json()["data"]] == ["Classic Burger"]


async def test_unknown_channel_returns_404(client):
    assert (await client.get("/catalog/channels/999/products")).status_code == 404


async def test_product_crud(client):
    created = (await client.post("/catalog/products", json={"name": "Fries", "price": 7000})).json()["data"]

    resp = await client.put(f"/catalog/products/{created['id']}", json={"price": 7500})
    assert resp.status_code == 200
    assert resp.json()["data"]["price"] == 7500

    resp = await client.post("/catalog/products", json={"name": "Fries", "price": 1})
    assert resp.status_code == 400

    assert (await client.post("/catalog/products", json={"name": "Bad", "price": -1})).status_code == 422

    assert (await client.delete(f"/catalog/products/{created['id']}")).status_code == 200
    assert (await client.get(f"/catalog/products/{created['id']}")).status_code == 404


async def test_recipe_rejects_unknown_ingredient(client):
    product = (await client.post("/catalog/products", json={"name": "Fries", "price": 7000})).json()["data"]
    resp = await client.put(
        f"/catalog/products/{product['id']}/recipe",
        json=[{"ingredient_id": 999, "quantity_required": 10}],
    )
    assert resp.status_code == 404

"""Subscription route tests: vault-scoped CRUD with full-replace updates."""

SUBSCRIPTION = {
    "name": "Netflix",
    "cost": 30.0,
    "currency": "CNY",
    "frequencyAmount": 1,
    "frequencyUnit": "MONTHS",
    "renewalDate": "2026-11-01",
    "startDate": "2025-11-01",
    "category": "Video",
    "tagIds": "",
    "website": "https://netflix.com",
    "active": True,
}


async def _create(client, headers, **overrides):
    res = await client.post(
        "/api/v1/subscriptions", json={**SUBSCRIPTION, **overrides}, headers=headers,
    )
    assert res.status_code == 201, res.text
    return res.json()


async def test_create_returns_stored_subscription(client, vault):
    body = await _create(client, vault["headers"])
    assert body["id"]
    assert body["vaultId"] == vault["vaultId"]
    assert body["frequencyUnit"] == "MONTHS"
    assert body["credentialId"] is None


async def test_create_applies_defaults(client, vault):
    res = await client.post(
        "/api/v1/subscriptions", json={"name": "Bare", "cost": 5},
        headers=vault["headers"],
    )
    assert res.status_code == 201
    bare = res.json()
    assert bare["currency"] == "CNY"
    assert bare["frequencyAmount"] == 1
    assert bare["frequencyUnit"] == "MONTHS"
    assert bare["category"] == "Lifestyle"
    assert bare["active"] is True


async def test_create_rejects_unknown_unit(client, vault):
    res = await client.post(
        "/api/v1/subscriptions",
        json={**SUBSCRIPTION, "frequencyUnit": "FORTNIGHTS"},
        headers=vault["headers"],
    )
    assert res.status_code == 400
    assert res.json()["error"]["code"] == "VALIDATION_ERROR"


async def test_create_rejects_negative_cost(client, vault):
    res = await client.post(
        "/api/v1/subscriptions", json={**SUBSCRIPTION, "cost": -1},
        headers=vault["headers"],
    )
    assert res.status_code == 400


async def test_requires_authentication(client):
    res = await client.get("/api/v1/subscriptions")
    assert res.status_code == 401


async def test_list_is_vault_scoped(client, vault, other_vault):
    await _create(client, vault["headers"])
    await _create(client, other_vault["headers"], name="Other")
    res = await client.get("/api/v1/subscriptions", headers=vault["headers"])
    names = [s["name"] for s in res.json()]
    assert names == ["Netflix"]


async def test_update_replaces_every_field(client, vault):
    created = await _create(client, vault["headers"])
    res = await client.put(
        f"/api/v1/subscriptions/{created['id']}",
        json={"name": "Netflix Premium", "cost": 45, "frequencyUnit": "YEARS"},
        headers=vault["headers"],
    )
    assert res.status_code == 200
    body = res.json()
    assert body["name"] == "Netflix Premium"
    assert body["frequencyUnit"] == "YEARS"
    # omitted fields reset to their defaults
    assert body["website"] == ""
    assert body["category"] == "Lifestyle"


async def test_update_other_vault_returns_404(client, vault, other_vault):
    created = await _create(client, vault["headers"])
    res = await client.put(
        f"/api/v1/subscriptions/{created['id']}", json=SUBSCRIPTION,
        headers=other_vault["headers"],
    )
    assert res.status_code == 404


async def test_delete_removes_subscription(client, vault):
    created = await _create(client, vault["headers"])
    res = await client.delete(
        f"/api/v1/subscriptions/{created['id']}", headers=vault["headers"],
    )
    assert res.status_code == 200
    assert res.json() == {"message": "Deleted"}

    res = await client.get("/api/v1/subscriptions", headers=vault["headers"])
    assert res.json() == []


async def test_delete_other_vault_returns_404(client, vault, other_vault):
    created = await _create(client, vault["headers"])
    res = await client.delete(
        f"/api/v1/subscriptions/{created['id']}", headers=other_vault["headers"],
    )
    assert res.status_code == 404

    res = await client.get("/api/v1/subscriptions", headers=vault["headers"])
    assert len(res.json()) == 1

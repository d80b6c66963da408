"""Tag route tests: CRUD with default colour and partial updates."""


async def _create(client, headers, **body):
    res = await client.post("/api/v1/tags", json=body, headers=headers)
    assert res.status_code == 201, res.text
    return res.json()


async def test_create_uses_default_color(client, vault):
    tag = await _create(client, vault["headers"], name="Video")
    assert tag["color"] == "#3B82F6"


async def test_create_keeps_given_color(client, vault):
    tag = await _create(client, vault["headers"], name="Music", color="#EC4899")
    assert tag["color"] == "#EC4899"


async def test_create_requires_name(client, vault):
    res = await client.post("/api/v1/tags", json={"name": ""}, headers=vault["headers"])
    assert res.status_code == 400


async def test_partial_update_keeps_unset_fields(client, vault):
    tag = await _create(client, vault["headers"], name="Video", color="#10B981")
    res = await client.put(
        f"/api/v1/tags/{tag['id']}", json={"name": "Streaming"},
        headers=vault["headers"],
    )
    assert res.status_code == 200
    assert res.json()["name"] == "Streaming"
    assert res.json()["color"] == "#10B981"


async def test_list_and_delete(client, vault, other_vault):
    tag = await _create(client, vault["headers"], name="Video")
    await _create(client, other_vault["headers"], name="Elsewhere")

    res = await client.get("/api/v1/tags", headers=vault["headers"])
    assert [t["name"] for t in res.json()] == ["Video"]

    res = await client.delete(f"/api/v1/tags/{tag['id']}", headers=vault["headers"])
    assert res.status_code == 200
    res = await client.get("/api/v1/tags", headers=vault["headers"])
    assert res.json() == []


async def test_delete_other_vault_tag_returns_404(client, vault, other_vault):
    tag = await _create(client, vault["headers"], name="Video")
    res = await client.delete(
        f"/api/v1/tags/{tag['id']}", headers=other_vault["headers"],
    )
    assert res.status_code == 404

"""Character preset routes — owner-scoped CRUD, favorites first."""


async def _preset(client, headers, **fields):
    response = await client.post(
        "/api/character-presets", json={"name": "Mara", **fields}, headers=headers,
    )
    assert response.status_code == 201
    return response.json()


async def test_favorites_listed_first_then_by_name(client, user, auth):
    await _preset(client, auth(user), name="Zed")
    await _preset(client, auth(user), name="Ana")
    await _preset(client, auth(user), name="Mara", is_favorite=True, role="pilot")

    items = (await client.get("/api/character-presets", headers=auth(user))).json()["items"]
    assert [p["name"] for p in items] == ["Mara", "Ana", "Zed"]
    assert items[0]["role"] == "pilot"


async def test_update_preset(client, user, auth):
    preset = await _preset(client, auth(user))
    response = await client.patch(
        f"/api/character-presets/{preset['id']}",
        json={"description": "a desert pilot", "is_favorite": True},
        headers=auth(user),
    )
    body = response.json()
    assert body["description"] == "a desert pilot"
    assert body["is_favorite"] is True
    assert body["name"] == "Mara"


async def test_other_users_presets_are_missing(client, user, other_user, auth):
    preset = await _preset(client, auth(user))
    url = f"/api/character-presets/{preset['id']}"
    assert (await client.get(url, headers=auth(other_user))).status_code == 404
    assert (await client.delete(url, headers=auth(other_user))).status_code == 404
    assert (await client.get("/api/character-presets", headers=auth(other_user))).json()["items"] == []


async def test_delete_preset(client, user, auth):
    preset = await _preset(client, auth(user))
    url = f"/api/character-presets/{preset['id']}"
    assert (await client.delete(url, headers=auth(user))).status_code == 204
    assert (await client.get(url, headers=auth(user))).status_code == 404


async def test_blank_name_rejected(client, user, auth):
    response = await client.post("/api/character-presets", json={"name": ""}, headers=auth(user))
    assert response.status_code == 400

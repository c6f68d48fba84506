"""Collection routes — creation rules, read access and owner-only changes."""

import uuid

from app.models.prompt import Prompt


async def _collection(client, headers, **fields):
    body = {"name": "Moodboard", **fields}
    response = await client.post("/api/collections", json=body, headers=headers)
    assert response.status_code == 201
    return response.json()


async def test_create_user_collection(client, user, auth):
    collection = await _collection(client, auth(user), name="  Portraits  ")
    assert collection["name"] == "Portraits"
    assert collection["type"] == "user"
    assert collection["user_id"] == str(user.id)


async def test_global_collection_needs_super_admin(client, user, super_admin, auth):
    denied = await client.post(
        "/api/collections", json={"name": "Featured", "type": "global"}, headers=auth(user),
    )
    assert denied.status_code == 403
    created = await _collection(client, auth(super_admin), name="Featured", type="global")
    assert created["type"] == "global"


async def test_community_collection_requires_community_id(client, super_admin, auth):
    response = await client.post(
        "/api/collections", json={"name": "Club", "type": "community"}, headers=auth(super_admin),
    )
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "INVALID_REQUEST"


async def test_community_collection_requires_admin(client, user, auth):
    response = await client.post(
        "/api/collections",
        json={"name": "Club", "type": "community", "community_id": str(uuid.uuid4())},
        headers=auth(user),
    )
    assert response.status_code == 403


async def test_private_collection_access(client, user, other_user, super_admin, auth):
    collection = await _collection(client, auth(user))
    url = f"/api/collections/{collection['id']}"
    assert (await client.get(url, headers=auth(user))).status_code == 200
    assert (await client.get(url, headers=auth(other_user))).status_code == 403
    assert (await client.get(url)).status_code == 403
    assert (await client.get(url, headers=auth(super_admin))).status_code == 200


async def test_public_collection_readable_anonymously(client, user, auth):
    collection = await _collection(client, auth(user), is_public=True)
    response = await client.get(f"/api/collections/{collection['id']}")
    assert response.json()["id"] == collection["id"]


async def test_list_shows_own_and_public(client, user, other_user, auth):
    mine = await _collection(client, auth(user), name="mine")
    await _collection(client, auth(other_user), name="theirs private")
    public = await _collection(client, auth(other_user), name="theirs public", is_public=True)

    items = (await client.get("/api/collections", headers=auth(user))).json()["items"]
    assert {c["id"] for c in items} == {mine["id"], public["id"]}


async def test_collection_prompts_hide_private_from_visitors(
    client, test_db, user, other_user, auth,
):
    collection = await _collection(client, auth(user), is_public=True)
    collection_id = uuid.UUID(collection["id"])
    test_db.add_all([
        Prompt(id="PRMPTPUB01", name="Open", prompt_content="a fox",
               user_id=user.id, collection_id=collection_id, is_public=True),
        Prompt(id="PRMPTPRV01", name="Hidden", prompt_content="a cat",
               user_id=user.id, collection_id=collection_id, is_public=False),
    ])
    await test_db.commit()
    url = f"/api/collections/{collection['id']}/prompts"

    owner_view = (await client.get(url, headers=auth(user))).json()["items"]
    assert {p["id"] for p in owner_view} == {"PRMPTPUB01", "PRMPTPRV01"}

    visitor_view = (await client.get(url, headers=auth(other_user))).json()["items"]
    assert [p["id"] for p in visitor_view] == ["PRMPTPUB01"]


async def test_only_owner_updates_and_deletes(client, user, other_user, auth):
    collection = await _collection(client, auth(user), is_public=True)
    url = f"/api/collections/{collection['id']}"

    denied = await client.patch(url, json={"name": "hijacked"}, headers=auth(other_user))
    assert denied.status_code == 403

    renamed = await client.patch(url, json={"name": "Renamed"}, headers=auth(user))
    assert renamed.json()["name"] == "Renamed"

    assert (await client.delete(url, headers=auth(other_user))).status_code == 403
    assert (await client.delete(url, headers=auth(user))).status_code == 204
    assert (await client.get(url, headers=auth(user))).status_code == 404

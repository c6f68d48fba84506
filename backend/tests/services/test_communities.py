"""Community routes — creation, hierarchy, membership and invites.

Tests cover:
    - Top-level creation restricted to community admins
    - Sub-community level/path derivation and the depth limit
    - Hierarchy tree endpoint
    - Join / leave / member listing permissions
    - Invite accept increments current_uses; exhausted invites are rejected
"""

from sqlalchemy import select

from app.core.community_paths import MAX_COMMUNITY_LEVEL
from app.models.community import CommunityInvite, UserCommunity


async def _create_root(client, headers, slug="ai-art"):
    response = await client.post(
        "/api/communities", json={"name": "AI Art", "slug": slug}, headers=headers,
    )
    assert response.status_code == 201
    return response.json()


async def _create_child(client, headers, parent_id, slug):
    return await client.post(
        f"/api/communities/{parent_id}/sub-communities",
        json={"name": slug.title(), "slug": slug},
        headers=headers,
    )


# ─── Creation ────────────────────────────────────────────────────

async def test_regular_user_cannot_create_community(client, user, auth):
    response = await client.post(
        "/api/communities", json={"name": "Nope", "slug": "nope"}, headers=auth(user),
    )
    assert response.status_code == 403
    assert response.json()["error"]["code"] == "FORBIDDEN"


async def test_create_root_community(client, community_admin, auth):
    body = await _create_root(client, auth(community_admin))
    assert body["level"] == 0
    assert body["path"] == f"/{body['id']}/"
    assert body["parent_community_id"] is None


async def test_creator_becomes_admin_member(client, test_db, community_admin, auth):
    body = await _create_root(client, auth(community_admin))
    result = await test_db.execute(
        select(UserCommunity).where(UserCommunity.user_id == community_admin.id),
    )
    membership = result.scalar_one()
    assert str(membership.community_id) == body["id"]
    assert membership.role == "admin"


async def test_duplicate_slug_is_conflict(client, community_admin, auth):
    await _create_root(client, auth(community_admin))
    response = await client.post(
        "/api/communities", json={"name": "Again", "slug": "ai-art"},
        headers=auth(community_admin),
    )
    assert response.status_code == 409


# ─── Sub-communities ─────────────────────────────────────────────

async def test_sub_community_path_and_level(client, community_admin, auth):
    root = await _create_root(client, auth(community_admin))
    response = await _create_child(client, auth(community_admin), root["id"], "portraits")
    assert response.status_code == 201
    child = response.json()
    assert child["level"] == 1
    assert child["parent_community_id"] == root["id"]
    assert child["path"] == f"{root['path']}{child['id']}/"


async def test_sub_community_requires_admin_of_parent(client, community_admin, user, auth):
    root = await _create_root(client, auth(community_admin))
    response = await _create_child(client, auth(user), root["id"], "portraits")
    assert response.status_code == 403


async def test_depth_limit(client, community_admin, auth):
    parent = await _create_root(client, auth(community_admin))
    for level in range(1, MAX_COMMUNITY_LEVEL + 1):
        response = await _create_child(
            client, auth(community_admin), parent["id"], f"level-{level}",
        )
        assert response.status_code == 201
        parent = response.json()
    assert parent["level"] == MAX_COMMUNITY_LEVEL

    response = await _create_child(client, auth(community_admin), parent["id"], "too-deep")
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "HIERARCHY_TOO_DEEP"


async def test_hierarchy_tree(client, community_admin, auth):
    root = await _create_root(client, auth(community_admin))
    headers = auth(community_admin)
    zeta = (await _create_child(client, headers, root["id"], "zeta")).json()
    await _create_child(client, headers, root["id"], "alpha")
    await _create_child(client, headers, zeta["id"], "zeta-inner")

    tree = (await client.get(f"/api/communities/{root['id']}/hierarchy")).json()
    assert tree["id"] == root["id"]
    assert [c["slug"] for c in tree["children"]] == ["alpha", "zeta"]
    assert [c["slug"] for c in tree["children"][1]["children"]] == ["zeta-inner"]


async def test_unknown_community_is_404(client):
    response = await client.get("/api/communities/00000000-0000-0000-0000-000000000000")
    assert response.status_code == 404


# ─── Membership ──────────────────────────────────────────────────

async def test_join_and_leave(client, community_admin, user, auth):
    root = await _create_root(client, auth(community_admin))

    joined = await client.post(f"/api/communities/{root['id']}/join", headers=auth(user))
    assert joined.status_code == 201
    assert joined.json()["role"] == "member"

    again = await client.post(f"/api/communities/{root['id']}/join", headers=auth(user))
    assert again.status_code == 400
    assert again.json()["error"]["code"] == "ALREADY_MEMBER"

    left = await client.delete(f"/api/communities/{root['id']}/leave", headers=auth(user))
    assert left.status_code == 204


async def test_members_visible_to_members_only(client, community_admin, user, other_user, auth):
    root = await _create_root(client, auth(community_admin))
    await client.post(f"/api/communities/{root['id']}/join", headers=auth(user))

    listed = await client.get(f"/api/communities/{root['id']}/members", headers=auth(user))
    assert listed.status_code == 200
    usernames = {m["username"] for m in listed.json()["members"]}
    assert usernames == {"carol", "alice"}

    hidden = await client.get(f"/api/communities/{root['id']}/members", headers=auth(other_user))
    assert hidden.status_code == 403


async def test_admin_promotes_member(client, community_admin, user, auth):
    root = await _create_root(client, auth(community_admin))
    await client.post(f"/api/communities/{root['id']}/join", headers=auth(user))
    response = await client.patch(
        f"/api/communities/{root['id']}/members/{user.id}/role",
        json={"role": "admin"}, headers=auth(community_admin),
    )
    assert response.status_code == 200
    assert response.json()["role"] == "admin"


# ─── Invites ─────────────────────────────────────────────────────

async def test_invite_accept_increments_uses(client, test_db, community_admin, user, auth):
    root = await _create_root(client, auth(community_admin))
    invite = (await client.post(
        f"/api/communities/{root['id']}/invites",
        json={"max_uses": 2}, headers=auth(community_admin),
    )).json()

    inspected = await client.get(f"/api/invites/{invite['code']}")
    assert inspected.status_code == 200
    assert inspected.json()["community"]["id"] == root["id"]

    accepted = await client.post(f"/api/invites/{invite['code']}/accept", headers=auth(user))
    assert accepted.status_code == 201
    assert accepted.json()["membership"]["community_id"] == root["id"]

    row = (await test_db.execute(
        select(CommunityInvite).where(CommunityInvite.code == invite["code"]),
    )).scalar_one()
    assert row.current_uses == 1


async def test_exhausted_invite_rejected(client, community_admin, user, other_user, auth):
    root = await _create_root(client, auth(community_admin))
    invite = (await client.post(
        f"/api/communities/{root['id']}/invites",
        json={"max_uses": 1}, headers=auth(community_admin),
    )).json()

    first = await client.post(f"/api/invites/{invite['code']}/accept", headers=auth(user))
    assert first.status_code == 201

    second = await client.post(f"/api/invites/{invite['code']}/accept", headers=auth(other_user))
    assert second.status_code == 400
    assert second.json()["error"]["code"] == "INVITE_EXHAUSTED"


async def test_deactivated_invite_rejected(client, community_admin, user, auth):
    root = await _create_root(client, auth(community_admin))
    invite = (await client.post(
        f"/api/communities/{root['id']}/invites", json={}, headers=auth(community_admin),
    )).json()

    revoked = await client.delete(f"/api/invites/{invite['code']}", headers=auth(community_admin))
    assert revoked.json()["is_active"] is False

    response = await client.post(f"/api/invites/{invite['code']}/accept", headers=auth(user))
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "INVITE_INACTIVE"


async def test_unknown_invite_is_404(client):
    response = await client.get("/api/invites/does-not-exist")
    assert response.status_code == 404

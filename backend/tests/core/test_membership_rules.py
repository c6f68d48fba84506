"""Membership Rules — tests for invite usability and collection access.

Tests cover:
    - Inactive, expired and exhausted invites
    - Collection access across roles, ownership and visibility
    - can_modify_owned
"""

from datetime import datetime, timedelta, timezone

from app.core.membership_rules import (
    can_access_collection,
    can_modify_owned,
    check_invite_usable,
)

NOW = datetime(2024, 3, 15, 12, 0, tzinfo=timezone.utc)


# ─── Invites ─────────────────────────────────────────────────────

def test_usable_invite():
    assert check_invite_usable(True, NOW + timedelta(days=1), 0, 5, now=NOW) is None
    assert check_invite_usable(True, None, 4, 5, now=NOW) is None


def test_inactive_invite():
    assert check_invite_usable(False, None, 0, 5, now=NOW)["error_code"] == "INVITE_INACTIVE"


def test_expired_invite():
    err = check_invite_usable(True, NOW - timedelta(seconds=1), 0, 5, now=NOW)
    assert err["error_code"] == "INVITE_EXPIRED"


def test_exhausted_invite():
    assert check_invite_usable(True, None, 5, 5, now=NOW)["error_code"] == "INVITE_EXHAUSTED"


# ─── Collections ─────────────────────────────────────────────────

def _access(**overrides):
    params = {
        "user_id": "u1", "user_role": "user", "owner_id": "owner",
        "collection_type": "user", "is_public": False,
    }
    params.update(overrides)
    return can_access_collection(**params)


def test_super_admin_sees_everything():
    assert _access(user_role="super_admin")


def test_owner_sees_private_collection():
    assert _access(user_id="owner")


def test_public_collection_visible_to_anonymous():
    assert _access(user_id=None, user_role=None, is_public=True)


def test_private_collection_hidden_from_anonymous():
    assert not _access(user_id=None, user_role=None)


def test_community_collection_requires_membership():
    assert not _access(collection_type="community")
    assert _access(collection_type="community", is_community_member=True)


def test_global_collection_requires_community_admin():
    assert not _access(collection_type="global")
    assert _access(collection_type="global", user_role="community_admin")


def test_can_modify_owned():
    assert can_modify_owned(user_id="a", user_role="user", owner_id="a")
    assert can_modify_owned(user_id="b", user_role="super_admin", owner_id="a")
    assert not can_modify_owned(user_id="b", user_role="community_admin", owner_id="a")

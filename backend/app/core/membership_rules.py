"""Membership Rules — pure invite validity and collection access decisions.

Invariants:
    - An invite is usable iff active, not expired, and current_uses < max_uses
    - super_admin passes every access check
    - Collection access order: super admin, owner, public, community member
      (community collections), community_admin role (global collections)

Design Decisions:
    - Inputs are primitives / small dicts so rules are testable without a DB;
      membership facts are looked up by the shell and passed in
"""

from datetime import datetime, timezone


def check_invite_usable(
    is_active: bool,
    expires_at: datetime | None,
    current_uses: int,
    max_uses: int,
    now: datetime | None = None,
) -> dict | None:
    """Return an error descriptor when the invite cannot be used."""
    now = now or datetime.now(timezone.utc)
    if not is_active:
        return {
            "status": "error",
            "error_code": "INVITE_INACTIVE",
            "message": "Invite is no longer active",
        }
    if expires_at is not None and expires_at < now:
        return {
            "status": "error",
            "error_code": "INVITE_EXPIRED",
            "message": "Invite has expired",
        }
    if current_uses >= max_uses:
        return {
            "status": "error",
            "error_code": "INVITE_EXHAUSTED",
            "message": "Invite has reached maximum uses",
        }
    return None


def can_access_collection(
    *,
    user_id: str | None,
    user_role: str | None,
    owner_id: str,
    collection_type: str,
    is_public: bool,
    is_community_member: bool = False,
) -> bool:
    """Decide read access to a collection."""
    if user_role == "super_admin":
        return True
    if user_id is not None and user_id == owner_id:
        return True
    if is_public:
        return True
    if user_id is None:
        return False
    if collection_type == "community":
        return is_community_member
    if collection_type == "global":
        return user_role == "community_admin"
    return False


def can_modify_owned(
    *, user_id: str, user_role: str, owner_id: str,
) -> bool:
    """Owner or super admin may modify user-owned rows (prompts, collections)."""
    return user_role == "super_admin" or user_id == owner_id

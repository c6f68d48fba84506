"""Community Hierarchy Paths — pure level/path arithmetic for the materialized-path tree.

Invariants:
    - Root node: level 0, path "/{id}/"
    - Child node: level = parent.level + 1, path = parent.path + "{id}/"
    - MAX_COMMUNITY_LEVEL (4) is the single source of truth for depth

Design Decisions:
    - Pure functions over ORM instances: callers pass primitives, so the migration
      script and the services share one implementation
    - Paths use "/" separators around every id so prefix matches never hit
      partial ids
"""

from uuid import UUID


MAX_COMMUNITY_LEVEL: int = 4


def root_path(community_id: UUID | str) -> str:
    """Path of a top-level community."""
    return f"/{community_id}/"


def child_path(parent_path: str, child_id: UUID | str) -> str:
    """Path of a node placed under parent_path."""
    base = parent_path if parent_path.endswith("/") else parent_path + "/"
    return f"{base}{child_id}/"


def validate_child_level(parent_level: int) -> dict | None:
    """Reject children that would exceed the maximum depth."""
    if parent_level + 1 > MAX_COMMUNITY_LEVEL:
        return {
            "status": "error",
            "error_code": "HIERARCHY_TOO_DEEP",
            "message": (
                f"Sub-communities are limited to {MAX_COMMUNITY_LEVEL + 1} levels "
                f"(parent is at level {parent_level})."
            ),
        }
    return None


def needs_normalization(level: int | None, path: str | None) -> bool:
    """A community row missing hierarchy data (pre-hierarchy legacy rows)."""
    return level is None or not path


def build_tree(root: dict, descendants: list[dict]) -> dict:
    """Nest flat descendant dicts (each with id, parent_community_id) under root.

    Children are ordered by name. Nodes whose parent is missing from the input
    are dropped.
    """
    by_parent: dict[str, list[dict]] = {}
    for node in descendants:
        by_parent.setdefault(str(node["parent_community_id"]), []).append(node)

    def attach(node: dict) -> dict:
        children = sorted(
            by_parent.get(str(node["id"]), []), key=lambda n: n.get("name") or "",
        )
        return {**node, "children": [attach(c) for c in children]}

    return attach(root)

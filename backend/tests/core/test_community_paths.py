"""Community Paths — tests for materialized-path arithmetic and tree building.

Tests cover:
    - root_path / child_path formats
    - Depth limit at MAX_COMMUNITY_LEVEL
    - Legacy row detection
    - build_tree ordering and orphan handling
"""

from app.core.community_paths import (
    MAX_COMMUNITY_LEVEL,
    build_tree,
    child_path,
    needs_normalization,
    root_path,
    validate_child_level,
)


def test_root_and_child_paths():
    assert root_path("a") == "/a/"
    assert child_path("/a/", "b") == "/a/b/"
    assert child_path("/a", "b") == "/a/b/"


def test_child_level_limit():
    assert validate_child_level(MAX_COMMUNITY_LEVEL - 1) is None
    err = validate_child_level(MAX_COMMUNITY_LEVEL)
    assert err["error_code"] == "HIERARCHY_TOO_DEEP"


def test_needs_normalization():
    assert needs_normalization(None, "/a/")
    assert needs_normalization(0, "")
    assert not needs_normalization(0, "/a/")


def test_build_tree_orders_children_and_drops_orphans():
    root = {"id": "r", "name": "Root", "parent_community_id": None}
    descendants = [
        {"id": "b", "name": "Beta", "parent_community_id": "r"},
        {"id": "a", "name": "Alpha", "parent_community_id": "r"},
        {"id": "c", "name": "Child", "parent_community_id": "a"},
        {"id": "o", "name": "Orphan", "parent_community_id": "missing"},
    ]
    tree = build_tree(root, descendants)
    assert [c["name"] for c in tree["children"]] == ["Alpha", "Beta"]
    assert [c["name"] for c in tree["children"][0]["children"]] == ["Child"]
    assert tree["children"][1]["children"] == []
    names = {"Root"}
    stack = list(tree["children"])
    while stack:
        node = stack.pop()
        names.add(node["name"])
        stack.extend(node["children"])
    assert "Orphan" not in names

"""Unit tests for roles and the menu permission catalog."""

import json

from freyn.core.permissions import (
    WorkspaceRole,
    can_access,
    coerce_invite_role,
    get_menu_config,
    load_menu_config,
    normalize_permissions,
)


def test_bundled_catalog_loads():
    config = get_menu_config()
    assert "dashboard" in config.menu_keys
    assert "portfolio" in config.menu_keys
    assert set(config.member_defaults) <= set(config.menu_keys)


def test_load_drops_unknown_and_duplicate_default_keys(tmp_path):
    path = tmp_path / "menus.json"
    path.write_text(json.dumps({
        "menus": [{"key": "a", "label": "A"}, {"key": "b"}],
        "defaultPermissions": {"manager": ["a", "zzz", "a", "b"], "member": [1, "b"]},
    }))
    config = load_menu_config(str(path))
    assert config.menu_keys == ("a", "b")
    assert config.menus[1].label == "b"
    assert config.manager_defaults == ("a", "b")
    assert config.member_defaults == ("b",)


def test_normalize_fills_missing_roles_with_defaults():
    config = get_menu_config()
    result = normalize_permissions(None, config)
    assert result["owner"] == list(config.menu_keys)
    assert result["manager"] == list(config.manager_defaults)
    assert result["member"] == list(config.member_defaults)


def test_normalize_keeps_explicit_lists_and_filters_them():
    config = get_menu_config()
    result = normalize_permissions(
        {"owner": [], "member": ["clients", "nope", "clients"], "manager": "bad"}, config,
    )
    # Owner always gets everything, whatever is stored.
    assert result["owner"] == list(config.menu_keys)
    assert result["member"] == ["clients"]
    assert result["manager"] == list(config.manager_defaults)


def test_can_access():
    perms = {"member": ["projects"], "manager": ["clients"]}
    assert can_access(WorkspaceRole.OWNER, None, "anything")
    assert can_access("member", perms, "projects")
    assert not can_access("member", perms, "clients")
    assert not can_access(None, perms, "projects")
    assert not can_access("member", None, "projects")


def test_invite_role_coercion():
    assert coerce_invite_role("Manager") == WorkspaceRole.MANAGER
    assert coerce_invite_role("owner") == WorkspaceRole.MEMBER
    assert coerce_invite_role(None) == WorkspaceRole.MEMBER


def test_normalize_is_idempotent():
    config = get_menu_config()
    once = normalize_permissions({"manager": ["invoices", "nope"], "member": []}, config)
    assert normalize_permissions(once, config) == once
    assert once["member"] == []

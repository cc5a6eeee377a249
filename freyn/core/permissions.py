"""Workspace roles and the menu-key permission catalog.

The catalog is read once from a static JSON document and kept as an
immutable ``MenuConfig`` value. Routes receive it through ``get_menu_config``.
"""

import json
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from enum import StrEnum
from functools import lru_cache

from freyn.core.config import get_settings


class WorkspaceRole(StrEnum):
    OWNER = "owner"
    MANAGER = "manager"
    MEMBER = "member"


EDITABLE_ROLES = (WorkspaceRole.MANAGER, WorkspaceRole.MEMBER)

ROLE_LABELS = {
    WorkspaceRole.OWNER: "Owner",
    WorkspaceRole.MANAGER: "Manager",
    WorkspaceRole.MEMBER: "Member",
}


@dataclass(frozen=True)
class MenuItem:
    key: str
    label: str


@dataclass(frozen=True)
class MenuConfig:
    menus: tuple[MenuItem, ...]
    manager_defaults: tuple[str, ...]
    member_defaults: tuple[str, ...]

    @property
    def menu_keys(self) -> tuple[str, ...]:
        return tuple(item.key for item in self.menus)

    def defaults_for(self, role: str) -> tuple[str, ...]:
        if role == WorkspaceRole.OWNER:
            return self.menu_keys
        if role == WorkspaceRole.MANAGER:
            return self.manager_defaults
        return self.member_defaults

    def as_list(self) -> list[dict]:
        return [{"key": item.key, "label": item.label} for item in self.menus]


def load_menu_config(path: str) -> MenuConfig:
    with open(path, encoding="utf-8") as fh:
        raw = json.load(fh)

    menus = tuple(
        MenuItem(key=str(entry["key"]), label=str(entry.get("label", entry["key"])))
        for entry in raw.get("menus", [])
    )
    known = {item.key for item in menus}
    defaults = raw.get("defaultPermissions", {})
    return MenuConfig(
        menus=menus,
        manager_defaults=_filter_keys(defaults.get("manager", []), known),
        member_defaults=_filter_keys(defaults.get("member", []), known),
    )


@lru_cache
def get_menu_config() -> MenuConfig:
    return load_menu_config(get_settings().menu_config_path)


def _filter_keys(values: Iterable, known: set[str]) -> tuple[str, ...]:
    """Keep known string keys, first-seen order, no duplicates."""
    seen: list[str] = []
    for value in values:
        if isinstance(value, str) and value in known and value not in seen:
            seen.append(value)
    return tuple(seen)


def normalize_permissions(
    raw: Mapping | None, config: MenuConfig
) -> dict[str, list[str]]:
    """Return a complete ``{owner, manager, member}`` permission map.

    Owner always gets the full catalog. A role whose entry is not a list
    falls back to its configured default.
    """
    raw = raw if isinstance(raw, Mapping) else {}
    known = set(config.menu_keys)

    result: dict[str, list[str]] = {WorkspaceRole.OWNER.value: list(config.menu_keys)}
    for role in EDITABLE_ROLES:
        value = raw.get(role.value)
        if isinstance(value, (list, tuple)):
            result[role.value] = list(_filter_keys(value, known))
        else:
            result[role.value] = list(config.defaults_for(role))
    return result


def can_access(role: str | None, permissions: Mapping | None, menu_key: str) -> bool:
    if role == WorkspaceRole.OWNER:
        return True
    if not role or not isinstance(permissions, Mapping):
        return False
    allowed = permissions.get(role)
    return isinstance(allowed, (list, tuple)) and menu_key in allowed


def coerce_invite_role(role: str | None) -> WorkspaceRole:
    """Invitations and role edits may only grant ``member`` or ``manager``."""
    value = (role or "").strip().lower()
    if value == WorkspaceRole.MANAGER:
        return WorkspaceRole.MANAGER
    return WorkspaceRole.MEMBER

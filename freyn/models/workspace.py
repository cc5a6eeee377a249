"""Workspace model (the tenant boundary) and its membership rows."""

import uuid
from datetime import datetime
from enum import StrEnum
from typing import Any

from sqlalchemy import JSON, UniqueConstraint
from sqlmodel import Column, Field, SQLModel

from freyn.core.permissions import WorkspaceRole
from freyn.models.base import ApiModel, TimestampMixin, new_uuid, utcnow


class WorkspacePlan(StrEnum):
    FREE = "free"
    PRO = "pro"
    BUSINESS = "business"


class WorkspaceStatus(StrEnum):
    ACTIVE = "active"
    SUSPENDED = "suspended"


class Workspace(TimestampMixin, SQLModel, table=True):
    __tablename__ = "workspaces"

    id: uuid.UUID = Field(default_factory=new_uuid, primary_key=True)
    name: str = Field(max_length=120, nullable=False)
    slug: str = Field(max_length=100, unique=True, nullable=False, index=True)
    owner_id: uuid.UUID = Field(foreign_key="users.id", nullable=False, index=True)
    plan: WorkspacePlan = Field(default=WorkspacePlan.FREE)
    status: WorkspaceStatus = Field(default=WorkspaceStatus.ACTIVE)

    # {"owner": [...], "manager": [...], "member": [...]}
    permissions: dict = Field(
        default_factory=dict, sa_column=Column(JSON, nullable=False),
    )


class WorkspaceMember(SQLModel, table=True):
    """One row per (workspace, user) membership, the owner included."""

    __tablename__ = "workspace_members"
    __table_args__ = (UniqueConstraint("workspace_id", "user_id"),)

    id: uuid.UUID = Field(default_factory=new_uuid, primary_key=True)
    workspace_id: uuid.UUID = Field(foreign_key="workspaces.id", nullable=False, index=True)
    user_id: uuid.UUID = Field(foreign_key="users.id", nullable=False, index=True)
    role: WorkspaceRole = Field(default=WorkspaceRole.MEMBER)
    joined_at: datetime = Field(default_factory=utcnow, nullable=False)
    invited_by: uuid.UUID | None = Field(default=None, foreign_key="users.id")


# ── Pydantic schemas ─────────────────────────────────────────

class WorkspaceRead(ApiModel):
    id: uuid.UUID
    name: str
    slug: str
    plan: WorkspacePlan
    status: WorkspaceStatus
    owner_id: uuid.UUID | None = None
    owner_name: str = ""
    permissions: dict[str, list[str]] | None = None


class WorkspaceUpdate(ApiModel):
    name: str | None = None


class WorkspaceListItem(ApiModel):
    id: uuid.UUID
    name: str
    slug: str
    role: WorkspaceRole
    joined_at: datetime | None = None
    is_owner: bool
    plan: WorkspacePlan
    status: WorkspaceStatus


class SwitchRequest(ApiModel):
    workspace_id: str | None = None


class MemberRead(ApiModel):
    id: uuid.UUID
    full_name: str
    email: str
    role: WorkspaceRole
    joined_at: datetime | None = None


class MemberInvite(ApiModel):
    email: str | None = None
    role: str | None = None


class MemberUpdate(ApiModel):
    member_id: str | None = None
    role: str | None = None


class MemberRemove(ApiModel):
    member_id: str | None = None


class RoleRead(ApiModel):
    key: WorkspaceRole
    name: str
    permissions: list[str]
    editable: bool


class MenuRead(ApiModel):
    key: str
    label: str


class PermissionsRead(ApiModel):
    roles: list[RoleRead]
    menus: list[MenuRead]
    permissions: dict[str, list[str]]


class PermissionsUpdate(ApiModel):
    role: str | None = None
    permissions: Any = None

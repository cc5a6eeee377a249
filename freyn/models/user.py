"""User model: identity record, may belong to several workspaces."""

import uuid
from datetime import datetime

from sqlmodel import Field, SQLModel

from freyn.core.permissions import WorkspaceRole
from freyn.models.base import ApiModel, TimestampMixin, new_uuid


class User(TimestampMixin, SQLModel, table=True):
    __tablename__ = "users"

    id: uuid.UUID = Field(default_factory=new_uuid, primary_key=True)
    # Short numeric public id (5 digits)
    user_id: str = Field(max_length=5, unique=True, nullable=False, index=True)
    full_name: str = Field(max_length=255, nullable=False)
    email: str = Field(max_length=320, unique=True, nullable=False, index=True)
    password_hash: str = Field(nullable=False)
    phone: str = Field(default="", max_length=50)
    bio: str = Field(default="", max_length=500)

    # Primary (active) workspace. Not a foreign key: workspaces.owner_id
    # already points back at users.
    workspace_id: uuid.UUID | None = Field(default=None, nullable=True, index=True)
    workspace_role: WorkspaceRole | None = Field(default=None)
    workspace_joined_at: datetime | None = Field(default=None)


# ── Pydantic schemas ─────────────────────────────────────────

class RegisterRequest(ApiModel):
    full_name: str = ""
    email: str = ""
    password: str = ""


class LoginRequest(ApiModel):
    email: str = ""
    password: str = ""


class ProfileUpdate(ApiModel):
    full_name: str | None = None
    email: str | None = None
    phone: str | None = None
    bio: str | None = None


class MembershipRead(ApiModel):
    workspace_id: uuid.UUID
    role: WorkspaceRole
    joined_at: datetime | None = None


class UserRead(ApiModel):
    """Never carries the password hash."""
    id: uuid.UUID
    user_id: str
    full_name: str
    email: str
    phone: str = ""
    bio: str = ""
    workspace_id: uuid.UUID | None = None
    workspace_role: WorkspaceRole | None = None
    workspace_joined_at: datetime | None = None
    workspaces: list[MembershipRead] = []
    created_at: datetime
    updated_at: datetime

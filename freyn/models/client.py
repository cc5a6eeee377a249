"""Client model: a customer record owned by a workspace."""

import uuid
from datetime import datetime

from sqlalchemy import UniqueConstraint
from sqlmodel import Field, SQLModel

from freyn.models.base import ApiModel, TimestampMixin, new_uuid


class Client(TimestampMixin, SQLModel, table=True):
    __tablename__ = "clients"
    __table_args__ = (UniqueConstraint("workspace_id", "client_id"),)

    id: uuid.UUID = Field(default_factory=new_uuid, primary_key=True)
    workspace_id: uuid.UUID = Field(foreign_key="workspaces.id", nullable=False, index=True)

    # External identifier, e.g. "C1718000000000"
    client_id: str = Field(max_length=64, nullable=False, index=True)
    client_name: str = Field(max_length=255, nullable=False)
    company_name: str = Field(default="", max_length=255)
    phone_number: str = Field(default="", max_length=50)
    email: str = Field(default="", max_length=320)
    address: str = Field(default="", max_length=1000)
    notes: str = Field(default="")


# ── Pydantic schemas ─────────────────────────────────────────

class ClientCreate(ApiModel):
    client_id: str | None = None
    client_name: str = ""
    company_name: str = ""
    phone_number: str = ""
    email: str = ""
    address: str = ""
    notes: str = ""


class ClientUpdate(ApiModel):
    client_name: str | None = None
    company_name: str | None = None
    phone_number: str | None = None
    email: str | None = None
    address: str | None = None
    notes: str | None = None


class ClientRead(ApiModel):
    id: uuid.UUID
    workspace_id: uuid.UUID
    client_id: str
    client_name: str
    company_name: str
    phone_number: str
    email: str
    address: str
    notes: str
    created_at: datetime
    updated_at: datetime

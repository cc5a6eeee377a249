"""Service model: a priced offering in the workspace catalog."""

import uuid
from datetime import datetime
from enum import StrEnum

from sqlalchemy import UniqueConstraint
from sqlmodel import Field, SQLModel

from freyn.models.base import ApiModel, TimestampMixin, new_uuid


class ServiceStatus(StrEnum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class Service(TimestampMixin, SQLModel, table=True):
    __tablename__ = "services"
    __table_args__ = (UniqueConstraint("workspace_id", "service_id"),)

    id: uuid.UUID = Field(default_factory=new_uuid, primary_key=True)
    workspace_id: uuid.UUID = Field(foreign_key="workspaces.id", nullable=False, index=True)

    # External identifier (millisecond timestamp unless supplied)
    service_id: str = Field(max_length=64, nullable=False, index=True)
    service_name: str = Field(max_length=255, nullable=False)
    description: str = Field(default="")
    service_price: float = Field(ge=0, nullable=False)
    duration_of_work: int = Field(ge=1, nullable=False)
    deliverables: str = Field(default="")
    unlimited_revision: bool = Field(default=False)
    total_revision: int | None = Field(default=None)
    status: ServiceStatus = Field(default=ServiceStatus.ACTIVE)


# ── Pydantic schemas ─────────────────────────────────────────

class ServiceCreate(ApiModel):
    service_id: str | None = None
    service_name: str = ""
    description: str = ""
    service_price: float | None = None
    duration_of_work: int | None = None
    deliverables: str = ""
    unlimited_revision: bool = False
    total_revision: int | None = None
    status: ServiceStatus = ServiceStatus.ACTIVE


class ServiceUpdate(ApiModel):
    service_name: str | None = None
    description: str | None = None
    service_price: float | None = None
    duration_of_work: int | None = None
    deliverables: str | None = None
    unlimited_revision: bool | None = None
    total_revision: int | None = None
    status: ServiceStatus | None = None


class ServiceRead(ApiModel):
    id: uuid.UUID
    workspace_id: uuid.UUID
    service_id: str
    service_name: str
    description: str
    service_price: float
    duration_of_work: int
    deliverables: str
    unlimited_revision: bool
    total_revision: int | None
    status: ServiceStatus
    created_at: datetime
    updated_at: datetime

"""Project model: an order for a client, with an append-only comment thread."""

import uuid
from datetime import datetime
from enum import StrEnum

from sqlalchemy import JSON, Text, UniqueConstraint
from sqlmodel import Column, Field, SQLModel

from freyn.models.base import ApiModel, TimestampMixin, new_uuid


class ProjectStatus(StrEnum):
    TODO = "to do"
    IN_PROGRESS = "in progress"
    WAITING_FOR_PAYMENT = "waiting for payment"
    IN_REVIEW = "in review"
    REVISION = "revision"
    DONE = "done"


STATUS_LABELS = {
    ProjectStatus.TODO: "To Do",
    ProjectStatus.IN_PROGRESS: "In Progress",
    ProjectStatus.WAITING_FOR_PAYMENT: "Waiting for Payment",
    ProjectStatus.IN_REVIEW: "In Review",
    ProjectStatus.REVISION: "Revision",
    ProjectStatus.DONE: "Done",
}


class Project(TimestampMixin, SQLModel, table=True):
    __tablename__ = "projects"
    __table_args__ = (UniqueConstraint("workspace_id", "number_order"),)

    id: uuid.UUID = Field(default_factory=new_uuid, primary_key=True)
    workspace_id: uuid.UUID = Field(foreign_key="workspaces.id", nullable=False, index=True)

    # External identifier, e.g. "FM-190626-48213"
    number_order: str = Field(max_length=32, nullable=False, index=True)
    project_name: str = Field(max_length=255, nullable=False)

    # Client snapshot
    client_id: str = Field(default="", max_length=64)
    client_name: str = Field(max_length=255, nullable=False)
    client_email: str = Field(default="", max_length=320)
    client_company: str = Field(default="", max_length=255)
    client_address: str = Field(default="", max_length=1000)
    client_phone: str = Field(default="", max_length=50)

    deadline: datetime = Field(nullable=False)
    brief: str = Field(default="", sa_column=Column(Text, nullable=False, server_default=""))
    price: float = Field(default=0, ge=0)
    quantity: int = Field(default=1, ge=1)
    discount: float = Field(default=0, ge=0)
    total_price: float = Field(default=0, ge=0)
    deliverables: str = Field(default="")
    invoice: str = Field(default="")
    linked_invoice_id: str = Field(default="", max_length=64)
    linked_invoice_number: str = Field(default="", max_length=64)
    service_id: str = Field(default="", max_length=64)
    status: ProjectStatus = Field(default=ProjectStatus.TODO)

    # Append-only client feedback thread
    comments: list = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    # Activity log, newest first
    logs: list = Field(default_factory=list, sa_column=Column(JSON, nullable=False))


# ── Pydantic schemas ─────────────────────────────────────────

class ProjectCreate(ApiModel):
    number_order: str | None = None
    project_name: str = ""
    client_id: str = ""
    client_name: str = ""
    client_email: str = ""
    client_company: str = ""
    client_address: str = ""
    client_phone: str = ""
    deadline: datetime | None = None
    brief: str = ""
    price: float | None = None
    quantity: int = 1
    discount: float = 0
    total_price: float | None = None
    deliverables: str = ""
    invoice: str = ""
    service_id: str = ""
    status: ProjectStatus = ProjectStatus.TODO


class ProjectUpdate(ApiModel):
    number_order: str | None = None
    project_name: str | None = None
    client_name: str | None = None
    client_phone: str | None = None
    deadline: datetime | None = None
    brief: str | None = None
    price: float | None = None
    quantity: int | None = None
    discount: float | None = None
    total_price: float | None = None
    deliverables: str | None = None
    invoice: str | None = None
    service_id: str | None = None
    status: ProjectStatus | None = None


class CommentCreate(ApiModel):
    content: str | None = None
    author_name: str | None = None
    author_email: str | None = None
    author_avatar: str | None = None
    is_client: bool = False


class CommentRead(ApiModel):
    id: str
    content: str
    author_name: str
    author_email: str
    author_avatar: str = ""
    is_client: bool = False
    created_at: datetime


class LogDetail(ApiModel):
    field: str
    label: str
    value_type: str
    previous_value: str | float | None = None
    new_value: str | float | None = None


class LogRead(ApiModel):
    type: str
    message: str
    status: str | None = None
    details: list[LogDetail] = []
    actor_id: str = ""
    actor_name: str = ""
    actor_email: str = ""
    created_at: datetime


class ProjectRead(ApiModel):
    id: uuid.UUID
    workspace_id: uuid.UUID
    number_order: str
    project_name: str
    client_id: str
    client_name: str
    client_email: str
    client_company: str
    client_address: str
    client_phone: str
    deadline: datetime
    brief: str
    price: float
    quantity: int
    discount: float
    total_price: float
    deliverables: str
    invoice: str
    linked_invoice_id: str
    linked_invoice_number: str
    service_id: str
    status: ProjectStatus
    comments: list[CommentRead] = []
    logs: list[LogRead] = []
    created_at: datetime
    updated_at: datetime


class PublicProjectRead(ApiModel):
    """Client-facing status page: no activity log, no internal links."""
    id: uuid.UUID
    number_order: str
    project_name: str
    client_name: str
    deadline: datetime
    brief: str
    total_price: float
    deliverables: str
    status: ProjectStatus
    comments: list[CommentRead] = []
    created_at: datetime
    updated_at: datetime

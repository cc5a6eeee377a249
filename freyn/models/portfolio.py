"""Portfolio model: the public page of a workspace (at most one each)."""

import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import JSON, Text
from sqlmodel import Column, Field, SQLModel

from freyn.models.base import ApiModel, TimestampMixin, new_uuid

SOCIAL_KEYS = (
    "email",
    "whatsapp",
    "youtube",
    "instagram",
    "tiktok",
    "linkedin",
    "facebook",
    "x",
    "threads",
)


class Portfolio(TimestampMixin, SQLModel, table=True):
    __tablename__ = "portfolios"

    id: uuid.UUID = Field(default_factory=new_uuid, primary_key=True)
    workspace_id: uuid.UUID = Field(
        foreign_key="workspaces.id", unique=True, nullable=False, index=True,
    )
    title: str = Field(max_length=140, nullable=False)
    description: str = Field(default="", sa_column=Column(Text, nullable=False, server_default=""))
    cover_image: str = Field(default="", sa_column=Column(Text, nullable=False, server_default=""))
    # Unique across all workspaces
    slug: str = Field(max_length=100, unique=True, nullable=False, index=True)
    links: list = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    socials: dict = Field(default_factory=dict, sa_column=Column(JSON, nullable=False))


# ── Pydantic schemas ─────────────────────────────────────────

class PortfolioLink(ApiModel):
    name: str
    url: str
    icon: str = ""


class Socials(ApiModel):
    email: str = ""
    whatsapp: str = ""
    youtube: str = ""
    instagram: str = ""
    tiktok: str = ""
    linkedin: str = ""
    facebook: str = ""
    x: str = ""
    threads: str = ""


class PortfolioWrite(ApiModel):
    title: str | None = None
    description: str | None = None
    cover_image: str | None = None
    slug: str | None = None
    links: Any = None
    socials: Any = None


class PortfolioRead(ApiModel):
    id: uuid.UUID
    workspace_id: uuid.UUID
    title: str
    description: str
    cover_image: str
    slug: str
    links: list[PortfolioLink]
    socials: Socials
    workspace_name: str = ""
    owner_name: str = ""
    created_at: datetime
    updated_at: datetime


class PortfolioOwner(ApiModel):
    full_name: str = ""
    bio: str = ""


class PublicPortfolioRead(ApiModel):
    id: uuid.UUID
    slug: str
    title: str
    description: str
    cover_image: str
    links: list[PortfolioLink]
    socials: Socials
    workspace_name: str = ""
    owner: PortfolioOwner


class SlugAvailability(ApiModel):
    available: bool

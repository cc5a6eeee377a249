"""Invoice model: billed-party snapshots, service line items, payment details."""

import uuid
from datetime import datetime
from enum import StrEnum
from typing import Annotated, Any, Literal

from pydantic import Field as SchemaField
from sqlalchemy import JSON, Text
from sqlmodel import Column, Field, SQLModel

from freyn.models.base import ApiModel, TimestampMixin, new_uuid


class InvoiceStatus(StrEnum):
    DRAFT = "draft"
    SENT = "sent"
    PAID = "paid"


class PaymentMethodType(StrEnum):
    BANK_TRANSFER = "bank_transfer"
    E_WALLET = "e_wallet"


class Invoice(TimestampMixin, SQLModel, table=True):
    __tablename__ = "invoices"

    id: uuid.UUID = Field(default_factory=new_uuid, primary_key=True)
    workspace_id: uuid.UUID = Field(foreign_key="workspaces.id", nullable=False, index=True)
    project_id: uuid.UUID | None = Field(default=None, foreign_key="projects.id", nullable=True)

    # External identifier, unique across all workspaces: "INV-DDMMYYYY###"
    invoice_number: str = Field(max_length=64, unique=True, nullable=False, index=True)
    invoice_date: datetime = Field(nullable=False)
    due_date: datetime = Field(nullable=False)
    status: InvoiceStatus = Field(default=InvoiceStatus.DRAFT, index=True)

    # Base64 data URL
    logo: str = Field(default="", sa_column=Column(Text, nullable=False, server_default=""))

    billed_by: dict = Field(default_factory=dict, sa_column=Column(JSON, nullable=False))
    billed_to: dict = Field(default_factory=dict, sa_column=Column(JSON, nullable=False))
    items: list = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    payment_method: dict = Field(default_factory=dict, sa_column=Column(JSON, nullable=False))

    terms: str = Field(default="")
    footer: str = Field(default="")
    subtotal: float = Field(default=0, ge=0)
    total: float = Field(default=0, ge=0)
    currency: str = Field(default="IDR", max_length=8)

    created_by: str = Field(default="", max_length=64)
    updated_by: str = Field(default="", max_length=64)


# ── Pydantic schemas ─────────────────────────────────────────

class BilledParty(ApiModel):
    name: str = ""
    email: str = ""
    phone: str = ""
    company: str = ""
    address: str = ""
    client_id: str = ""


class InvoiceItem(ApiModel):
    """Snapshot of a service line; subtotal is always quantity * price."""
    service_id: str
    service_name: str
    deliverables: str = ""
    quantity: float
    price: float
    subtotal: float


class BankDetails(ApiModel):
    name: str = ""
    account_name: str = ""
    account_number: str = ""


class EWalletDetails(ApiModel):
    provider: str = ""
    account_name: str = ""
    phone_number: str = ""


class BankTransferPayment(ApiModel):
    type: Literal["bank_transfer"] = "bank_transfer"
    bank: BankDetails = BankDetails()


class EWalletPayment(ApiModel):
    type: Literal["e_wallet"] = "e_wallet"
    ewallet: EWalletDetails = EWalletDetails()


PaymentMethod = Annotated[
    BankTransferPayment | EWalletPayment,
    SchemaField(discriminator="type"),
]


class InvoiceWrite(ApiModel):
    """Create / full-update body. Loose on purpose: sanitized server-side."""
    invoice_number: str | None = None
    invoice_date: Any = None
    due_date: Any = None
    status: Any = None
    logo: str | None = None
    billed_by: Any = None
    billed_to: Any = None
    items: Any = None
    terms: str | None = None
    footer: str | None = None
    payment_method: Any = None
    currency: str | None = None
    project_id: str | None = None


class InvoiceStatusUpdate(ApiModel):
    status: Any = None


class InvoiceRead(ApiModel):
    id: uuid.UUID
    workspace_id: uuid.UUID
    project_id: uuid.UUID | None = None
    invoice_number: str
    invoice_date: datetime
    due_date: datetime
    status: InvoiceStatus
    logo: str
    billed_by: BilledParty
    billed_to: BilledParty
    items: list[InvoiceItem]
    terms: str
    footer: str
    payment_method: PaymentMethod
    subtotal: float
    total: float
    currency: str
    created_by: str
    updated_by: str
    created_at: datetime
    updated_at: datetime

"""Import all models so SQLModel.metadata picks them up."""

from freyn.models.client import Client, ClientCreate, ClientRead, ClientUpdate
from freyn.models.invoice import (
    Invoice,
    InvoiceRead,
    InvoiceStatus,
    InvoiceStatusUpdate,
    InvoiceWrite,
    PaymentMethodType,
)
from freyn.models.portfolio import (
    Portfolio,
    PortfolioRead,
    PortfolioWrite,
    PublicPortfolioRead,
)
from freyn.models.project import (
    CommentCreate,
    CommentRead,
    Project,
    ProjectCreate,
    ProjectRead,
    ProjectStatus,
    ProjectUpdate,
)
from freyn.models.service import Service, ServiceCreate, ServiceRead, ServiceStatus, ServiceUpdate
from freyn.models.user import User, UserRead
from freyn.models.workspace import Workspace, WorkspaceMember, WorkspaceRead

__all__ = [
    "Client",
    "ClientCreate",
    "ClientRead",
    "ClientUpdate",
    "CommentCreate",
    "CommentRead",
    "Invoice",
    "InvoiceRead",
    "InvoiceStatus",
    "InvoiceStatusUpdate",
    "InvoiceWrite",
    "PaymentMethodType",
    "Portfolio",
    "PortfolioRead",
    "PortfolioWrite",
    "Project",
    "ProjectCreate",
    "ProjectRead",
    "ProjectStatus",
    "ProjectUpdate",
    "PublicPortfolioRead",
    "Service",
    "ServiceCreate",
    "ServiceRead",
    "ServiceStatus",
    "ServiceUpdate",
    "User",
    "UserRead",
    "Workspace",
    "WorkspaceMember",
    "WorkspaceRead",
]

"""V1 API router aggregation."""

from fastapi import APIRouter

from freyn.api.v1.auth import router as auth_router
from freyn.api.v1.clients import router as clients_router
from freyn.api.v1.invoices import router as invoices_router
from freyn.api.v1.portfolio import router as portfolio_router
from freyn.api.v1.projects import router as projects_router
from freyn.api.v1.public import router as public_router
from freyn.api.v1.services import router as services_router
from freyn.api.v1.workspace import router as workspace_router

v1_router = APIRouter(prefix="/v1")
v1_router.include_router(auth_router)
v1_router.include_router(workspace_router)
v1_router.include_router(clients_router)
v1_router.include_router(services_router)
v1_router.include_router(projects_router)
v1_router.include_router(invoices_router)
v1_router.include_router(portfolio_router)
v1_router.include_router(public_router)

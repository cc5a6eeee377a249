"""Unauthenticated, client-facing reads of invoices and project status."""

from fastapi import APIRouter, HTTPException, status
from sqlmodel import select

from freyn.api.deps import Session
from freyn.api.responses import Envelope, ok
from freyn.api.v1.invoices import InvoiceResult, invoice_lookup
from freyn.api.v1.projects import get_project_by_storage_id
from freyn.models.base import ApiModel
from freyn.models.invoice import Invoice, InvoiceRead
from freyn.models.project import PublicProjectRead

router = APIRouter(prefix="/public", tags=["public"])


class PublicProjectResult(ApiModel):
    project: PublicProjectRead


@router.get("/invoices/{invoice_ref}", response_model=Envelope[InvoiceResult])
async def get_public_invoice(invoice_ref: str, session: Session) -> Envelope[InvoiceResult]:
    result = await session.execute(select(Invoice).where(invoice_lookup(invoice_ref)).limit(1))
    invoice = result.scalar_one_or_none()
    if invoice is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Invoice not found")
    return ok(InvoiceResult(invoice=InvoiceRead.model_validate(invoice)), "Invoice fetched successfully")


@router.get("/projects/{project_id}", response_model=Envelope[PublicProjectResult])
async def get_public_project(project_id: str, session: Session) -> Envelope[PublicProjectResult]:
    project = await get_project_by_storage_id(project_id, session)
    return ok(
        PublicProjectResult(project=PublicProjectRead.model_validate(project)),
        "Project fetched successfully",
    )

"""Invoice CRUD: numbering, sanitized line items and project linking."""

import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import or_
from sqlmodel import select

from freyn.api.deps import Session, WorkspaceContext, require_menu
from freyn.api.responses import Envelope, commit_or_conflict, ok
from freyn.core.config import get_settings
from freyn.models.base import ApiModel, utcnow
from freyn.models.invoice import Invoice, InvoiceRead, InvoiceStatus, InvoiceStatusUpdate, InvoiceWrite
from freyn.models.project import Project
from freyn.services.invoicing import (
    MAX_LOGO_BYTES,
    STATUSES,
    InvoiceNumberExhausted,
    calculate_totals,
    coerce_status,
    ensure_invoice_number,
    estimate_data_url_bytes,
    invoice_number_exists,
    parse_invoice_date,
    sanitize_items,
    sanitize_party,
    sanitize_payment_method,
)

router = APIRouter(prefix="/invoices", tags=["invoices"])

InvoicesAccess = Annotated[WorkspaceContext, Depends(require_menu("invoices"))]


class InvoiceResult(ApiModel):
    invoice: InvoiceRead


class InvoiceList(ApiModel):
    invoices: list[InvoiceRead]


def _bad_request(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


@router.get("", response_model=Envelope[InvoiceList])
async def list_invoices(ctx: InvoicesAccess, session: Session) -> Envelope[InvoiceList]:
    stmt = (
        select(Invoice)
        .where(Invoice.workspace_id == ctx.workspace_id)
        .order_by(Invoice.created_at.desc())  # type: ignore[union-attr]
    )
    result = await session.execute(stmt)
    invoices = [InvoiceRead.model_validate(i) for i in result.scalars().all()]
    return ok(InvoiceList(invoices=invoices), "Invoices fetched successfully")


@router.post(
    "",
    response_model=Envelope[InvoiceResult],
    status_code=status.HTTP_201_CREATED,
)
async def create_invoice(
    body: InvoiceWrite,
    ctx: InvoicesAccess,
    session: Session,
) -> Envelope[InvoiceResult]:
    fields = await _sanitized_fields(body, session)
    target = None
    if "project_id" in body.model_fields_set and (body.project_id or "").strip():
        target = await _linkable_project(body.project_id, None, ctx, session)

    invoice = Invoice(
        workspace_id=ctx.workspace_id,
        project_id=target.id if target else None,
        created_by=str(ctx.user_id),
        updated_by=str(ctx.user_id),
        **fields,
    )
    session.add(invoice)
    await session.flush()
    if target is not None:
        _link(target, invoice)
        session.add(target)
    await commit_or_conflict(session, "invoice")
    await session.refresh(invoice)
    return ok(InvoiceResult(invoice=InvoiceRead.model_validate(invoice)), "Invoice created successfully")


@router.get("/{invoice_ref}", response_model=Envelope[InvoiceResult])
async def get_invoice(
    invoice_ref: str, ctx: InvoicesAccess, session: Session,
) -> Envelope[InvoiceResult]:
    invoice = await _get_or_404(invoice_ref, ctx, session)
    return ok(InvoiceResult(invoice=InvoiceRead.model_validate(invoice)), "Invoice fetched successfully")


@router.put("/{invoice_ref}", response_model=Envelope[InvoiceResult])
async def update_invoice(
    invoice_ref: str,
    body: InvoiceWrite,
    ctx: InvoicesAccess,
    session: Session,
) -> Envelope[InvoiceResult]:
    """Full replacement of the invoice body.

    ``projectId`` is only touched when present: empty unlinks, a value
    relinks and frees the previously linked project.
    """
    invoice = await _get_or_404(invoice_ref, ctx, session)
    fields = await _sanitized_fields(body, session, exclude_id=invoice.id)

    previous_project_id = invoice.project_id
    next_project_id = previous_project_id
    target = None
    if "project_id" in body.model_fields_set:
        raw = (body.project_id or "").strip()
        if raw:
            target = await _linkable_project(raw, invoice, ctx, session)
            next_project_id = target.id
        else:
            next_project_id = None

    for field, value in fields.items():
        setattr(invoice, field, value)
    invoice.project_id = next_project_id
    invoice.updated_by = str(ctx.user_id)
    invoice.updated_at = utcnow()
    session.add(invoice)

    if previous_project_id and previous_project_id != next_project_id:
        previous = await _workspace_project(previous_project_id, ctx, session)
        if previous is not None:
            _unlink(previous)
            session.add(previous)
    if next_project_id:
        current = target or await _workspace_project(next_project_id, ctx, session)
        if current is not None:
            _link(current, invoice)
            session.add(current)

    await commit_or_conflict(session, "invoice")
    await session.refresh(invoice)
    return ok(InvoiceResult(invoice=InvoiceRead.model_validate(invoice)), "Invoice updated successfully")


@router.patch("/{invoice_ref}", response_model=Envelope[InvoiceResult])
async def update_invoice_status(
    invoice_ref: str,
    body: InvoiceStatusUpdate,
    ctx: InvoicesAccess,
    session: Session,
) -> Envelope[InvoiceResult]:
    invoice = await _get_or_404(invoice_ref, ctx, session)
    if not isinstance(body.status, str) or body.status not in STATUSES:
        raise _bad_request("Invalid status")

    invoice.status = InvoiceStatus(body.status)
    invoice.updated_by = str(ctx.user_id)
    invoice.updated_at = utcnow()
    session.add(invoice)
    await session.commit()
    await session.refresh(invoice)
    return ok(InvoiceResult(invoice=InvoiceRead.model_validate(invoice)), "Invoice status updated successfully")


@router.delete("/{invoice_ref}", response_model=Envelope[InvoiceResult])
async def delete_invoice(
    invoice_ref: str, ctx: InvoicesAccess, session: Session,
) -> Envelope[InvoiceResult]:
    invoice = await _get_or_404(invoice_ref, ctx, session)
    deleted = InvoiceRead.model_validate(invoice)

    if invoice.project_id:
        project = await _workspace_project(invoice.project_id, ctx, session)
        if project is not None:
            _unlink(project)
            session.add(project)
    await session.delete(invoice)
    await session.commit()
    return ok(InvoiceResult(invoice=deleted), "Invoice deleted successfully")


# ── Internal helpers ──────────────────────────────────────────

async def _sanitized_fields(body: InvoiceWrite, session, exclude_id=None) -> dict:
    """Validate and normalize everything but the project link."""
    invoice_date = parse_invoice_date(body.invoice_date)
    if invoice_date is None:
        raise _bad_request("Invalid invoice date")
    due_date = parse_invoice_date(body.due_date)
    if due_date is None:
        raise _bad_request("Invalid due date")

    billed_to = sanitize_party(body.billed_to)
    if not billed_to["name"] and not billed_to["company"]:
        raise _bad_request("Please select a client to bill")

    items = sanitize_items(body.items)
    if not items:
        raise _bad_request("Invoice must contain at least one service")
    totals = calculate_totals(items)

    try:
        invoice_number = await ensure_invoice_number(session, body.invoice_number, invoice_date)
    except InvoiceNumberExhausted as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to generate invoice number",
        ) from exc
    if await invoice_number_exists(session, invoice_number, exclude_id=exclude_id):
        raise _bad_request("Invoice number already exists")

    logo = body.logo or ""
    if logo and estimate_data_url_bytes(logo) > MAX_LOGO_BYTES:
        raise _bad_request("Logo image is too large")

    return {
        "invoice_number": invoice_number,
        "invoice_date": invoice_date,
        "due_date": due_date,
        "status": coerce_status(body.status),
        "logo": logo,
        "billed_by": sanitize_party(body.billed_by),
        "billed_to": billed_to,
        "items": items,
        "terms": body.terms or "",
        "footer": body.footer or "",
        "payment_method": sanitize_payment_method(body.payment_method),
        "subtotal": totals.subtotal,
        "total": totals.total,
        "currency": body.currency or get_settings().default_currency,
    }


async def _workspace_project(project_id: uuid.UUID, ctx: WorkspaceContext, session) -> Project | None:
    stmt = select(Project).where(
        Project.id == project_id,
        Project.workspace_id == ctx.workspace_id,
    )
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


async def _linkable_project(
    raw_id: str, invoice: Invoice | None, ctx: WorkspaceContext, session
) -> Project:
    try:
        project_id = uuid.UUID(raw_id.strip())
    except ValueError as exc:
        raise _bad_request("Invalid project reference") from exc

    project = await _workspace_project(project_id, ctx, session)
    if project is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Project not found")
    own_id = str(invoice.id) if invoice is not None else None
    if project.linked_invoice_id and project.linked_invoice_id != own_id:
        raise _bad_request("Project already linked to another invoice")
    return project


def _link(project: Project, invoice: Invoice) -> None:
    project.linked_invoice_id = str(invoice.id)
    project.linked_invoice_number = invoice.invoice_number
    project.updated_at = utcnow()


def _unlink(project: Project) -> None:
    project.linked_invoice_id = ""
    project.linked_invoice_number = ""
    project.updated_at = utcnow()


def invoice_lookup(invoice_ref: str):
    """Match on storage id or invoice number."""
    condition = Invoice.invoice_number == invoice_ref
    try:
        return or_(Invoice.id == uuid.UUID(invoice_ref), condition)
    except ValueError:
        return condition


async def _get_or_404(invoice_ref: str, ctx: WorkspaceContext, session) -> Invoice:
    stmt = select(Invoice).where(
        Invoice.workspace_id == ctx.workspace_id,
        invoice_lookup(invoice_ref),
    )
    result = await session.execute(stmt.limit(1))
    invoice = result.scalar_one_or_none()
    if invoice is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Invoice not found")
    return invoice

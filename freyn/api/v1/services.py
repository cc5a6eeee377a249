"""Service catalog CRUD: workspace-scoped, addressed by serviceId."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from sqlmodel import select

from freyn.api.deps import Session, WorkspaceContext, require_menu
from freyn.api.responses import Envelope, commit_or_conflict, ok
from freyn.models.base import ApiModel, utcnow
from freyn.models.service import Service, ServiceCreate, ServiceRead, ServiceUpdate
from freyn.services.identifiers import IdentifierExhausted, generate_service_id

router = APIRouter(prefix="/services", tags=["services"])

ServicesAccess = Annotated[WorkspaceContext, Depends(require_menu("services"))]

# Fields an update may clear by sending null.
NULLABLE_FIELDS = {"total_revision"}


class ServiceResult(ApiModel):
    service: ServiceRead


class ServiceList(ApiModel):
    services: list[ServiceRead]


def _bad_request(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


@router.get("", response_model=Envelope[ServiceList])
async def list_services(ctx: ServicesAccess, session: Session) -> Envelope[ServiceList]:
    stmt = (
        select(Service)
        .where(Service.workspace_id == ctx.workspace_id)
        .order_by(Service.created_at.desc())  # type: ignore[union-attr]
    )
    result = await session.execute(stmt)
    services = [ServiceRead.model_validate(s) for s in result.scalars().all()]
    return ok(ServiceList(services=services), "Services fetched successfully")


@router.post(
    "",
    response_model=Envelope[ServiceResult],
    status_code=status.HTTP_201_CREATED,
)
async def create_service(
    body: ServiceCreate,
    ctx: ServicesAccess,
    session: Session,
) -> Envelope[ServiceResult]:
    if not body.service_name.strip():
        raise _bad_request("Service name is required")
    if not body.service_price or body.service_price < 0:
        raise _bad_request("Valid service price is required")
    if not body.duration_of_work or body.duration_of_work < 1:
        raise _bad_request("Valid duration of work is required")

    service_id = (body.service_id or "").strip()
    if not service_id:
        try:
            service_id = await generate_service_id(session, ctx.workspace_id)
        except IdentifierExhausted as exc:
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Failed to create service. Please try again.",
            ) from exc
    service = Service(
        workspace_id=ctx.workspace_id,
        service_id=service_id,
        **body.model_dump(exclude={"service_id"}),
    )
    session.add(service)
    await commit_or_conflict(session, "service")
    await session.refresh(service)
    return ok(ServiceResult(service=ServiceRead.model_validate(service)), "Service created successfully")


@router.get("/{service_id}", response_model=Envelope[ServiceResult])
async def get_service(
    service_id: str, ctx: ServicesAccess, session: Session,
) -> Envelope[ServiceResult]:
    service = await _get_or_404(service_id, ctx, session)
    return ok(ServiceResult(service=ServiceRead.model_validate(service)), "Service fetched successfully")


@router.put("/{service_id}", response_model=Envelope[ServiceResult])
async def update_service(
    service_id: str,
    body: ServiceUpdate,
    ctx: ServicesAccess,
    session: Session,
) -> Envelope[ServiceResult]:
    service = await _get_or_404(service_id, ctx, session)

    update_data = {
        field: value
        for field, value in body.model_dump(exclude_unset=True).items()
        if value is not None or field in NULLABLE_FIELDS
    }
    if "service_name" in update_data and not update_data["service_name"].strip():
        raise _bad_request("Service name is required")
    if "service_price" in update_data and update_data["service_price"] < 0:
        raise _bad_request("Valid service price is required")
    if "duration_of_work" in update_data and update_data["duration_of_work"] < 1:
        raise _bad_request("Valid duration of work is required")

    for field, value in update_data.items():
        setattr(service, field, value)
    service.updated_at = utcnow()
    session.add(service)
    await commit_or_conflict(session, "service")
    await session.refresh(service)
    return ok(ServiceResult(service=ServiceRead.model_validate(service)), "Service updated successfully")


@router.delete("/{service_id}", response_model=Envelope[ServiceResult])
async def delete_service(
    service_id: str, ctx: ServicesAccess, session: Session,
) -> Envelope[ServiceResult]:
    service = await _get_or_404(service_id, ctx, session)
    deleted = ServiceRead.model_validate(service)
    await session.delete(service)
    await session.commit()
    return ok(ServiceResult(service=deleted), "Service deleted successfully")


# ── Internal helper ───────────────────────────────────────────

async def _get_or_404(service_id: str, ctx: WorkspaceContext, session) -> Service:
    stmt = select(Service).where(
        Service.workspace_id == ctx.workspace_id,
        Service.service_id == service_id,
    )
    result = await session.execute(stmt)
    service = result.scalar_one_or_none()
    if service is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Service not found")
    return service

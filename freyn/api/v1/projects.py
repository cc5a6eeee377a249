"""Project CRUD, activity log, client comments and the dashboard summary."""

import math
import uuid
from typing import Annotated, Any

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import or_
from sqlmodel import select

from freyn.api.deps import Session, WorkspaceContext, require_menu
from freyn.api.responses import Envelope, commit_or_conflict, ok
from freyn.models.base import ApiModel, as_naive_utc, epoch_millis, utcnow
from freyn.models.invoice import Invoice
from freyn.models.project import (
    CommentCreate,
    CommentRead,
    Project,
    ProjectCreate,
    ProjectRead,
    ProjectUpdate,
)
from freyn.models.service import Service
from freyn.models.user import User
from freyn.services.activity import build_activity_logs
from freyn.services.dashboard import build_dashboard
from freyn.services.identifiers import generate_number_order, number_order_exists

router = APIRouter(prefix="/projects", tags=["projects"])

ProjectsAccess = Annotated[WorkspaceContext, Depends(require_menu("projects"))]
DashboardAccess = Annotated[WorkspaceContext, Depends(require_menu("dashboard"))]

REQUIRED_TEXT = {
    "project_name": "Project name is required",
    "client_name": "Client name is required",
}


class ProjectResult(ApiModel):
    project: ProjectRead


class ProjectList(ApiModel):
    projects: list[ProjectRead]


class CommentResult(ApiModel):
    comment: CommentRead
    project: ProjectRead


def _bad_request(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


def _valid_amount(value: float | None) -> bool:
    return value is not None and math.isfinite(value) and value >= 0


def _check_amounts(values: dict) -> None:
    """Shared numeric rules for create and update payloads."""
    if "price" in values and not _valid_amount(values["price"]):
        raise _bad_request("Valid price is required")
    if "total_price" in values and not _valid_amount(values["total_price"]):
        raise _bad_request("Valid total price is required")
    if "discount" in values and not _valid_amount(values["discount"]):
        raise _bad_request("Validation failed: Discount cannot be negative")
    if "quantity" in values and values["quantity"] < 1:
        raise _bad_request("Validation failed: Quantity must be at least 1")


# ── Dashboard ─────────────────────────────────────────────────

@router.get("/stats/dashboard", response_model=Envelope[dict[str, Any]])
async def get_dashboard_stats(
    ctx: DashboardAccess, session: Session,
) -> Envelope[dict[str, Any]]:
    projects = await _workspace_projects(ctx, session)
    return ok(build_dashboard(projects, utcnow()), "Dashboard stats fetched successfully")


# ── CRUD ──────────────────────────────────────────────────────

@router.get("", response_model=Envelope[ProjectList])
async def list_projects(ctx: ProjectsAccess, session: Session) -> Envelope[ProjectList]:
    projects = await _workspace_projects(ctx, session)
    return ok(
        ProjectList(projects=[ProjectRead.model_validate(p) for p in projects]),
        "Projects fetched successfully",
    )


@router.post(
    "",
    response_model=Envelope[ProjectResult],
    status_code=status.HTTP_201_CREATED,
)
async def create_project(
    body: ProjectCreate,
    ctx: ProjectsAccess,
    session: Session,
) -> Envelope[ProjectResult]:
    for field, message in REQUIRED_TEXT.items():
        if not getattr(body, field).strip():
            raise _bad_request(message)
    if body.deadline is None:
        raise _bad_request("Deadline is required")
    if not _valid_amount(body.price):
        raise _bad_request("Valid price is required")
    if not _valid_amount(body.total_price):
        raise _bad_request("Valid total price is required")
    _check_amounts(body.model_dump(include={"discount", "quantity"}))

    # A supplied order number that is already taken is silently replaced.
    number_order = (body.number_order or "").strip()
    if not number_order or await number_order_exists(session, ctx.workspace_id, number_order):
        number_order = await generate_number_order(session, ctx.workspace_id)

    data = body.model_dump(exclude={"number_order", "deadline"})
    project = Project(
        workspace_id=ctx.workspace_id,
        number_order=number_order,
        deadline=as_naive_utc(body.deadline),
        **data,
    )
    session.add(project)
    await commit_or_conflict(session, "project")
    await session.refresh(project)
    return ok(ProjectResult(project=ProjectRead.model_validate(project)), "Project created successfully")


@router.get("/{project_ref}", response_model=Envelope[ProjectResult])
async def get_project(
    project_ref: str, ctx: ProjectsAccess, session: Session,
) -> Envelope[ProjectResult]:
    project = await _get_or_404(project_ref, ctx, session)
    return ok(ProjectResult(project=ProjectRead.model_validate(project)), "Project fetched successfully")


@router.put("/{project_ref}", response_model=Envelope[ProjectResult])
async def update_project(
    project_ref: str,
    body: ProjectUpdate,
    ctx: ProjectsAccess,
    session: Session,
) -> Envelope[ProjectResult]:
    """Apply a partial update and record what changed in the activity log."""
    project = await _get_or_404(project_ref, ctx, session)

    changes = {k: v for k, v in body.model_dump(exclude_unset=True).items() if v is not None}
    for field, message in REQUIRED_TEXT.items():
        if field in changes:
            changes[field] = changes[field].strip()
            if not changes[field]:
                raise _bad_request(message)
    if "number_order" in changes:
        changes["number_order"] = changes["number_order"].strip()
        if not changes["number_order"]:
            raise _bad_request("Validation failed: Order number is required")
    if "deadline" in changes:
        changes["deadline"] = as_naive_utc(changes["deadline"])
    _check_amounts(changes)

    actor = await session.get(User, ctx.user_id)
    now = utcnow()
    new_logs = build_activity_logs(
        project,
        changes,
        actor_id=str(ctx.user_id),
        actor_name=actor.full_name if actor else "Team Member",
        actor_email=actor.email if actor else "",
        now=now,
        service_names=await _service_names(
            session, ctx, [project.service_id, changes.get("service_id", "")],
        ),
    )

    for field, value in changes.items():
        setattr(project, field, value)
    if new_logs:
        # Newest first; reassign so the JSON column is flagged as changed.
        project.logs = [*new_logs, *project.logs]
    project.updated_at = now
    session.add(project)
    await commit_or_conflict(session, "project")
    await session.refresh(project)
    return ok(ProjectResult(project=ProjectRead.model_validate(project)), "Project updated successfully")


@router.delete("/{project_ref}", response_model=Envelope[ProjectResult])
async def delete_project(
    project_ref: str, ctx: ProjectsAccess, session: Session,
) -> Envelope[ProjectResult]:
    project = await _get_or_404(project_ref, ctx, session)
    deleted = ProjectRead.model_validate(project)

    linked = await session.execute(select(Invoice).where(Invoice.project_id == project.id))
    for invoice in linked.scalars().all():
        invoice.project_id = None
        session.add(invoice)
    await session.flush()

    await session.delete(project)
    await session.commit()
    return ok(ProjectResult(project=deleted), "Project deleted successfully")


# ── Client comments (public) ──────────────────────────────────

@router.post(
    "/{project_id}/comments",
    response_model=Envelope[CommentResult],
    status_code=status.HTTP_201_CREATED,
)
async def add_comment(
    project_id: str,
    body: CommentCreate,
    session: Session,
) -> Envelope[CommentResult]:
    """Append to a project's feedback thread. Needs no token: the project's
    storage id is the capability handed to the client."""
    content = (body.content or "").strip()
    author_name = (body.author_name or "").strip()
    author_email = (body.author_email or "").strip()
    if not content or not author_name or not author_email:
        raise _bad_request("Content, author name, and author email are required")

    project = await get_project_by_storage_id(project_id, session)
    now = utcnow()
    comment = {
        "id": epoch_millis(),
        "content": content,
        "author_name": author_name,
        "author_email": author_email,
        "author_avatar": body.author_avatar or "",
        "is_client": bool(body.is_client),
        "created_at": now.isoformat(),
    }
    project.comments = [*project.comments, comment]
    project.updated_at = now
    session.add(project)
    await session.commit()
    await session.refresh(project)
    return ok(
        CommentResult(
            comment=CommentRead.model_validate(comment),
            project=ProjectRead.model_validate(project),
        ),
        "Comment added successfully",
    )


# ── Internal helpers ──────────────────────────────────────────

async def _workspace_projects(ctx: WorkspaceContext, session) -> list[Project]:
    stmt = (
        select(Project)
        .where(Project.workspace_id == ctx.workspace_id)
        .order_by(Project.created_at.desc())  # type: ignore[union-attr]
    )
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def _service_names(session, ctx: WorkspaceContext, service_ids: list[str]) -> dict[str, str]:
    keys = {str(s).strip() for s in service_ids if s and str(s).strip()}
    if not keys:
        return {}
    result = await session.execute(
        select(Service.service_id, Service.service_name).where(
            Service.workspace_id == ctx.workspace_id,
            Service.service_id.in_(keys),  # type: ignore[attr-defined]
        )
    )
    return {service_id: name for service_id, name in result.all()}


async def get_project_by_storage_id(project_id: str, session) -> Project:
    try:
        key = uuid.UUID(project_id)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Project not found") from exc
    project = await session.get(Project, key)
    if project is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Project not found")
    return project


def _project_lookup(project_ref: str):
    condition = Project.number_order == project_ref
    try:
        return or_(Project.id == uuid.UUID(project_ref), condition)
    except ValueError:
        return condition


async def _get_or_404(project_ref: str, ctx: WorkspaceContext, session) -> Project:
    """Resolve by storage id or by numberOrder inside the active workspace."""
    stmt = select(Project).where(
        Project.workspace_id == ctx.workspace_id, _project_lookup(project_ref),
    )
    result = await session.execute(stmt.limit(1))
    project = result.scalar_one_or_none()
    if project is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Project not found")
    return project

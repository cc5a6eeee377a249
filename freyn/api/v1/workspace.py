"""Workspace settings, membership and role permissions."""

import uuid
from datetime import datetime

from fastapi import APIRouter, HTTPException, Response, status
from sqlmodel import select

from freyn.api.deps import (
    Auth,
    CurrentWorkspace,
    Menus,
    Session,
    WorkspaceContext,
    require_owner,
    set_token_cookie,
)
from freyn.api.responses import Envelope, commit_or_conflict, ok
from freyn.core.permissions import (
    EDITABLE_ROLES,
    ROLE_LABELS,
    MenuConfig,
    WorkspaceRole,
    coerce_invite_role,
    normalize_permissions,
)
from freyn.core.security import create_jwt, is_valid_email, normalize_email
from freyn.models.base import ApiModel, utcnow
from freyn.models.user import User, UserRead
from freyn.models.workspace import (
    MemberInvite,
    MemberRead,
    MemberRemove,
    MemberUpdate,
    MenuRead,
    PermissionsRead,
    PermissionsUpdate,
    RoleRead,
    SwitchRequest,
    Workspace,
    WorkspaceListItem,
    WorkspaceMember,
    WorkspaceRead,
    WorkspaceUpdate,
)
from freyn.services.membership import (
    MAX_WORKSPACE_NAME,
    fall_back_primary,
    get_membership,
    memberships_of,
    set_primary,
    user_read,
    workspace_read,
)

router = APIRouter(prefix="/workspace", tags=["workspace"])


# ── Response schemas ──────────────────────────────────────────

class CurrentWorkspaceRead(ApiModel):
    workspace: WorkspaceRead
    role: WorkspaceRole


class WorkspaceList(ApiModel):
    workspaces: list[WorkspaceListItem]


class SwitchResult(ApiModel):
    user: UserRead
    workspace: WorkspaceRead
    token: str


class MemberList(ApiModel):
    members: list[MemberRead]


class MemberResult(ApiModel):
    member: MemberRead


class PermissionsSaved(PermissionsRead):
    role: WorkspaceRole


# ── Workspace ─────────────────────────────────────────────────

@router.get("", response_model=Envelope[CurrentWorkspaceRead])
async def get_workspace(
    ctx: CurrentWorkspace, session: Session, menus: Menus,
) -> Envelope[CurrentWorkspaceRead]:
    return ok(
        CurrentWorkspaceRead(
            workspace=await workspace_read(session, ctx.workspace, menus),
            role=ctx.role,
        ),
        "Workspace fetched successfully",
    )


@router.put("", response_model=Envelope[CurrentWorkspaceRead])
async def update_workspace(
    body: WorkspaceUpdate,
    ctx: CurrentWorkspace,
    session: Session,
    menus: Menus,
) -> Envelope[CurrentWorkspaceRead]:
    name = (body.name or "").strip()
    if not name:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Workspace name is required")
    if len(name) > MAX_WORKSPACE_NAME:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Workspace name must be 120 characters or less",
        )
    # Only the owner's own workspace matches the update.
    if not ctx.is_owner:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Workspace not found")

    workspace = ctx.workspace
    workspace.name = name
    workspace.updated_at = utcnow()
    session.add(workspace)
    await session.commit()
    await session.refresh(workspace)
    return ok(
        CurrentWorkspaceRead(
            workspace=await workspace_read(session, workspace, menus),
            role=ctx.role,
        ),
        "Workspace updated successfully",
    )


@router.get("/list", response_model=Envelope[WorkspaceList])
async def list_workspaces(auth: Auth, session: Session) -> Envelope[WorkspaceList]:
    """Every workspace the caller belongs to: owned first, then by join date."""
    user = await session.get(User, auth.user_id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

    entries: dict[uuid.UUID, tuple[WorkspaceRole, datetime | None]] = {
        m.workspace_id: (m.role, m.joined_at) for m in await memberships_of(session, user.id)
    }
    if user.workspace_id and user.workspace_id not in entries:
        entries[user.workspace_id] = (
            user.workspace_role or WorkspaceRole.MEMBER, user.workspace_joined_at,
        )

    items = []
    if entries:
        result = await session.execute(
            select(Workspace).where(Workspace.id.in_(list(entries)))  # type: ignore[attr-defined]
        )
        for workspace in result.scalars().all():
            is_owner = workspace.owner_id == user.id
            role, joined_at = entries[workspace.id]
            items.append(WorkspaceListItem(
                id=workspace.id,
                name=workspace.name,
                slug=workspace.slug,
                role=WorkspaceRole.OWNER if is_owner else role,
                joined_at=joined_at or workspace.created_at,
                is_owner=is_owner,
                plan=workspace.plan,
                status=workspace.status,
            ))

    items.sort(key=lambda item: (not item.is_owner, item.joined_at or datetime.min, item.name))
    return ok(WorkspaceList(workspaces=items))


@router.post("/switch", response_model=Envelope[SwitchResult])
async def switch_workspace(
    body: SwitchRequest,
    response: Response,
    auth: Auth,
    session: Session,
    menus: Menus,
) -> Envelope[SwitchResult]:
    """Make another workspace the caller's active one and reissue the token."""
    if not body.workspace_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Workspace ID is required")
    workspace_id = _parse_id(body.workspace_id, "Invalid workspace ID")

    user = await session.get(User, auth.user_id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    workspace = await session.get(Workspace, workspace_id)
    if workspace is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Workspace not found")

    is_owner = workspace.owner_id == user.id
    membership = await get_membership(session, workspace.id, user.id)
    if membership is None and not is_owner:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You are not a member of this workspace",
        )

    if membership is None:
        membership = WorkspaceMember(
            workspace_id=workspace.id, user_id=user.id, role=WorkspaceRole.OWNER,
        )
        session.add(membership)

    set_primary(user, workspace.id, membership.role, membership.joined_at)
    session.add(user)
    await session.commit()
    await session.refresh(user)

    token = create_jwt(str(user.id), str(workspace.id))
    set_token_cookie(response, token)
    return ok(
        SwitchResult(
            user=await user_read(session, user),
            workspace=await workspace_read(session, workspace, menus),
            token=token,
        ),
        "Workspace switched successfully",
    )


# ── Members ───────────────────────────────────────────────────

@router.get("/members", response_model=Envelope[MemberList])
async def list_members(ctx: CurrentWorkspace, session: Session) -> Envelope[MemberList]:
    stmt = (
        select(WorkspaceMember, User)
        .join(User, User.id == WorkspaceMember.user_id)  # type: ignore[arg-type]
        .where(WorkspaceMember.workspace_id == ctx.workspace_id)
    )
    result = await session.execute(stmt)

    members: dict[uuid.UUID, MemberRead] = {}
    for membership, user in result.all():
        members[user.id] = _member_read(ctx.workspace, user, membership.role, membership.joined_at)

    if ctx.workspace.owner_id not in members:
        owner = await session.get(User, ctx.workspace.owner_id)
        if owner is not None:
            members[owner.id] = _member_read(
                ctx.workspace, owner, WorkspaceRole.OWNER, ctx.workspace.created_at,
            )

    ordered = sorted(members.values(), key=lambda m: m.joined_at or datetime.min)
    return ok(MemberList(members=ordered), "Workspace members fetched successfully")


@router.post(
    "/members",
    response_model=Envelope[MemberResult],
    status_code=status.HTTP_201_CREATED,
)
async def add_member(
    body: MemberInvite,
    ctx: CurrentWorkspace,
    session: Session,
) -> Envelope[MemberResult]:
    """Invite an already-registered user by email."""
    email = normalize_email(body.email)
    if not email:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Email is required")
    if not is_valid_email(email):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Please enter a valid email")
    require_owner(ctx, "Only workspace owners can add members")

    result = await session.execute(select(User).where(User.email == email))
    invitee = result.scalar_one_or_none()
    if invitee is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User email is not registered on Freyn",
        )

    existing = await get_membership(session, ctx.workspace_id, invitee.id)
    if existing is not None or invitee.id == ctx.workspace.owner_id:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="User is already a member of this workspace",
        )

    role = coerce_invite_role(body.role)
    now = utcnow()
    session.add(WorkspaceMember(
        workspace_id=ctx.workspace_id,
        user_id=invitee.id,
        role=role,
        joined_at=now,
        invited_by=ctx.user_id,
    ))
    if invitee.workspace_id is None:
        set_primary(invitee, ctx.workspace_id, role, now)
        session.add(invitee)
    await commit_or_conflict(session, "workspace member")

    return ok(
        MemberResult(member=_member_read(ctx.workspace, invitee, role, now)),
        "Member added successfully",
    )


@router.patch("/members", response_model=Envelope[MemberResult])
async def update_member(
    body: MemberUpdate,
    ctx: CurrentWorkspace,
    session: Session,
) -> Envelope[MemberResult]:
    member_id = _require_member_id(body.member_id)
    require_owner(ctx, "Only workspace owners can update members")
    if member_id == ctx.workspace.owner_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Cannot change the workspace owner role",
        )

    membership = await _membership_or_404(session, ctx, member_id)
    user = await session.get(User, member_id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Member not found")

    role = coerce_invite_role(body.role)
    membership.role = role
    session.add(membership)
    if user.workspace_id == ctx.workspace_id:
        user.workspace_role = role
        user.updated_at = utcnow()
        session.add(user)
    await session.commit()

    return ok(
        MemberResult(member=_member_read(ctx.workspace, user, role, membership.joined_at)),
        "Member updated successfully",
    )


@router.delete("/members", response_model=Envelope[None])
async def remove_member(
    body: MemberRemove,
    ctx: CurrentWorkspace,
    session: Session,
) -> Envelope[None]:
    member_id = _require_member_id(body.member_id)
    require_owner(ctx, "Only workspace owners can delete members")
    if member_id == ctx.workspace.owner_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Cannot remove the workspace owner",
        )

    membership = await _membership_or_404(session, ctx, member_id)
    await session.delete(membership)
    await session.flush()

    user = await session.get(User, member_id)
    if user is not None and user.workspace_id == ctx.workspace_id:
        await fall_back_primary(session, user)
    await session.commit()
    return ok(None, "Member removed successfully")


# ── Permissions ───────────────────────────────────────────────

@router.get("/permissions", response_model=Envelope[PermissionsRead])
async def get_permissions(ctx: CurrentWorkspace, menus: Menus) -> Envelope[PermissionsRead]:
    require_owner(ctx, "Only workspace owners can view and update permissions")
    return ok(_permissions_payload(ctx.workspace, menus), "Workspace permissions fetched")


@router.patch("/permissions", response_model=Envelope[PermissionsSaved])
async def update_permissions(
    body: PermissionsUpdate,
    ctx: CurrentWorkspace,
    session: Session,
    menus: Menus,
) -> Envelope[PermissionsSaved]:
    """Replace one editable role's menu list; unknown keys are dropped."""
    if not body.role:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Role is required")
    if body.role not in EDITABLE_ROLES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Selected role cannot be modified",
        )
    if not isinstance(body.permissions, list):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Permissions must be an array",
        )
    require_owner(ctx, "Only workspace owners can view and update permissions")

    workspace = ctx.workspace
    current = normalize_permissions(workspace.permissions, menus)
    current[body.role] = body.permissions
    # Reassign so the JSON column is flagged as changed.
    workspace.permissions = normalize_permissions(current, menus)
    workspace.updated_at = utcnow()
    session.add(workspace)
    await session.commit()
    await session.refresh(workspace)

    payload = _permissions_payload(workspace, menus)
    return ok(
        PermissionsSaved(role=WorkspaceRole(body.role), **payload.model_dump()),
        "Workspace permissions updated",
    )


# ── Internal helpers ──────────────────────────────────────────

def _parse_id(raw: str, detail: str) -> uuid.UUID:
    try:
        return uuid.UUID(str(raw))
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=detail) from exc


def _require_member_id(raw: str | None) -> uuid.UUID:
    if not raw:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Member ID is required")
    return _parse_id(raw, "Invalid member ID")


async def _membership_or_404(
    session, ctx: WorkspaceContext, member_id: uuid.UUID
) -> WorkspaceMember:
    membership = await get_membership(session, ctx.workspace_id, member_id)
    if membership is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Member not found")
    return membership


def _member_read(
    workspace: Workspace, user: User, role: WorkspaceRole, joined_at: datetime | None
) -> MemberRead:
    return MemberRead(
        id=user.id,
        full_name=user.full_name or "Unnamed Member",
        email=user.email or "",
        role=WorkspaceRole.OWNER if user.id == workspace.owner_id else role,
        joined_at=joined_at,
    )


def _permissions_payload(workspace: Workspace, menus: MenuConfig) -> PermissionsRead:
    permissions = normalize_permissions(workspace.permissions, menus)
    roles = [
        RoleRead(
            key=role,
            name=ROLE_LABELS[role],
            permissions=permissions[role.value],
            editable=role in EDITABLE_ROLES,
        )
        for role in WorkspaceRole
    ]
    return PermissionsRead(
        roles=roles,
        menus=[MenuRead(key=item.key, label=item.label) for item in menus.menus],
        permissions=permissions,
    )

"""Workspace membership bookkeeping shared by the auth and workspace routes."""

import logging
import uuid
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from freyn.core.permissions import MenuConfig, WorkspaceRole, normalize_permissions
from freyn.models.base import utcnow
from freyn.models.user import MembershipRead, User, UserRead
from freyn.models.workspace import Workspace, WorkspaceMember, WorkspaceRead

logger = logging.getLogger(__name__)

MAX_WORKSPACE_NAME = 120


async def memberships_of(session: AsyncSession, user_id: uuid.UUID) -> list[WorkspaceMember]:
    """All membership rows of a user, oldest first."""
    stmt = (
        select(WorkspaceMember)
        .where(WorkspaceMember.user_id == user_id)
        .order_by(WorkspaceMember.joined_at.asc())  # type: ignore[union-attr]
    )
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def get_membership(
    session: AsyncSession, workspace_id: uuid.UUID, user_id: uuid.UUID
) -> WorkspaceMember | None:
    stmt = select(WorkspaceMember).where(
        WorkspaceMember.workspace_id == workspace_id,
        WorkspaceMember.user_id == user_id,
    )
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


async def find_owned_workspace(session: AsyncSession, user_id: uuid.UUID) -> Workspace | None:
    stmt = (
        select(Workspace)
        .where(Workspace.owner_id == user_id)
        .order_by(Workspace.created_at.asc())  # type: ignore[union-attr]
    )
    result = await session.execute(stmt.limit(1))
    return result.scalar_one_or_none()


def set_primary(user: User, workspace_id: uuid.UUID | None, role: WorkspaceRole | None,
                joined_at: datetime | None) -> None:
    user.workspace_id = workspace_id
    user.workspace_role = role
    user.workspace_joined_at = joined_at
    user.updated_at = utcnow()


async def create_owned_workspace(
    session: AsyncSession, user: User, menus: MenuConfig
) -> Workspace:
    """Create ``"<name>'s Workspace"`` for ``user`` and make it primary.

    Flushes but does not commit.
    """
    now = utcnow()
    workspace = Workspace(
        name=f"{user.full_name}'s Workspace"[:MAX_WORKSPACE_NAME],
        slug=f"workspace-{user.user_id.lower()}",
        owner_id=user.id,
        permissions=normalize_permissions(None, menus),
    )
    session.add(workspace)
    await session.flush()

    session.add(WorkspaceMember(
        workspace_id=workspace.id,
        user_id=user.id,
        role=WorkspaceRole.OWNER,
        joined_at=now,
    ))
    set_primary(user, workspace.id, WorkspaceRole.OWNER, now)
    session.add(user)
    await session.flush()
    return workspace


async def fall_back_primary(session: AsyncSession, user: User) -> None:
    """Re-point a user's primary workspace after losing the current one.

    Preference: an owned membership, then the oldest remaining one, else none.
    """
    remaining = await memberships_of(session, user.id)
    owned = next((m for m in remaining if m.role == WorkspaceRole.OWNER), None)
    chosen = owned or (remaining[0] if remaining else None)
    if chosen is None:
        set_primary(user, None, None, None)
    else:
        set_primary(user, chosen.workspace_id, chosen.role, chosen.joined_at)
    session.add(user)


# ── Serializers ──────────────────────────────────────────────

async def user_read(session: AsyncSession, user: User) -> UserRead:
    memberships = await memberships_of(session, user.id)
    read = UserRead.model_validate(user)
    read.workspaces = [
        MembershipRead(workspace_id=m.workspace_id, role=m.role, joined_at=m.joined_at)
        for m in memberships
    ]
    return read


async def workspace_read(
    session: AsyncSession,
    workspace: Workspace,
    menus: MenuConfig | None = None,
) -> WorkspaceRead:
    """Serialize a workspace; permissions are included when ``menus`` is given."""
    owner = await session.get(User, workspace.owner_id)
    return WorkspaceRead(
        id=workspace.id,
        name=workspace.name,
        slug=workspace.slug,
        plan=workspace.plan,
        status=workspace.status,
        owner_id=workspace.owner_id,
        owner_name=owner.full_name if owner else "",
        permissions=normalize_permissions(workspace.permissions, menus) if menus else None,
    )

"""FastAPI dependencies for authentication and workspace resolution."""

import uuid
from typing import Annotated

from fastapi import Depends, HTTPException, Request, Response, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from freyn.core.database import get_session
from freyn.core.permissions import (
    MenuConfig,
    WorkspaceRole,
    can_access,
    get_menu_config,
    normalize_permissions,
)
from freyn.core.security import TOKEN_COOKIE, TOKEN_MAX_AGE, extract_token, verify_token
from freyn.models.workspace import Workspace, WorkspaceMember


class AuthContext:
    """Resolved identity carried through a request."""

    __slots__ = ("user_id", "workspace_id")

    def __init__(self, user_id: uuid.UUID, workspace_id: uuid.UUID | None = None) -> None:
        self.user_id = user_id
        self.workspace_id = workspace_id


class WorkspaceContext:
    """The caller's active workspace and their role in it."""

    __slots__ = ("user_id", "workspace", "role")

    def __init__(self, user_id: uuid.UUID, workspace: Workspace, role: WorkspaceRole) -> None:
        self.user_id = user_id
        self.workspace = workspace
        self.role = role

    @property
    def workspace_id(self) -> uuid.UUID:
        return self.workspace.id

    @property
    def is_owner(self) -> bool:
        return self.role == WorkspaceRole.OWNER


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)


def _resolve_token(request: Request) -> AuthContext | None:
    """Decode the bearer header or ``token`` cookie.

    Returns None when no token was sent; raises 401 for a bad one.
    """
    raw = extract_token(
        request.headers.get("authorization"), request.cookies.get(TOKEN_COOKIE)
    )
    if not raw:
        return None

    payload = verify_token(raw)
    if payload is None:
        raise _unauthorized("Invalid or expired token")

    try:
        workspace_id = payload.get("wid")
        return AuthContext(
            user_id=uuid.UUID(payload["sub"]),
            workspace_id=uuid.UUID(workspace_id) if workspace_id else None,
        )
    except (KeyError, ValueError) as exc:
        raise _unauthorized("Invalid or expired token") from exc


async def get_auth_context(request: Request) -> AuthContext:
    auth = _resolve_token(request)
    if auth is None:
        raise _unauthorized("Access token is required")
    return auth


# Typed shorthand for use in route signatures
Auth = Annotated[AuthContext, Depends(get_auth_context)]
Session = Annotated[AsyncSession, Depends(get_session)]
Menus = Annotated[MenuConfig, Depends(get_menu_config)]


async def membership_role(
    session: AsyncSession, workspace: Workspace, user_id: uuid.UUID
) -> WorkspaceRole | None:
    """Owner wins; otherwise the role on the membership row, if any."""
    if workspace.owner_id == user_id:
        return WorkspaceRole.OWNER
    result = await session.execute(
        select(WorkspaceMember.role).where(
            WorkspaceMember.workspace_id == workspace.id,
            WorkspaceMember.user_id == user_id,
        )
    )
    role = result.scalar_one_or_none()
    return WorkspaceRole(role) if role is not None else None


async def get_workspace_context(auth: Auth, session: Session) -> WorkspaceContext:
    if auth.workspace_id is None:
        raise _unauthorized("Unauthorized")

    workspace = await session.get(Workspace, auth.workspace_id)
    if workspace is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Workspace not found")

    role = await membership_role(session, workspace, auth.user_id)
    if role is None:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You are not a member of this workspace",
        )
    return WorkspaceContext(user_id=auth.user_id, workspace=workspace, role=role)


CurrentWorkspace = Annotated[WorkspaceContext, Depends(get_workspace_context)]


def require_menu(menu_key: str):
    """Dependency factory gating a route on a menu key."""

    async def _check(ctx: CurrentWorkspace, menus: Menus) -> WorkspaceContext:
        permissions = normalize_permissions(ctx.workspace.permissions, menus)
        if not can_access(ctx.role, permissions, menu_key):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"You do not have access to {menu_key}",
            )
        return ctx

    return _check


def require_owner(ctx: WorkspaceContext, detail: str) -> None:
    if not ctx.is_owner:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


def set_token_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        TOKEN_COOKIE,
        token,
        max_age=TOKEN_MAX_AGE,
        path="/",
        samesite="lax",
    )

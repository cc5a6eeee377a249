"""Registration, login, profile and token verification."""

import logging

from fastapi import APIRouter, HTTPException, Response, status
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import select

from freyn.api.deps import Auth, AuthContext, Menus, Session, set_token_cookie
from freyn.api.responses import Envelope, ok
from freyn.core.permissions import WorkspaceRole
from freyn.core.security import (
    create_jwt,
    hash_password,
    is_valid_email,
    normalize_email,
    validate_full_name,
    validate_password,
    verify_password,
)
from freyn.models.base import ApiModel, utcnow
from freyn.models.user import LoginRequest, ProfileUpdate, RegisterRequest, User, UserRead
from freyn.models.workspace import Workspace, WorkspaceRead
from freyn.services.identifiers import IdentifierExhausted, generate_user_id
from freyn.services.membership import (
    create_owned_workspace,
    find_owned_workspace,
    set_primary,
    user_read,
    workspace_read,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])

MIN_PHONE_LENGTH = 6
MAX_BIO_LENGTH = 500


# ── Response schemas ──────────────────────────────────────────

class AuthSession(ApiModel):
    user: UserRead
    workspace: WorkspaceRead | None = None
    token: str | None = None


def _bad_request(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


# ── Routes ────────────────────────────────────────────────────

@router.post(
    "/register",
    response_model=Envelope[AuthSession],
    status_code=status.HTTP_201_CREATED,
)
async def register(
    body: RegisterRequest,
    response: Response,
    session: Session,
    menus: Menus,
) -> Envelope[AuthSession]:
    """Create a user and the workspace they own, then sign them in.

    If the workspace cannot be created the new user is deleted again so
    no account is left without a workspace.
    """
    if not body.full_name or not body.email or not body.password:
        raise _bad_request("All fields are required")
    if message := validate_full_name(body.full_name):
        raise _bad_request(message)
    email = normalize_email(body.email)
    if not is_valid_email(email):
        raise _bad_request("Please enter a valid email address")
    if message := validate_password(body.password):
        raise _bad_request(message)

    existing = await session.execute(select(User.id).where(User.email == email))
    if existing.first() is not None:
        raise _bad_request("Email already exists")

    try:
        user_id = await generate_user_id(session)
    except IdentifierExhausted as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Registration failed. Please try again.",
        ) from exc

    user = User(
        user_id=user_id,
        full_name=body.full_name.strip(),
        email=email,
        password_hash=hash_password(body.password),
    )
    session.add(user)
    try:
        await session.commit()
    except IntegrityError as exc:
        await session.rollback()
        raise _bad_request("Email already exists") from exc

    try:
        workspace = await create_owned_workspace(session, user, menus)
        await session.commit()
    except SQLAlchemyError as exc:
        logger.exception("Workspace creation failed for user %s", user.id)
        await session.rollback()
        await session.delete(user)
        await session.commit()
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to initialize workspace. Please try registering again.",
        ) from exc

    await session.refresh(user)
    token = create_jwt(str(user.id), str(workspace.id))
    set_token_cookie(response, token)
    return ok(
        AuthSession(
            user=await user_read(session, user),
            workspace=await workspace_read(session, workspace),
            token=token,
        ),
        "Account created successfully",
    )


@router.post("/login", response_model=Envelope[AuthSession])
async def login(
    body: LoginRequest,
    response: Response,
    session: Session,
    menus: Menus,
) -> Envelope[AuthSession]:
    if not body.email or not body.password:
        raise _bad_request("Email and password are required")
    email = normalize_email(body.email)
    if not is_valid_email(email):
        raise _bad_request("Please enter a valid email address")

    result = await session.execute(select(User).where(User.email == email))
    user = result.scalar_one_or_none()
    if user is None or not verify_password(body.password, user.password_hash):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
        )

    workspace = await session.get(Workspace, user.workspace_id) if user.workspace_id else None
    if workspace is None:
        workspace = await find_owned_workspace(session, user.id)
        if workspace is None:
            workspace = await create_owned_workspace(session, user, menus)
        else:
            set_primary(user, workspace.id, WorkspaceRole.OWNER, utcnow())
            session.add(user)
        await session.commit()
        await session.refresh(user)

    token = create_jwt(str(user.id), str(workspace.id))
    set_token_cookie(response, token)
    return ok(
        AuthSession(
            user=await user_read(session, user),
            workspace=await workspace_read(session, workspace),
            token=token,
        ),
        "Login successful",
    )


@router.get("/profile", response_model=Envelope[AuthSession])
async def get_profile(auth: Auth, session: Session) -> Envelope[AuthSession]:
    user = await _get_user_or_404(auth, session)
    workspace = await session.get(Workspace, user.workspace_id) if user.workspace_id else None
    return ok(AuthSession(
        user=await user_read(session, user),
        workspace=await workspace_read(session, workspace) if workspace else None,
    ))


@router.put("/profile", response_model=Envelope[AuthSession])
async def update_profile(
    body: ProfileUpdate,
    auth: Auth,
    session: Session,
) -> Envelope[AuthSession]:
    user = await _get_user_or_404(auth, session)

    if body.email is not None and normalize_email(body.email) != user.email:
        raise _bad_request("Email cannot be changed")

    changes: dict[str, str] = {}
    if body.full_name is not None:
        changes["full_name"] = body.full_name.strip()
        if len(changes["full_name"]) < 2:
            raise _bad_request("Full name must be at least 2 characters long")
    if body.phone is not None:
        changes["phone"] = body.phone.strip()
        if changes["phone"] and len(changes["phone"]) < MIN_PHONE_LENGTH:
            raise _bad_request("Phone must be at least 6 characters long")
    if body.bio is not None:
        changes["bio"] = body.bio.strip()
        if len(changes["bio"]) > MAX_BIO_LENGTH:
            raise _bad_request("Bio must be at most 500 characters long")

    for field, value in changes.items():
        setattr(user, field, value)
    user.updated_at = utcnow()
    session.add(user)
    await session.commit()
    await session.refresh(user)
    return ok(AuthSession(user=await user_read(session, user)), "Profile updated successfully")


@router.post("/verify-token", response_model=Envelope[AuthSession])
async def verify_token(auth: Auth, session: Session) -> Envelope[AuthSession]:
    user = await _get_user_or_404(auth, session)
    workspace = await session.get(Workspace, user.workspace_id) if user.workspace_id else None
    if workspace is None:
        workspace = await find_owned_workspace(session, user.id)
    return ok(
        AuthSession(
            user=await user_read(session, user),
            workspace=await workspace_read(session, workspace) if workspace else None,
        ),
        "Token is valid",
    )


# ── Internal helper ───────────────────────────────────────────

async def _get_user_or_404(auth: AuthContext, session) -> User:
    user = await session.get(User, auth.user_id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return user

"""Workspace portfolio page: upsert, slug availability and public read."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlmodel import select

from freyn.api.deps import Session, WorkspaceContext, require_menu
from freyn.api.responses import Envelope, commit_or_conflict, ok
from freyn.models.base import ApiModel, utcnow
from freyn.models.portfolio import (
    Portfolio,
    PortfolioOwner,
    PortfolioRead,
    PortfolioWrite,
    PublicPortfolioRead,
    SlugAvailability,
)
from freyn.models.user import User
from freyn.models.workspace import Workspace
from freyn.services.portfolio_rules import (
    MAX_TITLE_LENGTH,
    SLUG_MESSAGE,
    PortfolioValidationError,
    is_valid_slug,
    normalize_slug,
    sanitize_links,
    sanitize_socials,
    validate_cover,
)

router = APIRouter(prefix="/portfolio", tags=["portfolio"])

PortfolioAccess = Annotated[WorkspaceContext, Depends(require_menu("portfolio"))]


class PortfolioResult(ApiModel):
    portfolio: PortfolioRead | None = None


class PublicPortfolioResult(ApiModel):
    portfolio: PublicPortfolioRead


def _bad_request(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


@router.get("", response_model=Envelope[PortfolioResult])
async def get_portfolio(ctx: PortfolioAccess, session: Session) -> Envelope[PortfolioResult]:
    portfolio = await _workspace_portfolio(ctx, session)
    read = await _to_read(portfolio, ctx.workspace, session) if portfolio else None
    return ok(PortfolioResult(portfolio=read), "Portfolio fetched successfully")


@router.put("", response_model=Envelope[PortfolioResult])
async def save_portfolio(
    body: PortfolioWrite,
    ctx: PortfolioAccess,
    session: Session,
) -> Envelope[PortfolioResult]:
    """Create or replace the workspace's single portfolio."""
    title = (body.title or "").strip()
    if not title:
        raise _bad_request("Portfolio title is required")
    if len(title) > MAX_TITLE_LENGTH:
        raise _bad_request("Portfolio title must be 140 characters or less")

    slug = normalize_slug(body.slug)
    if not slug:
        raise _bad_request("Portfolio slug is required")
    if not is_valid_slug(slug):
        raise _bad_request(SLUG_MESSAGE)
    if await _slug_taken(slug, ctx, session):
        raise _bad_request("Slug is already in use")

    cover_image = body.cover_image or ""
    try:
        validate_cover(cover_image)
        links = sanitize_links(body.links)
        socials = sanitize_socials(body.socials)
    except PortfolioValidationError as exc:
        raise _bad_request(str(exc)) from exc

    portfolio = await _workspace_portfolio(ctx, session)
    if portfolio is None:
        portfolio = Portfolio(workspace_id=ctx.workspace_id, title=title, slug=slug)
    portfolio.title = title
    portfolio.description = body.description or ""
    portfolio.cover_image = cover_image
    portfolio.slug = slug
    portfolio.links = links
    portfolio.socials = socials
    portfolio.updated_at = utcnow()
    session.add(portfolio)
    await commit_or_conflict(session, "portfolio")
    await session.refresh(portfolio)

    read = await _to_read(portfolio, ctx.workspace, session)
    return ok(PortfolioResult(portfolio=read), "Portfolio saved successfully")


@router.get("/check-slug", response_model=Envelope[SlugAvailability])
async def check_slug(
    ctx: PortfolioAccess,
    session: Session,
    slug: Annotated[str, Query()] = "",
) -> Envelope[SlugAvailability]:
    normalized = normalize_slug(slug)
    if not normalized:
        raise _bad_request("Slug is required")
    if not is_valid_slug(normalized):
        raise _bad_request(SLUG_MESSAGE)
    taken = await _slug_taken(normalized, ctx, session)
    return ok(SlugAvailability(available=not taken))


@router.get("/public/{slug}", response_model=Envelope[PublicPortfolioResult])
async def get_public_portfolio(slug: str, session: Session) -> Envelope[PublicPortfolioResult]:
    """Unauthenticated read of a published portfolio by slug."""
    normalized = normalize_slug(slug)
    portfolio = None
    if is_valid_slug(normalized):
        result = await session.execute(select(Portfolio).where(Portfolio.slug == normalized))
        portfolio = result.scalar_one_or_none()
    if portfolio is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Portfolio not found")

    workspace = await session.get(Workspace, portfolio.workspace_id)
    owner = await session.get(User, workspace.owner_id) if workspace else None
    workspace_name = workspace.name if workspace else ""
    public = PublicPortfolioRead(
        id=portfolio.id,
        slug=portfolio.slug,
        title=portfolio.title,
        description=portfolio.description,
        cover_image=portfolio.cover_image,
        links=portfolio.links,
        socials=portfolio.socials,
        workspace_name=workspace_name,
        owner=(
            PortfolioOwner(full_name=owner.full_name, bio=owner.bio)
            if owner else PortfolioOwner(full_name=workspace_name)
        ),
    )
    return ok(PublicPortfolioResult(portfolio=public), "Portfolio fetched successfully")


# ── Internal helpers ──────────────────────────────────────────

async def _workspace_portfolio(ctx: WorkspaceContext, session) -> Portfolio | None:
    result = await session.execute(
        select(Portfolio).where(Portfolio.workspace_id == ctx.workspace_id)
    )
    return result.scalar_one_or_none()


async def _slug_taken(slug: str, ctx: WorkspaceContext, session) -> bool:
    """True when another workspace already publishes under ``slug``."""
    stmt = select(Portfolio.id).where(
        Portfolio.slug == slug,
        Portfolio.workspace_id != ctx.workspace_id,
    )
    result = await session.execute(stmt.limit(1))
    return result.first() is not None


async def _to_read(portfolio: Portfolio, workspace: Workspace, session) -> PortfolioRead:
    owner = await session.get(User, workspace.owner_id)
    read = PortfolioRead.model_validate(portfolio)
    read.workspace_name = workspace.name
    read.owner_name = owner.full_name if owner else ""
    return read

"""Client CRUD: workspace-scoped, addressed by the external clientId."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from sqlmodel import select

from freyn.api.deps import Session, WorkspaceContext, require_menu
from freyn.api.responses import Envelope, commit_or_conflict, ok
from freyn.models.base import ApiModel, utcnow
from freyn.models.client import Client, ClientCreate, ClientRead, ClientUpdate
from freyn.services.identifiers import IdentifierExhausted, generate_client_id

router = APIRouter(prefix="/clients", tags=["clients"])

ClientsAccess = Annotated[WorkspaceContext, Depends(require_menu("clients"))]


class ClientResult(ApiModel):
    client: ClientRead


class ClientList(ApiModel):
    clients: list[ClientRead]


@router.get("", response_model=Envelope[ClientList])
async def list_clients(ctx: ClientsAccess, session: Session) -> Envelope[ClientList]:
    stmt = (
        select(Client)
        .where(Client.workspace_id == ctx.workspace_id)
        .order_by(Client.created_at.desc())  # type: ignore[union-attr]
    )
    result = await session.execute(stmt)
    clients = [ClientRead.model_validate(c) for c in result.scalars().all()]
    return ok(ClientList(clients=clients), "Clients fetched successfully")


@router.post(
    "",
    response_model=Envelope[ClientResult],
    status_code=status.HTTP_201_CREATED,
)
async def create_client(
    body: ClientCreate,
    ctx: ClientsAccess,
    session: Session,
) -> Envelope[ClientResult]:
    if not body.client_name.strip():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Client name is required")

    client_id = (body.client_id or "").strip()
    if not client_id:
        try:
            client_id = await generate_client_id(session, ctx.workspace_id)
        except IdentifierExhausted as exc:
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Failed to create client. Please try again.",
            ) from exc
    client = Client(
        workspace_id=ctx.workspace_id,
        client_id=client_id,
        **body.model_dump(exclude={"client_id"}),
    )
    session.add(client)
    await commit_or_conflict(session, "client")
    await session.refresh(client)
    return ok(ClientResult(client=ClientRead.model_validate(client)), "Client created successfully")


@router.get("/{client_id}", response_model=Envelope[ClientResult])
async def get_client(
    client_id: str, ctx: ClientsAccess, session: Session,
) -> Envelope[ClientResult]:
    client = await _get_or_404(client_id, ctx, session)
    return ok(ClientResult(client=ClientRead.model_validate(client)), "Client fetched successfully")


@router.put("/{client_id}", response_model=Envelope[ClientResult])
async def update_client(
    client_id: str,
    body: ClientUpdate,
    ctx: ClientsAccess,
    session: Session,
) -> Envelope[ClientResult]:
    client = await _get_or_404(client_id, ctx, session)

    update_data = body.model_dump(exclude_unset=True)
    if "client_name" in update_data and not (update_data["client_name"] or "").strip():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Client name is required")
    for field, value in update_data.items():
        setattr(client, field, value if value is not None else "")

    client.updated_at = utcnow()
    session.add(client)
    await commit_or_conflict(session, "client")
    await session.refresh(client)
    return ok(ClientResult(client=ClientRead.model_validate(client)), "Client updated successfully")


@router.delete("/{client_id}", response_model=Envelope[ClientResult])
async def delete_client(
    client_id: str, ctx: ClientsAccess, session: Session,
) -> Envelope[ClientResult]:
    client = await _get_or_404(client_id, ctx, session)
    deleted = ClientRead.model_validate(client)
    await session.delete(client)
    await session.commit()
    return ok(ClientResult(client=deleted), "Client deleted successfully")


# ── Internal helper ───────────────────────────────────────────

async def _get_or_404(client_id: str, ctx: WorkspaceContext, session) -> Client:
    stmt = select(Client).where(
        Client.workspace_id == ctx.workspace_id,
        Client.client_id == client_id,
    )
    result = await session.execute(stmt)
    client = result.scalar_one_or_none()
    if client is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Client not found")
    return client

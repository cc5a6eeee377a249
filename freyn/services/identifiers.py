"""Generators for human-facing external identifiers."""

import logging
import random
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from freyn.models.base import epoch_millis
from freyn.models.client import Client
from freyn.models.project import Project
from freyn.models.service import Service
from freyn.models.user import User

logger = logging.getLogger(__name__)

USER_ID_ATTEMPTS = 10
NUMBER_ORDER_ATTEMPTS = 25
TIMESTAMP_ID_ATTEMPTS = 10


class IdentifierExhausted(RuntimeError):
    """No free identifier was found within the attempt bound."""


async def generate_user_id(session: AsyncSession) -> str:
    """Random unique 5-digit user id (10000-99999)."""
    for _ in range(USER_ID_ATTEMPTS):
        candidate = str(random.randint(10000, 99999))
        result = await session.execute(select(User.id).where(User.user_id == candidate))
        if result.first() is None:
            return candidate
    logger.error("Could not allocate a user id after %d attempts", USER_ID_ATTEMPTS)
    raise IdentifierExhausted("Unable to generate unique user ID after multiple attempts")


async def number_order_exists(session: AsyncSession, workspace_id, number_order: str) -> bool:
    stmt = select(Project.id).where(
        Project.workspace_id == workspace_id,
        Project.number_order == number_order,
    )
    result = await session.execute(stmt.limit(1))
    return result.first() is not None


async def generate_number_order(
    session: AsyncSession, workspace_id, now: datetime | None = None
) -> str:
    """``FM-DDMMYY-NNNNN``; falls back to a timestamp suffix when crowded."""
    date_part = (now or datetime.now()).strftime("%d%m%y")
    for _ in range(NUMBER_ORDER_ATTEMPTS):
        candidate = f"FM-{date_part}-{random.randint(10000, 99999)}"
        if not await number_order_exists(session, workspace_id, candidate):
            return candidate
    return f"FM-{date_part}-{epoch_millis()[-5:]}"


async def _timestamp_id_taken(session: AsyncSession, column, workspace_column, workspace_id, value) -> bool:
    stmt = select(column).where(workspace_column == workspace_id, column == value)
    result = await session.execute(stmt.limit(1))
    return result.first() is not None


async def _unique_timestamp_id(session, column, workspace_column, workspace_id, prefix="") -> str:
    """Millisecond timestamp id; a random tail is added on a same-millisecond clash."""
    candidate = f"{prefix}{epoch_millis()}"
    for _ in range(TIMESTAMP_ID_ATTEMPTS):
        if not await _timestamp_id_taken(session, column, workspace_column, workspace_id, candidate):
            return candidate
        candidate = f"{prefix}{epoch_millis()}{random.randint(100, 999)}"
    logger.error("Could not allocate a %s after %d attempts", column.key, TIMESTAMP_ID_ATTEMPTS)
    raise IdentifierExhausted("Unable to generate unique ID after multiple attempts")


async def generate_client_id(session: AsyncSession, workspace_id) -> str:
    return await _unique_timestamp_id(
        session, Client.client_id, Client.workspace_id, workspace_id, prefix="C",
    )


async def generate_service_id(session: AsyncSession, workspace_id) -> str:
    return await _unique_timestamp_id(
        session, Service.service_id, Service.workspace_id, workspace_id,
    )

"""Uniform ``{success, message, data}`` envelope and error rendering."""

import logging
import re
from typing import Generic, TypeVar

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Envelope(BaseModel, Generic[T]):
    success: bool = True
    message: str = "Success"
    data: T | None = None


def ok(data: T | None = None, message: str = "Success") -> Envelope[T]:
    return Envelope(success=True, message=message, data=data)


def error_body(message: str) -> dict:
    return {"success": False, "message": message}


# ── Duplicate-key translation ─────────────────────────────────

# SQLite:   UNIQUE constraint failed: clients.workspace_id, clients.client_id
# Postgres: Key (workspace_id, client_id)=(..., ...) already exists.
_SQLITE_UNIQUE = re.compile(r"UNIQUE constraint failed: (?P<cols>[\w., ]+)")
_POSTGRES_KEY = re.compile(r"Key \((?P<cols>[\w, ]+)\)=")


def _to_camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)


def duplicate_field(exc: IntegrityError) -> str | None:
    """Name (camelCase) of the column whose unique index was violated."""
    text = str(exc.orig) if exc.orig is not None else str(exc)
    match = _SQLITE_UNIQUE.search(text) or _POSTGRES_KEY.search(text)
    if not match:
        return None
    columns = [c.strip().split(".")[-1] for c in match.group("cols").split(",")]
    # Composite keys lead with workspace_id; the last column is the one users see.
    return _to_camel(columns[-1]) if columns else None


async def commit_or_conflict(session: AsyncSession, entity: str) -> None:
    """Commit, turning unique-index violations into a 400 naming the field."""
    try:
        await session.commit()
    except IntegrityError as exc:
        await session.rollback()
        field = duplicate_field(exc)
        if field is None:
            logger.exception("Integrity error while saving %s", entity)
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Could not save {entity}",
            ) from exc
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"A {entity} with this {field} already exists",
        ) from exc


# ── Exception handlers ───────────────────────────────────────

def _operation(request: Request) -> str:
    endpoint = request.scope.get("endpoint")
    name = getattr(endpoint, "__name__", "")
    return name.replace("_", " ") if name else "process request"


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(str(exc.detail)),
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    messages = []
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ()) if part != "body"]
        prefix = f"{'.'.join(loc)}: " if loc else ""
        messages.append(f"{prefix}{err.get('msg', 'invalid value')}")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_body(f"Validation failed: {', '.join(messages)}"),
    )


async def storage_exception_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.exception("Storage error during %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_body(f"Failed to {_operation(request)}"),
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error during %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_body(f"Failed to {_operation(request)}"),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(SQLAlchemyError, storage_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

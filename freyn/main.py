"""FastAPI application entrypoint."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from freyn.api.responses import register_exception_handlers
from freyn.api.v1 import v1_router
from freyn.core.config import get_settings
from freyn.core.database import dispose_db, init_db
from freyn.core.permissions import get_menu_config

_settings = get_settings()


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    # Startup: configure logging, load the menu catalog, ensure tables exist
    # (use Alembic in production)
    logging.basicConfig(
        level=_settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    get_menu_config()
    await init_db()
    yield
    # Shutdown: release pooled connections
    await dispose_db()


app = FastAPI(
    title="Freyn",
    version="0.1.0",
    description="Workspace-based freelance management API",
    lifespan=lifespan,
)

# ── CORS ─────────────────────────────────────────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in _settings.allowed_origins.split(",")],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ── Errors → {success, message} envelope ─────────────────────
register_exception_handlers(app)

# ── API routes ───────────────────────────────────────────────
app.include_router(v1_router)


@app.get("/health", tags=["system"])
async def health_check() -> dict:
    return {"status": "ok"}

from __future__ import annotations

import logging
import os
from functools import lru_cache
from pathlib import Path
from typing import Any

from alembic.config import Config
from alembic.script import ScriptDirectory
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from app.api.v1.router import api_router
from app.core.config import get_settings
from app.core.db import get_engine
from app.services.rule_store import NumberLookup


logger = logging.getLogger(__name__)


@lru_cache
def _repo_head_revision() -> str | None:
    default_alembic_path = Path(__file__).resolve().parents[1] / "alembic.ini"
    alembic_path = Path(os.getenv("ALEMBIC_CONFIG_PATH", str(default_alembic_path)))
    if not alembic_path.exists():
        return None

    cfg = Config(str(alembic_path))
    cfg.set_main_option("script_location", str(alembic_path.parent / "alembic"))
    script = ScriptDirectory.from_config(cfg)
    return script.get_current_head()


def create_app(*, number_lookup: NumberLookup | None = None) -> FastAPI:
    settings = get_settings()
    app = FastAPI(title="Document Numbering", version="1.0")
    app.state.number_lookup = number_lookup
    if settings.numbering_duplicate_check and number_lookup is None:
        logger.warning("NUMBERING_DUPLICATE_CHECK is on but no number lookup was given; every number counts as new")

    if settings.cors_origin_list:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.cors_origin_list,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    @app.get("/healthz")
    async def healthz() -> dict[str, str]:
        return {"status": "ok"}

    @app.get("/healthz/deep")
    async def deep_healthz() -> JSONResponse:
        payload: dict[str, Any] = {
            "status": "ok",
            "checks": {
                "database": "ok",
            },
        }
        current_revision: str | None = None
        try:
            async with get_engine().connect() as conn:
                await conn.execute(text("SELECT 1"))
                try:
                    current_revision = await conn.scalar(text("SELECT version_num FROM alembic_version LIMIT 1"))
                except SQLAlchemyError:
                    current_revision = None
        except SQLAlchemyError as exc:
            payload["status"] = "error"
            payload["checks"]["database"] = "error"
            payload["error"] = f"{exc.__class__.__name__}: {exc}"
            return JSONResponse(status_code=503, content=payload)

        repo_head = _repo_head_revision()
        if current_revision is None:
            migration_state = "missing_alembic_version"
        elif repo_head is None:
            migration_state = "unknown_repo_head"
        elif current_revision == repo_head:
            migration_state = "up_to_date"
        else:
            migration_state = "behind_head"

        payload["checks"]["migration"] = {
            "state": migration_state,
            "current_revision": current_revision,
            "repo_head_revision": repo_head,
        }

        healthy = migration_state == "up_to_date"
        payload["status"] = "ok" if healthy else "degraded"
        return JSONResponse(status_code=200 if healthy else 503, content=payload)

    @app.on_event("shutdown")
    async def shutdown() -> None:
        await get_engine().dispose()

    app.include_router(api_router, prefix="/api/v1")
    return app

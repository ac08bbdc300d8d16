"""
FastAPI application — loopback bridge to the Waitful background runtime.
Runs on http://127.0.0.1:8766 by default.

Singletons (runtime, local store) live on app.state so that each call to
create_app() produces a fully independent instance with no shared
module-level globals. This makes test isolation straightforward.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from ..config import config
from ..runtime.background import BackgroundRuntime
from ..storage import LocalStore

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Lifespan — initialises and tears down all per-app state
# ---------------------------------------------------------------------------

@asynccontextmanager
async def lifespan(app: FastAPI):
    app.state.store = LocalStore(config.data_dir / config.local_store_db)
    app.state.runtime = BackgroundRuntime()

    def _on_badge(text: str):
        logger.debug("badge -> %r", text)

    app.state.runtime.focus.badge.register_listener(_on_badge)
    await app.state.runtime.start()

    yield

    await app.state.runtime.stop()


# ---------------------------------------------------------------------------
# App factory
# ---------------------------------------------------------------------------

def create_app() -> FastAPI:
    app = FastAPI(
        title="Waitful",
        description="Local background runtime for mindful pauses and focus sessions",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["null"],
        allow_origin_regex=r"^(chrome|moz)-extension://.*$",
        allow_methods=["*"],
        allow_headers=["*"],
    )

    from .routers import pauses, runtime, settings

    app.include_router(runtime.router)
    app.include_router(settings.router)
    app.include_router(pauses.router)

    @app.get("/health")
    def health(request: Request):
        rt = getattr(request.app.state, "runtime", None)
        focus_active = bool(rt and rt.focus.session.active)
        return {"status": "ok", "version": "0.1.0", "focus_active": focus_active}

    return app


app = create_app()

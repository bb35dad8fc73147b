"""
# `gymdesk/main.py` - Application entry point

## Overview
Builds the FastAPI app: logging, CORS, error handlers, routers, the document
store and identity service on `app.state`, and the background scheduler.

`create_app(store=..., identity=..., settings=...)` accepts ready-made
backends (the tests pass an in-memory store and a fake identity service);
otherwise they are built from the environment via `gymdesk.config`.

---

## Routers
**Public / signed-in:**
- `/auth` (register, login, logout, me)
- `/me` (client self-service)

**Admin (prefix `/admin`, guarded by `get_current_admin`):**
- `/modalities`
- `/shifts`
- `/clients`
- `/accounts` (client accounts to link)
- `/payments`
- `/settings/brand`
- `/dashboard`

---

## Background scheduler
- **Library:** APScheduler (`AsyncIOScheduler`)
- **Job:** `reconcile_account_links_once` (repairs the `account_links` index)
- **Interval:** `LINK_RECONCILE_MINUTES` (default 60, `0` disables the job)

Started and stopped by the app lifespan.
"""
import logging
from contextlib import asynccontextmanager
from typing import Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

load_dotenv()

from gymdesk.config import Settings, build_identity, build_store, settings as default_settings  # noqa: E402
from gymdesk.core.handlers import register_exception_handlers  # noqa: E402
from gymdesk.core.logging import setup_logging  # noqa: E402
from gymdesk.routers import accounts, auth, clients, dashboard, me, modalities, payments, shifts  # noqa: E402
from gymdesk.routers import settings as settings_router  # noqa: E402
from gymdesk.services.link_sync import reconcile_account_links_once  # noqa: E402

logger = logging.getLogger("gymdesk.main")


def create_app(store=None, identity=None, settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or default_settings
    setup_logging(settings.debug)

    scheduler = AsyncIOScheduler()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        remove_listener = app.state.identity.on_auth_change(
            lambda account_id: logger.info("Auth state changed: %s", account_id or "signed out")
        )
        if settings.link_reconcile_minutes > 0:
            scheduler.add_job(
                reconcile_account_links_once,
                "interval",
                args=[app.state.store],
                minutes=settings.link_reconcile_minutes,
                id="account-links-sync",
                replace_existing=True,
            )
            scheduler.start()
        try:
            yield
        finally:
            if scheduler.running:
                scheduler.shutdown(wait=False)
            remove_listener()

    app = FastAPI(
        title="GymDesk API",
        description="Backend API for gym management: clients, memberships, modalities and class shifts.",
        version="1.0.0",
        redirect_slashes=False,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.store = store if store is not None else build_store(settings)
    app.state.identity = identity if identity is not None else build_identity(settings)

    # Configure CORS (comma-separated origins or '*')
    allow_origins = [o.strip() for o in settings.allowed_origins.split(",")] if settings.allowed_origins else ["*"]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_exception_handlers(app)

    # Include public routers
    app.include_router(auth.router)
    app.include_router(me.router)

    # Include admin routers (with prefix /admin)
    app.include_router(modalities.admin_router, prefix="/admin")
    app.include_router(shifts.admin_router, prefix="/admin")
    app.include_router(clients.admin_router, prefix="/admin")
    app.include_router(accounts.admin_router, prefix="/admin")
    app.include_router(payments.admin_router, prefix="/admin")
    app.include_router(settings_router.admin_router, prefix="/admin")
    app.include_router(dashboard.admin_router, prefix="/admin")

    @app.get("/health", tags=["Health"])
    def health():
        return {"status": "ok", "store": settings.store_backend}

    return app


app = create_app()

# Run the app directly with uvicorn (for development)
if __name__ == "__main__":
    import uvicorn
    uvicorn.run("gymdesk.main:app", host="0.0.0.0", port=8000, reload=True)

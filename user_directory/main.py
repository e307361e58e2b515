from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.responses import JSONResponse

from user_directory.deps import build_user_store
from user_directory.logging_config import configure_logging
from user_directory.routers.users import router as users_router
from user_directory.settings import get_settings

logger = logging.getLogger("user_directory")

APP_VERSION = "1.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    configure_logging(settings.log_level)

    store = build_user_store(settings)
    # A failed initialization is fatal: the app refuses to start.
    await store.initialize()
    app.state.user_store = store
    app.state.backend = settings.user_store_backend
    logger.info("User directory started (backend=%s)", settings.user_store_backend)
    try:
        yield
    finally:
        await store.close()
        logger.info("User directory stopped")


app = FastAPI(title="User Directory", version=APP_VERSION, lifespan=lifespan)
app.include_router(users_router)


@app.get("/healthz")
def healthz():
    store = getattr(app.state, "user_store", None)
    return JSONResponse(
        {
            "ok": True,
            "service": "user-directory",
            "version": APP_VERSION,
            "backend": getattr(app.state, "backend", None),
            "store_initialized": bool(store is not None and store.initialized),
        }
    )

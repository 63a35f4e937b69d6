from contextlib import asynccontextmanager
import logging
import os

from starlette.concurrency import run_in_threadpool

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app):
    settings = app.state.settings
    store = app.state.store

    os.makedirs(settings.upload_dir, exist_ok=True)
    await run_in_threadpool(store.init)
    logger.info(
        "app_started env=%s database=%s ai_enabled=%s",
        settings.app_env,
        settings.database_path,
        app.state.ai_adapter.enabled,
    )
    try:
        yield
    finally:
        store.close()
        logger.info("app_stopped")

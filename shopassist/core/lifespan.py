# shopassist/core/lifespan.py
from contextlib import asynccontextmanager
import logging
from fastapi import FastAPI
from shopassist.core.config import get_settings
from shopassist.domain.services.assistant_svc import build_assistant

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()

    # --- Startup ---
    # A broken catalog seed is fatal: serving an empty catalog would look like "no results"
    try:
        app.state.assistant = build_assistant(settings)
    except Exception as e:
        logger.error(f"Assistant startup failed (CATALOG_PATH={settings.CATALOG_PATH}): {e}")
        raise
    if not settings.CATALOG_PATH:
        logger.warning("No CATALOG_PATH provided, starting with an empty catalog")

    # Application runs
    yield

    # --- Shutdown ---
    app.state.assistant = None
    logger.info("Assistant stopped")

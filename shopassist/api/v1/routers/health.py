# shopassist/api/v1/routers/health.py
import time
from fastapi import APIRouter, Request
from shopassist.core.config import get_settings

router = APIRouter()
START_TIME = time.time()


@router.get("/health")
async def health(request: Request):
    """
    Liveness plus basic info:
    - assistant wired at startup
    - catalog snapshot size (0 is allowed, reported as a warning status)
    """
    settings = get_settings()
    checks: dict[str, object] = {
        "app_name": settings.APP_NAME,
        "env": settings.APP_ENV,
        "debug": settings.DEBUG,
        "uptime_seconds": int(time.time() - START_TIME),
    }

    assistant = getattr(request.app.state, "assistant", None)
    checks["assistant"] = "ok" if assistant is not None else "error: not initialized"
    checks["catalog_size"] = len(assistant.catalog) if assistant is not None else 0

    if assistant is None:
        status = "error"
    elif checks["catalog_size"] == 0:
        status = "degraded"
    else:
        status = "ok"

    return {"status": status, "checks": checks, "timestamp": int(time.time())}

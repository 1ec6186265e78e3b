from fastapi import FastAPI
from shopassist.core.config import get_settings
from shopassist.core.lifespan import lifespan
from shopassist.api.v1.routers.assistant import router as assistant_router
from shopassist.api.v1.routers.health import router as health_router
from shopassist.api.v1.routers.search import router as search_router
from shopassist.core.logging import configure_logging

from fastapi.middleware.cors import CORSMiddleware
import logging, os

settings = get_settings()
configure_logging(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    colored=settings.APP_ENV == "development",
)

app = FastAPI(title=settings.APP_NAME, lifespan=lifespan)

# ------- CORS -------
# ALLOWED_ORIGINS is a CSV, e.g. "https://app.example.com,http://localhost:8081"
allowed_origins_env = os.getenv("ALLOWED_ORIGINS", "")
allowed_origins = [o.strip() for o in allowed_origins_env.split(",") if o.strip()]

app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins or ["http://localhost:8081"],  # Expo dev server
    allow_credentials=False,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
    max_age=86400,
)

# ------- Routes -------
app.include_router(health_router)
app.include_router(search_router, prefix=settings.api_prefix)         # text search
app.include_router(assistant_router, prefix=settings.api_prefix)      # parse / handle / ask

import uvicorn
from contextlib import asynccontextmanager

import redis.asyncio as redis

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from aidreams.api.core.exceptions.base import register_exception_handlers
from aidreams.api.core.middleware.logging import logging_middleware
from aidreams.api.router import api_router
from aidreams.database.connection import AsyncSessionLocal, create_tables
from aidreams.utils.settings.app import AppSettings
from aidreams.utils.settings.auth import AuthSettings
from aidreams.utils.settings.redis import RedisSettings
from aidreams.utils.logger import setup_logging


app_settings = AppSettings()
is_production = app_settings.ENVIRONMENT.upper() == "PROD"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    logger = setup_logging(is_production, app_settings.LOG_LEVEL)
    logger.info("Starting AI Dreams API...")
    app_settings.validate_prod()
    AuthSettings().validate_secret()

    if app_settings.CREATE_TABLES_ON_STARTUP:
        await create_tables()
        logger.info("Database tables ensured")

    app.state.session_factory = AsyncSessionLocal
    logger.info("Database session factory added to app state")

    redis_client = redis.from_url(RedisSettings().REDIS_URL, decode_responses=True)
    app.state.redis = redis_client

    yield

    await redis_client.aclose()
    logger.info("Shutting down AI Dreams API...")


app = FastAPI(
    title="AI Dreams API",
    description="Dream journaling with AI stories and illustrations",
    version=app_settings.API_VERSION,
    lifespan=lifespan,
    docs_url=None if is_production else "/docs",
    redoc_url=None if is_production else "/redoc",
    openapi_url=None if is_production else "/openapi.json",
)

register_exception_handlers(app)

app.add_middleware(
    CORSMiddleware,
    allow_origins=app_settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.middleware("http")(logging_middleware)

app.include_router(api_router)


def run_dev_server():
    """Run development server with auto-reload."""
    uvicorn.run(
        "aidreams.main:app", host="0.0.0.0", port=8000, reload=True, access_log=False
    )


def run_prod_server():
    """Run production server."""
    uvicorn.run(
        "aidreams.main:app", host="0.0.0.0", port=8000, reload=False, access_log=False
    )

"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from otp_auth.api.auth import router as auth_router
from otp_auth.api.dependencies import kv_store
from otp_auth.api.errors import auth_error_handler
from otp_auth.api.users import router as users_router
from otp_auth.config import settings
from otp_auth.database.engine import init_db
from otp_auth.errors import AuthError

logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup / shutdown lifecycle hook."""
    logger.info("Starting %s …", settings.app_name)
    await init_db()
    logger.info("Database initialised")
    await kv_store.ping()
    logger.info("Key-value store reachable")
    yield
    logger.info("Shutting down %s …", settings.app_name)
    await kv_store.close()


app = FastAPI(
    title=settings.app_name,
    description="Phone-number authentication with one-time codes and signed sessions",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_exception_handler(AuthError, auth_error_handler)
app.include_router(auth_router)
app.include_router(users_router)


@app.get("/health")
async def health_check():
    """Simple liveness probe."""
    return {"status": "healthy", "app": settings.app_name}


def run() -> None:
    uvicorn.run("otp_auth.main:app", host="0.0.0.0", port=8080)

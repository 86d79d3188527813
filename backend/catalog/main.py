import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.responses import PlainTextResponse

from catalog.core.logging import setup_logging

setup_logging()

from catalog.api.errors import install_exception_handlers
from catalog.api.middleware.cors import setup_cors
from catalog.api.middleware.request_id import RequestIdMiddleware
from catalog.api.routes import auth, health, products
from catalog.core.config import settings
from catalog.core.database import engine

logger = logging.getLogger(__name__)

try:
    settings.validate_secrets()
except ValueError as e:
    logger.critical("Secret validation failed: %s", e)
    raise SystemExit(f"FATAL: {e}") from e

if not settings.cloudinary_configured:
    logger.warning("Cloudinary is not configured; product images will not be purged on delete")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    yield
    await engine.dispose()


app = FastAPI(
    title="Shoe Catalog API",
    version="1.0.0",
    lifespan=lifespan,
)

install_exception_handlers(app)
setup_cors(app)
app.add_middleware(RequestIdMiddleware)

app.include_router(health.router, prefix="/api")
app.include_router(auth.router, prefix="/api")
app.include_router(products.router, prefix="/api")


@app.get("/", response_class=PlainTextResponse, include_in_schema=False)
async def root() -> str:
    return "Shoe catalog backend is running..."

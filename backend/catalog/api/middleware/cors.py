import logging
from urllib.parse import urlparse

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from catalog.api.middleware.request_id import REQUEST_ID_HEADER
from catalog.core.config import settings

logger = logging.getLogger(__name__)

# Storefront reads are anonymous and the dashboard sends a bearer token, so no
# cookies cross origins.
ALLOWED_METHODS = ["GET", "POST", "PUT", "DELETE", "OPTIONS"]
ALLOWED_HEADERS = ["Authorization", "Content-Type", REQUEST_ID_HEADER]


def _validate_origins(origins: list[str]) -> None:
    if not origins:
        raise ValueError("CORS_ALLOWED_ORIGINS must list at least one origin")
    for origin in origins:
        parsed = urlparse(origin)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValueError(f"Invalid CORS origin: {origin!r}")
        if parsed.path not in ("", "/"):
            raise ValueError(f"CORS origin must not contain a path: {origin!r}")


def setup_cors(app: FastAPI) -> None:
    origins = [o.rstrip("/") for o in settings.cors_origins_list]
    _validate_origins(origins)
    logger.info("CORS allowed origins: %s", ", ".join(origins))
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=False,
        allow_methods=ALLOWED_METHODS,
        allow_headers=ALLOWED_HEADERS,
        expose_headers=[REQUEST_ID_HEADER],
        max_age=600,
    )

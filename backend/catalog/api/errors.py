import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


def _format_validation_error(error: dict) -> str:
    # ("body", "colors", 0, "imageUrls") -> "colors.0.imageUrls"
    loc = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")]
    location = ".".join(loc)
    return f"{location}: {error.get('msg')}" if location else str(error.get("msg"))


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    content = {"message": exc.detail}
    errors = getattr(exc, "errors", None)
    if errors:
        content["errors"] = errors
    return JSONResponse(
        status_code=exc.status_code,
        content=content,
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = [_format_validation_error(e) for e in exc.errors()]
    logger.info("Rejected %s %s: %s", request.method, request.url.path, "; ".join(errors))
    return JSONResponse(
        status_code=400,
        content={"message": "Validation failed", "errors": errors},
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content={"message": "Internal server error"},
    )


def install_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

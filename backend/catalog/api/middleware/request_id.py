import logging
import re
import time
import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger("catalog.access")

REQUEST_ID_HEADER = "X-Request-ID"
_REQUEST_ID_RE = re.compile(r"^[a-zA-Z0-9\-_.]{1,128}$")

request_id_var: ContextVar[str] = ContextVar("request_id", default="")


def current_request_id() -> str:
    return request_id_var.get()


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Tags each request with an id (client-supplied if well formed) and
    writes one access line per request, since uvicorn's own access log is
    muted by ``setup_logging``."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        client_id = request.headers.get(REQUEST_ID_HEADER)
        request_id = client_id if client_id and _REQUEST_ID_RE.match(client_id) else uuid.uuid4().hex
        request.state.request_id = request_id

        token = request_id_var.set(request_id)
        start = time.monotonic()
        try:
            response = await call_next(request)
            logger.info(
                "%s %s -> %d", request.method, request.url.path, response.status_code,
                extra={"duration_ms": round((time.monotonic() - start) * 1000)},
            )
        finally:
            request_id_var.reset(token)

        response.headers[REQUEST_ID_HEADER] = request_id
        return response

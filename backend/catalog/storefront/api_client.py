import logging
from uuid import UUID

import httpx
from pydantic import ValidationError

from catalog.core.config import settings
from catalog.models.dto.product import BatchDeleteResponse, ProductResponse

logger = logging.getLogger(__name__)


class ApiError(Exception):
    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code

    @property
    def is_auth_failure(self) -> bool:
        return self.status_code in (401, 403)


class SessionExpiredError(ApiError):
    """The stored credential was rejected and has been cleared."""


def _error_message(resp: httpx.Response) -> str:
    try:
        body = resp.json()
    except ValueError:
        body = None
    message = body.get("message") if isinstance(body, dict) else None
    return message if isinstance(message, str) and message else resp.reason_phrase


def _parse(resp: httpx.Response, parser):
    """Apply ``parser`` to the JSON body; malformed payloads become ApiError."""
    try:
        return parser(resp.json())
    except (ValueError, TypeError, KeyError, ValidationError) as e:
        logger.warning("Invalid response from %s: %s", resp.request.url, e)
        raise ApiError("Invalid response from server", status_code=resp.status_code) from e


class CatalogApiClient:
    """HTTP client for the catalog REST API used by storefront and dashboard."""

    def __init__(
        self,
        base_url: str | None = None,
        *,
        timeout: float = 15.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = (base_url or settings.api_base_url).rstrip("/")
        self._timeout = timeout
        self._transport = transport

    async def _request(
        self, method: str, path: str, *, token: str | None = None, **kwargs,
    ) -> httpx.Response:
        headers = {"Accept": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        try:
            async with httpx.AsyncClient(
                base_url=self.base_url, timeout=self._timeout, transport=self._transport,
            ) as client:
                resp = await client.request(method, path, headers=headers, **kwargs)
        except httpx.HTTPError as e:
            logger.warning("%s %s failed: %s", method, path, e)
            raise ApiError(f"Network error: {e}") from e

        if resp.is_error:
            message = _error_message(resp)
            logger.warning("%s %s -> HTTP %d: %s", method, path, resp.status_code, message)
            raise ApiError(message, status_code=resp.status_code)
        return resp

    async def list_products(
        self, category: str | None = None, *, token: str | None = None,
    ) -> list[ProductResponse]:
        params = {"category": category} if category else None
        resp = await self._request("GET", "/products", params=params, token=token)
        return _parse(resp, lambda body: [ProductResponse.model_validate(item) for item in body])

    async def get_product(self, product_id: UUID | str) -> ProductResponse:
        resp = await self._request("GET", f"/products/{product_id}")
        return _parse(resp, ProductResponse.model_validate)

    async def login(self, username: str, password: str) -> str:
        resp = await self._request(
            "POST", "/auth/login", json={"username": username, "password": password},
        )
        return _parse(resp, lambda body: body["token"])

    async def delete_product(self, product_id: UUID | str, *, token: str) -> str:
        resp = await self._request("DELETE", f"/products/{product_id}", token=token)
        return _parse(resp, lambda body: body["message"])

    async def batch_delete(
        self, product_ids: list[UUID | str], *, token: str,
    ) -> BatchDeleteResponse:
        resp = await self._request(
            "DELETE", "/products/batch",
            json={"ids": [str(pid) for pid in product_ids]},
            token=token,
        )
        return _parse(resp, BatchDeleteResponse.model_validate)

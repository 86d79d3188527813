import logging
from typing import Protocol, runtime_checkable

import httpx

from catalog.core.config import settings
from catalog.core.exceptions import ExternalServiceError
from catalog.integrations.cloudinary.models import DeleteResourcesResult

logger = logging.getLogger(__name__)

CLOUDINARY_API_BASE = "https://api.cloudinary.com/v1_1"
# Admin API limit for a single delete_resources call
MAX_PUBLIC_IDS_PER_REQUEST = 100


@runtime_checkable
class ImageHostProtocol(Protocol):
    async def delete_resources(self, public_ids: list[str]) -> DeleteResourcesResult: ...


class CloudinaryClient:
    """Cloudinary Admin API client, limited to what the catalog needs."""

    def __init__(
        self,
        cloud_name: str | None = None,
        api_key: str | None = None,
        api_secret: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.cloud_name = cloud_name if cloud_name is not None else settings.cloudinary_cloud_name
        self.api_key = api_key if api_key is not None else settings.cloudinary_api_key
        self.api_secret = api_secret if api_secret is not None else settings.cloudinary_api_secret
        self._transport = transport

    @property
    def configured(self) -> bool:
        return bool(self.cloud_name and self.api_key and self.api_secret)

    @property
    def resources_url(self) -> str:
        return f"{CLOUDINARY_API_BASE}/{self.cloud_name}/resources/image/upload"

    async def delete_resources(self, public_ids: list[str]) -> DeleteResourcesResult:
        """Delete uploaded images by public id.

        Large id lists are split into several Admin API calls. Ids the host
        does not know come back as ``not_found``, so repeating a delete is
        harmless.
        """
        if not self.configured:
            raise ExternalServiceError("cloudinary", "credentials are not configured")

        result = DeleteResourcesResult()
        async with httpx.AsyncClient(
            timeout=30.0,
            auth=(self.api_key, self.api_secret),
            transport=self._transport,
        ) as client:
            for start in range(0, len(public_ids), MAX_PUBLIC_IDS_PER_REQUEST):
                chunk = public_ids[start:start + MAX_PUBLIC_IDS_PER_REQUEST]
                try:
                    resp = await client.delete(
                        self.resources_url,
                        params=[("public_ids[]", pid) for pid in chunk],
                    )
                    resp.raise_for_status()
                    data = resp.json()
                except httpx.HTTPStatusError as e:
                    raise ExternalServiceError(
                        "cloudinary", f"HTTP {e.response.status_code}: {e.response.text[:200]}"
                    ) from e
                except (httpx.HTTPError, ValueError) as e:
                    raise ExternalServiceError("cloudinary", str(e) or type(e).__name__) from e

                result.deleted.update(data.get("deleted") or {})
                result.partial = result.partial or bool(data.get("partial"))

        logger.info(
            "Cloudinary delete_resources: requested=%d not_found=%d partial=%s",
            len(public_ids), len(result.not_found), result.partial,
        )
        return result

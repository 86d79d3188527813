"""Hosted image bookkeeping: mapping stored URLs back to Cloudinary public
ids and best-effort removal of those images when products go away."""
import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum

from catalog.integrations.cloudinary.client import ImageHostProtocol
from catalog.models.dto.product import ColorVariant
from catalog.models.orm.product import Product

logger = logging.getLogger(__name__)


class CleanupStatus(str, Enum):
    APPLIED = "applied"
    PARTIAL = "partial"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass
class ImageCleanupResult:
    """Outcome of a best-effort purge. Never raised, only reported."""

    status: CleanupStatus
    public_ids: list[str] = field(default_factory=list)
    unresolved_urls: list[str] = field(default_factory=list)
    error: str | None = None

    @property
    def suppressed_failure(self) -> bool:
        return self.status in (CleanupStatus.FAILED, CleanupStatus.PARTIAL)


def resolve_public_id(url: str) -> str | None:
    """Derive the Cloudinary public id from a delivery URL.

    ``https://res.cloudinary.com/demo/image/upload/v1680/shop/abc.jpg``
    resolves to ``shop/abc``. Returns None when the URL does not follow the
    ``.../upload/<version>/<path>`` layout.
    """
    if not url:
        return None
    parts = url.split("/")
    try:
        upload_index = parts.index("upload")
    except ValueError:
        return None
    if upload_index + 2 >= len(parts):
        return None

    path = "/".join(parts[upload_index + 2:])
    dot = path.rfind(".")
    public_id = path[:dot] if dot != -1 else path
    return public_id or None


def _image_urls(product: Product) -> Iterable[str]:
    for raw in product.colors or []:
        yield from ColorVariant.model_validate(raw).image_urls


def collect_public_ids(products: Iterable[Product]) -> tuple[list[str], list[str]]:
    """Return (unique public ids in first-seen order, unresolvable URLs)."""
    public_ids: dict[str, None] = {}
    unresolved: list[str] = []
    for product in products:
        for url in _image_urls(product):
            public_id = resolve_public_id(url)
            if public_id is None:
                logger.warning(
                    "Could not extract public_id for deletion from URL %s (product %s)",
                    url, product.id,
                )
                unresolved.append(url)
                continue
            public_ids.setdefault(public_id, None)
    return list(public_ids), unresolved


async def purge_images(
    image_host: ImageHostProtocol,
    public_ids: list[str],
    *,
    context: str,
    unresolved_urls: list[str] | None = None,
) -> ImageCleanupResult:
    """Ask the image host to delete ``public_ids``; failures are logged and
    reported in the result, never raised."""
    unresolved = list(unresolved_urls or [])
    if not public_ids:
        logger.info("No hosted images to delete for %s", context)
        return ImageCleanupResult(status=CleanupStatus.SKIPPED, unresolved_urls=unresolved)

    logger.info("Deleting %d hosted images for %s", len(public_ids), context)
    try:
        outcome = await image_host.delete_resources(public_ids)
    except Exception as e:
        logger.exception("Image host delete failed for %s (non-fatal)", context)
        return ImageCleanupResult(
            status=CleanupStatus.FAILED,
            public_ids=list(public_ids),
            unresolved_urls=unresolved,
            error=str(e) or type(e).__name__,
        )

    if outcome.partial:
        logger.warning("Image host reported a partial delete for %s", context)
        return ImageCleanupResult(
            status=CleanupStatus.PARTIAL,
            public_ids=list(public_ids),
            unresolved_urls=unresolved,
            error="partial deletion",
        )
    return ImageCleanupResult(
        status=CleanupStatus.APPLIED,
        public_ids=list(public_ids),
        unresolved_urls=unresolved,
    )

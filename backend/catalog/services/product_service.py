import logging
import uuid
from dataclasses import dataclass
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from catalog.core.exceptions import NotFoundError, ValidationError
from catalog.integrations.cloudinary.client import ImageHostProtocol
from catalog.models.dto.product import (
    ColorVariant, ColorVariantInput, ProductCreate, ProductUpdate,
)
from catalog.models.orm.product import Product
from catalog.services.image_service import (
    ImageCleanupResult, collect_public_ids, purge_images,
)

logger = logging.getLogger(__name__)


@dataclass
class DeleteOutcome:
    deleted_count: int
    cleanup: ImageCleanupResult


# ── Color normalization ──────────────────────────────────────────────────────

def normalize_color(color: ColorVariantInput, index: int) -> ColorVariant:
    """Map a submitted variant onto the stored shape.

    A legacy ``imageUrl`` fills ``imageUrls`` when the list is missing or
    empty and is dropped afterwards.
    """
    image_urls = [u for u in (color.image_urls or []) if u]
    if not image_urls and color.image_url:
        image_urls = [color.image_url]
    if not image_urls:
        label = color.label or f"#{index + 1}"
        raise ValidationError(f'Color "{label}" must have at least one image')

    return ColorVariant(
        color_name=color.color_name,
        color_hex_code=color.color_hex_code,
        image_urls=image_urls,
        sizes=[s for s in (color.sizes or []) if s],
    )


def normalize_colors(colors: list[ColorVariantInput]) -> list[dict]:
    """Validate and normalize every variant, returning the JSON to store."""
    if not colors:
        raise ValidationError("At least one color is required")
    return [
        normalize_color(color, i).model_dump(by_alias=True)
        for i, color in enumerate(colors)
    ]


async def _flush_or_reject(db: AsyncSession) -> None:
    try:
        await db.flush()
    except IntegrityError as e:
        logger.warning("Product rejected by database constraints: %s", e.orig)
        raise ValidationError("Validation failed", errors=[str(e.orig)]) from e


# ── Product CRUD ─────────────────────────────────────────────────────────────

async def list_products(db: AsyncSession, category: str | None = None) -> list[Product]:
    query = select(Product)
    if category:
        query = query.where(Product.category == category)
    result = await db.execute(query.order_by(Product.created_at.asc()))
    return list(result.scalars().all())


async def get_by_id(db: AsyncSession, product_id: UUID) -> Product:
    product = await db.get(Product, product_id)
    if not product:
        raise NotFoundError("Product not found")
    return product


async def create_product(db: AsyncSession, data: ProductCreate) -> Product:
    colors = normalize_colors(data.colors)

    product = Product(
        id=uuid.uuid4(),
        product_name=data.product_name,
        brand=data.brand or None,
        price=data.price,
        category=data.category,
        colors=colors,
    )
    db.add(product)
    await _flush_or_reject(db)
    await db.refresh(product)
    logger.info("Product created: %s", product.id)
    return product


_MUTABLE_PRODUCT_FIELDS = {"product_name", "brand", "price", "category", "colors"}


async def update_product(
    db: AsyncSession, product_id: UUID, data: ProductUpdate,
) -> tuple[Product, dict]:
    """Apply the fields present in ``data``; absent fields keep their values.

    Presence comes from the request body (``exclude_unset``), so falsy values
    that were actually sent are still applied.
    """
    product = await get_by_id(db, product_id)

    updates = data.model_dump(exclude_unset=True)
    if "colors" in updates:
        updates["colors"] = normalize_colors(data.colors)
    if "brand" in updates:
        updates["brand"] = updates["brand"] or None

    changes = {}
    for field, value in updates.items():
        if field not in _MUTABLE_PRODUCT_FIELDS:
            continue
        old_value = getattr(product, field)
        if old_value != value:
            changes[field] = {"old": old_value, "new": value}
            setattr(product, field, value)

    await _flush_or_reject(db)
    await db.refresh(product)
    logger.info("Product updated: %s (fields: %s)", product.id, ", ".join(sorted(changes)) or "none")
    return product, changes


# ── Cascade delete ───────────────────────────────────────────────────────────

async def delete_product(
    db: AsyncSession, product_id: UUID, image_host: ImageHostProtocol,
) -> DeleteOutcome:
    """Delete one product after a best-effort purge of its hosted images.

    Image ids are resolved from the record, so the purge has to run first.
    Its outcome never affects the database delete.
    """
    product = await get_by_id(db, product_id)

    public_ids, unresolved = collect_public_ids([product])
    cleanup = await purge_images(
        image_host, public_ids,
        context=f"product {product_id}", unresolved_urls=unresolved,
    )

    await db.delete(product)
    await db.flush()
    logger.info(
        "Product deleted: %s (image cleanup: %s)", product_id, cleanup.status.value,
    )
    return DeleteOutcome(deleted_count=1, cleanup=cleanup)


async def batch_delete_products(
    db: AsyncSession, product_ids: list[UUID], image_host: ImageHostProtocol,
) -> DeleteOutcome:
    """Delete every existing product in ``product_ids``.

    Unknown ids are ignored; only when none match is NotFoundError raised.
    All image ids are purged in a single request before one bulk delete.
    """
    if not product_ids:
        raise ValidationError("Invalid input: 'ids' must be a non-empty array.")
    unique_ids = list(dict.fromkeys(product_ids))

    result = await db.execute(select(Product).where(Product.id.in_(unique_ids)))
    products = list(result.scalars().all())
    if not products:
        raise NotFoundError("No products found matching the provided IDs.")

    public_ids, unresolved = collect_public_ids(products)
    cleanup = await purge_images(
        image_host, public_ids,
        context=f"batch of {len(products)} products", unresolved_urls=unresolved,
    )

    matched_ids = [p.id for p in products]
    result = await db.execute(delete(Product).where(Product.id.in_(matched_ids)))
    deleted_count = result.rowcount or 0
    logger.info(
        "Batch delete removed %d of %d requested products (image cleanup: %s)",
        deleted_count, len(unique_ids), cleanup.status.value,
    )
    return DeleteOutcome(deleted_count=deleted_count, cleanup=cleanup)

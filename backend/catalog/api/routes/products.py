import logging
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from catalog.api.dependencies.auth import protect
from catalog.api.dependencies.database import get_db
from catalog.api.dependencies.image_host import get_image_host
from catalog.integrations.cloudinary.client import ImageHostProtocol
from catalog.models.dto.common import MessageResponse
from catalog.models.dto.product import (
    BatchDeleteRequest, BatchDeleteResponse, ProductCreate, ProductResponse, ProductUpdate,
)
from catalog.services import product_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/products", tags=["products"])

# Protected routes list `protect` first: it runs before the session is opened
# and before the body is validated.


@router.get("", response_model=list[ProductResponse])
async def list_products(
    category: str | None = Query(None, max_length=100),
    db: AsyncSession = Depends(get_db),
):
    return await product_service.list_products(db, category or None)


# Registered before "/{product_id}" so "batch" is not parsed as an id.
@router.delete("/batch", response_model=BatchDeleteResponse)
async def batch_delete_products(
    body: BatchDeleteRequest,
    admin: str = Depends(protect),
    db: AsyncSession = Depends(get_db),
    image_host: ImageHostProtocol = Depends(get_image_host),
):
    outcome = await product_service.batch_delete_products(db, body.ids, image_host)
    logger.info("Batch delete by %s: %d product(s)", admin, outcome.deleted_count)
    return BatchDeleteResponse(
        message=(
            f"Successfully deleted {outcome.deleted_count} product(s) "
            "and associated images."
        ),
        deleted_count=outcome.deleted_count,
    )


@router.get("/{product_id}", response_model=ProductResponse)
async def get_product(
    product_id: UUID,
    db: AsyncSession = Depends(get_db),
):
    return await product_service.get_by_id(db, product_id)


@router.post("", response_model=ProductResponse, status_code=201)
async def create_product(
    body: ProductCreate,
    admin: str = Depends(protect),
    db: AsyncSession = Depends(get_db),
):
    return await product_service.create_product(db, body)


@router.put("/{product_id}", response_model=ProductResponse)
async def update_product(
    product_id: UUID,
    body: ProductUpdate,
    admin: str = Depends(protect),
    db: AsyncSession = Depends(get_db),
):
    product, _changes = await product_service.update_product(db, product_id, body)
    return product


@router.delete("/{product_id}", response_model=MessageResponse)
async def delete_product(
    product_id: UUID,
    admin: str = Depends(protect),
    db: AsyncSession = Depends(get_db),
    image_host: ImageHostProtocol = Depends(get_image_host),
):
    await product_service.delete_product(db, product_id, image_host)
    logger.info("Product %s deleted by %s", product_id, admin)
    return MessageResponse(message="Product and associated images removed")

from datetime import datetime
from uuid import UUID

from pydantic import ConfigDict, Field, field_validator, model_validator

from catalog.models.dto.common import CamelModel


class ColorVariantInput(CamelModel):
    """A color variant as submitted by the admin dashboard.

    Accepts the legacy single ``imageUrl`` field next to ``imageUrls``;
    ``product_service.normalize_colors`` maps it onto :class:`ColorVariant`.
    """

    color_name: str | None = Field(default=None, max_length=100)
    color_hex_code: str | None = Field(default=None, max_length=32)
    image_urls: list[str] | None = None
    image_url: str | None = None
    sizes: list[str] | None = None

    @property
    def label(self) -> str | None:
        return self.color_name or None


class ColorVariant(CamelModel):
    """Stored shape of a color variant. Never carries ``imageUrl``."""

    color_name: str | None = None
    color_hex_code: str | None = None
    image_urls: list[str] = []
    sizes: list[str] = []

    @model_validator(mode="before")
    @classmethod
    def _absorb_legacy_image(cls, data):
        # Rows written before imageUrls existed only have imageUrl.
        if isinstance(data, dict) and "imageUrl" in data:
            data = dict(data)
            legacy = data.pop("imageUrl")
            if legacy and not data.get("imageUrls") and not data.get("image_urls"):
                data["imageUrls"] = [legacy]
        if isinstance(data, dict) and data.get("sizes") is None:
            data = {**data, "sizes": []}
        return data


def _strip_required(v):
    if isinstance(v, str):
        v = v.strip()
        if not v:
            raise ValueError("must not be empty")
    return v


class ProductCreate(CamelModel):
    product_name: str = Field(min_length=1, max_length=255)
    brand: str | None = Field(default=None, max_length=255)
    price: float = Field(gt=0)
    category: str = Field(min_length=1, max_length=100)
    colors: list[ColorVariantInput] = Field(min_length=1)

    @field_validator("product_name", "category", mode="before")
    @classmethod
    def strip_required_text(cls, v):
        return _strip_required(v)


class ProductUpdate(CamelModel):
    """Partial update. Only fields present in the request body are applied."""

    product_name: str | None = Field(default=None, min_length=1, max_length=255)
    brand: str | None = Field(default=None, max_length=255)
    price: float | None = Field(default=None, gt=0)
    category: str | None = Field(default=None, min_length=1, max_length=100)
    colors: list[ColorVariantInput] | None = Field(default=None, min_length=1)

    @field_validator("product_name", "price", "category", "colors", mode="before")
    @classmethod
    def reject_explicit_null(cls, v):
        if v is None:
            raise ValueError("may not be null")
        return _strip_required(v)


class ProductResponse(CamelModel):
    id: UUID
    product_name: str
    brand: str | None = None
    price: float
    category: str
    colors: list[ColorVariant]
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)


class BatchDeleteRequest(CamelModel):
    ids: list[UUID] = Field(min_length=1)


class BatchDeleteResponse(CamelModel):
    message: str
    deleted_count: int

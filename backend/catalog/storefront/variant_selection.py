from dataclasses import dataclass

from catalog.models.dto.product import ColorVariant, ProductResponse

PLACEHOLDER_IMAGE = "https://via.placeholder.com/400x400.png?text=No+Image"
NO_SIZES_MESSAGE = "Sizes not available for this color"
SIZE_NOT_APPLICABLE = "Not Applicable"
DEFAULT_COLOR_NAME = "Default"


class SizeRequiredError(Exception):
    def __init__(self, message: str = "Please select a size before purchasing."):
        super().__init__(message)
        self.message = message


@dataclass(frozen=True)
class OrderSummary:
    product_name: str
    brand: str | None
    category: str
    color_name: str
    size: str
    price: float
    image_url: str


class VariantSelection:
    """Color/size selection for one rendered product card."""

    def __init__(self, product: ProductResponse):
        self.product = product
        self.active_color_index = 0
        self.active_size: str | None = None
        self.image_urls: list[str] = []
        self.main_image = PLACEHOLDER_IMAGE
        self._sync_images()

    @property
    def active_color(self) -> ColorVariant:
        if not self.product.colors:
            return ColorVariant()
        return self.product.colors[self.active_color_index]

    @property
    def size_options(self) -> list[str]:
        return list(self.active_color.sizes)

    @property
    def sizes_placeholder(self) -> str | None:
        return None if self.size_options else NO_SIZES_MESSAGE

    def _sync_images(self) -> None:
        self.image_urls = list(self.active_color.image_urls)
        self.main_image = self.image_urls[0] if self.image_urls else PLACEHOLDER_IMAGE

    def select_color(self, index: int) -> bool:
        """Switch to color ``index``. Out-of-range indexes are ignored."""
        if index < 0 or index >= len(self.product.colors):
            return False
        self.active_color_index = index
        self.active_size = None
        self._sync_images()
        return True

    def select_size(self, label: str) -> None:
        if label not in self.size_options:
            raise ValueError(f"Size {label!r} is not offered for this color")
        self.active_size = label

    def compose_order(self) -> OrderSummary:
        color = self.active_color
        if color.sizes and self.active_size is None:
            raise SizeRequiredError()

        return OrderSummary(
            product_name=self.product.product_name,
            brand=self.product.brand,
            category=self.product.category,
            color_name=color.color_name or DEFAULT_COLOR_NAME,
            size=self.active_size or SIZE_NOT_APPLICABLE,
            price=self.product.price,
            image_url=self.main_image,
        )

"""Category page state for the storefront: fetch once, then filter and sort
the cached result set locally."""
import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum
from uuid import UUID

from catalog.models.dto.product import ProductResponse
from catalog.storefront.api_client import ApiError, CatalogApiClient
from catalog.storefront.variant_selection import VariantSelection

logger = logging.getLogger(__name__)

OTHER_BRAND = "Other"
DEFAULT_SORT = "default"
SORT_KEYS = ("default", "price-asc", "price-desc", "brand-asc", "brand-desc")

LOADING_MESSAGE = "Loading products..."
LOAD_ERROR_MESSAGE = (
    "Could not load products. Please ensure the backend server is running and accessible."
)
NO_MATCHES_MESSAGE = "No products found matching your filters."


def brand_label(product: ProductResponse) -> str:
    return product.brand or OTHER_BRAND


def brand_facets(products: Iterable[ProductResponse]) -> list[str]:
    return sorted({brand_label(p) for p in products})


def apply_view(
    products: list[ProductResponse],
    selected_brands: Iterable[str],
    sort_key: str = DEFAULT_SORT,
) -> list[ProductResponse]:
    """Filter by brand and sort. Pure: the input list is not modified.

    An empty brand selection means no filtering. ``default`` keeps the
    fetched order; the other keys use a stable sort.
    """
    if sort_key not in SORT_KEYS:
        raise ValueError(f"Unknown sort key {sort_key!r}")

    brands = set(selected_brands)
    result = [p for p in products if brand_label(p) in brands] if brands else list(products)

    if sort_key == "price-asc":
        result.sort(key=lambda p: p.price)
    elif sort_key == "price-desc":
        result.sort(key=lambda p: p.price, reverse=True)
    elif sort_key == "brand-asc":
        result.sort(key=brand_label)
    elif sort_key == "brand-desc":
        result.sort(key=brand_label, reverse=True)
    return result


def count_label(count: int) -> str:
    return f"{count} {'Product' if count == 1 else 'Products'}"


@dataclass
class ProductCard:
    product: ProductResponse
    selection: VariantSelection


@dataclass
class CatalogView:
    count_label: str
    cards: list[ProductCard] = field(default_factory=list)
    empty_message: str | None = None

    @property
    def products(self) -> list[ProductResponse]:
        return [card.product for card in self.cards]


def render(products: list[ProductResponse]) -> CatalogView:
    cards = [ProductCard(product=p, selection=VariantSelection(p)) for p in products]
    return CatalogView(
        count_label=count_label(len(products)),
        cards=cards,
        empty_message=None if products else NO_MATCHES_MESSAGE,
    )


class LoadState(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    ERROR = "error"


class CatalogBrowser:
    """One category page: the cached products plus the current filter/sort."""

    def __init__(self, api: CatalogApiClient):
        self.api = api
        self.category: str | None = None
        self.products: list[ProductResponse] = []
        self.brands: list[str] = []
        self.selected_brands: set[str] = set()
        self.sort_key = DEFAULT_SORT
        self.state = LoadState.IDLE
        self.message: str | None = None
        self.view: CatalogView | None = None

    async def refresh(self, category: str) -> CatalogView | None:
        """Fetch ``category`` and re-render. Returns None if the fetch failed."""
        self.category = category
        self.state = LoadState.LOADING
        self.message = LOADING_MESSAGE
        self.view = None
        try:
            products = await self.api.list_products(category)
        except ApiError as e:
            logger.error("Failed to fetch products for category %r: %s", category, e.message)
            self.state = LoadState.ERROR
            self.message = LOAD_ERROR_MESSAGE
            return None

        self.products = products
        self.brands = brand_facets(products)
        # Selections for brands that vanished from the facet no longer apply.
        self.selected_brands &= set(self.brands)
        self.state = LoadState.READY
        self.message = None
        return self.apply()

    def apply(self) -> CatalogView:
        self.view = render(apply_view(self.products, self.selected_brands, self.sort_key))
        return self.view

    def set_filters(
        self, brands: Iterable[str] | None = None, sort_key: str | None = None,
    ) -> CatalogView:
        if sort_key is not None:
            if sort_key not in SORT_KEYS:
                raise ValueError(f"Unknown sort key {sort_key!r}")
            self.sort_key = sort_key
        if brands is not None:
            self.selected_brands = set(brands)
        return self.apply()

    def clear_filters(self) -> CatalogView:
        return self.set_filters(brands=(), sort_key=DEFAULT_SORT)

    def card(self, product_id: UUID) -> ProductCard:
        if self.view is not None:
            for card in self.view.cards:
                if card.product.id == product_id:
                    return card
        raise KeyError(product_id)

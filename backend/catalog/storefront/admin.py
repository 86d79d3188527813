"""Admin dashboard session: product listing and (batch) deletion with a
stored bearer token."""
import logging
from pathlib import Path
from uuid import UUID

from catalog.models.dto.product import BatchDeleteResponse, ProductResponse
from catalog.storefront.api_client import ApiError, CatalogApiClient, SessionExpiredError

logger = logging.getLogger(__name__)

ALL_CATEGORIES = "all"
NO_FILTER_MATCHES_MESSAGE = "No products found for this filter."


def filter_products(
    products: list[ProductResponse],
    category: str = ALL_CATEGORIES,
    search: str = "",
) -> list[ProductResponse]:
    """Exact category match (``"all"`` disables it) plus a case-insensitive
    substring search over product name and brand."""
    needle = search.strip().lower()
    result = [
        p for p in products
        if category == ALL_CATEGORIES or p.category == category
    ]
    if needle:
        result = [
            p for p in result
            if needle in p.product_name.lower()
            or (p.brand is not None and needle in p.brand.lower())
        ]
    return result


class CredentialStore:
    """Holds the admin token, optionally persisted to a file."""

    def __init__(self, path: Path | None = None):
        self.path = path
        self._token: str | None = None
        if path is not None and path.exists():
            self._token = path.read_text(encoding="utf-8").strip() or None

    @property
    def token(self) -> str | None:
        return self._token

    def set(self, token: str) -> None:
        self._token = token
        if self.path is not None:
            self.path.write_text(token, encoding="utf-8")

    def clear(self) -> None:
        self._token = None
        if self.path is not None:
            self.path.unlink(missing_ok=True)


class AdminDashboard:
    def __init__(self, api: CatalogApiClient, credentials: CredentialStore | None = None):
        self.api = api
        self.credentials = credentials or CredentialStore()
        self.products: list[ProductResponse] = []
        self.selected_ids: set[UUID] = set()
        self.category = ALL_CATEGORIES
        self.search = ""

    @property
    def logged_in(self) -> bool:
        return self.credentials.token is not None

    def _require_token(self) -> str:
        token = self.credentials.token
        if token is None:
            raise SessionExpiredError("Not logged in", status_code=401)
        return token

    def _expire_session(self, error: ApiError) -> SessionExpiredError:
        logger.warning("Admin session rejected (HTTP %s); clearing credential", error.status_code)
        self.credentials.clear()
        return SessionExpiredError(
            "Session expired or invalid. Please log in again.",
            status_code=error.status_code,
        )

    async def login(self, username: str, password: str) -> None:
        token = await self.api.login(username, password)
        self.credentials.set(token)

    def logout(self) -> None:
        self.credentials.clear()
        self.products = []
        self.selected_ids.clear()

    async def fetch_all(self) -> list[ProductResponse]:
        token = self._require_token()
        try:
            self.products = await self.api.list_products(token=token)
        except ApiError as e:
            if e.is_auth_failure:
                raise self._expire_session(e) from e
            raise
        self.selected_ids.clear()
        return self.products

    @property
    def visible_products(self) -> list[ProductResponse]:
        return filter_products(self.products, self.category, self.search)

    @property
    def empty_message(self) -> str | None:
        return None if self.visible_products else NO_FILTER_MATCHES_MESSAGE

    def set_filters(
        self, category: str | None = None, search: str | None = None,
    ) -> list[ProductResponse]:
        """Change the table filter. The checkbox selection is reset."""
        if category is not None:
            self.category = category or ALL_CATEGORIES
        if search is not None:
            self.search = search
        self.selected_ids.clear()
        return self.visible_products

    def toggle(self, product_id: UUID) -> None:
        if product_id in self.selected_ids:
            self.selected_ids.remove(product_id)
        else:
            self.selected_ids.add(product_id)

    def select_all(self, selected: bool = True) -> None:
        """Check or uncheck every product that passes the current filter."""
        self.selected_ids.clear()
        if selected:
            self.selected_ids.update(p.id for p in self.visible_products)

    async def delete_product(self, product_id: UUID) -> str:
        token = self._require_token()
        try:
            message = await self.api.delete_product(product_id, token=token)
        except ApiError as e:
            if e.is_auth_failure:
                raise self._expire_session(e) from e
            raise
        await self.fetch_all()
        return message

    async def delete_selected(self) -> BatchDeleteResponse:
        if not self.selected_ids:
            raise ValueError("Please select products to delete.")
        token = self._require_token()
        try:
            result = await self.api.batch_delete(sorted(self.selected_ids, key=str), token=token)
        except ApiError as e:
            if e.is_auth_failure:
                raise self._expire_session(e) from e
            raise
        await self.fetch_all()
        return result

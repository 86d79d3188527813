"""Tests for the storefront HTTP client and the admin dashboard session."""
import json
import uuid

import httpx
import pytest

from catalog.models.dto.product import ProductResponse
from catalog.storefront.admin import (
    NO_FILTER_MATCHES_MESSAGE,
    AdminDashboard,
    CredentialStore,
    filter_products,
)
from catalog.storefront.api_client import ApiError, CatalogApiClient, SessionExpiredError
from tests.factories import make_color


def _product_json(product_id=None, **overrides):
    body = {
        "id": str(product_id or uuid.uuid4()),
        "productName": "Air Runner",
        "brand": "Nike",
        "price": 2000,
        "category": "Sneakers",
        "colors": [make_color(sizes=["8", "9"])],
        "createdAt": "2026-01-01T00:00:00Z",
        "updatedAt": "2026-01-01T00:00:00Z",
    }
    body.update(overrides)
    return body


def _client(handler) -> CatalogApiClient:
    return CatalogApiClient("http://test/api", transport=httpx.MockTransport(handler))


class TestCatalogApiClient:
    @pytest.mark.asyncio
    async def test_list_products_by_category(self):
        seen = {}

        def handler(request: httpx.Request):
            seen["url"] = request.url
            return httpx.Response(200, json=[_product_json(), _product_json(brand=None)])

        products = await _client(handler).list_products("Sneakers")

        assert seen["url"].path == "/api/products"
        assert seen["url"].params["category"] == "Sneakers"
        assert len(products) == 2
        assert products[0].colors[0].sizes == ["8", "9"]
        assert products[1].brand is None

    @pytest.mark.asyncio
    async def test_list_without_category_sends_no_filter(self):
        seen = {}

        def handler(request: httpx.Request):
            seen["params"] = dict(request.url.params)
            return httpx.Response(200, json=[])

        assert await _client(handler).list_products() == []
        assert seen["params"] == {}

    @pytest.mark.asyncio
    async def test_get_product(self):
        pid = uuid.uuid4()

        def handler(request: httpx.Request):
            assert request.url.path == f"/api/products/{pid}"
            return httpx.Response(200, json=_product_json(pid))

        product = await _client(handler).get_product(pid)
        assert product.id == pid
        assert product.product_name == "Air Runner"

    @pytest.mark.asyncio
    async def test_error_message_from_body(self):
        def handler(request: httpx.Request):
            return httpx.Response(404, json={"message": "Product not found"})

        with pytest.raises(ApiError) as exc_info:
            await _client(handler).get_product(uuid.uuid4())
        assert exc_info.value.message == "Product not found"
        assert exc_info.value.status_code == 404
        assert not exc_info.value.is_auth_failure

    @pytest.mark.asyncio
    async def test_non_object_error_body(self):
        def handler(request: httpx.Request):
            return httpx.Response(500, json=["boom"])

        with pytest.raises(ApiError) as exc_info:
            await _client(handler).list_products("Sneakers")
        assert exc_info.value.status_code == 500
        assert exc_info.value.message == "Internal Server Error"

    @pytest.mark.asyncio
    async def test_malformed_product_payload(self):
        def handler(request: httpx.Request):
            return httpx.Response(200, json=[{"bogus": 1}])

        with pytest.raises(ApiError, match="Invalid response from server"):
            await _client(handler).list_products("Sneakers")

    @pytest.mark.asyncio
    async def test_non_json_success_body(self):
        def handler(request: httpx.Request):
            return httpx.Response(200, text="ok")

        with pytest.raises(ApiError) as exc_info:
            await _client(handler).get_product(uuid.uuid4())
        assert exc_info.value.status_code == 200

    @pytest.mark.asyncio
    async def test_network_error(self):
        def handler(request: httpx.Request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(ApiError) as exc_info:
            await _client(handler).list_products("Sneakers")
        assert exc_info.value.status_code is None

    @pytest.mark.asyncio
    async def test_login_returns_token(self):
        def handler(request: httpx.Request):
            assert json.loads(request.content) == {"username": "admin", "password": "pw"}
            return httpx.Response(200, json={"token": "abc"})

        assert await _client(handler).login("admin", "pw") == "abc"

    @pytest.mark.asyncio
    async def test_batch_delete_sends_ids_and_bearer(self):
        ids = [uuid.uuid4(), uuid.uuid4()]
        seen = {}

        def handler(request: httpx.Request):
            seen["method"] = request.method
            seen["auth"] = request.headers.get("authorization")
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={
                "message": "Successfully deleted 2 product(s) and associated images.",
                "deletedCount": 2,
            })

        result = await _client(handler).batch_delete(ids, token="tok")

        assert seen["method"] == "DELETE"
        assert seen["auth"] == "Bearer tok"
        assert seen["body"] == {"ids": [str(i) for i in ids]}
        assert result.deleted_count == 2


class _FakeBackend:
    """In-memory catalog API behind an httpx.MockTransport."""

    def __init__(self, products, token="tok"):
        self.products = {p["id"]: p for p in products}
        self.token = token
        self.requests: list[tuple[str, str]] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append((request.method, request.url.path))
        if request.url.path == "/api/auth/login":
            return httpx.Response(200, json={"token": self.token})
        if request.headers.get("authorization") != f"Bearer {self.token}":
            return httpx.Response(401, json={"message": "Not authorized, token failed"})

        if request.method == "GET":
            return httpx.Response(200, json=list(self.products.values()))
        if request.method == "DELETE" and request.url.path == "/api/products/batch":
            ids = json.loads(request.content)["ids"]
            for pid in ids:
                self.products.pop(pid, None)
            return httpx.Response(200, json={
                "message": f"Successfully deleted {len(ids)} product(s) and associated images.",
                "deletedCount": len(ids),
            })
        if request.method == "DELETE":
            self.products.pop(request.url.path.rsplit("/", 1)[-1], None)
            return httpx.Response(200, json={"message": "Product and associated images removed"})
        return httpx.Response(405, json={"message": "Method not allowed"})


def _dashboard(backend, credentials=None) -> AdminDashboard:
    return AdminDashboard(_client(backend), credentials or CredentialStore())


class TestAdminDashboard:
    @pytest.mark.asyncio
    async def test_login_stores_token(self, tmp_path):
        store = CredentialStore(tmp_path / "token")
        dashboard = _dashboard(_FakeBackend([]), store)

        await dashboard.login("admin", "pw")

        assert dashboard.logged_in
        assert (tmp_path / "token").read_text() == "tok"
        assert CredentialStore(tmp_path / "token").token == "tok"

    @pytest.mark.asyncio
    async def test_rejected_token_clears_credential(self, tmp_path):
        store = CredentialStore(tmp_path / "token")
        store.set("stale")
        dashboard = _dashboard(_FakeBackend([_product_json()]), store)

        with pytest.raises(SessionExpiredError):
            await dashboard.fetch_all()

        assert not dashboard.logged_in
        assert not (tmp_path / "token").exists()

    @pytest.mark.asyncio
    async def test_delete_selected_requires_selection(self):
        backend = _FakeBackend([])
        store = CredentialStore()
        store.set("tok")
        dashboard = _dashboard(backend, store)

        with pytest.raises(ValueError, match="Please select products to delete."):
            await dashboard.delete_selected()
        assert backend.requests == []

    @pytest.mark.asyncio
    async def test_delete_selected_then_refetch(self):
        keep, drop_a, drop_b = (_product_json() for _ in range(3))
        backend = _FakeBackend([keep, drop_a, drop_b])
        store = CredentialStore()
        store.set("tok")
        dashboard = _dashboard(backend, store)
        await dashboard.fetch_all()

        dashboard.toggle(uuid.UUID(drop_a["id"]))
        dashboard.toggle(uuid.UUID(drop_b["id"]))
        result = await dashboard.delete_selected()

        assert result.deleted_count == 2
        assert [str(p.id) for p in dashboard.products] == [keep["id"]]
        assert dashboard.selected_ids == set()
        assert backend.requests[-2:] == [
            ("DELETE", "/api/products/batch"),
            ("GET", "/api/products"),
        ]

    @pytest.mark.asyncio
    async def test_toggle_twice_deselects(self):
        dashboard = _dashboard(_FakeBackend([]))
        pid = uuid.uuid4()
        dashboard.toggle(pid)
        dashboard.toggle(pid)
        assert dashboard.selected_ids == set()

    @pytest.mark.asyncio
    async def test_delete_single_product(self):
        product = _product_json()
        backend = _FakeBackend([product])
        store = CredentialStore()
        store.set("tok")
        dashboard = _dashboard(backend, store)

        message = await dashboard.delete_product(uuid.UUID(product["id"]))

        assert message == "Product and associated images removed"
        assert dashboard.products == []

    def test_logout(self):
        store = CredentialStore()
        store.set("tok")
        dashboard = _dashboard(_FakeBackend([]), store)
        dashboard.logout()
        assert not dashboard.logged_in


class TestDashboardFilters:
    @pytest.fixture
    def products(self):
        return [
            ProductResponse.model_validate(_product_json(productName="Air Max", brand="Nike", category="Sneakers")),
            ProductResponse.model_validate(_product_json(productName="Chelsea", brand=None, category="Boots")),
            ProductResponse.model_validate(_product_json(productName="Gazelle", brand="Adidas", category="Sneakers")),
        ]

    def test_all_categories_and_empty_search_keep_everything(self, products):
        assert filter_products(products, "all", "") == products

    def test_category_is_exact_match(self, products):
        result = filter_products(products, "Sneakers")
        assert [p.product_name for p in result] == ["Air Max", "Gazelle"]
        assert filter_products(products, "sneakers") == []

    def test_search_matches_name_or_brand_case_insensitively(self, products):
        assert [p.product_name for p in filter_products(products, search="  NIKE ")] == ["Air Max"]
        assert [p.product_name for p in filter_products(products, search="chel")] == ["Chelsea"]

    def test_category_and_search_combine(self, products):
        assert filter_products(products, "Boots", "air") == []

    @pytest.mark.asyncio
    async def test_changing_filters_clears_selection(self):
        air, boot = _product_json(productName="Air Max", category="Sneakers"), _product_json(category="Boots")
        store = CredentialStore()
        store.set("tok")
        dashboard = _dashboard(_FakeBackend([air, boot]), store)
        await dashboard.fetch_all()
        dashboard.toggle(uuid.UUID(air["id"]))

        visible = dashboard.set_filters(category="Boots")

        assert [str(p.id) for p in visible] == [boot["id"]]
        assert dashboard.selected_ids == set()
        assert dashboard.empty_message is None

        dashboard.set_filters(search="nothing like this")
        assert dashboard.visible_products == []
        assert dashboard.empty_message == NO_FILTER_MATCHES_MESSAGE

    @pytest.mark.asyncio
    async def test_select_all_only_takes_visible_products(self):
        air, boot = _product_json(category="Sneakers"), _product_json(category="Boots")
        store = CredentialStore()
        store.set("tok")
        dashboard = _dashboard(_FakeBackend([air, boot]), store)
        await dashboard.fetch_all()
        dashboard.set_filters(category="Sneakers")

        dashboard.select_all()
        assert dashboard.selected_ids == {uuid.UUID(air["id"])}

        dashboard.select_all(False)
        assert dashboard.selected_ids == set()

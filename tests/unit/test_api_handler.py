"""Unit tests for the FastAPI application."""

from datetime import UTC, datetime
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from orderdirect.auth.identity_provider import InMemoryIdentityProvider, Principal
from orderdirect.cart.persistence import InMemoryKeyValueStore
from orderdirect.exceptions import (
    AuthenticationError,
    AuthorizationError,
    DuplicateCategoryError,
    EmptyCartError,
    OrderStatusTransitionError,
    SignupValidationError,
    StoreUnavailableError,
    SubdomainUnavailableError,
)
from orderdirect.handlers.api_handler import CART_SESSION_HEADER, create_app
from orderdirect.models.customer_models import CustomerProfile, SavedAddress
from orderdirect.models.menu_models import Category, MenuItem
from orderdirect.models.order_models import Order, OrderItem, OrderStatusEnum
from orderdirect.models.tenant_models import Restaurant, UserProfile
from orderdirect.repositories.tenant_repositories import (
    RestaurantRepository,
    UserProfileRepository,
)
from orderdirect.services.customer_service import CustomerLogin, CustomerService
from orderdirect.services.menu_service import CategoryRenameResult, MenuSection, MenuService
from orderdirect.services.order_service import OrderService
from orderdirect.services.signup_service import LoginResult, SignupResult, SignupService
from orderdirect.tenancy.resolver import TenantResolver
from orderdirect.tenancy.session_guard import ScopedSessionGuard
from orderdirect.tenancy.subdomains import DEFAULT_RESERVED_SUBDOMAINS

CART = {CART_SESSION_HEADER: "cart_abc"}


def build_order(status: OrderStatusEnum = OrderStatusEnum.OPEN) -> Order:
    now = datetime(2024, 1, 15, 18, 0, tzinfo=UTC)
    return Order(
        id="order_1",
        restaurant_id="rest_123456",
        status=status,
        customer_name="Jo Smith",
        items=[OrderItem(name="Margherita", quantity=1, price=Decimal("9.99"))],
        total=Decimal("15.49"),
        created_at=now,
        updated_at=now,
    )


@pytest.fixture
def app(restaurant: Restaurant, other_restaurant: Restaurant) -> FastAPI:
    """Create the app over two restaurants, one owner each, and in-memory carts."""
    restaurants = MagicMock(spec=RestaurantRepository)
    by_subdomain = {"pizzapalace": [restaurant], "burgerbarn": [other_restaurant]}
    restaurants.list_by_subdomain.side_effect = lambda slug: by_subdomain.get(slug, [])

    identity = InMemoryIdentityProvider()
    maria = identity.sign_up("maria@pizzapalace.com", "secret123", "Maria Rossi")
    sam = identity.sign_up("sam@burgerbarn.com", "secret123", "Sam Lee")

    profiles_by_user = {
        maria.user_id: UserProfile(
            user_id=maria.user_id,
            email="maria@pizzapalace.com",
            name="Maria Rossi",
            restaurant_id=restaurant.id,
        ),
        sam.user_id: UserProfile(
            user_id=sam.user_id,
            email="sam@burgerbarn.com",
            name="Sam Lee",
            restaurant_id=other_restaurant.id,
        ),
    }
    profiles = MagicMock(spec=UserProfileRepository)
    profiles.get_profile.side_effect = profiles_by_user.get

    stores: dict[str, InMemoryKeyValueStore] = {}

    return create_app(
        signup_service=MagicMock(spec=SignupService),
        menu_service=MagicMock(spec=MenuService),
        order_service=MagicMock(spec=OrderService),
        customer_service=MagicMock(spec=CustomerService),
        tenant_resolver=TenantResolver(restaurants),
        session_guard=ScopedSessionGuard(identity, profiles),
        cart_store_factory=lambda session_id: stores.setdefault(
            session_id, InMemoryKeyValueStore()
        ),
    )


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    return TestClient(app)


def bearer(app: FastAPI, email: str) -> dict[str, str]:
    """Sign a seeded owner in and return the Authorization header."""
    principal = app.state.session_guard.identity_provider.sign_in(email, "secret123")
    return {"Authorization": f"Bearer {principal.access_token}"}


@pytest.mark.unit
class TestHealthEndpoint:
    """Test suite for health check endpoint."""

    def test_health_check(self, client: TestClient) -> None:
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy"}

    def test_top_level_paths_cannot_be_claimed_as_subdomains(self, app: FastAPI) -> None:
        """Test that no storefront can be shadowed by a fixed top-level route."""
        paths: list[str] = [route.path for route in app.routes]  # type: ignore[attr-defined]
        first_segments = {path.split("/")[1] for path in paths}
        claimable = {segment for segment in first_segments if segment.isalnum()}

        assert "health" in claimable
        assert claimable <= DEFAULT_RESERVED_SUBDOMAINS


@pytest.mark.unit
class TestSignupEndpoints:
    """Test suite for signup and login endpoints."""

    SIGNUP_BODY = {
        "restaurant_name": "New Place",
        "owner_name": "Alex Kim",
        "email": "alex@newplace.com",
        "phone": "555-0199",
        "subdomain": "newplace123",
        "password": "secret123",
    }

    def test_subdomain_availability(self, client: TestClient) -> None:
        client.app.state.signup_service.check_subdomain_availability = AsyncMock(
            return_value=False
        )

        response = client.get("/signup/subdomain-availability/Admin")

        assert response.status_code == 200
        assert response.json() == {"subdomain": "admin", "available": False}

    def test_signup_success(self, client: TestClient) -> None:
        client.app.state.signup_service.signup_restaurant = AsyncMock(
            return_value=SignupResult(user_id="user_new", subdomain="newplace123")
        )

        response = client.post("/signup", json=self.SIGNUP_BODY)

        assert response.status_code == 201
        assert response.json() == {"user_id": "user_new", "subdomain": "newplace123"}

    def test_signup_subdomain_taken(self, client: TestClient) -> None:
        client.app.state.signup_service.signup_restaurant = AsyncMock(
            side_effect=SubdomainUnavailableError("Subdomain is not available")
        )

        response = client.post("/signup", json=self.SIGNUP_BODY)

        assert response.status_code == 409
        assert response.json()["detail"] == "Subdomain is not available"

    def test_signup_rejected_input(self, client: TestClient) -> None:
        client.app.state.signup_service.signup_restaurant = AsyncMock(
            side_effect=SignupValidationError("Subdomain 'admin' is reserved")
        )

        response = client.post("/signup", json={**self.SIGNUP_BODY, "subdomain": "admin"})

        assert response.status_code == 400

    def test_signup_invalid_email(self, client: TestClient) -> None:
        response = client.post("/signup", json={**self.SIGNUP_BODY, "email": "not-an-email"})

        assert response.status_code == 422

    def test_login_returns_dashboard(
        self, client: TestClient, restaurant: Restaurant, owner_profile: UserProfile
    ) -> None:
        client.app.state.signup_service.login = AsyncMock(
            return_value=LoginResult(
                principal=Principal(
                    user_id="user_1", email="maria@pizzapalace.com", access_token="tok"
                ),
                profile=owner_profile,
                restaurant=restaurant,
            )
        )

        response = client.post(
            "/login", json={"email": "maria@pizzapalace.com", "password": "secret123"}
        )

        assert response.status_code == 200
        assert response.json() == {
            "access_token": "tok",
            "user_id": "user_1",
            "restaurant_id": "rest_123456",
            "subdomain": "pizzapalace",
        }


@pytest.mark.unit
class TestCustomerEndpoints:
    """Test suite for customer account and address endpoints."""

    HEADERS = {"Authorization": "Bearer cust_token"}
    ADDRESS = {
        "label": "Work",
        "street": "1 Main St",
        "city": "Springfield",
        "state": "IL",
        "zip_code": "62704",
    }

    @pytest.fixture
    def customers(self, client: TestClient, customer_profile: CustomerProfile) -> MagicMock:
        service: MagicMock = client.app.state.customer_service
        service.authenticate = AsyncMock(return_value=customer_profile)
        return service

    def test_signup(
        self, client: TestClient, customers: MagicMock, customer_profile: CustomerProfile
    ) -> None:
        customers.sign_up = AsyncMock(return_value=customer_profile)

        response = client.post(
            "/customers/signup",
            json={
                "email": "jo@example.com",
                "password": "secret123",
                "name": "Jo Smith",
                "phone": "555-0142",
            },
        )

        assert response.status_code == 201
        assert response.json()["id"] == "cust_1"
        customers.sign_up.assert_awaited_once_with(
            email="jo@example.com", password="secret123", name="Jo Smith", phone="555-0142"
        )

    def test_signup_requires_phone(self, client: TestClient, customers: MagicMock) -> None:
        response = client.post(
            "/customers/signup",
            json={"email": "jo@example.com", "password": "secret123", "name": "Jo Smith"},
        )

        assert response.status_code == 422

    def test_signup_email_taken(self, client: TestClient, customers: MagicMock) -> None:
        customers.sign_up = AsyncMock(
            side_effect=SignupValidationError("Email is already registered")
        )

        response = client.post(
            "/customers/signup",
            json={
                "email": "jo@example.com",
                "password": "secret123",
                "name": "Jo Smith",
                "phone": "555-0142",
            },
        )

        assert response.status_code == 400

    def test_login(
        self, client: TestClient, customers: MagicMock, customer_profile: CustomerProfile
    ) -> None:
        customers.sign_in = AsyncMock(
            return_value=CustomerLogin(
                principal=Principal(user_id="cust_1", email="jo@example.com", access_token="tok"),
                customer=customer_profile,
            )
        )

        response = client.post(
            "/customers/login", json={"email": "jo@example.com", "password": "secret123"}
        )

        assert response.status_code == 200
        assert response.json()["access_token"] == "tok"
        assert response.json()["customer"]["saved_addresses"][0]["is_default"] is True

    def test_login_rejected(self, client: TestClient, customers: MagicMock) -> None:
        customers.sign_in = AsyncMock(side_effect=AuthenticationError("Invalid email or password"))

        response = client.post(
            "/customers/login", json={"email": "jo@example.com", "password": "wrong123"}
        )

        assert response.status_code == 401

    def test_me(self, client: TestClient, customers: MagicMock) -> None:
        response = client.get("/customers/me", headers=self.HEADERS)

        assert response.status_code == 200
        assert response.json()["email"] == "jo@example.com"
        customers.authenticate.assert_awaited_once_with("cust_token")

    def test_me_requires_token(self, client: TestClient, customers: MagicMock) -> None:
        assert client.get("/customers/me").status_code == 401

    def test_me_for_owner_account(self, client: TestClient, customers: MagicMock) -> None:
        customers.authenticate = AsyncMock(
            side_effect=AuthorizationError("This account has no customer profile")
        )

        assert client.get("/customers/me", headers=self.HEADERS).status_code == 403

    def test_update_profile(
        self, client: TestClient, customers: MagicMock, customer_profile: CustomerProfile
    ) -> None:
        customers.update_profile = AsyncMock(
            return_value=customer_profile.model_copy(update={"phone": "555-0199"})
        )

        response = client.patch("/customers/me", json={"phone": "555-0199"}, headers=self.HEADERS)

        assert response.status_code == 200
        assert response.json()["phone"] == "555-0199"
        customers.update_profile.assert_awaited_once_with("cust_1", {"phone": "555-0199"})

    def test_update_profile_rejects_null_name(
        self, client: TestClient, customers: MagicMock
    ) -> None:
        customers.update_profile = AsyncMock()

        response = client.patch("/customers/me", json={"name": None}, headers=self.HEADERS)

        assert response.status_code == 422
        customers.update_profile.assert_not_awaited()

    def test_add_address(
        self, client: TestClient, customers: MagicMock, customer_profile: CustomerProfile
    ) -> None:
        customers.add_address = AsyncMock(return_value=customer_profile)

        response = client.post("/customers/me/addresses", json=self.ADDRESS, headers=self.HEADERS)

        assert response.status_code == 201
        customers.add_address.assert_awaited_once_with(
            "cust_1",
            label="Work",
            street="1 Main St",
            apartment=None,
            city="Springfield",
            state="IL",
            zip_code="62704",
            landmark=None,
            is_default=False,
        )

    def test_add_address_requires_street(self, client: TestClient, customers: MagicMock) -> None:
        body = {k: v for k, v in self.ADDRESS.items() if k != "street"}

        response = client.post("/customers/me/addresses", json=body, headers=self.HEADERS)

        assert response.status_code == 422

    def test_update_address(
        self, client: TestClient, customers: MagicMock, customer_profile: CustomerProfile
    ) -> None:
        customers.update_address = AsyncMock(return_value=customer_profile)

        response = client.patch(
            "/customers/me/addresses/addr_home",
            json={"landmark": None, "is_default": True},
            headers=self.HEADERS,
        )

        assert response.status_code == 200
        customers.update_address.assert_awaited_once_with(
            "cust_1", "addr_home", {"landmark": None, "is_default": True}
        )

    def test_update_unknown_address(self, client: TestClient, customers: MagicMock) -> None:
        customers.update_address = AsyncMock(return_value=None)

        response = client.patch(
            "/customers/me/addresses/nope", json={"label": "Gym"}, headers=self.HEADERS
        )

        assert response.status_code == 404

    def test_delete_address(
        self, client: TestClient, customers: MagicMock, customer_profile: CustomerProfile
    ) -> None:
        remaining = SavedAddress(**{**self.ADDRESS, "id": "addr_work", "is_default": True})
        customers.delete_address = AsyncMock(
            return_value=customer_profile.model_copy(update={"saved_addresses": [remaining]})
        )

        response = client.delete("/customers/me/addresses/addr_home", headers=self.HEADERS)

        assert response.status_code == 200
        assert [a["id"] for a in response.json()["saved_addresses"]] == ["addr_work"]

    def test_logout(self, client: TestClient, customers: MagicMock) -> None:
        customers.sign_out = AsyncMock()

        response = client.post("/customers/logout", headers=self.HEADERS)

        assert response.status_code == 204
        customers.sign_out.assert_awaited_once_with("cust_token")


@pytest.mark.unit
class TestStorefrontEndpoints:
    """Test suite for public storefront endpoints."""

    def test_storefront(self, client: TestClient) -> None:
        response = client.get("/pizzapalace")

        assert response.status_code == 200
        assert response.json()["name"] == "Pizza Palace"

    def test_storefront_is_case_insensitive(self, client: TestClient) -> None:
        response = client.get("/PizzaPalace")

        assert response.status_code == 200
        assert response.json()["id"] == "rest_123456"

    def test_unknown_storefront(self, client: TestClient) -> None:
        response = client.get("/nosuchplace")

        assert response.status_code == 404
        assert response.json()["detail"] == "Restaurant not found"

    def test_menu_sections(
        self, client: TestClient, pizzas_category: Category, margherita: MenuItem
    ) -> None:
        client.app.state.menu_service.get_customer_menu = AsyncMock(
            return_value=[MenuSection(category=pizzas_category, items=[margherita])]
        )

        response = client.get("/pizzapalace/menu")

        assert response.status_code == 200
        data = response.json()
        assert data["restaurant_name"] == "Pizza Palace"
        assert data["sections"][0]["category"]["name"] == "Pizzas"
        assert data["sections"][0]["items"][0]["name"] == "Margherita"
        client.app.state.menu_service.get_customer_menu.assert_awaited_once_with("rest_123456")

    def test_menu_store_unavailable(self, client: TestClient) -> None:
        client.app.state.menu_service.get_customer_menu = AsyncMock(
            side_effect=StoreUnavailableError("Failed to list menu items")
        )

        response = client.get("/pizzapalace/menu")

        assert response.status_code == 503

    def test_track_order(self, client: TestClient) -> None:
        client.app.state.order_service.get_order = AsyncMock(return_value=build_order())

        response = client.get("/pizzapalace/orders/order_1")

        assert response.status_code == 200
        assert response.json()["status"] == "open"

    def test_track_unknown_order(self, client: TestClient) -> None:
        client.app.state.order_service.get_order = AsyncMock(return_value=None)

        response = client.get("/pizzapalace/orders/order_1")

        assert response.status_code == 404


@pytest.mark.unit
class TestCartEndpoints:
    """Test suite for cart and checkout endpoints."""

    @pytest.fixture
    def client(self, app: FastAPI, margherita: MenuItem) -> TestClient:
        app.state.menu_service.get_menu_item = AsyncMock(return_value=margherita)
        return TestClient(app)

    def test_cart_requires_session_header(self, client: TestClient) -> None:
        response = client.get("/pizzapalace/cart")

        assert response.status_code == 400

    def test_empty_cart(self, client: TestClient) -> None:
        response = client.get("/pizzapalace/cart", headers=CART)

        assert response.status_code == 200
        data = response.json()
        assert data["restaurant_id"] is None
        assert data["items"] == []
        assert Decimal(data["total"]) == Decimal("0")

    def test_add_item_is_priced_and_persisted(self, client: TestClient) -> None:
        response = client.post(
            "/pizzapalace/cart/items", json={"menu_item_id": "item_1"}, headers=CART
        )

        assert response.status_code == 200
        data = response.json()
        assert data["restaurant_id"] == "rest_123456"
        assert data["item_count"] == 1
        assert Decimal(data["subtotal"]) == Decimal("9.99")
        assert Decimal(data["delivery_fee"]) == Decimal("5.00")
        assert Decimal(data["taxes"]) == Decimal("0.50")
        assert Decimal(data["total"]) == Decimal("15.49")

        reloaded = client.get("/pizzapalace/cart", headers=CART).json()
        assert reloaded["item_count"] == 1

        other_session = client.get(
            "/pizzapalace/cart", headers={CART_SESSION_HEADER: "cart_xyz"}
        ).json()
        assert other_session["item_count"] == 0

    def test_add_missing_item(self, client: TestClient) -> None:
        client.app.state.menu_service.get_menu_item = AsyncMock(return_value=None)

        response = client.post(
            "/pizzapalace/cart/items", json={"menu_item_id": "nope"}, headers=CART
        )

        assert response.status_code == 404

    def test_add_unavailable_item(self, client: TestClient, margherita: MenuItem) -> None:
        client.app.state.menu_service.get_menu_item = AsyncMock(
            return_value=margherita.model_copy(update={"available": False})
        )

        response = client.post(
            "/pizzapalace/cart/items", json={"menu_item_id": "item_1"}, headers=CART
        )

        assert response.status_code == 409

    def test_update_quantity_and_instructions(self, client: TestClient) -> None:
        client.post("/pizzapalace/cart/items", json={"menu_item_id": "item_1"}, headers=CART)

        response = client.patch(
            "/pizzapalace/cart/items/item_1",
            json={"quantity": 3, "special_instructions": "Well done"},
            headers=CART,
        )

        assert response.status_code == 200
        line = response.json()["items"][0]
        assert line["quantity"] == 3
        assert line["special_instructions"] == "Well done"

    def test_zero_quantity_removes_line(self, client: TestClient) -> None:
        client.post("/pizzapalace/cart/items", json={"menu_item_id": "item_1"}, headers=CART)

        response = client.patch(
            "/pizzapalace/cart/items/item_1", json={"quantity": 0}, headers=CART
        )

        assert response.status_code == 200
        assert response.json()["items"] == []

    def test_update_item_not_in_cart(self, client: TestClient) -> None:
        response = client.patch(
            "/pizzapalace/cart/items/item_1", json={"quantity": 2}, headers=CART
        )

        assert response.status_code == 404

    def test_remove_and_clear(self, client: TestClient) -> None:
        client.post("/pizzapalace/cart/items", json={"menu_item_id": "item_1"}, headers=CART)

        removed = client.delete("/pizzapalace/cart/items/item_1", headers=CART)
        assert removed.json()["items"] == []

        client.post("/pizzapalace/cart/items", json={"menu_item_id": "item_1"}, headers=CART)
        cleared = client.delete("/pizzapalace/cart", headers=CART)
        assert cleared.json()["item_count"] == 0

    def test_checkout(self, client: TestClient) -> None:
        client.app.state.order_service.place_order = AsyncMock(return_value=build_order())
        client.post("/pizzapalace/cart/items", json={"menu_item_id": "item_1"}, headers=CART)

        response = client.post(
            "/pizzapalace/checkout", json={"customer_name": "Jo Smith"}, headers=CART
        )

        assert response.status_code == 201
        assert response.json()["id"] == "order_1"
        kwargs = client.app.state.order_service.place_order.await_args.kwargs
        assert kwargs["restaurant"].id == "rest_123456"
        assert kwargs["customer_name"] == "Jo Smith"
        assert kwargs["cart_session"].item_count == 1

    def test_checkout_empty_cart(self, client: TestClient) -> None:
        client.app.state.order_service.place_order = AsyncMock(
            side_effect=EmptyCartError("Your cart is empty")
        )

        response = client.post(
            "/pizzapalace/checkout", json={"customer_name": "Jo Smith"}, headers=CART
        )

        assert response.status_code == 400
        assert response.json()["detail"] == "Your cart is empty"


@pytest.mark.unit
class TestAdminSessionEndpoints:
    """Test suite for admin login, logout and authorization."""

    def test_admin_login(self, client: TestClient) -> None:
        response = client.post(
            "/pizzapalace/admin/login",
            json={"email": "maria@pizzapalace.com", "password": "secret123"},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["restaurant_id"] == "rest_123456"
        assert data["access_token"]

    def test_admin_login_for_other_restaurant(self, client: TestClient) -> None:
        response = client.post(
            "/pizzapalace/admin/login",
            json={"email": "sam@burgerbarn.com", "password": "secret123"},
        )

        assert response.status_code == 403
        assert response.json()["detail"] == "You do not have access to this restaurant's dashboard"

    def test_admin_login_wrong_password(self, client: TestClient) -> None:
        response = client.post(
            "/pizzapalace/admin/login",
            json={"email": "maria@pizzapalace.com", "password": "wrong-password"},
        )

        assert response.status_code == 401

    def test_admin_route_requires_token(self, client: TestClient) -> None:
        response = client.get("/pizzapalace/admin/menu-items")

        assert response.status_code == 401

    def test_admin_route_rejects_invalid_token(self, client: TestClient) -> None:
        response = client.get(
            "/pizzapalace/admin/menu-items", headers={"Authorization": "Bearer bogus"}
        )

        assert response.status_code == 401

    def test_admin_route_rejects_other_restaurant(self, app: FastAPI, client: TestClient) -> None:
        """Test that a valid owner of one restaurant cannot manage another."""
        response = client.get(
            "/pizzapalace/admin/menu-items", headers=bearer(app, "sam@burgerbarn.com")
        )

        assert response.status_code == 403

    def test_admin_route_unknown_restaurant(self, app: FastAPI, client: TestClient) -> None:
        response = client.get(
            "/nosuchplace/admin/menu-items", headers=bearer(app, "maria@pizzapalace.com")
        )

        assert response.status_code == 404

    def test_logout_invalidates_token(self, app: FastAPI, client: TestClient) -> None:
        headers = bearer(app, "maria@pizzapalace.com")

        response = client.post("/pizzapalace/admin/logout", headers=headers)

        assert response.status_code == 204
        assert client.get("/pizzapalace/admin/orders", headers=headers).status_code == 401


@pytest.mark.unit
class TestAdminMenuEndpoints:
    """Test suite for admin menu item and category endpoints."""

    @pytest.fixture
    def headers(self, app: FastAPI) -> dict[str, str]:
        return bearer(app, "maria@pizzapalace.com")

    def test_list_menu_items(
        self, client: TestClient, headers: dict[str, str], margherita: MenuItem
    ) -> None:
        client.app.state.menu_service.list_menu_items = AsyncMock(return_value=[margherita])

        response = client.get("/pizzapalace/admin/menu-items", headers=headers)

        assert response.status_code == 200
        assert [i["id"] for i in response.json()] == ["item_1"]
        client.app.state.menu_service.list_menu_items.assert_awaited_once_with("rest_123456")

    def test_create_menu_item(
        self, client: TestClient, headers: dict[str, str], margherita: MenuItem
    ) -> None:
        client.app.state.menu_service.add_menu_item = AsyncMock(return_value=margherita)

        response = client.post(
            "/pizzapalace/admin/menu-items",
            json={"name": "Margherita", "price": "9.99", "category": "Pizzas"},
            headers=headers,
        )

        assert response.status_code == 201
        kwargs = client.app.state.menu_service.add_menu_item.await_args.kwargs
        assert kwargs["restaurant_id"] == "rest_123456"
        assert kwargs["price"] == Decimal("9.99")

    def test_create_menu_item_rejects_zero_price(
        self, client: TestClient, headers: dict[str, str]
    ) -> None:
        response = client.post(
            "/pizzapalace/admin/menu-items",
            json={"name": "Free Pizza", "price": "0"},
            headers=headers,
        )

        assert response.status_code == 422

    def test_update_missing_menu_item(self, client: TestClient, headers: dict[str, str]) -> None:
        client.app.state.menu_service.update_menu_item = AsyncMock(return_value=None)

        response = client.patch(
            "/pizzapalace/admin/menu-items/nope", json={"name": "x"}, headers=headers
        )

        assert response.status_code == 404

    @pytest.mark.parametrize("body", [{"price": None}, {"name": None}, {"available": None}])
    def test_update_menu_item_rejects_null(
        self, client: TestClient, headers: dict[str, str], body: dict[str, None]
    ) -> None:
        client.app.state.menu_service.update_menu_item = AsyncMock()

        response = client.patch("/pizzapalace/admin/menu-items/item_1", json=body, headers=headers)

        assert response.status_code == 422
        client.app.state.menu_service.update_menu_item.assert_not_awaited()

    def test_update_menu_item_clears_image(
        self, client: TestClient, headers: dict[str, str], margherita: MenuItem
    ) -> None:
        client.app.state.menu_service.update_menu_item = AsyncMock(return_value=margherita)

        response = client.patch(
            "/pizzapalace/admin/menu-items/item_1",
            json={"image_url": None, "price": "10.50"},
            headers=headers,
        )

        assert response.status_code == 200
        client.app.state.menu_service.update_menu_item.assert_awaited_once_with(
            "rest_123456", "item_1", {"image_url": None, "price": Decimal("10.50")}
        )

    def test_update_category_rejects_null_display_order(
        self, client: TestClient, headers: dict[str, str]
    ) -> None:
        client.app.state.menu_service.update_category = AsyncMock()

        response = client.patch(
            "/pizzapalace/admin/categories/cat_1", json={"display_order": None}, headers=headers
        )

        assert response.status_code == 422
        client.app.state.menu_service.update_category.assert_not_awaited()

    def test_update_category_clears_description(
        self, client: TestClient, headers: dict[str, str], pizzas_category: Category
    ) -> None:
        client.app.state.menu_service.update_category = AsyncMock(return_value=pizzas_category)

        response = client.patch(
            "/pizzapalace/admin/categories/cat_1", json={"description": None}, headers=headers
        )

        assert response.status_code == 200
        client.app.state.menu_service.update_category.assert_awaited_once_with(
            "rest_123456", "cat_1", {"description": None}
        )

    def test_set_availability(
        self, client: TestClient, headers: dict[str, str], margherita: MenuItem
    ) -> None:
        client.app.state.menu_service.set_availability = AsyncMock(
            return_value=margherita.model_copy(update={"available": False})
        )

        response = client.post(
            "/pizzapalace/admin/menu-items/item_1/availability",
            json={"available": False},
            headers=headers,
        )

        assert response.status_code == 200
        assert response.json()["available"] is False

    def test_delete_menu_item(self, client: TestClient, headers: dict[str, str]) -> None:
        client.app.state.menu_service.delete_menu_item = AsyncMock(return_value=True)

        response = client.delete("/pizzapalace/admin/menu-items/item_1", headers=headers)

        assert response.status_code == 204

    def test_create_duplicate_category(self, client: TestClient, headers: dict[str, str]) -> None:
        client.app.state.menu_service.add_category = AsyncMock(
            side_effect=DuplicateCategoryError("Category 'Pizzas' already exists")
        )

        response = client.post(
            "/pizzapalace/admin/categories", json={"name": "Pizzas"}, headers=headers
        )

        assert response.status_code == 409

    def test_rename_category_complete(self, client: TestClient, headers: dict[str, str]) -> None:
        client.app.state.menu_service.rename_category = AsyncMock(
            return_value=CategoryRenameResult("cat_1", "Pizza", "Pizzas", 3, 0, renamed=True)
        )

        response = client.post(
            "/pizzapalace/admin/categories/cat_1/rename", json={"name": "Pizzas"}, headers=headers
        )

        assert response.status_code == 200
        assert response.json()["updated"] == 3

    def test_rename_category_partial(self, client: TestClient, headers: dict[str, str]) -> None:
        """Test that a rename with failed item rewrites reports 207."""
        client.app.state.menu_service.rename_category = AsyncMock(
            return_value=CategoryRenameResult("cat_1", "Pizza", "Pizzas", 2, 1, renamed=False)
        )

        response = client.post(
            "/pizzapalace/admin/categories/cat_1/rename", json={"name": "Pizzas"}, headers=headers
        )

        assert response.status_code == 207
        assert response.json()["failed"] == 1
        assert response.json()["renamed"] is False

    def test_rename_missing_category(self, client: TestClient, headers: dict[str, str]) -> None:
        client.app.state.menu_service.rename_category = AsyncMock(return_value=None)

        response = client.post(
            "/pizzapalace/admin/categories/nope/rename", json={"name": "Pizzas"}, headers=headers
        )

        assert response.status_code == 404


@pytest.mark.unit
class TestAdminOrderEndpoints:
    """Test suite for admin order endpoints."""

    @pytest.fixture
    def headers(self, app: FastAPI) -> dict[str, str]:
        return bearer(app, "maria@pizzapalace.com")

    def test_list_orders(self, client: TestClient, headers: dict[str, str]) -> None:
        client.app.state.order_service.list_orders = AsyncMock(return_value=[build_order()])

        response = client.get("/pizzapalace/admin/orders", headers=headers)

        assert response.status_code == 200
        assert len(response.json()) == 1

    def test_close_order(self, client: TestClient, headers: dict[str, str]) -> None:
        client.app.state.order_service.close_order = AsyncMock(
            return_value=build_order(OrderStatusEnum.CLOSED)
        )

        response = client.post("/pizzapalace/admin/orders/order_1/close", headers=headers)

        assert response.status_code == 200
        assert response.json()["status"] == "closed"

    def test_close_closed_order(self, client: TestClient, headers: dict[str, str]) -> None:
        client.app.state.order_service.close_order = AsyncMock(
            side_effect=OrderStatusTransitionError("Order order_1 is already closed")
        )

        response = client.post("/pizzapalace/admin/orders/order_1/close", headers=headers)

        assert response.status_code == 409

    def test_close_unknown_order(self, client: TestClient, headers: dict[str, str]) -> None:
        client.app.state.order_service.close_order = AsyncMock(return_value=None)

        response = client.post("/pizzapalace/admin/orders/order_1/close", headers=headers)

        assert response.status_code == 404

"""Unit tests for DynamoDB conversion of the data models."""

from datetime import UTC, datetime
from decimal import Decimal

import pytest
from pydantic import ValidationError

from orderdirect.models.customer_models import CustomerProfile, SavedAddress
from orderdirect.models.menu_models import Category, MenuItem
from orderdirect.models.order_models import Order, OrderItem, OrderStatusEnum
from orderdirect.models.tenant_models import (
    Restaurant,
    SubscriptionStatusEnum,
    UserProfile,
    UserRoleEnum,
)


@pytest.mark.unit
class TestMenuItem:
    """Test suite for MenuItem model."""

    def test_to_dynamodb_item_omits_empty_optionals(self, margherita: MenuItem) -> None:
        item = margherita.to_dynamodb_item()

        assert item["price"] == Decimal("9.99")
        assert item["category"] == "Pizzas"
        assert "image_url" not in item
        assert "created_at" not in item

    def test_from_dynamodb_item_with_defaults(self) -> None:
        item = MenuItem.from_dynamodb_item(
            {"id": "item_9", "restaurant_id": "rest_123456", "name": "Tiramisu", "price": Decimal("6")}
        )

        assert item.price == Decimal("6")
        assert item.description == ""
        assert item.category == ""
        assert item.available is True

    def test_negative_price_rejected(self) -> None:
        with pytest.raises(ValidationError):
            MenuItem(id="x", restaurant_id="r", name="Bad", price=Decimal("-1"))

    def test_timestamps_round_trip(self, margherita: MenuItem) -> None:
        stamped = margherita.model_copy(
            update={"created_at": datetime(2024, 1, 15, 10, 30, tzinfo=UTC)}
        )

        restored = MenuItem.from_dynamodb_item(stamped.to_dynamodb_item())

        assert restored.created_at == stamped.created_at


@pytest.mark.unit
class TestCategory:
    """Test suite for Category model."""

    def test_display_order_from_dynamodb_number(self) -> None:
        category = Category.from_dynamodb_item(
            {"id": "cat_1", "restaurant_id": "r", "name": "Pizzas", "display_order": Decimal("3")}
        )

        assert category.display_order == 3
        assert isinstance(category.display_order, int)
        assert category.description is None


@pytest.mark.unit
class TestTenantModels:
    """Test suite for Restaurant and UserProfile models."""

    def test_restaurant_round_trip(self, restaurant: Restaurant) -> None:
        item = restaurant.to_dynamodb_item()

        assert item["subdomain"] == "pizzapalace"
        assert item["subscription_status"] == "trial"
        assert Restaurant.from_dynamodb_item(item) == restaurant

    def test_restaurant_defaults(self) -> None:
        restaurant = Restaurant.from_dynamodb_item(
            {"id": "r1", "name": "Cafe", "subdomain": "cafe"}
        )

        assert restaurant.subscription_status == SubscriptionStatusEnum.TRIAL
        assert restaurant.subscription_plan == "standard"
        assert restaurant.stripe_account_id is None

    def test_profile_round_trip(self, owner_profile: UserProfile) -> None:
        restored = UserProfile.from_dynamodb_item(owner_profile.to_dynamodb_item())

        assert restored == owner_profile
        assert restored.role == UserRoleEnum.OWNER


@pytest.mark.unit
class TestOrder:
    """Test suite for Order model."""

    def test_round_trip_keeps_total_verbatim(self) -> None:
        now = datetime(2024, 1, 15, 18, 0, tzinfo=UTC)
        order = Order(
            id="order_1",
            restaurant_id="rest_123456",
            customer_name="Jo Smith",
            items=[
                OrderItem(name="Margherita", quantity=2, price=Decimal("9.99")),
                OrderItem(name="Garlic Bread", quantity=1, price=Decimal("4.50")),
            ],
            total=Decimal("30.70"),
            created_at=now,
            updated_at=now,
        )

        item = order.to_dynamodb_item()
        restored = Order.from_dynamodb_item(item)

        assert item["status"] == "open"
        assert restored == order
        assert restored.total == Decimal("30.70")

    def test_quantity_from_dynamodb_number(self) -> None:
        order = Order.from_dynamodb_item(
            {
                "id": "order_1",
                "restaurant_id": "rest_123456",
                "status": "closed",
                "customer_name": "Jo",
                "items": [{"name": "Margherita", "quantity": Decimal("2"), "price": Decimal("9.99")}],
                "total": Decimal("25.98"),
                "created_at": "2024-01-15T18:00:00+00:00",
                "updated_at": "2024-01-15T19:00:00+00:00",
            }
        )

        assert order.status == OrderStatusEnum.CLOSED
        assert order.items[0].quantity == 2


@pytest.mark.unit
class TestCustomerModels:
    """Test suite for customer profiles and saved addresses."""

    def test_saved_address_omits_empty_optionals(self) -> None:
        address = SavedAddress(
            id="addr_1",
            label="Home",
            street="12 Elm St",
            apartment="",
            city="Springfield",
            state="IL",
            zip_code="62701",
        )

        item = address.to_dynamodb_item()

        assert "apartment" not in item
        assert "landmark" not in item
        assert item["is_default"] is False

    def test_customer_profile_round_trip(self, customer_profile: CustomerProfile) -> None:
        item = customer_profile.to_dynamodb_item()

        assert item["created_at"] == "2024-01-15T12:00:00+00:00"
        assert item["saved_addresses"][0]["id"] == "addr_home"
        assert CustomerProfile.from_dynamodb_item(item) == customer_profile

    def test_default_address(self, customer_profile: CustomerProfile) -> None:
        assert customer_profile.default_address is not None
        assert customer_profile.default_address.id == "addr_home"

        no_default = customer_profile.model_copy(
            update={
                "saved_addresses": [
                    a.model_copy(update={"is_default": False})
                    for a in customer_profile.saved_addresses
                ]
            }
        )
        assert no_default.default_address is None

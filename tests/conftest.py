"""Shared pytest fixtures and configuration for all tests."""

import os
from datetime import UTC, datetime
from decimal import Decimal

import pytest

# main.py and lambda_handler.py only build the real application outside of tests
os.environ.setdefault("ENVIRONMENT", "test")

from orderdirect.models.customer_models import CustomerProfile, SavedAddress  # noqa: E402
from orderdirect.models.menu_models import Category, MenuItem  # noqa: E402
from orderdirect.models.tenant_models import Restaurant, UserProfile  # noqa: E402


@pytest.fixture
def mock_restaurant_id() -> str:
    """Fixture providing a standard test restaurant ID."""
    return "rest_123456"


@pytest.fixture
def restaurant(mock_restaurant_id: str) -> Restaurant:
    """Fixture providing the restaurant behind the "pizzapalace" storefront."""
    now = datetime(2024, 1, 15, 10, 30, tzinfo=UTC)
    return Restaurant(
        id=mock_restaurant_id,
        name="Pizza Palace",
        subdomain="pizzapalace",
        owner_name="Maria Rossi",
        owner_email="maria@pizzapalace.com",
        phone="555-0100",
        created_at=now,
        updated_at=now,
    )


@pytest.fixture
def other_restaurant() -> Restaurant:
    """Fixture providing a second, unrelated restaurant."""
    now = datetime(2024, 1, 15, 10, 30, tzinfo=UTC)
    return Restaurant(
        id="rest_999999",
        name="Burger Barn",
        subdomain="burgerbarn",
        owner_name="Sam Lee",
        owner_email="sam@burgerbarn.com",
        created_at=now,
        updated_at=now,
    )


@pytest.fixture
def owner_profile(mock_restaurant_id: str) -> UserProfile:
    """Fixture providing the owner profile of the standard restaurant."""
    return UserProfile(
        user_id="user_1",
        email="maria@pizzapalace.com",
        name="Maria Rossi",
        restaurant_id=mock_restaurant_id,
        created_at=datetime(2024, 1, 15, 10, 30, tzinfo=UTC),
    )


@pytest.fixture
def margherita(mock_restaurant_id: str) -> MenuItem:
    """Fixture providing a pizza priced at 9.99."""
    return MenuItem(
        id="item_1",
        restaurant_id=mock_restaurant_id,
        name="Margherita",
        description="Tomato, mozzarella, basil",
        price=Decimal("9.99"),
        category="Pizzas",
    )


@pytest.fixture
def garlic_bread(mock_restaurant_id: str) -> MenuItem:
    """Fixture providing a side priced at 4.50."""
    return MenuItem(
        id="item_2",
        restaurant_id=mock_restaurant_id,
        name="Garlic Bread",
        price=Decimal("4.50"),
        category="Sides",
    )


@pytest.fixture
def pizzas_category(mock_restaurant_id: str) -> Category:
    """Fixture providing the "Pizzas" category."""
    return Category(id="cat_1", restaurant_id=mock_restaurant_id, name="Pizzas", display_order=1)


@pytest.fixture
def customer_profile() -> CustomerProfile:
    """Fixture providing a customer with one saved, default address."""
    now = datetime(2024, 1, 15, 12, 0, tzinfo=UTC)
    return CustomerProfile(
        id="cust_1",
        email="jo@example.com",
        name="Jo Smith",
        phone="555-0142",
        saved_addresses=[
            SavedAddress(
                id="addr_home",
                label="Home",
                street="12 Elm St",
                city="Springfield",
                state="IL",
                zip_code="62701",
                is_default=True,
            )
        ],
        created_at=now,
        updated_at=now,
    )

"""Cart data models.

The cart is a tagged variant: an EmptyCart has no restaurant and no items, a
BoundCart has a restaurant and at least one item. There is no model for the
mixed states, so they cannot be constructed.

All cart models are frozen; cart operations return new instances.
"""

from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from orderdirect.models.menu_models import MenuItem


class AddOnOption(BaseModel):
    """A priced option selected for a line item (e.g. extra cheese)."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Option name")
    price: Decimal = Field(..., description="Price added to the unit price", ge=0)


class MenuItemSnapshot(BaseModel):
    """Menu item data captured when the item was added to the cart.

    Prices are never re-fetched; the cart keeps what the customer saw.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Menu item id, also the line item key")
    name: str = Field(..., description="Item name")
    description: str = Field(default="", description="Item description")
    price: Decimal = Field(..., description="Unit price at add time", ge=0)
    category: str = Field(default="", description="Category name")
    image_url: str | None = Field(None, description="URL to item image")
    available: bool = Field(default=True, description="Availability at add time")

    @classmethod
    def from_menu_item(cls, item: MenuItem) -> "MenuItemSnapshot":
        """Capture the customer-facing fields of a menu item."""
        return cls(
            id=item.id,
            name=item.name,
            description=item.description,
            price=item.price,
            category=item.category,
            image_url=item.image_url,
            available=item.available,
        )


class CartLineItem(BaseModel):
    """One menu item plus quantity held inside a cart."""

    model_config = ConfigDict(frozen=True)

    menu_item: MenuItemSnapshot
    quantity: int = Field(..., ge=1)
    special_instructions: str | None = None
    selected_add_ons: tuple[AddOnOption, ...] = ()

    @property
    def unit_price(self) -> Decimal:
        """Menu price plus the price of every selected add-on."""
        return self.menu_item.price + sum((a.price for a in self.selected_add_ons), Decimal("0"))


class EmptyCart(BaseModel):
    """Cart with no restaurant binding and no items."""

    model_config = ConfigDict(frozen=True)

    @property
    def restaurant_id(self) -> None:
        return None

    @property
    def restaurant_name(self) -> None:
        return None

    @property
    def items(self) -> tuple[CartLineItem, ...]:
        return ()


class BoundCart(BaseModel):
    """Cart bound to one restaurant, holding at least one line item."""

    model_config = ConfigDict(frozen=True)

    restaurant_id: str = Field(..., min_length=1)
    restaurant_name: str
    items: tuple[CartLineItem, ...] = Field(..., min_length=1)


Cart = EmptyCart | BoundCart


class CartTotals(BaseModel):
    """Prices derived from a cart's line items."""

    model_config = ConfigDict(frozen=True)

    subtotal: Decimal
    delivery_fee: Decimal
    taxes: Decimal
    total: Decimal

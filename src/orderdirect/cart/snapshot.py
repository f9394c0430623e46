"""Conversion between carts and their persisted snapshot format.

Snapshot shape::

    {
        "restaurantId": str | None,
        "restaurantName": str | None,
        "items": [
            {
                "menuItem": {"id", "name", "description", "price", "category",
                             "imageUrl"?, "available"},
                "quantity": int >= 1,
                "specialInstructions"?: str,
                "selectedAddOns"?: [{"name", "price"}],
            }
        ],
    }

Prices are written as strings so Decimal values survive JSON unchanged.
"""

from decimal import Decimal, InvalidOperation
from typing import Any

from pydantic import ValidationError

from orderdirect.models.cart_models import (
    AddOnOption,
    BoundCart,
    Cart,
    CartLineItem,
    EmptyCart,
    MenuItemSnapshot,
)


class CartSnapshotError(ValueError):
    """Raised when a persisted snapshot does not have the expected shape."""


def cart_to_snapshot(cart: Cart) -> dict[str, Any]:
    """Serialize a cart into its snapshot dictionary."""
    return {
        "restaurantId": cart.restaurant_id,
        "restaurantName": cart.restaurant_name,
        "items": [_line_item_to_snapshot(item) for item in cart.items],
    }


def cart_from_snapshot(snapshot: Any) -> Cart:
    """Rebuild a cart from a snapshot dictionary.

    Only the structural shape is checked. A snapshot with a restaurant but no
    items is normalized to an empty cart.

    Raises:
        CartSnapshotError: If the snapshot is malformed, or has items without
            a restaurant
    """
    if not isinstance(snapshot, dict):
        raise CartSnapshotError("Cart snapshot must be an object")

    raw_items = snapshot.get("items") or []
    if not isinstance(raw_items, list):
        raise CartSnapshotError("Cart snapshot items must be a list")

    try:
        items = tuple(_line_item_from_snapshot(raw) for raw in raw_items)
    except (KeyError, TypeError, InvalidOperation, ValidationError) as e:
        raise CartSnapshotError(f"Malformed cart line item: {e}") from e

    if not items:
        return EmptyCart()

    restaurant_id = snapshot.get("restaurantId")
    if not restaurant_id or not isinstance(restaurant_id, str):
        raise CartSnapshotError("Cart snapshot has items but no restaurant")

    try:
        return BoundCart(
            restaurant_id=restaurant_id,
            restaurant_name=snapshot.get("restaurantName") or "",
            items=items,
        )
    except ValidationError as e:
        raise CartSnapshotError(f"Malformed cart snapshot: {e}") from e


def _line_item_to_snapshot(item: CartLineItem) -> dict[str, Any]:
    menu_item = item.menu_item
    menu_data: dict[str, Any] = {
        "id": menu_item.id,
        "name": menu_item.name,
        "description": menu_item.description,
        "price": str(menu_item.price),
        "category": menu_item.category,
        "available": menu_item.available,
    }
    if menu_item.image_url is not None:
        menu_data["imageUrl"] = menu_item.image_url

    data: dict[str, Any] = {"menuItem": menu_data, "quantity": item.quantity}
    if item.special_instructions is not None:
        data["specialInstructions"] = item.special_instructions
    if item.selected_add_ons:
        data["selectedAddOns"] = [
            {"name": a.name, "price": str(a.price)} for a in item.selected_add_ons
        ]
    return data


def _line_item_from_snapshot(raw: dict[str, Any]) -> CartLineItem:
    menu_data = raw["menuItem"]
    menu_item = MenuItemSnapshot(
        id=menu_data["id"],
        name=menu_data["name"],
        description=menu_data.get("description", ""),
        price=Decimal(str(menu_data["price"])),
        category=menu_data.get("category", ""),
        image_url=menu_data.get("imageUrl"),
        available=menu_data.get("available", True),
    )
    add_ons = tuple(
        AddOnOption(name=a["name"], price=Decimal(str(a["price"])))
        for a in raw.get("selectedAddOns") or []
    )
    return CartLineItem(
        menu_item=menu_item,
        quantity=raw["quantity"],
        special_instructions=raw.get("specialInstructions"),
        selected_add_ons=add_ons,
    )

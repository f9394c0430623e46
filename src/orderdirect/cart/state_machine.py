"""Cart state machine.

Every operation is a total function from the current cart to a new cart. The
two states are EmptyCart (no restaurant, no items) and BoundCart (restaurant
set, at least one item); each operation lands in exactly one of them.
"""

from collections.abc import Sequence
from typing import Any

from orderdirect.cart.snapshot import cart_from_snapshot
from orderdirect.models.cart_models import (
    AddOnOption,
    BoundCart,
    Cart,
    CartLineItem,
    EmptyCart,
    MenuItemSnapshot,
)
from orderdirect.models.menu_models import MenuItem


def add_item(
    cart: Cart,
    menu_item: MenuItem | MenuItemSnapshot,
    restaurant_id: str,
    restaurant_name: str,
    selected_add_ons: Sequence[AddOnOption] = (),
) -> Cart:
    """Add one unit of a menu item to the cart.

    Adding an item from a restaurant other than the bound one discards every
    existing line and rebinds the cart to the new restaurant.

    Args:
        cart: Current cart
        menu_item: Item to add; its current data is captured in the line
        restaurant_id: Restaurant the item belongs to
        restaurant_name: Display name of that restaurant
        selected_add_ons: Add-ons for a newly created line

    Returns:
        The resulting cart, always bound
    """
    snapshot = (
        menu_item
        if isinstance(menu_item, MenuItemSnapshot)
        else MenuItemSnapshot.from_menu_item(menu_item)
    )
    new_line = CartLineItem(
        menu_item=snapshot, quantity=1, selected_add_ons=tuple(selected_add_ons)
    )

    if isinstance(cart, BoundCart) and cart.restaurant_id != restaurant_id:
        return BoundCart(
            restaurant_id=restaurant_id,
            restaurant_name=restaurant_name,
            items=(new_line,),
        )

    if _find(cart, snapshot.id) is not None:
        items = tuple(
            line.model_copy(update={"quantity": line.quantity + 1})
            if line.menu_item.id == snapshot.id
            else line
            for line in cart.items
        )
    else:
        items = (*cart.items, new_line)

    return BoundCart(restaurant_id=restaurant_id, restaurant_name=restaurant_name, items=items)


def remove_item(cart: Cart, menu_item_id: str) -> Cart:
    """Remove a line item; removing the last line unbinds the cart."""
    if not isinstance(cart, BoundCart) or _find(cart, menu_item_id) is None:
        return cart

    items = tuple(line for line in cart.items if line.menu_item.id != menu_item_id)
    if not items:
        return EmptyCart()

    return cart.model_copy(update={"items": items})


def set_quantity(cart: Cart, menu_item_id: str, quantity: int) -> Cart:
    """Set a line item's quantity; zero or less removes the line."""
    if quantity <= 0:
        return remove_item(cart, menu_item_id)

    if not isinstance(cart, BoundCart) or _find(cart, menu_item_id) is None:
        return cart

    items = tuple(
        line.model_copy(update={"quantity": quantity}) if line.menu_item.id == menu_item_id else line
        for line in cart.items
    )
    return cart.model_copy(update={"items": items})


def set_instructions(cart: Cart, menu_item_id: str, instructions: str) -> Cart:
    """Attach free-text special instructions to a line item."""
    if not isinstance(cart, BoundCart) or _find(cart, menu_item_id) is None:
        return cart

    items = tuple(
        line.model_copy(update={"special_instructions": instructions})
        if line.menu_item.id == menu_item_id
        else line
        for line in cart.items
    )
    return cart.model_copy(update={"items": items})


def clear_cart() -> Cart:
    """Return the empty, unbound cart."""
    return EmptyCart()


def load_cart(snapshot: dict[str, Any]) -> Cart:
    """Replace the cart wholesale with a previously persisted snapshot.

    Raises:
        CartSnapshotError: If the snapshot is malformed
    """
    return cart_from_snapshot(snapshot)


def item_count(cart: Cart) -> int:
    """Total number of units across all line items."""
    return sum(line.quantity for line in cart.items)


def _find(cart: Cart, menu_item_id: str) -> CartLineItem | None:
    for line in cart.items:
        if line.menu_item.id == menu_item_id:
            return line
    return None

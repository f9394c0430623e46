"""Cart session: the cart state machine bound to its persistence adapter."""

import logging
from collections.abc import Sequence
from decimal import Decimal

from orderdirect.cart import state_machine
from orderdirect.cart.persistence import CartPersistenceAdapter
from orderdirect.cart.pricing import DELIVERY_FEE, calculate_totals
from orderdirect.models.cart_models import AddOnOption, Cart, CartTotals, MenuItemSnapshot
from orderdirect.models.menu_models import MenuItem
from orderdirect.observability.metrics import record_cart_mutation

logger = logging.getLogger(__name__)


class CartSession:
    """One client's cart.

    The cart is rehydrated from storage when the session is created. After
    every mutation the totals are recomputed from scratch and the full cart
    is written back.
    """

    def __init__(
        self, persistence: CartPersistenceAdapter, delivery_fee: Decimal = DELIVERY_FEE
    ) -> None:
        """Initialize the session.

        Args:
            persistence: Adapter for this client's cart storage
            delivery_fee: Flat delivery fee used when pricing the cart
        """
        self.persistence = persistence
        self.delivery_fee = delivery_fee
        self.cart: Cart = persistence.load()
        self.totals: CartTotals = calculate_totals(self.cart.items, delivery_fee=delivery_fee)

    @property
    def item_count(self) -> int:
        return state_machine.item_count(self.cart)

    def add_item(
        self,
        menu_item: MenuItem | MenuItemSnapshot,
        restaurant_id: str,
        restaurant_name: str,
        selected_add_ons: Sequence[AddOnOption] = (),
    ) -> Cart:
        if self.cart.restaurant_id and self.cart.restaurant_id != restaurant_id:
            logger.info(
                f"Cart switched from restaurant {self.cart.restaurant_id} to {restaurant_id}, "
                f"dropping {len(self.cart.items)} line(s)"
            )
        return self._apply(
            state_machine.add_item(
                self.cart, menu_item, restaurant_id, restaurant_name, selected_add_ons
            ),
            "add_item",
        )

    def remove_item(self, menu_item_id: str) -> Cart:
        return self._apply(state_machine.remove_item(self.cart, menu_item_id), "remove_item")

    def set_quantity(self, menu_item_id: str, quantity: int) -> Cart:
        return self._apply(
            state_machine.set_quantity(self.cart, menu_item_id, quantity), "set_quantity"
        )

    def set_instructions(self, menu_item_id: str, instructions: str) -> Cart:
        return self._apply(
            state_machine.set_instructions(self.cart, menu_item_id, instructions),
            "set_instructions",
        )

    def clear(self) -> Cart:
        return self._apply(state_machine.clear_cart(), "clear")

    def _apply(self, cart: Cart, operation: str) -> Cart:
        self.cart = cart
        self.totals = calculate_totals(cart.items, delivery_fee=self.delivery_fee)
        self.persistence.save(cart)
        record_cart_mutation(operation)
        return cart

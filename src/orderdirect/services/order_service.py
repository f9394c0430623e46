"""Checkout and order status tracking."""

import logging
import uuid
from collections.abc import Callable
from datetime import UTC, datetime

from orderdirect.cart.session import CartSession
from orderdirect.exceptions import EmptyCartError, OrderStatusTransitionError
from orderdirect.models.order_models import Order, OrderItem, OrderStatusEnum
from orderdirect.models.tenant_models import Restaurant
from orderdirect.observability.decorators import traced
from orderdirect.observability.metrics import record_order_placed
from orderdirect.repositories.order_repositories import OrderRepository

logger = logging.getLogger(__name__)

OrderListener = Callable[[Order], None]


class OrderService:
    """Service for placing orders and following their status.

    Orders are created once from a cart and afterwards only move from open
    to closed. Listeners registered with subscribe() are called in-process
    whenever this service changes the status of the order they watch.
    """

    def __init__(self, order_repository: OrderRepository) -> None:
        """Initialize the OrderService.

        Args:
            order_repository: Repository for order records
        """
        self.order_repository = order_repository
        self._listeners: dict[str, list[OrderListener]] = {}

    @traced("place_order")
    async def place_order(
        self,
        restaurant: Restaurant,
        cart_session: CartSession,
        customer_name: str,
        customer_email: str | None = None,
        customer_phone: str | None = None,
        special_instructions: str | None = None,
    ) -> Order:
        """Turn the cart into an open order and clear the cart.

        Each line becomes a (name, quantity, unit price) snapshot. The order
        total is the cart's total as priced right now, stored as is.

        Raises:
            EmptyCartError: If the cart is empty or holds another restaurant's items
            StoreUnavailableError: If the order cannot be written; the cart is kept
        """
        cart = cart_session.cart
        if not cart.items:
            raise EmptyCartError("Your cart is empty")
        if cart.restaurant_id != restaurant.id:
            raise EmptyCartError(f"Your cart has no items from {restaurant.name}")

        now = datetime.now(UTC)
        order = Order(
            id=uuid.uuid4().hex,
            restaurant_id=restaurant.id,
            status=OrderStatusEnum.OPEN,
            customer_name=customer_name,
            customer_email=customer_email,
            customer_phone=customer_phone,
            items=[
                OrderItem(name=line.menu_item.name, quantity=line.quantity, price=line.unit_price)
                for line in cart.items
            ],
            total=cart_session.totals.total,
            special_instructions=special_instructions,
            created_at=now,
            updated_at=now,
        )

        self.order_repository.create_order(order)
        cart_session.clear()

        record_order_placed(restaurant.id, float(order.total))
        logger.info(f"Order {order.id} placed with restaurant {restaurant.id} for {order.total}")
        return order

    async def get_order(self, restaurant_id: str, order_id: str) -> Order | None:
        """Retrieve an order, None if it does not exist or belongs to another restaurant."""
        order = self.order_repository.get_order(order_id)
        if order is None or order.restaurant_id != restaurant_id:
            return None
        return order

    async def list_orders(self, restaurant_id: str) -> list[Order]:
        """A restaurant's orders, newest first."""
        return self.order_repository.list_orders_for_restaurant(restaurant_id)

    async def close_order(self, restaurant_id: str, order_id: str) -> Order | None:
        """Close an open order.

        Returns:
            The closed order, or None if the restaurant has no such order

        Raises:
            OrderStatusTransitionError: If the order is already closed
        """
        if not self.order_repository.close_order(restaurant_id, order_id, datetime.now(UTC)):
            existing = await self.get_order(restaurant_id, order_id)
            if existing is None:
                return None
            raise OrderStatusTransitionError(f"Order {order_id} is already {existing.status.value}")

        order = self.order_repository.get_order(order_id)
        if order is not None:
            logger.info(f"Order {order_id} closed by restaurant {restaurant_id}")
            self._notify(order)
        return order

    def subscribe(self, order_id: str, listener: OrderListener) -> Callable[[], None]:
        """Watch one order's status changes.

        Returns:
            A function that removes the listener
        """
        self._listeners.setdefault(order_id, []).append(listener)

        def unsubscribe() -> None:
            listeners = self._listeners.get(order_id, [])
            if listener in listeners:
                listeners.remove(listener)
            if not listeners:
                self._listeners.pop(order_id, None)

        return unsubscribe

    def _notify(self, order: Order) -> None:
        for listener in list(self._listeners.get(order.id, [])):
            listener(order)

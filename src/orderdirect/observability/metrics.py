"""Custom metrics for the ordering service."""

from opentelemetry import metrics

meter = metrics.get_meter("orderdirect")

orders_placed_counter = meter.create_counter(
    name="orders_placed_total",
    description="Total number of orders placed by restaurant",
    unit="1",
)

order_value_histogram = meter.create_histogram(
    name="order_value",
    description="Total value of placed orders",
    unit="1",
)

cart_mutation_counter = meter.create_counter(
    name="cart_mutations_total",
    description="Total number of cart mutations by operation",
    unit="1",
)

tenant_resolution_counter = meter.create_counter(
    name="tenant_resolutions_total",
    description="Storefront subdomain resolutions by outcome",
    unit="1",
)

authorization_denied_counter = meter.create_counter(
    name="admin_authorization_denied_total",
    description="Admin requests rejected because the principal belongs to another restaurant",
    unit="1",
)

category_cascade_counter = meter.create_counter(
    name="category_rename_item_updates_total",
    description="Menu item updates performed by category renames, by outcome",
    unit="1",
)

customer_signup_counter = meter.create_counter(
    name="customer_signups_total",
    description="Total number of customer accounts created",
    unit="1",
)


def record_order_placed(restaurant_id: str, total: float) -> None:
    """Record a placed order.

    Args:
        restaurant_id: Restaurant the order was placed with
        total: Order total
    """
    orders_placed_counter.add(1, {"restaurant_id": restaurant_id})
    order_value_histogram.record(total, {"restaurant_id": restaurant_id})


def record_cart_mutation(operation: str) -> None:
    """Record a cart mutation.

    Args:
        operation: Name of the cart operation (e.g., "add_item", "clear")
    """
    cart_mutation_counter.add(1, {"operation": operation})


def record_tenant_resolution(outcome: str) -> None:
    """Record the outcome of a subdomain lookup ("found" or "not_found")."""
    tenant_resolution_counter.add(1, {"outcome": outcome})


def record_authorization_denied(route_restaurant_id: str) -> None:
    """Record an admin request denied by the tenant check."""
    authorization_denied_counter.add(1, {"restaurant_id": route_restaurant_id})


def record_category_cascade(restaurant_id: str, updated: int, failed: int) -> None:
    """Record the item updates made by a category rename.

    Args:
        restaurant_id: Restaurant whose category was renamed
        updated: Number of menu items rewritten
        failed: Number of menu items that could not be rewritten
    """
    category_cascade_counter.add(updated, {"restaurant_id": restaurant_id, "outcome": "updated"})
    if failed:
        category_cascade_counter.add(failed, {"restaurant_id": restaurant_id, "outcome": "failed"})


def record_customer_signup() -> None:
    customer_signup_counter.add(1)

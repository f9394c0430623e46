"""Price derivation for cart contents.

Totals are always computed from the full list of line items. Nothing patches
a previous total, so rounding never accumulates across cart edits.
"""

from collections.abc import Sequence
from decimal import ROUND_HALF_UP, Decimal

from orderdirect.models.cart_models import CartLineItem, CartTotals

DELIVERY_FEE = Decimal("5.00")
TAX_RATE = Decimal("0.05")

_CENTS = Decimal("0.01")
_ZERO = Decimal("0.00")


def round2(value: Decimal) -> Decimal:
    """Round a monetary amount to two decimal places, halves away from zero."""
    return value.quantize(_CENTS, rounding=ROUND_HALF_UP)


def calculate_subtotal(items: Sequence[CartLineItem]) -> Decimal:
    """Sum of (unit price + add-on prices) x quantity over all line items."""
    return round2(sum((item.unit_price * item.quantity for item in items), _ZERO))


def calculate_totals(
    items: Sequence[CartLineItem],
    delivery_fee: Decimal = DELIVERY_FEE,
    tax_rate: Decimal = TAX_RATE,
) -> CartTotals:
    """Derive subtotal, delivery fee, taxes and total from line items.

    Args:
        items: Line items in display order
        delivery_fee: Flat fee charged when the cart is not empty
        tax_rate: Tax rate applied to the subtotal

    Returns:
        CartTotals with every amount rounded to two decimal places
    """
    subtotal = calculate_subtotal(items)
    fee = round2(delivery_fee) if items else _ZERO
    taxes = round2(subtotal * tax_rate)
    total = round2(subtotal + fee + taxes)

    return CartTotals(subtotal=subtotal, delivery_fee=fee, taxes=taxes, total=total)

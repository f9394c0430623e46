"""Order models.

An order is written once at checkout. Afterwards only its status may change,
and only from open to closed.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class OrderStatusEnum(str, Enum):
    """Enumeration of order status values."""

    OPEN = "open"
    CLOSED = "closed"


class OrderItem(BaseModel):
    """Snapshot of a cart line taken at checkout."""

    name: str = Field(..., description="Menu item name at checkout time")
    quantity: int = Field(..., description="Quantity ordered", ge=1)
    price: Decimal = Field(..., description="Unit price at checkout time", ge=0)


class Order(BaseModel):
    """Customer order for a single restaurant.

    Stored in DynamoDB with id as partition key and a global secondary index
    on restaurant_id.
    """

    id: str = Field(..., description="Order identifier")
    restaurant_id: str = Field(..., description="Restaurant the order was placed with")
    status: OrderStatusEnum = Field(default=OrderStatusEnum.OPEN, description="Order status")
    customer_name: str = Field(..., description="Customer name")
    customer_email: str | None = Field(None, description="Customer email")
    customer_phone: str | None = Field(None, description="Customer phone")
    items: list[OrderItem] = Field(..., description="Item snapshots taken from the cart")
    total: Decimal = Field(..., description="Cart total at checkout, stored verbatim", ge=0)
    special_instructions: str | None = Field(None, description="Order-level instructions")
    created_at: datetime = Field(..., description="Creation timestamp")
    updated_at: datetime = Field(..., description="Last update timestamp")

    def to_dynamodb_item(self) -> dict[str, Any]:
        """Convert to DynamoDB item format.

        Returns:
            dict: DynamoDB-compatible representation
        """
        item: dict[str, Any] = {
            "id": self.id,
            "restaurant_id": self.restaurant_id,
            "status": self.status.value,
            "customer_name": self.customer_name,
            "items": [
                {"name": i.name, "quantity": i.quantity, "price": i.price} for i in self.items
            ],
            "total": self.total,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }

        if self.customer_email is not None:
            item["customer_email"] = self.customer_email

        if self.customer_phone is not None:
            item["customer_phone"] = self.customer_phone

        if self.special_instructions is not None:
            item["special_instructions"] = self.special_instructions

        return item

    @classmethod
    def from_dynamodb_item(cls, item: dict[str, Any]) -> "Order":
        """Create Order from DynamoDB item.

        Args:
            item: DynamoDB item dictionary

        Returns:
            Order: Parsed model instance
        """
        return cls(
            id=item["id"],
            restaurant_id=item["restaurant_id"],
            status=OrderStatusEnum(item["status"]),
            customer_name=item["customer_name"],
            customer_email=item.get("customer_email"),
            customer_phone=item.get("customer_phone"),
            items=[
                OrderItem(
                    name=i["name"],
                    quantity=int(i["quantity"]),
                    price=Decimal(str(i["price"])),
                )
                for i in item.get("items", [])
            ],
            total=Decimal(str(item["total"])),
            special_instructions=item.get("special_instructions"),
            created_at=datetime.fromisoformat(item["created_at"]),
            updated_at=datetime.fromisoformat(item["updated_at"]),
        )

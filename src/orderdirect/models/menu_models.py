"""Menu data models.

Menu items belong to a restaurant and reference their category by name, not
by id. Renaming a category therefore has to rewrite every item that carries
the old name (see MenuService.rename_category).
"""

from datetime import datetime
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class MenuItem(BaseModel):
    """Menu item model."""

    model_config = ConfigDict(json_encoders={Decimal: str})

    id: str = Field(..., description="Unique identifier for the menu item")
    restaurant_id: str = Field(..., description="Restaurant this item belongs to")
    name: str = Field(..., description="Item name")
    description: str = Field(default="", description="Item description")
    price: Decimal = Field(..., description="Item price", ge=0)
    category: str = Field(default="", description="Name of the category this item is listed under")
    available: bool = Field(default=True, description="Whether item is currently available")
    image_url: str | None = Field(None, description="URL to item image")
    created_at: datetime | None = Field(None, description="Creation timestamp")
    updated_at: datetime | None = Field(None, description="Last update timestamp")

    def to_dynamodb_item(self) -> dict[str, Any]:
        """Convert to DynamoDB item format.

        Returns:
            dict: DynamoDB-compatible representation
        """
        item: dict[str, Any] = {
            "id": self.id,
            "restaurant_id": self.restaurant_id,
            "name": self.name,
            "description": self.description,
            "price": self.price,
            "category": self.category,
            "available": self.available,
        }

        if self.image_url:
            item["image_url"] = self.image_url

        if self.created_at is not None:
            item["created_at"] = self.created_at.isoformat()

        if self.updated_at is not None:
            item["updated_at"] = self.updated_at.isoformat()

        return item

    @classmethod
    def from_dynamodb_item(cls, item: dict[str, Any]) -> "MenuItem":
        """Create MenuItem from DynamoDB item.

        Args:
            item: DynamoDB item dictionary

        Returns:
            MenuItem: Parsed model instance
        """
        data: dict[str, Any] = {
            "id": item["id"],
            "restaurant_id": item["restaurant_id"],
            "name": item["name"],
            "description": item.get("description", ""),
            "price": Decimal(str(item["price"])),
            "category": item.get("category", ""),
            "available": item.get("available", True),
            "image_url": item.get("image_url"),
        }

        if "created_at" in item:
            data["created_at"] = datetime.fromisoformat(item["created_at"])

        if "updated_at" in item:
            data["updated_at"] = datetime.fromisoformat(item["updated_at"])

        return cls(**data)


class Category(BaseModel):
    """Menu category model."""

    id: str = Field(..., description="Unique identifier for the category")
    restaurant_id: str = Field(..., description="Restaurant this category belongs to")
    name: str = Field(..., description="Category name")
    description: str | None = Field(None, description="Category description")
    display_order: int = Field(default=0, description="Display order of category")
    created_at: datetime | None = Field(None, description="Creation timestamp")
    updated_at: datetime | None = Field(None, description="Last update timestamp")

    def to_dynamodb_item(self) -> dict[str, Any]:
        """Convert to DynamoDB item format."""
        item: dict[str, Any] = {
            "id": self.id,
            "restaurant_id": self.restaurant_id,
            "name": self.name,
            "display_order": self.display_order,
        }

        if self.description is not None:
            item["description"] = self.description

        if self.created_at is not None:
            item["created_at"] = self.created_at.isoformat()

        if self.updated_at is not None:
            item["updated_at"] = self.updated_at.isoformat()

        return item

    @classmethod
    def from_dynamodb_item(cls, item: dict[str, Any]) -> "Category":
        """Create Category from DynamoDB item."""
        data: dict[str, Any] = {
            "id": item["id"],
            "restaurant_id": item["restaurant_id"],
            "name": item["name"],
            "description": item.get("description"),
            "display_order": int(item.get("display_order", 0)),
        }

        if "created_at" in item:
            data["created_at"] = datetime.fromisoformat(item["created_at"])

        if "updated_at" in item:
            data["updated_at"] = datetime.fromisoformat(item["updated_at"])

        return cls(**data)

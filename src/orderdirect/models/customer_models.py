"""Customer account models.

Customers are platform-wide: one account orders from any storefront. The
profile id is the customer's identity id.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field


class SavedAddress(BaseModel):
    """A delivery address kept on a customer profile."""

    id: str = Field(..., description="Address identifier, unique within the profile")
    label: str = Field(..., description='Short name such as "Home" or "Work"')
    street: str = Field(..., description="Street and number")
    apartment: str | None = Field(None, description="Apartment, suite or floor")
    city: str = Field(..., description="City")
    state: str = Field(..., description="State or region")
    zip_code: str = Field(..., description="Postal code")
    landmark: str | None = Field(None, description="Delivery hint")
    is_default: bool = Field(default=False, description="Whether this is the default address")

    def to_dynamodb_item(self) -> dict[str, Any]:
        item: dict[str, Any] = {
            "id": self.id,
            "label": self.label,
            "street": self.street,
            "city": self.city,
            "state": self.state,
            "zip_code": self.zip_code,
            "is_default": self.is_default,
        }

        if self.apartment:
            item["apartment"] = self.apartment

        if self.landmark:
            item["landmark"] = self.landmark

        return item

    @classmethod
    def from_dynamodb_item(cls, item: dict[str, Any]) -> "SavedAddress":
        return cls(
            id=item["id"],
            label=item.get("label", ""),
            street=item.get("street", ""),
            apartment=item.get("apartment"),
            city=item.get("city", ""),
            state=item.get("state", ""),
            zip_code=item.get("zip_code", ""),
            landmark=item.get("landmark"),
            is_default=item.get("is_default", False),
        )


class CustomerProfile(BaseModel):
    """Customer profile model.

    Stored in DynamoDB with id as partition key. Saved addresses are kept on
    the profile record as a list.
    """

    id: str = Field(..., description="Identity provider user id")
    email: str = Field(..., description="Sign-in email")
    name: str = Field(..., description="Display name")
    phone: str = Field(default="", description="Contact phone number")
    saved_addresses: list[SavedAddress] = Field(
        default_factory=list, description="Delivery addresses, at most one marked default"
    )
    created_at: datetime | None = Field(None, description="Signup timestamp")
    updated_at: datetime | None = Field(None, description="Last update timestamp")

    @property
    def default_address(self) -> SavedAddress | None:
        return next((a for a in self.saved_addresses if a.is_default), None)

    def to_dynamodb_item(self) -> dict[str, Any]:
        """Convert to DynamoDB item format.

        Returns:
            dict: DynamoDB-compatible representation
        """
        item: dict[str, Any] = {
            "id": self.id,
            "email": self.email,
            "name": self.name,
            "phone": self.phone,
            "saved_addresses": [a.to_dynamodb_item() for a in self.saved_addresses],
        }

        if self.created_at is not None:
            item["created_at"] = self.created_at.isoformat()

        if self.updated_at is not None:
            item["updated_at"] = self.updated_at.isoformat()

        return item

    @classmethod
    def from_dynamodb_item(cls, item: dict[str, Any]) -> "CustomerProfile":
        """Create CustomerProfile from DynamoDB item.

        Args:
            item: DynamoDB item dictionary

        Returns:
            CustomerProfile: Parsed model instance
        """
        data: dict[str, Any] = {
            "id": item["id"],
            "email": item["email"],
            "name": item.get("name", ""),
            "phone": item.get("phone", ""),
            "saved_addresses": [
                SavedAddress.from_dynamodb_item(a) for a in item.get("saved_addresses", [])
            ],
        }

        if "created_at" in item:
            data["created_at"] = datetime.fromisoformat(item["created_at"])

        if "updated_at" in item:
            data["updated_at"] = datetime.fromisoformat(item["updated_at"])

        return cls(**data)

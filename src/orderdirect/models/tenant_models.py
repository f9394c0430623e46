"""Restaurant (tenant) and user profile models."""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class SubscriptionStatusEnum(str, Enum):
    """Enumeration of restaurant subscription states."""

    TRIAL = "trial"
    ACTIVE = "active"
    PAST_DUE = "past_due"
    CANCELLED = "cancelled"


class UserRoleEnum(str, Enum):
    """Role of a user within their restaurant."""

    OWNER = "owner"
    STAFF = "staff"


class Restaurant(BaseModel):
    """A single restaurant account.

    The restaurant id is the owner's identity id, assigned at signup.
    Stored in DynamoDB with id as partition key and a global secondary
    index on subdomain.
    """

    id: str = Field(..., description="Restaurant identifier")
    name: str = Field(..., description="Display name")
    subdomain: str = Field(..., description="Unique lowercase storefront slug")
    owner_name: str = Field(..., description="Name of the owner")
    owner_email: str = Field(..., description="Email address of the owner")
    phone: str = Field(default="", description="Contact phone number")
    stripe_account_id: str | None = Field(
        None, description="External payment account, unset until configured"
    )
    subscription_status: SubscriptionStatusEnum = Field(
        default=SubscriptionStatusEnum.TRIAL, description="Subscription status"
    )
    subscription_plan: str = Field(default="standard", description="Subscription plan name")
    created_at: datetime | None = Field(None, description="Signup timestamp")
    updated_at: datetime | None = Field(None, description="Last update timestamp")

    def to_dynamodb_item(self) -> dict[str, Any]:
        """Convert to DynamoDB item format.

        Returns:
            dict: DynamoDB-compatible representation
        """
        item: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "subdomain": self.subdomain,
            "owner_name": self.owner_name,
            "owner_email": self.owner_email,
            "phone": self.phone,
            "subscription_status": self.subscription_status.value,
            "subscription_plan": self.subscription_plan,
        }

        if self.stripe_account_id is not None:
            item["stripe_account_id"] = self.stripe_account_id

        if self.created_at is not None:
            item["created_at"] = self.created_at.isoformat()

        if self.updated_at is not None:
            item["updated_at"] = self.updated_at.isoformat()

        return item

    @classmethod
    def from_dynamodb_item(cls, item: dict[str, Any]) -> "Restaurant":
        """Create Restaurant from DynamoDB item.

        Args:
            item: DynamoDB item dictionary

        Returns:
            Restaurant: Parsed model instance
        """
        data: dict[str, Any] = {
            "id": item["id"],
            "name": item["name"],
            "subdomain": item["subdomain"],
            "owner_name": item.get("owner_name", ""),
            "owner_email": item.get("owner_email", ""),
            "phone": item.get("phone", ""),
            "stripe_account_id": item.get("stripe_account_id"),
            "subscription_status": SubscriptionStatusEnum(
                item.get("subscription_status", SubscriptionStatusEnum.TRIAL.value)
            ),
            "subscription_plan": item.get("subscription_plan", "standard"),
        }

        if "created_at" in item:
            data["created_at"] = datetime.fromisoformat(item["created_at"])

        if "updated_at" in item:
            data["updated_at"] = datetime.fromisoformat(item["updated_at"])

        return cls(**data)


class UserProfile(BaseModel):
    """Profile record linking an identity to exactly one restaurant."""

    user_id: str = Field(..., description="Identity provider user id")
    email: str = Field(..., description="User email")
    name: str = Field(..., description="Display name")
    restaurant_id: str = Field(..., description="Restaurant the user administers")
    role: UserRoleEnum = Field(default=UserRoleEnum.OWNER, description="Role within the restaurant")
    created_at: datetime | None = Field(None, description="Creation timestamp")

    def to_dynamodb_item(self) -> dict[str, Any]:
        """Convert to DynamoDB item format."""
        item: dict[str, Any] = {
            "user_id": self.user_id,
            "email": self.email,
            "name": self.name,
            "restaurant_id": self.restaurant_id,
            "role": self.role.value,
        }

        if self.created_at is not None:
            item["created_at"] = self.created_at.isoformat()

        return item

    @classmethod
    def from_dynamodb_item(cls, item: dict[str, Any]) -> "UserProfile":
        """Create UserProfile from DynamoDB item."""
        data: dict[str, Any] = {
            "user_id": item["user_id"],
            "email": item["email"],
            "name": item.get("name", ""),
            "restaurant_id": item["restaurant_id"],
            "role": UserRoleEnum(item.get("role", UserRoleEnum.OWNER.value)),
        }

        if "created_at" in item:
            data["created_at"] = datetime.fromisoformat(item["created_at"])

        return cls(**data)

"""DynamoDB repositories for restaurants and user profiles.

Missing records are reported as None or an empty list. Store failures are
logged and re-raised as StoreUnavailableError so callers can tell "no such
restaurant" apart from "could not ask".
"""

import logging
from typing import Any

from boto3.dynamodb.types import TypeSerializer
from botocore.exceptions import ClientError
from mypy_boto3_dynamodb.service_resource import DynamoDBServiceResource, Table

from orderdirect.exceptions import StoreUnavailableError
from orderdirect.models.tenant_models import Restaurant, UserProfile
from orderdirect.repositories.dynamodb_utils import query_all

logger = logging.getLogger(__name__)


class RestaurantRepository:
    """Repository for restaurant records.

    Restaurants live in one table keyed by id with a global secondary index on
    subdomain. A second table holds one claim record per subdomain; the claim
    is written in the same transaction as the restaurant, which is what
    actually keeps subdomains unique.
    """

    def __init__(
        self,
        dynamodb_resource: DynamoDBServiceResource,
        table_name: str,
        subdomains_table_name: str,
        users_table_name: str,
    ) -> None:
        """Initialize repository.

        Args:
            dynamodb_resource: Boto3 DynamoDB resource
            table_name: Name of the restaurants table
            subdomains_table_name: Name of the subdomain claims table
            users_table_name: Name of the user profiles table
        """
        self.dynamodb = dynamodb_resource
        self.table_name = table_name
        self.subdomains_table_name = subdomains_table_name
        self.users_table_name = users_table_name
        self.table: Table = dynamodb_resource.Table(table_name)
        self._serializer = TypeSerializer()

    def get_restaurant(self, restaurant_id: str) -> Restaurant | None:
        """Retrieve a restaurant by id.

        Args:
            restaurant_id: Restaurant identifier

        Returns:
            Restaurant if found, None otherwise

        Raises:
            StoreUnavailableError: If DynamoDB fails
        """
        try:
            response = self.table.get_item(Key={"id": restaurant_id})
        except ClientError as e:
            logger.error(f"Failed to get restaurant {restaurant_id}: {e}")
            raise StoreUnavailableError("Failed to fetch restaurant data") from e

        if "Item" not in response:
            return None

        return Restaurant.from_dynamodb_item(response["Item"])

    def list_by_subdomain(self, subdomain: str) -> list[Restaurant]:
        """List restaurants whose subdomain equals the given value.

        Uses the subdomain-index GSI. The result has at most one entry as long
        as subdomains were claimed through create_restaurant.

        Args:
            subdomain: Lowercase subdomain

        Returns:
            list: Matching restaurants in index order (empty list if none)

        Raises:
            StoreUnavailableError: If DynamoDB fails
        """
        try:
            items = query_all(
                self.table,
                IndexName="subdomain-index",
                KeyConditionExpression="subdomain = :sub",
                ExpressionAttributeValues={":sub": subdomain},
            )
        except ClientError as e:
            logger.error(f"Failed to query restaurants by subdomain {subdomain}: {e}")
            raise StoreUnavailableError("Failed to fetch restaurant data") from e

        return [Restaurant.from_dynamodb_item(item) for item in items]

    def create_restaurant(self, restaurant: Restaurant, owner_profile: UserProfile) -> bool:
        """Write a restaurant, its subdomain claim and its owner profile atomically.

        Args:
            restaurant: Restaurant to create
            owner_profile: Profile linking the owner identity to the restaurant

        Returns:
            bool: True if written, False if the id or subdomain was already taken

        Raises:
            StoreUnavailableError: If DynamoDB fails for any other reason
        """
        claim = {"subdomain": restaurant.subdomain, "restaurant_id": restaurant.id}
        transact_items: list[Any] = [
            {
                "Put": {
                    "TableName": self.subdomains_table_name,
                    "Item": self._serialize(claim),
                    "ConditionExpression": "attribute_not_exists(subdomain)",
                }
            },
            {
                "Put": {
                    "TableName": self.table_name,
                    "Item": self._serialize(restaurant.to_dynamodb_item()),
                    "ConditionExpression": "attribute_not_exists(id)",
                }
            },
            {
                "Put": {
                    "TableName": self.users_table_name,
                    "Item": self._serialize(owner_profile.to_dynamodb_item()),
                }
            },
        ]

        try:
            self.dynamodb.meta.client.transact_write_items(TransactItems=transact_items)
            return True

        except ClientError as e:
            if e.response.get("Error", {}).get("Code") == "TransactionCanceledException":
                logger.warning(
                    f"Restaurant creation rejected, subdomain {restaurant.subdomain} or "
                    f"id {restaurant.id} already exists"
                )
                return False
            logger.error(f"Failed to create restaurant {restaurant.id}: {e}")
            raise StoreUnavailableError("Failed to create restaurant") from e

    def _serialize(self, item: dict[str, Any]) -> dict[str, Any]:
        return {key: self._serializer.serialize(value) for key, value in item.items()}


class UserProfileRepository:
    """Repository for user profile records keyed by user_id."""

    def __init__(self, dynamodb_resource: DynamoDBServiceResource, table_name: str) -> None:
        """Initialize repository.

        Args:
            dynamodb_resource: Boto3 DynamoDB resource
            table_name: Name of the user profiles table
        """
        self.dynamodb = dynamodb_resource
        self.table_name = table_name
        self.table: Table = dynamodb_resource.Table(table_name)

    def get_profile(self, user_id: str) -> UserProfile | None:
        """Retrieve the profile for an identity.

        Raises:
            StoreUnavailableError: If DynamoDB fails
        """
        try:
            response = self.table.get_item(Key={"user_id": user_id})
        except ClientError as e:
            logger.error(f"Failed to get user profile {user_id}: {e}")
            raise StoreUnavailableError("Failed to fetch user profile") from e

        if "Item" not in response:
            return None

        return UserProfile.from_dynamodb_item(response["Item"])

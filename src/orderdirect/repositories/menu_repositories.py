"""DynamoDB repositories for menu items and categories.

Every operation is scoped to a restaurant. Reads of a record that belongs to
another restaurant behave as if the record did not exist, and writes carry a
ConditionExpression on restaurant_id so a foreign record is never touched.
"""

import logging
from typing import Any

from botocore.exceptions import ClientError
from mypy_boto3_dynamodb.service_resource import DynamoDBServiceResource, Table

from orderdirect.exceptions import StoreUnavailableError
from orderdirect.models.menu_models import Category, MenuItem
from orderdirect.repositories.dynamodb_utils import (
    build_update_expression,
    is_conditional_check_failure,
    query_all,
)

logger = logging.getLogger(__name__)


class MenuItemRepository:
    """Repository for menu item CRUD operations.

    Manages menu item records with id as partition key and a global secondary
    index on restaurant_id.
    """

    def __init__(self, dynamodb_resource: DynamoDBServiceResource, table_name: str) -> None:
        """Initialize repository.

        Args:
            dynamodb_resource: Boto3 DynamoDB resource
            table_name: Name of the menu items table
        """
        self.dynamodb = dynamodb_resource
        self.table_name = table_name
        self.table: Table = dynamodb_resource.Table(table_name)

    def save_item(self, item: MenuItem) -> None:
        """Create or replace a menu item.

        Raises:
            StoreUnavailableError: If DynamoDB fails
        """
        try:
            self.table.put_item(Item=item.to_dynamodb_item())
        except ClientError as e:
            logger.error(f"Failed to save menu item {item.id}: {e}")
            raise StoreUnavailableError("Failed to save menu item") from e

    def get_item(self, restaurant_id: str, item_id: str) -> MenuItem | None:
        """Retrieve a menu item belonging to a restaurant.

        Returns:
            MenuItem if found and owned by the restaurant, None otherwise

        Raises:
            StoreUnavailableError: If DynamoDB fails
        """
        try:
            response = self.table.get_item(Key={"id": item_id})
        except ClientError as e:
            logger.error(f"Failed to get menu item {item_id}: {e}")
            raise StoreUnavailableError("Failed to fetch menu item") from e

        item = response.get("Item")
        if item is None or item.get("restaurant_id") != restaurant_id:
            return None

        return MenuItem.from_dynamodb_item(item)

    def list_items_for_restaurant(
        self, restaurant_id: str, available_only: bool = False
    ) -> list[MenuItem]:
        """List menu items for a restaurant.

        Args:
            restaurant_id: Restaurant identifier
            available_only: Only return items flagged as available (customer view)

        Returns:
            list: Menu items (empty list if none found)

        Raises:
            StoreUnavailableError: If DynamoDB fails
        """
        kwargs: dict[str, Any] = {
            "IndexName": "restaurant_id-index",
            "KeyConditionExpression": "restaurant_id = :rid",
            "ExpressionAttributeValues": {":rid": restaurant_id},
        }
        if available_only:
            kwargs["FilterExpression"] = "available = :available"
            kwargs["ExpressionAttributeValues"][":available"] = True

        try:
            items = query_all(self.table, **kwargs)
        except ClientError as e:
            logger.error(f"Failed to list menu items for restaurant {restaurant_id}: {e}")
            raise StoreUnavailableError("Failed to fetch menu items") from e

        return [MenuItem.from_dynamodb_item(item) for item in items]

    def list_items_in_category(self, restaurant_id: str, category: str) -> list[MenuItem]:
        """List a restaurant's menu items whose category name equals the given one.

        Raises:
            StoreUnavailableError: If DynamoDB fails
        """
        try:
            items = query_all(
                self.table,
                IndexName="restaurant_id-index",
                KeyConditionExpression="restaurant_id = :rid",
                FilterExpression="category = :category",
                ExpressionAttributeValues={":rid": restaurant_id, ":category": category},
            )
        except ClientError as e:
            logger.error(f"Failed to list menu items in category {category}: {e}")
            raise StoreUnavailableError("Failed to fetch menu items") from e

        return [MenuItem.from_dynamodb_item(item) for item in items]

    def update_item(self, restaurant_id: str, item_id: str, updates: dict[str, Any]) -> bool:
        """Apply a partial update to a menu item.

        Args:
            restaurant_id: Restaurant that must own the item
            item_id: Menu item identifier
            updates: Attribute values to set, already in DynamoDB form

        Returns:
            bool: True if updated, False if no such item exists for the restaurant

        Raises:
            StoreUnavailableError: If DynamoDB fails
        """
        expression, names, values = build_update_expression(updates)
        names["#rid"] = "restaurant_id"
        values[":rid"] = restaurant_id

        try:
            self.table.update_item(
                Key={"id": item_id},
                UpdateExpression=expression,
                ConditionExpression="#rid = :rid",
                ExpressionAttributeNames=names,
                ExpressionAttributeValues=values,
            )
            return True

        except ClientError as e:
            if is_conditional_check_failure(e):
                return False
            logger.error(f"Failed to update menu item {item_id}: {e}")
            raise StoreUnavailableError("Failed to update menu item") from e

    def rename_item_category(
        self, restaurant_id: str, item_id: str, old_name: str, new_name: str, updated_at: str
    ) -> bool:
        """Move one item from old_name to new_name if it is still in old_name.

        The condition on the current category makes the rewrite safe to repeat.

        Returns:
            bool: True if the item was rewritten, False if it no longer carried old_name

        Raises:
            StoreUnavailableError: If DynamoDB fails
        """
        try:
            self.table.update_item(
                Key={"id": item_id},
                UpdateExpression="SET category = :new, updated_at = :updated_at",
                ConditionExpression="restaurant_id = :rid AND category = :old",
                ExpressionAttributeValues={
                    ":rid": restaurant_id,
                    ":old": old_name,
                    ":new": new_name,
                    ":updated_at": updated_at,
                },
            )
            return True

        except ClientError as e:
            if is_conditional_check_failure(e):
                return False
            logger.error(f"Failed to rename category on menu item {item_id}: {e}")
            raise StoreUnavailableError("Failed to update menu item") from e

    def delete_item(self, restaurant_id: str, item_id: str) -> bool:
        """Delete a menu item.

        Returns:
            bool: True if deleted, False if no such item exists for the restaurant

        Raises:
            StoreUnavailableError: If DynamoDB fails
        """
        try:
            self.table.delete_item(
                Key={"id": item_id},
                ConditionExpression="restaurant_id = :rid",
                ExpressionAttributeValues={":rid": restaurant_id},
            )
            return True

        except ClientError as e:
            if is_conditional_check_failure(e):
                return False
            logger.error(f"Failed to delete menu item {item_id}: {e}")
            raise StoreUnavailableError("Failed to delete menu item") from e


class CategoryRepository:
    """Repository for category CRUD operations.

    Manages category records with id as partition key and a global secondary
    index on restaurant_id.
    """

    def __init__(self, dynamodb_resource: DynamoDBServiceResource, table_name: str) -> None:
        """Initialize repository.

        Args:
            dynamodb_resource: Boto3 DynamoDB resource
            table_name: Name of the categories table
        """
        self.dynamodb = dynamodb_resource
        self.table_name = table_name
        self.table: Table = dynamodb_resource.Table(table_name)

    def save_category(self, category: Category) -> None:
        """Create or replace a category."""
        try:
            self.table.put_item(Item=category.to_dynamodb_item())
        except ClientError as e:
            logger.error(f"Failed to save category {category.id}: {e}")
            raise StoreUnavailableError("Failed to save category") from e

    def get_category(self, restaurant_id: str, category_id: str) -> Category | None:
        """Retrieve a category belonging to a restaurant."""
        try:
            response = self.table.get_item(Key={"id": category_id})
        except ClientError as e:
            logger.error(f"Failed to get category {category_id}: {e}")
            raise StoreUnavailableError("Failed to fetch category") from e

        item = response.get("Item")
        if item is None or item.get("restaurant_id") != restaurant_id:
            return None

        return Category.from_dynamodb_item(item)

    def list_categories_for_restaurant(self, restaurant_id: str) -> list[Category]:
        """List a restaurant's categories sorted by display order."""
        try:
            items = query_all(
                self.table,
                IndexName="restaurant_id-index",
                KeyConditionExpression="restaurant_id = :rid",
                ExpressionAttributeValues={":rid": restaurant_id},
            )
        except ClientError as e:
            logger.error(f"Failed to list categories for restaurant {restaurant_id}: {e}")
            raise StoreUnavailableError("Failed to fetch categories") from e

        categories = [Category.from_dynamodb_item(item) for item in items]
        return sorted(categories, key=lambda c: c.display_order)

    def update_category(self, restaurant_id: str, category_id: str, updates: dict[str, Any]) -> bool:
        """Apply a partial update to a category.

        Returns:
            bool: True if updated, False if no such category exists for the restaurant
        """
        expression, names, values = build_update_expression(updates)
        names["#rid"] = "restaurant_id"
        values[":rid"] = restaurant_id

        try:
            self.table.update_item(
                Key={"id": category_id},
                UpdateExpression=expression,
                ConditionExpression="#rid = :rid",
                ExpressionAttributeNames=names,
                ExpressionAttributeValues=values,
            )
            return True

        except ClientError as e:
            if is_conditional_check_failure(e):
                return False
            logger.error(f"Failed to update category {category_id}: {e}")
            raise StoreUnavailableError("Failed to update category") from e

    def delete_category(self, restaurant_id: str, category_id: str) -> bool:
        """Delete a category.

        Returns:
            bool: True if deleted, False if no such category exists for the restaurant
        """
        try:
            self.table.delete_item(
                Key={"id": category_id},
                ConditionExpression="restaurant_id = :rid",
                ExpressionAttributeValues={":rid": restaurant_id},
            )
            return True

        except ClientError as e:
            if is_conditional_check_failure(e):
                return False
            logger.error(f"Failed to delete category {category_id}: {e}")
            raise StoreUnavailableError("Failed to delete category") from e

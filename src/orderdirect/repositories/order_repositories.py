"""DynamoDB repository for orders.

Orders are append-only apart from the status attribute, which may only move
from open to closed.
"""

import logging
from datetime import datetime

from botocore.exceptions import ClientError
from mypy_boto3_dynamodb.service_resource import DynamoDBServiceResource, Table

from orderdirect.exceptions import StoreUnavailableError
from orderdirect.models.order_models import Order, OrderStatusEnum
from orderdirect.repositories.dynamodb_utils import is_conditional_check_failure, query_all

logger = logging.getLogger(__name__)


class OrderRepository:
    """Repository for order records.

    Manages orders with id as partition key and a global secondary index on
    restaurant_id.
    """

    def __init__(self, dynamodb_resource: DynamoDBServiceResource, table_name: str) -> None:
        """Initialize repository.

        Args:
            dynamodb_resource: Boto3 DynamoDB resource
            table_name: Name of the orders table
        """
        self.dynamodb = dynamodb_resource
        self.table_name = table_name
        self.table: Table = dynamodb_resource.Table(table_name)

    def create_order(self, order: Order) -> None:
        """Write a new order. Existing orders are never overwritten.

        Raises:
            StoreUnavailableError: If DynamoDB fails or the id already exists
        """
        try:
            self.table.put_item(
                Item=order.to_dynamodb_item(),
                ConditionExpression="attribute_not_exists(id)",
            )
        except ClientError as e:
            logger.error(f"Failed to create order {order.id}: {e}")
            raise StoreUnavailableError("Failed to create order") from e

    def get_order(self, order_id: str) -> Order | None:
        """Retrieve an order by id.

        Returns:
            Order if found, None otherwise

        Raises:
            StoreUnavailableError: If DynamoDB fails
        """
        try:
            response = self.table.get_item(Key={"id": order_id})
        except ClientError as e:
            logger.error(f"Failed to get order {order_id}: {e}")
            raise StoreUnavailableError("Failed to fetch order") from e

        if "Item" not in response:
            return None

        return Order.from_dynamodb_item(response["Item"])

    def list_orders_for_restaurant(self, restaurant_id: str) -> list[Order]:
        """List a restaurant's orders, newest first.

        Raises:
            StoreUnavailableError: If DynamoDB fails
        """
        try:
            items = query_all(
                self.table,
                IndexName="restaurant_id-index",
                KeyConditionExpression="restaurant_id = :rid",
                ExpressionAttributeValues={":rid": restaurant_id},
            )
        except ClientError as e:
            logger.error(f"Failed to list orders for restaurant {restaurant_id}: {e}")
            raise StoreUnavailableError("Failed to fetch orders") from e

        orders = [Order.from_dynamodb_item(item) for item in items]
        return sorted(orders, key=lambda o: o.created_at, reverse=True)

    def close_order(self, restaurant_id: str, order_id: str, closed_at: datetime) -> bool:
        """Move an open order to closed.

        Args:
            restaurant_id: Restaurant that must own the order
            order_id: Order identifier
            closed_at: Timestamp recorded as updated_at

        Returns:
            bool: True if the order was closed, False if it is missing, owned by
            another restaurant or already closed

        Raises:
            StoreUnavailableError: If DynamoDB fails
        """
        try:
            self.table.update_item(
                Key={"id": order_id},
                UpdateExpression="SET #status = :closed, updated_at = :updated_at",
                ConditionExpression="restaurant_id = :rid AND #status = :open",
                ExpressionAttributeNames={"#status": "status"},
                ExpressionAttributeValues={
                    ":rid": restaurant_id,
                    ":open": OrderStatusEnum.OPEN.value,
                    ":closed": OrderStatusEnum.CLOSED.value,
                    ":updated_at": closed_at.isoformat(),
                },
            )
            return True

        except ClientError as e:
            if is_conditional_check_failure(e):
                return False
            logger.error(f"Failed to close order {order_id}: {e}")
            raise StoreUnavailableError("Failed to update order status") from e

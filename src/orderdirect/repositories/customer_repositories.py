"""DynamoDB repository for customer profiles."""

import logging
from typing import Any

from botocore.exceptions import ClientError
from mypy_boto3_dynamodb.service_resource import DynamoDBServiceResource, Table

from orderdirect.exceptions import StoreUnavailableError
from orderdirect.models.customer_models import CustomerProfile
from orderdirect.repositories.dynamodb_utils import (
    build_update_expression,
    is_conditional_check_failure,
)

logger = logging.getLogger(__name__)


class CustomerProfileRepository:
    """Repository for customer profile records keyed by id.

    Saved addresses live on the profile record, so address changes are
    written as a replacement of the whole list.
    """

    def __init__(self, dynamodb_resource: DynamoDBServiceResource, table_name: str) -> None:
        """Initialize repository.

        Args:
            dynamodb_resource: Boto3 DynamoDB resource
            table_name: Name of the customer profiles table
        """
        self.dynamodb = dynamodb_resource
        self.table_name = table_name
        self.table: Table = dynamodb_resource.Table(table_name)

    def create_profile(self, profile: CustomerProfile) -> bool:
        """Write a new customer profile.

        Returns:
            bool: True if written, False if a profile with this id already exists

        Raises:
            StoreUnavailableError: If DynamoDB fails
        """
        try:
            self.table.put_item(
                Item=profile.to_dynamodb_item(),
                ConditionExpression="attribute_not_exists(id)",
            )
            return True

        except ClientError as e:
            if is_conditional_check_failure(e):
                logger.warning(f"Customer profile {profile.id} already exists")
                return False
            logger.error(f"Failed to create customer profile {profile.id}: {e}")
            raise StoreUnavailableError("Failed to create customer profile") from e

    def get_profile(self, customer_id: str) -> CustomerProfile | None:
        """Retrieve a customer profile.

        Raises:
            StoreUnavailableError: If DynamoDB fails
        """
        try:
            response = self.table.get_item(Key={"id": customer_id})
        except ClientError as e:
            logger.error(f"Failed to get customer profile {customer_id}: {e}")
            raise StoreUnavailableError("Failed to fetch customer profile") from e

        if "Item" not in response:
            return None

        return CustomerProfile.from_dynamodb_item(response["Item"])

    def update_profile(self, customer_id: str, updates: dict[str, Any]) -> bool:
        """Apply a partial update to an existing customer profile.

        Args:
            customer_id: Customer identifier
            updates: Attribute values to set, already in DynamoDB form

        Returns:
            bool: True if updated, False if there is no such profile

        Raises:
            StoreUnavailableError: If DynamoDB fails
        """
        expression, names, values = build_update_expression(updates)
        names["#id"] = "id"

        try:
            self.table.update_item(
                Key={"id": customer_id},
                UpdateExpression=expression,
                ConditionExpression="attribute_exists(#id)",
                ExpressionAttributeNames=names,
                ExpressionAttributeValues=values,
            )
            return True

        except ClientError as e:
            if is_conditional_check_failure(e):
                return False
            logger.error(f"Failed to update customer profile {customer_id}: {e}")
            raise StoreUnavailableError("Failed to update customer profile") from e

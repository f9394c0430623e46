"""Small helpers shared by the DynamoDB repositories."""

from typing import Any

from botocore.exceptions import ClientError
from mypy_boto3_dynamodb.service_resource import Table


def is_conditional_check_failure(error: ClientError) -> bool:
    """Whether a ClientError was caused by a failed ConditionExpression."""
    return error.response.get("Error", {}).get("Code") == "ConditionalCheckFailedException"


def query_all(table: Table, **kwargs: Any) -> list[dict[str, Any]]:
    """Run a query and follow LastEvaluatedKey until every page is read."""
    items: list[dict[str, Any]] = []
    while True:
        response = table.query(**kwargs)
        items.extend(response.get("Items", []))
        last_key = response.get("LastEvaluatedKey")
        if not last_key:
            return items
        kwargs["ExclusiveStartKey"] = last_key


def build_update_expression(updates: dict[str, Any]) -> tuple[str, dict[str, str], dict[str, Any]]:
    """Build a SET UpdateExpression for the given attribute values.

    Attribute names are always aliased so reserved words such as "name" and
    "status" can be updated.

    Returns:
        Tuple of (UpdateExpression, ExpressionAttributeNames, ExpressionAttributeValues)
    """
    names: dict[str, str] = {}
    values: dict[str, Any] = {}
    clauses: list[str] = []
    for index, (attribute, value) in enumerate(updates.items()):
        names[f"#a{index}"] = attribute
        values[f":v{index}"] = value
        clauses.append(f"#a{index} = :v{index}")
    return "SET " + ", ".join(clauses), names, values

"""Wiring of repositories, services and the API application from the environment.

Shared by the uvicorn entry point (main.py) and the Lambda entry point
(lambda_dependencies.py).
"""

import logging
import os
from dataclasses import dataclass
from decimal import Decimal
from typing import Any

import boto3
from fastapi import FastAPI

from orderdirect.auth.identity_provider import (
    CognitoIdentityProvider,
    IdentityProvider,
    InMemoryIdentityProvider,
)
from orderdirect.cart.persistence import DynamoDBKeyValueStore, KeyValueStore
from orderdirect.cart.pricing import DELIVERY_FEE
from orderdirect.handlers.api_handler import create_app
from orderdirect.repositories.customer_repositories import CustomerProfileRepository
from orderdirect.repositories.menu_repositories import CategoryRepository, MenuItemRepository
from orderdirect.repositories.order_repositories import OrderRepository
from orderdirect.repositories.tenant_repositories import (
    RestaurantRepository,
    UserProfileRepository,
)
from orderdirect.services.customer_service import CustomerService
from orderdirect.services.menu_service import MenuService
from orderdirect.services.order_service import OrderService
from orderdirect.services.signup_service import SignupService
from orderdirect.tenancy.resolver import TenantResolver
from orderdirect.tenancy.session_guard import ScopedSessionGuard
from orderdirect.tenancy.subdomains import reserved_subdomains_from_env

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TableNames:
    """DynamoDB table names, one per record type."""

    restaurants: str
    subdomains: str
    users: str
    menu_items: str
    categories: str
    orders: str
    cart_sessions: str
    customers: str

    @classmethod
    def from_env(cls) -> "TableNames":
        return cls(
            restaurants=os.getenv("DYNAMODB_RESTAURANTS_TABLE", "orderdirect-restaurants"),
            subdomains=os.getenv("DYNAMODB_SUBDOMAINS_TABLE", "orderdirect-subdomains"),
            users=os.getenv("DYNAMODB_USERS_TABLE", "orderdirect-users"),
            menu_items=os.getenv("DYNAMODB_MENU_ITEMS_TABLE", "orderdirect-menu-items"),
            categories=os.getenv("DYNAMODB_CATEGORIES_TABLE", "orderdirect-categories"),
            orders=os.getenv("DYNAMODB_ORDERS_TABLE", "orderdirect-orders"),
            cart_sessions=os.getenv("DYNAMODB_CART_SESSIONS_TABLE", "orderdirect-cart-sessions"),
            customers=os.getenv("DYNAMODB_CUSTOMERS_TABLE", "orderdirect-customers"),
        )


def create_dynamodb_resource() -> Any:
    """Create a DynamoDB resource for the configured environment.

    DYNAMODB_ENDPOINT points at a local DynamoDB; otherwise boto3's default
    credential chain is used.
    """
    endpoint_url = os.getenv("DYNAMODB_ENDPOINT")
    region = os.getenv("AWS_REGION", "us-east-1")

    if endpoint_url:
        logger.info(f"Using local DynamoDB at {endpoint_url}")
        return boto3.resource(
            "dynamodb",
            endpoint_url=endpoint_url,
            region_name=region,
            aws_access_key_id=os.getenv("AWS_ACCESS_KEY_ID"),
            aws_secret_access_key=os.getenv("AWS_SECRET_ACCESS_KEY"),
        )

    logger.info(f"Using AWS DynamoDB in region {region}")
    return boto3.resource("dynamodb", region_name=region)


def create_identity_provider() -> IdentityProvider:
    """Create the identity provider configured by COGNITO_* variables.

    Without a user pool the in-memory provider is used, which forgets every
    account on restart.
    """
    user_pool_id = os.getenv("COGNITO_USER_POOL_ID")
    client_id = os.getenv("COGNITO_CLIENT_ID")

    if user_pool_id and client_id:
        logger.info(f"Using Cognito user pool {user_pool_id}")
        return CognitoIdentityProvider(
            user_pool_id=user_pool_id,
            client_id=client_id,
            region=os.getenv("AWS_REGION", "us-east-1"),
        )

    logger.warning("COGNITO_USER_POOL_ID/COGNITO_CLIENT_ID not set - using in-memory identity provider")
    return InMemoryIdentityProvider()


def delivery_fee_from_env() -> Decimal:
    return Decimal(os.getenv("DELIVERY_FEE", str(DELIVERY_FEE)))


def build_app(
    dynamodb_resource: Any,
    identity_provider: IdentityProvider,
    tables: TableNames | None = None,
) -> FastAPI:
    """Build repositories and services and hand them to the API factory.

    Args:
        dynamodb_resource: Boto3 DynamoDB resource
        identity_provider: Provider for owner and customer accounts
        tables: Table names, read from the environment when omitted

    Returns:
        Configured FastAPI application
    """
    tables = tables or TableNames.from_env()

    restaurant_repository = RestaurantRepository(
        dynamodb_resource=dynamodb_resource,
        table_name=tables.restaurants,
        subdomains_table_name=tables.subdomains,
        users_table_name=tables.users,
    )
    profile_repository = UserProfileRepository(
        dynamodb_resource=dynamodb_resource, table_name=tables.users
    )
    item_repository = MenuItemRepository(
        dynamodb_resource=dynamodb_resource, table_name=tables.menu_items
    )
    category_repository = CategoryRepository(
        dynamodb_resource=dynamodb_resource, table_name=tables.categories
    )
    order_repository = OrderRepository(
        dynamodb_resource=dynamodb_resource, table_name=tables.orders
    )
    customer_repository = CustomerProfileRepository(
        dynamodb_resource=dynamodb_resource, table_name=tables.customers
    )

    logger.info(f"Repositories configured: {tables}")

    def cart_store_factory(session_id: str) -> KeyValueStore:
        return DynamoDBKeyValueStore(dynamodb_resource, tables.cart_sessions, session_id)

    return create_app(
        signup_service=SignupService(
            restaurant_repository=restaurant_repository,
            profile_repository=profile_repository,
            identity_provider=identity_provider,
            reserved_subdomains=reserved_subdomains_from_env(),
        ),
        menu_service=MenuService(item_repository, category_repository),
        order_service=OrderService(order_repository),
        customer_service=CustomerService(identity_provider, customer_repository),
        tenant_resolver=TenantResolver(restaurant_repository),
        session_guard=ScopedSessionGuard(identity_provider, profile_repository),
        cart_store_factory=cart_store_factory,
        delivery_fee=delivery_fee_from_env(),
    )

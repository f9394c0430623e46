"""Cached dependencies for the Lambda handler.

Everything is created once per Lambda container and reused across warm
invocations.
"""

import logging
import os
from typing import Any

from fastapi import FastAPI

from orderdirect.auth.identity_provider import IdentityProvider
from orderdirect.dependencies import (
    build_app,
    create_dynamodb_resource,
    create_identity_provider,
)
from orderdirect.observability import configure_logging, setup_observability

logger = logging.getLogger(__name__)

_dynamodb_resource: Any | None = None
_identity_provider: IdentityProvider | None = None
_fastapi_app: FastAPI | None = None


def get_dynamodb_resource() -> Any:
    """Create or retrieve the cached DynamoDB resource."""
    global _dynamodb_resource

    if _dynamodb_resource is None:
        _dynamodb_resource = create_dynamodb_resource()

    return _dynamodb_resource


def get_identity_provider() -> IdentityProvider:
    """Create or retrieve the cached identity provider."""
    global _identity_provider

    if _identity_provider is None:
        _identity_provider = create_identity_provider()

    return _identity_provider


def get_fastapi_app() -> FastAPI:
    """Create or retrieve the cached FastAPI application.

    Returns:
        Configured FastAPI application instance
    """
    global _fastapi_app

    if _fastapi_app is not None:
        return _fastapi_app

    _fastapi_app = build_app(
        dynamodb_resource=get_dynamodb_resource(),
        identity_provider=get_identity_provider(),
    )
    setup_observability(_fastapi_app)

    logger.info("FastAPI application initialized")
    return _fastapi_app


def initialize_lambda_environment() -> None:
    """Configure logging. Called once during Lambda cold start."""
    configure_logging(os.getenv("LOG_LEVEL", "INFO"))
    logger.info("Lambda environment initialized")

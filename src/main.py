"""Main application entry point for the OrderDirect service.

This module provides the FastAPI application factory and configuration
for running the service locally or in production.
"""

import logging
import os

from fastapi import FastAPI

from orderdirect.dependencies import (
    build_app,
    create_dynamodb_resource,
    create_identity_provider,
)
from orderdirect.observability import configure_logging, setup_observability

logger = logging.getLogger(__name__)


def create_application() -> FastAPI:
    """Create the FastAPI application with all dependencies.

    Configures logging, connects to DynamoDB and the identity provider,
    builds the services and instruments the app.

    Returns:
        Configured FastAPI application instance
    """
    configure_logging(os.getenv("LOG_LEVEL", "INFO"))

    logger.info("Initializing OrderDirect service...")

    app = build_app(
        dynamodb_resource=create_dynamodb_resource(),
        identity_provider=create_identity_provider(),
    )
    setup_observability(app)

    logger.info("OrderDirect service initialized successfully")
    return app


# The real app is only built outside of tests so that importing this module
# during collection does not touch AWS.
if os.getenv("ENVIRONMENT") != "test":  # noqa: SIM108
    app = create_application()
else:
    app = FastAPI()


if __name__ == "__main__":
    import uvicorn

    port = int(os.getenv("PORT", "8000"))
    host = os.getenv("HOST", "0.0.0.0")

    logger.info(f"Starting development server on {host}:{port}")
    logger.info(f"API documentation available at http://{host}:{port}/docs")

    uvicorn.run(
        "main:app",
        host=host,
        port=port,
        reload=True,
        log_level=os.getenv("LOG_LEVEL", "info").lower(),
    )

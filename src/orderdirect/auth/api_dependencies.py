"""FastAPI dependencies for bearer token authentication.

Admin and customer endpoints expect the identity provider's access token
as a bearer token in the Authorization header.
"""

from typing import Annotated

from fastapi import Header, HTTPException


def get_bearer_token(authorization: Annotated[str | None, Header()] = None) -> str:
    """Extract the access token from an `Authorization: Bearer <token>` header.

    Args:
        authorization: Raw Authorization header (injected by FastAPI)

    Returns:
        str: The access token

    Raises:
        HTTPException: 401 if the header is missing or not a bearer token
    """
    if not authorization:
        raise HTTPException(status_code=401, detail="Missing access token")

    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise HTTPException(status_code=401, detail="Invalid authorization header")

    return token.strip()

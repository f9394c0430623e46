"""Identity provider integrations.

The identity provider owns credentials and sessions. This service only asks
it who a principal is; which restaurant that principal may administer comes
from the user profile table.

Providers publish a SessionChange every time a principal signs in or out so
that admin sessions can re-evaluate their authorization (see
orderdirect.tenancy.session_guard).
"""

import logging
import secrets
import uuid
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

import bcrypt
import boto3
from botocore.exceptions import BotoCoreError, ClientError
from pydantic import BaseModel, Field

from orderdirect.exceptions import (
    AuthenticationError,
    IdentityProviderError,
    SignupValidationError,
)

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6


class Principal(BaseModel):
    """An authenticated identity as reported by the provider."""

    user_id: str = Field(..., description="Stable identity id")
    email: str = Field(..., description="Sign-in email")
    access_token: str | None = Field(None, description="Bearer token for this session")


@dataclass(frozen=True)
class SessionChange:
    """A principal signed in (principal set) or out (principal None).

    Attributes:
        user_id: Identity whose session changed
        principal: The signed-in principal, or None after sign-out
    """

    user_id: str
    principal: Principal | None


SessionListener = Callable[[SessionChange], None]


class IdentityProvider(ABC):
    """Abstract base class for identity providers."""

    def __init__(self) -> None:
        self._listeners: list[SessionListener] = []

    @abstractmethod
    def sign_up(self, email: str, password: str, name: str) -> Principal:
        """Create a new identity.

        Raises:
            SignupValidationError: If the provider rejects the email or password
            IdentityProviderError: If the provider fails
        """

    @abstractmethod
    def sign_in(self, email: str, password: str) -> Principal:
        """Exchange credentials for a principal carrying an access token.

        Raises:
            AuthenticationError: If the credentials are rejected
            IdentityProviderError: If the provider fails
        """

    @abstractmethod
    def sign_out(self, access_token: str) -> None:
        """End the session identified by the access token."""

    @abstractmethod
    def get_principal(self, access_token: str) -> Principal | None:
        """Look up the principal for an access token, None if the token is not valid."""

    @abstractmethod
    def delete_user(self, user_id: str) -> None:
        """Remove an identity. Used to undo a signup that could not be completed."""

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        """Register a listener for session changes.

        Returns:
            A function that removes the listener
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self, change: SessionChange) -> None:
        for listener in list(self._listeners):
            listener(change)


class CognitoIdentityProvider(IdentityProvider):
    """Identity provider backed by an Amazon Cognito user pool.

    The app client must allow the USER_PASSWORD_AUTH flow. Users sign in with
    their email address as username.
    """

    def __init__(
        self,
        user_pool_id: str,
        client_id: str,
        region: str = "us-east-1",
        cognito_client: Any = None,
    ) -> None:
        """Initialize the provider.

        Args:
            user_pool_id: Cognito user pool id
            client_id: App client id
            region: AWS region of the pool
            cognito_client: Optional pre-built boto3 cognito-idp client
        """
        super().__init__()
        self.user_pool_id = user_pool_id
        self.client_id = client_id
        self.client = cognito_client or boto3.client("cognito-idp", region_name=region)

    def sign_up(self, email: str, password: str, name: str) -> Principal:
        try:
            response = self.client.sign_up(
                ClientId=self.client_id,
                Username=email,
                Password=password,
                UserAttributes=[
                    {"Name": "email", "Value": email},
                    {"Name": "name", "Value": name},
                ],
            )
            self.client.admin_confirm_sign_up(UserPoolId=self.user_pool_id, Username=email)

        except ClientError as e:
            code = _error_code(e)
            if code == "UsernameExistsException":
                raise SignupValidationError("Email is already registered") from e
            if code == "InvalidPasswordException":
                raise SignupValidationError(
                    f"Password should be at least {MIN_PASSWORD_LENGTH} characters"
                ) from e
            if code == "InvalidParameterException":
                raise SignupValidationError("Invalid email address") from e
            logger.error(f"Cognito sign-up failed: {e}")
            raise IdentityProviderError("Failed to sign up. Please try again.") from e
        except BotoCoreError as e:
            logger.error(f"Cognito sign-up failed: {e}")
            raise IdentityProviderError("Failed to sign up. Please try again.") from e

        return Principal(user_id=response["UserSub"], email=email)

    def sign_in(self, email: str, password: str) -> Principal:
        try:
            response = self.client.initiate_auth(
                ClientId=self.client_id,
                AuthFlow="USER_PASSWORD_AUTH",
                AuthParameters={"USERNAME": email, "PASSWORD": password},
            )
        except ClientError as e:
            code = _error_code(e)
            if code in ("NotAuthorizedException", "UserNotFoundException"):
                raise AuthenticationError("Invalid email or password") from e
            if code == "TooManyRequestsException":
                raise AuthenticationError(
                    "Too many failed login attempts. Please try again later."
                ) from e
            if code == "UserNotConfirmedException":
                raise AuthenticationError("This account has not been confirmed") from e
            logger.error(f"Cognito sign-in failed: {e}")
            raise IdentityProviderError("Failed to login. Please try again.") from e
        except BotoCoreError as e:
            logger.error(f"Cognito sign-in failed: {e}")
            raise IdentityProviderError("Failed to login. Please try again.") from e

        access_token = response["AuthenticationResult"]["AccessToken"]
        principal = self.get_principal(access_token)
        if principal is None:
            raise AuthenticationError("Invalid email or password")

        self._notify(SessionChange(user_id=principal.user_id, principal=principal))
        return principal

    def sign_out(self, access_token: str) -> None:
        principal = self.get_principal(access_token)
        try:
            self.client.global_sign_out(AccessToken=access_token)
        except ClientError as e:
            if _error_code(e) != "NotAuthorizedException":
                logger.error(f"Cognito sign-out failed: {e}")
                raise IdentityProviderError("Failed to logout") from e
        except BotoCoreError as e:
            logger.error(f"Cognito sign-out failed: {e}")
            raise IdentityProviderError("Failed to logout") from e

        if principal is not None:
            self._notify(SessionChange(user_id=principal.user_id, principal=None))

    def get_principal(self, access_token: str) -> Principal | None:
        try:
            response = self.client.get_user(AccessToken=access_token)
        except ClientError as e:
            if _error_code(e) in ("NotAuthorizedException", "UserNotFoundException"):
                return None
            logger.error(f"Cognito user lookup failed: {e}")
            raise IdentityProviderError("Failed to look up session") from e
        except BotoCoreError as e:
            logger.error(f"Cognito user lookup failed: {e}")
            raise IdentityProviderError("Failed to look up session") from e

        attributes = {a["Name"]: a["Value"] for a in response.get("UserAttributes", [])}
        return Principal(
            user_id=attributes.get("sub", response["Username"]),
            email=attributes.get("email", response["Username"]),
            access_token=access_token,
        )

    def delete_user(self, user_id: str) -> None:
        try:
            self.client.admin_delete_user(UserPoolId=self.user_pool_id, Username=user_id)
        except (BotoCoreError, ClientError) as e:
            logger.error(f"Failed to delete Cognito user {user_id}: {e}")
            raise IdentityProviderError("Failed to delete user") from e


class InMemoryIdentityProvider(IdentityProvider):
    """Process-local identity provider for local development and tests.

    Passwords are stored as bcrypt hashes. Nothing survives a restart.
    """

    def __init__(self) -> None:
        super().__init__()
        self._users: dict[str, dict[str, str]] = {}
        self._tokens: dict[str, str] = {}

    def sign_up(self, email: str, password: str, name: str) -> Principal:
        email = email.strip().lower()
        if "@" not in email:
            raise SignupValidationError("Invalid email address")
        if email in self._users:
            raise SignupValidationError("Email is already registered")
        if len(password) < MIN_PASSWORD_LENGTH:
            raise SignupValidationError(
                f"Password should be at least {MIN_PASSWORD_LENGTH} characters"
            )

        self._users[email] = {
            "user_id": uuid.uuid4().hex,
            "name": name,
            "password_hash": _hash_password(password),
        }
        return Principal(user_id=self._users[email]["user_id"], email=email)

    def sign_in(self, email: str, password: str) -> Principal:
        email = email.strip().lower()
        user = self._users.get(email)
        if user is None or not _verify_password(password, user["password_hash"]):
            raise AuthenticationError("Invalid email or password")

        token = secrets.token_urlsafe(32)
        self._tokens[token] = email
        principal = Principal(user_id=user["user_id"], email=email, access_token=token)
        self._notify(SessionChange(user_id=principal.user_id, principal=principal))
        return principal

    def sign_out(self, access_token: str) -> None:
        principal = self.get_principal(access_token)
        self._tokens.pop(access_token, None)
        if principal is not None:
            self._notify(SessionChange(user_id=principal.user_id, principal=None))

    def get_principal(self, access_token: str) -> Principal | None:
        email = self._tokens.get(access_token)
        if email is None or email not in self._users:
            return None
        return Principal(
            user_id=self._users[email]["user_id"], email=email, access_token=access_token
        )

    def delete_user(self, user_id: str) -> None:
        for email, user in list(self._users.items()):
            if user["user_id"] == user_id:
                del self._users[email]
                self._tokens = {t: e for t, e in self._tokens.items() if e != email}


def _error_code(error: ClientError) -> str:
    return str(error.response.get("Error", {}).get("Code", ""))


def _hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def _verify_password(password: str, password_hash: str) -> bool:
    return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))

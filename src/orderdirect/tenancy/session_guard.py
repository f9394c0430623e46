"""Tenant-scoped authorization for the admin surface.

The identity provider decides who a principal is. This module adds one rule
on top: a principal may administer a restaurant only if its profile names
that exact restaurant. There is no role hierarchy and no partial access.
"""

import logging
from enum import Enum

from orderdirect.auth.identity_provider import IdentityProvider, Principal, SessionChange
from orderdirect.exceptions import AuthenticationError, AuthorizationError
from orderdirect.models.tenant_models import Restaurant, UserProfile
from orderdirect.observability.metrics import record_authorization_denied
from orderdirect.repositories.tenant_repositories import UserProfileRepository

logger = logging.getLogger(__name__)

ACCESS_DENIED_MESSAGE = "You do not have access to this restaurant's dashboard"


def is_authorized(principal_restaurant_id: str | None, route_restaurant_id: str | None) -> bool:
    """Whether a principal's restaurant matches the restaurant of the route.

    Fails closed: an empty or missing id on either side is never authorized.
    """
    if not principal_restaurant_id or not route_restaurant_id:
        return False
    return principal_restaurant_id == route_restaurant_id


class ScopedSessionGuard:
    """Per-request authorization of admin API calls."""

    def __init__(
        self, identity_provider: IdentityProvider, profile_repository: UserProfileRepository
    ) -> None:
        """Initialize the guard.

        Args:
            identity_provider: Provider that validates access tokens
            profile_repository: Repository holding each user's restaurant
        """
        self.identity_provider = identity_provider
        self.profile_repository = profile_repository

    async def authorize(self, access_token: str | None, restaurant: Restaurant) -> UserProfile:
        """Check that a bearer token may administer a restaurant.

        Args:
            access_token: Bearer token from the request, if any
            restaurant: Restaurant resolved from the route

        Returns:
            The caller's profile

        Raises:
            AuthenticationError: If the token is missing or not valid
            AuthorizationError: If the caller administers another restaurant
            StoreUnavailableError: If the profile lookup fails
            IdentityProviderError: If the token lookup fails
        """
        if not access_token:
            raise AuthenticationError("Missing access token")

        principal = self.identity_provider.get_principal(access_token)
        if principal is None:
            raise AuthenticationError("Invalid or expired access token")

        profile = self.profile_repository.get_profile(principal.user_id)
        if profile is None or not is_authorized(profile.restaurant_id, restaurant.id):
            logger.warning(
                f"Denied admin access for user {principal.user_id} to restaurant {restaurant.id}"
            )
            record_authorization_denied(restaurant.id)
            raise AuthorizationError(ACCESS_DENIED_MESSAGE)

        return profile


class AdminSessionState(str, Enum):
    """States of an admin session."""

    LOGGED_OUT = "logged_out"
    AUTHORIZED = "authorized"


class AdminSession:
    """Admin login state machine for one restaurant's dashboard.

    LOGGED_OUT -> sign_in accepted and restaurant ids match -> AUTHORIZED
    LOGGED_OUT -> sign_in rejected or restaurant ids differ -> LOGGED_OUT (error set)
    AUTHORIZED -> sign_out, or provider reports sign-out -> LOGGED_OUT

    The principal's restaurant id is read once at sign-in and kept for the
    lifetime of the session. Every session change the provider publishes for
    the signed-in user is re-evaluated against it.
    """

    def __init__(
        self,
        restaurant: Restaurant,
        identity_provider: IdentityProvider,
        profile_repository: UserProfileRepository,
    ) -> None:
        self.restaurant = restaurant
        self.identity_provider = identity_provider
        self.profile_repository = profile_repository
        self.state = AdminSessionState.LOGGED_OUT
        self.principal: Principal | None = None
        self.principal_restaurant_id: str | None = None
        self.error: str | None = None
        self.denied = False
        self._unsubscribe = identity_provider.subscribe(self._on_session_change)

    @property
    def is_authorized(self) -> bool:
        return self.state is AdminSessionState.AUTHORIZED

    async def sign_in(self, email: str, password: str) -> AdminSessionState:
        """Sign in and check the principal against this session's restaurant.

        Rejected credentials and restaurant mismatches leave the session
        logged out with `error` set; `denied` tells the two apart. Provider
        and store failures propagate.

        Returns:
            The resulting state
        """
        self.error = None
        self.denied = False

        try:
            principal = self.identity_provider.sign_in(email, password)
        except AuthenticationError as e:
            self.error = str(e)
            return self.state

        profile = self.profile_repository.get_profile(principal.user_id)
        restaurant_id = profile.restaurant_id if profile else None

        if not is_authorized(restaurant_id, self.restaurant.id):
            self.error = "User profile not found" if profile is None else ACCESS_DENIED_MESSAGE
            self.denied = True
            logger.warning(
                f"Admin sign-in for user {principal.user_id} rejected for restaurant "
                f"{self.restaurant.id}"
            )
            record_authorization_denied(self.restaurant.id)
            if principal.access_token:
                self.identity_provider.sign_out(principal.access_token)
            return self.state

        self.principal = principal
        self.principal_restaurant_id = restaurant_id
        self.state = AdminSessionState.AUTHORIZED
        logger.info(f"User {principal.user_id} signed in to restaurant {self.restaurant.id}")
        return self.state

    async def sign_out(self) -> AdminSessionState:
        """Sign the current principal out of the provider and this session."""
        if self.principal is not None and self.principal.access_token:
            self.identity_provider.sign_out(self.principal.access_token)
        self._reset()
        return self.state

    def close(self) -> None:
        """Stop listening to provider session changes."""
        self._unsubscribe()

    def _on_session_change(self, change: SessionChange) -> None:
        if self.principal is None or change.user_id != self.principal.user_id:
            return

        if change.principal is None:
            logger.info(f"Provider ended session for user {change.user_id}")
            self._reset()
            return

        self.principal = change.principal
        if is_authorized(self.principal_restaurant_id, self.restaurant.id):
            self.state = AdminSessionState.AUTHORIZED
        else:
            self._reset()

    def _reset(self) -> None:
        self.state = AdminSessionState.LOGGED_OUT
        self.principal = None
        self.principal_restaurant_id = None

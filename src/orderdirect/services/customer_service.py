"""Customer accounts, profiles and saved delivery addresses.

Customer identities live in the same identity provider as restaurant owners.
What makes an identity a customer is its customer profile record; an owner
identity without one is refused by the customer endpoints.
"""

import logging
import uuid
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

from orderdirect.auth.identity_provider import IdentityProvider, Principal, SessionChange
from orderdirect.exceptions import (
    AuthenticationError,
    AuthorizationError,
    IdentityProviderError,
    SignupValidationError,
    StoreUnavailableError,
)
from orderdirect.models.customer_models import CustomerProfile, SavedAddress
from orderdirect.observability.decorators import traced
from orderdirect.observability.metrics import record_customer_signup
from orderdirect.repositories.customer_repositories import CustomerProfileRepository

logger = logging.getLogger(__name__)

CustomerListener = Callable[[CustomerProfile | None], None]

PROFILE_FIELDS = ("name", "phone")


@dataclass
class CustomerLogin:
    """A signed-in customer and the session token to use."""

    principal: Principal
    customer: CustomerProfile


class CustomerService:
    """Service for customer sign-up, sign-in and profile management.

    Saved addresses are edited read-modify-write on the profile record. At
    most one address is the default: the first address saved always is, and
    marking another one default clears the flag everywhere else.
    """

    def __init__(
        self,
        identity_provider: IdentityProvider,
        customer_repository: CustomerProfileRepository,
    ) -> None:
        """Initialize the CustomerService.

        Args:
            identity_provider: Provider that owns credentials
            customer_repository: Repository for customer profiles
        """
        self.identity_provider = identity_provider
        self.customer_repository = customer_repository

    @traced("signup_customer")
    async def sign_up(self, email: str, password: str, name: str, phone: str) -> CustomerProfile:
        """Create a customer identity and its profile.

        If the profile cannot be written the new identity is deleted again.

        Raises:
            SignupValidationError: If the email is taken or the password or
                email is rejected
            IdentityProviderError: If the identity provider fails
            StoreUnavailableError: If the profile write fails
        """
        principal = self.identity_provider.sign_up(email, password, name)
        now = datetime.now(UTC)
        profile = CustomerProfile(
            id=principal.user_id,
            email=principal.email,
            name=name,
            phone=phone,
            saved_addresses=[],
            created_at=now,
            updated_at=now,
        )

        try:
            created = self.customer_repository.create_profile(profile)
        except StoreUnavailableError:
            self._discard_identity(principal.user_id)
            raise

        if not created:
            self._discard_identity(principal.user_id)
            raise SignupValidationError("Email is already registered")

        logger.info(f"Customer {profile.id} signed up")
        record_customer_signup()
        return profile

    async def sign_in(self, email: str, password: str) -> CustomerLogin:
        """Sign a customer in.

        Raises:
            AuthenticationError: If the credentials are rejected or the identity
                has no customer profile
        """
        principal = self.identity_provider.sign_in(email, password)

        profile = self.customer_repository.get_profile(principal.user_id)
        if profile is None:
            if principal.access_token:
                self.identity_provider.sign_out(principal.access_token)
            raise AuthenticationError("Customer profile not found")

        return CustomerLogin(principal=principal, customer=profile)

    async def sign_out(self, access_token: str) -> None:
        self.identity_provider.sign_out(access_token)

    async def get_current_customer(self, access_token: str) -> CustomerProfile | None:
        """The customer signed in with this token, None if there is none."""
        principal = self.identity_provider.get_principal(access_token)
        if principal is None:
            return None
        return self.customer_repository.get_profile(principal.user_id)

    async def authenticate(self, access_token: str) -> CustomerProfile:
        """Resolve a bearer token to a customer profile.

        Raises:
            AuthenticationError: If the token is not valid
            AuthorizationError: If the identity is not a customer
        """
        principal = self.identity_provider.get_principal(access_token)
        if principal is None:
            raise AuthenticationError("Invalid or expired access token")

        profile = self.customer_repository.get_profile(principal.user_id)
        if profile is None:
            raise AuthorizationError("This account has no customer profile")
        return profile

    def subscribe(self, customer_id: str, listener: CustomerListener) -> Callable[[], None]:
        """Watch one customer's sessions.

        The listener receives the customer's profile on every sign-in and None
        on sign-out. A profile that cannot be loaded is reported as None.

        Returns:
            A function that removes the listener
        """

        def on_session_change(change: SessionChange) -> None:
            if change.user_id != customer_id:
                return
            if change.principal is None:
                listener(None)
                return
            try:
                profile = self.customer_repository.get_profile(customer_id)
            except StoreUnavailableError as e:
                logger.error(f"Failed to load customer {customer_id} after sign-in: {e}")
                profile = None
            listener(profile)

        return self.identity_provider.subscribe(on_session_change)

    async def update_profile(
        self, customer_id: str, updates: dict[str, Any]
    ) -> CustomerProfile | None:
        """Change a customer's name and/or phone.

        Returns:
            The updated profile, or None if there is no such customer
        """
        changes = {k: v for k, v in updates.items() if k in PROFILE_FIELDS}
        changes["updated_at"] = datetime.now(UTC).isoformat()

        if not self.customer_repository.update_profile(customer_id, changes):
            return None
        return self.customer_repository.get_profile(customer_id)

    async def add_address(
        self,
        customer_id: str,
        label: str,
        street: str,
        city: str,
        state: str,
        zip_code: str,
        apartment: str | None = None,
        landmark: str | None = None,
        is_default: bool = False,
    ) -> CustomerProfile | None:
        """Save a new delivery address.

        Returns:
            The updated profile, or None if there is no such customer
        """
        profile = self.customer_repository.get_profile(customer_id)
        if profile is None:
            return None

        is_default = is_default or not profile.saved_addresses
        addresses = [
            a.model_copy(update={"is_default": False}) if is_default else a
            for a in profile.saved_addresses
        ]
        addresses.append(
            SavedAddress(
                id=f"addr_{uuid.uuid4().hex}",
                label=label,
                street=street,
                apartment=apartment,
                city=city,
                state=state,
                zip_code=zip_code,
                landmark=landmark,
                is_default=is_default,
            )
        )
        return self._save_addresses(customer_id, addresses)

    async def update_address(
        self, customer_id: str, address_id: str, updates: dict[str, Any]
    ) -> CustomerProfile | None:
        """Change fields of a saved address.

        Returns:
            The updated profile, or None if the customer or address does not exist
        """
        profile = self.customer_repository.get_profile(customer_id)
        if profile is None or not any(a.id == address_id for a in profile.saved_addresses):
            return None

        changes = {k: v for k, v in updates.items() if k != "id"}
        addresses = []
        for address in profile.saved_addresses:
            if address.id == address_id:
                address = address.model_copy(update=changes)
            elif changes.get("is_default") and address.is_default:
                address = address.model_copy(update={"is_default": False})
            addresses.append(address)

        return self._save_addresses(customer_id, addresses)

    async def delete_address(self, customer_id: str, address_id: str) -> CustomerProfile | None:
        """Remove a saved address.

        Returns:
            The updated profile, or None if the customer or address does not exist
        """
        profile = self.customer_repository.get_profile(customer_id)
        if profile is None or not any(a.id == address_id for a in profile.saved_addresses):
            return None

        addresses = [a for a in profile.saved_addresses if a.id != address_id]
        return self._save_addresses(customer_id, addresses)

    def _save_addresses(
        self, customer_id: str, addresses: list[SavedAddress]
    ) -> CustomerProfile | None:
        updated = self.customer_repository.update_profile(
            customer_id,
            {
                "saved_addresses": [a.to_dynamodb_item() for a in addresses],
                "updated_at": datetime.now(UTC).isoformat(),
            },
        )
        if not updated:
            return None
        return self.customer_repository.get_profile(customer_id)

    def _discard_identity(self, user_id: str) -> None:
        logger.warning(f"Customer signup for user {user_id} not completed, deleting identity")
        try:
            self.identity_provider.delete_user(user_id)
        except IdentityProviderError as e:
            logger.error(f"Failed to delete identity {user_id} of an incomplete signup: {e}")

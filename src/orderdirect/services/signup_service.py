"""Restaurant signup and owner login flows."""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime

from orderdirect.auth.identity_provider import IdentityProvider, Principal
from orderdirect.exceptions import (
    AuthenticationError,
    IdentityProviderError,
    SignupValidationError,
    StoreUnavailableError,
    SubdomainUnavailableError,
)
from orderdirect.models.tenant_models import (
    Restaurant,
    SubscriptionStatusEnum,
    UserProfile,
    UserRoleEnum,
)
from orderdirect.observability.decorators import traced
from orderdirect.repositories.tenant_repositories import (
    RestaurantRepository,
    UserProfileRepository,
)
from orderdirect.tenancy.subdomains import (
    DEFAULT_RESERVED_SUBDOMAINS,
    normalize_subdomain,
    validate_subdomain,
)

logger = logging.getLogger(__name__)


@dataclass
class SignupResult:
    """Outcome of a successful restaurant signup.

    Attributes:
        user_id: Identity id of the owner, also the restaurant id
        subdomain: The claimed, normalized subdomain
    """

    user_id: str
    subdomain: str


@dataclass
class LoginResult:
    """Everything the dashboard needs after an owner logs in."""

    principal: Principal
    profile: UserProfile
    restaurant: Restaurant


class SignupService:
    """Service for onboarding restaurants and logging their owners in."""

    def __init__(
        self,
        restaurant_repository: RestaurantRepository,
        profile_repository: UserProfileRepository,
        identity_provider: IdentityProvider,
        reserved_subdomains: frozenset[str] = DEFAULT_RESERVED_SUBDOMAINS,
    ) -> None:
        """Initialize the SignupService.

        Args:
            restaurant_repository: Repository for restaurant records
            profile_repository: Repository for user profiles
            identity_provider: Provider that owns credentials
            reserved_subdomains: Subdomains that can never be claimed
        """
        self.restaurant_repository = restaurant_repository
        self.profile_repository = profile_repository
        self.identity_provider = identity_provider
        self.reserved_subdomains = reserved_subdomains

    async def check_subdomain_availability(self, subdomain: str) -> bool:
        """Whether a subdomain is well-formed, not reserved and not taken.

        Raises:
            StoreUnavailableError: If the uniqueness lookup fails
        """
        slug = normalize_subdomain(subdomain)
        if validate_subdomain(slug, self.reserved_subdomains) is not None:
            return False

        return not self.restaurant_repository.list_by_subdomain(slug)

    @traced("signup_restaurant")
    async def signup_restaurant(
        self,
        restaurant_name: str,
        owner_name: str,
        email: str,
        phone: str,
        subdomain: str,
        password: str,
    ) -> SignupResult:
        """Create the owner identity, the restaurant and the owner profile.

        The restaurant, its subdomain claim and the profile are written in one
        transaction. If that write fails the new identity is deleted again.

        Raises:
            SignupValidationError: If the subdomain is malformed or reserved, or the
                identity provider rejects the email or password
            SubdomainUnavailableError: If the subdomain is already claimed
            IdentityProviderError: If the identity provider fails
            StoreUnavailableError: If the store fails
        """
        slug = normalize_subdomain(subdomain)
        problem = validate_subdomain(slug, self.reserved_subdomains)
        if problem is not None:
            raise SignupValidationError(problem)

        if not await self.check_subdomain_availability(slug):
            raise SubdomainUnavailableError("Subdomain is not available")

        principal = self.identity_provider.sign_up(email, password, owner_name)
        now = datetime.now(UTC)

        restaurant = Restaurant(
            id=principal.user_id,
            name=restaurant_name,
            subdomain=slug,
            owner_name=owner_name,
            owner_email=email,
            phone=phone,
            stripe_account_id=None,
            subscription_status=SubscriptionStatusEnum.TRIAL,
            subscription_plan="standard",
            created_at=now,
            updated_at=now,
        )
        profile = UserProfile(
            user_id=principal.user_id,
            email=email,
            name=owner_name,
            restaurant_id=principal.user_id,
            role=UserRoleEnum.OWNER,
            created_at=now,
        )

        try:
            created = self.restaurant_repository.create_restaurant(restaurant, profile)
        except StoreUnavailableError:
            self._discard_identity(principal.user_id)
            raise

        if not created:
            self._discard_identity(principal.user_id)
            raise SubdomainUnavailableError("Subdomain is not available")

        logger.info(f"Restaurant {restaurant.id} signed up with subdomain {slug}")
        return SignupResult(user_id=principal.user_id, subdomain=slug)

    async def login(self, email: str, password: str) -> LoginResult:
        """Sign an owner in and load their profile and restaurant.

        Raises:
            AuthenticationError: If credentials are rejected or the account has
                no profile or restaurant
        """
        principal = self.identity_provider.sign_in(email, password)

        profile = self.profile_repository.get_profile(principal.user_id)
        if profile is None:
            raise AuthenticationError("User profile not found")

        restaurant = self.restaurant_repository.get_restaurant(profile.restaurant_id)
        if restaurant is None:
            raise AuthenticationError("Restaurant not found")

        return LoginResult(principal=principal, profile=profile, restaurant=restaurant)

    def _discard_identity(self, user_id: str) -> None:
        """Delete the identity of a signup that could not be completed.

        A failed deletion is logged and otherwise ignored so the caller can
        re-raise the error that aborted the signup.
        """
        logger.warning(f"Signup for user {user_id} not completed, deleting identity")
        try:
            self.identity_provider.delete_user(user_id)
        except IdentityProviderError as e:
            logger.error(f"Failed to delete identity {user_id} of an incomplete signup: {e}")

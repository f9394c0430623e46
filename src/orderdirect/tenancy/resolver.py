"""Resolution of a storefront subdomain to its restaurant."""

import logging
from dataclasses import dataclass

from orderdirect.models.tenant_models import Restaurant
from orderdirect.observability.decorators import traced
from orderdirect.observability.metrics import record_tenant_resolution
from orderdirect.repositories.tenant_repositories import RestaurantRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TenantFound:
    """The subdomain belongs to a restaurant.

    Attributes:
        restaurant: The resolved restaurant
    """

    restaurant: Restaurant


@dataclass(frozen=True)
class TenantNotFound:
    """No restaurant uses the subdomain.

    Attributes:
        subdomain: The subdomain that was looked up
    """

    subdomain: str


TenantResolution = TenantFound | TenantNotFound


class TenantResolver:
    """Maps a route-supplied subdomain to a restaurant.

    Runs before every tenant-scoped request. A NotFound result is terminal for
    that request; nothing is retried.
    """

    def __init__(self, restaurant_repository: RestaurantRepository) -> None:
        """Initialize the resolver.

        Args:
            restaurant_repository: Repository used for the subdomain lookup
        """
        self.restaurant_repository = restaurant_repository

    @traced("resolve_tenant")
    async def resolve(self, subdomain: str) -> TenantResolution:
        """Resolve a subdomain, case-insensitively.

        Args:
            subdomain: Subdomain or path segment from the route

        Returns:
            TenantFound or TenantNotFound

        Raises:
            StoreUnavailableError: If the lookup itself fails
        """
        slug = subdomain.strip().lower()
        if not slug:
            record_tenant_resolution("not_found")
            return TenantNotFound(subdomain=slug)

        matches = self.restaurant_repository.list_by_subdomain(slug)

        if not matches:
            logger.info(f"No restaurant found for subdomain {slug}")
            record_tenant_resolution("not_found")
            return TenantNotFound(subdomain=slug)

        if len(matches) > 1:
            logger.warning(
                f"Subdomain {slug} matches {len(matches)} restaurants, using {matches[0].id}"
            )

        record_tenant_resolution("found")
        return TenantFound(restaurant=matches[0])

"""Exception types shared across the ordering service.

Expected "not found" outcomes are returned as values (None or a result
object). Exceptions are reserved for failures the caller has to branch on
differently: the external store or identity provider being unavailable,
rejected credentials, and invalid state transitions.
"""


class OrderDirectError(Exception):
    """Base class for all service errors."""


class StoreUnavailableError(OrderDirectError):
    """The document store failed to answer a read or write."""


class IdentityProviderError(OrderDirectError):
    """The identity provider failed for a reason other than bad credentials."""


class AuthenticationError(OrderDirectError):
    """The identity provider rejected the supplied credentials or token."""


class AuthorizationError(OrderDirectError):
    """The principal is signed in but administers a different restaurant."""


class SignupValidationError(OrderDirectError):
    """A restaurant signup was rejected before anything was written."""


class SubdomainUnavailableError(SignupValidationError):
    """The requested subdomain is already claimed by another restaurant."""


class DuplicateCategoryError(OrderDirectError):
    """Another category of the same restaurant already has the requested name."""


class EmptyCartError(OrderDirectError):
    """Checkout was attempted with no items in the cart."""


class OrderStatusTransitionError(OrderDirectError):
    """An order status change would violate the open -> closed ordering."""

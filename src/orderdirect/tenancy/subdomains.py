"""Storefront subdomain rules.

These checks run on the write side, when a restaurant signs up. Lookups by
subdomain never validate; an invalid slug simply resolves to nothing.
"""

import os
import re

# Includes every top-level API path segment; storefronts are served at /{subdomain}.
DEFAULT_RESERVED_SUBDOMAINS = frozenset(
    {
        "admin",
        "dashboard",
        "www",
        "api",
        "app",
        "mail",
        "support",
        "health",
        "signup",
        "login",
        "customers",
        "docs",
        "redoc",
    }
)

MIN_SUBDOMAIN_LENGTH = 3

_SUBDOMAIN_PATTERN = re.compile(r"^[a-z0-9]+$")


def reserved_subdomains_from_env() -> frozenset[str]:
    """Read the reserved subdomain list from RESERVED_SUBDOMAINS.

    The variable holds a comma-separated list. When unset, the default list
    is used.
    """
    raw = os.getenv("RESERVED_SUBDOMAINS")
    if raw is None:
        return DEFAULT_RESERVED_SUBDOMAINS
    return frozenset(word.strip().lower() for word in raw.split(",") if word.strip())


def normalize_subdomain(subdomain: str) -> str:
    return subdomain.strip().lower()


def validate_subdomain(
    subdomain: str, reserved: frozenset[str] = DEFAULT_RESERVED_SUBDOMAINS
) -> str | None:
    """Check an already-normalized subdomain against the format rules.

    Args:
        subdomain: Lowercase candidate subdomain
        reserved: Words that may never be used as a subdomain

    Returns:
        An error message, or None if the subdomain is acceptable
    """
    if len(subdomain) < MIN_SUBDOMAIN_LENGTH:
        return f"Subdomain must be at least {MIN_SUBDOMAIN_LENGTH} characters"

    if not _SUBDOMAIN_PATTERN.match(subdomain):
        return "Subdomain may only contain lowercase letters and numbers"

    if subdomain in reserved:
        return f"Subdomain '{subdomain}' is reserved"

    return None

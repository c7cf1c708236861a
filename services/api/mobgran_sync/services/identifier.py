"""Canonical identifier extraction from Mobgran share links.

A share link looks like:
    https://www.mobgran.com/app/conferencia/?p=link&o=cae15fe7-86a3-4a7b-9a4d-5ed91ae6d568/

The 8-4-4-4-12 hex token is the offer's natural key. Extraction never touches
the network or the database.
"""

import re

from mobgran_sync.services.errors import InvalidDomainError, InvalidIdentifierError
from mobgran_sync.settings import get_settings

_TOKEN_PATTERN = re.compile(
    r"[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}",
    re.IGNORECASE,
)


def extract_canonical_id(text: str) -> str:
    """Return the first identifier token found in `text`, lower-cased.

    Raises:
        InvalidIdentifierError: If no token is present.
    """
    match = _TOKEN_PATTERN.search(text or "")
    if match is None:
        raise InvalidIdentifierError("No offer identifier found in link")
    return match.group(0).lower()


def validate_link(link: str, domain: str | None = None) -> str:
    """Check that `link` is a provider link and return its canonical identifier.

    Args:
        link: Link pasted by the user.
        domain: Required domain marker (defaults to MOBGRAN_DOMAIN).

    Raises:
        InvalidDomainError: Empty link or link without the provider domain.
        InvalidIdentifierError: Provider link without an identifier token.
    """
    domain = domain or get_settings().mobgran_domain
    link = (link or "").strip()
    if not link:
        raise InvalidDomainError("Link must not be empty")
    if domain.lower() not in link.lower():
        raise InvalidDomainError(f"Link must belong to the {domain} domain")
    return extract_canonical_id(link)

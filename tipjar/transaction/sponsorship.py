"""Gas sponsorship negotiation."""

import logging
from typing import Optional

from pydantic import ValidationError

from ..core.models import SponsorshipCapability

logger = logging.getLogger(__name__)

_ALLOWED_SCHEMES = ("http://", "https://")


def negotiate_sponsorship(configured_url: Optional[str]) -> Optional[SponsorshipCapability]:
    """
    Turn a configured paymaster URL into a capability.

    Args:
        configured_url: Raw configuration value, may be empty

    Returns:
        SponsorshipCapability for a well-formed http(s) URL, otherwise None
        (the sender pays gas)
    """
    if not configured_url:
        return None

    cleaned = configured_url.strip()
    if not cleaned.lower().startswith(_ALLOWED_SCHEMES):
        logger.warning("Paymaster URL ignored: only http(s) endpoints are supported")
        return None

    try:
        capability = SponsorshipCapability(service_url=cleaned)
    except ValidationError:
        logger.warning("Paymaster URL ignored: not a well-formed URL")
        return None

    logger.debug(f"Gas sponsorship enabled via {capability.service_url.host}")
    return capability

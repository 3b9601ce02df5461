"""Transaction building - pure helpers used before anything is signed."""

from .calls import (
    AMOUNT_PRESETS,
    DEFAULT_AMOUNT,
    build_call,
    chain_check,
    format_ether,
    normalize_address,
    parse_amount,
)
from .sponsorship import negotiate_sponsorship

__all__ = [
    "AMOUNT_PRESETS",
    "DEFAULT_AMOUNT",
    "build_call",
    "chain_check",
    "format_ether",
    "negotiate_sponsorship",
    "normalize_address",
    "parse_amount",
]

"""Transfer call building.

All functions here are pure: no network access, no wallet state.
- wei = whole * 10**18 + fractional digits padded to 18 places
- A call is only built from a valid address and a positive amount
"""

import logging
import re
from decimal import Decimal
from typing import Optional

from eth_utils import from_wei, is_address, to_checksum_address

from ..core.exceptions import InvalidAddressError, InvalidAmountError
from ..core.models import TransferCall
from ..core.types import Address, ETHER_DECIMALS, MAX_UINT256, ChainId, Wei

logger = logging.getLogger(__name__)

_PLAIN_DECIMAL = re.compile(r"\d+(\.\d*)?|\.\d+")

# (value in ETH, label) - rough USD equivalents shown to the user
AMOUNT_PRESETS: list[tuple[str, str]] = [
    ("0.0004", "$1"),
    ("0.002", "$5"),
    ("0.004", "$10"),
    ("0.01", "$25"),
]
DEFAULT_AMOUNT = "0.002"


def parse_amount(amount: str) -> Wei:
    """
    Convert a decimal ETH amount string to wei.

    Args:
        amount: Plain decimal string such as "0.002"

    Returns:
        Amount in wei

    Raises:
        InvalidAmountError: Not a plain decimal, not positive, more than 18
            decimal places, or larger than uint256
    """
    if amount is None:
        raise InvalidAmountError("", "amount is required")

    cleaned = str(amount).strip()
    if not _PLAIN_DECIMAL.fullmatch(cleaned):
        raise InvalidAmountError(cleaned, "not a number")

    whole, _, fraction = cleaned.partition(".")
    fraction = fraction.rstrip("0")
    if len(fraction) > ETHER_DECIMALS:
        raise InvalidAmountError(cleaned, f"more than {ETHER_DECIMALS} decimal places")

    wei = int(whole or "0") * 10**ETHER_DECIMALS + int(fraction.ljust(ETHER_DECIMALS, "0"))
    if wei <= 0:
        raise InvalidAmountError(cleaned, "must be greater than zero")
    if wei > MAX_UINT256:
        raise InvalidAmountError(cleaned, "too large")
    return wei


def normalize_address(address: str) -> Address:
    """
    Validate and checksum an address.

    Raises:
        InvalidAddressError: Missing 0x prefix, wrong length, bad characters
            or a mixed-case checksum that does not match
    """
    cleaned = (address or "").strip()
    if not cleaned.startswith("0x") or not is_address(cleaned):
        raise InvalidAddressError(cleaned)
    return to_checksum_address(cleaned)


def build_call(address: Optional[str], amount: Optional[str]) -> Optional[TransferCall]:
    """
    Build a native transfer, or return None when the inputs cannot be sent.

    Args:
        address: Resolved recipient address
        amount: Amount in ETH as typed by the user

    Returns:
        TransferCall, or None if either input is invalid
    """
    if not address or amount is None:
        return None

    try:
        to = normalize_address(address)
        value_wei = parse_amount(amount)
    except (InvalidAddressError, InvalidAmountError) as e:
        logger.debug(f"Not building transfer call: {e.message}")
        return None

    return TransferCall(to=to, value_wei=value_wei)


def chain_check(connected_chain_id: Optional[ChainId], required_chain_id: ChainId) -> bool:
    """True when the wallet is on the required chain."""
    if connected_chain_id is None:
        return False
    return int(connected_chain_id) == int(required_chain_id)


def format_ether(value_wei: Wei, places: int = 6) -> str:
    """Render wei as a trimmed ETH string, e.g. 2000000000000000 -> "0.002"."""
    ether = Decimal(from_wei(value_wei, "ether"))
    quantized = round(ether, places)
    text = format(quantized, "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text or "0"

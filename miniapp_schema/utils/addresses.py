from typing import Any

from eth_utils import is_address as is_eth_address
from eth_utils import is_checksum_address, is_checksum_formatted_address

SENDER = "sender"


def is_address(value: Any) -> bool:
    """0x-prefixed, 40 hex digits; mixed-case input must carry a valid checksum."""
    if not isinstance(value, str) or not value.startswith("0x"):
        return False
    if not is_eth_address(value):
        return False
    if is_checksum_formatted_address(value):
        return is_checksum_address(value)
    return True


def is_address_or_sender(value: Any) -> bool:
    return value == SENDER or is_address(value)

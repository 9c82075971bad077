"""
Type compatibility between UI parameter kinds and ABI types.

Every predicate here is total: any Python value yields a bool, nothing raises.
"""

import logging
import re
from typing import Any, Optional, Tuple

from miniapp_schema.utils.addresses import is_address_or_sender

logger = logging.getLogger(__name__)

INTEGER_RE = re.compile(r"-?[0-9]+")
HEX_BODY_RE = re.compile(r"(?:[0-9a-fA-F]{2})*")
ARRAY_RE = re.compile(r"(?P<base>.+)\[(?P<size>[0-9]*)\]")
NUMERIC_TYPE_RE = re.compile(r"u?int(?P<bits>[0-9]*)")
FIXED_BYTES_RE = re.compile(r"bytes(?P<size>[0-9]+)")

TEXT_UI_TYPES = {"text", "email", "url", "textarea"}
NUMBER_UI_TYPES = {"number", "datetime"}


def split_array_type(abi_type: str) -> Optional[Tuple[str, Optional[int]]]:
    """'uint256[3]' -> ('uint256', 3), 'address[]' -> ('address', None)."""
    match = ARRAY_RE.fullmatch(abi_type)
    if not match:
        return None
    size = match.group("size")
    return match.group("base"), int(size) if size else None


def is_numeric_type(abi_type: str) -> bool:
    return NUMERIC_TYPE_RE.fullmatch(abi_type) is not None


def fixed_bytes_size(abi_type: str) -> Optional[int]:
    match = FIXED_BYTES_RE.fullmatch(abi_type)
    return int(match.group("size")) if match else None


def is_bytes_type(abi_type: str) -> bool:
    return abi_type == "bytes" or fixed_bytes_size(abi_type) is not None


def _is_integer_value(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return True
    if isinstance(value, float):
        return value.is_integer()
    if isinstance(value, str):
        return INTEGER_RE.fullmatch(value) is not None
    return False


def _is_hex_bytes(value: Any, size: Optional[int]) -> bool:
    if not isinstance(value, str) or not value.startswith("0x"):
        return False
    body = value[2:]
    if HEX_BODY_RE.fullmatch(body) is None:
        return False
    return size is None or len(body) == 2 * size


def is_value_compatible(value: Any, abi_type: Any) -> bool:
    if not isinstance(abi_type, str) or not abi_type:
        return False

    array = split_array_type(abi_type)
    if array is not None:
        base, size = array
        if not isinstance(value, (list, tuple)):
            return False
        if size is not None and len(value) != size:
            return False
        return all(is_value_compatible(item, base) for item in value)

    if abi_type == "address":
        return isinstance(value, str) and is_address_or_sender(value)
    if abi_type == "bool":
        return isinstance(value, bool)
    if abi_type == "string":
        return isinstance(value, str)
    if is_numeric_type(abi_type):
        return _is_integer_value(value)
    if abi_type == "bytes":
        return _is_hex_bytes(value, None)
    size = fixed_bytes_size(abi_type)
    if size is not None:
        return _is_hex_bytes(value, size)
    if abi_type == "tuple":
        return isinstance(value, dict)

    logger.warning("No compatibility rule for ABI type %r, accepting value", abi_type)
    return True


def is_ui_type_compatible(ui_type: Any, abi_type: Any) -> bool:
    if not isinstance(ui_type, str) or not isinstance(abi_type, str):
        return False
    if ui_type == abi_type:
        return True
    if split_array_type(abi_type) is not None or abi_type == "tuple":
        return False
    if ui_type in TEXT_UI_TYPES:
        return abi_type == "string" or is_bytes_type(abi_type)
    if ui_type in NUMBER_UI_TYPES:
        return is_numeric_type(abi_type)
    return False


def infer_ui_type_from_abi_type(abi_type: str) -> str:
    array = split_array_type(abi_type)
    if array is not None:
        return infer_ui_type_from_abi_type(array[0])
    if is_numeric_type(abi_type):
        return "number"
    if abi_type in ("address", "bool", "tuple"):
        return abi_type
    # string, bytes and anything unrecognized render as free text
    return "text"

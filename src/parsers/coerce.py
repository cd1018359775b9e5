"""Coerce-or-default helpers for reading loosely-typed upstream JSON.

Every field read from an external payload goes through one of these so that
schema drift (renamed keys, numbers sent as strings) degrades to
missing data instead of raising.
"""

import math
import re
from decimal import Decimal, InvalidOperation
from typing import Any

from loguru import logger

_HEX_ADDRESS = re.compile(r"^[0-9a-f]{40}$")


def get_path(data: Any, *keys: str) -> Any:
    """Walk nested dicts, returning None as soon as a level is missing."""
    node = data
    for key in keys:
        if not isinstance(node, dict):
            return None
        node = node.get(key)
    return node


def as_dict(value: Any) -> dict:
    """Return ``value`` if it is a dict, else an empty one."""
    return value if isinstance(value, dict) else {}


def to_float(value: Any) -> float | None:
    """Parse a number, returning None for missing, non-numeric, NaN or inf."""
    if value is None or isinstance(value, bool):
        return None
    try:
        num = float(value)
    except (ValueError, TypeError, OverflowError):
        return None
    if math.isnan(num) or math.isinf(num):
        return None
    return num


def to_int(value: Any) -> int | None:
    """Parse an integer (``"12"``, ``12.0`` and ``12`` all give 12)."""
    num = to_float(value)
    return int(num) if num is not None else None


def to_bool(value: Any) -> bool | None:
    """Parse a tri-state flag.

    Accepts real booleans, 0/1 and their string forms. Anything else is
    unknown (None) rather than falsy.
    """
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)) and value in (0, 1):
        return bool(value)
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in ("1", "true", "yes"):
            return True
        if lowered in ("0", "false", "no"):
            return False
    return None


def to_str(value: Any) -> str | None:
    """Non-empty string or None."""
    if value is None or isinstance(value, (dict, list)):
        return None
    try:
        text = str(value).strip()
    except ValueError:
        # int -> str is capped at sys.get_int_max_str_digits()
        return None
    return text or None


def to_tax_percent(value: Any) -> float | None:
    """Normalize a tax value to a percentage.

    Upstream sends either a fraction (0.07) or a percentage (7). Anything
    below 1 is treated as a fraction.
    """
    num = to_float(value)
    if num is None:
        return None
    if num < 1:
        try:
            return float(Decimal(str(num)) * 100)
        except InvalidOperation:
            return None
    return num


def normalize_address(address: str) -> str:
    """Lower-case and ``0x``-prefix an EVM address.

    Malformed input is logged but not rejected.
    """
    cleaned = (address or "").strip().lower()
    if cleaned.startswith("0x"):
        cleaned = cleaned[2:]
    if not _HEX_ADDRESS.match(cleaned):
        logger.warning(f"[ADDRESS] Invalid address format: {address!r}")
    return f"0x{cleaned}"

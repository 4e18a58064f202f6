"""
Path evaluation over extracted structured data.

Paths are dotted, with optional bracket indices:

    0.offers.price
    dataLayer.0.product.name
    complex.items[1].price
    [0][0][0].value
    og:title

Only "." separates segments, so keys containing colons are looked up as-is.
"""
import json
import math
import re
from decimal import Decimal
from typing import Any, Optional

from pricepatrol_parser.utils.logger import get_logger

logger = get_logger("path_evaluator")

_INDEX_PATTERN = re.compile(r"\[([0-9]+)\]")
_CANONICAL_INDEX = re.compile(r"0|[1-9][0-9]*")


def evaluate_path(root: Any, path: str) -> Optional[str]:
    """
    Evaluate a path against nested data.

    Args:
        root: Any nested structure of dicts, lists and scalars
        path: Dotted/bracketed path expression

    Returns:
        The leaf value as a string, or None when any segment is missing.
        Never raises.
    """
    try:
        if root is None or not path:
            return None

        cursor = root
        for segment in path.split("."):
            if "[" in segment and "]" in segment:
                bracket_start = segment.index("[")
                property_name = segment[:bracket_start]
                indices = [int(i) for i in _INDEX_PATTERN.findall(segment[bracket_start:])]

                if not indices:
                    return None

                if property_name:
                    cursor = _get_property(cursor, property_name)
                    if cursor is None:
                        return None

                for index in indices:
                    if not isinstance(cursor, (list, tuple)) or index >= len(cursor):
                        return None
                    cursor = cursor[index]
                    if cursor is None:
                        return None
            else:
                cursor = _get_property(cursor, segment)

            if cursor is None:
                return None

        return stringify_value(cursor)
    except Exception as e:
        logger.debug("path_evaluation_failed", path=path, error=str(e))
        return None


def _get_property(cursor: Any, name: str) -> Any:
    """Property access: key lookup on mappings, index lookup on sequences."""
    if isinstance(cursor, dict):
        return cursor.get(name)
    if isinstance(cursor, (list, tuple)) and _CANONICAL_INDEX.fullmatch(name):
        index = int(name)
        return cursor[index] if index < len(cursor) else None
    return None


def stringify_value(value: Any) -> str:
    """
    String form of a leaf value, matching how page scripts print it.

    Booleans are lowercase and floats use the shortest script number form,
    so a data layer price of 1399.0 reads back as "1399" and 1e21 as
    "1e+21". Lists are joined with commas (None as an empty string, nested
    lists flattened). Mappings are rendered as compact JSON.
    """
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        return _format_number(value)
    if isinstance(value, (list, tuple)):
        return ",".join("" if item is None else stringify_value(item) for item in value)
    if isinstance(value, dict):
        return json.dumps(value, separators=(",", ":"), ensure_ascii=False, default=str)
    return str(value)


def _format_number(value: float) -> str:
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    if value == 0:
        return "0"

    sign = "-" if value < 0 else ""
    # repr gives the shortest digits that round-trip
    decimal = Decimal(repr(abs(value))).as_tuple()
    digits = "".join(str(digit) for digit in decimal.digits).rstrip("0")
    point = len(decimal.digits) + decimal.exponent

    if len(digits) <= point <= 21:
        return sign + digits + "0" * (point - len(digits))
    if 0 < point <= 21:
        return sign + digits[:point] + "." + digits[point:]
    if -6 < point <= 0:
        return sign + "0." + "0" * -point + digits

    exponent = point - 1
    mantissa = digits[0] + ("." + digits[1:] if len(digits) > 1 else "")
    return f"{sign}{mantissa}e{exponent:+d}"

"""
Named value conversions applied by mapping rules.

Every transform is total and fail-soft: a value of a type the transform does
not handle is returned unchanged, and an unknown transform name is identity.
"""

import re
from datetime import datetime
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Callable, Dict, Optional

_INT_PATTERN = re.compile(r"^[+-]?[0-9]+$")
_DATE_PATTERN = re.compile(r"^[0-9]{4}-[0-9]{2}-[0-9]{2}$")
_TRUTHY_STRINGS = {"true", "1", "yes"}


class TransformName(str, Enum):
    """Transforms a mapping rule may name."""

    UPPERCASE = "uppercase"
    LOWERCASE = "lowercase"
    CENTS_TO_DOLLARS = "cents_to_dollars"
    DOLLARS_TO_CENTS = "dollars_to_cents"
    STRING = "string"
    INT = "int"
    BOOL = "bool"
    DATE_ISO = "date_iso"


def _is_number(value: Any) -> bool:
    # bool is an int subclass but never a number here
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _uppercase(value: Any) -> Any:
    return value.upper() if isinstance(value, str) else value


def _lowercase(value: Any) -> Any:
    return value.lower() if isinstance(value, str) else value


def _cents_to_dollars(value: Any) -> Any:
    if not _is_number(value):
        return value
    if isinstance(value, int) and value % 100 == 0:
        return value // 100
    try:
        return value / 100
    except OverflowError:
        return value


def _dollars_to_cents(value: Any) -> Any:
    if not _is_number(value):
        return value
    if isinstance(value, int):
        return value * 100
    try:
        # repr() gives the shortest string that round-trips, so 19.99 -> 1999 exactly
        return int(Decimal(repr(value)) * 100)
    except (InvalidOperation, ValueError, OverflowError):
        return value


def _format_float(value: float) -> str:
    if value.is_integer():
        return str(int(value))
    return format(Decimal(repr(value)), "f")


def _to_string(value: Any) -> Any:
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        try:
            return str(value)
        except ValueError:
            return value
    if isinstance(value, float):
        try:
            return _format_float(value)
        except (InvalidOperation, ValueError, OverflowError):
            return value
    return value


def _to_int(value: Any) -> Any:
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        try:
            return int(value)
        except (ValueError, OverflowError):
            return value
    if isinstance(value, str) and _INT_PATTERN.match(value):
        try:
            return int(value)
        except ValueError:
            # over the interpreter's int string conversion limit
            return value
    return value


def _to_bool(value: Any) -> Any:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value in _TRUTHY_STRINGS
    if _is_number(value):
        return value != 0
    return value


def _date_iso(value: Any) -> Any:
    if not isinstance(value, str) or not _DATE_PATTERN.match(value):
        return value
    try:
        parsed = datetime.strptime(value, "%Y-%m-%d")
    except ValueError:
        return value
    return parsed.strftime("%Y-%m-%dT00:00:00Z")


_TRANSFORMS: Dict[str, Callable[[Any], Any]] = {
    TransformName.UPPERCASE.value: _uppercase,
    TransformName.LOWERCASE.value: _lowercase,
    TransformName.CENTS_TO_DOLLARS.value: _cents_to_dollars,
    TransformName.DOLLARS_TO_CENTS.value: _dollars_to_cents,
    TransformName.STRING.value: _to_string,
    TransformName.INT.value: _to_int,
    TransformName.BOOL.value: _to_bool,
    TransformName.DATE_ISO.value: _date_iso,
}

_INVERSES: Dict[str, str] = {
    TransformName.CENTS_TO_DOLLARS.value: TransformName.DOLLARS_TO_CENTS.value,
    TransformName.DOLLARS_TO_CENTS.value: TransformName.CENTS_TO_DOLLARS.value,
}


def is_known_transform(name: Optional[str]) -> bool:
    return bool(name) and name in _TRANSFORMS


def inverse_name(name: str) -> str:
    """
    Name of the transform that undoes ``name``.

    Only the currency pair is a real inverse; every other transform is its own
    inverse. ``date_iso`` is therefore lossy in reverse: a full timestamp does
    not match ``YYYY-MM-DD`` and passes through unchanged.
    """
    return _INVERSES.get(name, name)


def apply_transform(value: Any, name: Optional[str]) -> Any:
    """Apply the named transform, or return ``value`` unchanged if the name is unknown."""
    if not name:
        return value
    func = _TRANSFORMS.get(name)
    if func is None:
        return value
    return func(value)


def apply_inverse_transform(value: Any, name: Optional[str]) -> Any:
    if not name:
        return value
    return apply_transform(value, inverse_name(name))

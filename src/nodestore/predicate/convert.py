"""String to value conversion for bound query parameters."""

from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Callable

Converter = Callable[[str, Any], Any]

TRUE_VALUES = {"true", "1", "yes", "on"}
FALSE_VALUES = {"false", "0", "no", "off"}


def to_bool(value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in TRUE_VALUES:
        return True
    if lowered in FALSE_VALUES:
        return False
    raise ValueError(f"Not a boolean: {value!r}")


def to_enum(value: str, enum_type: type[Enum]) -> Enum:
    """Look an enum member up by value first, then by name."""
    for member in enum_type:
        if str(member.value) == value:
            return member
    try:
        return enum_type[value]
    except KeyError:
        raise ValueError(f"Not a valid {enum_type.__name__}: {value!r}") from None


def to_datetime(value: str) -> datetime:
    # fromisoformat() only learned the "Z" suffix in 3.11
    if value.endswith(("Z", "z")):
        value = value[:-1] + "+00:00"
    return datetime.fromisoformat(value)


def convert_value(value: str, target: Any) -> Any:
    """
    Convert a raw query string value to the target type.

    Raises:
        ValueError: if the value cannot be represented as target
    """
    if target is None or target is str or target is Any:
        return value
    if not isinstance(target, type):
        raise ValueError(f"Unsupported target type: {target!r}")
    if issubclass(target, Enum):
        return to_enum(value, target)
    if issubclass(target, bool):
        return to_bool(value)
    if issubclass(target, int):
        return int(value)
    if issubclass(target, float):
        return float(value)
    if issubclass(target, Decimal):
        try:
            return Decimal(value)
        except InvalidOperation:
            raise ValueError(f"Not a decimal: {value!r}") from None
    if issubclass(target, datetime):
        return to_datetime(value)
    if issubclass(target, date):
        return date.fromisoformat(value)
    if issubclass(target, str):
        return target(value)
    raise ValueError(f"Unsupported target type: {target.__name__}")

"""
Filter predicate values.

A predicate is a tree of frozen dataclasses: atomic Clause values, AnyOf for
the alternatives given for one query parameter, and AllOf for the conjunction
of everything. Predicates compare structurally, so building the same filter
twice yields equal values.
"""

from dataclasses import dataclass
from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Iterable, Mapping

_MISSING = object()


class Operator(str, Enum):
    EQ = "eq"
    NE = "ne"
    CONTAINS = "contains"
    ICONTAINS = "icontains"
    GT = "gt"
    GTE = "gte"
    LT = "lt"
    LTE = "lte"


def as_utc(value: datetime) -> datetime:
    """Shift to UTC; naive datetimes are taken to be UTC already."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def to_json_value(value: Any) -> Any:
    """
    Convert a bound value to the form it takes inside a stored document.

    Datetimes are written in UTC so ISO strings compare in time order.
    """
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, datetime):
        return as_utc(value).isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, Decimal):
        return float(value)
    return value


def resolve_path(document: Mapping[str, Any], path: str) -> Any:
    """Walk a dot-delimited path through nested mappings."""
    current: Any = document
    for segment in path.split("."):
        if not isinstance(current, Mapping) or segment not in current:
            return _MISSING
        current = current[segment]
    return current


class Predicate:
    """Base class for all filter predicates."""

    def matches(self, document: Mapping[str, Any]) -> bool:
        raise NotImplementedError

    @property
    def is_identity(self) -> bool:
        return False

    def __and__(self, other: "Predicate") -> "Predicate":
        return all_of([self, other])

    def __or__(self, other: "Predicate") -> "Predicate":
        return AnyOf((self, other))


@dataclass(frozen=True)
class Clause(Predicate):
    """A single path/operator/value comparison."""

    path: str
    operator: Operator
    value: Any

    def matches(self, document: Mapping[str, Any]) -> bool:
        actual = resolve_path(document, self.path)
        if actual is _MISSING:
            return self.operator is Operator.NE
        expected = to_json_value(self.value)

        if self.operator is Operator.EQ:
            return actual == expected
        if self.operator is Operator.NE:
            return actual != expected
        if self.operator is Operator.CONTAINS:
            return isinstance(actual, (list, tuple, set)) and expected in actual
        if self.operator is Operator.ICONTAINS:
            return isinstance(actual, str) and str(expected).lower() in actual.lower()

        if actual is None:
            return False
        try:
            if self.operator is Operator.GT:
                return actual > expected
            if self.operator is Operator.GTE:
                return actual >= expected
            if self.operator is Operator.LT:
                return actual < expected
            if self.operator is Operator.LTE:
                return actual <= expected
        except TypeError:
            return False
        raise ValueError(f"Unsupported operator: {self.operator}")


@dataclass(frozen=True)
class AnyOf(Predicate):
    """Disjunction; matches when any member matches."""

    clauses: tuple[Predicate, ...]

    def matches(self, document: Mapping[str, Any]) -> bool:
        return any(clause.matches(document) for clause in self.clauses)


@dataclass(frozen=True)
class AllOf(Predicate):
    """Conjunction; the empty conjunction matches everything."""

    parts: tuple[Predicate, ...] = ()

    def matches(self, document: Mapping[str, Any]) -> bool:
        return all(part.matches(document) for part in self.parts)

    @property
    def is_identity(self) -> bool:
        return not self.parts


IDENTITY = AllOf()


def all_of(predicates: Iterable[Predicate]) -> Predicate:
    """
    Combine predicates with AND.

    Nested conjunctions are flattened and identity members dropped, so the
    result is IDENTITY, a lone predicate, or a flat AllOf.
    """
    parts: list[Predicate] = []
    for predicate in predicates:
        if isinstance(predicate, AllOf):
            parts.extend(predicate.parts)
        else:
            parts.append(predicate)
    if not parts:
        return IDENTITY
    if len(parts) == 1:
        return parts[0]
    return AllOf(tuple(parts))

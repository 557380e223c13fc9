"""
Domain type inspection.

Views declare what they return, e.g. ``Optional[Page[Node]]``. To bind query
parameters we need the entity inside all the wrappers, so
resolve_domain_type() peels container layers off the annotation until it
reaches a concrete class. describe() then turns that class into the field list
the bindings are generated from.
"""

import collections.abc
import dataclasses
import threading
import types
import typing
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Callable, Mapping, TypeVar, Union, get_args, get_origin

import structlog

from nodestore.errors import TypeResolutionError

logger = structlog.get_logger(__name__)

_NONE_TYPE = type(None)


class FieldKind(str, Enum):
    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    ENUM = "enum"
    DATE = "date"
    DATETIME = "datetime"
    MAPPING = "mapping"
    COLLECTION = "collection"
    OTHER = "other"

    @property
    def is_simple(self) -> bool:
        return self not in (FieldKind.MAPPING, FieldKind.COLLECTION, FieldKind.OTHER)


@dataclass(frozen=True)
class FieldDescriptor:
    name: str
    type: Any
    kind: FieldKind


@dataclass(frozen=True)
class DomainTypeDescriptor:
    type: type
    fields: Mapping[str, FieldDescriptor]

    @property
    def name(self) -> str:
        return self.type.__name__

    def field(self, name: str) -> FieldDescriptor | None:
        return self.fields.get(name)


# =============================================================================
# Domain type resolution
# =============================================================================


def is_union(origin) -> bool:
    return origin is Union or origin is types.UnionType


def _is_unknown(tp) -> bool:
    return tp is Any or isinstance(tp, TypeVar)


def _is_iterable(cls) -> bool:
    return (
        isinstance(cls, type)
        and issubclass(cls, collections.abc.Iterable)
        and not issubclass(cls, (str, bytes))
    )


def _is_raw_container(tp) -> bool:
    """A generic class used without its type arguments, e.g. bare ``list``."""
    if not isinstance(tp, type):
        return False
    if getattr(tp, "__parameters__", ()):
        return True
    return _is_iterable(tp) and issubclass(tp, (collections.abc.Collection, collections.abc.Iterator))


def _element_type(origin, args):
    """The type a container wraps: mapping values, Optional's member, else the first argument."""
    if is_union(origin):
        members = [arg for arg in args if arg is not _NONE_TYPE]
        return members[0] if len(members) == 1 else None
    if isinstance(origin, type) and issubclass(origin, collections.abc.Mapping):
        return args[-1]
    return args[0]


def resolve_domain_type(declared, root: type = None) -> type:
    """
    Determine the entity type a predicate should target.

    An explicit root wins unless it is the ``object`` placeholder. Otherwise
    the declared annotation is unwrapped one generic layer at a time. An
    iterable whose element type is unknown resolves to the iterable class
    itself.

    Raises:
        TypeResolutionError: if no concrete type can be derived
    """
    if root is not None and root is not object:
        return root
    if declared is None:
        raise TypeResolutionError("No return type declared to derive the domain type from")

    source = declared
    while True:
        args = get_args(source)
        if not args:
            if _is_unknown(source) or _is_raw_container(get_origin(source) or source):
                raise TypeResolutionError(f"Could not determine domain type from {source!r}")
            return source

        origin = get_origin(source)
        element = _element_type(origin, args)
        if element is None:
            raise TypeResolutionError(f"Could not determine domain type from {source!r}")

        if element == source or _is_unknown(element):
            if _is_iterable(origin):
                return origin
            raise TypeResolutionError(f"Could not determine domain type from {source!r}")

        source = element


def resolve_handler_domain_type(handler: Callable | None, root: type = None) -> type:
    """Resolve the domain type from a handler's return annotation."""
    if root is not None and root is not object:
        return root
    if handler is None:
        raise TypeResolutionError("Parameter is not backed by a handler")
    try:
        hints = typing.get_type_hints(handler)
    except (NameError, TypeError) as e:
        raise TypeResolutionError(f"Could not read annotations of {handler!r}: {e}") from e
    return resolve_domain_type(hints.get("return"))


# =============================================================================
# Field descriptors
# =============================================================================


def field_kind(tp) -> FieldKind:
    """Classify a field annotation by the semantic type its values carry."""
    origin = get_origin(tp)
    if is_union(origin):
        members = [arg for arg in get_args(tp) if arg is not _NONE_TYPE]
        return field_kind(members[0]) if len(members) == 1 else FieldKind.OTHER

    cls = origin or tp
    if not isinstance(cls, type):
        return FieldKind.OTHER
    if issubclass(cls, Enum):
        return FieldKind.ENUM
    if issubclass(cls, bool):
        return FieldKind.BOOLEAN
    if issubclass(cls, (int, float, Decimal)):
        return FieldKind.NUMBER
    if issubclass(cls, str):
        return FieldKind.STRING
    if issubclass(cls, datetime):
        return FieldKind.DATETIME
    if issubclass(cls, date):
        return FieldKind.DATE
    if issubclass(cls, collections.abc.Mapping):
        return FieldKind.MAPPING
    if issubclass(cls, collections.abc.Iterable):
        return FieldKind.COLLECTION
    return FieldKind.OTHER


def value_type(tp):
    """The class bound values are converted to: Optional is stripped, collections yield their element."""
    origin = get_origin(tp)
    args = get_args(tp)
    if is_union(origin):
        members = [arg for arg in args if arg is not _NONE_TYPE]
        return value_type(members[0]) if len(members) == 1 else str
    if origin is not None and args and field_kind(tp) is FieldKind.COLLECTION:
        return value_type(args[0])
    return origin or tp


_descriptors: dict[type, DomainTypeDescriptor] = {}
_descriptors_lock = threading.Lock()


def describe(domain_type: type) -> DomainTypeDescriptor:
    """
    Build the descriptor for a domain type from its dataclass fields.

    Non-dataclass types describe to an empty field list. Descriptors are
    cached per type; the first caller populates the entry under a lock.
    """
    descriptor = _descriptors.get(domain_type)
    if descriptor is not None:
        return descriptor

    with _descriptors_lock:
        descriptor = _descriptors.get(domain_type)
        if descriptor is None:
            descriptor = _build_descriptor(domain_type)
            _descriptors[domain_type] = descriptor
            logger.debug("described domain type", domain_type=descriptor.name, fields=len(descriptor.fields))
    return descriptor


def _build_descriptor(domain_type: type) -> DomainTypeDescriptor:
    if not dataclasses.is_dataclass(domain_type):
        return DomainTypeDescriptor(type=domain_type, fields={})

    hints = typing.get_type_hints(domain_type)
    fields = {}
    for f in dataclasses.fields(domain_type):
        tp = hints.get(f.name, f.type)
        fields[f.name] = FieldDescriptor(name=f.name, type=tp, kind=field_kind(tp))
    return DomainTypeDescriptor(type=domain_type, fields=fields)

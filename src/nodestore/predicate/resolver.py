"""
Predicate injection for view functions.

A view asks for a filter by declaring a parameter of type Predicate (or
Optional[Predicate]). Endpoint specific settings go in an Annotated
QueryPredicate marker::

    @bp.route("/search/nodes")
    @query_predicate
    def search(
        predicate: Annotated[Predicate, QueryPredicate(bindings=customize_node_bindings)],
    ) -> list[Node]:
        ...

The target entity is taken from QueryPredicate.root, or else from the view's
return annotation.
"""

import functools
import inspect
import typing
from dataclasses import dataclass
from typing import Annotated, Any, Callable, get_args, get_origin

import structlog
from flask import request

from nodestore.errors import IllegalUsageError
from nodestore.predicate.bindings import BindingsFactory, Customizer
from nodestore.predicate.builder import PredicateBuilder
from nodestore.predicate.inspector import describe, is_union, resolve_handler_domain_type
from nodestore.predicate.model import Predicate
from nodestore.predicate.params import collect_parameters

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class QueryPredicate:
    """Endpoint metadata for predicate binding."""

    root: type = object
    bindings: Customizer | None = None


@dataclass(frozen=True)
class ParameterDescriptor:
    """A view parameter with its resolved annotation."""

    name: str
    annotation: Any
    handler: Callable | None = None
    position: int = 0

    @classmethod
    def for_handler(cls, handler: Callable) -> list["ParameterDescriptor"]:
        hints = typing.get_type_hints(handler, include_extras=True)
        return [
            cls(
                name=name,
                annotation=hints.get(name, param.annotation),
                handler=handler,
                position=position,
            )
            for position, (name, param) in enumerate(inspect.signature(handler).parameters.items())
        ]

    def unwrapped(self) -> tuple[Any, QueryPredicate | None]:
        """The annotation without Annotated, and its QueryPredicate marker if any."""
        if get_origin(self.annotation) is Annotated:
            base, *extras = get_args(self.annotation)
            marker = next((extra for extra in extras if isinstance(extra, QueryPredicate)), None)
            return base, marker
        return self.annotation, None


def _is_predicate_type(tp) -> bool:
    return get_origin(tp) is None and isinstance(tp, type) and issubclass(tp, Predicate)


def _is_optional_predicate(tp) -> bool:
    if not is_union(get_origin(tp)):
        return False
    args = get_args(tp)
    members = [arg for arg in args if arg is not type(None)]
    return len(members) == 1 and len(args) == 2 and _is_predicate_type(members[0])


class PredicateArgumentResolver:
    """Resolves Predicate view parameters from the request query string."""

    def __init__(self, factory: BindingsFactory = None, builder: PredicateBuilder = None):
        self.bindings_factory = factory or BindingsFactory()
        self.predicate_builder = builder or PredicateBuilder()

    def supports(self, parameter: ParameterDescriptor) -> bool:
        """
        True for parameters typed Predicate or Optional[Predicate].

        Raises:
            IllegalUsageError: if a QueryPredicate marker sits on any other type
        """
        base, marker = parameter.unwrapped()
        if _is_predicate_type(base) or _is_optional_predicate(base):
            return True
        if marker is not None:
            raise IllegalUsageError(
                f"Parameter at position {parameter.position} must be of type Predicate but was {base!r}."
            )
        return False

    def resolve(self, parameter: ParameterDescriptor, req) -> Predicate:
        """
        Build the predicate for one parameter from the request's query string.

        The result is never None: with no applicable parameters it is
        IDENTITY, for Optional[Predicate] parameters too.
        """
        _, marker = parameter.unwrapped()
        marker = marker or QueryPredicate()

        domain_type = resolve_handler_domain_type(parameter.handler, marker.root)
        descriptor = describe(domain_type)
        parameters = collect_parameters(req)
        bindings = self.bindings_factory.create_bindings_for(descriptor, marker.bindings)
        predicate = self.predicate_builder.build(descriptor, parameters, bindings)

        logger.debug(
            "resolved predicate",
            parameter=parameter.name,
            domain_type=descriptor.name,
            predicate=predicate,
        )
        return predicate


default_resolver = PredicateArgumentResolver()


def query_predicate(view: Callable = None, *, resolver: PredicateArgumentResolver = None):
    """
    Decorator injecting Predicate parameters into a Flask view.

    The view signature is inspected once, when decorated, so a misplaced
    QueryPredicate marker fails at import time rather than per request.
    """
    if view is None:
        return functools.partial(query_predicate, resolver=resolver)

    resolver = resolver or default_resolver
    parameters = [p for p in ParameterDescriptor.for_handler(view) if resolver.supports(p)]

    @functools.wraps(view)
    def wrapper(*args, **kwargs):
        for parameter in parameters:
            kwargs[parameter.name] = resolver.resolve(parameter, request)
        return view(*args, **kwargs)

    return wrapper

"""
Tests for predicate argument resolution.

Run with: pytest src/nodestore/predicate/resolver_test.py -v
"""

from dataclasses import dataclass
from typing import Annotated, Any, Optional

import pytest
from flask import Flask, request

from nodestore.errors import IllegalUsageError, TypeResolutionError
from nodestore.node import Node, customize_node_bindings
from nodestore.paging import Page
from nodestore.predicate.model import IDENTITY, AllOf, Clause, Operator, Predicate
from nodestore.predicate.resolver import (
    ParameterDescriptor,
    PredicateArgumentResolver,
    QueryPredicate,
    query_predicate,
)


@dataclass
class Tag:
    label: str
    weight: int


@pytest.fixture
def flask_app():
    return Flask(__name__)


@pytest.fixture
def resolver():
    return PredicateArgumentResolver()


def parameter(handler, name):
    return next(p for p in ParameterDescriptor.for_handler(handler) if p.name == name)


class TestSupports:
    """Tests for PredicateArgumentResolver.supports()"""

    def test_plain_predicate(self, resolver):
        def view(predicate: Predicate) -> list[Node]: ...

        assert resolver.supports(parameter(view, "predicate"))

    def test_optional_predicate(self, resolver):
        def view(predicate: Optional[Predicate]) -> list[Node]: ...

        assert resolver.supports(parameter(view, "predicate"))

    def test_annotated_predicate(self, resolver):
        def view(predicate: Annotated[Predicate, QueryPredicate(root=Tag)]): ...

        assert resolver.supports(parameter(view, "predicate"))

    @pytest.mark.parametrize("annotation", [str, int, Optional[str], list[Predicate]])
    def test_other_types_unsupported(self, resolver, annotation):
        def view(value): ...

        view.__annotations__ = {"value": annotation}

        assert not resolver.supports(parameter(view, "value"))

    def test_marker_on_other_type_raises(self, resolver):
        def view(page, name: Annotated[str, QueryPredicate()]): ...

        with pytest.raises(IllegalUsageError, match="position 1 must be of type Predicate"):
            resolver.supports(parameter(view, "name"))


class TestResolve:
    """Tests for PredicateArgumentResolver.resolve()"""

    def test_from_return_annotation(self, flask_app, resolver):
        def view(predicate: Predicate) -> Optional[Page[Node]]: ...

        with flask_app.test_request_context("/?name=Home&type=page"):
            predicate = resolver.resolve(parameter(view, "predicate"), request)

        assert predicate == AllOf((Clause("name", Operator.EQ, "Home"), Clause("type", Operator.EQ, "page")))

    def test_explicit_root(self, flask_app, resolver):
        def view(predicate: Annotated[Predicate, QueryPredicate(root=Tag)]) -> Any: ...

        with flask_app.test_request_context("/?weight=3&name=ignored"):
            predicate = resolver.resolve(parameter(view, "predicate"), request)

        assert predicate == Clause("weight", Operator.EQ, 3)

    def test_customizer(self, flask_app, resolver):
        def view(
            predicate: Annotated[Predicate, QueryPredicate(bindings=customize_node_bindings)],
        ) -> list[Node]: ...

        with flask_app.test_request_context("/?tag=red&name_contains=home"):
            predicate = resolver.resolve(parameter(view, "predicate"), request)

        assert predicate == AllOf(
            (Clause("tags", Operator.CONTAINS, "red"), Clause("name", Operator.ICONTAINS, "home"))
        )

    def test_optional_without_parameters_is_identity(self, flask_app, resolver):
        def view(predicate: Optional[Predicate]) -> list[Node]: ...

        with flask_app.test_request_context("/"):
            predicate = resolver.resolve(parameter(view, "predicate"), request)

        assert predicate is IDENTITY

    def test_unresolvable_domain_type(self, flask_app, resolver):
        def view(predicate: Predicate) -> list: ...

        with flask_app.test_request_context("/?name=x"):
            with pytest.raises(TypeResolutionError):
                resolver.resolve(parameter(view, "predicate"), request)


class TestQueryPredicateDecorator:
    """Tests for query_predicate()"""

    def test_injects_predicate(self, flask_app):
        @query_predicate
        def view(predicate: Predicate) -> list[Node]:
            return predicate

        with flask_app.test_request_context("/?slug=home"):
            assert view() == Clause("slug", Operator.EQ, "home")

    def test_keeps_other_arguments(self, flask_app):
        @query_predicate
        def view(node_type: str, predicate: Predicate) -> list[Node]:
            return node_type, predicate

        with flask_app.test_request_context("/"):
            assert view(node_type="page") == ("page", IDENTITY)

    def test_custom_resolver(self, flask_app):
        resolver = PredicateArgumentResolver()

        @query_predicate(resolver=resolver)
        def view(predicate: Predicate) -> list[Tag]:
            return predicate

        with flask_app.test_request_context("/?label=x"):
            assert view() == Clause("label", Operator.EQ, "x")

    def test_misplaced_marker_fails_at_decoration(self):
        with pytest.raises(IllegalUsageError):

            @query_predicate
            def view(name: Annotated[str, QueryPredicate()]) -> list[Node]:
                return name

    def test_preserves_view_name(self):
        @query_predicate
        def search_nodes(predicate: Predicate) -> list[Node]:
            return predicate

        assert search_nodes.__name__ == "search_nodes"

"""
Predicate

Turns HTTP query parameters into filter predicates against a domain type:
the inspector finds the entity a view works on, bindings say which
parameters map to which fields, and the builder assembles the predicate.
"""

from nodestore.predicate.bindings import BindingRule, BindingsFactory, QueryBindings
from nodestore.predicate.builder import PredicateBuilder, meta_predicates
from nodestore.predicate.inspector import (
    DomainTypeDescriptor,
    FieldDescriptor,
    FieldKind,
    describe,
    resolve_domain_type,
)
from nodestore.predicate.model import IDENTITY, AllOf, AnyOf, Clause, Operator, Predicate, all_of
from nodestore.predicate.params import collect_parameters
from nodestore.predicate.resolver import (
    PredicateArgumentResolver,
    QueryPredicate,
    query_predicate,
)

__all__ = [
    "IDENTITY",
    "AllOf",
    "AnyOf",
    "BindingRule",
    "BindingsFactory",
    "Clause",
    "DomainTypeDescriptor",
    "FieldDescriptor",
    "FieldKind",
    "Operator",
    "Predicate",
    "PredicateArgumentResolver",
    "PredicateBuilder",
    "QueryBindings",
    "QueryPredicate",
    "all_of",
    "collect_parameters",
    "describe",
    "meta_predicates",
    "query_predicate",
    "resolve_domain_type",
]

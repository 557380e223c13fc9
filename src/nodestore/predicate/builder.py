import json
from typing import Any, Mapping

import structlog

from nodestore.errors import PredicateBuildError
from nodestore.predicate.bindings import BindingRule, QueryBindings
from nodestore.predicate.convert import Converter, convert_value
from nodestore.predicate.inspector import DomainTypeDescriptor
from nodestore.predicate.model import IDENTITY, AnyOf, Clause, Operator, Predicate, all_of

logger = structlog.get_logger(__name__)

META_PREFIX = "meta."


class PredicateBuilder:
    """
    Builds a predicate from query parameters and bindings.

    Each bound parameter becomes one clause, or an AnyOf group when it was
    given several values. The groups are combined with AND. Parameters
    without a rule are ignored. A value that fails conversion drops its
    parameter, unless the rule is required, which raises PredicateBuildError.
    """

    def __init__(self, converter: Converter = convert_value):
        self.converter = converter

    def build(
        self,
        domain_type: DomainTypeDescriptor,
        parameters: Mapping[str, list[str]],
        bindings: QueryBindings,
    ) -> Predicate:
        if not parameters:
            return IDENTITY

        # a rule reached by both its name and its path gets one OR group
        bound: dict[str, tuple[BindingRule, list[str]]] = {}
        for name, values in parameters.items():
            rule = bindings.rule_for(name)
            if rule is None:
                continue
            bound.setdefault(rule.name, (rule, []))[1].extend(values)

        groups: list[tuple[BindingRule, Predicate]] = []
        for rule, values in bound.values():
            group = self._group(domain_type, rule, rule.name, values)
            if group is not None:
                groups.append((rule, group))

        order = {rule.name: i for i, rule in enumerate(bindings)}
        groups.sort(key=lambda item: order.get(item[0].name, len(order)))
        return all_of(group for _, group in groups)

    def _group(
        self,
        domain_type: DomainTypeDescriptor,
        rule: BindingRule,
        name: str,
        values: list[str],
    ) -> Predicate | None:
        values = [value for value in values if value != ""]
        if not values:
            return None

        converted = []
        for value in values:
            try:
                converted.append(self.converter(value, rule.value_type))
            except (ValueError, TypeError) as e:
                if rule.required:
                    raise PredicateBuildError(name, value, str(e)) from e
                logger.debug(
                    "skipping unconvertible parameter",
                    domain_type=domain_type.name,
                    parameter=name,
                    value=value,
                )
                return None

        clauses = tuple(Clause(rule.path, rule.operator, value) for value in converted)
        if len(clauses) == 1:
            return clauses[0]
        return AnyOf(clauses)


def meta_predicates(root: str | None, mapping: Mapping[str, Any]) -> list[Clause]:
    """
    Equality clauses for the ``meta.`` keys of a mapping.

    Each matching key is compared against ``root.key`` with the value's
    string form, JSON for objects and lists. Keys without the ``meta.``
    prefix, including ones like ``metaphor``, are left out.
    """
    clauses = []
    for key, value in mapping.items():
        if not key.startswith(META_PREFIX):
            continue
        path = f"{root}.{key}" if root else key
        text = json.dumps(value) if isinstance(value, (dict, list)) else str(value)
        clauses.append(Clause(path, Operator.EQ, text))
    return clauses

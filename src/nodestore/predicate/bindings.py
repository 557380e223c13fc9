"""
Query parameter bindings.

A QueryBindings maps request parameter names to entity paths and operators.
By default every simple field of the domain type is bound by equality under
its own name; endpoints adjust that with a customizer function.
"""

import threading
from dataclasses import dataclass, replace
from typing import Any, Callable, Iterator, Optional

import structlog

from nodestore.predicate.inspector import DomainTypeDescriptor, FieldKind, value_type
from nodestore.predicate.model import Operator

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class BindingRule:
    name: str
    path: str
    operator: Operator = Operator.EQ
    value_type: Any = str
    required: bool = False


class QueryBindings:
    """Binding rules for one domain type, keyed by parameter name."""

    def __init__(self, descriptor: DomainTypeDescriptor, rules=()):
        self.descriptor = descriptor
        self._rules: dict[str, BindingRule] = {rule.name: rule for rule in rules}

    def __iter__(self) -> Iterator[BindingRule]:
        return iter(list(self._rules.values()))

    def __len__(self) -> int:
        return len(self._rules)

    def __contains__(self, name: str) -> bool:
        return name in self._rules

    def __repr__(self) -> str:
        return f"QueryBindings({self.descriptor.name}, {list(self._rules)})"

    def bind(
        self,
        name: str,
        path: str = None,
        operator: Operator = None,
        value_type: Any = None,
        required: bool = None,
    ) -> BindingRule:
        """
        Add or update the rule for a parameter name.

        Unspecified attributes keep their current value, or fall back to
        defaults derived from the field the path points at.
        """
        existing = self._rules.get(name)
        if existing is None:
            path = path or name
            rule = BindingRule(
                name=name,
                path=path,
                operator=operator or self._default_operator(path),
                value_type=value_type or self._value_type_for(path),
                required=bool(required),
            )
        else:
            changes = {}
            if path is not None:
                changes["path"] = path
                if value_type is None:
                    changes["value_type"] = self._value_type_for(path)
            if operator is not None:
                changes["operator"] = operator
            if value_type is not None:
                changes["value_type"] = value_type
            if required is not None:
                changes["required"] = required
            rule = replace(existing, **changes)

        self._rules[name] = rule
        return rule

    def exclude(self, *names: str) -> "QueryBindings":
        """Stop binding the given parameter names or paths."""
        for name in names:
            for rule in list(self._rules.values()):
                if rule.name == name or rule.path == name:
                    del self._rules[rule.name]
        return self

    def include_only(self, *names: str) -> "QueryBindings":
        """Keep only the rules for the given parameter names."""
        self._rules = {key: rule for key, rule in self._rules.items() if key in names}
        return self

    def rule_for(self, parameter: str) -> Optional[BindingRule]:
        """Find the rule for a parameter, by name first, then by path."""
        rule = self._rules.get(parameter)
        if rule is not None:
            return rule
        for rule in self._rules.values():
            if rule.path == parameter:
                return rule
        return None

    def _field_for(self, path: str):
        return self.descriptor.field(path.split(".", 1)[0])

    def _value_type_for(self, path: str) -> Any:
        field = self._field_for(path)
        if field is None or (field.kind is FieldKind.MAPPING and "." in path):
            return str
        return value_type(field.type)

    def _default_operator(self, path: str) -> Operator:
        field = self._field_for(path)
        if field is not None and field.kind is FieldKind.COLLECTION and "." not in path:
            return Operator.CONTAINS
        return Operator.EQ


Customizer = Callable[[QueryBindings], None]


def default_rules(descriptor: DomainTypeDescriptor) -> tuple[BindingRule, ...]:
    """Equality rules for every simple field, named after the field."""
    return tuple(
        BindingRule(name=field.name, path=field.name, value_type=value_type(field.type))
        for field in descriptor.fields.values()
        if field.kind.is_simple
    )


class BindingsFactory:
    """
    Creates QueryBindings for domain types.

    Default rule templates are computed once per domain type and shared;
    every call gets its own QueryBindings, so customizers never see another
    request's changes.
    """

    def __init__(self):
        self._templates: dict[type, tuple[BindingRule, ...]] = {}
        self._lock = threading.Lock()

    def _template_for(self, descriptor: DomainTypeDescriptor) -> tuple[BindingRule, ...]:
        template = self._templates.get(descriptor.type)
        if template is not None:
            return template
        with self._lock:
            template = self._templates.get(descriptor.type)
            if template is None:
                template = default_rules(descriptor)
                self._templates[descriptor.type] = template
        return template

    def create_bindings_for(
        self,
        descriptor: DomainTypeDescriptor,
        customizer: Customizer = None,
    ) -> QueryBindings:
        bindings = QueryBindings(descriptor, self._template_for(descriptor))
        if customizer is not None:
            customizer(bindings)
            logger.debug(
                "customized bindings",
                domain_type=descriptor.name,
                customizer=getattr(customizer, "__name__", repr(customizer)),
            )
        return bindings

"""
Render predicates as SQL over a JSONB document column.

Paths and values are always passed as query parameters; only the column
name is interpolated, and it must be a plain identifier.
"""

import re
from decimal import Decimal
from typing import Any

from psycopg.types.json import Jsonb

from nodestore.predicate.model import AllOf, AnyOf, Clause, Operator, Predicate, to_json_value

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

_COMPARISONS = {
    Operator.GT: ">",
    Operator.GTE: ">=",
    Operator.LT: "<",
    Operator.LTE: "<=",
}


def _like_pattern(value: str) -> str:
    escaped = value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def _compile_clause(clause: Clause, column: str) -> tuple[str, list[Any]]:
    segments = clause.path.split(".")
    value = to_json_value(clause.value)

    if clause.operator is Operator.EQ:
        return f"({column} #> %s::text[]) = %s", [segments, Jsonb(value)]
    if clause.operator is Operator.NE:
        return f"({column} #> %s::text[]) IS DISTINCT FROM %s", [segments, Jsonb(value)]
    if clause.operator is Operator.CONTAINS:
        return f"({column} #> %s::text[]) @> %s", [segments, Jsonb([value])]
    if clause.operator is Operator.ICONTAINS:
        return f"({column} #>> %s::text[]) ILIKE %s", [segments, _like_pattern(str(value))]

    symbol = _COMPARISONS[clause.operator]
    if isinstance(clause.value, (int, float, Decimal)) and not isinstance(clause.value, bool):
        return f"({column} #>> %s::text[])::numeric {symbol} %s", [segments, clause.value]
    return f"({column} #>> %s::text[]) {symbol} %s", [segments, str(value)]


def compile_predicate(predicate: Predicate, column: str = "document") -> tuple[str, list[Any]]:
    """
    Compile a predicate into a WHERE fragment and its parameters.

    The identity predicate compiles to ``TRUE``.

    Returns:
        (sql, params) with %s placeholders
    """
    if not _IDENTIFIER.match(column):
        raise ValueError(f"Invalid column name: {column!r}")

    if isinstance(predicate, Clause):
        return _compile_clause(predicate, column)

    if isinstance(predicate, AllOf):
        members, joiner, empty = predicate.parts, " AND ", "TRUE"
    elif isinstance(predicate, AnyOf):
        members, joiner, empty = predicate.clauses, " OR ", "FALSE"
    else:
        raise TypeError(f"Cannot compile {type(predicate).__name__}")

    if not members:
        return empty, []

    fragments = []
    params: list[Any] = []
    for member in members:
        fragment, member_params = compile_predicate(member, column)
        fragments.append(fragment)
        params.extend(member_params)
    return "(" + joiner.join(fragments) + ")", params

"""Building blocks for predicates and scalar expressions.

Every helper here is side-effect free: it only builds SQLAlchemy expression
objects. Predicate helpers return ``None`` when their operand is absent so
callers can pass them straight to ``all_of`` or ``BaseQuery.where`` and have
the missing ones ignored.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from sqlalchemy import String, and_, case, cast, func, literal, or_, select
from sqlalchemy.sql.elements import ColumnElement

Predicate = ColumnElement[bool]


def is_absent(value: Any) -> bool:
    """``None`` and blank strings carry no constraint."""
    if value is None:
        return True
    return isinstance(value, str) and not value.strip()


# -----------------------------------------------------------------------------
# Comparisons
# -----------------------------------------------------------------------------


def eq(column, value: Any) -> Predicate | None:
    if is_absent(value):
        return None
    return column == value


def goe(column, value: Any) -> Predicate | None:
    if is_absent(value):
        return None
    return column >= value


def loe(column, value: Any) -> Predicate | None:
    if is_absent(value):
        return None
    return column <= value


def gt(column, value: Any) -> Predicate | None:
    if is_absent(value):
        return None
    return column > value


def lt(column, value: Any) -> Predicate | None:
    if is_absent(value):
        return None
    return column < value


def between(column, low: Any, high: Any) -> Predicate | None:
    """Inclusive range. A missing bound leaves that side open."""
    if is_absent(low) and is_absent(high):
        return None
    if is_absent(low):
        return column <= high
    if is_absent(high):
        return column >= low
    return column.between(low, high)


def contains(column, term: str | None) -> Predicate | None:
    """Case-insensitive substring match."""
    if is_absent(term):
        return None
    return column.ilike(f"%{term.strip()}%")


def compare(column, operator: str, value: Any) -> Predicate:
    if operator in {"in", "not in"}:
        values = list(value)
        return column.in_(values) if operator == "in" else ~column.in_(values)
    if operator in {"like", "not like"}:
        pattern = f"%{value}%"
        return column.ilike(pattern) if operator == "like" else ~column.ilike(pattern)
    if operator == "=":
        return column == value
    if operator == "!=":
        return column != value
    if operator == ">":
        return column > value
    if operator == "<":
        return column < value
    if operator == ">=":
        return column >= value
    if operator == "<=":
        return column <= value
    if operator == "is":
        return column.is_(None) if value is None else column == value
    if operator == "is not":
        return column.is_not(None) if value is None else column != value
    raise ValueError(f"Unsupported operator '{operator}'.")


# -----------------------------------------------------------------------------
# Composition
# -----------------------------------------------------------------------------


def all_of(*predicates: Predicate | None) -> Predicate | None:
    """AND the present predicates together.

    Returns ``None`` when every operand is absent, which the query builder
    treats as "match every row".
    """
    present = [predicate for predicate in predicates if predicate is not None]
    if not present:
        return None
    if len(present) == 1:
        return present[0]
    return and_(*present)


def any_of(*predicates: Predicate | None) -> Predicate | None:
    present = [predicate for predicate in predicates if predicate is not None]
    if not present:
        return None
    if len(present) == 1:
        return present[0]
    return or_(*present)


class PredicateBuilder:
    """Mutable accumulator for predicates assembled step by step.

    Usage:
        builder = PredicateBuilder()
        if username:
            builder.and_(Member.username == username)
        query.where(builder.value)
    """

    def __init__(self, initial: Predicate | None = None):
        self._value = initial

    def and_(self, predicate: Predicate | None) -> PredicateBuilder:
        if predicate is not None:
            self._value = predicate if self._value is None else and_(self._value, predicate)
        return self

    def or_(self, predicate: Predicate | None) -> PredicateBuilder:
        if predicate is not None:
            self._value = predicate if self._value is None else or_(self._value, predicate)
        return self

    @property
    def has_value(self) -> bool:
        return self._value is not None

    @property
    def value(self) -> Predicate | None:
        return self._value


# -----------------------------------------------------------------------------
# Scalar expressions
# -----------------------------------------------------------------------------


def _as_text(part: Any):
    if isinstance(part, str):
        return literal(part, String)
    if not hasattr(part, "expression"):
        part = literal(part)
    # ORM attributes expose the mapped column through ``expression``
    if isinstance(part.expression.type, String):
        return part
    return cast(part, String)


def concat(*parts: Any):
    """Concatenate strings and columns; non-string operands are cast to text."""
    if not parts:
        raise ValueError("concat() needs at least one operand.")
    converted = [_as_text(part) for part in parts]
    result = converted[0]
    for part in converted[1:]:
        result = result.concat(part)
    return result


def constant(value: Any, label: str | None = None):
    expression = literal(value)
    return expression.label(label) if label else expression


def value_case(column, mapping: Mapping[Any, Any], otherwise: Any = None):
    """CASE column WHEN value THEN result ... ELSE otherwise END."""
    return case(dict(mapping), value=column, else_=otherwise)


def case_when(*whens: tuple[Predicate, Any], otherwise: Any = None):
    """CASE WHEN predicate THEN result ... ELSE otherwise END."""
    if not whens:
        raise ValueError("case_when() needs at least one (predicate, result) pair.")
    return case(*whens, else_=otherwise)


def sql_function(name: str, *args: Any):
    """Call a SQL function by name, e.g. ``sql_function("lower", Member.username)``."""
    return getattr(func, name)(*args)


# -----------------------------------------------------------------------------
# Sub-queries
# -----------------------------------------------------------------------------


def _subselect(expression, where: Iterable[Predicate | None]):
    stmt = select(expression)
    predicate = all_of(*where)
    if predicate is not None:
        stmt = stmt.where(predicate)
    return stmt


def scalar_subquery(expression, *where: Predicate | None):
    """Single-value sub-select usable in WHERE and SELECT.

    Build it over an ``aliased()`` entity so it does not correlate with the
    outer query's table.
    """
    return _subselect(expression, where).scalar_subquery()


def in_subquery(column, expression, *where: Predicate | None) -> Predicate:
    return column.in_(_subselect(expression, where))

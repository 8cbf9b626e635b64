# AppSupport
# Copyright © 2025 Osvaldo J. Vega Rodríguez
# Licensed under CC BY-NC-SA 4.0 International
# http://creativecommons.org/licenses/by-nc-sa/4.0/

"""
Predicate composition for WHERE clauses.

Two ways of describing a filter are supported:

* a *predicate list*: ``(column, value, join)`` triples folded left to right,
  where the join attached to the final entry is never applied;
* an *expression*: :class:`Eq` leaves combined with ``&`` / ``|`` (or
  :func:`and_` / :func:`or_`).

Predicate lists are folded into expressions, so both render through the same
code and a trailing join cannot survive into the SQL text.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any, Union

from .schema import is_identifier, quote_identifier

__all__ = [
    "Join",
    "Predicate",
    "Eq",
    "Conjunction",
    "Expression",
    "InvalidPredicateError",
    "and_",
    "or_",
    "normalize_predicates",
    "from_predicates",
    "build_where",
    "compile_where",
    "render_value",
]


class InvalidPredicateError(ValueError):
    """Raised when a predicate cannot be turned into SQL."""


class Join(str, Enum):
    AND = "AND"
    OR = "OR"

    @classmethod
    def parse(cls, value: Join | str) -> Join:
        if isinstance(value, Join):
            return value
        try:
            return cls(str(value).strip().upper())
        except ValueError:
            raise InvalidPredicateError(f"Unknown join operator: {value!r}") from None


@dataclass(frozen=True)
class Predicate:
    column: str
    value: Any
    join: Join = Join.AND

    def __post_init__(self) -> None:
        object.__setattr__(self, "join", Join.parse(self.join))


@dataclass(frozen=True)
class Eq:
    column: str
    value: Any

    def __and__(self, other: Expression) -> Conjunction:
        return and_(self, other)

    def __or__(self, other: Expression) -> Conjunction:
        return or_(self, other)


@dataclass(frozen=True)
class Conjunction:
    op: Join
    terms: tuple[Expression, ...]

    def __and__(self, other: Expression) -> Conjunction:
        return and_(self, other)

    def __or__(self, other: Expression) -> Conjunction:
        return or_(self, other)


Expression = Union[Eq, Conjunction]
PredicateLike = Union[Predicate, Sequence[Any]]
WhereLike = Union[Expression, Iterable[PredicateLike], None]


def _combine(op: Join, terms: Sequence[Expression]) -> Conjunction:
    flat: list[Expression] = []
    for term in terms:
        if isinstance(term, Conjunction) and term.op is op:
            flat.extend(term.terms)
        elif isinstance(term, (Eq, Conjunction)):
            flat.append(term)
        else:
            raise InvalidPredicateError(f"Not an expression: {term!r}")
    if len(flat) < 2:
        raise InvalidPredicateError(f"{op.value} needs at least two terms")
    return Conjunction(op, tuple(flat))


def and_(*terms: Expression) -> Conjunction:
    return _combine(Join.AND, terms)


def or_(*terms: Expression) -> Conjunction:
    return _combine(Join.OR, terms)


def normalize_predicates(predicates: Iterable[PredicateLike]) -> list[Predicate]:
    """Coerce triples/pairs into :class:`Predicate` instances."""

    out: list[Predicate] = []
    for item in predicates:
        if isinstance(item, Predicate):
            out.append(item)
            continue
        if isinstance(item, (str, bytes)) or not isinstance(item, Sequence):
            raise InvalidPredicateError(f"Predicate must be a (column, value[, join]) tuple: {item!r}")
        if len(item) == 2:
            out.append(Predicate(item[0], item[1]))
        elif len(item) == 3:
            out.append(Predicate(item[0], item[1], item[2]))
        else:
            raise InvalidPredicateError(f"Predicate must have 2 or 3 items: {item!r}")
    return out


def from_predicates(predicates: Iterable[PredicateLike]) -> Expression | None:
    """Fold a predicate list left to right into an expression.

    Each predicate's join connects it to the *next* one; the join stored on
    the last predicate has nothing to connect and is discarded.
    """

    items = normalize_predicates(predicates)
    if not items:
        return None
    expr: Expression = Eq(items[0].column, items[0].value)
    for previous, current in zip(items, items[1:]):
        expr = _combine(previous.join, [expr, Eq(current.column, current.value)])
    return expr


def _as_expression(where: WhereLike) -> Expression | None:
    if where is None:
        return None
    if isinstance(where, (Eq, Conjunction)):
        return where
    return from_predicates(where)


# ---- Rendering ---------------------------------------------------------------


def render_value(value: Any) -> str:
    """Render ``value`` as an SQL literal."""

    if value is None:
        return "NULL"
    if isinstance(value, bool):
        return "1" if value else "0"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return repr(value)
    if isinstance(value, (bytes, bytearray, memoryview)):
        return "X'" + bytes(value).hex().upper() + "'"
    text = str(value)
    return "'" + text.replace("'", "''") + "'"


def _check_column(column: Any) -> str:
    if not is_identifier(column):
        raise InvalidPredicateError(f"Invalid column name in predicate: {column!r}")
    return column


def _render(expr: Expression, parent: Join | None = None) -> str:
    if isinstance(expr, Eq):
        column = _check_column(expr.column)
        if expr.value is None:
            return f"{column} IS NULL"
        return f"{column}={render_value(expr.value)}"
    text = f" {expr.op.value} ".join(_render(term, expr.op) for term in expr.terms)
    if parent is not None and parent is not expr.op:
        return f"({text})"
    return text


def _compile(expr: Expression, params: list[Any], parent: Join | None = None) -> str:
    if isinstance(expr, Eq):
        column = quote_identifier(_check_column(expr.column))
        params.append(expr.value)
        return f"{column} IS ?" if expr.value is None else f"{column} = ?"
    text = f" {expr.op.value} ".join(_compile(term, params, expr.op) for term in expr.terms)
    if parent is not None and parent is not expr.op:
        return f"({text})"
    return text


def build_where(where: WhereLike) -> str:
    """Return the literal WHERE body (without ``WHERE``) for ``where``.

    >>> build_where([("a", 1, "AND"), ("b", 2, "OR")])
    'a=1 AND b=2'

    An empty list yields ``""``, which callers treat as "no filter".
    """

    expr = _as_expression(where)
    return "" if expr is None else _render(expr)


def compile_where(where: WhereLike) -> tuple[str, list[Any]]:
    """Return the parameterised WHERE body and its bound values."""

    expr = _as_expression(where)
    params: list[Any] = []
    if expr is None:
        return "", params
    return _compile(expr, params), params

"""Dispatch rules: a key/value matcher paired with a query transform."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from .keys import KeyForm, classify_key

if TYPE_CHECKING:
    from .kinds import FilterKind
    from .query import FilterQuery

FilterTransform = Callable[["FilterQuery", Any], "FilterQuery"]


def is_list_like(value: Any) -> bool:
    """True for list-shaped filter values; strings and mappings are scalars."""
    return isinstance(value, list | tuple | set | frozenset)


def is_list(value: Any) -> bool:
    """True for ``list`` values only; a tuple is a single order directive."""
    return isinstance(value, list)


@dataclass(frozen=True)
class KeyMatcher:
    """
    Accepts a filter when its key is one of ``forms`` and, if
    ``value_check`` is set, its value passes the check.
    """

    forms: frozenset[KeyForm]
    value_check: Callable[[Any], bool] | None = None

    def __call__(self, key: Any, value: Any) -> bool:
        if classify_key(key) not in self.forms:
            return False
        return self.value_check is None or self.value_check(value)


@dataclass(frozen=True)
class FilterRule:
    """
    One entry of a compiled dispatch table.

    Attributes:
        kind: The filter kind the rule was compiled from.
        name: The filter name it answers to.
        matcher: Decides whether a ``(key, value)`` filter is handled.
        transform: Narrows the query with the filter value.
    """

    kind: FilterKind
    name: str
    matcher: KeyMatcher
    transform: FilterTransform

    def matches(self, key: Any, value: Any) -> bool:
        return self.matcher(key, value)

    def apply(self, query: FilterQuery, value: Any) -> FilterQuery:
        return self.transform(query, value)

"""
Apply filter maps to queries.

Each ``(key, value)`` filter is offered, in the filter map's iteration
order, to the caller's custom filters first and then to the compiled
rules in dispatch priority.  The first one that accepts the filter
narrows the query.  A filter nobody accepts is handed to the
``on_unmatched`` policy, which raises by default so that unexpected
filters are surfaced instead of silently ignored.

Usage::

    FILTERS = compile_filters(DEFINITIONS, "user", resolve_binding)

    @custom_filter("group_name")
    def by_group_name(query, value):
        return query.where(query.column("user", "group_name") == value)

    def list_users(filters):
        query = FilterQuery.from_entity(User, "user")
        return FILTERS.apply(query, filters, custom=[by_group_name])
"""

from __future__ import annotations

import functools
import logging
from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, Union

from .docs import generate_filter_docs
from .exceptions import ConfigurationError, UnmatchedFilterError
from .keys import classify_key, key_name
from .rules import is_list_like

if TYPE_CHECKING:
    from .definitions import FilterDefinitions
    from .query import FilterQuery
    from .rules import FilterRule

logger = logging.getLogger("cqrs_ddd.dynamic_filters")

#: ``(key, value, query)`` -> narrowed query, or ``None`` if not handled.
CustomFilter = Callable[[Any, Any, "FilterQuery"], Union["FilterQuery", None]]
Fallback = Callable[[Any, Any, "FilterQuery"], "FilterQuery"]


class UnmatchedFilter(str, Enum):
    """What to do with a filter that no custom filter or rule accepts."""

    RAISE = "raise"
    IGNORE = "ignore"


def custom_filter(
    *names: str | Enum,
    requires_list: bool = False,
) -> Callable[[Callable[[FilterQuery, Any], FilterQuery]], CustomFilter]:
    """
    Turn a ``(query, value)`` function into a :data:`CustomFilter`
    answering to ``names``.

    Both symbol and string keys are accepted.  With ``requires_list``,
    only list-shaped values are handled.
    """
    accepted = frozenset(key_name(name) for name in names)

    def decorator(fn: Callable[[FilterQuery, Any], FilterQuery]) -> CustomFilter:
        @functools.wraps(fn)
        def wrapper(key: Any, value: Any, query: FilterQuery) -> FilterQuery | None:
            form = classify_key(key)
            if form is None or form.name not in accepted:
                return None
            if requires_list and not is_list_like(value):
                return None
            return fn(query, value)

        return wrapper

    return decorator


def _filter_items(
    filters: Mapping[Any, Any] | Iterable[tuple[Any, Any]],
) -> Iterable[tuple[Any, Any]]:
    if isinstance(filters, Mapping):
        return filters.items()
    return filters


def _unmatched_policy(
    on_unmatched: UnmatchedFilter | str | Fallback,
) -> UnmatchedFilter | Fallback:
    if callable(on_unmatched) and not isinstance(on_unmatched, str):
        return on_unmatched
    try:
        return UnmatchedFilter(on_unmatched)
    except ValueError:
        valid = ", ".join(policy.value for policy in UnmatchedFilter)
        raise ConfigurationError(
            f"Unsupported unmatched filter policy {on_unmatched!r}; "
            f"expected one of {valid} or a callable",
            path="on_unmatched",
        ) from None


def _custom_filters(
    custom: CustomFilter | Sequence[CustomFilter] | None,
) -> tuple[CustomFilter, ...]:
    if custom is None:
        return ()
    if callable(custom):
        return (custom,)
    return tuple(custom)


@dataclass(frozen=True)
class CompiledFilters:
    """
    Compiled dispatch table.

    Immutable once built; safe to share between concurrent requests.

    Attributes:
        rules: Rules in dispatch priority; the first match wins.
        definitions: The definitions the rules were compiled from.
        default_binding: The binding plain field names refer to.
    """

    rules: tuple[FilterRule, ...]
    definitions: FilterDefinitions | None = None
    default_binding: str | None = None

    def __len__(self) -> int:
        return len(self.rules)

    @property
    def filter_names(self) -> list[str]:
        """Sorted names of all filters the table answers to."""
        return sorted({rule.name for rule in self.rules})

    def match(self, key: Any, value: Any) -> FilterRule | None:
        """Return the first rule accepting the filter, if any."""
        for rule in self.rules:
            if rule.matches(key, value):
                return rule
        return None

    def apply_filter(
        self,
        query: FilterQuery,
        key: Any,
        value: Any,
        *,
        custom: CustomFilter | Sequence[CustomFilter] | None = None,
        on_unmatched: UnmatchedFilter | str | Fallback = UnmatchedFilter.RAISE,
    ) -> FilterQuery:
        """Apply a single filter."""
        policy = _unmatched_policy(on_unmatched)
        for handler in _custom_filters(custom):
            result = handler(key, value, query)
            if result is not None:
                return result

        rule = self.match(key, value)
        if rule is not None:
            return rule.apply(query, value)

        return self._unmatched(query, key, value, policy)

    def apply(
        self,
        query: FilterQuery,
        filters: Mapping[Any, Any] | Iterable[tuple[Any, Any]],
        *,
        custom: CustomFilter | Sequence[CustomFilter] | None = None,
        on_unmatched: UnmatchedFilter | str | Fallback = UnmatchedFilter.RAISE,
    ) -> FilterQuery:
        """Fold all filters into ``query``, in the filters' iteration order."""
        handlers = _custom_filters(custom)
        policy = _unmatched_policy(on_unmatched)
        for key, value in _filter_items(filters):
            query = self.apply_filter(
                query, key, value, custom=handlers, on_unmatched=policy
            )
        return query

    def docs(self, extras: Mapping[Any, Any] | None = None) -> str:
        """Markdown documentation of the filters this table was compiled from."""
        if self.definitions is None:
            return ""
        return generate_filter_docs(self.definitions, extras)

    def _unmatched(
        self,
        query: FilterQuery,
        key: Any,
        value: Any,
        on_unmatched: UnmatchedFilter | Fallback,
    ) -> FilterQuery:
        if on_unmatched is UnmatchedFilter.IGNORE:
            logger.debug("Ignoring unmatched filter %r", key)
            return query
        if on_unmatched is UnmatchedFilter.RAISE:
            raise UnmatchedFilterError(key, value, self.filter_names)
        return on_unmatched(key, value, query)


EMPTY_TABLE = CompiledFilters(rules=())


def apply_filters(
    query: FilterQuery,
    filters: Mapping[Any, Any] | Iterable[tuple[Any, Any]],
    table: CompiledFilters | None = None,
    *,
    custom: CustomFilter | Sequence[CustomFilter] | None = None,
    on_unmatched: UnmatchedFilter | str | Fallback = UnmatchedFilter.RAISE,
) -> FilterQuery:
    """
    Apply ``filters`` to ``query``.

    Custom filters are tried before the compiled ``table``.  Without a
    table, only custom filters apply, which is useful for functions that
    do not use standard filters at all.
    """
    return (table if table is not None else EMPTY_TABLE).apply(
        query, filters, custom=custom, on_unmatched=on_unmatched
    )

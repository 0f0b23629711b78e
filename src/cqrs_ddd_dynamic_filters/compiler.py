"""
Compile filter definitions into a dispatch table.

Compilation happens once, typically at import or application start-up.
Every configuration problem (no key type enabled, malformed definitions,
a kind without operator strategy) surfaces here as
:class:`~.exceptions.ConfigurationError`, never at request time.

Usage::

    FILTERS = compile_filters(
        {
            "string_keys": True,
            "limit": True,
            "order_by": True,
            "equal_to": ["id", "username", ("role_name", ("role", "name"))],
            "string_contains": [("username_search", "username")],
        },
        "user",
        binding_resolver({"role": JoinSpec(Role)}),
    )

    query = FILTERS.apply(FilterQuery.from_entity(User, "user"), request_filters)
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from .definitions import FilterDefinitions
from .dispatch import CompiledFilters
from .exceptions import ConfigurationError
from .keys import accepted_keys, check_key_types
from .kinds import DISPATCH_ORDER, FilterKind
from .operators import DEFAULT_REGISTRY
from .order_by import compile_order_by, order_by_rule
from .resolvers import identity_resolver
from .rules import FilterRule, KeyMatcher, is_list_like

if TYPE_CHECKING:
    from .query import FilterQuery
    from .resolvers import BindingResolver
    from .strategy import FilterOperator, FilterOperatorRegistry

logger = logging.getLogger("cqrs_ddd.dynamic_filters")


@dataclass(frozen=True)
class FieldTransform:
    """Narrows the query on one ``(binding, field)`` with an operator."""

    operator: FilterOperator
    binding: str
    field: str
    resolve_binding: BindingResolver = identity_resolver

    def __call__(self, query: FilterQuery, value: Any) -> FilterQuery:
        query = self.resolve_binding(query, self.binding)
        column = query.column(self.binding, self.field)
        return query.where(self.operator.apply(column, value))


def _limit(query: FilterQuery, value: Any) -> FilterQuery:
    return query.limit(value)


def _offset(query: FilterQuery, value: Any) -> FilterQuery:
    return query.offset(value)


_TOGGLES = {
    FilterKind.LIMIT: _limit,
    FilterKind.OFFSET: _offset,
}


def _toggle_rule(definitions: FilterDefinitions, kind: FilterKind) -> FilterRule:
    return FilterRule(
        kind=kind,
        name=kind.value,
        matcher=KeyMatcher(accepted_keys(definitions, kind.value)),
        transform=_TOGGLES[kind],
    )


def _field_rules(
    definitions: FilterDefinitions,
    kind: FilterKind,
    default_binding: str,
    resolve_binding: BindingResolver,
    registry: FilterOperatorRegistry,
) -> list[FilterRule]:
    entries = definitions.for_kind(kind)
    if not entries:
        return []
    operator = registry.get(kind)
    if operator is None:
        raise ConfigurationError(
            f"No operator registered for filter kind {kind.value!r}",
            path=kind.value,
        )
    value_check = is_list_like if kind.requires_list else None
    rules = []
    for entry in entries:
        key, binding, field = entry.resolve(default_binding)
        rules.append(
            FilterRule(
                kind=kind,
                name=key,
                matcher=KeyMatcher(accepted_keys(definitions, key), value_check),
                transform=FieldTransform(operator, binding, field, resolve_binding),
            )
        )
    return rules


def compile_filters(
    definitions: FilterDefinitions | Mapping[str, Any],
    default_binding: str,
    resolve_binding: BindingResolver | None = None,
    *,
    registry: FilterOperatorRegistry | None = None,
) -> CompiledFilters:
    """
    Compile ``definitions`` into a :class:`~.dispatch.CompiledFilters` table.

    Args:
        definitions: Filter definitions, typed or as a plain mapping.
        default_binding: The binding plain field names refer to.
        resolve_binding: Called with the running query and a binding name
            before a field of that binding is used.  Without it, every
            binding must already be present in the query.
        registry: Operator strategies per kind, defaults to
            :data:`~.operators.DEFAULT_REGISTRY`.

    Raises:
        ConfigurationError: If the definitions are unusable.
    """
    if not isinstance(definitions, FilterDefinitions):
        definitions = FilterDefinitions.from_mapping(definitions)
    check_key_types(definitions)
    registry = registry or DEFAULT_REGISTRY

    if resolve_binding is None:
        foreign = definitions.bindings(default_binding) - {default_binding}
        if foreign:
            logger.warning(
                "Filters reference bindings %s but no binding resolver was "
                "given; queries must join them up front",
                ", ".join(sorted(foreign)),
            )
    resolver = resolve_binding or identity_resolver

    rules: list[FilterRule] = []
    for kind in DISPATCH_ORDER:
        if kind in _TOGGLES:
            if definitions.is_enabled(kind):
                rules.append(_toggle_rule(definitions, kind))
        elif kind is FilterKind.ORDER_BY:
            rule = compile_order_by(definitions, default_binding, resolver)
            if rule is not None:
                rules.append(rule)
        else:
            rules.extend(
                _field_rules(definitions, kind, default_binding, resolver, registry)
            )

    logger.debug(
        "Compiled %d filter rules for default binding %r", len(rules), default_binding
    )
    return CompiledFilters(
        rules=tuple(rules),
        definitions=definitions,
        default_binding=default_binding,
    )


def order_by_only(
    definitions: FilterDefinitions | Mapping[str, Any],
    default_binding: str,
    resolve_binding: BindingResolver | None = None,
) -> CompiledFilters:
    """
    Compile a table holding only the ``order_by`` filter.

    The key types and ``equal_to`` aliases of ``definitions`` are kept,
    so the sort fields resolve exactly as in the full table.  The other
    filters are not compiled, whether ``order_by`` is enabled or not.
    """
    if not isinstance(definitions, FilterDefinitions):
        definitions = FilterDefinitions.from_mapping(definitions)
    check_key_types(definitions)
    return CompiledFilters(
        rules=(order_by_rule(definitions, default_binding, resolve_binding),),
        definitions=definitions.with_only_order_by(),
        default_binding=default_binding,
    )

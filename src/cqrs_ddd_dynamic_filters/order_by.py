"""
Order-by filters.

The value of an ``order_by`` filter is a ``list`` whose elements take one
of the following forms:

- ``"field"`` sorts on the field of the default binding, ascending
- ``("desc", "field")`` sorts on the field of the default binding in
  the given direction
- ``("desc", ("binding", "field"))`` sorts on the field of the given
  binding in the given direction

Field names declared as ``equal_to`` aliases (``("role_name", ("role",
"name"))``) resolve to the aliased binding and field, so the binding is
joined exactly as an ``equal_to`` filter on the alias would join it.
Other names are used verbatim on the default binding; an unknown field
surfaces as :class:`~.exceptions.FieldNotFoundError` from the query.

Sort keys accumulate: every directive, and every further ``order_by``
filter, sorts after the keys already present.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, NamedTuple

from .exceptions import InvalidOrderDirectiveError
from .keys import accepted_keys, is_name, key_name
from .kinds import FilterKind
from .query import SortDirection
from .resolvers import identity_resolver
from .rules import FilterRule, KeyMatcher, is_list

if TYPE_CHECKING:
    from .definitions import FilterDefinitions
    from .query import FilterQuery
    from .resolvers import BindingResolver

_SHAPES = "'field', ('direction', 'field') or ('direction', ('binding', 'field'))"


class OrderDirective(NamedTuple):
    """A parsed ``order_by`` element; ``binding`` is ``None`` when not given."""

    direction: SortDirection
    binding: str | None
    field: str


def parse_direction(raw: Any, directive: Any = None) -> SortDirection:
    if isinstance(raw, SortDirection):
        return raw
    if isinstance(raw, str | Enum):
        try:
            return SortDirection(key_name(raw))
        except ValueError:
            pass
    valid = ", ".join(d.value for d in SortDirection)
    raise InvalidOrderDirectiveError(
        raw if directive is None else directive,
        f"unsupported direction {raw!r}; expected one of {valid}",
    )


def parse_order_directive(directive: Any) -> OrderDirective:
    """
    Parse one ``order_by`` element.

    Raises:
        InvalidOrderDirectiveError: On any other shape or an unknown direction.
    """
    if is_name(directive):
        return OrderDirective(SortDirection.ASC, None, key_name(directive))

    if isinstance(directive, tuple | list) and len(directive) == 2:
        raw_direction, target = directive
        direction = parse_direction(raw_direction, directive)
        if is_name(target):
            return OrderDirective(direction, None, key_name(target))
        if (
            isinstance(target, tuple | list)
            and len(target) == 2
            and all(is_name(part) for part in target)
        ):
            return OrderDirective(direction, key_name(target[0]), key_name(target[1]))

    raise InvalidOrderDirectiveError(directive, f"expected {_SHAPES}")


@dataclass(frozen=True)
class OrderByTransform:
    """Folds a list of order directives into the query, left to right."""

    aliases: Mapping[str, tuple[str, str]]
    default_binding: str
    resolve_binding: BindingResolver = identity_resolver

    def locate(self, directive: OrderDirective) -> tuple[str, str]:
        """Return the ``(binding, field)`` a directive sorts on."""
        if directive.binding is not None:
            return directive.binding, directive.field
        return self.aliases.get(
            directive.field, (self.default_binding, directive.field)
        )

    def __call__(self, query: FilterQuery, value: Any) -> FilterQuery:
        for raw in value:
            directive = parse_order_directive(raw)
            binding, field = self.locate(directive)
            query = self.resolve_binding(query, binding)
            column = query.column(binding, field)
            query = query.order_by(directive.direction.apply(column))
        return query


def order_by_rule(
    definitions: FilterDefinitions,
    default_binding: str,
    resolve_binding: BindingResolver | None = None,
) -> FilterRule:
    """
    Build the ``order_by`` rule with the key types and ``equal_to``
    aliases of ``definitions``, whether or not ``order_by`` is enabled.

    The rule only matches ``list`` values.  A tuple is a single directive,
    so ``("desc", "username")`` on its own falls through to later rules or
    the caller's fallback, as does any other non-list value.
    """
    name = FilterKind.ORDER_BY.value
    return FilterRule(
        kind=FilterKind.ORDER_BY,
        name=name,
        matcher=KeyMatcher(accepted_keys(definitions, name), value_check=is_list),
        transform=OrderByTransform(
            aliases=definitions.aliases(default_binding),
            default_binding=default_binding,
            resolve_binding=resolve_binding or identity_resolver,
        ),
    )


def compile_order_by(
    definitions: FilterDefinitions,
    default_binding: str,
    resolve_binding: BindingResolver | None = None,
) -> FilterRule | None:
    """Compile the ``order_by`` rule, or return ``None`` when it is disabled."""
    if not definitions.order_by:
        return None
    return order_by_rule(definitions, default_binding, resolve_binding)

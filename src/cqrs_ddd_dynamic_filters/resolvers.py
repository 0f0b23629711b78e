"""
Binding resolvers.

A binding resolver is called with the running query and a binding name
before any field of that binding is accessed.  It joins the binding into
the query when it is missing and must be idempotent: a query that
already carries the binding is returned unchanged, so each relation is
joined at most once and only when a filter actually needs it.

Usage::

    resolve_binding = binding_resolver(
        {
            "role": JoinSpec(Role, lambda q: q.column("user", "role_id") == Role.id),
            "group": lambda q: q.join("group", Group),
        }
    )
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Union

from sqlalchemy.sql.elements import ClauseElement

if TYPE_CHECKING:
    from .query import FilterQuery

logger = logging.getLogger("cqrs_ddd.dynamic_filters")

BindingResolver = Callable[["FilterQuery", str], "FilterQuery"]


def identity_resolver(query: FilterQuery, binding: str) -> FilterQuery:
    """Resolver for queries whose bindings are all joined up front."""
    return query


@dataclass(frozen=True)
class JoinSpec:
    """
    Declarative join of one binding.

    Attributes:
        target: Mapped class, ``aliased()`` class or Core table to join.
        onclause: ON clause, or a callable receiving the running query
            (handy to reference other bindings).  ``None`` lets SQLAlchemy
            infer it from foreign keys.
        isouter: LEFT OUTER JOIN when ``True`` (default), INNER otherwise.
    """

    target: Any
    onclause: Any = None
    isouter: bool = True

    def join(self, query: FilterQuery, name: str) -> FilterQuery:
        onclause = self.onclause
        if onclause is not None and not isinstance(onclause, ClauseElement):
            onclause = onclause(query)
        return query.join(name, self.target, onclause, isouter=self.isouter)


Joiner = Union[JoinSpec, Callable[["FilterQuery"], "FilterQuery"]]


def binding_resolver(joiners: Mapping[str, Joiner]) -> BindingResolver:
    """
    Build an idempotent resolver from per-binding joiners.

    Bindings already present in the query and bindings without a joiner
    are passed through unchanged.
    """
    table = dict(joiners)

    def resolve(query: FilterQuery, binding: str) -> FilterQuery:
        if query.has_binding(binding):
            return query
        joiner = table.get(binding)
        if joiner is None:
            return query
        logger.debug("Resolving binding %r", binding)
        if isinstance(joiner, JoinSpec):
            return joiner.join(query, binding)
        return joiner(query)

    return resolve

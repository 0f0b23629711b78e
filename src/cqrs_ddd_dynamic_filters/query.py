"""
Value-semantic query wrapper with named bindings.

SQLAlchemy ``Select`` statements are generative but carry no notion of
*named* bindings, which the filters need to address joined relations
symbolically (``("role", "name")``) regardless of the physical join
structure.  :class:`FilterQuery` pairs a statement with a mapping of
binding names to entities.  Every operation returns a new instance.

Usage::

    query = FilterQuery.from_entity(User, "user")
    query = query.join("role", Role, User.role_id == Role.id)
    query = query.where(query.column("role", "name") == "admin")
    rows = session.execute(query.statement).scalars().all()
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from enum import Enum
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from sqlalchemy import asc, desc, inspect, nulls_first, nulls_last, select
from sqlalchemy.exc import NoInspectionAvailable
from sqlalchemy.sql.expression import FromClause

from .exceptions import BindingNotFoundError, DuplicateBindingError, FieldNotFoundError

if TYPE_CHECKING:
    from collections.abc import Mapping

    from sqlalchemy import ColumnElement, Select

logger = logging.getLogger("cqrs_ddd.dynamic_filters")


class SortDirection(str, Enum):
    """Sort directions supported by ``order_by`` filters."""

    ASC = "asc"
    DESC = "desc"
    ASC_NULLS_FIRST = "asc_nulls_first"
    ASC_NULLS_LAST = "asc_nulls_last"
    DESC_NULLS_FIRST = "desc_nulls_first"
    DESC_NULLS_LAST = "desc_nulls_last"

    def apply(self, column: Any) -> Any:
        """Return the ``ORDER BY`` element for ``column``."""
        ordered = desc(column) if self.value.startswith("desc") else asc(column)
        if self.value.endswith("nulls_first"):
            return nulls_first(ordered)
        if self.value.endswith("nulls_last"):
            return nulls_last(ordered)
        return ordered


@dataclass(frozen=True, eq=False)
class FilterQuery:
    """
    A ``Select`` statement plus the named bindings it exposes.

    Attributes:
        statement: The wrapped SQLAlchemy statement.
        bindings: ``{name: entity}``; entities are mapped classes,
            ``aliased()`` classes or Core ``FromClause`` objects.
        default_binding: Name of the binding queried from.
    """

    statement: Select[Any]
    bindings: Mapping[str, Any]
    default_binding: str

    def __post_init__(self) -> None:
        if self.default_binding not in self.bindings:
            raise BindingNotFoundError(self.default_binding, list(self.bindings))
        object.__setattr__(self, "bindings", MappingProxyType(dict(self.bindings)))

    @classmethod
    def from_entity(cls, entity: Any, name: str) -> FilterQuery:
        """``SELECT`` from ``entity``, bound under ``name``."""
        return cls(
            statement=select(entity), bindings={name: entity}, default_binding=name
        )

    # ── Bindings ─────────────────────────────────────────────────────

    def has_binding(self, name: str) -> bool:
        return name in self.bindings

    def binding(self, name: str) -> Any:
        try:
            return self.bindings[name]
        except KeyError:
            raise BindingNotFoundError(name, list(self.bindings)) from None

    def column(self, binding: str, field: str) -> Any:
        """
        Resolve ``field`` on the entity bound as ``binding``.

        Raises:
            BindingNotFoundError: If ``binding`` is not part of the query.
            FieldNotFoundError: If the entity has no such field.
        """
        entity = self.binding(binding)

        if isinstance(entity, FromClause):
            try:
                return entity.c[field]
            except KeyError:
                available = list(entity.c.keys())
                raise FieldNotFoundError(field, binding, available) from None

        try:
            descriptors = inspect(entity).mapper.all_orm_descriptors
        except NoInspectionAvailable:
            column = getattr(entity, field, None)
            if column is None:
                raise FieldNotFoundError(field, binding, []) from None
            return column

        if field not in descriptors:
            available = [key for key in descriptors.keys() if not key.startswith("__")]
            raise FieldNotFoundError(field, binding, available)
        return getattr(entity, field)

    def join(
        self,
        name: str,
        target: Any,
        onclause: ColumnElement[bool] | None = None,
        *,
        isouter: bool = True,
        full: bool = False,
    ) -> FilterQuery:
        """
        Join ``target`` into the statement under the binding ``name``.

        Joins are outer joins by default so that filters on optional
        relations do not drop rows they do not restrict.

        Raises:
            DuplicateBindingError: If ``name`` is already bound.
        """
        if name in self.bindings:
            raise DuplicateBindingError(name)
        logger.debug("Joining binding %r into query on %r", name, self.default_binding)
        return replace(
            self,
            statement=self.statement.join(target, onclause, isouter=isouter, full=full),
            bindings={**self.bindings, name: target},
        )

    # ── Restrictions, ordering, pagination ───────────────────────────

    def where(self, *criteria: ColumnElement[bool]) -> FilterQuery:
        return replace(self, statement=self.statement.where(*criteria))

    def order_by(self, *clauses: Any) -> FilterQuery:
        """Append sort keys after any existing ones."""
        return replace(self, statement=self.statement.order_by(*clauses))

    def limit(self, limit: Any) -> FilterQuery:
        """Set the row limit, replacing any previous limit."""
        return replace(self, statement=self.statement.limit(limit))

    def offset(self, offset: Any) -> FilterQuery:
        """Set the row offset, replacing any previous offset."""
        return replace(self, statement=self.statement.offset(offset))

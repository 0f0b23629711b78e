"""Array operators for SQLAlchemy.

Note: The underlying implementation uses PostgreSQL array operators
(``= ANY``, ``&&``, ``@>``) on array-typed columns.  Register different
strategies under the same kinds to target other backends.
"""

from __future__ import annotations

from typing import Any, cast

from sqlalchemy import ColumnElement, any_, literal

from ..kinds import FilterKind
from ..strategy import FilterOperator


def _array_literal(column: Any, value: Any) -> Any:
    return literal(list(value), type_=column.type)


class ListContainsOperator(FilterOperator):
    """``value = ANY(column)``"""

    @property
    def name(self) -> FilterKind:
        return FilterKind.LIST_CONTAINS

    def apply(self, column: Any, value: Any) -> ColumnElement[bool]:
        return cast("ColumnElement[bool]", literal(value) == any_(column))


class ListContainsAnyOperator(FilterOperator):
    """``column && value``"""

    @property
    def name(self) -> FilterKind:
        return FilterKind.LIST_CONTAINS_ANY

    def apply(self, column: Any, value: Any) -> ColumnElement[bool]:
        return cast(
            "ColumnElement[bool]",
            column.op("&&", is_comparison=True)(_array_literal(column, value)),
        )


class ListContainsAllOperator(FilterOperator):
    """``column @> value``"""

    @property
    def name(self) -> FilterKind:
        return FilterKind.LIST_CONTAINS_ALL

    def apply(self, column: Any, value: Any) -> ColumnElement[bool]:
        return cast(
            "ColumnElement[bool]",
            column.op("@>", is_comparison=True)(_array_literal(column, value)),
        )

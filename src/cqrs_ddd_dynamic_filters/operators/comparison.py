"""
Comparison operators: equal_to, equal_to_any, smaller_than and
greater_than_or_equal_to.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, cast

from ..kinds import FilterKind
from ..strategy import FilterOperator

if TYPE_CHECKING:
    from sqlalchemy.sql.elements import ColumnElement


class EqualToOperator(FilterOperator):
    @property
    def name(self) -> FilterKind:
        return FilterKind.EQUAL_TO

    def apply(self, column: Any, value: Any) -> ColumnElement[bool]:
        return cast("ColumnElement[bool]", column == value)


class EqualToAnyOperator(FilterOperator):
    @property
    def name(self) -> FilterKind:
        return FilterKind.EQUAL_TO_ANY

    def apply(self, column: Any, value: Any) -> ColumnElement[bool]:
        return cast("ColumnElement[bool]", column.in_(list(value)))


class SmallerThanOperator(FilterOperator):
    @property
    def name(self) -> FilterKind:
        return FilterKind.SMALLER_THAN

    def apply(self, column: Any, value: Any) -> ColumnElement[bool]:
        return cast("ColumnElement[bool]", column < value)


class GreaterThanOrEqualToOperator(FilterOperator):
    @property
    def name(self) -> FilterKind:
        return FilterKind.GREATER_THAN_OR_EQUAL_TO

    def apply(self, column: Any, value: Any) -> ColumnElement[bool]:
        return cast("ColumnElement[bool]", column >= value)

"""Case-insensitive string operators for SQLAlchemy."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, cast

from ..kinds import FilterKind
from ..strategy import FilterOperator

if TYPE_CHECKING:
    from sqlalchemy.sql.elements import ColumnElement


class StringStartsWithOperator(FilterOperator):
    """``column ILIKE 'value%'``"""

    @property
    def name(self) -> FilterKind:
        return FilterKind.STRING_STARTS_WITH

    def apply(self, column: Any, value: Any) -> ColumnElement[bool]:
        return cast("ColumnElement[bool]", column.ilike(f"{value}%"))


class StringContainsOperator(FilterOperator):
    """``column ILIKE '%value%'``"""

    @property
    def name(self) -> FilterKind:
        return FilterKind.STRING_CONTAINS

    def apply(self, column: Any, value: Any) -> ColumnElement[bool]:
        return cast("ColumnElement[bool]", column.ilike(f"%{value}%"))

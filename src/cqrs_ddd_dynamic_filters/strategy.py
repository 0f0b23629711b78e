"""
Filter operator compilation strategy.

Provides the ``FilterOperator`` interface and a registry keyed by
:class:`~.kinds.FilterKind`.  The compiler looks up one strategy per
enabled field kind, so the SQL emitted for a kind can be swapped (for
example, array operators on a backend other than PostgreSQL) without
touching the dispatch machinery.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from sqlalchemy import ColumnElement

    from .kinds import FilterKind


class FilterOperator(ABC):
    """
    Strategy interface for compiling one filter kind into a
    SQLAlchemy ``ColumnElement[bool]``.
    """

    @property
    @abstractmethod
    def name(self) -> FilterKind:
        """The filter kind this strategy handles."""
        ...

    @abstractmethod
    def apply(
        self,
        column: Any,
        value: Any,
    ) -> ColumnElement[bool]:
        """
        Build a SQLAlchemy filter clause.

        Args:
            column: A SQLAlchemy column or instrumented attribute.
            value: The request-time filter value.

        Returns:
            A SQLAlchemy boolean expression.
        """
        ...


class FilterOperatorRegistry:
    """
    Registry of ``FilterOperator`` instances keyed by :class:`FilterKind`.
    """

    def __init__(self) -> None:
        self._operators: dict[FilterKind, FilterOperator] = {}

    def register(self, operator: FilterOperator) -> None:
        self._operators[operator.name] = operator

    def register_all(self, *operators: FilterOperator) -> None:
        for op in operators:
            self.register(op)

    def unregister(self, name: FilterKind) -> None:
        self._operators.pop(name, None)

    def get(self, name: FilterKind) -> FilterOperator | None:
        return self._operators.get(name)

    def has(self, name: FilterKind) -> bool:
        return name in self._operators

    @property
    def supported_kinds(self) -> set[FilterKind]:
        return set(self._operators.keys())

    def apply(
        self,
        name: FilterKind,
        column: Any,
        value: Any,
    ) -> ColumnElement[bool]:
        """
        Look up the operator and apply.

        Raises:
            ValueError: If no operator is registered for the kind.
        """
        op = self.get(name)
        if op is None:
            raise ValueError(f"Unsupported filter kind: {name}")
        return op.apply(column, value)

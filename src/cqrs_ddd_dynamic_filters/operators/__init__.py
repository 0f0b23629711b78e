"""
SQLAlchemy operator implementations and default registry.

Usage::

    from cqrs_ddd_dynamic_filters.operators import DEFAULT_REGISTRY

    expr = DEFAULT_REGISTRY.apply(FilterKind.EQUAL_TO, User.username, "Dave")
"""

from __future__ import annotations

from ..strategy import FilterOperatorRegistry
from .array import (
    ListContainsAllOperator,
    ListContainsAnyOperator,
    ListContainsOperator,
)
from .comparison import (
    EqualToAnyOperator,
    EqualToOperator,
    GreaterThanOrEqualToOperator,
    SmallerThanOperator,
)
from .string import StringContainsOperator, StringStartsWithOperator


def build_default_registry() -> FilterOperatorRegistry:
    """Create a registry with all built-in filter operators."""
    registry = FilterOperatorRegistry()
    registry.register_all(
        # Comparison
        EqualToOperator(),
        EqualToAnyOperator(),
        SmallerThanOperator(),
        GreaterThanOrEqualToOperator(),
        # String
        StringStartsWithOperator(),
        StringContainsOperator(),
        # Array
        ListContainsOperator(),
        ListContainsAnyOperator(),
        ListContainsAllOperator(),
    )
    return registry


DEFAULT_REGISTRY: FilterOperatorRegistry = build_default_registry()

__all__ = [
    "DEFAULT_REGISTRY",
    "build_default_registry",
    "FilterOperatorRegistry",
]

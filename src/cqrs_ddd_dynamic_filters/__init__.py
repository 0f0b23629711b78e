from .compiler import FieldTransform, compile_filters, order_by_only
from .definitions import (
    Aliased,
    Bare,
    FilterDefinition,
    FilterDefinitions,
    Qualified,
    ResolvedFilter,
    normalize,
    parse_definition,
    parse_definitions,
)
from .dispatch import (
    CompiledFilters,
    CustomFilter,
    UnmatchedFilter,
    apply_filters,
    custom_filter,
)
from .docs import document_filters, generate_filter_docs
from .exceptions import (
    BindingNotFoundError,
    ConfigurationError,
    DispatchError,
    DuplicateBindingError,
    DynamicFilterError,
    FieldNotFoundError,
    InvalidOrderDirectiveError,
    QueryError,
    UnmatchedFilterError,
)
from .keys import KeyForm, KeyType, accepted_keys, classify_key, key_name
from .kinds import FilterKind
from .operators import DEFAULT_REGISTRY, build_default_registry
from .order_by import OrderDirective, parse_order_directive
from .query import FilterQuery, SortDirection
from .resolvers import BindingResolver, JoinSpec, binding_resolver, identity_resolver
from .rules import FilterRule
from .strategy import FilterOperator, FilterOperatorRegistry

__all__ = [
    # Definitions
    "FilterDefinitions",
    "FilterDefinition",
    "Bare",
    "Aliased",
    "Qualified",
    "ResolvedFilter",
    "FilterKind",
    "normalize",
    "parse_definition",
    "parse_definitions",
    # Keys
    "KeyType",
    "KeyForm",
    "key_name",
    "classify_key",
    "accepted_keys",
    # Compilation
    "compile_filters",
    "order_by_only",
    "CompiledFilters",
    "FilterRule",
    "FieldTransform",
    # Dispatch
    "apply_filters",
    "custom_filter",
    "CustomFilter",
    "UnmatchedFilter",
    # Query primitive
    "FilterQuery",
    "SortDirection",
    "OrderDirective",
    "parse_order_directive",
    # Resolvers
    "BindingResolver",
    "JoinSpec",
    "binding_resolver",
    "identity_resolver",
    # Operator strategy
    "FilterOperator",
    "FilterOperatorRegistry",
    "build_default_registry",
    "DEFAULT_REGISTRY",
    # Documentation
    "generate_filter_docs",
    "document_filters",
    # Exceptions
    "DynamicFilterError",
    "ConfigurationError",
    "DispatchError",
    "UnmatchedFilterError",
    "InvalidOrderDirectiveError",
    "QueryError",
    "BindingNotFoundError",
    "FieldNotFoundError",
    "DuplicateBindingError",
]

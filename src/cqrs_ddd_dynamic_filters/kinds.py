from enum import Enum


class FilterKind(str, Enum):
    """Supported standard filter kinds."""

    # Field filters, configured with a list of definitions
    EQUAL_TO = "equal_to"
    EQUAL_TO_ANY = "equal_to_any"
    SMALLER_THAN = "smaller_than"
    GREATER_THAN_OR_EQUAL_TO = "greater_than_or_equal_to"
    STRING_STARTS_WITH = "string_starts_with"
    STRING_CONTAINS = "string_contains"
    LIST_CONTAINS = "list_contains"
    LIST_CONTAINS_ANY = "list_contains_any"
    LIST_CONTAINS_ALL = "list_contains_all"

    # Toggles
    LIMIT = "limit"
    OFFSET = "offset"
    ORDER_BY = "order_by"

    @property
    def is_field_kind(self) -> bool:
        return self in FIELD_KINDS

    @property
    def requires_list(self) -> bool:
        """True if the filter value must be list-shaped for the kind to match."""
        return self in LIST_KINDS


FIELD_KINDS: tuple[FilterKind, ...] = (
    FilterKind.EQUAL_TO,
    FilterKind.EQUAL_TO_ANY,
    FilterKind.SMALLER_THAN,
    FilterKind.GREATER_THAN_OR_EQUAL_TO,
    FilterKind.STRING_STARTS_WITH,
    FilterKind.STRING_CONTAINS,
    FilterKind.LIST_CONTAINS,
    FilterKind.LIST_CONTAINS_ANY,
    FilterKind.LIST_CONTAINS_ALL,
)

LIST_KINDS: frozenset[FilterKind] = frozenset(
    {
        FilterKind.EQUAL_TO_ANY,
        FilterKind.LIST_CONTAINS_ANY,
        FilterKind.LIST_CONTAINS_ALL,
        FilterKind.ORDER_BY,
    }
)

# First match wins when several rules accept the same key.
DISPATCH_ORDER: tuple[FilterKind, ...] = (
    FilterKind.LIMIT,
    FilterKind.OFFSET,
    FilterKind.ORDER_BY,
    FilterKind.EQUAL_TO_ANY,
    FilterKind.EQUAL_TO,
    FilterKind.STRING_STARTS_WITH,
    FilterKind.STRING_CONTAINS,
    FilterKind.LIST_CONTAINS_ANY,
    FilterKind.LIST_CONTAINS_ALL,
    FilterKind.LIST_CONTAINS,
    FilterKind.SMALLER_THAN,
    FilterKind.GREATER_THAN_OR_EQUAL_TO,
)

# Section order of generated documentation.
DOCUMENTATION_ORDER: tuple[FilterKind, ...] = (
    FilterKind.EQUAL_TO,
    FilterKind.EQUAL_TO_ANY,
    FilterKind.SMALLER_THAN,
    FilterKind.GREATER_THAN_OR_EQUAL_TO,
    FilterKind.STRING_STARTS_WITH,
    FilterKind.STRING_CONTAINS,
    FilterKind.LIST_CONTAINS,
    FilterKind.LIST_CONTAINS_ANY,
    FilterKind.LIST_CONTAINS_ALL,
    FilterKind.ORDER_BY,
    FilterKind.LIMIT,
    FilterKind.OFFSET,
)

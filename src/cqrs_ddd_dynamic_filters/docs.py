"""
Markdown documentation for filter definitions.

The docs are generated from the same definitions the dispatch table is
compiled from, so the documented filters cannot drift from the
supported ones.  Filters handled by custom code can be documented too by
passing ``extras``, a mapping of filter kind onto definitions::

    @document_filters(DEFINITIONS, extras={"equal_to": ["group_name"]})
    def list_users(filters):
        \"\"\"
        List users.

        {filter_docs}
        \"\"\"

This module only depends on the definitions, never on SQLAlchemy.
"""

from __future__ import annotations

import textwrap
from collections.abc import Callable, Mapping
from typing import Any, TypeVar

from .definitions import FilterDefinition, FilterDefinitions, parse_definitions
from .keys import check_key_types, key_name
from .kinds import DOCUMENTATION_ORDER, FilterKind

F = TypeVar("F", bound=Callable[..., Any])

PLACEHOLDER = "{filter_docs}"

_KEY_TYPES = {
    (True, True): (
        "Filter keys may be both symbols (`Enum` members) and strings, "
        'e.g. {UserFilter.USERNAME: "Dave123", "first_name": "Dave"}'
    ),
    (True, False): (
        "Filter keys may only be symbols (`Enum` members), "
        'e.g. {UserFilter.USERNAME: "Dave123"}'
    ),
    (False, True): 'Filter keys may only be strings, e.g. {"first_name": "Dave"}',
}

_FIELD_SECTIONS: dict[FilterKind, tuple[str, str, str]] = {
    FilterKind.EQUAL_TO: (
        "Equal-to filters",
        "The field's value must be equal to the filter value.",
        "query.where(column == filter_value)",
    ),
    FilterKind.EQUAL_TO_ANY: (
        "Equal-to-any filters",
        "The field's value must be equal to any of the filter values.",
        "query.where(column.in_(filter_value))",
    ),
    FilterKind.SMALLER_THAN: (
        "Smaller-than filters",
        "The field's value must be smaller than the filter's value.",
        "query.where(column < filter_value)",
    ),
    FilterKind.GREATER_THAN_OR_EQUAL_TO: (
        "Greater-than-or-equal-to filters",
        "The field's value must be greater than or equal to the filter's value.",
        "query.where(column >= filter_value)",
    ),
    FilterKind.STRING_STARTS_WITH: (
        "String-starts-with filters",
        "The string-type field's value must start with the filter's value.",
        'query.where(column.ilike(f"{filter_value}%"))',
    ),
    FilterKind.STRING_CONTAINS: (
        "String-contains filters",
        "The string-type field's value must contain the filter's value.",
        'query.where(column.ilike(f"%{filter_value}%"))',
    ),
    FilterKind.LIST_CONTAINS: (
        "List-contains filters",
        "The array-type field's value must contain the filter's value "
        "(set membership).",
        "query.where(literal(filter_value) == any_(column))",
    ),
    FilterKind.LIST_CONTAINS_ANY: (
        "List-contains-any filters",
        "The array-type field's value must contain any of the filter's values "
        "(set intersection).",
        'query.where(column.op("&&")(filter_value))',
    ),
    FilterKind.LIST_CONTAINS_ALL: (
        "List-contains-all filters",
        "The array-type field's value must contain all of the filter's values "
        "(subset).",
        'query.where(column.op("@>")(filter_value))',
    ),
}

# Kinds rendered as a "filter name | field" table instead of a list
_TABLE_HEADERS = {
    FilterKind.SMALLER_THAN: "Must be smaller than",
    FilterKind.GREATER_THAN_OR_EQUAL_TO: "Must be greater than or equal to",
}

_ORDER_BY = """\
## Order-by sorting

Order-by filters do not actually filter the result set, but sort it according to the filter's value(s).

Order-by filters take a list argument, that can consist of the following elements:
- `"field"` will sort on the specified field of the default binding in ascending order
- `("direction", "field")` will sort on the specified field of the default binding in the specified direction
- `("direction", ("binding", "field"))` will sort on the specified field of the specified binding in the specified direction.

Directions and fields may be given as strings or as symbols, whichever key types are enabled.

All fields present in the query on any named binding are supported, including field name aliases specified in the filter definitions under equal_to.
For example, in case of filter definitions `{"equal_to": [("role_name", ("role", "name"))]}`, the following will work: `{"order_by": [("desc", "role_name")]}`.

The supported directions are `asc`, `desc`, `asc_nulls_first`, `asc_nulls_last`, `desc_nulls_first` and `desc_nulls_last`.

"""

_LIMIT = """\
## Limit filter

The `limit` filter sets a maximum for the number of rows in the result set and may be used for pagination.

"""

_OFFSET = """\
## Offset filter

The `offset` filter skips a number of rows in the result set and may be used for pagination.

"""


def _key_types_docs(definitions: FilterDefinitions) -> str:
    check_key_types(definitions)
    text = _KEY_TYPES[(definitions.symbol_keys, definitions.string_keys)]
    return f"## Filter key types\n\n{text}\n\n"


def _entries(
    definitions: FilterDefinitions,
    extras: Mapping[str, Any],
    kind: FilterKind,
) -> list[FilterDefinition]:
    extra = parse_definitions(extras.get(kind.value), path=f"extras.{kind.value}")
    return sorted([*definitions.for_kind(kind), *extra], key=lambda d: d.key)


def _to_list(entries: list[FilterDefinition]) -> str:
    lines = []
    for entry in entries:
        field = entry.display_field
        if field is None:
            lines.append(f"* `{entry.key}`")
        else:
            lines.append(f"* `{entry.key}` (actual field is `{field}`)")
    return "\n".join(lines)


def _to_table(entries: list[FilterDefinition]) -> str:
    return "\n".join(
        f"`{entry.key}` | `{entry.display_field or entry.key}`" for entry in entries
    )


def _field_docs(kind: FilterKind, entries: list[FilterDefinition]) -> str:
    if not entries:
        return ""
    title, description, code = _FIELD_SECTIONS[kind]
    lines = [
        f"## {title}",
        "",
        description,
        "The equivalent SQLAlchemy code is",
        "```",
        code,
        "```",
    ]
    if kind is FilterKind.EQUAL_TO:
        lines.append(
            'Additionally, aliases defined in equal-to filters, like '
            '`("role_name", ("role", "name"))` can be used in `order_by` as well.'
        )
    lines.append("The following filter names are supported:")
    header = _TABLE_HEADERS.get(kind)
    if header is None:
        lines.append(_to_list(entries))
    else:
        lines.extend(["", f"Filter name | {header}", "--- | ---", _to_table(entries)])
    return "\n".join(lines) + "\n\n"


def generate_filter_docs(
    definitions: FilterDefinitions | Mapping[str, Any],
    extras: Mapping[Any, Any] | None = None,
) -> str:
    """
    Generate markdown documentation for ``definitions``.

    Args:
        definitions: Filter definitions, typed or as a plain mapping.
        extras: Additional ``{kind: [definitions]}`` to document, e.g. for
            filters implemented as custom filters.

    Returns:
        The markdown text.  Equal inputs always produce identical output.

    Raises:
        ConfigurationError: If no key type is enabled or an entry is malformed.
    """
    if not isinstance(definitions, FilterDefinitions):
        definitions = FilterDefinitions.from_mapping(definitions)
    extra_entries = {
        key_name(kind): entries for kind, entries in (extras or {}).items()
    }

    parts = [_key_types_docs(definitions)]
    for kind in DOCUMENTATION_ORDER:
        if kind.is_field_kind:
            parts.append(_field_docs(kind, _entries(definitions, extra_entries, kind)))
        elif kind is FilterKind.ORDER_BY and definitions.order_by:
            parts.append(_ORDER_BY)
        elif kind is FilterKind.LIMIT and definitions.limit:
            parts.append(_LIMIT)
        elif kind is FilterKind.OFFSET and definitions.offset:
            parts.append(_OFFSET)
    return "".join(parts)


def document_filters(
    definitions: FilterDefinitions | Mapping[str, Any],
    extras: Mapping[Any, Any] | None = None,
) -> Callable[[F], F]:
    """
    Decorator adding filter docs to a function's docstring.

    A ``{filter_docs}`` placeholder in the docstring is replaced by the
    docs, indented like the placeholder line.  Without a placeholder the
    docs are appended.
    """
    docs = generate_filter_docs(definitions, extras).rstrip("\n")

    def decorator(fn: F) -> F:
        doc = fn.__doc__ or ""
        for line in doc.splitlines():
            if PLACEHOLDER in line:
                indent = line[: len(line) - len(line.lstrip())]
                rendered = textwrap.indent(docs, indent)[len(indent) :]
                fn.__doc__ = doc.replace(PLACEHOLDER, rendered)
                return fn
        fn.__doc__ = f"{doc.rstrip()}\n\n{docs}" if doc.strip() else docs
        return fn

    return decorator

import pytest
from models import DEFINITIONS

from cqrs_ddd_dynamic_filters import (
    ConfigurationError,
    FilterDefinitions,
    compile_filters,
    document_filters,
    generate_filter_docs,
)

SMALL = {
    "string_keys": True,
    "limit": True,
    "equal_to": ["username", ("role_name", ("role", "name"))],
    "smaller_than": [("balance_lt", "balance")],
}

EXPECTED = """\
## Filter key types

Filter keys may only be strings, e.g. {"first_name": "Dave"}

## Equal-to filters

The field's value must be equal to the filter value.
The equivalent SQLAlchemy code is
```
query.where(column == filter_value)
```
Additionally, aliases defined in equal-to filters, like `("role_name", ("role", "name"))` can be used in `order_by` as well.
The following filter names are supported:
* `role_name` (actual field is `role.name`)
* `username`

## Smaller-than filters

The field's value must be smaller than the filter's value.
The equivalent SQLAlchemy code is
```
query.where(column < filter_value)
```
The following filter names are supported:

Filter name | Must be smaller than
--- | ---
`balance_lt` | `balance`

## Limit filter

The `limit` filter sets a maximum for the number of rows in the result set and may be used for pagination.

"""


def test_golden_output():
    assert generate_filter_docs(SMALL) == EXPECTED


def test_output_is_deterministic():
    reordered = dict(reversed(list(DEFINITIONS.items())))

    assert generate_filter_docs(DEFINITIONS) == generate_filter_docs(DEFINITIONS)
    assert generate_filter_docs(DEFINITIONS) == generate_filter_docs(reordered)


def test_sections_follow_documentation_order():
    docs = generate_filter_docs(DEFINITIONS)
    titles = [line for line in docs.splitlines() if line.startswith("## ")]

    assert titles == [
        "## Filter key types",
        "## Equal-to filters",
        "## Equal-to-any filters",
        "## Smaller-than filters",
        "## Greater-than-or-equal-to filters",
        "## String-starts-with filters",
        "## String-contains filters",
        "## List-contains filters",
        "## List-contains-any filters",
        "## List-contains-all filters",
        "## Order-by sorting",
        "## Limit filter",
        "## Offset filter",
    ]


def test_entries_are_sorted_by_name():
    docs = generate_filter_docs(DEFINITIONS)
    assert docs.index("* `address`") < docs.index("* `balance`") < docs.index("* `id`")
    assert docs.index("`balance_lt` | `balance`") < docs.index(
        "`inserted_before` | `inserted_at`"
    )
    assert "`role_inserted_before` | `role.inserted_at`" in docs


def test_empty_sections_are_omitted():
    docs = generate_filter_docs({"symbol_keys": True, "equal_to": ["id"]})

    assert "## Equal-to filters" in docs
    assert "## Smaller-than filters" not in docs
    assert "## Order-by sorting" not in docs


@pytest.mark.parametrize(
    ("flags", "expected"),
    [
        ({"symbol_keys": True}, "Filter keys may only be symbols"),
        ({"string_keys": True}, "Filter keys may only be strings"),
        ({"symbol_keys": True, "string_keys": True}, "may be both symbols"),
    ],
)
def test_key_types_section(flags, expected):
    assert expected in generate_filter_docs(flags)


def test_missing_key_types_raise():
    with pytest.raises(ConfigurationError):
        generate_filter_docs({"equal_to": ["id"]})


def test_extras_are_merged_and_sorted():
    docs = generate_filter_docs(
        SMALL, extras={"equal_to": ["group_name"], "list_contains": ["tags"]}
    )

    assert docs.index("* `group_name`") < docs.index("* `role_name`")
    assert "## List-contains filters" in docs
    assert "* `tags`" in docs


def test_malformed_extras_raise():
    with pytest.raises(ConfigurationError) as exc_info:
        generate_filter_docs(SMALL, extras={"equal_to": [42]})

    assert exc_info.value.path == "extras.equal_to"


def test_accepts_typed_definitions():
    typed = FilterDefinitions.from_mapping(SMALL)
    assert generate_filter_docs(typed) == EXPECTED


def test_compiled_table_docs_match():
    table = compile_filters(SMALL, "user")
    assert table.docs() == EXPECTED
    assert "* `group_name`" in table.docs({"equal_to": ["group_name"]})


def test_document_filters_replaces_placeholder():
    @document_filters(SMALL)
    def list_users(filters):
        """
        List users.

        {filter_docs}

        Returns a query.
        """

    doc = list_users.__doc__
    assert "{filter_docs}" not in doc
    assert "        ## Filter key types\n" in doc
    assert "        * `role_name` (actual field is `role.name`)\n" in doc
    assert doc.rstrip().endswith("Returns a query.")


def test_document_filters_appends_without_placeholder():
    @document_filters(SMALL)
    def list_users(filters):
        """List users."""

    assert list_users.__doc__.startswith("List users.\n\n## Filter key types")


def test_document_filters_without_docstring():
    @document_filters(SMALL)
    def list_users(filters):
        pass

    assert list_users.__doc__ == EXPECTED.rstrip("\n")

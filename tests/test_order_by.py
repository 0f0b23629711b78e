import pytest
from models import UserFilter, compiled

from cqrs_ddd_dynamic_filters import (
    FieldNotFoundError,
    InvalidOrderDirectiveError,
    OrderDirective,
    SortDirection,
    UnmatchedFilterError,
    compile_filters,
    parse_order_directive,
)


@pytest.fixture
def table(definitions, resolve_binding):
    return compile_filters(definitions, "user", resolve_binding)


@pytest.mark.parametrize(
    ("directive", "expected"),
    [
        ("username", OrderDirective(SortDirection.ASC, None, "username")),
        (UserFilter.USERNAME, OrderDirective(SortDirection.ASC, None, "username")),
        (("desc", "username"), OrderDirective(SortDirection.DESC, None, "username")),
        (
            ["desc_nulls_last", ["role", "name"]],
            OrderDirective(SortDirection.DESC_NULLS_LAST, "role", "name"),
        ),
        (
            (SortDirection.ASC, ("user", "id")),
            OrderDirective(SortDirection.ASC, "user", "id"),
        ),
    ],
)
def test_parse_order_directive(directive, expected):
    assert parse_order_directive(directive) == expected


@pytest.mark.parametrize(
    "directive",
    [
        42,
        ("desc",),
        ("desc", "username", "extra"),
        ("desc", ("role",)),
        ("desc", 3),
    ],
)
def test_malformed_directive_raises(directive):
    with pytest.raises(InvalidOrderDirectiveError) as exc_info:
        parse_order_directive(directive)

    assert exc_info.value.to_dict()["error"] == "INVALID_ORDER_DIRECTIVE"


def test_unknown_direction_raises():
    with pytest.raises(InvalidOrderDirectiveError, match="unsupported direction"):
        parse_order_directive(("sideways", "username"))


def test_alias_resolves_like_equal_to(table, query, join_calls):
    by_alias = compiled(table.apply(query, {"order_by": [("desc", "role_name")]}))
    explicit = compiled(
        table.apply(query, {"order_by": [("desc", ("role", "name"))]})
    )

    assert by_alias == explicit
    assert by_alias.endswith("ORDER BY roles.name DESC")
    assert join_calls == ["role", "role"]


def test_plain_field_sorts_on_default_binding(table, query):
    sql = compiled(table.apply(query, {"order_by": ["address"]}))
    assert sql.endswith("ORDER BY users.address ASC")


def test_directives_accumulate_left_to_right(table, query):
    sql = compiled(
        table.apply(
            query, {"order_by": [("asc", ("user", "username")), ("desc", "balance")]}
        )
    )
    assert sql.endswith("ORDER BY users.username ASC, users.balance DESC")


def test_repeated_order_by_filters_accumulate(table, query):
    sql = compiled(
        table.apply(
            query,
            [("order_by", ["username"]), (UserFilter.ORDER_BY, [("desc", "id")])],
        )
    )
    assert sql.endswith("ORDER BY users.username ASC, users.id DESC")


def test_order_by_is_not_commutative(table, query):
    first = compiled(table.apply(query, {"order_by": ["username", "id"]}))
    second = compiled(table.apply(query, {"order_by": ["id", "username"]}))

    assert first != second


def test_non_list_value_falls_through(table, query):
    with pytest.raises(UnmatchedFilterError):
        table.apply(query, {"order_by": "username"})


def test_unknown_field_raises_from_query(table, query):
    with pytest.raises(FieldNotFoundError) as exc_info:
        table.apply(query, {"order_by": [("desc", "usernme")]})

    assert exc_info.value.suggestions[0] == "username"


def test_single_directive_tuple_is_not_a_directive_list(table, query):
    # A tuple is one directive, never the list of directives
    with pytest.raises(UnmatchedFilterError):
        table.apply(query, {"order_by": ("desc", "username")})

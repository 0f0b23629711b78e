import pytest
from models import User, UserFilter, compiled

from cqrs_ddd_dynamic_filters import (
    ConfigurationError,
    UnmatchedFilter,
    UnmatchedFilterError,
    apply_filters,
    compile_filters,
    custom_filter,
)


@pytest.fixture
def table(definitions, resolve_binding):
    return compile_filters(definitions, "user", resolve_binding)


@custom_filter("group_name")
def by_group_name(query, value):
    return query.where(query.column("user", "group_name") == value)


@custom_filter("address")
def by_street(query, value):
    return query.where(User.address.like(f"{value}%"))


def _where(query):
    return set(compiled(query).split("WHERE ")[1].split(" AND "))


def test_custom_filter_handles_unknown_name(table, query):
    sql = compiled(table.apply(query, {"group_name": "admins"}, custom=[by_group_name]))
    assert "WHERE users.group_name = :group_name_1" in sql


def test_custom_filter_wins_over_standard_filter(table, query):
    sql = compiled(table.apply(query, {"address": "Main"}, custom=by_street))

    assert "users.address LIKE :address_1" in sql
    assert "users.address = " not in sql


def test_custom_filter_accepts_symbol_and_string_keys(query):
    @custom_filter(UserFilter.ADDRESS)
    def by_address(query, value):
        return query.where(User.address == value)

    by_symbol = apply_filters(query, {UserFilter.ADDRESS: "x"}, custom=[by_address])
    by_string = apply_filters(query, {"address": "x"}, custom=[by_address])

    assert compiled(by_symbol) == compiled(by_string)


def test_custom_filter_requiring_a_list(query):
    @custom_filter("ids", requires_list=True)
    def by_ids(query, value):
        return query.where(User.id.in_(value))

    narrowed = apply_filters(query, {"ids": [1, 2]}, custom=by_ids)
    assert "users.id IN" in compiled(narrowed)
    with pytest.raises(UnmatchedFilterError):
        apply_filters(query, {"ids": 1}, custom=by_ids)


def test_raw_callable_returning_none_passes_filter_on(table, query):
    seen = []

    def spy(key, value, query):
        seen.append(key)
        return None

    sql = compiled(table.apply(query, {"address": "Main St"}, custom=[spy]))

    assert seen == ["address"]
    assert "users.address = :address_1" in sql


def test_unmatched_filter_raises_with_suggestions(table, query):
    with pytest.raises(UnmatchedFilterError) as exc_info:
        table.apply(query, {"adress": "Main St"})

    error = exc_info.value
    assert error.key == "adress"
    assert "address" in error.suggestions
    assert "Did you mean" in str(error)
    assert error.to_dict()["error"] == "UNMATCHED_FILTER"


def test_unmatched_filter_ignored(table, query):
    narrowed = table.apply(
        query, {"unknown": 1, "address": "x"}, on_unmatched=UnmatchedFilter.IGNORE
    )
    assert _where(narrowed) == {"users.address = :address_1"}


def test_unmatched_policy_accepts_plain_strings(table, query):
    assert table.apply(query, {"unknown": 1}, on_unmatched="ignore") is query


def test_unmatched_filter_fallback(table, query):
    calls = []

    def fallback(key, value, query):
        calls.append((key, value))
        return query

    table.apply(query, {"unknown": 1}, on_unmatched=fallback)

    assert calls == [("unknown", 1)]


def test_unsupported_key_types_are_unmatched(table, query):
    with pytest.raises(UnmatchedFilterError):
        table.apply(query, {42: "x"})


def test_apply_filters_without_table_uses_custom_filters_only(query):
    sql = compiled(apply_filters(query, {"group_name": "a"}, custom=[by_group_name]))
    assert "users.group_name" in sql

    with pytest.raises(UnmatchedFilterError):
        apply_filters(query, {"address": "x"})


def test_apply_filters_with_table(table, query):
    assert compiled(apply_filters(query, {"address": "x"}, table)) == compiled(
        table.apply(query, {"address": "x"})
    )


def test_apply_filter_single(table, query):
    narrowed = table.apply_filter(query, "username", "Dave")
    assert _where(narrowed) == {"users.username = :username_1"}


def test_match_returns_first_matching_rule(table):
    assert table.match("address", ["a"]).kind.value == "equal_to_any"
    assert table.match("address", "a").kind.value == "equal_to"
    assert table.match("nothing", "a") is None


def test_conjunctive_filters_commute(table, query):
    forward = table.apply(query, [("address", "x"), ("username", "y")])
    backward = table.apply(query, [("username", "y"), ("address", "x")])

    assert _where(forward) == _where(backward)


def test_filters_are_applied_to_an_unrelated_query_without_side_effects(
    table, query
):
    table.apply(query, {"address": "x", "order_by": ["id"], "limit": 1})
    assert "WHERE" not in compiled(query)


def test_unknown_unmatched_policy_raises_configuration_error(table, query):
    with pytest.raises(ConfigurationError) as exc_info:
        table.apply(query, {"address": "x"}, on_unmatched="error")

    assert exc_info.value.path == "on_unmatched"
    assert "'error'" in str(exc_info.value)


def test_unknown_unmatched_policy_is_rejected_before_any_filter(query):
    with pytest.raises(ConfigurationError):
        apply_filters(query, {}, on_unmatched="error")

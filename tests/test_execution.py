"""Run compiled filters against an in-memory SQLite database."""

import pytest
from sqlalchemy import Column, ForeignKey, Integer, String, create_engine
from sqlalchemy.orm import DeclarativeBase, Session

from cqrs_ddd_dynamic_filters import (
    FilterQuery,
    JoinSpec,
    binding_resolver,
    compile_filters,
)


class Base(DeclarativeBase):
    pass


class TeamRecord(Base):
    __tablename__ = "teams"
    id = Column(Integer, primary_key=True)
    name = Column(String)


class MemberRecord(Base):
    __tablename__ = "members"
    id = Column(Integer, primary_key=True)
    username = Column(String)
    balance = Column(Integer)
    team_id = Column(Integer, ForeignKey("teams.id"))


FILTERS = compile_filters(
    {
        "string_keys": True,
        "limit": True,
        "offset": True,
        "order_by": True,
        "equal_to": ["username", ("team_name", ("team", "name"))],
        "equal_to_any": ["username"],
        "smaller_than": [("balance_lt", "balance")],
        "greater_than_or_equal_to": [("balance_gte", "balance")],
        "string_starts_with": [("username_prefix", "username")],
        "string_contains": [("username_search", "username")],
    },
    "member",
    binding_resolver({"team": JoinSpec(TeamRecord)}),
)


@pytest.fixture
def session():
    engine = create_engine("sqlite://")
    Base.metadata.create_all(engine)
    with Session(engine) as session:
        red = TeamRecord(id=1, name="red")
        blue = TeamRecord(id=2, name="blue")
        session.add_all(
            [
                red,
                blue,
                MemberRecord(id=1, username="Dave", balance=10, team_id=1),
                MemberRecord(id=2, username="david", balance=20, team_id=2),
                MemberRecord(id=3, username="Anne", balance=30, team_id=1),
                MemberRecord(id=4, username="bob", balance=40, team_id=None),
            ]
        )
        session.commit()
        yield session
    engine.dispose()


def _ids(session, filters):
    query = FILTERS.apply(FilterQuery.from_entity(MemberRecord, "member"), filters)
    return [member.id for member in session.execute(query.statement).scalars()]


def test_no_filters_returns_everything(session):
    assert sorted(_ids(session, {})) == [1, 2, 3, 4]


def test_equality_and_ranges(session):
    assert _ids(session, {"username": "Anne"}) == [3]
    assert sorted(_ids(session, {"balance_gte": 20, "balance_lt": 40})) == [2, 3]


def test_equal_to_any(session):
    assert sorted(_ids(session, {"username": ["Dave", "bob"]})) == [1, 4]


def test_string_filters_ignore_case(session):
    assert sorted(_ids(session, {"username_prefix": "da"})) == [1, 2]
    assert sorted(_ids(session, {"username_search": "NN"})) == [3]


def test_filter_on_joined_binding_keeps_unrelated_rows_out(session):
    assert sorted(_ids(session, {"team_name": "red"})) == [1, 3]


def test_order_by_alias_with_outer_join(session):
    ids = _ids(session, {"order_by": [("desc", "team_name"), "id"]})

    # SQLite sorts NULL lowest, so the team-less member comes last
    assert ids == [1, 3, 2, 4]


def test_pagination(session):
    filters = {"order_by": [("asc", "id")], "limit": 2, "offset": 1}
    assert _ids(session, filters) == [2, 3]

"""Shared fixtures for dynamic filter tests."""

from __future__ import annotations

import pytest
from models import DEFINITIONS, Role, User

from cqrs_ddd_dynamic_filters import (
    FilterDefinitions,
    FilterQuery,
    JoinSpec,
    binding_resolver,
)


@pytest.fixture
def definitions():
    return FilterDefinitions.from_mapping(DEFINITIONS)


@pytest.fixture
def join_calls():
    """Records every join performed by the ``resolve_binding`` fixture."""
    return []


@pytest.fixture
def resolve_binding(join_calls):
    def join_role(query):
        join_calls.append("role")
        return query.join("role", Role, User.role_id == Role.id)

    return binding_resolver({"role": join_role})


@pytest.fixture
def declarative_resolver():
    return binding_resolver({"role": JoinSpec(Role)})


@pytest.fixture
def query():
    return FilterQuery.from_entity(User, "user")

"""
Filter definitions: the static configuration of standard filters.

A filter definition maps a filter name onto a field of a named binding.
It may take the following forms:

- ``"username"``: filter name and field of the default binding
- ``("username_search", "username")``: the filter name differs from the
  field of the default binding
- ``("role_name", ("role", "name"))``: the field lives on another named
  binding

Each form is parsed into a typed :class:`FilterDefinition`
(:class:`Bare`, :class:`Aliased` or :class:`Qualified`), so malformed
configuration fails when the definitions are built, not at first use.

Usage::

    definitions = FilterDefinitions.from_mapping(
        {
            "symbol_keys": True,
            "string_keys": True,
            "limit": True,
            "order_by": True,
            "equal_to": ["id", "username", ("role_name", ("role", "name"))],
            "string_contains": [("username_search", "username")],
        }
    )
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any, NamedTuple

from pydantic import (
    BaseModel,
    ConfigDict,
    InstanceOf,
    ValidationInfo,
    field_validator,
)
from pydantic import ValidationError as PydanticValidationError

from .exceptions import ConfigurationError
from .keys import is_name, key_name
from .kinds import FIELD_KINDS, FilterKind


class ResolvedFilter(NamedTuple):
    """A filter definition with its binding made explicit."""

    key: str
    binding: str
    field: str


class FilterDefinition(ABC):
    """Base of the three filter definition forms."""

    key: str

    @abstractmethod
    def resolve(self, default_binding: str) -> ResolvedFilter:
        """Return the ``(key, binding, field)`` triple."""
        ...

    @property
    @abstractmethod
    def display_field(self) -> str | None:
        """Actual field shown in documentation, ``None`` if equal to the key."""
        ...


@dataclass(frozen=True)
class Bare(FilterDefinition):
    """Filter name equals the field name on the default binding."""

    key: str

    def resolve(self, default_binding: str) -> ResolvedFilter:
        return ResolvedFilter(self.key, default_binding, self.key)

    @property
    def display_field(self) -> str | None:
        return None


@dataclass(frozen=True)
class Aliased(FilterDefinition):
    """Filter name differs from the field name on the default binding."""

    key: str
    field: str

    def resolve(self, default_binding: str) -> ResolvedFilter:
        return ResolvedFilter(self.key, default_binding, self.field)

    @property
    def display_field(self) -> str | None:
        return self.field


@dataclass(frozen=True)
class Qualified(FilterDefinition):
    """Filter on a field of an explicitly named binding."""

    key: str
    binding: str
    field: str

    def resolve(self, default_binding: str) -> ResolvedFilter:
        return ResolvedFilter(self.key, self.binding, self.field)

    @property
    def display_field(self) -> str | None:
        return f"{self.binding}.{self.field}"


_SHAPES = "'key', ('key', 'field') or ('key', ('binding', 'field'))"


def parse_definition(raw: Any, path: str | None = None) -> FilterDefinition:
    """
    Parse one raw filter definition.

    Raises:
        ConfigurationError: If ``raw`` is not one of the supported shapes.
    """
    if isinstance(raw, FilterDefinition):
        return raw
    if is_name(raw):
        return Bare(key_name(raw))
    if isinstance(raw, tuple | list) and len(raw) == 2 and is_name(raw[0]):
        key, target = raw
        if is_name(target):
            return Aliased(key_name(key), key_name(target))
        if (
            isinstance(target, tuple | list)
            and len(target) == 2
            and all(is_name(part) for part in target)
        ):
            return Qualified(key_name(key), key_name(target[0]), key_name(target[1]))
    raise ConfigurationError(
        f"Unsupported filter definition {raw!r}; expected {_SHAPES}", path=path
    )


def parse_definitions(
    raw: Any, path: str | None = None
) -> tuple[FilterDefinition, ...]:
    """
    Parse the definition list of one filter kind.

    ``None`` means the kind is not configured.  A mapping is read as
    ``{key: field}`` pairs.  Keys must be unique within the list.
    """
    if raw is None:
        return ()
    if isinstance(raw, Mapping):
        items: list[Any] = list(raw.items())
    elif isinstance(raw, Iterable) and not isinstance(raw, str | bytes):
        items = list(raw)
    else:
        raise ConfigurationError(
            f"Expected a list of filter definitions, got {raw!r}", path=path
        )

    definitions = tuple(parse_definition(item, path=path) for item in items)

    seen: set[str] = set()
    duplicates: list[str] = []
    for definition in definitions:
        if definition.key in seen:
            duplicates.append(definition.key)
        seen.add(definition.key)
    if duplicates:
        raise ConfigurationError(
            f"Duplicate filter names: {', '.join(sorted(set(duplicates)))}",
            path=path,
        )
    return definitions


def normalize(entry: Any, default_binding: str) -> ResolvedFilter:
    """Normalize a raw or typed definition into ``(key, binding, field)``."""
    return parse_definition(entry).resolve(default_binding)


class FilterDefinitions(BaseModel):
    """
    Immutable filter configuration consumed by the compiler and the
    documentation generator.

    Attributes:
        symbol_keys: Accept ``Enum`` members as filter keys.
        string_keys: Accept plain strings as filter keys.
        limit: Enable the ``limit`` filter.
        offset: Enable the ``offset`` filter.
        order_by: Enable the ``order_by`` filter.
        equal_to: ``field == value``.  Aliases declared here can be used
            in ``order_by`` as well.
        equal_to_any: ``field IN value``.  Names may repeat ``equal_to``
            names; only list values match.
        smaller_than: ``field < value``.
        greater_than_or_equal_to: ``field >= value``.
        string_starts_with: Case-insensitive prefix match.
        string_contains: Case-insensitive substring match.
        list_contains: Array field contains the value (set membership).
        list_contains_any: Array field shares any value (set intersection).
        list_contains_all: Array field contains all values (subset).
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    symbol_keys: bool = False
    string_keys: bool = False
    limit: bool = False
    offset: bool = False
    order_by: bool = False

    equal_to: tuple[InstanceOf[FilterDefinition], ...] = ()
    equal_to_any: tuple[InstanceOf[FilterDefinition], ...] = ()
    smaller_than: tuple[InstanceOf[FilterDefinition], ...] = ()
    greater_than_or_equal_to: tuple[InstanceOf[FilterDefinition], ...] = ()
    string_starts_with: tuple[InstanceOf[FilterDefinition], ...] = ()
    string_contains: tuple[InstanceOf[FilterDefinition], ...] = ()
    list_contains: tuple[InstanceOf[FilterDefinition], ...] = ()
    list_contains_any: tuple[InstanceOf[FilterDefinition], ...] = ()
    list_contains_all: tuple[InstanceOf[FilterDefinition], ...] = ()

    def __init__(self, **data: Any) -> None:
        try:
            super().__init__(**data)
        except PydanticValidationError as exc:
            raise ConfigurationError(_collect_errors(exc)) from exc

    @field_validator(*(kind.value for kind in FIELD_KINDS), mode="before")
    @classmethod
    def _parse_kind(
        cls, value: Any, info: ValidationInfo
    ) -> tuple[FilterDefinition, ...]:
        try:
            return parse_definitions(value, path=info.field_name)
        except ConfigurationError as exc:
            raise ValueError(str(exc)) from exc

    @classmethod
    def from_mapping(cls, data: Mapping[str | FilterKind, Any]) -> FilterDefinitions:
        """Build definitions from a plain mapping, e.g. loaded settings."""
        return cls(**{key_name(key): value for key, value in data.items()})

    def for_kind(self, kind: FilterKind) -> tuple[FilterDefinition, ...]:
        """Definitions configured for a field kind (empty for toggles)."""
        if not kind.is_field_kind:
            return ()
        definitions: tuple[FilterDefinition, ...] = getattr(self, kind.value)
        return definitions

    def is_enabled(self, kind: FilterKind) -> bool:
        if kind.is_field_kind:
            return bool(self.for_kind(kind))
        return bool(getattr(self, kind.value))

    def aliases(self, default_binding: str) -> dict[str, tuple[str, str]]:
        """``equal_to`` names mapped onto their ``(binding, field)``."""
        return {
            resolved.key: (resolved.binding, resolved.field)
            for resolved in (d.resolve(default_binding) for d in self.equal_to)
        }

    def bindings(self, default_binding: str) -> set[str]:
        """All bindings referenced by field definitions."""
        return {
            definition.resolve(default_binding).binding
            for kind in FIELD_KINDS
            for definition in self.for_kind(kind)
        }

    def with_only_order_by(self) -> FilterDefinitions:
        """Keep the key types, enable only ``order_by``."""
        return FilterDefinitions(
            symbol_keys=self.symbol_keys,
            string_keys=self.string_keys,
            order_by=True,
        )


def _collect_errors(exc: PydanticValidationError) -> dict[str, list[str]]:
    errors: dict[str, list[str]] = {}
    for error in exc.errors():
        loc = ".".join(str(p) for p in error.get("loc", ())) or "__root__"
        msg = error.get("msg", "validation error")
        errors.setdefault(loc, []).append(msg)
    return errors

"""
Dynamic filter exception hierarchy.

All exceptions inherit from ``DynamicFilterError`` and provide
``to_dict()`` for API-friendly error responses.

Three families exist:

* :class:`ConfigurationError`: the filter definitions are unusable.
  Raised while compiling, i.e. at application start-up.
* :class:`DispatchError`: a request-time filter could not be applied.
* :class:`QueryError`: the query primitive could not resolve a binding
  or a field.  The engine never catches these.
"""

from __future__ import annotations

from difflib import get_close_matches
from typing import Any


class DynamicFilterError(Exception):
    """Root exception for the dynamic filters package."""

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": self.__class__.__name__,
            "message": str(self),
        }


# ── Configuration ────────────────────────────────────────────────────


class ConfigurationError(DynamicFilterError):
    """Filter definitions are malformed or incomplete.

    Carries structured errors: ``{location: [messages]}``.
    """

    def __init__(
        self,
        errors: dict[str, list[str]] | str,
        path: str | None = None,
    ) -> None:
        if isinstance(errors, str):
            self.errors: dict[str, list[str]] = {path or "__root__": [errors]}
        else:
            self.errors = errors
        self.path = path
        super().__init__(self._build_message())

    def _build_message(self) -> str:
        parts = []
        for loc, messages in self.errors.items():
            joined = "; ".join(messages)
            parts.append(joined if loc == "__root__" else f"{loc}: {joined}")
        return " | ".join(parts)

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": "CONFIGURATION_ERROR",
            "message": str(self),
            "path": self.path,
            "errors": self.errors,
        }


# ── Request-time dispatch ────────────────────────────────────────────


class DispatchError(DynamicFilterError):
    """Base class for errors raised while applying filters to a query."""


class UnmatchedFilterError(DispatchError):
    """
    No custom filter and no compiled rule accepted a filter.

    Provides fuzzy-matched suggestions from the known filter names.
    """

    def __init__(
        self,
        key: Any,
        value: Any,
        known_filters: list[str] | None = None,
    ) -> None:
        self.key = key
        self.value = value
        self.known_filters = sorted(set(known_filters or []))
        self.suggestions = (
            get_close_matches(key, self.known_filters, n=3, cutoff=0.6)
            if isinstance(key, str)
            else []
        )

        message = f"No filter matches {key!r} with value {value!r}."
        if self.suggestions:
            message += f" Did you mean: {', '.join(self.suggestions)}?"
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": "UNMATCHED_FILTER",
            "filter": str(self.key),
            "suggestions": self.suggestions,
            "known_filters": self.known_filters,
        }


class InvalidOrderDirectiveError(DispatchError):
    """An ``order_by`` element has an unsupported shape or direction."""

    def __init__(self, directive: Any, reason: str) -> None:
        self.directive = directive
        self.reason = reason
        super().__init__(f"Invalid order_by directive {directive!r}: {reason}")

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": "INVALID_ORDER_DIRECTIVE",
            "directive": repr(self.directive),
            "reason": self.reason,
        }


# ── Query primitive ──────────────────────────────────────────────────


class QueryError(DynamicFilterError):
    """Base class for errors raised by :class:`~.query.FilterQuery`."""


class BindingNotFoundError(QueryError):
    """A named binding is not present in the query."""

    def __init__(self, binding: str, available_bindings: list[str]) -> None:
        self.binding = binding
        self.available_bindings = sorted(available_bindings)
        super().__init__(
            f"Query has no binding named {binding!r}. "
            f"Available bindings: {', '.join(self.available_bindings) or '-'}. "
            "Pass a binding resolver that joins it, or join it up front."
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": "BINDING_NOT_FOUND",
            "binding": self.binding,
            "available_bindings": self.available_bindings,
        }


class DuplicateBindingError(QueryError):
    """A join was requested under a binding name that is already taken."""

    def __init__(self, binding: str) -> None:
        self.binding = binding
        super().__init__(f"Query already has a binding named {binding!r}")


class FieldNotFoundError(QueryError):
    """
    Invalid field on a binding, with helpful suggestions.

    Example error message::

        Invalid field 'nmae' on binding 'user'.
        Did you mean one of these?
          • name

        Available fields: id, name, ...
    """

    def __init__(
        self,
        invalid_field: str,
        binding: str,
        available_fields: list[str],
        cutoff: float = 0.6,
    ) -> None:
        self.invalid_field = invalid_field
        self.binding = binding
        self.available_fields = available_fields
        self.suggestions = get_close_matches(
            invalid_field, available_fields, n=5, cutoff=cutoff
        )
        super().__init__(self._build_message())

    def _build_message(self) -> str:
        lines = [f"Invalid field '{self.invalid_field}' on binding '{self.binding}'."]
        if self.suggestions:
            lines.append("Did you mean one of these?")
            for s in self.suggestions:
                lines.append(f"  • {s}")

        sorted_fields = sorted(self.available_fields)
        preview = ", ".join(sorted_fields[:15])
        if len(sorted_fields) > 15:
            preview += ", ..."
        lines.append(f"Available fields: {preview}")
        return "\n".join(lines)

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": "FIELD_NOT_FOUND",
            "field": self.invalid_field,
            "binding": self.binding,
            "suggestions": self.suggestions,
            "available_fields": sorted(self.available_fields),
        }

"""
Filter key types.

Filter maps may be keyed by *symbols* (``Enum`` members, the closest
Python counterpart of a native key type) or by plain *strings*, e.g.::

    class UserFilter(str, Enum):
        USERNAME = "username"

    {UserFilter.USERNAME: "Dave"}   # symbol key
    {"username": "Dave"}            # string key

Which of the two is accepted is decided per set of filter definitions
with the ``symbol_keys`` / ``string_keys`` flags.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, NamedTuple, Protocol

from .exceptions import ConfigurationError


class KeyType(str, Enum):
    SYMBOL = "symbol"
    STRING = "string"


class KeyForm(NamedTuple):
    """A filter key reduced to its type and canonical name."""

    type: KeyType
    name: str


class KeyTypeFlags(Protocol):
    symbol_keys: bool
    string_keys: bool


def key_name(key: str | Enum) -> str:
    """
    Return the canonical name of a key.

    ``Enum`` members are named by their value when it is a string
    (``str`` mixin enums, ``StrEnum``) and by their member name otherwise.
    """
    if isinstance(key, Enum):
        return key.value if isinstance(key.value, str) else key.name
    return key


def is_name(value: Any) -> bool:
    """True for a non-empty ``str`` or an ``Enum`` member usable as a name."""
    return isinstance(value, str | Enum) and bool(key_name(value))


def classify_key(key: Any) -> KeyForm | None:
    """Return the :class:`KeyForm` of a request-time key, or ``None`` if unsupported."""
    # Enum first: a ``str`` mixin member is a symbol, not a string
    if isinstance(key, Enum):
        return KeyForm(KeyType.SYMBOL, key_name(key))
    if isinstance(key, str):
        return KeyForm(KeyType.STRING, key)
    return None


def accepted_keys(flags: KeyTypeFlags, key: str | Enum) -> frozenset[KeyForm]:
    """
    Return the key forms under which the filter ``key`` is recognized.

    Raises:
        ConfigurationError: If neither ``symbol_keys`` nor ``string_keys``
            is enabled, since no filter could ever match.
    """
    check_key_types(flags)
    name = key_name(key)
    forms: set[KeyForm] = set()
    if flags.symbol_keys:
        forms.add(KeyForm(KeyType.SYMBOL, name))
    if flags.string_keys:
        forms.add(KeyForm(KeyType.STRING, name))
    return frozenset(forms)


def check_key_types(flags: KeyTypeFlags) -> None:
    """Raise :class:`ConfigurationError` if no key type is enabled."""
    if not (flags.symbol_keys or flags.string_keys):
        raise ConfigurationError(
            "One of symbol_keys or string_keys must be enabled",
            path="symbol_keys",
        )

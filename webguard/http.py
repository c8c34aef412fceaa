"""Minimal HTTP primitives: header maps, requests and responses."""

from __future__ import annotations

import string
from collections.abc import Iterable, Iterator, Mapping, MutableMapping
from dataclasses import dataclass, field
from typing import Union

_TOKEN_CHARS = frozenset(string.ascii_letters + string.digits + "!#$%&'*+-.^_`|~")

HeaderItems = Union[Mapping[str, str], Iterable[tuple[str, str]]]


def parse_method(value: str) -> str:
    """Validate an HTTP method token and return it unchanged (case is significant)."""
    if not isinstance(value, str) or not value or not set(value) <= _TOKEN_CHARS:
        raise ValueError(f"invalid HTTP method: {value!r}")
    return value


def parse_header_name(value: str) -> str:
    """Validate a header field name and return its canonical lower-case form."""
    if not isinstance(value, str) or not value or not set(value) <= _TOKEN_CHARS:
        raise ValueError(f"invalid header name: {value!r}")
    return value.lower()


def _validate_header_value(value: str) -> str:
    if not isinstance(value, str):
        raise TypeError(f"header value must be a str, not {type(value).__name__}")
    for ch in value:
        if (ch < " " and ch != "\t") or ch == "\x7f":
            raise ValueError(f"invalid header value: {value!r}")
    return value


class Headers(MutableMapping[str, str]):
    """Case-insensitive header map; names are stored in lower case."""

    __slots__ = ("_items",)

    def __init__(self, items: HeaderItems | None = None) -> None:
        self._items: dict[str, str] = {}
        if items is not None:
            pairs = items.items() if isinstance(items, Mapping) else items
            for name, value in pairs:
                self[name] = value

    def __getitem__(self, name: str) -> str:
        if not isinstance(name, str):
            raise KeyError(name)
        return self._items[name.lower()]

    def __setitem__(self, name: str, value: str) -> None:
        self._items[parse_header_name(name)] = _validate_header_value(value)

    def __delitem__(self, name: str) -> None:
        if not isinstance(name, str):
            raise KeyError(name)
        del self._items[name.lower()]

    def __iter__(self) -> Iterator[str]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.lower() in self._items

    def copy(self) -> Headers:
        """Return an independent copy of this header map."""
        return Headers(self._items)

    def __repr__(self) -> str:
        return f"Headers({self._items!r})"


@dataclass
class Request:
    """An incoming HTTP request head."""

    method: str = "GET"
    path: str = "/"
    headers: Headers = field(default_factory=Headers)

    def __post_init__(self) -> None:
        self.method = parse_method(self.method)
        if not isinstance(self.headers, Headers):
            self.headers = Headers(self.headers)

    def cookie(self, name: str) -> str | None:
        """Return the value of the named cookie from the Cookie header, if present."""
        header = self.headers.get("cookie")
        if header is None:
            return None
        for part in header.split(";"):
            key, sep, value = part.strip().partition("=")
            if sep and key == name:
                return value
        return None


@dataclass
class Response:
    """An outgoing HTTP response."""

    status: int = 200
    headers: Headers = field(default_factory=Headers)
    body: Union[str, bytes] = ""

    def __post_init__(self) -> None:
        if not isinstance(self.headers, Headers):
            self.headers = Headers(self.headers)
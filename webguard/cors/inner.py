"""CORS policy state and the request validation it performs."""

from __future__ import annotations

from collections.abc import Callable, Iterable, MutableMapping
from dataclasses import dataclass, field

from webguard.cors.all_or_some import AllOrSome
from webguard.cors.errors import (
    BadRequestHeaders,
    BadRequestMethod,
    HeadersNotAllowed,
    MethodNotAllowed,
    MissingOrigin,
    MissingRequestMethod,
    OriginNotAllowed,
)
from webguard.http import Request, parse_header_name, parse_method

OriginFn = Callable[[str, Request], bool]

_VARY_VALUE = "Origin, Access-Control-Request-Method, Access-Control-Request-Headers"


def _is_visible_ascii(value: str) -> bool:
    return all(ch == "\t" or " " <= ch <= "~" for ch in value)


def header_value_to_method(value: str) -> str | None:
    """Parse a header value as an HTTP method, returning None when invalid."""
    if not _is_visible_ascii(value):
        return None
    try:
        return parse_method(value)
    except ValueError:
        return None


def intersperse_header_values(values: Iterable[str]) -> str:
    """Join a non-empty collection of header values with ', '."""
    items = sorted(values)
    if not items:
        raise ValueError("cannot build a header value from an empty set")
    return ", ".join(items)


def add_vary_header(headers: MutableMapping[str, str]) -> None:
    """Add the CORS request headers to the response's Vary header."""
    existing = headers.get("vary")
    headers["vary"] = _VARY_VALUE if existing is None else f"{existing}, {_VARY_VALUE}"


def _empty_set_option() -> AllOrSome[set[str]]:
    return AllOrSome.some(set())


@dataclass
class CorsPolicy:
    """The settings against which CORS requests are validated."""

    allowed_origins: AllOrSome[set[str]] = field(default_factory=_empty_set_option)
    allowed_origins_fns: list[OriginFn] = field(default_factory=list)

    allowed_methods: set[str] = field(default_factory=set)
    allowed_methods_baked: str | None = None

    allowed_headers: AllOrSome[set[str]] = field(default_factory=_empty_set_option)
    allowed_headers_baked: str | None = None

    expose_headers: AllOrSome[set[str]] = field(default_factory=_empty_set_option)
    expose_headers_baked: str | None = None

    max_age: int | None = None
    preflight: bool = True
    send_wildcard: bool = False
    supports_credentials: bool = False
    allow_private_network_access: bool = False
    vary_header: bool = True
    block_on_origin_mismatch: bool = True

    def validate_origin(self, request: Request) -> bool:
        """Check the Origin header; return whether Access-Control-Allow-Origin should be sent."""
        if self.allowed_origins.is_all():
            if not self.allowed_origins_fns:
                return True
            allowed: set[str] | frozenset[str] = frozenset()
        else:
            allowed = self.allowed_origins.value

        origin = request.headers.get("origin")
        if origin is None:
            raise MissingOrigin()

        if origin in allowed or any(fn(origin, request) for fn in self.allowed_origins_fns):
            return True
        if self.block_on_origin_mismatch:
            raise OriginNotAllowed()
        return False

    def access_control_allow_origin(self, request: Request) -> str | None:
        """The Access-Control-Allow-Origin value for an already validated request."""
        if self.allowed_origins.is_all() and self.send_wildcard:
            return "*"
        return request.headers.get("origin")

    def validate_allowed_method(self, request: Request) -> None:
        """Check the Access-Control-Request-Method header of a preflight request."""
        value = request.headers.get("access-control-request-method")
        if value is None:
            raise MissingRequestMethod()
        method = header_value_to_method(value)
        if method is None:
            raise BadRequestMethod()
        if method not in self.allowed_methods:
            raise MethodNotAllowed()

    def validate_allowed_headers(self, request: Request) -> None:
        """Check the Access-Control-Request-Headers list of a preflight request."""
        if self.allowed_headers.is_all():
            return
        allowed = self.allowed_headers.value

        value = request.headers.get("access-control-request-headers")
        if value is None:
            return
        if not _is_visible_ascii(value):
            raise BadRequestHeaders()

        requested = set()
        for part in value.split(","):
            try:
                requested.add(parse_header_name(part.strip()))
            except ValueError:
                raise BadRequestHeaders() from None

        if not requested:
            raise BadRequestHeaders()
        if not requested <= allowed:
            raise HeadersNotAllowed()
"""Fluent builder for the CORS middleware."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from webguard.cors.all_or_some import AllOrSome
from webguard.cors.defaults import ALL_METHODS, bake_policy, permissive_policy, restrictive_policy
from webguard.cors.errors import CorsConfigError, WildcardOrigin
from webguard.cors.inner import CorsPolicy, OriginFn
from webguard.cors.middleware import CorsMiddleware, Handler
from webguard.http import parse_header_name, parse_method

logger = logging.getLogger(__name__)

_URI_FORBIDDEN = frozenset('"<>\\^`{|}')


def _validate_origin_uri(origin: str) -> str:
    if not isinstance(origin, str) or not origin:
        raise ValueError(f"invalid origin: {origin!r}")
    for ch in origin:
        if not ("!" <= ch <= "~") or ch in _URI_FORBIDDEN:
            raise ValueError(f"invalid origin: {origin!r}")
    return origin


def _as_items(values: str | Iterable[str]) -> Iterable[str]:
    return [values] if isinstance(values, str) else values


class Cors:
    """Builder for CORS middleware.

    `Cors()` starts from a restrictive policy: no origins, methods, request
    headers or exposed headers are allowed. Configuration errors are kept and
    raised when the middleware is built with `wrap`; only the first one counts.
    """

    def __init__(self) -> None:
        self._policy: CorsPolicy = restrictive_policy()
        self._error: CorsConfigError | None = None

    @classmethod
    def permissive(cls) -> Cors:
        """A wide-open builder for development; not for production use."""
        cors = cls()
        cors._policy = permissive_policy()
        return cors

    def _editable(self) -> CorsPolicy | None:
        return None if self._error is not None else self._policy

    def allow_any_origin(self) -> Cors:
        """Accept any origin."""
        policy = self._editable()
        if policy is not None:
            policy.allowed_origins = AllOrSome.all()
        return self

    def allowed_origin(self, origin: str) -> Cors:
        """Add an origin allowed to make requests (compared case-sensitively)."""
        policy = self._editable()
        if policy is None:
            return self
        try:
            _validate_origin_uri(origin)
        except ValueError as err:
            self._error = CorsConfigError(str(err))
            return self
        if origin == "*":
            logger.error("Wildcard in `allowed_origin` is not allowed. Use `send_wildcard`.")
            self._error = WildcardOrigin()
            return self
        if policy.allowed_origins.is_all():
            policy.allowed_origins = AllOrSome.some(set())
        policy.allowed_origins.value.add(origin)
        return self

    def allowed_origin_fn(self, fn: OriginFn) -> Cors:
        """Add a predicate consulted for origins not in the allowed list."""
        policy = self._editable()
        if policy is not None:
            policy.allowed_origins_fns.append(fn)
        return self

    def allow_any_method(self) -> Cors:
        """Allow every standard method."""
        policy = self._editable()
        if policy is not None:
            policy.allowed_methods = set(ALL_METHODS)
        return self

    def allowed_methods(self, methods: str | Iterable[str]) -> Cors:
        """Add methods that allowed origins may use."""
        policy = self._editable()
        if policy is None:
            return self
        for method in _as_items(methods):
            try:
                policy.allowed_methods.add(parse_method(method))
            except ValueError as err:
                self._error = CorsConfigError(str(err))
                break
        return self

    def allow_any_header(self) -> Cors:
        """Accept any request header."""
        policy = self._editable()
        if policy is not None:
            policy.allowed_headers = AllOrSome.all()
        return self

    def _add_allowed_header(self, policy: CorsPolicy, header: str) -> bool:
        try:
            name = parse_header_name(header)
        except ValueError as err:
            self._error = CorsConfigError(str(err))
            return False
        if policy.allowed_headers.is_all():
            policy.allowed_headers = AllOrSome.some(set())
        policy.allowed_headers.value.add(name)
        return True

    def allowed_header(self, header: str) -> Cors:
        """Add an allowed request header."""
        policy = self._editable()
        if policy is not None:
            self._add_allowed_header(policy, header)
        return self

    def allowed_headers(self, headers: str | Iterable[str]) -> Cors:
        """Add request header names that allowed origins may send."""
        policy = self._editable()
        if policy is None:
            return self
        for header in _as_items(headers):
            if not self._add_allowed_header(policy, header):
                break
        return self

    def expose_any_header(self) -> Cors:
        """Expose every response header."""
        policy = self._editable()
        if policy is not None:
            policy.expose_headers = AllOrSome.all()
        return self

    def expose_headers(self, headers: str | Iterable[str]) -> Cors:
        """Add response headers that are safe to expose to the client."""
        for header in _as_items(headers):
            try:
                name = parse_header_name(header)
            except ValueError as err:
                self._error = CorsConfigError(str(err))
                break
            policy = self._editable()
            if policy is not None:
                if policy.expose_headers.is_all():
                    policy.expose_headers = AllOrSome.some(set())
                policy.expose_headers.value.add(name)
        return self

    def max_age(self, max_age: int | None) -> Cors:
        """Set the preflight cache time in seconds, or None to omit the header."""
        policy = self._editable()
        if policy is not None:
            policy.max_age = max_age
        return self

    def send_wildcard(self) -> Cors:
        """Send `*` instead of echoing the origin when all origins are allowed."""
        policy = self._editable()
        if policy is not None:
            policy.send_wildcard = True
        return self

    def supports_credentials(self) -> Cors:
        """Send Access-Control-Allow-Credentials: true."""
        policy = self._editable()
        if policy is not None:
            policy.supports_credentials = True
        return self

    def allow_private_network_access(self) -> Cors:
        """Answer private network access requests with permission."""
        policy = self._editable()
        if policy is not None:
            policy.allow_private_network_access = True
        return self

    def disable_vary_header(self) -> Cors:
        """Stop adding CORS request headers to the Vary header."""
        policy = self._editable()
        if policy is not None:
            policy.vary_header = False
        return self

    def disable_preflight(self) -> Cors:
        """Stop handling OPTIONS preflight requests automatically."""
        policy = self._editable()
        if policy is not None:
            policy.preflight = False
        return self

    def block_on_origin_mismatch(self, block: bool) -> Cors:
        """Choose whether a mismatched origin is answered with 400 Bad Request."""
        policy = self._editable()
        if policy is not None:
            policy.block_on_origin_mismatch = block
        return self

    def wrap(self, handler: Handler) -> CorsMiddleware:
        """Build the middleware around `handler`, raising any configuration error."""
        if self._error is not None:
            logger.error("%s", self._error)
            raise self._error
        try:
            policy = bake_policy(self._policy)
        except CorsConfigError as err:
            logger.error("%s", err)
            raise
        return CorsMiddleware(handler, policy)
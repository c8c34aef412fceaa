"""Request handler wrapper that applies a CORS policy."""

from __future__ import annotations

import logging
from collections.abc import Callable

from webguard.cors.all_or_some import AllOrSome
from webguard.cors.errors import CorsError, OriginNotAllowed
from webguard.cors.inner import (
    CorsPolicy,
    add_vary_header,
    header_value_to_method,
    intersperse_header_values,
)
from webguard.http import Headers, Request, Response

logger = logging.getLogger(__name__)

Handler = Callable[[Request], Response]

_PRIVATE_NETWORK_REQUEST = "access-control-request-private-network"
_PRIVATE_NETWORK_ALLOW = "access-control-allow-private-network"


class CorsMiddleware:
    """Validates CORS requests against a policy and decorates responses."""

    def __init__(self, handler: Handler, policy: CorsPolicy) -> None:
        self.handler = handler
        self.policy = policy

    @staticmethod
    def is_request_preflight(request: Request) -> bool:
        """Whether the request is OPTIONS with a valid Access-Control-Request-Method header."""
        if request.method != "OPTIONS":
            return False
        value = request.headers.get("access-control-request-method")
        return value is not None and header_value_to_method(value) is not None

    def handle_preflight(self, request: Request) -> Response:
        """Validate a preflight request and build its response."""
        policy = self.policy
        try:
            if not policy.validate_origin(request):
                return OriginNotAllowed().error_response()
            policy.validate_allowed_method(request)
            policy.validate_allowed_headers(request)
        except CorsError as err:
            return err.error_response()

        headers = Headers()

        origin = policy.access_control_allow_origin(request)
        if origin is not None:
            headers["access-control-allow-origin"] = origin

        if policy.allowed_methods_baked is not None:
            headers["access-control-allow-methods"] = policy.allowed_methods_baked

        if policy.allowed_headers_baked is not None:
            headers["access-control-allow-headers"] = policy.allowed_headers_baked
        else:
            requested = request.headers.get("access-control-request-headers")
            if requested is not None:
                headers["access-control-allow-headers"] = requested

        if policy.allow_private_network_access and _PRIVATE_NETWORK_REQUEST in request.headers:
            headers[_PRIVATE_NETWORK_ALLOW] = "true"

        if policy.supports_credentials:
            headers["access-control-allow-credentials"] = "true"

        if policy.max_age is not None:
            headers["access-control-max-age"] = str(policy.max_age)

        if policy.vary_header:
            add_vary_header(headers)

        return Response(status=200, headers=headers)

    def augment_response(
        self, request: Request, origin_allowed: bool, response: Response
    ) -> Response:
        """Add CORS headers to a response produced by the wrapped handler."""
        policy = self.policy
        headers = response.headers

        if origin_allowed:
            origin = policy.access_control_allow_origin(request)
            if origin is not None:
                headers["access-control-allow-origin"] = origin

        if policy.expose_headers_baked is not None:
            logger.debug("exposing selected headers: %s", policy.expose_headers_baked)
            headers["access-control-expose-headers"] = policy.expose_headers_baked
        elif isinstance(policy.expose_headers, AllOrSome) and policy.expose_headers.is_all():
            if len(headers):
                value = intersperse_header_values(set(headers))
                logger.debug("exposing all headers from response: %s", value)
                headers["access-control-expose-headers"] = value

        if policy.supports_credentials:
            headers["access-control-allow-credentials"] = "true"

        if policy.allow_private_network_access and _PRIVATE_NETWORK_REQUEST in request.headers:
            headers[_PRIVATE_NETWORK_ALLOW] = "true"

        if policy.vary_header:
            add_vary_header(headers)

        return response

    def __call__(self, request: Request) -> Response:
        if self.policy.preflight and self.is_request_preflight(request):
            return self.handle_preflight(request)

        if request.headers.get("origin") is None:
            origin_allowed = False
        else:
            try:
                origin_allowed = self.policy.validate_origin(request)
            except CorsError as err:
                logger.debug("origin validation failed; inner handler is not called")
                response = err.error_response()
                if self.policy.vary_header:
                    add_vary_header(response.headers)
                return response

        response = self.handler(request)
        return self.augment_response(request, origin_allowed, response)
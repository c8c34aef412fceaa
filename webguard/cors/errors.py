"""Errors raised while configuring CORS or processing guarded requests."""

from __future__ import annotations

from http import HTTPStatus

from webguard.http import Response


class CorsConfigError(Exception):
    """The CORS configuration is invalid."""


class CorsError(Exception):
    """An error that occurs when processing a CORS guarded request."""

    message = "CORS error"
    status_code = int(HTTPStatus.BAD_REQUEST)

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.message)
        if message is not None:
            self.message = message

    def __str__(self) -> str:
        return self.message

    def error_response(self) -> Response:
        """Build the response sent to the client for this error."""
        return Response(status=self.status_code, body=str(self))


class WildcardOrigin(CorsError, CorsConfigError):
    message = "`allowed_origin` argument must not be wildcard (`*`)"


class MissingOrigin(CorsError):
    message = "Request header `Origin` is required but was not provided"


class MissingRequestMethod(CorsError):
    message = "Request header `Access-Control-Request-Method` is required but is missing"


class BadRequestMethod(CorsError):
    message = "Request header `Access-Control-Request-Method` has an invalid value"


class BadRequestHeaders(CorsError):
    message = "Request header `Access-Control-Request-Headers` has an invalid value"


class OriginNotAllowed(CorsError):
    message = "Origin is not allowed to make this request"


class MethodNotAllowed(CorsError):
    message = "Requested method is not allowed"


class HeadersNotAllowed(CorsError):
    message = "One or more request headers are not allowed"
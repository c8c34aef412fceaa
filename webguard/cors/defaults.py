"""Stock CORS policies and the step that prepares a policy for serving."""

from __future__ import annotations

from dataclasses import replace

from webguard.cors.all_or_some import AllOrSome
from webguard.cors.errors import CorsConfigError
from webguard.cors.inner import CorsPolicy, intersperse_header_values

ALL_METHODS: frozenset[str] = frozenset(
    {"GET", "POST", "PUT", "DELETE", "HEAD", "OPTIONS", "CONNECT", "PATCH", "TRACE"}
)


def restrictive_policy() -> CorsPolicy:
    """A security-paranoid policy.

    No allowed origins, methods, request headers or exposed headers; credentials
    not supported; no max age.
    """
    return CorsPolicy()


def permissive_policy() -> CorsPolicy:
    """A wide-open policy for development. Not for production use.

    All origins, methods, request headers and exposed headers are allowed,
    credentials are supported, max age is one hour and no wildcard is sent.
    """
    return CorsPolicy(
        allowed_origins=AllOrSome.all(),
        allowed_methods=set(ALL_METHODS),
        allowed_headers=AllOrSome.all(),
        expose_headers=AllOrSome.all(),
        max_age=3600,
        supports_credentials=True,
    )


def _copy_option(option: AllOrSome[set[str]]) -> AllOrSome[set[str]]:
    return AllOrSome.all() if option.is_all() else AllOrSome.some(set(option.value))


def _bake(option: AllOrSome[set[str]]) -> str | None:
    if option.is_some() and option.value:
        return intersperse_header_values(option.value)
    return None


def bake_policy(policy: CorsPolicy) -> CorsPolicy:
    """Check a policy and return a copy with its pre-rendered header values filled in.

    Raises CorsConfigError when credentials are supported while all origins are
    allowed and a wildcard is sent.
    """
    if policy.supports_credentials and policy.send_wildcard and policy.allowed_origins.is_all():
        raise CorsConfigError(
            "Illegal combination of CORS options: credentials can not be supported when all "
            "origins are allowed and `send_wildcard` is enabled."
        )

    return replace(
        policy,
        allowed_origins=_copy_option(policy.allowed_origins),
        allowed_origins_fns=list(policy.allowed_origins_fns),
        allowed_methods=set(policy.allowed_methods),
        allowed_methods_baked=(
            intersperse_header_values(policy.allowed_methods) if policy.allowed_methods else None
        ),
        allowed_headers=_copy_option(policy.allowed_headers),
        allowed_headers_baked=_bake(policy.allowed_headers),
        expose_headers=_copy_option(policy.expose_headers),
        expose_headers_baked=_bake(policy.expose_headers),
    )
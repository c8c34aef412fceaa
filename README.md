# webguard

`webguard` provides two pieces of HTTP middleware. Each one wraps a request
handler.

- **CORS** (`webguard.cors`) checks the `Origin` header and the preflight method
  and header requests against a configured policy. It answers `OPTIONS`
  preflight requests itself and adds the `Access-Control-*` and `Vary` headers
  to responses.
- **Rate limiting** (`webguard.limitation`) keeps a fixed-window counter per key
  in Redis.

Both work on the package's own types from `webguard.http`:

- `Request(method, path, headers)` has a `cookie(name)` helper.
- `Response(status, headers, body)`.
- `Headers` is a case-insensitive mutable mapping that stores names in lower
  case.
- `parse_method` and `parse_header_name` validate tokens.

## Installation

```
pip install webguard
```

## CORS

```python
from webguard.cors.builder import Cors
from webguard.http import Request, Response

def handler(request: Request) -> Response:
    return Response(body="Hello, cross-origin world!")

cors = (
    Cors()
    .allowed_origin("http://project.local:8080")
    .allowed_origin_fn(lambda origin, request: origin.startswith("http://localhost"))
    .allowed_methods(["GET", "POST"])
    .allowed_headers(["Authorization", "Accept"])
    .allowed_header("Content-Type")
    .expose_headers(["Content-Disposition"])
    .block_on_origin_mismatch(False)
    .max_age(3600)
)

app = cors.wrap(handler)          # a CorsMiddleware
response = app(Request(method="GET", headers={"Origin": "http://localhost:3000"}))
```

### Defaults

`Cors()` starts from a restrictive policy. No origins, methods, request headers
or exposed headers are allowed, and credentials are not supported.

`Cors.permissive()` is meant for development. It allows every origin, every
standard method, every request header and every exposed header. It supports
credentials and sets a max age of one hour.

### Builder methods

- Origins: `allow_any_origin`, `allowed_origin`, `allowed_origin_fn`
- Methods: `allow_any_method`, `allowed_methods`
- Request headers: `allow_any_header`, `allowed_header`, `allowed_headers`
- Exposed headers: `expose_any_header`, `expose_headers`
- Other options: `max_age`, `send_wildcard`, `supports_credentials`,
  `allow_private_network_access`, `disable_vary_header`, `disable_preflight`,
  `block_on_origin_mismatch`

### Configuration errors

The builder keeps the first configuration mistake it sees. It raises that error
as `CorsConfigError` when `wrap` is called. The mistakes it reports are:

- a wildcard passed to `allowed_origin`, raised as `WildcardOrigin`;
- an invalid origin, method or header name;
- supporting credentials together with `send_wildcard` while any origin is
  allowed.

### Request errors

A request that fails validation gets a `400 Bad Request` response. Its body is
the message of the matching `CorsError` subclass: `MissingOrigin`,
`MissingRequestMethod`, `BadRequestMethod`, `BadRequestHeaders`,
`OriginNotAllowed`, `MethodNotAllowed` or `HeadersNotAllowed`.

With `block_on_origin_mismatch(False)`, a non-preflight request from an origin
that is not allowed still reaches the handler. Its response then carries no
`Access-Control-Allow-Origin` header.

### Lower-level pieces

`webguard.cors.defaults` provides `restrictive_policy()`, `permissive_policy()`
and `bake_policy(policy)`. `webguard.cors.inner.CorsPolicy` holds the settings
and does the validation. `webguard.cors.middleware.CorsMiddleware(handler,
policy)` can be built directly.

## Rate limiting

```python
import asyncio
from datetime import timedelta

from webguard.http import Request, Response
from webguard.limitation.limiter import Limiter
from webguard.limitation.middleware import RateLimiter

limiter = (
    Limiter.builder("redis://127.0.0.1")
    .key_by(lambda request: request.cookie("session-id"))
    .limit(5000)
    .period(timedelta(hours=1))
    .build()
)

async def handler(request: Request) -> Response:
    return Response(body="ok")

app = RateLimiter(limiter).wrap(handler)   # a RateLimiterMiddleware
response = asyncio.run(app(Request(headers={"Cookie": "session-id=abc"})))
```

### Building a limiter

- The defaults are a limit of 5000 requests per 3600-second window.
- `period` accepts a `timedelta` or a number of seconds.
- `build()` raises `ClientError` if the Redis URL cannot be parsed.

### Keys

If no key resolver is set, the key comes from the `sid` cookie. The deprecated
`cookie_name` method changes which cookie is used. It raises `RuntimeError` if
`key_by` was already called.

### How requests are handled

The middleware is a coroutine function. The wrapped handler may be a plain
function or a coroutine function.

- Requests with no key are passed to the handler without being counted.
- Once a key exceeds its limit in the current window, the response is
  `429 Too Many Requests`.
- If Redis fails, the response is `500 Internal Server Error`.

### Counting directly

`await limiter.count(key)` returns a `Status` with `limit`, `remaining` and
`reset_epoch_utc`. When the limit is exceeded it raises `LimitExceeded`, and
`.status` holds the status at that point.

The error classes are `LimitationError`, `ClientError`, `LimitExceeded`,
`TimeConversionError` and `OtherError`. They live in
`webguard.limitation.errors`.

## What this package does not do

- **No server and no framework adapter.** The middleware works on
  `webguard.http` objects. Connecting it to a WSGI or ASGI server, or to a web
  framework, is up to you.
- **No session support.** Rate-limit keys come only from `key_by` or from a
  cookie, never from session storage.
- **CORS does not wrap async handlers.** `CorsMiddleware` calls its handler
  synchronously, so it cannot wrap the async `RateLimiterMiddleware` directly.
from dataclasses import replace

from webguard.cors.all_or_some import AllOrSome
from webguard.cors.defaults import bake_policy, permissive_policy, restrictive_policy
from webguard.cors.middleware import CorsMiddleware
from webguard.http import Request, Response

VARY = "Origin, Access-Control-Request-Method, Access-Control-Request-Headers"


def ok_handler(request):
    return Response(status=200)


def make(handler=ok_handler, base=None, **changes):
    policy = base if base is not None else restrictive_policy()
    return CorsMiddleware(handler, bake_policy(replace(policy, **changes)))


def test_is_request_preflight():
    assert CorsMiddleware.is_request_preflight(
        Request("OPTIONS", headers={"Access-Control-Request-Method": "POST"})
    )
    assert not CorsMiddleware.is_request_preflight(
        Request("GET", headers={"Access-Control-Request-Method": "POST"})
    )
    assert not CorsMiddleware.is_request_preflight(Request("OPTIONS"))
    assert not CorsMiddleware.is_request_preflight(
        Request("OPTIONS", headers={"Access-Control-Request-Method": "GET POST"})
    )


def test_restrictive_defaults():
    cors = make()
    resp = cors(Request(headers={"Origin": "https://www.example.com"}))
    assert resp.status == 400


def test_options_no_origin():
    def origin_fn(origin, request):
        assert origin == request.headers["origin"]
        return "dnt" in request.headers

    cors = make(allowed_origins=AllOrSome.all(), allowed_origins_fns=[origin_fn])

    resp = cors(Request("GET", headers={"Origin": "http://example.com"}))
    assert "access-control-allow-origin" not in resp.headers

    resp = cors(Request("GET", headers={"Origin": "http://example.com", "DNT": "1"}))
    assert resp.headers.get("access-control-allow-origin") == "http://example.com"


def test_preflight():
    cors = make(
        allowed_origins=AllOrSome.all(),
        send_wildcard=True,
        max_age=3600,
        allowed_methods={"GET", "OPTIONS", "POST"},
        allowed_headers=AllOrSome.some({"authorization", "accept", "content-type"}),
    )

    req = Request(
        "OPTIONS",
        headers={
            "Origin": "https://www.example.com",
            "Access-Control-Request-Headers": "X-Not-Allowed",
        },
    )
    assert cors(req).status == 200

    req = Request(
        "OPTIONS",
        headers={
            "Origin": "https://www.example.com",
            "Access-Control-Request-Method": "POST",
            "Access-Control-Request-Headers": "AUTHORIZATION,ACCEPT",
        },
    )
    resp = cors(req)
    assert resp.headers.get("access-control-allow-origin") == "*"
    assert resp.headers.get("access-control-max-age") == "3600"
    allowed = resp.headers["access-control-allow-headers"]
    assert "authorization" in allowed
    assert "accept" in allowed
    assert "content-type" in allowed
    methods = resp.headers["access-control-allow-methods"]
    assert "POST" in methods
    assert "GET" in methods
    assert "OPTIONS" in methods

    cors.policy.preflight = False
    assert cors(req).status == 200


def test_allow_fn_origin_equals_head_origin():
    def origin_fn(origin, request):
        assert origin == request.headers["origin"]
        return True

    cors = make(
        handler=lambda request: Response(status=204),
        allowed_origins_fns=[origin_fn],
        allowed_methods=set(permissive_policy().allowed_methods),
        allowed_headers=AllOrSome.all(),
    )
    resp = cors(
        Request(
            "OPTIONS",
            headers={
                "Origin": "https://www.example.com",
                "Access-Control-Request-Method": "POST",
            },
        )
    )
    assert resp.status == 200

    resp = cors(Request("GET", headers={"Origin": "https://www.example.com"}))
    assert resp.status == 204


def test_multiple_origins_preflight():
    cors = make(
        allowed_origins=AllOrSome.some({"https://example.com", "https://example.org"}),
        allowed_methods={"GET"},
    )
    for origin in ("https://example.com", "https://example.org"):
        resp = cors(
            Request(
                "OPTIONS",
                headers={"Origin": origin, "Access-Control-Request-Method": "GET"},
            )
        )
        assert resp.headers.get("access-control-allow-origin") == origin
        resp = cors(Request("GET", headers={"Origin": origin}))
        assert resp.headers.get("access-control-allow-origin") == origin


def test_response_headers():
    settings = dict(
        allowed_origins=AllOrSome.all(),
        send_wildcard=True,
        preflight=False,
        max_age=3600,
        allowed_methods={"GET", "OPTIONS", "POST"},
        allowed_headers=AllOrSome.some({"authorization", "accept", "content-type"}),
        expose_headers=AllOrSome.some({"authorization", "accept"}),
    )
    cors = make(**settings)
    req = Request("OPTIONS", headers={"Origin": "https://www.example.com"})
    resp = cors(req)
    assert resp.headers.get("access-control-allow-origin") == "*"
    assert resp.headers.get("vary") == VARY
    exposed = [h.strip() for h in resp.headers["access-control-expose-headers"].split(",")]
    assert "authorization" in exposed
    assert "accept" in exposed

    cors = make(handler=lambda request: Response(headers={"Vary": "Accept"}), **settings)
    resp = cors(req)
    assert resp.headers["vary"] == f"Accept, {VARY}"

    cors = make(
        vary_header=False,
        allowed_methods={"POST"},
        allowed_origins=AllOrSome.some({"https://www.example.com", "https://www.google.com"}),
    )
    resp = cors(
        Request(
            "OPTIONS",
            headers={
                "Origin": "https://www.example.com",
                "Access-Control-Request-Method": "POST",
            },
        )
    )
    assert resp.headers.get("access-control-allow-origin") == "https://www.example.com"
    assert "vary" not in resp.headers


def test_blocks_mismatched_origin_by_default():
    cors = make(allowed_origins=AllOrSome.some({"https://www.example.com"}))
    resp = cors(Request("GET", headers={"Origin": "https://www.example.test"}))
    assert resp.status == 400
    assert "access-control-allow-origin" not in resp.headers
    assert "access-control-allow-methods" not in resp.headers


def test_mismatched_origin_block_turned_off():
    cors = make(
        allowed_methods=set(permissive_policy().allowed_methods),
        allowed_origins=AllOrSome.some({"https://www.example.com"}),
        block_on_origin_mismatch=False,
    )
    resp = cors(
        Request(
            "OPTIONS",
            headers={"Origin": "https://wrong.com", "Access-Control-Request-Method": "POST"},
        )
    )
    assert resp.status == 400
    assert "access-control-allow-origin" not in resp.headers

    resp = cors(Request("GET", headers={"Origin": "https://wrong.com"}))
    assert resp.status == 200
    assert "access-control-allow-origin" not in resp.headers


def test_no_origin_response():
    cors = make(base=permissive_policy(), preflight=False)
    resp = cors(Request("GET"))
    assert "access-control-allow-origin" not in resp.headers

    resp = cors(Request("OPTIONS", headers={"Origin": "https://www.example.com"}))
    assert resp.headers.get("access-control-allow-origin") == "https://www.example.com"


def test_validate_origin_allows_all_origins():
    cors = make(base=permissive_policy())
    resp = cors(Request(headers={"Origin": "https://www.example.com"}))
    assert resp.status == 200


def test_vary_header_on_all_handled_responses():
    cors = make(base=permissive_policy())
    resp = cors(
        Request(
            "OPTIONS",
            headers={
                "Origin": "https://www.example.com",
                "Access-Control-Request-Method": "GET",
            },
        )
    )
    assert resp.status == 200
    assert "access-control-allow-methods" in resp.headers
    assert resp.headers["vary"] == VARY

    resp = cors(Request("PUT", headers={"Origin": "https://www.example.com"}))
    assert resp.status == 200
    assert resp.headers["vary"] == VARY

    cors = make(allowed_methods=set(permissive_policy().allowed_methods))
    resp = cors(Request("PUT", headers={"Origin": "https://www.example.com"}))
    assert resp.status == 400
    assert resp.headers["vary"] == VARY

    resp = cors(Request("PUT"))
    assert resp.status == 200
    assert resp.headers["vary"] == VARY


def test_allow_any_origin_any_method_any_header():
    cors = make(
        allowed_origins=AllOrSome.all(),
        allowed_methods=set(permissive_policy().allowed_methods),
        allowed_headers=AllOrSome.all(),
    )
    resp = cors(
        Request(
            "OPTIONS",
            headers={
                "Access-Control-Request-Method": "POST",
                "Access-Control-Request-Headers": "content-type",
                "Origin": "https://www.example.com",
            },
        )
    )
    assert resp.status == 200
    assert resp.headers.get("access-control-allow-headers") == "content-type"


def test_expose_all_request_header_values():
    cors = make(
        handler=lambda request: Response(headers={"Content-Disposition": "test disposition"}),
        base=permissive_policy(),
    )
    resp = cors(
        Request(
            headers={
                "Origin": "https://www.example.com",
                "Access-Control-Request-Method": "POST",
                "Access-Control-Request-Headers": "content-type",
            }
        )
    )
    exposed = resp.headers["access-control-expose-headers"]
    assert "content-disposition" in exposed
    assert "access-control-allow-origin" in exposed


def test_private_network_access():
    cors = make(
        handler=lambda request: Response(headers={"Content-Disposition": "test disposition"}),
        base=permissive_policy(),
        allowed_origins=AllOrSome.some({"https://public.site"}),
        allow_private_network_access=True,
    )
    base_headers = {
        "Origin": "https://public.site",
        "Access-Control-Request-Method": "POST",
        "Access-Control-Allow-Credentials": "true",
    }
    resp = cors(Request(headers=base_headers))
    assert "access-control-allow-origin" in resp.headers
    assert "access-control-allow-private-network" not in resp.headers

    resp = cors(
        Request(headers={**base_headers, "Access-Control-Request-Private-Network": "true"})
    )
    assert "access-control-allow-origin" in resp.headers
    assert resp.headers["access-control-allow-private-network"] == "true"
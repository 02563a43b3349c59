# -*- coding: utf-8 -*-
"""Reverse proxy tests against a real local upstream (aiohttp TestServer)."""

from __future__ import annotations

import gzip
from collections.abc import AsyncIterator, Awaitable, Callable
from typing import Any
from unittest.mock import AsyncMock

import aiohttp
import pytest
from aiohttp import web
from aiohttp.test_utils import TestClient, TestServer
from multidict import CIMultiDict, CIMultiDictProxy
from yarl import URL

from panel_relay.clients.http import AsyncHttpClient
from panel_relay.config import Settings
from panel_relay.exceptions import UpstreamTimeoutError
from panel_relay.models.cookie import Cookie
from panel_relay.persistence.repositories.json_file import JsonFileCookieStore
from panel_relay.proxy.handler import ReverseProxyHandler, host_header
from panel_relay.proxy.server import ProxyServer
from panel_relay.services.cookie_jar import CookieJar

GZIP_BODY = gzip.compress(b"compressed upstream payload")

ProxyFactory = Callable[..., Awaitable[tuple[TestClient, CookieJar]]]


async def _echo(request: web.Request) -> web.Response:
    return web.json_response(
        {
            "method": request.method,
            "path_qs": request.path_qs,
            "headers": [[k, v] for k, v in request.headers.items()],
            "body": await request.text(),
        }
    )


async def _set_cookie(request: web.Request) -> web.Response:
    response = web.Response(text="ok")
    response.headers.add("Set-Cookie", "sid=fresh; Path=/; HttpOnly; Secure")
    response.headers.add("Set-Cookie", "lang=ru; Path=/")
    return response


async def _redirect(request: web.Request) -> web.Response:
    return web.Response(status=302, headers={"Location": "/echo"})


async def _gzip(request: web.Request) -> web.Response:
    return web.Response(
        body=GZIP_BODY,
        headers={"Content-Encoding": "gzip", "Content-Type": "text/plain"},
    )


async def _big(request: web.Request) -> web.Response:
    return web.Response(body=b"x" * 5000, content_type="application/octet-stream")


def _header_values(payload: dict[str, Any], name: str) -> list[str]:
    return [v for k, v in payload["headers"] if k.lower() == name.lower()]


async def _get_raw(client: TestClient, raw_target: str, **kwargs: Any) -> aiohttp.ClientResponse:
    """GET raw_target on the proxy without letting URL joining touch its slashes."""
    url = URL(f"http://{client.host}:{client.port}/{raw_target.lstrip('/')}", encoded=True)
    return await client.session.get(url, **kwargs)


@pytest.fixture
async def upstream() -> AsyncIterator[TestServer]:
    app = web.Application()
    app.router.add_route("*", "/echo", _echo)
    app.router.add_get("/set-cookie", _set_cookie)
    app.router.add_get("/redirect", _redirect)
    app.router.add_get("/gzip", _gzip)
    app.router.add_get("/big", _big)
    server = TestServer(app)
    await server.start_server()
    yield server
    await server.close()


@pytest.fixture
async def proxy_factory(
    upstream: TestServer,
    settings_factory: Callable[..., Settings],
    cookie_store: JsonFileCookieStore,
) -> AsyncIterator[ProxyFactory]:
    """Build (client, jar) for a proxy in front of upstream; extra kwargs go to settings.proxy."""
    cleanups: list[Callable[[], Awaitable[None]]] = []

    async def _build(
        *,
        http_client: Any = None,
        cookies: tuple[Cookie, ...] = (),
        **proxy_overrides: Any,
    ) -> tuple[TestClient, CookieJar]:
        proxy = {"upstream_base_url": str(upstream.make_url("/"))}
        proxy.update(proxy_overrides)
        settings = settings_factory(proxy=proxy)
        jar = CookieJar(cookie_store, settings.proxy.upstream_base_url, cookies=cookies)
        if http_client is None:
            http_client = AsyncHttpClient(settings, auto_decompress=False)
            cleanups.append(http_client.aclose)
        handler = ReverseProxyHandler(jar, http_client, settings)
        app = ProxyServer(handler, settings).build_app()
        client = TestClient(
            TestServer(app),
            cookie_jar=aiohttp.DummyCookieJar(),
            auto_decompress=False,
        )
        await client.start_server()
        cleanups.append(client.close)
        return client, jar

    yield _build
    for cleanup in reversed(cleanups):
        await cleanup()


async def test_relative_path_is_forwarded_to_base_with_query(
    proxy_factory: ProxyFactory, upstream: TestServer
) -> None:
    client, _ = await proxy_factory()

    resp = await client.get("/echo?page=2&q=a%20b")

    assert resp.status == 200
    payload = await resp.json()
    assert payload["method"] == "GET"
    assert payload["path_qs"] == "/echo?page=2&q=a%20b"
    assert _header_values(payload, "Host") == [f"127.0.0.1:{upstream.port}"]


async def test_gated_request_carries_only_jar_cookies(proxy_factory: ProxyFactory) -> None:
    client, _ = await proxy_factory(
        cookies=(Cookie(name="sid", value="abc"), Cookie(name="csrf", value="t0k")),
    )

    resp = await client.get("/echo", headers={"Cookie": "mine=1"})

    payload = await resp.json()
    assert _header_values(payload, "Cookie") == ["sid=abc; csrf=t0k"]


async def test_gated_request_with_empty_jar_sends_no_cookie(
    proxy_factory: ProxyFactory,
) -> None:
    client, _ = await proxy_factory()

    resp = await client.get("/echo", headers={"Cookie": "mine=1"})

    payload = await resp.json()
    assert _header_values(payload, "Cookie") == []


async def test_set_cookie_is_captured_persisted_and_relayed(
    proxy_factory: ProxyFactory, cookie_store: JsonFileCookieStore
) -> None:
    client, jar = await proxy_factory(cookies=(Cookie(name="sid", value="stale"),))

    resp = await client.get("/set-cookie")

    assert resp.status == 200
    assert resp.headers.getall("Set-Cookie") == [
        "sid=fresh; Path=/; HttpOnly; Secure",
        "lang=ru; Path=/",
    ]
    assert jar.cookie_header() == "sid=fresh; lang=ru"
    sid = jar.get("sid")
    assert sid is not None and sid.http_only and sid.secure
    assert sid.domain == "127.0.0.1"
    assert [c.name for c in cookie_store.load()] == ["sid", "lang"]

    echoed = await (await client.get("/echo")).json()
    assert _header_values(echoed, "Cookie") == ["sid=fresh; lang=ru"]


async def test_non_gated_host_keeps_caller_cookie(
    proxy_factory: ProxyFactory, upstream: TestServer
) -> None:
    client, _ = await proxy_factory(
        upstream_base_url="http://127.0.0.1:1/",
        gated_domain="panel.example",
        cookies=(Cookie(name="sid", value="abc"),),
    )

    resp = await _get_raw(
        client,
        f"/http://127.0.0.1:{upstream.port}/echo?x=1",
        headers={"Cookie": "mine=1"},
    )

    assert resp.status == 200
    payload = await resp.json()
    assert payload["path_qs"] == "/echo?x=1"
    assert _header_values(payload, "Cookie") == ["mine=1"]


async def test_cookies_from_non_gated_host_are_captured_by_default(
    proxy_factory: ProxyFactory,
) -> None:
    client, jar = await proxy_factory(gated_domain="panel.example")

    await client.get("/set-cookie")

    assert jar.cookie_header() == "sid=fresh; lang=ru"


async def test_gated_cookies_only_ignores_other_hosts(proxy_factory: ProxyFactory) -> None:
    client, jar = await proxy_factory(gated_domain="panel.example", gated_cookies_only=True)

    resp = await client.get("/set-cookie")

    assert resp.status == 200
    assert len(resp.headers.getall("Set-Cookie")) == 2
    assert len(jar) == 0


async def test_post_body_and_method_are_forwarded(proxy_factory: ProxyFactory) -> None:
    client, _ = await proxy_factory()

    resp = await client.post("/echo", data=b"amount=10", headers={"Content-Type": "text/plain"})

    payload = await resp.json()
    assert payload["method"] == "POST"
    assert payload["body"] == "amount=10"


async def test_redirect_is_relayed_not_followed(proxy_factory: ProxyFactory) -> None:
    client, _ = await proxy_factory()

    resp = await client.get("/redirect", allow_redirects=False)

    assert resp.status == 302
    assert resp.headers["Location"] == "/echo"


async def test_encoded_body_is_relayed_byte_for_byte(proxy_factory: ProxyFactory) -> None:
    client, _ = await proxy_factory()

    resp = await client.get("/gzip")

    assert resp.headers["Content-Encoding"] == "gzip"
    assert await resp.read() == GZIP_BODY


async def test_head_response_keeps_upstream_content_length(
    proxy_factory: ProxyFactory,
) -> None:
    client, _ = await proxy_factory()

    resp = await client.head("/big")

    assert resp.status == 200
    assert resp.headers["Content-Length"] == "5000"
    assert await resp.read() == b""


async def test_get_response_content_length_matches_relayed_body(
    proxy_factory: ProxyFactory,
) -> None:
    client, _ = await proxy_factory()

    resp = await client.get("/big")

    assert resp.headers["Content-Length"] == "5000"
    assert len(await resp.read()) == 5000


async def test_upstream_status_is_relayed(proxy_factory: ProxyFactory) -> None:
    client, _ = await proxy_factory()

    resp = await client.get("/missing")

    assert resp.status == 404


async def test_invalid_absolute_target_is_bad_request(proxy_factory: ProxyFactory) -> None:
    client, _ = await proxy_factory()

    resp = await _get_raw(client, "/http://")

    assert resp.status == 400
    assert (await resp.text()).startswith("Invalid URL")


async def test_unreachable_upstream_is_bad_gateway(proxy_factory: ProxyFactory) -> None:
    client, _ = await proxy_factory(upstream_base_url="http://127.0.0.1:1/")

    resp = await client.get("/anything")

    assert resp.status == 502
    assert (await resp.text()).startswith("Request error:")


async def test_upstream_timeout_is_gateway_timeout(proxy_factory: ProxyFactory) -> None:
    http_client = AsyncMock()
    http_client.request.side_effect = UpstreamTimeoutError("Request timed out after 30s")
    client, _ = await proxy_factory(http_client=http_client)

    resp = await client.get("/slow")

    assert resp.status == 504
    assert await resp.text() == "Request error: Request timed out after 30s"


def test_relay_headers_drop_framing_and_keep_duplicates() -> None:
    upstream = CIMultiDictProxy(
        CIMultiDict(
            [
                ("Content-Type", "text/html"),
                ("Transfer-Encoding", "chunked"),
                ("Content-Length", "12"),
                ("Connection", "keep-alive"),
                ("Set-Cookie", "a=1"),
                ("Set-Cookie", "b=2"),
            ]
        )
    )

    relayed = ReverseProxyHandler.relay_headers(upstream)

    assert list(relayed.items()) == [
        ("Content-Type", "text/html"),
        ("Set-Cookie", "a=1"),
        ("Set-Cookie", "b=2"),
    ]


@pytest.mark.parametrize(
    ("url", "expected"),
    [
        ("https://panel.example/x", "panel.example"),
        ("http://panel.example:8081/", "panel.example:8081"),
        ("http://[::1]:9000/", "[::1]:9000"),
    ],
)
def test_host_header(url: str, expected: str) -> None:
    assert host_header(URL(url)) == expected


def test_relay_headers_keep_content_length_for_bodyless_responses() -> None:
    upstream = CIMultiDictProxy(
        CIMultiDict(
            [
                ("Content-Length", "5000"),
                ("Transfer-Encoding", "chunked"),
                ("ETag", '"v1"'),
            ]
        )
    )

    relayed = ReverseProxyHandler.relay_headers(upstream, keep_content_length=True)

    assert list(relayed.items()) == [("Content-Length", "5000"), ("ETag", '"v1"')]

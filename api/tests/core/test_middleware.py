"""Unit tests for core.middleware module.

Tests SecurityHeadersMiddleware:
- Adds security headers to HTTP responses
- Skips non-HTTP scopes
- Uses the strict CSP for API paths and the relaxed one for docs
- Marks every response as non-cacheable
"""

import pytest

from core.middleware import SecurityHeadersMiddleware


async def _noop_receive():
    return {"type": "http.request", "body": b""}


async def _make_app_that_sends_response(scope, receive, send):
    """Simulate an ASGI app that sends a response."""
    await send({"type": "http.response.start", "status": 200, "headers": []})
    await send({"type": "http.response.body", "body": b"OK"})


async def _headers_for(path: str) -> dict[bytes, bytes]:
    middleware = SecurityHeadersMiddleware(_make_app_that_sends_response)
    sent_messages = []

    async def mock_send(message):
        sent_messages.append(message)

    await middleware({"type": "http", "path": path}, _noop_receive, mock_send)
    return dict(sent_messages[0]["headers"])


@pytest.mark.unit
class TestSecurityHeadersMiddleware:
    """Test SecurityHeadersMiddleware adds expected headers."""

    async def test_adds_security_headers(self):
        headers = await _headers_for("/api/v1/products")

        assert headers[b"x-content-type-options"] == b"nosniff"
        assert headers[b"x-frame-options"] == b"DENY"
        assert b"referrer-policy" in headers
        assert b"strict-transport-security" in headers
        assert b"permissions-policy" in headers
        assert headers[b"cache-control"] == b"no-store"

    async def test_api_paths_get_strict_csp(self):
        headers = await _headers_for("/api/v1/orders/1")

        assert headers[b"content-security-policy"] == SecurityHeadersMiddleware.API_CSP

    async def test_docs_paths_get_relaxed_csp(self):
        headers = await _headers_for("/docs")

        assert headers[b"content-security-policy"] == (
            SecurityHeadersMiddleware.DOCS_CSP
        )

    async def test_skips_non_http_scopes(self):
        called = False

        async def inner_app(scope, receive, send):
            nonlocal called
            called = True

        middleware = SecurityHeadersMiddleware(inner_app)
        scope = {"type": "websocket"}

        await middleware(scope, _noop_receive, lambda msg: None)
        assert called

    async def test_preserves_existing_headers(self):
        async def app_with_headers(scope, receive, send):
            await send(
                {
                    "type": "http.response.start",
                    "status": 200,
                    "headers": [(b"x-custom", b"value")],
                }
            )

        middleware = SecurityHeadersMiddleware(app_with_headers)
        scope = {"type": "http", "path": "/test"}
        sent_messages = []

        async def mock_send(message):
            sent_messages.append(message)

        await middleware(scope, _noop_receive, mock_send)

        header_names = {h[0] for h in sent_messages[0]["headers"]}
        assert b"x-custom" in header_names
        assert b"x-content-type-options" in header_names

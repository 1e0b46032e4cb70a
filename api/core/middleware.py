"""ASGI middleware for API response hardening."""

from __future__ import annotations

from starlette.types import ASGIApp, Message, Receive, Scope, Send


class SecurityHeadersMiddleware:
    """Adds security headers suited to a JSON API.

    Swagger UI under /docs loads its bundle from a CDN, so those paths get a
    relaxed CSP when docs are enabled.
    """

    SECURITY_HEADERS: list[tuple[bytes, bytes]] = [
        (b"x-content-type-options", b"nosniff"),
        (b"x-frame-options", b"DENY"),
        (b"x-xss-protection", b"0"),
        (b"referrer-policy", b"no-referrer"),
        (b"strict-transport-security", b"max-age=31536000; includeSubDomains"),
        (b"permissions-policy", b"camera=(), microphone=(), geolocation=()"),
    ]

    API_CSP = b"default-src 'none'; frame-ancestors 'none'"
    DOCS_CSP = (
        b"default-src 'self';"
        b" script-src 'self' 'unsafe-inline' https://cdn.jsdelivr.net;"
        b" style-src 'self' 'unsafe-inline' https://cdn.jsdelivr.net;"
        b" img-src 'self' https://fastapi.tiangolo.com data:;"
        b" frame-ancestors 'none'"
    )
    DOCS_PATHS = ("/docs", "/redoc", "/openapi.json")

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        is_docs = scope.get("path", "").startswith(self.DOCS_PATHS)

        async def send_wrapper(message: Message) -> None:
            if message.get("type") == "http.response.start":
                headers: list[tuple[bytes, bytes]] = list(message.get("headers", []))
                headers.extend(self.SECURITY_HEADERS)
                headers.append(
                    (
                        b"content-security-policy",
                        self.DOCS_CSP if is_docs else self.API_CSP,
                    )
                )
                headers.append((b"cache-control", b"no-store"))
                message["headers"] = headers
            await send(message)

        await self.app(scope, receive, send_wrapper)

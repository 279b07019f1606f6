from __future__ import annotations

import gzip
import hashlib
import json
import logging
import mimetypes
import time
import uuid
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from pathlib import Path
from urllib.parse import unquote, urlsplit

from .config import DEV_PAGES, SECURE_PAGES, VERSION, SiteConfig
from .ratelimit import FixedWindowLimiter
from .security import (
    HOMEPAGE_CSP,
    NO_CACHE_HEADERS,
    PREFLIGHT_HEADERS,
    cors_headers,
    is_html,
    is_sensitive,
    is_static_asset,
    origin_allowed,
    security_headers,
)

logger = logging.getLogger(__name__)

COMPRESSIBLE_TYPES = (
    "text/",
    "application/javascript",
    "application/json",
    "image/svg+xml",
)


@dataclass(slots=True)
class Response:
    status: int
    body: bytes = b""
    content_type: str | None = None
    headers: list[tuple[str, str]] = field(default_factory=list)

    def header(self, name: str) -> str | None:
        lname = name.lower()
        for k, v in reversed(self.headers):
            if k.lower() == lname:
                return v
        return None


def _utc_now() -> str:
    return datetime.now(tz=timezone.utc).isoformat().replace("+00:00", "Z")


def _json(status: int, obj: object) -> Response:
    payload = json.dumps(obj).encode("utf-8")
    return Response(status=status, body=payload, content_type="application/json; charset=utf-8")


def _redirect(location: str) -> Response:
    return Response(status=302, headers=[("Location", location)])


def _content_type(path: Path) -> str:
    mime, _ = mimetypes.guess_type(str(path))
    mime = mime or "application/octet-stream"
    if mime.startswith("text/") or mime == "application/javascript":
        return f"{mime}; charset=utf-8"
    return mime


def _etag(data: bytes) -> str:
    return '"' + hashlib.sha1(data).hexdigest() + '"'


class SiteApp:
    """Request handling for the static site, independent of the socket layer."""

    def __init__(self, cfg: SiteConfig, *, clock: Callable[[], float] = time.monotonic) -> None:
        self.cfg = cfg
        rl = cfg.rate_limit
        self.limiter = FixedWindowLimiter(
            max_requests=rl.max_requests, window_seconds=rl.window_seconds, clock=clock
        )
        self.strict_limiter = FixedWindowLimiter(
            max_requests=rl.strict_max_requests, window_seconds=rl.window_seconds, clock=clock
        )
        self._views = cfg.views_dir.resolve()
        self._public = cfg.public_dir.resolve()

    def handle(
        self,
        method: str,
        raw_path: str,
        headers: Mapping[str, str],
        client_ip: str,
    ) -> Response:
        hdrs = {k.lower(): v for k, v in headers.items()}
        try:
            resp = self._route(method.upper(), raw_path, hdrs, client_ip)
        except Exception as e:  # noqa: BLE001
            resp = self._internal_error(e, method=method, path=raw_path, hdrs=hdrs, ip=client_ip)
        return self._finalize(resp, raw_path, hdrs)

    # -- pipeline --------------------------------------------------------

    def _route(
        self, method: str, raw_path: str, hdrs: dict[str, str], client_ip: str
    ) -> Response:
        path = unquote(urlsplit(raw_path).path) or "/"
        extra: list[tuple[str, str]] = []

        if not is_static_asset(path):
            decision = self.limiter.hit(client_ip)
            extra += decision.headers()
            if not decision.allowed:
                logger.warning("rate limit exceeded ip=%s path=%s", client_ip, path)
                resp = _json(
                    429,
                    {
                        "error": "Too many requests from this IP, please try again later.",
                        "retryAfter": "15 minutes",
                    },
                )
                resp.headers += extra
                return resp

        origin = hdrs.get("origin")
        if not origin_allowed(origin, self.cfg.cors_origins):
            logger.warning("cors rejected origin=%s path=%s", origin, path)
            return _json(403, {"error": "Not allowed by CORS"})
        if origin:
            extra += cors_headers(origin)

        if method == "OPTIONS":
            resp = Response(status=200, headers=list(PREFLIGHT_HEADERS))
        elif method not in ("GET", "HEAD"):
            resp = self._not_found()
        elif path in ("/health", "/health/"):
            resp = self._health(client_ip)
        elif self.cfg.dev_mode:
            resp = self._dev_route(path, hdrs)
        else:
            resp = self._page_route(path, hdrs)

        resp.headers += extra
        return resp

    def _health(self, client_ip: str) -> Response:
        decision = self.strict_limiter.hit(client_ip)
        if not decision.allowed:
            logger.warning("health rate limit exceeded ip=%s", client_ip)
            resp = _json(429, {"error": "API rate limit exceeded, please try again later."})
        else:
            resp = _json(200, {"status": "healthy", "timestamp": _utc_now(), "version": VERSION})
        resp.headers += decision.headers()
        return resp

    def _page_route(self, path: str, hdrs: dict[str, str]) -> Response:
        if path == "/":
            resp = self._view("index.html")
            if resp is not None:
                resp.headers.append(("Content-Security-Policy", HOMEPAGE_CSP))
                return resp
            return self._not_found()

        name = path.lstrip("/")
        if name.endswith(".html") and name[: -len(".html")] in SECURE_PAGES:
            resp = self._view(name)
            if resp is not None:
                return resp
            return self._not_found()

        return self._static(path, hdrs) or self._not_found()

    def _dev_route(self, path: str, hdrs: dict[str, str]) -> Response:
        if path == "/":
            return self._view("homepage.html") or self._not_found()
        name = path.lstrip("/")
        if "/" not in name and name.endswith(".html"):
            if name[: -len(".html")] in DEV_PAGES:
                return self._view(name) or _redirect("/")
            return _redirect("/")
        return self._static(path, hdrs) or _redirect("/")

    def _view(self, name: str) -> Response | None:
        target = self._views / name
        if not target.is_file():
            return None
        return Response(status=200, body=target.read_bytes(), content_type=_content_type(target))

    def _static(self, path: str, hdrs: dict[str, str]) -> Response | None:
        rel = path.lstrip("/")
        if not rel:
            return None
        target = (self._public / rel).resolve()
        if self._public not in target.parents:
            return _json(403, {"error": "Forbidden"})
        if is_sensitive(rel):
            logger.warning("blocked sensitive path %s", path)
            return _json(403, {"error": "Forbidden"})
        if not target.is_file():
            return None

        data = target.read_bytes()
        etag = _etag(data)
        caching = [("ETag", etag), ("Cache-Control", f"public, max-age={self.cfg.static_max_age}")]
        if hdrs.get("if-none-match") == etag:
            return Response(status=304, headers=caching)
        return Response(status=200, body=data, content_type=_content_type(target), headers=caching)

    def _not_found(self) -> Response:
        resp = self._view("index.html")
        if resp is None:
            return Response(status=404, body=b"Not Found", content_type="text/plain; charset=utf-8")
        resp.status = 404
        return resp

    def _internal_error(
        self,
        err: Exception,
        *,
        method: str,
        path: str,
        hdrs: dict[str, str],
        ip: str,
    ) -> Response:
        request_id = uuid.uuid4().hex[:9]
        logger.error(
            "internal error request_id=%s method=%s url=%s ip=%s ua=%s: %s",
            request_id,
            method,
            path,
            ip,
            hdrs.get("user-agent", ""),
            err,
            exc_info=not self.cfg.production,
        )
        return _json(
            500,
            {"error": "Internal server error", "timestamp": _utc_now(), "requestId": request_id},
        )

    def _finalize(self, resp: Response, raw_path: str, hdrs: dict[str, str]) -> Response:
        own = {name.lower() for name, _ in resp.headers}
        base = [(k, v) for k, v in security_headers(self.cfg) if k.lower() not in own]
        resp.headers = base + resp.headers
        path = urlsplit(raw_path).path
        is_page = is_html(path) or (resp.content_type or "").startswith("text/html")
        if is_page and "cache-control" not in own:
            resp.headers += list(NO_CACHE_HEADERS)
        if resp.content_type is not None:
            resp.headers.append(("Content-Type", resp.content_type))
        self._compress(resp, hdrs)
        return resp

    def _compress(self, resp: Response, hdrs: dict[str, str]) -> None:
        if len(resp.body) < self.cfg.compression_threshold or "x-no-compression" in hdrs:
            return
        if "gzip" not in hdrs.get("accept-encoding", ""):
            return
        ctype = resp.content_type or ""
        if not ctype.startswith(COMPRESSIBLE_TYPES):
            return
        resp.body = gzip.compress(resp.body, compresslevel=self.cfg.compression_level)
        resp.headers += [("Content-Encoding", "gzip"), ("Vary", "Accept-Encoding")]


def make_handler(app: SiteApp) -> type[BaseHTTPRequestHandler]:
    class Handler(BaseHTTPRequestHandler):
        timeout = app.cfg.request_timeout

        def version_string(self) -> str:
            return "alae-site"

        def _dispatch(self, method: str) -> None:
            resp = app.handle(method, self.path, dict(self.headers.items()), self.client_address[0])
            self.send_response(resp.status)
            for name, value in resp.headers:
                self.send_header(name, value)
            self.send_header("Content-Length", str(len(resp.body)))
            self.end_headers()
            if method != "HEAD" and resp.body:
                self.wfile.write(resp.body)

        def do_GET(self) -> None:  # noqa: N802
            self._dispatch("GET")

        def do_HEAD(self) -> None:  # noqa: N802
            self._dispatch("HEAD")

        def do_OPTIONS(self) -> None:  # noqa: N802
            self._dispatch("OPTIONS")

        def do_POST(self) -> None:  # noqa: N802
            self._dispatch("POST")

        def do_PUT(self) -> None:  # noqa: N802
            self._dispatch("PUT")

        def do_DELETE(self) -> None:  # noqa: N802
            self._dispatch("DELETE")

        def log_message(self, fmt: str, *args: object) -> None:  # noqa: A003
            logger.debug("%s - %s", self.address_string(), fmt % args)

    return Handler


def create_server(cfg: SiteConfig, app: SiteApp | None = None) -> ThreadingHTTPServer:
    site = app if app is not None else SiteApp(cfg)
    server = ThreadingHTTPServer((cfg.host, cfg.port), make_handler(site))
    server.daemon_threads = True
    return server

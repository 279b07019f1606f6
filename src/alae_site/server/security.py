from __future__ import annotations

import re
from collections.abc import Iterable, Sequence
from pathlib import PurePosixPath

from .config import SiteConfig

STATIC_ASSET_RE = re.compile(r"\.(css|js|png|jpg|jpeg|gif|ico|svg|woff|woff2|ttf|eot)$", re.I)
HTML_RE = re.compile(r"\.(html|htm)$", re.I)
# CORS wildcard: host labels or a port, never a path or query.
WILDCARD = r"[A-Za-z0-9.-]*"

SENSITIVE_NAMES = (".env", ".git", "pyproject.toml", "setup.cfg")
SENSITIVE_SUFFIXES = (".py", ".pyc")

HSTS_MAX_AGE = 31536000

# Tighter policy sent with the homepage itself.
HOMEPAGE_CSP = (
    "default-src 'self'; "
    "style-src 'self' 'unsafe-inline' https://fonts.googleapis.com; "
    "font-src 'self' https://fonts.gstatic.com; "
    "script-src 'self' 'unsafe-inline' https://unpkg.com;"
)

NO_CACHE_HEADERS: tuple[tuple[str, str], ...] = (
    ("Cache-Control", "no-cache, no-store, must-revalidate"),
    ("Pragma", "no-cache"),
    ("Expires", "0"),
)


def content_security_policy(cfg: SiteConfig) -> str:
    directives: list[tuple[str, Sequence[str]]] = [
        ("default-src", ["'self'"]),
        (
            "style-src",
            ["'self'", "'unsafe-inline'", "https://fonts.googleapis.com", "https://unpkg.com"],
        ),
        ("font-src", ["'self'", "https://fonts.gstatic.com"]),
        ("script-src", ["'self'", "'unsafe-inline'", "https://unpkg.com"]),
        ("img-src", ["'self'", "data:", "https:"]),
        ("connect-src", ["'self'", *cfg.connect_src]),
        ("frame-src", ["'none'"]),
        ("object-src", ["'none'"]),
    ]
    parts = [f"{name} {' '.join(values)}" for name, values in directives]
    if cfg.production:
        parts.append("upgrade-insecure-requests")
    return "; ".join(parts)


def security_headers(cfg: SiteConfig) -> list[tuple[str, str]]:
    """Headers sent with every response."""
    return [
        ("Content-Security-Policy", content_security_policy(cfg)),
        ("Strict-Transport-Security", f"max-age={HSTS_MAX_AGE}; includeSubDomains; preload"),
        ("X-Content-Type-Options", "nosniff"),
        ("X-Frame-Options", "DENY"),
        ("X-XSS-Protection", "1; mode=block"),
        ("Referrer-Policy", "strict-origin-when-cross-origin"),
        ("Permissions-Policy", "geolocation=(), microphone=(), camera=()"),
        ("Cross-Origin-Opener-Policy", "same-origin"),
        ("Cross-Origin-Resource-Policy", "same-origin"),
    ]


def is_static_asset(path: str) -> bool:
    return STATIC_ASSET_RE.search(path.split("?", 1)[0]) is not None


def is_html(path: str) -> bool:
    return HTML_RE.search(path.split("?", 1)[0]) is not None


def is_sensitive(path: str) -> bool:
    parts = PurePosixPath(path).parts
    if any(part in SENSITIVE_NAMES or part.startswith(".env") for part in parts):
        return True
    return path.endswith(SENSITIVE_SUFFIXES)


def _origin_pattern(pattern: str) -> re.Pattern[str]:
    return re.compile(WILDCARD.join(re.escape(piece) for piece in pattern.split("*")))


def origin_allowed(origin: str | None, patterns: Iterable[str]) -> bool:
    """CORS origin check. Requests without an Origin header are allowed.

    Patterns are exact origins or contain ``*`` wildcards matching a run of host or
    port characters; the whole origin must match.
    """
    if not origin:
        return True
    for pattern in patterns:
        if "*" in pattern:
            if _origin_pattern(pattern).fullmatch(origin):
                return True
        elif pattern == origin:
            return True
    return False


def cors_headers(origin: str) -> list[tuple[str, str]]:
    return [
        ("Access-Control-Allow-Origin", origin),
        ("Access-Control-Allow-Credentials", "true"),
        ("Vary", "Origin"),
    ]


PREFLIGHT_HEADERS: tuple[tuple[str, str], ...] = (
    ("Access-Control-Allow-Methods", "GET,HEAD,PUT,PATCH,POST,DELETE"),
    ("Access-Control-Allow-Headers", "Content-Type, Authorization"),
)

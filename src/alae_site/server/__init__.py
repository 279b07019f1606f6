"""Static page server with security headers, rate limiting and CORS."""

from .app import Response, SiteApp, create_server, make_handler
from .config import SECURE_PAGES, VERSION, RateLimitConfig, SiteConfig
from .ratelimit import FixedWindowLimiter, RateDecision
from .security import content_security_policy, is_sensitive, origin_allowed, security_headers

__all__ = [
    "FixedWindowLimiter",
    "RateDecision",
    "RateLimitConfig",
    "Response",
    "SECURE_PAGES",
    "SiteApp",
    "SiteConfig",
    "VERSION",
    "content_security_policy",
    "create_server",
    "is_sensitive",
    "make_handler",
    "origin_allowed",
    "security_headers",
]

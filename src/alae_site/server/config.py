from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from pathlib import Path

VERSION = "2.0.0"

SECURE_PAGES: tuple[str, ...] = (
    "monthly_statements",
    "invoices",
    "cc_batch",
    "excel_macros",
    "excel_formatter",
    "unapplied_cash_report",
    "help",
    "index",
    "company_memory",
    "homepage",
)

# Pages the dev server knows about; anything else redirects to "/".
DEV_PAGES: tuple[str, ...] = (
    "homepage",
    "monthly_statements",
    "invoices",
    "cc_batch",
    "excel_macros",
    "help",
    "index",
)

DEFAULT_ALLOWED_ORIGINS: tuple[str, ...] = (
    "https://alaeautomatesmodernapi.up.railway.app",
    "https://*.railway.app",
    "http://localhost:3000",
)
DEV_ALLOWED_ORIGINS: tuple[str, ...] = ("http://localhost:*",)

DEFAULT_CONNECT_SRC: tuple[str, ...] = (
    "https://alaeautomatesapi.up.railway.app",
    "https://*.railway.app",
)


@dataclass(frozen=True, slots=True)
class RateLimitConfig:
    window_seconds: float = 15 * 60
    max_requests: int = 1000
    strict_max_requests: int = 100

    def __post_init__(self) -> None:
        if self.window_seconds <= 0:
            raise ValueError("window_seconds must be positive")
        if self.max_requests <= 0 or self.strict_max_requests <= 0:
            raise ValueError("rate limits must be positive")


@dataclass(frozen=True, slots=True)
class SiteConfig:
    views_dir: Path
    public_dir: Path
    host: str = "127.0.0.1"
    port: int = 3000
    production: bool = False
    dev_mode: bool = False
    allowed_origins: tuple[str, ...] = DEFAULT_ALLOWED_ORIGINS
    connect_src: tuple[str, ...] = DEFAULT_CONNECT_SRC
    rate_limit: RateLimitConfig = field(default_factory=RateLimitConfig)
    compression_threshold: int = 1024
    compression_level: int = 6
    request_timeout: float = 30.0

    def __post_init__(self) -> None:
        if not (0 <= self.port <= 65535):
            raise ValueError("port must be in [0, 65535]")
        if self.compression_threshold < 0:
            raise ValueError("compression_threshold must be >= 0")
        if not (1 <= self.compression_level <= 9):
            raise ValueError("compression_level must be in [1, 9]")
        if self.request_timeout <= 0:
            raise ValueError("request_timeout must be positive")

    @property
    def environment(self) -> str:
        return "production" if self.production else "development"

    @property
    def cors_origins(self) -> tuple[str, ...]:
        if self.production:
            return self.allowed_origins
        return self.allowed_origins + DEV_ALLOWED_ORIGINS

    @property
    def static_max_age(self) -> int:
        return 86400 if self.production else 0

    @classmethod
    def from_env(
        cls,
        root: Path,
        environ: Mapping[str, str] | None = None,
    ) -> SiteConfig:
        """Defaults from ``PORT`` and ``SITE_ENV`` (``production`` or anything else)."""
        env = os.environ if environ is None else environ
        port_raw = env.get("PORT", "").strip()
        port = int(port_raw) if port_raw else 3000
        production = env.get("SITE_ENV", "development").strip().lower() == "production"
        return cls(
            views_dir=root / "views",
            public_dir=root / "public",
            port=port,
            production=production,
        )

    def with_overrides(self, **changes: object) -> SiteConfig:
        return replace(self, **changes)  # type: ignore[arg-type]

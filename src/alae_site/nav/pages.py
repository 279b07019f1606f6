from __future__ import annotations

from enum import Enum


class PageId(str, Enum):
    """Logical identifier for one of the site's static pages."""

    HOMEPAGE = "homepage"
    INVOICES = "invoices"
    MONTHLY_STATEMENTS = "monthly_statements"
    CC_BATCH = "cc_batch"
    EXCEL_MACROS = "excel_macros"
    HELP = "help"

    @property
    def href(self) -> str:
        return f"/{self.value}.html"

    @property
    def is_feature(self) -> bool:
        return self in FEATURE_PAGES


FEATURE_PAGES: frozenset[PageId] = frozenset(
    {PageId.INVOICES, PageId.MONTHLY_STATEMENTS, PageId.CC_BATCH, PageId.EXCEL_MACROS}
)

DEFAULT_PAGE = PageId.HOMEPAGE

_PAGE_SUFFIXES = (".html", ".htm")
_BY_NAME = {p.value: p for p in PageId}


def page_name(location_path: str) -> str:
    """Return the bare page name of a location path (last segment, no suffix)."""
    path = location_path.split("?", 1)[0].split("#", 1)[0].strip()
    path = path.rstrip("/")
    name = path.rsplit("/", 1)[-1].lower()
    for suffix in _PAGE_SUFFIXES:
        if name.endswith(suffix):
            return name[: -len(suffix)]
    return name


def resolve_current_page(location_path: str) -> PageId:
    """Map a location path to a PageId.

    Total: any string resolves, unrecognized or empty paths give ``homepage``.
    """
    if not isinstance(location_path, str):
        return DEFAULT_PAGE
    return _BY_NAME.get(page_name(location_path), DEFAULT_PAGE)


def resolve_feature_page(location_path: str) -> PageId | None:
    page = resolve_current_page(location_path)
    return page if page.is_feature else None


def normalize_href(url: str) -> str:
    """Turn a nav target into an absolute site path."""
    url = url.strip()
    if url in ("", "/"):
        return DEFAULT_PAGE.href
    if url.startswith("/"):
        return url
    return "/" + url

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TypeVar

from .geometry import Rect
from .pages import PageId
from .session import MemorySessionStore, SessionStore

T = TypeVar("T")


@dataclass(slots=True)
class NavItem:
    """A clickable navigation entry bound to a page."""

    page: PageId
    href: str
    rect: Rect | None = None
    active: bool = False


@dataclass(slots=True)
class NavRow:
    """The row containing the nav items; the indicator is positioned inside it."""

    rect: Rect | None
    items: list[NavItem] = field(default_factory=list)

    @property
    def active_items(self) -> list[NavItem]:
        return [item for item in self.items if item.active]


class Browser(ABC):
    @property
    @abstractmethod
    def location_path(self) -> str:
        raise NotImplementedError

    @property
    @abstractmethod
    def session(self) -> SessionStore:
        raise NotImplementedError

    @property
    @abstractmethod
    def supports_transitions(self) -> bool:
        raise NotImplementedError

    @abstractmethod
    def query_nav_row(self) -> NavRow | None:
        raise NotImplementedError

    @abstractmethod
    def navigate(self, url: str) -> None:
        raise NotImplementedError


class MemoryBrowser(Browser):
    """In-memory page used offline and in tests.

    ``navigate`` only records the destination and updates the location; the
    caller decides when the next page load happens.
    """

    def __init__(
        self,
        *,
        location_path: str = "/",
        row: NavRow | None = None,
        session: SessionStore | None = None,
        supports_transitions: bool = True,
    ) -> None:
        self._path = location_path
        self._row = row
        self._session = session if session is not None else MemorySessionStore()
        self._supports_transitions = supports_transitions
        self.navigations: list[str] = []
        self.row_queries = 0

    @property
    def location_path(self) -> str:
        return self._path

    @property
    def session(self) -> SessionStore:
        return self._session

    @property
    def supports_transitions(self) -> bool:
        return self._supports_transitions

    def query_nav_row(self) -> NavRow | None:
        self.row_queries += 1
        return self._row

    def replace_row(self, row: NavRow | None) -> None:
        self._row = row

    def navigate(self, url: str) -> None:
        self.navigations.append(url)
        self._path = url


class PageContext:
    """Per-page-load context passed to every nav handler.

    Owns the DOM query cache. ``invalidate`` is called at the start of each
    page load so nothing queried on a previous page is reused.
    """

    def __init__(self, browser: Browser) -> None:
        self.browser = browser
        self._cache: dict[str, object] = {}

    def query(self, key: str, fetch: Callable[[], T]) -> T:
        if key in self._cache:
            return self._cache[key]  # type: ignore[return-value]
        value = fetch()
        if value is not None:
            self._cache[key] = value
        return value

    def nav_row(self) -> NavRow | None:
        return self.query("nav_row", self.browser.query_nav_row)

    def invalidate(self) -> None:
        self._cache.clear()

from __future__ import annotations

from enum import Enum
from typing import Protocol

from .pages import PageId

NAVIGATION_INITIALIZED = "navigation_initialized"
HAS_VISITED_FEATURE_PAGE = "hasVisitedFeaturePage"
LAST_FEATURE_PAGE = "lastFeaturePage"

_TRUE = "true"


class SessionStore(Protocol):
    """Session-scoped string key/value store (sessionStorage)."""

    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...


class MemorySessionStore:
    """In-memory session store. Values live as long as the instance."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial) if initial is not None else {}

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = str(value)

    def snapshot(self) -> dict[str, str]:
        return dict(self._data)


def get_flag(store: SessionStore, key: str) -> bool:
    return store.get(key) == _TRUE


def set_flag(store: SessionStore, key: str) -> None:
    # Flags are only ever raised; the session end clears them.
    store.set(key, _TRUE)


class Entrance(str, Enum):
    """Entrance animation applied to a page's feature card."""

    PAGE_ENTER = "page-enter"
    PAGE_TRANSITION = "page-transition"


def navigation_first_load(store: SessionStore) -> bool:
    """True on the session's first page load; records that the nav has run."""
    initialized = get_flag(store, NAVIGATION_INITIALIZED)
    if not initialized:
        set_flag(store, NAVIGATION_INITIALIZED)
    return not initialized


def feature_entrance(store: SessionStore, page: PageId) -> Entrance | None:
    """Pick the feature card entrance for ``page`` and update the session.

    The first feature page of a session gets the full entrance, moving
    between different feature pages gets the subtle transition, and a
    reload of the same page gets nothing. Non-feature pages are ignored.
    """
    if not page.is_feature:
        return None

    last = store.get(LAST_FEATURE_PAGE)
    entrance: Entrance | None = None
    if not get_flag(store, HAS_VISITED_FEATURE_PAGE):
        entrance = Entrance.PAGE_ENTER
        set_flag(store, HAS_VISITED_FEATURE_PAGE)
    elif last and last != page.value:
        entrance = Entrance.PAGE_TRANSITION

    store.set(LAST_FEATURE_PAGE, page.value)
    return entrance

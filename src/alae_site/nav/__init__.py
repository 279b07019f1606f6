"""Client-side navigation state: active item, indicator, page transitions."""

from .browser import Browser, MemoryBrowser, NavItem, NavRow, PageContext
from .geometry import Geometry, Rect, relative_geometry
from .pages import (
    FEATURE_PAGES,
    PageId,
    normalize_href,
    resolve_current_page,
    resolve_feature_page,
)
from .scheduling import AsyncioScheduler, ManualScheduler, Scheduler
from .session import (
    Entrance,
    MemorySessionStore,
    SessionStore,
    feature_entrance,
    navigation_first_load,
)
from .state import Indicator, NavState, compute_active_item, init_navigation
from .transitions import AnimatedTransition, InstantTransition, PageTransition, select_transition

__all__ = [
    "AnimatedTransition",
    "AsyncioScheduler",
    "Browser",
    "Entrance",
    "FEATURE_PAGES",
    "Geometry",
    "Indicator",
    "InstantTransition",
    "ManualScheduler",
    "MemoryBrowser",
    "MemorySessionStore",
    "NavItem",
    "NavRow",
    "NavState",
    "PageContext",
    "PageId",
    "PageTransition",
    "Rect",
    "Scheduler",
    "SessionStore",
    "compute_active_item",
    "feature_entrance",
    "init_navigation",
    "navigation_first_load",
    "normalize_href",
    "relative_geometry",
    "resolve_current_page",
    "resolve_feature_page",
    "select_transition",
]

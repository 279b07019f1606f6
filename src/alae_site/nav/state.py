from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from .browser import NavItem, NavRow, PageContext
from .geometry import Geometry, relative_geometry
from .pages import DEFAULT_PAGE, PageId, resolve_current_page
from .scheduling import Scheduler, TimerHandle
from .session import Entrance, feature_entrance, navigation_first_load
from .transitions import (
    DEFAULT_NAVIGATION_DELAY_MS,
    INDICATOR_TRANSITION_MS,
    PageTransition,
    select_transition,
)

logger = logging.getLogger(__name__)

INDICATOR_TRANSITION = (
    f"all {INDICATOR_TRANSITION_MS / 1000:g}s cubic-bezier(0.4, 0, 0.2, 1)"
)


@dataclass(slots=True)
class Indicator:
    """The single element tracking the active item's position."""

    geometry: Geometry | None = None
    transition: str | None = INDICATOR_TRANSITION
    visible: bool = False
    last_animated: bool = False


def compute_active_item(items: Sequence[NavItem], current_page: PageId) -> NavItem | None:
    """Reconcile active flags so at most one item is active.

    Prefers the item for ``current_page``, then whichever item was already
    flagged active. All flags are cleared before the winner is set.
    """
    chosen = next((item for item in items if item.page == current_page), None)
    if chosen is None:
        chosen = next((item for item in items if item.active), None)
    for item in items:
        item.active = False
    if chosen is not None:
        chosen.active = True
    return chosen


class NavState:
    """Active-navigation reconciliation for one page.

    ``load`` binds a fresh :class:`PageContext` on every page load; the
    event handlers are no-ops until then, and whenever the nav row is
    missing or empty.
    """

    def __init__(
        self,
        *,
        scheduler: Scheduler,
        navigation_delay_ms: float = DEFAULT_NAVIGATION_DELAY_MS,
    ) -> None:
        self._scheduler = scheduler
        self._navigation_delay_ms = navigation_delay_ms
        self._context: PageContext | None = None
        self._transition: PageTransition | None = None
        self._reenable: TimerHandle | None = None
        self._preview: NavItem | None = None
        self.indicator = Indicator()
        self.current_page: PageId = DEFAULT_PAGE
        self.first_load = False
        self.entrance: Entrance | None = None

    # -- lifecycle -------------------------------------------------------

    def load(self, context: PageContext) -> PageId:
        context.invalidate()
        self._context = context
        self._preview = None
        self.indicator = Indicator()
        browser = context.browser
        self._transition = select_transition(
            browser, self._scheduler, delay_ms=self._navigation_delay_ms
        )

        self.current_page = resolve_current_page(browser.location_path)
        self.first_load = navigation_first_load(browser.session)
        self.entrance = feature_entrance(browser.session, self.current_page)

        self._sync(animate=False)
        logger.debug(
            "nav loaded page=%s first_load=%s entrance=%s",
            self.current_page.value,
            self.first_load,
            self.entrance.value if self.entrance is not None else None,
        )
        return self.current_page

    @property
    def transition(self) -> PageTransition | None:
        return self._transition

    @property
    def navigation_pending(self) -> bool:
        return self._transition is not None and self._transition.pending

    @property
    def preview(self) -> NavItem | None:
        return self._preview

    @property
    def active_item(self) -> NavItem | None:
        return next((item for item in self._items() if item.active), None)

    def _row(self) -> NavRow | None:
        if self._context is None:
            return None
        return self._context.nav_row()

    def _items(self) -> list[NavItem]:
        row = self._row()
        return row.items if row is not None else []

    def _owns(self, item: NavItem) -> bool:
        return any(candidate is item for candidate in self._items())

    def _sync(self, *, animate: bool) -> None:
        items = self._items()
        if not items:
            return
        active = self.compute_active_item(items, self.current_page)
        if active is not None:
            self.position_indicator(active, animate)

    # -- core operations -------------------------------------------------

    def compute_active_item(
        self, items: Sequence[NavItem], current_page: PageId
    ) -> NavItem | None:
        active = compute_active_item(items, current_page)
        if active is None:
            # Hidden; the last geometry is kept for when an item reappears.
            self.indicator.visible = False
        return active

    def position_indicator(self, item: NavItem, animate: bool) -> Geometry | None:
        row = self._row()
        if row is None or not row.items:
            return self.indicator.geometry

        geom = relative_geometry(item.rect, row.rect)
        if geom is None:
            logger.debug("unusable geometry for %s; keeping last position", item.page.value)
            return self.indicator.geometry

        ind = self.indicator
        if animate:
            ind.transition = INDICATOR_TRANSITION
        else:
            ind.transition = None
            if self._reenable is not None:
                self._reenable.cancel()
            self._reenable = self._scheduler.next_frame(self._restore_transition)
        ind.geometry = geom
        ind.visible = True
        ind.last_animated = animate
        return geom

    def _restore_transition(self) -> None:
        self._reenable = None
        self.indicator.transition = INDICATOR_TRANSITION

    # -- event handlers --------------------------------------------------

    def on_hover_enter(self, item: NavItem) -> None:
        if not self._owns(item) or item.active:
            return
        self._preview = item
        self.position_indicator(item, True)

    def on_hover_leave(self) -> None:
        self._preview = None
        active = self.active_item
        if active is None:
            return
        self.position_indicator(active, True)

    def on_click(self, item: NavItem) -> None:
        if not self._owns(item) or self._transition is None:
            return
        if self._transition.pending:
            logger.debug("ignoring click on %s while navigation pending", item.page.value)
            return
        for other in self._items():
            other.active = False
        item.active = True
        self._preview = None
        self.position_indicator(item, True)
        self._transition.go(item.href)

    def on_resize(self) -> None:
        active = self.active_item
        if active is None:
            return
        self.position_indicator(active, False)

    def on_visibility_change(self, hidden: bool) -> None:
        if hidden or self._context is None:
            return
        self._sync(animate=False)

    def on_brand_click(self) -> None:
        if self._transition is None:
            return
        self._transition.go(PageId.HOMEPAGE.href)


def init_navigation(context: PageContext, scheduler: Scheduler) -> NavState:
    """Per-page-load entry point: build a NavState and bind it to ``context``."""
    nav = NavState(scheduler=scheduler)
    nav.load(context)
    return nav

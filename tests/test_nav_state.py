import math

from alae_site.nav.browser import MemoryBrowser, NavItem, NavRow, PageContext
from alae_site.nav.geometry import Geometry, Rect
from alae_site.nav.pages import PageId
from alae_site.nav.scheduling import ManualScheduler
from alae_site.nav.session import Entrance, MemorySessionStore
from alae_site.nav.state import (
    INDICATOR_TRANSITION,
    NavState,
    compute_active_item,
    init_navigation,
)
from alae_site.nav.transitions import (
    DEFAULT_NAVIGATION_DELAY_MS,
    INDICATOR_TRANSITION_MS,
    AnimatedTransition,
    InstantTransition,
)


def _row() -> NavRow:
    # Row starts at x=10, so indicator left = item left - 10.
    return NavRow(
        rect=Rect(left=10.0, width=400.0),
        items=[
            NavItem(page=PageId.HOMEPAGE, href="/homepage.html", rect=Rect(20.0, 80.0)),
            NavItem(page=PageId.INVOICES, href="/invoices.html", rect=Rect(110.0, 60.0)),
            NavItem(page=PageId.HELP, href="help.html", rect=Rect(180.0, 50.0)),
        ],
    )


def _load(
    path: str,
    row: NavRow | None = None,
    *,
    transitions: bool = True,
    session: MemorySessionStore | None = None,
) -> tuple[NavState, MemoryBrowser, ManualScheduler]:
    scheduler = ManualScheduler()
    browser = MemoryBrowser(
        location_path=path,
        row=row if row is not None else _row(),
        session=session,
        supports_transitions=transitions,
    )
    nav = init_navigation(PageContext(browser), scheduler)
    return nav, browser, scheduler


def _item(nav: NavState, page: PageId) -> NavItem:
    row = nav._row()
    assert row is not None
    return next(i for i in row.items if i.page == page)


def test_load_activates_current_page_item() -> None:
    nav, _, scheduler = _load("/invoices.html")
    assert nav.current_page is PageId.INVOICES
    active = nav.active_item
    assert active is not None and active.page is PageId.INVOICES
    assert [i.active for i in nav._row().items] == [False, True, False]  # type: ignore[union-attr]
    assert nav.indicator.geometry == Geometry(left=100.0, width=60.0)
    assert nav.indicator.visible

    # First paint is not animated; the transition comes back after one layout pass.
    assert nav.indicator.transition is None
    assert nav.indicator.last_animated is False
    scheduler.flush_frame()
    assert nav.indicator.transition == INDICATOR_TRANSITION


def test_compute_active_item_never_leaves_two_active() -> None:
    items = [
        NavItem(page=PageId.INVOICES, href="/invoices.html", active=True),
        NavItem(page=PageId.HELP, href="/help.html", active=True),
    ]
    chosen = compute_active_item(items, PageId.HOMEPAGE)
    assert chosen is items[0]
    assert sum(i.active for i in items) == 1

    chosen = compute_active_item(items, PageId.HELP)
    assert chosen is items[1]
    assert [i.active for i in items] == [False, True]


def test_compute_active_item_falls_back_then_hides() -> None:
    row = NavRow(
        rect=Rect(0.0, 300.0),
        items=[
            NavItem(page=PageId.INVOICES, href="/invoices.html", rect=Rect(0.0, 60.0)),
            NavItem(page=PageId.HELP, href="/help.html", rect=Rect(70.0, 40.0), active=True),
        ],
    )
    nav, _, _ = _load("/", row)
    assert nav.active_item is row.items[1]
    assert nav.indicator.geometry == Geometry(left=70.0, width=40.0)

    for item in row.items:
        item.active = False
    assert nav.compute_active_item(row.items, PageId.HOMEPAGE) is None
    assert not any(i.active for i in row.items)
    assert nav.indicator.visible is False
    # Hidden, not moved.
    assert nav.indicator.geometry == Geometry(left=70.0, width=40.0)


def test_position_indicator_is_idempotent() -> None:
    nav, _, _ = _load("/help.html")
    help_item = _item(nav, PageId.HELP)
    first = nav.position_indicator(help_item, False)
    second = nav.position_indicator(help_item, False)
    assert first == second == Geometry(left=170.0, width=50.0)


def test_hover_preview_restores_active_geometry() -> None:
    nav, _, _ = _load("/invoices.html")
    before = nav.indicator.geometry

    nav.on_hover_enter(_item(nav, PageId.HELP))
    assert nav.indicator.geometry == Geometry(left=170.0, width=50.0)
    assert nav.indicator.last_animated is True
    assert nav.active_item is _item(nav, PageId.INVOICES)

    nav.on_hover_leave()
    assert nav.indicator.geometry == before
    assert nav.preview is None


def test_rapid_hover_sequence_converges_on_active_item() -> None:
    nav, _, scheduler = _load("/invoices.html")
    home = _item(nav, PageId.HOMEPAGE)
    help_item = _item(nav, PageId.HELP)

    nav.on_hover_enter(home)
    nav.on_hover_enter(help_item)
    nav.on_hover_leave()
    nav.on_hover_enter(home)
    scheduler.advance(5)
    nav.on_hover_leave()
    nav.on_hover_leave()

    assert nav.indicator.geometry == Geometry(left=100.0, width=60.0)
    assert nav.preview is None
    assert sum(i.active for i in nav._row().items) == 1  # type: ignore[union-attr]


def test_hover_on_active_item_is_noop() -> None:
    nav, _, scheduler = _load("/invoices.html")
    scheduler.flush_frame()
    active = _item(nav, PageId.INVOICES)
    nav.on_hover_enter(active)
    assert nav.preview is None
    assert nav.indicator.last_animated is False
    assert nav.indicator.geometry == Geometry(left=100.0, width=60.0)


def test_resize_tracks_active_item_without_animation() -> None:
    nav, _, scheduler = _load("/help.html")
    scheduler.flush_frame()
    help_item = _item(nav, PageId.HELP)
    assert nav.indicator.geometry == Geometry(left=170.0, width=50.0)

    help_item.rect = Rect(left=130.0, width=50.0)  # 120 from the row origin
    nav.on_resize()
    assert nav.indicator.geometry == Geometry(left=120.0, width=50.0)
    assert nav.indicator.last_animated is False
    assert nav.indicator.transition is None
    scheduler.flush_frame()
    assert nav.indicator.transition == INDICATOR_TRANSITION


def test_invalid_geometry_keeps_last_valid_position() -> None:
    nav, _, _ = _load("/invoices.html")
    invoices = _item(nav, PageId.INVOICES)

    invoices.rect = Rect(left=110.0, width=math.nan)
    nav.on_resize()
    assert nav.indicator.geometry == Geometry(left=100.0, width=60.0)

    invoices.rect = Rect(left=110.0, width=-4.0)
    nav.on_resize()
    assert nav.indicator.geometry == Geometry(left=100.0, width=60.0)

    invoices.rect = None
    nav.on_resize()
    assert nav.indicator.geometry == Geometry(left=100.0, width=60.0)


def test_click_moves_indicator_then_navigates_after_transition() -> None:
    nav, browser, scheduler = _load("/invoices.html")
    assert isinstance(nav.transition, AnimatedTransition)
    help_item = _item(nav, PageId.HELP)

    nav.on_click(help_item)
    assert nav.active_item is help_item
    assert sum(i.active for i in nav._row().items) == 1  # type: ignore[union-attr]
    assert nav.indicator.geometry == Geometry(left=170.0, width=50.0)
    assert nav.indicator.last_animated is True
    assert nav.navigation_pending
    assert browser.navigations == []

    scheduler.advance(DEFAULT_NAVIGATION_DELAY_MS - 1)
    assert browser.navigations == []
    scheduler.advance(1)
    assert browser.navigations == ["/help.html"]
    assert not nav.navigation_pending


def test_repeat_clicks_ignored_while_navigation_pending() -> None:
    nav, browser, scheduler = _load("/invoices.html")
    help_item = _item(nav, PageId.HELP)
    home = _item(nav, PageId.HOMEPAGE)

    nav.on_click(help_item)
    nav.on_click(home)
    assert nav.active_item is help_item

    scheduler.advance(1000)
    assert browser.navigations == ["/help.html"]


def test_click_navigates_immediately_without_transitions() -> None:
    nav, browser, _ = _load("/invoices.html", transitions=False)
    assert isinstance(nav.transition, InstantTransition)
    nav.on_click(_item(nav, PageId.HOMEPAGE))
    assert browser.navigations == ["/homepage.html"]
    assert nav.active_item is _item(nav, PageId.HOMEPAGE)


def test_brand_click_goes_home() -> None:
    nav, browser, scheduler = _load("/help.html")
    nav.on_brand_click()
    scheduler.advance(DEFAULT_NAVIGATION_DELAY_MS)
    assert browser.navigations == ["/homepage.html"]


def test_empty_or_missing_row_is_noop() -> None:
    for row in (NavRow(rect=Rect(0.0, 100.0), items=[]), None):
        scheduler = ManualScheduler()
        browser = MemoryBrowser(location_path="/help.html", row=row)
        nav = init_navigation(PageContext(browser), scheduler)
        stray = NavItem(page=PageId.HELP, href="/help.html", rect=Rect(0.0, 10.0))

        nav.on_hover_enter(stray)
        nav.on_hover_leave()
        nav.on_click(stray)
        nav.on_resize()
        nav.on_visibility_change(False)
        scheduler.advance(1000)

        assert nav.indicator.geometry is None
        assert nav.active_item is None
        assert browser.navigations == []
        assert stray.active is False


def test_visibility_restore_resyncs_without_animation() -> None:
    nav, _, scheduler = _load("/invoices.html")
    scheduler.flush_frame()
    _item(nav, PageId.INVOICES).rect = Rect(left=140.0, width=60.0)

    nav.on_visibility_change(True)
    assert nav.indicator.geometry == Geometry(left=100.0, width=60.0)

    nav.on_visibility_change(False)
    assert nav.indicator.geometry == Geometry(left=130.0, width=60.0)
    assert nav.indicator.last_animated is False


def test_reload_invalidates_query_cache() -> None:
    nav, browser, _ = _load("/invoices.html")
    nav.on_resize()
    nav.on_hover_leave()
    assert browser.row_queries == 1

    fresh = _row()
    browser.replace_row(fresh)
    browser.navigate("/help.html")
    nav.load(PageContext(browser))
    assert browser.row_queries == 2
    assert nav.active_item is fresh.items[2]
    assert nav.current_page is PageId.HELP


def test_load_reads_and_sets_session_flags() -> None:
    session = MemorySessionStore()
    nav, _, _ = _load("/invoices.html", session=session)
    assert nav.first_load is True
    assert nav.entrance is Entrance.PAGE_ENTER

    nav, _, _ = _load("/cc_batch.html", session=session)
    assert nav.first_load is False
    assert nav.entrance is Entrance.PAGE_TRANSITION
    assert session.get("navigation_initialized") == "true"
    assert session.get("lastFeaturePage") == "cc_batch"


def test_click_waits_for_indicator_slide_to_finish() -> None:
    nav, browser, scheduler = _load("/invoices.html")
    assert "0.4s" in INDICATOR_TRANSITION
    assert DEFAULT_NAVIGATION_DELAY_MS >= INDICATOR_TRANSITION_MS

    nav.on_click(_item(nav, PageId.HELP))
    assert nav.indicator.transition == INDICATOR_TRANSITION
    scheduler.advance(INDICATOR_TRANSITION_MS - 1)
    assert browser.navigations == []
    assert nav.navigation_pending

    scheduler.advance(DEFAULT_NAVIGATION_DELAY_MS - INDICATOR_TRANSITION_MS + 1)
    assert browser.navigations == ["/help.html"]

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

from .browser import Browser
from .pages import normalize_href
from .scheduling import Scheduler, TimerHandle

logger = logging.getLogger(__name__)

# Duration of the indicator slide. Navigation waits for it to finish.
INDICATOR_TRANSITION_MS = 400.0
DEFAULT_NAVIGATION_DELAY_MS = INDICATOR_TRANSITION_MS


class PageTransition(ABC):
    """Strategy for leaving the current page."""

    def __init__(self, browser: Browser) -> None:
        self._browser = browser

    @property
    @abstractmethod
    def pending(self) -> bool:
        raise NotImplementedError

    @abstractmethod
    def go(self, url: str) -> None:
        raise NotImplementedError


class InstantTransition(PageTransition):
    @property
    def pending(self) -> bool:
        return False

    def go(self, url: str) -> None:
        self._browser.navigate(normalize_href(url))


class AnimatedTransition(PageTransition):
    """Navigate once the indicator transition has played out."""

    def __init__(
        self,
        browser: Browser,
        scheduler: Scheduler,
        delay_ms: float = DEFAULT_NAVIGATION_DELAY_MS,
    ) -> None:
        super().__init__(browser)
        if delay_ms <= 0:
            raise ValueError("delay_ms must be positive")
        self._scheduler = scheduler
        self._delay_ms = delay_ms
        self._timer: TimerHandle | None = None
        self._destination: str | None = None

    @property
    def pending(self) -> bool:
        return self._timer is not None

    @property
    def destination(self) -> str | None:
        return self._destination

    def go(self, url: str) -> None:
        if self._timer is not None:
            logger.debug("navigation to %s already pending; ignoring %s", self._destination, url)
            return
        self._destination = normalize_href(url)
        self._timer = self._scheduler.call_later(self._delay_ms, self._fire)

    def _fire(self) -> None:
        destination = self._destination
        self._timer = None
        self._destination = None
        if destination is not None:
            self._browser.navigate(destination)


def select_transition(
    browser: Browser,
    scheduler: Scheduler | None,
    *,
    delay_ms: float = DEFAULT_NAVIGATION_DELAY_MS,
) -> PageTransition:
    """Pick the transition strategy once, at initialization."""
    if scheduler is not None and browser.supports_transitions:
        return AnimatedTransition(browser, scheduler, delay_ms)
    return InstantTransition(browser)

from __future__ import annotations

import html
import itertools
from dataclasses import dataclass

from alae_site.nav.scheduling import Scheduler, TimerHandle

ALERT_ICONS: dict[str, str] = {
    "error": "alert-circle",
    "warning": "alert-triangle",
    "success": "check-circle",
    "info": "info",
}

DEFAULT_DURATION_MS = 5000.0
REMOVE_ANIMATION_MS = 400.0


@dataclass(slots=True)
class Alert:
    alert_id: int
    kind: str
    title: str
    message: str
    icon: str
    shown: bool = False
    removing: bool = False

    @property
    def css_class(self) -> str:
        classes = ["professional-alert", self.kind]
        if self.shown:
            classes.append("show")
        if self.removing:
            classes.append("removing")
        return " ".join(classes)


class AlertManager:
    """Toast alerts: shown on the next frame, auto-dismissed, removable by click."""

    def __init__(self, scheduler: Scheduler) -> None:
        self._scheduler = scheduler
        self._ids = itertools.count(1)
        self._alerts: list[Alert] = []
        self._timers: dict[int, TimerHandle] = {}

    @property
    def alerts(self) -> list[Alert]:
        return list(self._alerts)

    def show(
        self,
        kind: str,
        title: str,
        message: str,
        duration_ms: float = DEFAULT_DURATION_MS,
    ) -> Alert:
        if duration_ms <= 0:
            raise ValueError("duration_ms must be positive")
        alert = Alert(
            alert_id=next(self._ids),
            kind=kind,
            title=html.escape(title),
            message=html.escape(message),
            icon=ALERT_ICONS.get(kind, ALERT_ICONS["info"]),
        )
        self._alerts.append(alert)
        self._scheduler.next_frame(lambda: _mark_shown(alert))
        self._timers[alert.alert_id] = self._scheduler.call_later(
            duration_ms, lambda: self.dismiss(alert)
        )
        return alert

    def dismiss(self, alert: Alert) -> None:
        if alert.removing or alert not in self._alerts:
            return
        alert.removing = True
        timer = self._timers.pop(alert.alert_id, None)
        if timer is not None:
            timer.cancel()
        self._scheduler.call_later(REMOVE_ANIMATION_MS, lambda: self._remove(alert))

    def _remove(self, alert: Alert) -> None:
        if alert in self._alerts:
            self._alerts.remove(alert)


def _mark_shown(alert: Alert) -> None:
    alert.shown = True

from __future__ import annotations

import html
import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import Protocol

from .alerts import AlertManager

logger = logging.getLogger(__name__)


class Clipboard(Protocol):
    def write_text(self, text: str) -> None: ...


@dataclass(frozen=True, slots=True)
class ModalAction:
    action: str
    text: str
    callback: Callable[[], None] | None = None
    icon: str | None = None
    css_class: str = "btn-secondary-enhanced"


@dataclass(slots=True)
class Modal:
    title: str
    content: str
    actions: tuple[ModalAction, ...] = field(default_factory=tuple)
    open: bool = True


class ModalManager:
    """Single-slot modal overlay.

    Showing a modal replaces whatever was open. While open the page scroll
    is locked; the close button, a click on the overlay or Escape close it.
    """

    def __init__(self, alerts: AlertManager, clipboard: Clipboard | None = None) -> None:
        self._alerts = alerts
        self._clipboard = clipboard
        self._current: Modal | None = None
        self.scroll_locked = False

    @property
    def current(self) -> Modal | None:
        return self._current

    def show(self, title: str, content: str, actions: Sequence[ModalAction] = ()) -> Modal:
        if self._current is not None:
            self._current.open = False
        modal = Modal(title=html.escape(title), content=content, actions=tuple(actions))
        self._current = modal
        self.scroll_locked = True
        return modal

    def show_code(self, title: str, code: str) -> Modal:
        copy = ModalAction(
            action="copy",
            text="Copy Code",
            icon="copy",
            css_class="btn-primary-enhanced",
            callback=lambda: self.copy_to_clipboard(code),
        )
        content = f'<div class="professional-code-area">{html.escape(code)}</div>'
        return self.show(title, content, [copy])

    def close(self) -> None:
        if self._current is None:
            return
        self._current.open = False
        self._current = None
        self.scroll_locked = False

    def on_key(self, key: str) -> None:
        if key == "Escape":
            self.close()

    def on_overlay_click(self) -> None:
        self.close()

    def trigger(self, action: str) -> bool:
        if self._current is None:
            return False
        for candidate in self._current.actions:
            if candidate.action == action:
                if candidate.callback is not None:
                    candidate.callback()
                return True
        return False

    def copy_to_clipboard(self, text: str) -> None:
        if self._clipboard is None:
            self._alerts.show("error", "Copy failed", "Clipboard is not available.")
            return
        try:
            self._clipboard.write_text(text)
        except OSError as e:
            logger.warning("clipboard write failed: %s", e)
            self._alerts.show("error", "Copy failed", "Could not copy to clipboard.")
            return
        self._alerts.show("success", "Copied!", "Code copied to clipboard successfully.")

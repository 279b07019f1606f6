"""Alert toasts and the modal overlay."""

from .alerts import ALERT_ICONS, Alert, AlertManager
from .modal import Clipboard, Modal, ModalAction, ModalManager

__all__ = [
    "ALERT_ICONS",
    "Alert",
    "AlertManager",
    "Clipboard",
    "Modal",
    "ModalAction",
    "ModalManager",
]

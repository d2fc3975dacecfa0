from ticketflow.config import get_config
from ticketflow.notify.base import Delivered, DeliveryResult, Failed, NotifierAdapter
from ticketflow.notify.http_notifier import HttpNotifier
from ticketflow.notify.memory import MemoryNotifier

__all__ = [
    "Delivered",
    "DeliveryResult",
    "Failed",
    "NotifierAdapter",
    "HttpNotifier",
    "MemoryNotifier",
    "get_notifier",
]

_notifier: NotifierAdapter | None = None


def get_notifier() -> NotifierAdapter:
    global _notifier
    if _notifier is None:
        cfg = get_config()
        if cfg.notifier_type == "memory":
            _notifier = MemoryNotifier()
        elif cfg.notifier_type == "http":
            _notifier = HttpNotifier()
        else:
            raise ValueError(f"Unsupported NOTIFIER_TYPE: {cfg.notifier_type}. Use memory or http.")
    return _notifier


def reset_notifier() -> None:
    """Drop the cached notifier (after config changes, and in tests)."""
    global _notifier
    if _notifier is not None:
        _notifier.close()
    _notifier = None

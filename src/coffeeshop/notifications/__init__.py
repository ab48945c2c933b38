"""Notifier factory — get_notifier() / set_notifier() / reset_notifier().

The adapter is chosen by the NOTIFIER environment variable (default ``log``).
"""

import os

from coffeeshop.notifications.port import Notifier

_current_notifier: Notifier | None = None


def get_notifier() -> Notifier:
    global _current_notifier
    if _current_notifier is None:
        adapter = os.environ.get("NOTIFIER", "log")
        if adapter == "log":
            from coffeeshop.notifications.log_adapter import LoggingNotifier

            _current_notifier = LoggingNotifier()
        else:
            raise ValueError(f"Unknown notifier: {adapter}")
    return _current_notifier


def set_notifier(notifier: Notifier) -> None:
    global _current_notifier
    _current_notifier = notifier


def reset_notifier() -> None:
    global _current_notifier
    _current_notifier = None

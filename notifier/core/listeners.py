import contextvars
from dataclasses import dataclass
from typing import Any, Callable, Optional

from notifier.utils.formatting import describe


@dataclass(frozen=True)
class NotifyResult:
    """What happened during one ``Listener.notify`` call."""

    value: Any = None
    removed: bool = False
    remove_reason: Optional[str] = None
    stopped: bool = False
    stop_reason: Optional[str] = None
    prevented: bool = False
    prevented_reason: Optional[str] = None


class Notification:
    """Stop request collected while a listener function runs."""

    def __init__(self) -> None:
        self.stopped = False
        self.stop_reason: Optional[str] = None

    def stop(self, reason: Optional[str] = None) -> None:
        if not self.stopped:
            self.stopped = True
            self.stop_reason = reason


_current_notification: contextvars.ContextVar[Optional[Notification]] = contextvars.ContextVar(
    "notifier_current_notification", default=None
)


def current_notification() -> Optional[Notification]:
    return _current_notification.get()


class Listener:
    """A function registered on a Signal, plus its once/enabled/removed state."""

    def __init__(self, signal, fn: Callable[..., Any], once: bool = False) -> None:
        self.signal = signal
        self.fn = fn
        self.once = once
        self.enabled = True
        self.removed = False
        self.remove_reason: Optional[str] = None

    def __repr__(self) -> str:
        flags = " once" if self.once else ""
        if self.removed:
            flags += " removed"
        return f"<Listener {describe(self.fn)}{flags}>"

    def enable(self) -> None:
        self.enabled = True

    def disable(self) -> None:
        self.enabled = False

    def is_enabled(self) -> bool:
        return self.enabled

    def is_disabled(self) -> bool:
        return not self.enabled

    def remove(self, reason: Optional[str] = None) -> bool:
        """Remove from the signal; False if it was already removed."""
        return self.signal._remove(self, reason)

    def notify(self, *args: Any) -> NotifyResult:
        """Call the function with ``args`` and describe the call.

        A once listener removes itself before its function runs. The result is
        stopped when the function returns ``False`` or calls ``signal.stop()``.
        """
        if not self.enabled:
            return NotifyResult(prevented=True, prevented_reason="disabled")

        was_removed = self.removed
        if self.once:
            self.remove("once")

        notification = Notification()
        token = _current_notification.set(notification)
        try:
            value = self.fn(*args)
        finally:
            _current_notification.reset(token)

        if value is False:
            notification.stop("returned false")

        removed = self.removed and not was_removed
        return NotifyResult(
            value=value,
            removed=removed,
            remove_reason=self.remove_reason if removed else None,
            stopped=notification.stopped,
            stop_reason=notification.stop_reason,
        )

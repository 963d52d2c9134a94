import asyncio
import logging
from functools import partial
from typing import Any, Callable, List, NamedTuple, Optional, Sequence, Tuple, Union

from notifier.core.exceptions import (
    ConfigurationError,
    DispatchError,
    DuplicateListenerError,
    LifecycleError,
    RecursiveEmitError,
)
from notifier.core.listeners import Listener, current_notification
from notifier.emitter.emitters import get_emitter
from notifier.emitter.factory import Emitter, current_execution, is_dispatching
from notifier.settings import settings
from notifier.settings.base import DUPLICATE_POLICIES, RECURSIVE_RULES
from notifier.utils.formatting import describe, format_args

logger = logging.getLogger(__name__)

RECURSIVE_MESSAGE = (
    "emit called recursively, it is often not desired. "
    "If you know what you're doing pass recursed='off' to the signal"
)


class SignalControls(NamedTuple):
    """What an installer may do with the signal it installs."""

    emit: Callable[..., Any]
    get_listeners: Callable[[], Tuple[Listener, ...]]
    remove_all_while_calling: Callable[[Callable[[], Any]], Any]


Installer = Callable[[SignalControls], Optional[Callable[[], Any]]]


class Signal:
    """A listenable event source.

    Listeners are notified in registration order by the configured emitter.
    ``installer`` runs when the first listener arrives and the callable it
    returns (if any) runs when the last one leaves. With ``replay`` enabled a
    new listener is immediately notified with the last emitted arguments.
    """

    def __init__(
        self,
        name: Optional[str] = None,
        emitter: Union[Emitter, str, None] = None,
        *,
        installer: Optional[Installer] = None,
        replay: Optional[bool] = None,
        recursed: Union[str, Callable[["Signal"], Any], None] = None,
        duplicate_policy: Optional[str] = None,
        args: Sequence[Any] = (),
        project_settings=None,
    ) -> None:
        self.settings = project_settings or settings
        self.name = name

        if emitter is None:
            emitter = self.settings.default_emitter
        self.emitter: Emitter = get_emitter(emitter) if isinstance(emitter, str) else emitter

        self.recursed = self.settings.recursive_rule if recursed is None else recursed
        if isinstance(self.recursed, str) and self.recursed not in RECURSIVE_RULES:
            raise ConfigurationError(
                f"recursed must be a callable or one of {'|'.join(RECURSIVE_RULES)}, "
                f"got '{self.recursed}'"
            )

        self.duplicate_policy = duplicate_policy or self.settings.duplicate_policy
        if self.duplicate_policy not in DUPLICATE_POLICIES:
            raise ConfigurationError(
                f"duplicate_policy must be one of {'|'.join(DUPLICATE_POLICIES)}, "
                f"got '{self.duplicate_policy}'"
            )

        self.replay = self.settings.replay if replay is None else replay
        self.installer = installer
        self.args: Tuple[Any, ...] = tuple(args)

        self.installed = False
        self.dispatching = False
        self.enabled = True
        self._uninstaller: Optional[Callable[[], Any]] = None
        self._last_args: Optional[Tuple[Any, ...]] = None
        self._listeners: List[Listener] = []
        # listener sets parked by remove_all_while_calling, innermost last
        self._suspended: List[List[Listener]] = []

    def __repr__(self) -> str:
        label = self.name or hex(id(self))
        return f"<Signal {label} listeners={len(self._listeners)}>"

    # Registry
    def listen(self, fn: Callable[..., Any], once: bool = False) -> Listener:
        if not callable(fn):
            raise TypeError("listener must be callable")

        existing = self._find(fn)
        if existing is not None:
            if self.duplicate_policy == "error":
                raise DuplicateListenerError(f"{describe(fn)} is already listening to {self!r}")
            return existing

        listener = Listener(self, fn, once=once)
        self._listeners.append(listener)
        logger.debug("Listener %r added to %r", listener, self)
        if len(self._listeners) == 1:
            self.install()

        if self.replay and self._last_args is not None:
            logger.debug("Replaying %s to %r", format_args(self._last_args), listener)
            result = self.emitter([listener], self._last_args).run()
            if isinstance(result, asyncio.Future):
                result.add_done_callback(partial(self._replay_settled, listener))

        return listener

    def _replay_settled(self, listener: Listener, future: asyncio.Future) -> None:
        if future.cancelled():
            return
        error = future.exception()
        if error is not None:
            logger.error("Replay to %r on %r failed", listener, self, exc_info=error)

    def listen_once(self, fn: Callable[..., Any]) -> Listener:
        return self.listen(fn, once=True)

    def has(self, listener: Listener) -> bool:
        return listener in self._listeners

    def get_listeners(self) -> Tuple[Listener, ...]:
        return tuple(self._listeners)

    def is_listened(self) -> bool:
        return bool(self._listeners)

    def clear(self) -> None:
        """Remove every listener and forget the replay arguments."""
        self.forget()
        for listener in list(self._listeners):
            listener.remove("clear")

    def _find(self, fn: Callable[..., Any]) -> Optional[Listener]:
        for listeners in [self._listeners, *self._suspended]:
            for listener in listeners:
                if listener.fn == fn:
                    return listener
        return None

    def _remove(self, listener: Listener, reason: Optional[str]) -> bool:
        if listener.removed:
            return False

        if listener in self._listeners:
            self._listeners.remove(listener)
            self._mark_removed(listener, reason)
            if not self._listeners and self.installed:
                self.uninstall()
            return True

        for listeners in self._suspended:
            if listener in listeners:
                listeners.remove(listener)
                self._mark_removed(listener, reason)
                return True

        return False

    def _mark_removed(self, listener: Listener, reason: Optional[str]) -> None:
        listener.removed = True
        listener.remove_reason = reason
        logger.debug("Listener %r removed from %r (reason=%s)", listener, self, reason)

    # Lifecycle
    def controls(self) -> SignalControls:
        return SignalControls(
            emit=self.emit,
            get_listeners=self.get_listeners,
            remove_all_while_calling=self.remove_all_while_calling,
        )

    def install(self) -> None:
        if self.installed:
            raise LifecycleError(f"{self!r} is already installed")
        self.installed = True
        logger.debug("Installing %r", self)
        if self.installer is not None:
            self._uninstaller = self.installer(self.controls())

    def uninstall(self) -> None:
        if not self.installed:
            raise LifecycleError(f"{self!r} is not installed")
        self.installed = False
        logger.debug("Uninstalling %r", self)
        uninstaller, self._uninstaller = self._uninstaller, None
        if uninstaller is not None:
            uninstaller()

    def remove_all_while_calling(self, fn: Callable[[], Any]) -> Any:
        """Call ``fn`` with the registry emptied, then put the listeners back.

        Listeners added by ``fn`` are kept after the original ones, and the
        signal is only reinstalled when ``fn`` left it without listeners.
        """
        originals = self._listeners
        self._listeners = []
        self._suspended.append(originals)
        if self.installed:
            self.uninstall()
        try:
            return fn()
        finally:
            self._suspended.pop()
            added = self._listeners
            self._listeners = originals + added
            if not added and originals and not self.installed:
                self.install()

    # Replay memory
    def remember(self, *args: Any) -> None:
        self._last_args = args

    def forget(self) -> None:
        self._last_args = None

    # Enablement
    def enable(self) -> None:
        self.enabled = True

    def disable(self) -> None:
        self.enabled = False

    def is_enabled(self) -> bool:
        return self.enabled

    def is_disabled(self) -> bool:
        return not self.enabled

    # Dispatch
    def emit(self, *args: Any) -> Any:
        """Notify the enabled listeners; the result shape depends on the emitter."""
        if self.dispatching or is_dispatching(self):
            self._on_recursed()

        args = self.args + args
        if self.replay:
            self.remember(*args)

        listeners: List[Listener] = []
        if self.enabled:
            listeners = [listener for listener in self._listeners if listener.enabled]
        logger.debug("Emitting %r%s to %d listeners", self, format_args(args), len(listeners))
        dispatch = self.emitter(listeners, args)

        was_dispatching = self.dispatching
        self.dispatching = True
        try:
            return dispatch.run()
        finally:
            self.dispatching = was_dispatching

    def stop(self, reason: Optional[str] = None) -> None:
        """Visit no further listener in the running dispatch."""
        notification = current_notification()
        execution = current_execution()
        if notification is None and execution is None:
            raise DispatchError("stop() called outside of a dispatch")
        if notification is not None:
            notification.stop(reason)
        if execution is not None:
            execution.stop()

    def shortcircuit(self, value: Any) -> None:
        """End the running dispatch now, with ``value`` as its whole result."""
        execution = current_execution()
        if execution is None:
            raise DispatchError("shortcircuit() called outside of a dispatch")
        execution.shortcircuit(value)

    def _on_recursed(self) -> None:
        if callable(self.recursed):
            self.recursed(self)
        elif self.recursed == "warn":
            logger.warning("%r: %s", self, RECURSIVE_MESSAGE)
        elif self.recursed == "error":
            raise RecursiveEmitError(f"{self!r}: {RECURSIVE_MESSAGE}")

"""Emitter factory and the per-emit Execution it forks.

An :class:`Emitter` is a pure configuration value (iterator, visitor,
transformer). Calling it with a listener snapshot and the emitted arguments
gives a :class:`Dispatch`; ``fork()`` creates the :class:`Execution` that walks
the snapshot, and ``unwrap()`` adapts its completion callback to the return
shape advertised by the transformer.
"""

import contextvars
import logging
from dataclasses import dataclass
from typing import Any, Callable, Iterator, Optional, Sequence, Tuple

from notifier.core.exceptions import DispatchError
from notifier.emitter.iterators import left_to_right
from notifier.emitter.transformers import sync_transformer
from notifier.emitter.visitors import sync_serial_visitor

logger = logging.getLogger(__name__)

IteratorFactory = Callable[[Sequence[Any]], Iterator[Any]]
Visitor = Callable[["Execution"], None]
Transformer = Callable[[Callable], Any]

_current_execution: contextvars.ContextVar[Optional["Execution"]] = contextvars.ContextVar(
    "notifier_current_execution", default=None
)


def current_execution() -> Optional["Execution"]:
    """Return the Execution running the current listener, if any."""
    return _current_execution.get()


_dispatching_owners: contextvars.ContextVar[Tuple[Any, ...]] = contextvars.ContextVar(
    "notifier_dispatching_owners", default=()
)


def is_dispatching(owner: Any) -> bool:
    """True when called from a listener (or a task it started) of ``owner``."""
    return any(active is owner for active in _dispatching_owners.get())


@dataclass(frozen=True)
class Outcome:
    """How an Execution ended."""

    value: Any = None
    rejected: bool = False
    error: Optional[BaseException] = None
    shortcircuited: bool = False


class Visit:
    """One listener visited by an Execution, at slot ``index``."""

    def __init__(self, execution: "Execution", listener: Any, index: int) -> None:
        self.execution = execution
        self.listener = listener
        self.index = index
        self.result = None
        self.settled = False
        # Coroutines and tasks started by the listener inherit this context.
        self._context = contextvars.copy_context()

    def __repr__(self) -> str:
        return f"<Visit index={self.index} listener={self.listener!r}>"

    def fn(self) -> Any:
        """Notify the listener and return its raw value."""
        return self._context.run(self._notify)

    def _notify(self) -> Any:
        _current_execution.set(self.execution)
        owner = getattr(self.listener, "signal", None)
        if owner is not None:
            _dispatching_owners.set(_dispatching_owners.get() + (owner,))
        result = self.listener.notify(*self.execution.args)
        self.result = result
        if result.stopped:
            self.execution.stop()
        return result.value

    def call(self, func: Callable[..., Any], *args: Any) -> Any:
        """Run ``func`` inside this visit's context."""
        return self._context.run(func, *args)

    def done(self, value: Any) -> None:
        if self.settled:
            raise DispatchError(f"{self!r} settled twice")
        self.settled = True
        self.execution._settle(self, value)

    def reject(self, error: BaseException) -> None:
        self.settled = True
        self.execution.reject(error)


class Execution:
    """A single dispatch over a frozen listener snapshot.

    Completion is reached when the traversal is over (iterator exhausted or
    execution stopped) and every started visit has settled, when a listener
    short-circuits, or when a listener error rejects the execution. ``on_done``
    passed to :meth:`start` is called exactly once with an :class:`Outcome`.
    """

    def __init__(
        self,
        listeners: Sequence[Any],
        args: Sequence[Any],
        iterator: IteratorFactory = left_to_right,
        visitor: Visitor = sync_serial_visitor,
    ) -> None:
        self._listeners: Tuple[Any, ...] = tuple(listeners)
        self._args: Tuple[Any, ...] = tuple(args)
        self._iterator = iterator(self._listeners)
        self._visitor = visitor
        self._on_done: Optional[Callable[[Outcome], None]] = None
        self._outcome: Optional[Outcome] = None
        self._return_value: Any = []
        self._started = 0
        self._settled = 0
        self._exhausted = False
        self._stopped = False
        self._stopped_at: Optional[int] = None

    @property
    def index(self) -> int:
        """Number of listeners visited so far."""
        return self._started

    @property
    def listeners(self) -> Tuple[Any, ...]:
        return self._listeners

    @property
    def args(self) -> Tuple[Any, ...]:
        return self._args

    @property
    def return_value(self) -> Any:
        return self._return_value

    @property
    def stopped(self) -> bool:
        return self._stopped

    @property
    def stopped_at(self) -> Optional[int]:
        return self._stopped_at

    @property
    def ended(self) -> bool:
        return self._outcome is not None

    @property
    def outcome(self) -> Optional[Outcome]:
        return self._outcome

    def start(self, on_done: Callable[[Outcome], None]) -> None:
        if self._on_done is not None:
            raise DispatchError("execution already started")
        self._on_done = on_done
        if self._outcome is not None:
            on_done(self._outcome)
            return
        self._visitor(self)

    def next(self) -> Optional[Visit]:
        """Advance to the next live listener, or return None when done."""
        if self._outcome is not None:
            return None
        if not self._stopped:
            for listener in self._iterator:
                # removed or disabled after the snapshot was taken
                if listener.removed or not listener.enabled:
                    continue
                visit = Visit(self, listener, self._started)
                self._started += 1
                self._return_value.append(None)
                return visit
        self._exhausted = True
        self._maybe_end()
        return None

    def stop(self) -> None:
        """Visit no further listener; already started ones still settle."""
        if self._stopped:
            return
        self._stopped = True
        self._stopped_at = self._started

    def shortcircuit(self, value: Any) -> None:
        """Replace the whole result with ``value`` and end now."""
        if self._outcome is not None:
            return
        self._return_value = value
        self._end(Outcome(value=value, shortcircuited=True))

    def reject(self, error: BaseException) -> None:
        if self._outcome is not None:
            return
        logger.debug("Execution rejected at index %s: %r", self._started, error)
        self._end(Outcome(rejected=True, error=error))

    def _settle(self, visit: Visit, value: Any) -> None:
        self._settled += 1
        if self._outcome is not None:
            return
        self._return_value[visit.index] = value
        self._maybe_end()

    def _maybe_end(self) -> None:
        if self._outcome is None and self._exhausted and self._settled == self._started:
            self._end(Outcome(value=self._return_value))

    def _end(self, outcome: Outcome) -> None:
        self._outcome = outcome
        if self._on_done is not None:
            self._on_done(outcome)


@dataclass(frozen=True)
class Dispatch:
    """An emitter bound to one listener snapshot and argument list."""

    emitter: "Emitter"
    listeners: Tuple[Any, ...]
    args: Tuple[Any, ...]

    def fork(self) -> Execution:
        return Execution(
            self.listeners,
            self.args,
            iterator=self.emitter.iterator,
            visitor=self.emitter.visitor,
        )

    def unwrap(self, start: Callable[[Callable[[Outcome], None]], None]) -> Any:
        return self.emitter.transformer(start)

    def run(self) -> Any:
        return self.unwrap(self.fork().start)


@dataclass(frozen=True)
class Emitter:
    """Dispatch strategy: traversal order, sequencing and result shape."""

    iterator: IteratorFactory = left_to_right
    visitor: Visitor = sync_serial_visitor
    transformer: Transformer = sync_transformer

    def __call__(self, listeners: Sequence[Any], args: Sequence[Any] = ()) -> Dispatch:
        return Dispatch(self, tuple(listeners), tuple(args))


def emitter_factory(
    iterator: IteratorFactory = left_to_right,
    visitor: Visitor = sync_serial_visitor,
    transformer: Transformer = sync_transformer,
) -> Emitter:
    return Emitter(iterator=iterator, visitor=visitor, transformer=transformer)


__all__ = [
    "Dispatch",
    "Emitter",
    "Execution",
    "Outcome",
    "Visit",
    "current_execution",
    "is_dispatching",
    "emitter_factory",
]

"""Visitor strategies decide when the next listener runs.

A visitor is called once with the Execution. It pulls visits with
``execution.next()`` (``None`` once the traversal is over), runs each one with
``visit.fn()`` and reports the settled value with ``visit.done(value)``. The
execution ends on its own once the traversal is over and every started visit
has settled.
"""

import asyncio
import inspect
from typing import Any, Callable


def sync_serial_visitor(execution) -> None:
    """Run every listener synchronously, in order, within the caller's frame."""
    for visit in iter(execution.next, None):
        visit.done(visit.fn())


def async_serial_visitor(execution) -> None:
    """Start listener N+1 only once listener N has settled."""

    def step() -> None:
        visit = execution.next()
        if visit is None:
            return

        def resolved(value: Any) -> None:
            visit.done(value)
            step()

        _settle(visit, resolved)

    step()


def async_simultaneous_visitor(execution) -> None:
    """Start every listener at once; slots are filled as each one settles."""
    for visit in iter(execution.next, None):
        if not _settle(visit, visit.done):
            return


def some_async_listener_resolves_with(predicate: Callable[[Any], bool]):
    """Async serial traversal that short-circuits with ``True`` on the first match."""

    def visitor(execution) -> None:
        def step() -> None:
            visit = execution.next()
            if visit is None:
                return

            def resolved(value: Any) -> None:
                try:
                    matched = predicate(value)
                except Exception as exc:
                    visit.reject(exc)
                    return
                if matched:
                    execution.shortcircuit(True)
                    return
                visit.done(value)
                step()

            _settle(visit, resolved)

        step()

    return visitor


def _as_future(value: Any) -> asyncio.Future:
    if inspect.isawaitable(value):
        return asyncio.ensure_future(value)
    future = asyncio.get_running_loop().create_future()
    future.set_result(value)
    return future


def _settle(visit, on_value: Callable[[Any], None]) -> bool:
    """Run ``visit`` and call ``on_value`` once its result settles.

    Returns False when the listener raised synchronously; the execution is
    rejected in that case.
    """
    try:
        future = visit.call(_as_future, visit.fn())
    except Exception as exc:
        visit.reject(exc)
        return False

    def settled(future: asyncio.Future) -> None:
        if future.cancelled():
            visit.reject(asyncio.CancelledError())
            return
        error = future.exception()
        if error is not None:
            visit.reject(error)
            return
        on_value(future.result())

    future.add_done_callback(settled)
    return True

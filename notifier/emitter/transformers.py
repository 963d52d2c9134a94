"""Turn the callback completion of an Execution into the emitter's return shape."""

import asyncio
from typing import Any, Callable, List, Optional

from notifier.core.exceptions import DispatchError


def sync_transformer(start: Callable) -> Any:
    """Return the dispatch result directly; listener errors re-raise."""
    outcomes: List = []
    start(outcomes.append)
    if not outcomes:
        raise DispatchError("synchronous emitter returned before its dispatch completed")
    outcome = outcomes[0]
    if outcome.rejected:
        raise outcome.error
    return outcome.value


def async_transformer(start: Callable, resolve: Optional[Callable] = None) -> asyncio.Future:
    """Return a future settled by the dispatch.

    ``resolve`` maps the Outcome to the resolved value; by default the
    accumulated (or short-circuited) value is used as is.
    """
    future = asyncio.get_running_loop().create_future()

    def settle(outcome) -> None:
        if future.done():
            return
        if outcome.rejected:
            future.set_exception(outcome.error)
        elif resolve is None:
            future.set_result(outcome.value)
        else:
            future.set_result(resolve(outcome))

    start(settle)
    return future


def predicate_transformer(start: Callable) -> asyncio.Future:
    """Resolve with the short-circuit value, or False once every listener ran."""
    return async_transformer(
        start,
        resolve=lambda outcome: outcome.value if outcome.shortcircuited else False,
    )

import logging
from dataclasses import dataclass
from typing import Any, Callable, List, Sequence, Tuple

from notifier.core.listeners import Listener
from notifier.core.signals import Signal

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RaceResult:
    index: int
    signal: Signal
    args: Tuple[Any, ...]


def race(signals: Sequence[Signal], callback: Callable[[RaceResult], Any]) -> Callable[[], None]:
    """Call ``callback`` for whichever signal emits first, then stop listening.

    Returns a function that cancels the race.
    """
    listeners: List[Listener] = []
    settled = False

    def cancel() -> None:
        nonlocal settled
        settled = True
        for listener in listeners:
            listener.remove("race")

    def make_listener(index: int, signal: Signal) -> Callable[..., Any]:
        def on_emit(*args: Any) -> Any:
            cancel()
            logger.debug("Race won by %r (index %d)", signal, index)
            return callback(RaceResult(index=index, signal=signal, args=args))

        return on_emit

    for index, signal in enumerate(signals):
        # a replaying signal may settle the race while it is being set up
        if settled:
            break
        listeners.append(signal.listen_once(make_listener(index, signal)))

    return cancel

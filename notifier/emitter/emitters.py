"""Preset emitters and the name lookup used by settings."""

from typing import Any, Callable, Dict

from notifier.core.exceptions import ConfigurationError
from notifier.emitter.factory import Emitter, emitter_factory
from notifier.emitter.iterators import left_to_right, right_to_left
from notifier.emitter.transformers import (
    async_transformer,
    predicate_transformer,
    sync_transformer,
)
from notifier.emitter.visitors import (
    async_serial_visitor,
    async_simultaneous_visitor,
    some_async_listener_resolves_with,
    sync_serial_visitor,
)

serial_emitter = emitter_factory(
    iterator=left_to_right,
    visitor=sync_serial_visitor,
    transformer=sync_transformer,
)

reverse_serial_emitter = emitter_factory(
    iterator=right_to_left,
    visitor=sync_serial_visitor,
    transformer=sync_transformer,
)

async_serial_emitter = emitter_factory(
    iterator=left_to_right,
    visitor=async_serial_visitor,
    transformer=async_transformer,
)

async_simultaneous_emitter = emitter_factory(
    iterator=left_to_right,
    visitor=async_simultaneous_visitor,
    transformer=async_transformer,
)


def predicate_emitter(predicate: Callable[[Any], bool]) -> Emitter:
    """Resolve True as soon as a listener resolves with a value matching ``predicate``."""
    return emitter_factory(
        iterator=left_to_right,
        visitor=some_async_listener_resolves_with(predicate),
        transformer=predicate_transformer,
    )


EMITTERS: Dict[str, Emitter] = {
    "serial": serial_emitter,
    "reverse_serial": reverse_serial_emitter,
    "async_serial": async_serial_emitter,
    "async_simultaneous": async_simultaneous_emitter,
}


def get_emitter(name: str) -> Emitter:
    try:
        return EMITTERS[name]
    except KeyError:
        raise ConfigurationError(
            f"Unknown emitter '{name}'. Expected {'|'.join(sorted(EMITTERS))}."
        ) from None

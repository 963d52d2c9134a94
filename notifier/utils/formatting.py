from typing import Any, Callable, Sequence

MAX_ARGS_LENGTH = 120


def describe(fn: Callable[..., Any]) -> str:
    """Render a callable as ``module.qualname`` for log lines."""
    name = getattr(fn, "__qualname__", None) or getattr(fn, "__name__", None)
    if name is None:
        return repr(fn)
    module = getattr(fn, "__module__", None)
    return f"{module}.{name}" if module else name


def format_args(args: Sequence[Any], limit: int = MAX_ARGS_LENGTH) -> str:
    text = "(" + ", ".join(repr(arg) for arg in args) + ")"
    if len(text) > limit:
        return text[: limit - 4] + "...)"
    return text

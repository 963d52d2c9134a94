class ConfigurationError(Exception):
    """Raised when settings or signal options are missing or invalid."""


class DuplicateListenerError(Exception):
    """Raised when a function is listened twice under the ``error`` duplicate policy."""


class LifecycleError(Exception):
    """Raised on install() while installed or uninstall() while not installed."""


class RecursiveEmitError(Exception):
    """Raised by the ``error`` recursion rule when emit() is re-entered."""


class DispatchError(Exception):
    """Raised when a dispatch is driven outside of its contract."""

import logging
from typing import Optional

from notifier.core.exceptions import ConfigurationError
from notifier.settings import settings

LOGGER_NAME = "notifier"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def configure_logging(level: Optional[str] = None) -> logging.Logger:
    """Install one root handler and set the level of the ``notifier`` loggers.

    The root logger stays at WARNING so libraries embedding notifier keep
    their own verbosity; only ``notifier.*`` follows ``level`` (or
    ``settings.log_level``). Returns the package logger.
    """
    log_level = (level or settings.log_level).upper()
    numeric_level = logging.getLevelName(log_level)
    if not isinstance(numeric_level, int):
        raise ConfigurationError(f"Unknown log level {log_level!r}")

    logging.basicConfig(format=LOG_FORMAT, level=logging.WARNING, force=True)
    package_logger = logging.getLogger(LOGGER_NAME)
    package_logger.setLevel(numeric_level)
    return package_logger

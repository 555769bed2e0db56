"""Command-line logging for rtschema.

Schema diagnostics are printed by the CLI itself; log records are for the
operator. Records below WARNING go to stdout and the rest to stderr, so a
`validate` run piped into another tool keeps engine warnings out of the data.
The library modules never configure logging themselves.
"""

import logging
import sys

from rtschema.exceptions import ConfigurationError

LOGGER_NAME = "rtschema"

_FORMAT = "%(levelname)s: %(message)s"
_VERBOSE_FORMAT = "%(asctime)s %(name)s [%(levelname)s] %(message)s"


class _BelowLevelFilter(logging.Filter):
    """Pass only records strictly below `level`."""

    def __init__(self, level: int) -> None:
        super().__init__()
        self._level = level

    def filter(self, record: logging.LogRecord) -> bool:
        return record.levelno < self._level


def resolve_level(level: str | int) -> int:
    """Turn a level name such as 'debug' into its numeric value."""
    if isinstance(level, int):
        return level
    value = logging.getLevelName(level.strip().upper())
    if not isinstance(value, int):
        raise ConfigurationError(f"Unknown log level: {level}")
    return value


def configure_cli_logging(level: str | int = "WARNING", *, verbose: bool = False) -> logging.Logger:
    """Route rtschema log records to stdout and stderr.

    Args:
        level: Level name or number from configuration.
        verbose: The CLI's --verbose flag; forces DEBUG with timestamps and
                 logger names.

    Returns:
        The package logger.

    Raises:
        ConfigurationError: If `level` is not a known level name.
    """
    numeric = logging.DEBUG if verbose else resolve_level(level)
    formatter = logging.Formatter(_VERBOSE_FORMAT if verbose else _FORMAT)

    logger = logging.getLogger(LOGGER_NAME)
    logger.handlers.clear()
    logger.setLevel(numeric)
    logger.propagate = False

    stdout_handler = logging.StreamHandler(stream=sys.stdout)
    stdout_handler.addFilter(_BelowLevelFilter(logging.WARNING))
    stdout_handler.setFormatter(formatter)

    stderr_handler = logging.StreamHandler(stream=sys.stderr)
    stderr_handler.setLevel(logging.WARNING)
    stderr_handler.setFormatter(formatter)

    logger.addHandler(stdout_handler)
    logger.addHandler(stderr_handler)
    return logger

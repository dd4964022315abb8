"""
Logging setup and the leveled logger hook accepted by the API client
"""

import logging
from pathlib import Path
from typing import Any, Optional, Protocol, runtime_checkable

from amara_adapter.errors import InvalidLoggerError


NOTICE = 25
ALERT = 55
EMERGENCY = 60

logging.addLevelName(NOTICE, 'NOTICE')
logging.addLevelName(ALERT, 'ALERT')
logging.addLevelName(EMERGENCY, 'EMERGENCY')

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

LEVEL_METHODS = ('emergency', 'alert', 'critical', 'error', 'warning', 'notice', 'info', 'debug', 'log')


@runtime_checkable
class SupportsLeveledLogging(Protocol):
    """Structural contract for a caller-supplied logger"""

    def emergency(self, message: str, *args: Any, **kwargs: Any) -> Any: ...
    def alert(self, message: str, *args: Any, **kwargs: Any) -> Any: ...
    def critical(self, message: str, *args: Any, **kwargs: Any) -> Any: ...
    def error(self, message: str, *args: Any, **kwargs: Any) -> Any: ...
    def warning(self, message: str, *args: Any, **kwargs: Any) -> Any: ...
    def notice(self, message: str, *args: Any, **kwargs: Any) -> Any: ...
    def info(self, message: str, *args: Any, **kwargs: Any) -> Any: ...
    def debug(self, message: str, *args: Any, **kwargs: Any) -> Any: ...
    def log(self, level: Any, message: str, *args: Any, **kwargs: Any) -> Any: ...


class LeveledLogger(logging.LoggerAdapter):
    """Adapts a stdlib logger to the full emergency..debug level set"""

    def __init__(self, logger: logging.Logger, extra: Optional[dict] = None):
        super().__init__(logger, extra or {})

    def notice(self, msg, *args, **kwargs):
        self.log(NOTICE, msg, *args, **kwargs)

    def alert(self, msg, *args, **kwargs):
        self.log(ALERT, msg, *args, **kwargs)

    def emergency(self, msg, *args, **kwargs):
        self.log(EMERGENCY, msg, *args, **kwargs)


def validate_logger(candidate: Any) -> SupportsLeveledLogging:
    """
    Check a caller-supplied logger exposes every leveled logging method

    Args:
        candidate: Object to use as the diagnostics sink

    Returns:
        The candidate itself

    Raises:
        InvalidLoggerError: If any level method is missing or not callable
    """
    missing = [name for name in LEVEL_METHODS if not callable(getattr(candidate, name, None))]
    if missing:
        raise InvalidLoggerError(
            f"Provided logger lacks leveled logging methods: {', '.join(missing)}"
        )
    return candidate


def resolve_logger(candidate: Any = None) -> SupportsLeveledLogging:
    """
    Pick the diagnostics sink: a validated caller logger, or the package logger

    A bare logging.Logger is wrapped so notice/alert/emergency exist. The
    package logger has a NullHandler, so without configuration nothing is
    emitted.
    """
    if candidate is None:
        return LeveledLogger(logging.getLogger('amara_adapter'))
    if isinstance(candidate, logging.Logger):
        return LeveledLogger(candidate)
    return validate_logger(candidate)


def configure_logging(level: str = 'INFO', log_file: Optional[Path] = None) -> None:
    """
    Configure root logging for command line use

    Args:
        level: Level name such as 'INFO' or 'DEBUG'
        log_file: Optional file to write logs to in addition to stderr
    """
    handlers = [logging.StreamHandler()]
    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        handlers=handlers,
        force=True
    )

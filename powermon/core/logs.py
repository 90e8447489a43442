"""Log sink configuration for the powermon commands."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

from powermon.core.errors import ConfigurationError

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
# uvicorn loggers follow the same sink so server output lands in one place.
_LOGGER_NAMES = ("powermon", "uvicorn", "uvicorn.error", "uvicorn.access")


def configure_logging(verbose: bool = False, logfile: Path | None = None) -> logging.Handler:
    if logfile is not None:
        try:
            handler: logging.Handler = logging.FileHandler(logfile, mode="a", encoding="utf-8")
        except OSError as exc:
            raise ConfigurationError(f"Could not open log file {logfile}: {exc}") from exc
    else:
        handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))

    level = logging.INFO if verbose else logging.WARNING
    for name in _LOGGER_NAMES:
        logger = logging.getLogger(name)
        for existing in list(logger.handlers):
            logger.removeHandler(existing)
        logger.addHandler(handler)
        logger.setLevel(level)
        logger.propagate = False
    return handler

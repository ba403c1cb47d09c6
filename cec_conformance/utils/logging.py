# SPDX-License-Identifier: MPL-2.0
# Copyright (c) 2025 Daniel Schmidt

import logging
import sys
from enum import Enum

import errorhandler


class VerbosityLevel(str, Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


_LEVELS = {
    VerbosityLevel.DEBUG: logging.DEBUG,
    VerbosityLevel.INFO: logging.INFO,
    VerbosityLevel.WARNING: logging.WARNING,
    VerbosityLevel.ERROR: logging.ERROR,
    VerbosityLevel.CRITICAL: logging.CRITICAL,
}


def configure_logging(
    level: VerbosityLevel | str, error_handler: errorhandler.ErrorHandler
) -> None:
    """Install a single stdout handler on the root logger.

    Args:
        level: Minimum level to emit
        error_handler: Handler tracking whether an ERROR was logged; reset here
    """
    log_level = _LEVELS.get(VerbosityLevel(level), logging.WARNING)
    logger = logging.getLogger()
    logger.setLevel(log_level)
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter("%(levelname)s - %(message)s"))
    handler.setLevel(log_level)
    logger.handlers.clear()
    logger.addHandler(handler)
    error_handler.reset()

"""Utility functions for revtemplate."""

from ._logging import (
    LogFormatType,
    create_logger,
    create_logger_from_config,
    create_null_logger,
    get_log_level,
    log_level_from_string,
)

__all__ = [
    "LogFormatType",
    "create_logger",
    "create_logger_from_config",
    "create_null_logger",
    "get_log_level",
    "log_level_from_string",
]

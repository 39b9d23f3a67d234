"""revtemplate configuration.

This module provides configuration models and TOML loading for template
aliases, formatter colors, and logging.

Example:
    >>> from revtemplate.config import TemplaterConfig
    >>> config = TemplaterConfig.load()
    >>> config.logging.level
    <LogLevel.INFO: 'info'>
"""

from revtemplate.exceptions import ConfigError, ConfigLoadError

from ._loader import get_default_config_path, read_toml_file
from ._models import LogFormat, LoggingConfig, LogLevel, TemplaterConfig

__all__ = [
    "ConfigError",
    "ConfigLoadError",
    "LogFormat",
    "LogLevel",
    "LoggingConfig",
    "TemplaterConfig",
    "get_default_config_path",
    "read_toml_file",
]

"""Configuration models.

This module provides the Pydantic models for the ``[template-aliases]``,
``[colors]``, and ``[logging]`` configuration sections.
"""

from __future__ import annotations

from enum import StrEnum
from typing import TYPE_CHECKING, Any, ClassVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from revtemplate.config._loader import get_default_config_path, read_toml_file
from revtemplate.exceptions import ConfigLoadError

if TYPE_CHECKING:
    from pathlib import Path
    from typing import Self


class LogLevel(StrEnum):
    """Log level threshold values.

    Values are ordered from most verbose (debug) to least verbose (error).
    """

    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class LogFormat(StrEnum):
    """Log output format values."""

    JSON = "json"
    TEXT = "text"


class LoggingConfig(BaseModel):
    """Logging configuration section.

    Attributes:
        level: Log level threshold.
        format: Log output format.
        file: Path to log file (empty writes to stderr).
    """

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True, extra="ignore")

    level: LogLevel = LogLevel.INFO
    format: LogFormat = LogFormat.TEXT
    file: str = ""


class TemplaterConfig(BaseModel):
    """Top-level templater configuration.

    Attributes:
        template_aliases: Alias name to template source, handed to the parser.
            Read from the ``[template-aliases]`` table.
        colors: Formatter label to rich style string, merged over the
            built-in color table by ``RichFormatter``.
        logging: Logging settings.
    """

    model_config: ClassVar[ConfigDict] = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
    )

    template_aliases: dict[str, str] = Field(default_factory=dict, alias="template-aliases")
    colors: dict[str, str] = Field(default_factory=dict)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @classmethod
    def from_dict(cls, data: dict[str, Any], *, path: Path | None = None) -> Self:
        """Create configuration from a dictionary.

        Args:
            data: Parsed configuration values.
            path: Source file, used for error context only.

        Returns:
            Validated configuration.

        Raises:
            ConfigLoadError: If validation fails.
        """
        try:
            return cls.model_validate(data)
        except ValidationError as e:
            first = e.errors()[0]
            location = ".".join(str(part) for part in first["loc"])
            msg = f"Invalid configuration at {location}: {first['msg']}"
            raise ConfigLoadError(msg, path=path) from e

    @classmethod
    def from_file(cls, path: Path) -> Self:
        """Load configuration from a TOML file.

        Raises:
            FileNotFoundError: If the file does not exist.
            ConfigLoadError: If the file cannot be parsed or validated.
        """
        return cls.from_dict(read_toml_file(path), path=path)

    @classmethod
    def load(cls, path: Path | None = None) -> Self:
        """Load configuration from ``path`` or the default location.

        An explicit path must exist. A missing default config file yields
        the defaults.

        Raises:
            FileNotFoundError: If an explicit ``path`` does not exist.
            ConfigLoadError: If the file cannot be parsed or validated.
        """
        if path is not None:
            return cls.from_file(path)
        default_path = get_default_config_path()
        if default_path is None or not default_path.is_file():
            return cls()
        return cls.from_file(default_path)

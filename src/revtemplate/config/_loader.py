"""TOML configuration file loading."""

import tomllib
from os import getenv
from pathlib import Path
from typing import Any

from revtemplate.exceptions import ConfigLoadError


def read_toml_file(path: Path) -> dict[str, Any]:
    """Read and parse a TOML file.

    Args:
        path: Path to the TOML file.

    Returns:
        Parsed TOML content as dictionary.

    Raises:
        FileNotFoundError: If the file does not exist.
        ConfigLoadError: If the file cannot be parsed.
    """
    try:
        with path.open("rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        msg = f"Failed to parse TOML file: {e}"
        raise ConfigLoadError(
            msg,
            path=path,
            line=getattr(e, "lineno", None),
            column=getattr(e, "colno", None),
        ) from e


def get_default_config_path() -> Path | None:
    """Return the default config file location.

    REVTEMPLATE_CONFIG wins when set. Otherwise the file lives at
    ``$XDG_CONFIG_HOME/revtemplate/config.toml`` (``~/.config`` when
    XDG_CONFIG_HOME is unset). Returns None when no home directory is known.
    """
    explicit = getenv("REVTEMPLATE_CONFIG", None)
    if explicit:
        return Path(explicit)
    xdg_home = getenv("XDG_CONFIG_HOME", None)
    if xdg_home:
        return Path(xdg_home) / "revtemplate" / "config.toml"
    try:
        home = Path.home()
    except RuntimeError:
        return None
    return home / ".config" / "revtemplate" / "config.toml"

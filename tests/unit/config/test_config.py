"""Tests for configuration loading."""

from pathlib import Path

import pytest

from revtemplate.config import (
    ConfigLoadError,
    LogFormat,
    LoggingConfig,
    LogLevel,
    TemplaterConfig,
    get_default_config_path,
    read_toml_file,
)

SAMPLE = """\
[template-aliases]
"short_id" = "commit_id.short(8)"

[colors]
commit_id = "bold blue"

[logging]
level = "debug"
format = "json"
file = "/tmp/revtemplate.log"
"""


# =============================================================================
# TOML reading
# =============================================================================


class TestReadTomlFile:
    def test_reads_tables(self, tmp_path: Path) -> None:
        path = tmp_path / "config.toml"
        _ = path.write_text(SAMPLE)

        data = read_toml_file(path)

        assert data["colors"] == {"commit_id": "bold blue"}

    def test_invalid_toml_reports_location(self, tmp_path: Path) -> None:
        path = tmp_path / "config.toml"
        _ = path.write_text("[colors]\ncommit_id = \n")

        with pytest.raises(ConfigLoadError) as exc_info:
            _ = read_toml_file(path)

        assert exc_info.value.path == path
        assert "line 2" in str(exc_info.value)

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            _ = read_toml_file(tmp_path / "missing.toml")


# =============================================================================
# Models
# =============================================================================


class TestTemplaterConfig:
    def test_defaults(self) -> None:
        config = TemplaterConfig()

        assert config.template_aliases == {}
        assert config.colors == {}
        assert config.logging == LoggingConfig()
        assert config.logging.level is LogLevel.INFO
        assert config.logging.format is LogFormat.TEXT

    def test_from_dict_reads_dashed_alias_table(self) -> None:
        config = TemplaterConfig.from_dict({"template-aliases": {"id": "commit_id"}})
        assert config.template_aliases == {"id": "commit_id"}

    def test_from_dict_accepts_field_name(self) -> None:
        config = TemplaterConfig.from_dict({"template_aliases": {"id": "commit_id"}})
        assert config.template_aliases == {"id": "commit_id"}

    def test_unknown_sections_ignored(self) -> None:
        config = TemplaterConfig.from_dict({"ui": {"pager": "less"}})
        assert config == TemplaterConfig()

    def test_invalid_value_reports_location(self) -> None:
        with pytest.raises(ConfigLoadError, match=r"Invalid configuration at logging\.level"):
            _ = TemplaterConfig.from_dict({"logging": {"level": "verbose"}})

    def test_frozen(self) -> None:
        config = TemplaterConfig()
        with pytest.raises(ValueError, match="frozen"):
            config.colors = {"a": "red"}  # pyright: ignore[reportAttributeAccessIssue]

    def test_from_file(self, tmp_path: Path) -> None:
        path = tmp_path / "config.toml"
        _ = path.write_text(SAMPLE)

        config = TemplaterConfig.from_file(path)

        assert config.template_aliases == {"short_id": "commit_id.short(8)"}
        assert config.colors == {"commit_id": "bold blue"}
        assert config.logging.level is LogLevel.DEBUG
        assert config.logging.format is LogFormat.JSON
        assert config.logging.file == "/tmp/revtemplate.log"


# =============================================================================
# Default location
# =============================================================================


class TestLoad:
    def test_explicit_path_must_exist(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            _ = TemplaterConfig.load(tmp_path / "missing.toml")

    def test_missing_default_gives_defaults(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("REVTEMPLATE_CONFIG", str(tmp_path / "missing.toml"))
        assert TemplaterConfig.load() == TemplaterConfig()

    def test_env_override(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        path = tmp_path / "custom.toml"
        _ = path.write_text(SAMPLE)
        monkeypatch.setenv("REVTEMPLATE_CONFIG", str(path))

        assert TemplaterConfig.load().colors == {"commit_id": "bold blue"}


class TestGetDefaultConfigPath:
    def test_explicit_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("REVTEMPLATE_CONFIG", "/etc/revtemplate.toml")
        assert get_default_config_path() == Path("/etc/revtemplate.toml")

    def test_xdg_config_home(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("REVTEMPLATE_CONFIG", raising=False)
        monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))

        assert get_default_config_path() == tmp_path / "revtemplate" / "config.toml"

    def test_home_fallback(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("REVTEMPLATE_CONFIG", raising=False)
        monkeypatch.delenv("XDG_CONFIG_HOME", raising=False)
        monkeypatch.setenv("HOME", str(tmp_path))

        assert get_default_config_path() == tmp_path / ".config" / "revtemplate" / "config.toml"

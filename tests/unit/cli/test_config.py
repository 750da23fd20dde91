"""Unit tests for the config commands."""

import os
from pathlib import Path
from unittest.mock import patch

from forcerm.cli.main import app
from forcerm.core.platform import HostCapabilities
from forcerm.core.settings import EngineSettings, load_settings
from typer.testing import CliRunner

runner = CliRunner()


class TestConfigPath:
    """Tests for forcerm config path."""

    def test_prints_settings_path(self, tmp_path: Path) -> None:
        """The settings file lives in the XDG config directory."""
        with patch.dict(os.environ, {"XDG_CONFIG_HOME": str(tmp_path)}):
            result = runner.invoke(app, ["config", "path"])

        assert result.exit_code == 0
        assert "config.toml" in result.stdout


class TestConfigInit:
    """Tests for forcerm config init."""

    def test_writes_defaults(self, tmp_path: Path) -> None:
        """init creates a settings file holding the defaults."""
        with patch.dict(os.environ, {"XDG_CONFIG_HOME": str(tmp_path)}):
            result = runner.invoke(app, ["config", "init"])

        path = tmp_path / "forcerm" / "config.toml"
        assert result.exit_code == 0
        assert path.exists()
        assert load_settings(path) == EngineSettings()

    def test_keeps_existing_file(self, tmp_path: Path) -> None:
        """init does not overwrite without --force."""
        path = tmp_path / "forcerm" / "config.toml"
        path.parent.mkdir(parents=True)
        path.write_text("max_threads = 2\n")

        with patch.dict(os.environ, {"XDG_CONFIG_HOME": str(tmp_path)}):
            result = runner.invoke(app, ["config", "init"])

        assert result.exit_code == 0
        assert "already exists" in result.stdout
        assert path.read_text() == "max_threads = 2\n"

    def test_force_overwrites(self, tmp_path: Path) -> None:
        """--force replaces the existing file."""
        path = tmp_path / "forcerm" / "config.toml"
        path.parent.mkdir(parents=True)
        path.write_text("max_threads = 2\n")

        with patch.dict(os.environ, {"XDG_CONFIG_HOME": str(tmp_path)}):
            result = runner.invoke(app, ["config", "init", "--force"])

        assert result.exit_code == 0
        assert load_settings(path).max_threads == 8


class TestConfigShow:
    """Tests for forcerm config show."""

    def test_shows_settings_and_elevation(
        self, thread_settings: EngineSettings, posix_caps: HostCapabilities
    ) -> None:
        """show lists settings and the elevation state."""
        with (
            patch("forcerm.cli.types.load_settings", return_value=thread_settings),
            patch("forcerm.cli.commands.config.detect_capabilities", return_value=posix_caps),
        ):
            result = runner.invoke(app, ["config", "show"])

        assert result.exit_code == 0
        assert "max_threads" in result.stdout
        assert "Elevated" in result.stdout

    def test_invalid_settings_file(self, tmp_path: Path) -> None:
        """A broken settings file is reported and exits 1."""
        path = tmp_path / "forcerm" / "config.toml"
        path.parent.mkdir(parents=True)
        path.write_text("max_threads = = 1\n")

        with patch.dict(os.environ, {"XDG_CONFIG_HOME": str(tmp_path)}):
            result = runner.invoke(app, ["config", "show"])

        assert result.exit_code == 1
        assert "Invalid TOML syntax" in result.output

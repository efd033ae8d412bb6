"""Unit tests for config CLI commands.

Tests for the sysdiff config show, path, ignore and init commands.
"""

import tomllib
from pathlib import Path

from sysdiff.cli.main import app
from sysdiff.core.ignore import ETC_IGNORE_PATTERNS
from typer.testing import CliRunner

runner = CliRunner()


class TestConfigShow:
    """Tests for sysdiff config show command."""

    def test_show_defaults(self) -> None:
        """Without a config file the defaults are shown."""
        result = runner.invoke(app, ["config", "show"])

        assert result.exit_code == 0
        data = tomllib.loads(result.output)
        assert data["root"] == "/"
        assert data["backend"] == "pacman"
        assert data["dbpath"] == "/var/lib/pacman"
        assert data["ignore_profile"] == "system"

    def test_show_applies_flags(self, tmp_path: Path) -> None:
        """Global flags override the file and derived values follow."""
        result = runner.invoke(
            app,
            ["--backend", "dpkg", "--scope", "/etc/", "--root", str(tmp_path), "config", "show"],
        )

        assert result.exit_code == 0
        data = tomllib.loads(result.output)
        assert data["backend"] == "dpkg"
        assert data["scope"] == "etc"
        assert data["root"] == str(tmp_path)
        assert data["dbpath"] == "/var/lib/dpkg"
        assert data["ignore_profile"] == "etc"

    def test_show_invalid_config(self, tmp_path: Path) -> None:
        """An invalid config file exits with code 1."""
        config_file = tmp_path / "config.toml"
        config_file.write_text("jobs = 1000\n")

        result = runner.invoke(app, ["--config", str(config_file), "config", "show"])

        assert result.exit_code == 1
        assert "Invalid config content" in result.output


class TestConfigPath:
    """Tests for sysdiff config path command."""

    def test_default_path(self, isolated_config_home: Path) -> None:
        """Prints the XDG config location."""
        result = runner.invoke(app, ["config", "path"])

        assert result.exit_code == 0
        assert str(isolated_config_home / "sysdiff" / "config.toml") in result.output
        assert "does not exist yet" in result.output

    def test_explicit_path(self, tmp_path: Path) -> None:
        """--config changes the reported location."""
        config_file = tmp_path / "custom.toml"
        config_file.write_text("")

        result = runner.invoke(app, ["--config", str(config_file), "config", "path"])

        assert result.exit_code == 0
        assert result.output.strip() == str(config_file)


class TestConfigIgnore:
    """Tests for sysdiff config ignore command."""

    def test_lists_effective_patterns(self, tmp_path: Path) -> None:
        """Profile patterns print first, then configured extras."""
        config_file = tmp_path / "config.toml"
        config_file.write_text('scope = "etc"\nignore = ["/etc/machine-id"]\n')

        result = runner.invoke(app, ["--config", str(config_file), "config", "ignore"])

        assert result.exit_code == 0
        assert result.output.splitlines() == [*ETC_IGNORE_PATTERNS, "/etc/machine-id"]

    def test_bad_ignore_dir(self, tmp_path: Path) -> None:
        """A missing ignore directory is reported with exit code 1."""
        config_file = tmp_path / "config.toml"
        config_file.write_text(f'ignore_dir = "{tmp_path / "missing"}"\n')

        result = runner.invoke(app, ["--config", str(config_file), "config", "ignore"])

        assert result.exit_code == 1
        assert "Cannot read ignore directory" in result.output


class TestConfigInit:
    """Tests for sysdiff config init command."""

    def test_init_writes_default_location(self, isolated_config_home: Path) -> None:
        """init writes the current flags to the default config path."""
        result = runner.invoke(
            app, ["--backend", "dpkg", "--repo", "/srv/mirror", "config", "init"]
        )

        assert result.exit_code == 0
        config_file = isolated_config_home / "sysdiff" / "config.toml"
        with open(config_file, "rb") as f:
            data = tomllib.load(f)
        assert data["backend"] == "dpkg"
        assert data["repo"] == "/srv/mirror"

    def test_init_explicit_missing_file(self, tmp_path: Path) -> None:
        """init may create the file named by --config."""
        config_file = tmp_path / "new" / "config.toml"

        result = runner.invoke(app, ["--config", str(config_file), "config", "init"])

        assert result.exit_code == 0
        assert config_file.exists()

    def test_init_refuses_overwrite(self, tmp_path: Path) -> None:
        """An existing config is kept unless --force is given."""
        config_file = tmp_path / "config.toml"
        config_file.write_text('scope = "etc"\n')

        result = runner.invoke(app, ["--config", str(config_file), "config", "init"])

        assert result.exit_code == 1
        assert "already exists" in result.output
        assert config_file.read_text() == 'scope = "etc"\n'

    def test_init_force_merges_flags(self, tmp_path: Path) -> None:
        """--force rewrites the file, keeping its values unless overridden."""
        config_file = tmp_path / "config.toml"
        config_file.write_text('scope = "etc"\njobs = 2\n')

        result = runner.invoke(
            app, ["--config", str(config_file), "--jobs", "8", "config", "init", "--force"]
        )

        assert result.exit_code == 0
        with open(config_file, "rb") as f:
            data = tomllib.load(f)
        assert data["scope"] == "etc"
        assert data["jobs"] == 8

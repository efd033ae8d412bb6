"""Reconciliation settings and config file I/O.

Settings are stored in ~/.config/sysdiff/config.toml. Every key is
optional; command-line flags override whatever the file sets.

Example config.toml:

    root = "/"
    backend = "dpkg"
    repo = "/srv/etc-mirror"
    scope = "etc"
    ignore = ["/etc/machine-id"]
"""

import logging
import os
import tomllib
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Annotated, Any

import tomli_w
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from sysdiff.core.ignore import (
    IgnoreFilter,
    IgnorePatternError,
    IgnoreProfile,
    load_ignore_dir,
    profile_patterns,
    validate_pattern,
)
from sysdiff.core.paths import get_config_path
from sysdiff.errors import SysdiffError
from sysdiff.models.file import normalize_name
from sysdiff.sources.base import PackageBackend

logger = logging.getLogger(__name__)


class ConfigError(SysdiffError):
    """Base exception for configuration errors."""


class ConfigNotFoundError(ConfigError):
    """Raised when an explicitly requested config file is not found."""


class ConfigParseError(ConfigError):
    """Raised when the config file cannot be parsed."""


class Settings(BaseModel):
    """Configuration for one reconciliation run.

    Attributes:
        root: Installation root the package database describes.
        dbpath: Package database location (None = backend default).
        repo: Mirror working tree (None = not configured).
        backend: Package manager whose database is read.
        scope: Subtree of root to walk, root-relative ("" = whole root).
        ignore_profile: Built-in ignore list (None = derived from scope).
        ignore: Extra ignore globs appended after the profile.
        ignore_dir: Directory of files holding more ignore globs.
        jobs: Number of threads used for hashing.
    """

    model_config = ConfigDict(extra="forbid")

    root: Annotated[Path, Field(description="Installation root")] = Path("/")
    dbpath: Annotated[Path | None, Field(description="Package database location")] = None
    repo: Annotated[Path | None, Field(description="Mirror working tree")] = None
    backend: Annotated[PackageBackend, Field(description="Package manager")] = (
        PackageBackend.PACMAN
    )
    scope: Annotated[str, Field(description="Subtree of root to reconcile")] = ""
    ignore_profile: Annotated[
        IgnoreProfile | None,
        Field(description="Built-in ignore list (None = derived from scope)"),
    ] = None
    ignore: Annotated[list[str], Field(description="Extra ignore globs")] = []
    ignore_dir: Annotated[Path | None, Field(description="Directory of ignore files")] = None
    jobs: Annotated[int, Field(ge=1, le=64, description="Hashing threads (1-64)")] = 1

    @field_validator("scope")
    @classmethod
    def normalize_scope(cls, v: str) -> str:
        """Store the scope root-relative ("/etc/" becomes "etc")."""
        return normalize_name(v)

    @field_validator("ignore")
    @classmethod
    def validate_ignore(cls, v: list[str]) -> list[str]:
        """Reject malformed ignore globs."""
        for pattern in v:
            try:
                validate_pattern(pattern)
            except IgnorePatternError as e:
                raise ValueError(str(e)) from None
        return v

    @property
    def effective_dbpath(self) -> Path:
        """Database location, falling back to the backend default."""
        return self.dbpath or self.backend.default_dbpath

    @property
    def effective_ignore_profile(self) -> IgnoreProfile:
        """Ignore profile, derived from scope when not set explicitly."""
        if self.ignore_profile is not None:
            return self.ignore_profile
        if self.scope == "etc":
            return IgnoreProfile.ETC
        return IgnoreProfile.SYSTEM

    @property
    def scope_dir(self) -> Path:
        """Directory the filesystem walk starts from."""
        return self.root / self.scope if self.scope else self.root

    def build_ignore_filter(self) -> IgnoreFilter:
        """Assemble the ignore filter: profile, then config globs, then ignore_dir.

        Raises:
            IgnorePatternError: If a pattern is malformed or ignore_dir is unreadable.
        """
        patterns = [*profile_patterns(self.effective_ignore_profile), *self.ignore]
        if self.ignore_dir is not None:
            patterns.extend(load_ignore_dir(self.ignore_dir))
        return IgnoreFilter(patterns)

    def with_overrides(self, **overrides: Any) -> "Settings":
        """Return validated settings with non-None overrides applied.

        Raises:
            ConfigError: If an override value is invalid.
        """
        update = {key: value for key, value in overrides.items() if value is not None}
        if not update:
            return self
        try:
            return Settings.model_validate({**self.model_dump(), **update})
        except ValidationError as e:
            raise ConfigError(f"Invalid setting: {e}") from e


def load_config(path: Path | None = None) -> Settings:
    """Load settings from a TOML file.

    Args:
        path: Config file. If None, uses the default config path, and a
            missing default file yields default settings.

    Returns:
        Validated Settings object.

    Raises:
        ConfigNotFoundError: If an explicitly given file doesn't exist.
        ConfigParseError: If the TOML syntax is invalid.
        ConfigError: If the content doesn't match the schema.
    """
    config_path = path or get_config_path()

    if not config_path.exists():
        if path is not None:
            raise ConfigNotFoundError(f"Config not found: {config_path}")
        logger.debug("No config file at %s, using defaults", config_path)
        return Settings()

    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigParseError(f"Invalid TOML syntax in {config_path}: {e}") from e
    except OSError as e:
        raise ConfigError(f"Failed to read config: {e}") from e

    try:
        return Settings.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid config content in {config_path}: {e}") from e


def save_config(settings: Settings, path: Path | None = None) -> Path:
    """Save settings to a TOML file.

    The file is written atomically through a temporary file in the same
    directory and os.replace().

    Args:
        settings: Settings to save.
        path: Destination. If None, uses the default config path.

    Returns:
        Path where the config was saved.

    Raises:
        ConfigError: If the file cannot be written.
    """
    config_path = path or get_config_path()
    data = settings.model_dump(mode="json", exclude_none=True)

    tmp_path: Path | None = None
    try:
        config_path.parent.mkdir(parents=True, exist_ok=True)
        with NamedTemporaryFile(
            mode="wb",
            dir=config_path.parent,
            delete=False,
            suffix=".tmp",
        ) as f:
            tmp_path = Path(f.name)
            tomli_w.dump(data, f)
        os.replace(str(tmp_path), str(config_path))
    except OSError as e:
        if tmp_path is not None and tmp_path.exists():
            tmp_path.unlink()
        raise ConfigError(f"Failed to write config: {e}") from e

    return config_path

"""XDG-compliant path management for sysdiff.

sysdiff keeps no state between runs; the only files it reads from the
user's home are its configuration and theme override.

XDG defaults:
- Config: ~/.config/sysdiff/
"""

import os
from pathlib import Path

# Application identifier for directory naming
APP_NAME = "sysdiff"


def get_config_dir() -> Path:
    """Get the configuration directory path.

    Returns:
        Path to ~/.config/sysdiff/ (or XDG_CONFIG_HOME/sysdiff/).
    """
    base = os.environ.get("XDG_CONFIG_HOME")
    if base:
        return Path(base) / APP_NAME
    return Path.home() / ".config" / APP_NAME


def get_config_path() -> Path:
    """Get the default configuration file path.

    Returns:
        Path to ~/.config/sysdiff/config.toml.
    """
    return get_config_dir() / "config.toml"


def get_theme_path() -> Path:
    """Get the user theme override path.

    Returns:
        Path to ~/.config/sysdiff/theme.toml.
    """
    return get_config_dir() / "theme.toml"

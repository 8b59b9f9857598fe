import os
from pathlib import Path

"""Global constants and configuration path definitions for git-glide.

This module defines the filesystem layout (adhering to XDG standards where applicable),
application identifiers, and the default values used when composing git commands.
"""

# --- Identity ---
APP_NAME = "git-glide"
"""str: The human-readable application name, also used as the logger name."""

STASH_TAG_PREFIX = "git-glide"
"""str: The fixed prefix of every stash label (`<prefix>:<branch>`)."""

DEFAULT_REMOTE = "origin"
"""str: The remote synchronized against when none is configured."""

GIT_EXECUTABLE = "git"
"""str: The executable invoked for every primitive command."""

# --- Paths ---
_XDG_STATE = os.environ.get("XDG_STATE_HOME")
_BASE_STATE = Path(_XDG_STATE) if _XDG_STATE else Path.home() / ".local/state"

STATE_DIR = _BASE_STATE / "git-glide"
"""Path: The directory for runtime state data (logs)."""

LOG_FILE = STATE_DIR / "git-glide.log"
"""Path: The file path for the rotating command log."""

# --- Configuration Paths ---
CONFIG_DIR: Path = Path.home() / ".config/git-glide"
"""Path: The directory for user configuration files."""

CONFIG_FILE: Path = CONFIG_DIR / "config.toml"
"""Path: The global configuration file path."""

LOCAL_CONFIG_NAME = ".git-glide.toml"
"""str: The per-repository configuration file name."""

PYPROJECT_SECTION = "tool.git-glide"
"""str: The pyproject.toml section read when no local config file exists."""

# --- Git output formats ---
STASH_LINE_PATTERN = r"^(stash@\{\d+\}): (On .*)$"
"""str: A `git stash list` line for a labeled entry: reference, then message."""

REPO_NAME_PATTERN = r"([^/.:]+)(?:\.git)?$"
"""str: Extracts the repository name from the tail of a clone URL."""

"""agentlens constants: filesystem layout, interpreter limits, and timeouts."""

from __future__ import annotations

import os
import sys
from enum import IntEnum
from pathlib import Path

# ---------------------------------------------------------------------------
# Exit codes
# ---------------------------------------------------------------------------


class ExitCode(IntEnum):
    SUCCESS = 0
    ERROR = 1
    CONFIG_ERROR = 2
    INPUT_ERROR = 3


# ---------------------------------------------------------------------------
# Platform-specific config directory
# ---------------------------------------------------------------------------


def _default_data_dir() -> Path:
    """
    Return the platform-appropriate agentlens data directory.

    macOS : ~/Library/Application Support/agentlens
    Linux : ~/.config/agentlens
    Other : ~/.agentlens
    """
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / "agentlens"
    if sys.platform.startswith("linux"):
        xdg = Path(os.environ.get("XDG_CONFIG_HOME", str(Path.home() / ".config")))
        return xdg / "agentlens"
    return Path.home() / ".agentlens"


# ---------------------------------------------------------------------------
# Filesystem layout
# ---------------------------------------------------------------------------

CONFIG_FILENAME = "config.toml"
CURRENT_CONFIG_VERSION = 1

# ---------------------------------------------------------------------------
# Interpreter limits
# ---------------------------------------------------------------------------

BUFFER_MAX_CHARS = 2000  # sliding window of raw output kept per session
RECENT_WINDOW_CHARS = 500  # tail of the decoded view used for classification
MESSAGE_MAX_CHARS = 60  # one-line summary length, ellipsis included
MIN_ALPHA_RATIO = 0.4  # below this share of letters a line is garbage
ELLIPSIS = "..."

# ---------------------------------------------------------------------------
# Timeouts
# ---------------------------------------------------------------------------

IDLE_QUIET_PERIOD_S = 2.0  # silence before the watchdog asks check_idle()

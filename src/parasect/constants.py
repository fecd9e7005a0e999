"""Constants for parasect.

This module defines the configuration defaults used throughout parasect,
including command substitution, dashboard rendering and logging settings.

Some values can be overridden through environment variables; the helpers
below parse them with a safe fallback so a malformed value never prevents
a search from starting.
"""

import os


def _get_int_env(name: str, default: int) -> int:
    """Parse int env var with safe fallback."""
    try:
        return int(os.getenv(name, str(default)))
    except (TypeError, ValueError):
        return default


def _get_float_env(name: str, default: float) -> float:
    """Parse float env var with safe fallback."""
    try:
        return float(os.getenv(name, str(default)))
    except (TypeError, ValueError):
        return default


# =============================================================================
# Command Configuration
# =============================================================================
# Marker replaced by the candidate index in every command argument
DEFAULT_SUBSTITUTION_STRING = "$X"

# Number of trailing lines of probe output kept for diagnostics
OUTPUT_TAIL_LINES = _get_int_env("PARASECT_OUTPUT_TAIL_LINES", 20)

# =============================================================================
# Dashboard Configuration
# =============================================================================
# How often the interactive dashboard repaints
REFRESH_PER_SECOND = _get_float_env("PARASECT_REFRESH_PER_SECOND", 4.0)

# Glyph used for every cell of the progress bar
PROGRESS_BAR_CELL = "█"

# Rows of the colour bar when the terminal is tall enough
PROGRESS_BAR_HEIGHT = 2

# =============================================================================
# Logging Configuration
# =============================================================================
# Diagnostic logging goes to stderr; event lines and results go to stdout
LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
DEFAULT_LOG_LEVEL = os.getenv("PARASECT_LOG_LEVEL", "WARNING").strip().upper()
if DEFAULT_LOG_LEVEL not in LOG_LEVELS:
    DEFAULT_LOG_LEVEL = "WARNING"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

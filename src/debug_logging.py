"""
Unified Logging Utility for the Sheepdog backend

Provides a centralized logging system that:
- Routes every message to stderr with a module prefix and level
- Filters DEBUG-level messages based on the --debug flag

Usage:
    from debug_logging import log, set_debug_mode

Modules call:
    log("SHEEPDOG", "message")                 # INFO level (always logged)
    log("RUNNER", "verbose details", "DEBUG")  # Only logged with --debug
    log("CONFIG", "bad value", "WARNING")      # Always logged
"""

import sys

# Global state
_debug_enabled = False


def set_debug_mode(enabled: bool) -> None:
    """Enable or disable debug logging globally."""
    global _debug_enabled
    _debug_enabled = enabled


def log(prefix: str, message: str, level: str = "INFO") -> None:
    """
    Log a message with the specified level.

    Args:
        prefix: Module prefix (e.g., "SHEEPDOG", "RUNNER", "CONFIG")
        message: The log message
        level: Log level - DEBUG, INFO, WARNING, ERROR
               DEBUG messages are only shown when debug mode is enabled.
    """
    if level == "DEBUG" and not _debug_enabled:
        return

    txt = f"{prefix} [{level}]: {message}" if prefix else f"[{level}]: {message}"
    print(txt, file=sys.stderr)


# Convenience aliases for cleaner code
def log_debug(prefix: str, message: str) -> None:
    """Shortcut for DEBUG level logging."""
    log(prefix, message, "DEBUG")

def log_info(prefix: str, message: str) -> None:
    """Shortcut for INFO level logging."""
    log(prefix, message, "INFO")

def log_warning(prefix: str, message: str) -> None:
    """Shortcut for WARNING level logging."""
    log(prefix, message, "WARNING")

def log_error(prefix: str, message: str) -> None:
    """Shortcut for ERROR level logging."""
    log(prefix, message, "ERROR")

# Path configuration module for the Sheepdog backend
# This module centralizes all path logic: the user config file and lookup of
# the collie control tool.

import os
import platform
import shutil
from pathlib import Path

# User configuration paths (per-user, in home directory)
USER_CONFIG_DIR = Path.home() / ".config" / "SheepdogPool"
USER_CONFIG_FILE_PATH = str(USER_CONFIG_DIR / "config.json")


def find_executable(name: str, additional_paths: list[str] | None = None) -> str | None:
    """Find an executable by name.

    First tries shutil.which which searches PATH, then falls back to searching
    common platform-specific directories plus any additional_paths provided.

    Args:
        name: Executable base name to find
        additional_paths: Optional list of paths to search after PATH

    Returns:
        Absolute path if found, otherwise None
    """
    path = shutil.which(name)
    if path:
        return path

    system = platform.system()
    if system == 'Darwin':
        base_paths = ['/usr/local/bin', '/usr/local/sbin', '/opt/homebrew/bin', '/opt/homebrew/sbin', '/usr/bin', '/bin', '/sbin']
    elif 'BSD' in system:
        base_paths = ['/sbin', '/usr/sbin', '/usr/local/sbin', '/usr/local/bin', '/usr/bin', '/bin']
    else:
        base_paths = ['/usr/sbin', '/sbin', '/usr/bin', '/bin', '/usr/local/sbin', '/usr/local/bin']

    if additional_paths:
        base_paths = additional_paths + base_paths

    for p in base_paths:
        candidate = os.path.join(p, name)
        if os.path.exists(candidate) and os.access(candidate, os.X_OK):
            return candidate # The first match is returned so earlier entries override later ones
    return None


def find_collie_tool(names: list[str]) -> str | None:
    """Returns the first control tool found among `names` ('collie', then 'dog')."""
    for name in names:
        found = find_executable(name)
        if found:
            return found
    return None

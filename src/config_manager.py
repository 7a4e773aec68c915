# --- START OF FILE config_manager.py ---

import json
import os
import sys
from dataclasses import dataclass, field
from typing import Optional

import constants
from paths import USER_CONFIG_FILE_PATH, find_collie_tool


def _default_tool_path() -> str:
    return find_collie_tool(constants.COLLIE_TOOL_NAMES) or constants.DEFAULT_COLLIE_TOOL


@dataclass(frozen=True)
class BackendConfig:
    """Explicit settings for a backend instance; the backend never reads files itself."""
    tool_path: str = field(default_factory=_default_tool_path)
    default_address: str = constants.DEFAULT_HOST_ADDRESS
    default_port: int = constants.DEFAULT_HOST_PORT
    command_timeout: int = constants.DEFAULT_COMMAND_TIMEOUT


def load_config(config_path: Optional[str] = None) -> dict:
    """Loads the configuration from the JSON file."""
    config_path = config_path or USER_CONFIG_FILE_PATH
    if os.path.exists(config_path):
        try:
            with open(config_path, 'r') as f:
                config = json.load(f)
                if isinstance(config, dict):
                    return config
                else:
                    print(f"CONFIG: Warning: Config file '{config_path}' does not contain a valid JSON object. Using defaults.", file=sys.stderr)
                    return {}
        except (json.JSONDecodeError, IOError) as e:
            print(f"CONFIG: Error loading config file '{config_path}': {e}. Using defaults.", file=sys.stderr)
            return {}
    return {}


def _positive_int_setting(settings: dict, key: str, default: int, upper: Optional[int] = None) -> int:
    value = settings.get(key, default)
    try:
        if isinstance(value, bool):
            raise TypeError(key)
        value = int(value)
        if value <= 0 or (upper is not None and value > upper):
            raise ValueError(key)
    except (ValueError, TypeError):
        print(f"CONFIG: Warning: Invalid {key} in config ({settings.get(key)!r}). Using default: {default}", file=sys.stderr)
        return default
    return value


def backend_config_from_settings(settings: dict) -> BackendConfig:
    """
    Builds a BackendConfig from a settings dict (as returned by load_config).

    Recognised keys: 'collie_path', 'default_address', 'default_port',
    'command_timeout'. Missing or invalid values fall back to the defaults.
    """
    tool_path = settings.get("collie_path")
    if not isinstance(tool_path, str) or not tool_path.strip():
        if tool_path is not None:
            print(f"CONFIG: Warning: Invalid collie_path in config ({tool_path!r}). Searching PATH instead.", file=sys.stderr)
        tool_path = _default_tool_path()

    address = settings.get("default_address", constants.DEFAULT_HOST_ADDRESS)
    if not isinstance(address, str) or not address.strip():
        print(f"CONFIG: Warning: Invalid default_address in config ({address!r}). Using default: {constants.DEFAULT_HOST_ADDRESS}", file=sys.stderr)
        address = constants.DEFAULT_HOST_ADDRESS

    return BackendConfig(
        tool_path=tool_path.strip(),
        default_address=address.strip(),
        default_port=_positive_int_setting(settings, "default_port", constants.DEFAULT_HOST_PORT, upper=65535),
        command_timeout=_positive_int_setting(settings, "command_timeout", constants.DEFAULT_COMMAND_TIMEOUT),
    )

# --- END OF FILE config_manager.py ---

# --- START OF FILE constants.py ---

"""
Central location for constants used across the Sheepdog backend modules.
"""

# --- Backend identity ---
POOL_TYPE_SHEEPDOG = "sheepdog"   # Pool type string the pool manager dispatches on
VOLUME_KIND_NETWORK = "network"   # Every Sheepdog volume is network-backed

# --- Control tool ---
# Older Sheepdog releases ship 'collie', newer ones renamed it to 'dog'.
COLLIE_TOOL_NAMES = ["collie", "dog"]
DEFAULT_COLLIE_TOOL = "collie"    # Used as-is when neither name is found on the system

# --- Default Settings ---
# These are fallback values used when the config doesn't have the setting or the value is invalid
DEFAULT_HOST_ADDRESS = "localhost"
DEFAULT_HOST_PORT = 7000
DEFAULT_COMMAND_TIMEOUT = 120     # Timeout for a single collie invocation in seconds

# --- Report format markers ---
# 'node info -r' aggregate line, e.g. "Total 15245667872 117571104 0% 20972341"
NODE_INFO_TOTAL_PREFIX = "Total "
# 'vdi list -r' first column: '=' current volume, 's' snapshot, 'c' clone...
VDI_CURRENT_MARKER = "="

UINT64_MAX = 2 ** 64 - 1

# --- Operation flags ---
# No operation currently accepts any flag; kept as a mask so callers can be validated.
ALLOWED_DELETE_FLAGS = 0
ALLOWED_RESIZE_FLAGS = 0

# --- END OF FILE constants.py ---

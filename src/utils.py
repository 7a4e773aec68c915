# --- START OF FILE utils.py ---

import re


def parse_size(size_str):
    """Parses size strings (e.g., 1.23G, 100M, 500K, 2T) into bytes."""
    if isinstance(size_str, bool):
        raise ValueError(f"Invalid size format: '{size_str}'")
    if isinstance(size_str, int):
        return size_str
    if not isinstance(size_str, str):
        raise ValueError(f"Invalid size format: '{size_str}'")

    size_str = size_str.upper().strip()
    # Allow for optional 'B' at the end, and 'iB' for kibibytes etc.
    match = re.match(r'^(\d+(?:\.\d+)?)\s*([KMGTPE])?I?B?$', size_str)
    if not match:
        raise ValueError(f"Invalid size format: '{size_str}'")

    unit = match.group(2)
    units = {'K': 1, 'M': 2, 'G': 3, 'T': 4, 'P': 5, 'E': 6}
    if not unit:
        # Plain byte counts must be whole numbers
        if '.' in match.group(1):
            raise ValueError(f"Invalid size format: '{size_str}'")
        return int(match.group(1))

    return int(float(match.group(1)) * 1024 ** units[unit])


def format_size(size_bytes):
    """Formats bytes into a human-readable size string."""
    if size_bytes is None or not isinstance(size_bytes, (int, float)) or size_bytes < 0:
        return "-"
    if size_bytes == 0:
        return "0B" # Consistent output for zero

    units = ['B', 'K', 'M', 'G', 'T', 'P', 'E']
    i = 0
    float_size = float(size_bytes)
    while float_size >= 1024 and i < len(units) - 1:
        float_size /= 1024.0
        i += 1

    if i == 0: # Bytes
        return f"{int(float_size)}{units[i]}"
    elif float_size < 10:
        return f"{float_size:.2f}{units[i]}"
    elif float_size < 100:
        return f"{float_size:.1f}{units[i]}"
    else:
        return f"{int(round(float_size))}{units[i]}"


def format_capacity(used_bytes, total_bytes):
    """Formats used/total bytes into a percentage string."""
    if total_bytes is None or not isinstance(total_bytes, (int, float)) or total_bytes <= 0:
        return "0%" # Avoid division by zero
    if used_bytes is None or not isinstance(used_bytes, (int, float)) or used_bytes < 0:
        used_bytes = 0

    percentage = max(0, (used_bytes / total_bytes) * 100)
    return f"{percentage:.1f}%"

# --- END OF FILE utils.py ---

# --- START OF FILE storage_errors.py ---

import shlex


class StorageBackendError(Exception):
    """Base class for storage backend errors."""
    pass


class SheepdogUnsupportedConfigError(StorageBackendError):
    """The requested volume configuration cannot be provided by Sheepdog."""
    pass


class SheepdogInvalidOptionError(StorageBackendError):
    """An option or flag was passed to an operation that does not accept it."""
    pass


class SheepdogCommandError(StorageBackendError):
    """Custom exception for collie command execution errors."""
    def __init__(self, message, command_parts=None, stderr=None, returncode=None):
        super().__init__(message)
        self.command_parts = command_parts
        self.stderr = stderr
        self.returncode = returncode

    def __str__(self):
        details = []
        if self.command_parts:
             try: cmd_str = shlex.join(self.command_parts); details.append(f"Command: {cmd_str}")
             except TypeError: details.append(f"Command: {self.command_parts}")
        if self.returncode is not None: details.append(f"Return Code: {self.returncode}")
        if self.stderr:
             stderr_short = self.stderr.strip()
             if len(stderr_short) > 300: stderr_short = stderr_short[:300] + "..."
             details.append(f"Stderr: {stderr_short}")
        details_str = " (" + ", ".join(details) + ")" if details else ""
        return f"{super().__str__()}{details_str}"


class SheepdogParsingError(StorageBackendError):
    """Custom exception for errors parsing collie report output."""
    def __init__(self, message, raw_line=None, command_parts=None):
        super().__init__(message)
        self.raw_line = raw_line
        self.command_parts = command_parts

    def __str__(self):
        details = []
        if self.command_parts:
             try: cmd_str = shlex.join(self.command_parts); details.append(f"Command: {cmd_str}")
             except TypeError: details.append(f"Command: {self.command_parts}")
        if self.raw_line: details.append(f"Problematic Line: '{self.raw_line[:100]}{'...' if len(self.raw_line)>100 else ''}'")
        details_str = " (" + ", ".join(details) + ")" if details else ""
        return f"{super().__str__()}{details_str}"

# --- END OF FILE storage_errors.py ---

# --- START OF FILE sheepdog_backend_core.py ---

import subprocess
import shlex
import traceback
from typing import Callable, List, Optional, Sequence, Tuple, Union

import constants
from debug_logging import log_debug, log_error
from models import HostTarget, Pool
from storage_errors import SheepdogInvalidOptionError

# runner(argv) -> (returncode, stdout, stderr)
CommandRunner = Callable[[List[str]], Tuple[int, str, str]]


def describe_command(command_parts: Sequence[str]) -> str:
    try:
        return shlex.join(command_parts)
    except TypeError:
        return str(command_parts)


# --- Internal Command Runner ---
def run_command(command_parts: List[str], *, timeout: int = constants.DEFAULT_COMMAND_TIMEOUT) -> Tuple[int, str, str]:
    """
    Runs a command using subprocess and captures its output.
    Start failures and timeouts are reported as returncode -1 with the reason in stderr.
    """
    if not command_parts or not command_parts[0]:
        err_msg = "Error: Invalid command parts provided to run_command."
        log_error("RUNNER", err_msg)
        return -1, "", err_msg

    cmd_str_safe = describe_command(command_parts)
    log_debug("RUNNER", f"Executing: {cmd_str_safe}")
    stdout, stderr, returncode = "", "", -1

    try:
        process = subprocess.run(
            command_parts,
            stdout=subprocess.PIPE, stderr=subprocess.PIPE,
            text=False, # Read bytes
            check=False, # Don't raise exception on non-zero exit
            timeout=timeout
        )
        returncode = process.returncode
        stdout = process.stdout.decode('utf-8', errors='replace') if process.stdout else ""
        stderr = process.stderr.decode('utf-8', errors='replace') if process.stderr else ""

        if returncode != 0:
            log_error("RUNNER", f"Command failed (ret={returncode}) for: {cmd_str_safe}")
            if stderr: log_error("RUNNER", f"Stderr:\n{stderr.strip()}")
            # stderr is usually more informative, only show stdout when it is empty
            elif stdout: log_error("RUNNER", f"Stdout:\n{stdout.strip()}")

    except FileNotFoundError:
        stderr = f"Error: Command not found: '{command_parts[0]}'."
        log_error("RUNNER", stderr)
    except PermissionError:
        stderr = f"Error: Permission denied executing '{command_parts[0]}'."
        log_error("RUNNER", stderr)
    except subprocess.TimeoutExpired:
        stderr = f"Error: Command '{cmd_str_safe}' timed out after {timeout} seconds."
        log_error("RUNNER", stderr)
    except ValueError as e:
        # e.g. an argument with an embedded NUL byte
        stderr = f"Error: Invalid command arguments for {cmd_str_safe}: {e}"
        log_error("RUNNER", stderr)
    except OSError as e:
        stderr = f"Unexpected error running command {cmd_str_safe}: {e}"
        log_error("RUNNER", f"{stderr}\n{traceback.format_exc()}")

    return returncode, stdout, stderr


# --- Host target ---
def resolve_host_target(pool: Pool, default_address: str = constants.DEFAULT_HOST_ADDRESS,
                        default_port: int = constants.DEFAULT_HOST_PORT) -> HostTarget:
    """Uses the pool's first host entry; a missing name or port keeps the default for that field."""
    address, port = default_address, default_port
    if pool.hosts:
        host = pool.hosts[0]
        if host.name:
            address = host.name
        if host.port:
            port = int(host.port)
    return HostTarget(address=address, port=port)


# --- Validation helpers ---
def check_flags(flags: int, allowed: int, operation: str) -> None:
    """Rejects any flag bit outside the `allowed` mask."""
    if isinstance(flags, bool) or not isinstance(flags, int):
        raise SheepdogInvalidOptionError(f"Invalid flags value for {operation}: {flags!r}")
    unsupported = flags & ~allowed
    if unsupported:
        raise SheepdogInvalidOptionError(f"Unsupported flags 0x{unsupported:x} for {operation}.")


def format_capacity_arg(capacity: int) -> str:
    if isinstance(capacity, bool) or not isinstance(capacity, int):
        raise SheepdogInvalidOptionError(f"Invalid capacity: expected an integer byte count, got {type(capacity).__name__}")
    if capacity < 0 or capacity > constants.UINT64_MAX:
        raise SheepdogInvalidOptionError(f"Invalid capacity: {capacity} is out of range.")
    return str(capacity)


# --- Command Builder Base Class ---
class CommandBuilder:
    def __init__(self, base_command: str):
        if not base_command:
            raise ValueError("Base command cannot be empty")
        self._parts: List[str] = [base_command]

    def _add_option(self, flag: str, value: Union[str, int, None]):
        if value is not None:
            self._parts.extend([flag, str(value)])
        return self

    def _add_flag(self, flag: str, condition: bool = True):
        if condition:
            self._parts.append(flag)
        return self

    def _add_args(self, *args: Optional[str]):
        for arg in args:
            if arg is not None:
                self._parts.append(arg)
        return self

    def build(self) -> List[str]:
        return list(self._parts)


# --- Collie Command Builder ---
class CollieCommandBuilder(CommandBuilder):
    def __init__(self, tool_path: str, *subcommand: str):
        super().__init__(tool_path)
        self._add_args(*subcommand)

    def raw(self, condition=True): return self._add_flag('-r', condition) # Raw, space separated output
    def address(self, address: str): return self._add_option('-a', address)
    def port(self, port: int): return self._add_option('-p', port)
    def host(self, target: HostTarget): return self.address(target.address).port(target.port)
    def vdi(self, name: str): return self._add_args(name)
    def size(self, capacity: int): return self._add_args(format_capacity_arg(capacity))


def node_info_command(tool_path: str, target: HostTarget) -> List[str]:
    return CollieCommandBuilder(tool_path, 'node', 'info').raw().host(target).build()

def vdi_list_command(tool_path: str, target: HostTarget, name: Optional[str] = None) -> List[str]:
    builder = CollieCommandBuilder(tool_path, 'vdi', 'list')
    if name is not None: builder.vdi(name)
    return builder.raw().host(target).build()

def vdi_create_command(tool_path: str, target: HostTarget, name: str, capacity: int) -> List[str]:
    return CollieCommandBuilder(tool_path, 'vdi', 'create').vdi(name).size(capacity).host(target).build()

def vdi_delete_command(tool_path: str, target: HostTarget, name: str, flags: int = 0) -> List[str]:
    check_flags(flags, constants.ALLOWED_DELETE_FLAGS, f"delete of volume '{name}'")
    return CollieCommandBuilder(tool_path, 'vdi', 'delete').vdi(name).host(target).build()

def vdi_resize_command(tool_path: str, target: HostTarget, name: str, capacity: int, flags: int = 0) -> List[str]:
    check_flags(flags, constants.ALLOWED_RESIZE_FLAGS, f"resize of volume '{name}'")
    return CollieCommandBuilder(tool_path, 'vdi', 'resize').vdi(name).size(capacity).host(target).build()


# --- END OF FILE sheepdog_backend_core.py ---

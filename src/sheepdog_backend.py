# --- START OF FILE sheepdog_backend.py ---
"""
Sheepdog storage backend.

Every operation is one synchronous unit of work: build the collie command,
run it, parse stdout, and only then mutate the Pool/Volume records. A failed
command or an unparsable report leaves the records exactly as they were.
Callers must not run two operations on the same Pool at once.
"""

import functools
from typing import Optional

import constants
from config_manager import BackendConfig
from debug_logging import log_info, log_warning
from models import HostTarget, Pool, Volume
from parsers.collie import CollieParser
from sheepdog_backend_core import (
    CommandRunner, describe_command, node_info_command, resolve_host_target, run_command,
    vdi_create_command, vdi_delete_command, vdi_list_command, vdi_resize_command,
)
from storage_backend import StorageBackend, register_backend
from storage_errors import (
    SheepdogCommandError, SheepdogParsingError, SheepdogUnsupportedConfigError, StorageBackendError,
)
import utils


class SheepdogBackend(StorageBackend):
    pool_type = constants.POOL_TYPE_SHEEPDOG

    def __init__(self, config: Optional[BackendConfig] = None, runner: Optional[CommandRunner] = None):
        self.config = config or BackendConfig()
        self._runner = runner or functools.partial(run_command, timeout=self.config.command_timeout)

    def host_target(self, pool: Pool) -> HostTarget:
        return resolve_host_target(pool, self.config.default_address, self.config.default_port)

    def _run(self, command_parts, failure_message: str) -> str:
        """Runs a command and returns its stdout; non-zero exit raises SheepdogCommandError."""
        try:
            retcode, stdout, stderr = self._runner(command_parts)
        except (OSError, ValueError) as e:
            raise SheepdogCommandError(f"{failure_message} {e}", command_parts) from e
        if retcode != 0:
            raise SheepdogCommandError(failure_message, command_parts, stderr, retcode)
        return stdout

    @staticmethod
    def _parse(parser_fn, command_parts, *args):
        try:
            return parser_fn(*args)
        except SheepdogParsingError as e:
            e.command_parts = command_parts
            raise

    def refresh_pool(self, pool: Pool) -> None:
        target = self.host_target(pool)

        node_cmd = node_info_command(self.config.tool_path, target)
        stdout = self._run(node_cmd, f"Failed to get node info for pool '{pool.name}'.")
        capacity, allocation = self._parse(CollieParser.parse_node_info, node_cmd, stdout)

        list_cmd = vdi_list_command(self.config.tool_path, target)
        stdout = self._run(list_cmd, f"Failed to list volumes of pool '{pool.name}'.")
        volumes = self._parse(CollieParser.parse_vdi_list, list_cmd, stdout, pool.name)

        # Both reports parsed, apply everything at once
        pool.capacity = capacity
        pool.allocation = allocation
        pool.replace_volumes(volumes)
        log_info("SHEEPDOG", f"Refreshed pool '{pool.name}': {utils.format_size(allocation)} of "
                             f"{utils.format_size(capacity)} used ({utils.format_capacity(allocation, capacity)}), "
                             f"{len(volumes)} volume(s)")

    def create_volume(self, pool: Pool, vol: Volume) -> None:
        if vol.is_encrypted:
            raise SheepdogUnsupportedConfigError("Sheepdog does not support encrypted volumes")

        cmd = vdi_create_command(self.config.tool_path, self.host_target(pool), vol.name, vol.capacity)
        create_error = None
        try:
            self._run(cmd, f"Failed to create volume '{vol.name}' in pool '{pool.name}'.")
        except SheepdogCommandError as e:
            create_error = e

        # Best effort: the create's own status is what the caller gets
        try:
            self.refresh_volume(pool, vol)
        except StorageBackendError as e:
            log_warning("SHEEPDOG", f"Could not refresh volume '{vol.name}' after create: {e}")

        if create_error is not None:
            raise create_error
        log_info("SHEEPDOG", f"Created volume '{pool.volume_key(vol.name)}' ({utils.format_size(vol.capacity)})")

    def refresh_volume(self, pool: Pool, vol: Volume) -> None:
        cmd = vdi_list_command(self.config.tool_path, self.host_target(pool), vol.name)
        stdout = self._run(cmd, f"Failed to get info for volume '{vol.name}' in pool '{pool.name}'.")
        capacity, allocation = self._parse(CollieParser.parse_vdi, cmd, stdout)

        vol.capacity = capacity
        vol.allocation = allocation
        vol.kind = constants.VOLUME_KIND_NETWORK
        vol.target = vol.name
        vol.key = pool.volume_key(vol.name)

    def delete_volume(self, pool: Pool, vol: Volume, flags: int = 0) -> None:
        cmd = vdi_delete_command(self.config.tool_path, self.host_target(pool), vol.name, flags)
        self._run(cmd, f"Failed to delete volume '{vol.name}' from pool '{pool.name}'.")
        log_info("SHEEPDOG", f"Deleted volume: {describe_command(cmd)}")

    def resize_volume(self, pool: Pool, vol: Volume, capacity: int, flags: int = 0) -> None:
        cmd = vdi_resize_command(self.config.tool_path, self.host_target(pool), vol.name, capacity, flags)
        self._run(cmd, f"Failed to resize volume '{vol.name}' in pool '{pool.name}'.")
        log_info("SHEEPDOG", f"Resized volume '{vol.name}' to {utils.format_size(capacity)}")


register_backend(constants.POOL_TYPE_SHEEPDOG, SheepdogBackend)

# --- END OF FILE sheepdog_backend.py ---

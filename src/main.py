#!/usr/bin/env python3
# --- START OF FILE src/main.py ---
import argparse
import json
import sys
from typing import List, Optional

import config_manager
from debug_logging import log_error, set_debug_mode
from models import Pool, PoolHost, Volume
from sheepdog_backend import SheepdogBackend
from storage_errors import StorageBackendError
import utils
from version import __version__


def _size_arg(value: str) -> int:
    try:
        return utils.parse_size(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sheepdog-pool",
        description="Manage volumes of a Sheepdog storage pool through collie",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument('--version', action='version', version=f"%(prog)s {__version__}")
    parser.add_argument('--config', default=None, help='Path to a JSON config file (default: ~/.config/SheepdogPool/config.json)')
    parser.add_argument('--pool', default='sheepdog', help='Pool name, used to build volume keys')
    parser.add_argument('--host', default=None, help='Sheep daemon address (overrides the configured default)')
    parser.add_argument('-p', '--port', type=int, default=None, help='Sheep daemon port (overrides the configured default)')
    parser.add_argument('--json', action='store_true', help='Print JSON instead of text')
    parser.add_argument('--debug', action='store_true', help='Enable verbose debug logging')

    sub = parser.add_subparsers(dest='command', required=True)
    sub.add_parser('pool-refresh', help='Show pool capacity and its current volumes')

    p = sub.add_parser('vol-info', help='Show a single volume')
    p.add_argument('name')

    p = sub.add_parser('vol-create', help='Create a volume')
    p.add_argument('name')
    p.add_argument('size', type=_size_arg, help='Capacity in bytes or with a K/M/G/T suffix')
    p.add_argument('--encryption', default=None, help='Requested encryption format (not supported by Sheepdog)')

    p = sub.add_parser('vol-delete', help='Delete a volume')
    p.add_argument('name')

    p = sub.add_parser('vol-resize', help='Resize a volume')
    p.add_argument('name')
    p.add_argument('size', type=_size_arg, help='New capacity in bytes or with a K/M/G/T suffix')
    return parser


def _volume_summary(vol: Volume) -> dict:
    return {
        "name": vol.name,
        "key": vol.key,
        "target": vol.target,
        "kind": vol.kind,
        "capacity": vol.capacity,
        "allocation": vol.allocation,
    }


def _pool_summary(pool: Pool) -> dict:
    return {
        "name": pool.name,
        "capacity": pool.capacity,
        "allocation": pool.allocation,
        "available": pool.available,
        "volumes": [_volume_summary(v) for v in pool.volumes],
    }


def _print_volume(vol: Volume) -> None:
    print(f"{vol.key}\t{utils.format_size(vol.allocation)}/{utils.format_size(vol.capacity)}")


def run(argv: Optional[List[str]] = None, runner=None) -> int:
    args = build_parser().parse_args(argv)
    set_debug_mode(args.debug)

    config = config_manager.backend_config_from_settings(config_manager.load_config(args.config))
    hosts = [PoolHost(name=args.host, port=args.port)] if (args.host or args.port) else []
    pool = Pool(name=args.pool, hosts=hosts)
    backend = SheepdogBackend(config=config, runner=runner)

    try:
        if args.command == 'pool-refresh':
            backend.refresh_pool(pool)
            if args.json:
                print(json.dumps(_pool_summary(pool), indent=2))
            else:
                print(f"Pool {pool.name}: capacity {utils.format_size(pool.capacity)}, "
                      f"allocation {utils.format_size(pool.allocation)}, "
                      f"available {utils.format_size(pool.available)}")
                for vol in pool.volumes:
                    _print_volume(vol)
            return 0

        vol = Volume(name=args.name)
        if args.command == 'vol-info':
            backend.refresh_volume(pool, vol)
        elif args.command == 'vol-create':
            vol.capacity = args.size
            vol.encryption = args.encryption
            backend.create_volume(pool, vol)
        elif args.command == 'vol-delete':
            backend.delete_volume(pool, vol)
            print(f"Volume {pool.volume_key(vol.name)} deleted")
            return 0
        elif args.command == 'vol-resize':
            backend.resize_volume(pool, vol, args.size)
            print(f"Volume {pool.volume_key(vol.name)} resized to {utils.format_size(args.size)}")
            return 0

        if args.json:
            print(json.dumps(_volume_summary(vol), indent=2))
        else:
            _print_volume(vol)
        return 0

    except StorageBackendError as e:
        log_error("MAIN", str(e))
        return 1


def main() -> None:
    sys.exit(run())


if __name__ == "__main__":
    main()

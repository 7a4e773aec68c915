from __future__ import annotations

import importlib
from abc import ABC, abstractmethod
from typing import Dict, Optional, Type

from models import Pool, Volume
from storage_errors import StorageBackendError


class StorageBackend(ABC):
    """Operations a pool manager dispatches to the backend matching a pool's type."""

    pool_type: str = ""

    @abstractmethod
    def refresh_pool(self, pool: Pool) -> None:
        """Reload capacity, allocation and the full volume list of `pool`."""
        ...

    @abstractmethod
    def create_volume(self, pool: Pool, vol: Volume) -> None:
        ...

    @abstractmethod
    def refresh_volume(self, pool: Pool, vol: Volume) -> None:
        ...

    @abstractmethod
    def delete_volume(self, pool: Pool, vol: Volume, flags: int = 0) -> None:
        ...

    @abstractmethod
    def resize_volume(self, pool: Pool, vol: Volume, capacity: int, flags: int = 0) -> None:
        ...


_BACKENDS: Dict[str, Type[StorageBackend]] = {}

# Built-in backends, imported on first lookup; each module registers itself
_BUILTIN_BACKEND_MODULES: Dict[str, str] = {
    "sheepdog": "sheepdog_backend",
}


def register_backend(pool_type: str, backend_cls: Type[StorageBackend]) -> None:
    if not pool_type:
        raise ValueError("Pool type cannot be empty")
    _BACKENDS[pool_type] = backend_cls


def _load_builtin_backends() -> None:
    for module_name in _BUILTIN_BACKEND_MODULES.values():
        importlib.import_module(module_name)


def registered_pool_types() -> list[str]:
    _load_builtin_backends()
    return sorted(_BACKENDS)


def get_backend(pool_type: str, config=None, runner=None) -> StorageBackend:
    """Instantiates the backend registered for `pool_type`."""
    backend_cls: Optional[Type[StorageBackend]] = _BACKENDS.get(pool_type)
    if backend_cls is None and pool_type in _BUILTIN_BACKEND_MODULES:
        importlib.import_module(_BUILTIN_BACKEND_MODULES[pool_type])
        backend_cls = _BACKENDS.get(pool_type)
    if backend_cls is None:
        raise StorageBackendError(f"No storage backend registered for pool type '{pool_type}'.")
    return backend_cls(config=config, runner=runner)

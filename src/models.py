# --- START OF FILE models.py ---

from dataclasses import dataclass, field
from typing import List, Optional

import constants


@dataclass(frozen=True)
class HostTarget:
    """Address/port pair passed to collie with -a/-p."""
    address: str = constants.DEFAULT_HOST_ADDRESS
    port: int = constants.DEFAULT_HOST_PORT


@dataclass
class PoolHost:
    # Host entry from the pool definition; unset fields fall back to defaults
    name: Optional[str] = None
    port: Optional[int] = None


@dataclass
class Volume:
    name: str # Raw collie name, backslash escapes kept verbatim
    kind: str = constants.VOLUME_KIND_NETWORK
    capacity: int = 0 # bytes
    allocation: int = 0 # bytes
    target: str = ""
    key: str = ""
    # Requested encryption format ('luks', ...). Sheepdog cannot honour it.
    encryption: Optional[str] = field(default=None, compare=False)

    @property
    def is_encrypted(self) -> bool:
        return bool(self.encryption)


@dataclass
class Pool:
    name: str
    pool_type: str = constants.POOL_TYPE_SHEEPDOG
    capacity: int = 0 # bytes
    allocation: int = 0 # bytes
    hosts: List[PoolHost] = field(default_factory=list)

    # Exclude volumes from comparison, they are rebuilt on every refresh
    volumes: List[Volume] = field(default_factory=list, compare=False, repr=False)

    @property
    def available(self) -> int:
        return self.capacity - self.allocation

    def volume_key(self, volume_name: str) -> str:
        return f"{self.name}/{volume_name}"

    def replace_volumes(self, volumes: List[Volume]) -> None:
        """Swap in a freshly parsed volume list; never merged with the old one."""
        self.volumes = volumes


# --- END OF FILE models.py ---

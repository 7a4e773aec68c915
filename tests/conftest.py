from typing import List, Tuple

import pytest

from config_manager import BackendConfig
from models import Pool, PoolHost

NODE_INFO_OUTPUT = (
    "0 15245667872 117571104 0%\n"
    "Total 15245667872 117571104 0% 20972341\n"
)

VDI_LIST_OUTPUT = (
    "s 650f4363-dd7b-4aba-a954-7d6e1ab0ba51 1 2097152000 0 2088763392 1343921684 5fda1\n"
    "= 650f4363-dd7b-4aba-a954-7d6e1ab0ba51 2 2097152000 381681664 1707081728 1343921685 5fda2\n"
    "= dd5089ac-0677-4463-8981-9b7f4c81ed75 1 10485760 8388608 0 1343909537 1c329d\n"
    "s 79d9030f-8409-40b9-8b99-f90c966c244d 1 8589934592 0 2172649472 1344337550 62751b\n"
)


class FakeRunner:
    """Returns canned (returncode, stdout, stderr) results in call order and records every argv."""

    def __init__(self, *results: Tuple[int, str, str]):
        self.results = list(results)
        self.calls: List[List[str]] = []

    def __call__(self, command_parts):
        self.calls.append(list(command_parts))
        if not self.results:
            raise AssertionError(f"Unexpected command: {command_parts}")
        return self.results.pop(0)


@pytest.fixture
def config():
    return BackendConfig(tool_path="collie", default_address="localhost", default_port=7000, command_timeout=30)


@pytest.fixture
def pool():
    return Pool(name="sheep", hosts=[PoolHost(name="10.0.0.5", port=7001)])

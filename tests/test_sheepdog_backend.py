import subprocess
import sys
from pathlib import Path

import pytest

from models import Pool, Volume
from sheepdog_backend import SheepdogBackend
from storage_backend import StorageBackend, get_backend, registered_pool_types
from storage_errors import (
    SheepdogCommandError, SheepdogInvalidOptionError, SheepdogParsingError,
    SheepdogUnsupportedConfigError, StorageBackendError,
)
from conftest import NODE_INFO_OUTPUT, VDI_LIST_OUTPUT, FakeRunner

HOST_ARGS = ["-a", "10.0.0.5", "-p", "7001"]


def _stale_pool(pool):
    pool.capacity = 1000
    pool.allocation = 400
    old = Volume(name="old", capacity=100, allocation=50, target="old", key="sheep/old")
    pool.replace_volumes([old])
    return old


class TestRefreshPool:
    def test_success(self, config, pool):
        runner = FakeRunner((0, NODE_INFO_OUTPUT, ""), (0, VDI_LIST_OUTPUT, ""))
        SheepdogBackend(config, runner).refresh_pool(pool)

        assert runner.calls == [
            ["collie", "node", "info", "-r"] + HOST_ARGS,
            ["collie", "vdi", "list", "-r"] + HOST_ARGS,
        ]
        assert pool.capacity == 15245667872
        assert pool.allocation == 117571104
        assert pool.available == 15128096768
        assert [v.key for v in pool.volumes] == [
            "sheep/650f4363-dd7b-4aba-a954-7d6e1ab0ba51",
            "sheep/dd5089ac-0677-4463-8981-9b7f4c81ed75",
        ]

    def test_volumes_are_replaced_not_merged(self, config, pool):
        _stale_pool(pool)
        runner = FakeRunner((0, NODE_INFO_OUTPUT, ""), (0, VDI_LIST_OUTPUT, ""))
        SheepdogBackend(config, runner).refresh_pool(pool)
        assert "old" not in [v.name for v in pool.volumes]
        assert len(pool.volumes) == 2

    def test_node_info_failure_skips_vdi_list(self, config, pool):
        old = _stale_pool(pool)
        runner = FakeRunner((1, "", "failed to connect to 10.0.0.5:7001"))
        with pytest.raises(SheepdogCommandError) as excinfo:
            SheepdogBackend(config, runner).refresh_pool(pool)

        assert len(runner.calls) == 1
        assert excinfo.value.returncode == 1
        assert "failed to connect" in str(excinfo.value)
        assert (pool.capacity, pool.allocation, pool.volumes) == (1000, 400, [old])

    def test_node_info_parse_failure(self, config, pool):
        old = _stale_pool(pool)
        runner = FakeRunner((0, "0 1 2 0%\n", ""))
        with pytest.raises(SheepdogParsingError) as excinfo:
            SheepdogBackend(config, runner).refresh_pool(pool)
        assert excinfo.value.command_parts == ["collie", "node", "info", "-r"] + HOST_ARGS
        assert len(runner.calls) == 1
        assert pool.volumes == [old]

    def test_vdi_list_failure_leaves_pool_untouched(self, config, pool):
        old = _stale_pool(pool)
        runner = FakeRunner((0, NODE_INFO_OUTPUT, ""), (2, "", "boom"))
        with pytest.raises(SheepdogCommandError):
            SheepdogBackend(config, runner).refresh_pool(pool)
        assert (pool.capacity, pool.allocation, pool.volumes) == (1000, 400, [old])

    def test_vdi_list_parse_failure_leaves_pool_untouched(self, config, pool):
        old = _stale_pool(pool)
        bad_list = "= good 1 10 5 0 1343909537 1c329d\n= bad 1 10\n"
        runner = FakeRunner((0, NODE_INFO_OUTPUT, ""), (0, bad_list, ""))
        with pytest.raises(SheepdogParsingError):
            SheepdogBackend(config, runner).refresh_pool(pool)
        assert (pool.capacity, pool.allocation, pool.volumes) == (1000, 400, [old])

    def test_runner_os_error(self, config, pool):
        def runner(command_parts):
            raise FileNotFoundError(2, "No such file or directory", command_parts[0])

        with pytest.raises(SheepdogCommandError):
            SheepdogBackend(config, runner).refresh_pool(pool)

    def test_default_host_target(self, config):
        runner = FakeRunner((0, NODE_INFO_OUTPUT, ""), (0, "", ""))
        SheepdogBackend(config, runner).refresh_pool(Pool(name="local"))
        assert runner.calls[0][-4:] == ["-a", "localhost", "-p", "7000"]


class TestCreateVolume:
    def test_encrypted_volume_is_rejected(self, config, pool):
        runner = FakeRunner()
        vol = Volume(name="secret", capacity=1024, encryption="luks")
        with pytest.raises(SheepdogUnsupportedConfigError):
            SheepdogBackend(config, runner).create_volume(pool, vol)
        assert runner.calls == []

    def test_create_then_refresh(self, config, pool):
        runner = FakeRunner((0, "", ""), (0, "= vol1 1 1073741824 0 0 1336556634 7c2b25\n", ""))
        vol = Volume(name="vol1", capacity=1073741824)
        SheepdogBackend(config, runner).create_volume(pool, vol)

        assert runner.calls == [
            ["collie", "vdi", "create", "vol1", "1073741824"] + HOST_ARGS,
            ["collie", "vdi", "list", "vol1", "-r"] + HOST_ARGS,
        ]
        assert vol.allocation == 0
        assert vol.key == "sheep/vol1"
        assert vol.target == "vol1"

    def test_refresh_failure_is_tolerated(self, config, pool):
        runner = FakeRunner((0, "", ""), (1, "", "no such vdi"))
        vol = Volume(name="vol1", capacity=4096)
        SheepdogBackend(config, runner).create_volume(pool, vol)
        assert len(runner.calls) == 2
        assert vol.key == ""

    def test_create_failure_still_refreshes_and_raises(self, config, pool):
        runner = FakeRunner((1, "", "VDI exists already"), (0, "= vol1 1 4096 512 0 1336556634 7c2b25\n", ""))
        vol = Volume(name="vol1", capacity=4096)
        with pytest.raises(SheepdogCommandError) as excinfo:
            SheepdogBackend(config, runner).create_volume(pool, vol)
        assert excinfo.value.command_parts[:3] == ["collie", "vdi", "create"]
        assert len(runner.calls) == 2
        assert vol.allocation == 512


class TestRefreshVolume:
    def test_success(self, config, pool):
        output = "s test\\ name 1 10 0 0 1336556634 7c2b25\n= test\\ name 2 20 8 0 1336557216 7c2b27\n"
        runner = FakeRunner((0, output, ""))
        vol = Volume(name="test\\ name", kind="other")
        SheepdogBackend(config, runner).refresh_volume(pool, vol)

        assert runner.calls == [["collie", "vdi", "list", "test\\ name", "-r"] + HOST_ARGS]
        assert (vol.capacity, vol.allocation) == (20, 8)
        assert vol.kind == "network"
        assert vol.target == "test\\ name"
        assert vol.key == "sheep/test\\ name"

    def test_parse_failure_leaves_volume_untouched(self, config, pool):
        runner = FakeRunner((0, "s vol1 1 10 0 0 1336556634 7c2b25\n", ""))
        vol = Volume(name="vol1", capacity=99, allocation=9)
        with pytest.raises(SheepdogParsingError):
            SheepdogBackend(config, runner).refresh_volume(pool, vol)
        assert (vol.capacity, vol.allocation, vol.key) == (99, 9, "")


class TestDeleteAndResize:
    def test_delete(self, config, pool):
        runner = FakeRunner((0, "", ""))
        SheepdogBackend(config, runner).delete_volume(pool, Volume(name="vol1"))
        assert runner.calls == [["collie", "vdi", "delete", "vol1"] + HOST_ARGS]

    def test_delete_failure(self, config, pool):
        runner = FakeRunner((1, "", "No VDI found"))
        with pytest.raises(SheepdogCommandError):
            SheepdogBackend(config, runner).delete_volume(pool, Volume(name="vol1"))

    @pytest.mark.parametrize("error", [ValueError("embedded null byte"), OSError("exec format error")])
    def test_runner_exception_becomes_command_error(self, config, pool, error):
        def runner(command_parts):
            raise error

        with pytest.raises(SheepdogCommandError) as excinfo:
            SheepdogBackend(config, runner).delete_volume(pool, Volume(name="vol\x001"))
        assert excinfo.value.__cause__ is error

    def test_resize(self, config, pool):
        runner = FakeRunner((0, "", ""))
        SheepdogBackend(config, runner).resize_volume(pool, Volume(name="vol1"), 2147483648)
        assert runner.calls == [["collie", "vdi", "resize", "vol1", "2147483648"] + HOST_ARGS]

    @pytest.mark.parametrize("flags", [1, 2, 0x80])
    def test_delete_flags_rejected_before_command(self, config, pool, flags):
        runner = FakeRunner()
        with pytest.raises(SheepdogInvalidOptionError):
            SheepdogBackend(config, runner).delete_volume(pool, Volume(name="vol1"), flags=flags)
        assert runner.calls == []

    @pytest.mark.parametrize("flags", [1, 2, 0x80])
    def test_resize_flags_rejected_before_command(self, config, pool, flags):
        runner = FakeRunner()
        with pytest.raises(SheepdogInvalidOptionError):
            SheepdogBackend(config, runner).resize_volume(pool, Volume(name="vol1"), 1024, flags=flags)
        assert runner.calls == []


class TestRegistry:
    def test_sheepdog_is_registered(self, config):
        assert "sheepdog" in registered_pool_types()
        backend = get_backend("sheepdog", config=config, runner=FakeRunner())
        assert isinstance(backend, SheepdogBackend)
        assert isinstance(backend, StorageBackend)
        assert backend.config is config

    def test_unknown_pool_type(self):
        with pytest.raises(StorageBackendError):
            get_backend("rbd")

    def test_default_registration_without_importing_backend_module(self):
        # Fresh interpreter: only storage_backend is imported by the caller
        src_dir = Path(__file__).resolve().parent.parent / "src"
        code = (
            "import sys\n"
            "from storage_backend import get_backend\n"
            "backend = get_backend('sheepdog', runner=lambda argv: (0, '', ''))\n"
            "assert type(backend).__name__ == 'SheepdogBackend'\n"
            "assert 'sheepdog_backend' in sys.modules\n"
        )
        result = subprocess.run([sys.executable, "-c", code], cwd=src_dir,
                                capture_output=True, text=True, timeout=60)
        assert result.returncode == 0, result.stderr

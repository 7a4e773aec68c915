import json

import pytest

import main
from conftest import NODE_INFO_OUTPUT, VDI_LIST_OUTPUT, FakeRunner


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"collie_path": "collie"}))
    return str(path)


def test_pool_refresh_json(config_file, capsys):
    runner = FakeRunner((0, NODE_INFO_OUTPUT, ""), (0, VDI_LIST_OUTPUT, ""))
    rc = main.run(["--config", config_file, "--pool", "sheep", "--json", "pool-refresh"], runner=runner)
    assert rc == 0
    summary = json.loads(capsys.readouterr().out)
    assert summary["available"] == 15128096768
    assert len(summary["volumes"]) == 2
    assert runner.calls[0][-4:] == ["-a", "localhost", "-p", "7000"]


def test_host_and_port_flags(config_file):
    runner = FakeRunner((0, "", ""))
    rc = main.run(["--config", config_file, "--host", "10.1.1.1", "-p", "7002", "vol-delete", "vol1"], runner=runner)
    assert rc == 0
    assert runner.calls == [["collie", "vdi", "delete", "vol1", "-a", "10.1.1.1", "-p", "7002"]]


def test_create_with_suffixed_size(config_file, capsys):
    runner = FakeRunner((0, "", ""), (0, "= vol1 1 10737418240 0 0 1336556634 7c2b25\n", ""))
    rc = main.run(["--config", config_file, "vol-create", "vol1", "10G"], runner=runner)
    assert rc == 0
    assert runner.calls[0][4] == "10737418240"
    assert "sheepdog/vol1" in capsys.readouterr().out


def test_encrypted_create_fails(config_file, capsys):
    runner = FakeRunner()
    rc = main.run(["--config", config_file, "vol-create", "vol1", "1G", "--encryption", "luks"], runner=runner)
    assert rc == 1
    assert runner.calls == []
    assert "encrypted" in capsys.readouterr().err


def test_command_failure_exit_code(config_file):
    runner = FakeRunner((1, "", "failed to connect"))
    assert main.run(["--config", config_file, "vol-info", "vol1"], runner=runner) == 1


def test_bad_size_is_usage_error(config_file):
    with pytest.raises(SystemExit) as excinfo:
        main.run(["--config", config_file, "vol-resize", "vol1", "lots"], runner=FakeRunner())
    assert excinfo.value.code == 2

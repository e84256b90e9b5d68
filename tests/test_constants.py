import os

import pytest

from microceph import constants


@pytest.fixture
def snap_env(tmp_path, monkeypatch):
    data = tmp_path / "SNAP_DATA"
    common = tmp_path / "SNAP_COMMON"
    monkeypatch.setenv("SNAP_DATA", str(data))
    monkeypatch.setenv("SNAP_COMMON", str(common))
    monkeypatch.setenv("TEST_ROOT_PATH", str(tmp_path))
    return tmp_path, data, common


def test_paths_follow_environment(snap_env):
    root, data, common = snap_env
    paths = constants.get_path_const()
    assert paths.conf_path == os.path.join(str(data), "conf")
    assert paths.run_path == os.path.join(str(data), "run")
    assert paths.data_path == os.path.join(str(common), "data")
    assert paths.log_path == os.path.join(str(common), "logs")
    assert paths.root_fs == str(root)
    assert paths.proc_path == os.path.join(str(root), "proc")
    assert paths.ssl_files_path == str(common)


def test_paths_without_environment(monkeypatch):
    for name in ("SNAP_DATA", "SNAP_COMMON", "TEST_ROOT_PATH"):
        monkeypatch.delenv(name, raising=False)
    paths = constants.get_path_const()
    assert paths.conf_path == "conf"
    assert paths.root_fs == "/"
    assert paths.proc_path == "/proc"


def test_path_file_mode(snap_env):
    paths = constants.get_path_const()
    modes = constants.get_path_file_mode()
    assert modes[paths.conf_path] == constants.PERMISSION_WORLD_NO_ACCESS
    assert modes[paths.run_path] == constants.PERMISSION_ONLY_USER_ACCESS
    assert modes[paths.data_path] == constants.PERMISSION_ONLY_USER_ACCESS
    assert modes[paths.log_path] == constants.PERMISSION_ONLY_USER_ACCESS
    assert len(modes) == 4


def test_path_file_mode_values(snap_env):
    modes = constants.get_path_file_mode()
    assert sorted(modes.values()) == [0o700, 0o700, 0o700, 0o750]
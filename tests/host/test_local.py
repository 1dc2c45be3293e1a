"""Test the psutil-backed host."""

from unittest.mock import Mock, patch

import psutil
import pytest

from ama_mitigator.errors import HostError
from ama_mitigator.host.local import PsutilHost


def _proc(**info):
    proc = Mock()
    proc.info = info
    return proc


def _parent(name, exe):
    parent = Mock()
    parent.name.return_value = name
    parent.exe.return_value = exe
    return parent


class TestListProcesses:
    @patch("ama_mitigator.host.local.psutil.Process")
    @patch("ama_mitigator.host.local.psutil.process_iter")
    def test_observations_carry_parent(self, mock_iter, mock_process):
        mock_iter.return_value = [
            _proc(pid=200, name="MetricsExtension.Native.exe", exe="C:\\ama\\me.exe",
                  ppid=100, cmdline=["C:\\ama\\me.exe", "-c"]),
        ]
        mock_process.return_value = _parent("AMAExtHealthMonitor.exe", "C:\\ama\\bin\\hm.exe")

        [proc] = PsutilHost().list_processes()

        mock_process.assert_called_once_with(100)
        assert proc.pid == 200
        assert proc.cmdline == ["C:\\ama\\me.exe", "-c"]
        assert proc.parent_name == "AMAExtHealthMonitor.exe"
        assert proc.parent_exe == "C:\\ama\\bin\\hm.exe"

    @patch("ama_mitigator.host.local.psutil.Process")
    @patch("ama_mitigator.host.local.psutil.process_iter")
    def test_skips_processes_without_name(self, mock_iter, mock_process):
        mock_iter.return_value = [
            _proc(pid=1, name=None, exe=None, ppid=0, cmdline=None),
            _proc(pid=2, name="", exe=None, ppid=0, cmdline=None),
            _proc(pid=3, name="svchost.exe", exe=None, ppid=0, cmdline=None),
        ]

        processes = PsutilHost().list_processes()

        assert [p.pid for p in processes] == [3]
        assert processes[0].cmdline == []
        assert processes[0].has_parent is False
        mock_process.assert_not_called()

    @patch("ama_mitigator.host.local.psutil.Process")
    @patch("ama_mitigator.host.local.psutil.process_iter")
    def test_parent_gone(self, mock_iter, mock_process):
        mock_iter.return_value = [
            _proc(pid=200, name="MetricsExtension.Native.exe", exe=None, ppid=100, cmdline=[]),
        ]
        mock_process.side_effect = psutil.NoSuchProcess(100)

        [proc] = PsutilHost().list_processes()

        assert proc.parent_name is None
        assert proc.parent_exe is None
        assert proc.has_parent is False

    @patch("ama_mitigator.host.local.psutil.Process")
    @patch("ama_mitigator.host.local.psutil.process_iter")
    def test_parent_exe_denied(self, mock_iter, mock_process):
        mock_iter.return_value = [
            _proc(pid=200, name="MetricsExtension.Native.exe", exe=None, ppid=100, cmdline=[]),
        ]
        parent = _parent("AMAExtHealthMonitor.exe", None)
        parent.exe.side_effect = psutil.AccessDenied(100)
        mock_process.return_value = parent

        [proc] = PsutilHost().list_processes()

        assert proc.parent_name == "AMAExtHealthMonitor.exe"
        assert proc.parent_exe is None


class TestStopProcess:
    @patch("ama_mitigator.host.local.psutil.Process")
    def test_kills_process(self, mock_process):
        PsutilHost().stop_process(200)

        mock_process.assert_called_once_with(200)
        mock_process.return_value.kill.assert_called_once()

    @patch("ama_mitigator.host.local.psutil.Process")
    def test_already_exited_counts_as_stopped(self, mock_process):
        mock_process.return_value.kill.side_effect = psutil.NoSuchProcess(200)

        PsutilHost().stop_process(200)

    @patch("ama_mitigator.host.local.psutil.Process")
    def test_access_denied(self, mock_process):
        mock_process.return_value.kill.side_effect = psutil.AccessDenied(200)

        with pytest.raises(HostError):
            PsutilHost().stop_process(200)


class TestFilesystem:
    def test_list_subdirectories(self, tmp_path):
        (tmp_path / "1.40.0.0").mkdir()
        (tmp_path / "1.39.0.0").mkdir()
        (tmp_path / "readme.txt").write_text("x")

        assert PsutilHost().list_subdirectories(str(tmp_path)) == ["1.39.0.0", "1.40.0.0"]

    def test_missing_root(self, tmp_path):
        assert PsutilHost().list_subdirectories(str(tmp_path / "absent")) is None

    def test_exists_and_rename(self, tmp_path):
        source = tmp_path / "MetricsExtension.Native.exe"
        source.write_text("binary")
        renamed = str(source) + ".org"
        host = PsutilHost()

        host.rename(str(source), renamed)

        assert host.exists(renamed) is True
        assert host.exists(str(source)) is False

    def test_rename_missing_source(self, tmp_path):
        with pytest.raises(OSError):
            PsutilHost().rename(str(tmp_path / "a"), str(tmp_path / "b"))

    @patch("ama_mitigator.host.local.time.sleep")
    def test_settle(self, mock_sleep):
        host = PsutilHost()
        host.settle(0)
        mock_sleep.assert_not_called()
        host.settle(5.0)
        mock_sleep.assert_called_once_with(5.0)

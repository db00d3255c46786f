"""Tests for the ADB device wrapper."""

import os
import subprocess
import sys
from unittest.mock import MagicMock, patch

import pytest

from droidbackup.adb.bridge import DeviceBridge
from droidbackup.adb.device import (
    ADBDevice,
    ADBError,
    DeviceDisconnectedError,
    DeviceUnavailableError,
    list_devices,
    wait_for_device,
)
from droidbackup.adb.pull import FilePuller
from droidbackup.adb.shell import ShellCommand
from droidbackup.util.cancel import CancelToken


def completed(stdout: str = "") -> MagicMock:
    return MagicMock(stdout=stdout, returncode=0)


def failed(stderr: str) -> subprocess.CalledProcessError:
    return subprocess.CalledProcessError(1, ["adb"], output="", stderr=stderr)


class TestADBDevice:
    """Test device commands."""

    def test_device_satisfies_bridge(self):
        """The adb wrapper provides every operation the engine needs."""
        assert isinstance(ADBDevice("abc"), DeviceBridge)

    @patch("droidbackup.adb.device.subprocess.run")
    def test_commands_target_serial(self, mock_run):
        """A serial is passed with -s; without one adb picks the only phone."""
        mock_run.return_value = completed("device")

        ADBDevice("SER123").is_connected()
        ADBDevice().is_connected()

        assert mock_run.call_args_list[0].args[0] == ["adb", "-s", "SER123", "get-state"]
        assert mock_run.call_args_list[1].args[0] == ["adb", "get-state"]

    @patch("droidbackup.adb.device.subprocess.run")
    def test_is_connected(self, mock_run):
        """Connectivity is the get-state answer; errors mean not connected."""
        device = ADBDevice("abc")

        mock_run.return_value = completed("device\n")
        assert device.is_connected() is True

        mock_run.return_value = completed("unauthorized")
        assert device.is_connected() is False

        mock_run.side_effect = failed("error: no devices/emulators found")
        assert device.is_connected() is False

    @patch("droidbackup.adb.device.subprocess.run")
    def test_device_label(self, mock_run):
        """Spaces become underscores and the value is cached."""
        mock_run.return_value = completed("Pixel 7 Pro\r\n")
        device = ADBDevice("abc")

        assert device.device_label() == "Pixel_7_Pro"
        assert device.device_label() == "Pixel_7_Pro"
        assert mock_run.call_count == 1

    @patch("droidbackup.adb.device.subprocess.run")
    def test_device_label_fallback(self, mock_run):
        """An empty model gets the placeholder label."""
        mock_run.return_value = completed("")

        assert ADBDevice("abc").device_label() == "My_Phone"

    def test_device_label_error_fallback(self):
        """A getprop failure also gets the placeholder label."""
        device = ADBDevice("abc")

        with patch.object(ADBDevice, "get_property", side_effect=ADBError("boom")):
            assert device.device_label() == "My_Phone"

    @patch("droidbackup.adb.device.subprocess.run")
    def test_disconnect_is_distinguished(self, mock_run):
        """Lost-device stderr raises the disconnect error, other failures the base one."""
        device = ADBDevice("abc")

        mock_run.side_effect = failed("adb: device 'abc' not found")
        with pytest.raises(DeviceDisconnectedError):
            device._run_command(["pull", "/sdcard/a", "/tmp/a"])

        mock_run.side_effect = failed("adb: error: failed to stat remote object '/sdcard/a': No such file")
        with pytest.raises(ADBError) as exc_info:
            device._run_command(["pull", "/sdcard/a", "/tmp/a"])
        assert not isinstance(exc_info.value, DeviceDisconnectedError)

    def test_undecodable_listing(self):
        """Listing output that is not valid UTF-8 still parses into entries."""
        script = (
            "import sys; "
            "sys.stdout.buffer.write(b'3;1700000000;/sdcard/DCIM/caf\\xe9.jpg\\n"
            "2;1700000001;/sdcard/DCIM/b.jpg\\n')"
        )
        # the interpreter stands in for adb: argv is [python, "-c", script]
        device = ADBDevice(adb_path=sys.executable)

        with patch.object(ShellCommand, "build_listing_command", return_value=script), \
                patch.object(ShellCommand, "execute", lambda self, command, timeout=30: (
                    self.device._run_command(["-c", command], timeout=timeout))):
            entries = device.list_files(["/sdcard/DCIM"])

        assert [e.size for e in entries] == [3, 2]
        assert os.fsencode(entries[0].remote_path) == b"/sdcard/DCIM/caf\xe9.jpg"

    @patch("droidbackup.adb.device.subprocess.run")
    def test_output_decoding_keeps_raw_bytes(self, mock_run):
        """adb output is decoded so undecodable bytes survive the round trip."""
        mock_run.return_value = completed("device")

        ADBDevice("abc").is_connected()

        assert mock_run.call_args.kwargs["errors"] == "surrogateescape"

    @patch("droidbackup.adb.device.subprocess.run")
    def test_missing_adb(self, mock_run):
        """A missing binary is reported as an ADB error."""
        mock_run.side_effect = FileNotFoundError("adb")

        with pytest.raises(ADBError):
            ADBDevice("abc")._run_command(["get-state"])

    @patch("droidbackup.adb.device.subprocess.run")
    @patch("droidbackup.adb.device.check_adb_available", return_value=True)
    def test_list_devices(self, mock_available, mock_run):
        """Only devices in the 'device' state are returned."""
        mock_run.return_value = completed(
            "List of devices attached\nAAA\tdevice\nBBB\tunauthorized\nCCC\tdevice\n"
        )

        devices = list_devices()

        assert [d.serial for d in devices] == ["AAA", "CCC"]


class TestFilePuller:
    """Test single-file pulls."""

    def test_pull_success(self, tmp_path):
        """Parent folders are created and the file must exist afterwards."""
        device = MagicMock()
        local_path = tmp_path / "DCIM" / "Camera" / "a.jpg"
        device._run_command.side_effect = lambda cmd, timeout: local_path.write_bytes(b"abc")

        assert FilePuller(device).pull_file("/sdcard/DCIM/Camera/a.jpg", local_path, expected_size=3) is True
        device._run_command.assert_called_once()
        assert device._run_command.call_args.args[0] == ["pull", "/sdcard/DCIM/Camera/a.jpg", str(local_path)]

    def test_pull_failure(self, tmp_path):
        """An adb error is a plain failure."""
        device = MagicMock()
        device._run_command.side_effect = ADBError("remote object does not exist")

        assert FilePuller(device).pull_file("/sdcard/x", tmp_path / "x") is False

    def test_pull_without_output_file(self, tmp_path):
        """adb returning cleanly without writing the file is still a failure."""
        device = MagicMock()
        device._run_command.return_value = ""

        assert FilePuller(device).pull_file("/sdcard/x", tmp_path / "x") is False

    def test_pull_disconnect_propagates(self, tmp_path):
        """A lost device is raised so the caller can stop."""
        device = MagicMock()
        device._run_command.side_effect = DeviceDisconnectedError("device offline")

        with pytest.raises(DeviceDisconnectedError):
            FilePuller(device).pull_file("/sdcard/x", tmp_path / "x")

    def test_pull_local_folder_failure(self, tmp_path):
        """A parent that cannot be created fails without calling adb."""
        (tmp_path / "blocked").write_text("file")
        device = MagicMock()

        assert FilePuller(device).pull_file("/sdcard/x", tmp_path / "blocked" / "x") is False
        device._run_command.assert_not_called()


class TestWaitForDevice:
    """Test the polling wait."""

    def test_returns_once_connected(self):
        """Polls until the phone answers."""
        device = MagicMock()
        device.is_connected.side_effect = [False, False, True]
        attempts = []

        wait_for_device(device, interval=0.01, on_attempt=attempts.append)

        assert device.is_connected.call_count == 3
        assert attempts == [0, 1, 2]

    def test_timeout(self):
        """A bounded wait gives up with DeviceUnavailableError."""
        device = MagicMock()
        device.is_connected.return_value = False

        with pytest.raises(DeviceUnavailableError):
            wait_for_device(device, interval=0.01, timeout=0.05)

    def test_cancel(self):
        """An unbounded wait still ends when cancelled."""
        device = MagicMock()
        device.is_connected.return_value = False
        token = CancelToken()
        token.cancel()

        with pytest.raises(DeviceUnavailableError, match="Stopped waiting"):
            wait_for_device(device, interval=60, cancel_token=token)

        assert device.is_connected.call_count == 1

"""Tests for detached spawn, liveness probing and kill behavior."""

import errno
import os
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from forknet.errors import SpawnError
from forknet.supervisor import process


class ParseCommandTests(unittest.TestCase):
    def test_drops_empty_tokens(self) -> None:
        self.assertEqual(
            process.parse_command("anvil  -p 8545   -f http://rpc "),
            ["anvil", "-p", "8545", "-f", "http://rpc"],
        )

    def test_empty_command_rejected(self) -> None:
        with self.assertRaises(SpawnError):
            process.parse_command("   ")


class IsAliveTests(unittest.TestCase):
    """Probe errors always resolve to not-alive."""

    def test_current_process_is_alive(self) -> None:
        self.assertTrue(process.is_alive(os.getpid()))

    def test_non_positive_pid_is_not_alive(self) -> None:
        with mock.patch("forknet.supervisor.process.os.kill") as kill:
            self.assertFalse(process.is_alive(0))
            self.assertFalse(process.is_alive(-1))
            kill.assert_not_called()

    def test_missing_process(self) -> None:
        with mock.patch("forknet.supervisor.process.os.kill", side_effect=ProcessLookupError()):
            self.assertFalse(process.is_alive(4242))

    def test_permission_denied_is_not_alive(self) -> None:
        with mock.patch("forknet.supervisor.process.os.kill", side_effect=PermissionError()):
            self.assertFalse(process.is_alive(4242))

    def test_other_probe_error_is_logged(self) -> None:
        with mock.patch(
            "forknet.supervisor.process.os.kill",
            side_effect=OSError(errno.EINVAL, "invalid"),
        ):
            with self.assertLogs("forknet.supervisor.process", level="ERROR"):
                self.assertFalse(process.is_alive(4242))

    def test_windows_uses_handle_check_not_signal(self) -> None:
        with mock.patch("forknet.supervisor.process.sys.platform", "win32"), mock.patch(
            "forknet.supervisor.process.os.kill"
        ) as kill, mock.patch.object(process, "_win32_pid_exists", return_value=True) as check:
            self.assertTrue(process.is_alive(4242))
        kill.assert_not_called()
        check.assert_called_once_with(4242)


class TerminateTests(unittest.TestCase):
    def test_sends_kill_signal_once(self) -> None:
        with mock.patch("forknet.supervisor.process.os.kill") as kill:
            process.terminate(4242)
        kill.assert_called_once_with(4242, process.KILL_SIGNAL)

    def test_already_gone_is_ignored(self) -> None:
        with mock.patch("forknet.supervisor.process.os.kill", side_effect=ProcessLookupError()):
            process.terminate(4242)

    def test_terminate_if_alive_skips_dead_and_missing(self) -> None:
        with mock.patch.object(process, "is_alive", return_value=False), mock.patch.object(
            process, "terminate"
        ) as terminate:
            self.assertFalse(process.terminate_if_alive(4242))
            self.assertFalse(process.terminate_if_alive(None))
        terminate.assert_not_called()


class SpawnTests(unittest.TestCase):
    def test_spawn_detaches_and_appends_log(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            log_file = Path(tmpdir) / ".forks" / "ethereum.log"
            fake_process = mock.Mock(pid=31337)
            with mock.patch(
                "forknet.supervisor.process.subprocess.Popen", return_value=fake_process
            ) as popen:
                pid = process.spawn("anvil -p 8545 -f http://rpc", log_file)
            self.assertEqual(pid, 31337)
            self.assertTrue(log_file.exists())
            args, kwargs = popen.call_args
            self.assertEqual(args[0], ["anvil", "-p", "8545", "-f", "http://rpc"])
            self.assertEqual(kwargs["stdout"].mode, "a")
            if os.name != "nt":
                self.assertTrue(kwargs["start_new_session"])

    def test_launch_failure_is_spawn_error(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            with mock.patch(
                "forknet.supervisor.process.subprocess.Popen",
                side_effect=FileNotFoundError("no such binary"),
            ):
                with self.assertRaises(SpawnError):
                    process.spawn("missing-binary", Path(tmpdir) / "x.log")

    def test_unopenable_log_is_spawn_error(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            log_file = Path(tmpdir) / ".forks" / "base.log"
            log_file.mkdir(parents=True)
            with mock.patch("forknet.supervisor.process.subprocess.Popen") as popen:
                with self.assertRaises(SpawnError):
                    process.spawn("anvil -p 8545", log_file)
            popen.assert_not_called()

    def test_missing_pid_is_spawn_error(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            with mock.patch(
                "forknet.supervisor.process.subprocess.Popen",
                return_value=mock.Mock(pid=None),
            ):
                with self.assertRaises(SpawnError):
                    process.spawn("anvil", Path(tmpdir) / "x.log")


if __name__ == "__main__":
    unittest.main()

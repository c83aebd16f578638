"""Detached process launching, liveness probing and termination by pid."""

from __future__ import annotations

import logging
import os
import signal
import subprocess
import sys
from pathlib import Path

from forknet.errors import SpawnError

logger = logging.getLogger("forknet.supervisor.process")

KILL_SIGNAL = getattr(signal, "SIGKILL", signal.SIGTERM)


def parse_command(command_line: str) -> list[str]:
    """Split a command line on whitespace, dropping empty tokens."""
    args = [token for token in command_line.split() if token]
    if not args:
        raise SpawnError("empty command line")
    return args


def _detach_kwargs() -> dict:
    if sys.platform == "win32":
        return {
            "creationflags": subprocess.CREATE_NEW_PROCESS_GROUP | subprocess.DETACHED_PROCESS
        }
    return {"start_new_session": True}


def spawn(command_line: str, log_file: Path, cwd: Path | None = None) -> int:
    """Launch a detached process with output appended to log_file; return its pid.

    Returns as soon as the OS hands back a pid. The child is not waited on
    and may still be starting up when this returns.
    """
    args = parse_command(command_line)
    logger.info("Running command: %s", " ".join(args))
    try:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        output = open(log_file, "a")
    except OSError as exc:
        raise SpawnError(f"could not open log {log_file} for {command_line!r}: {exc}") from exc
    with output:
        try:
            process = subprocess.Popen(
                args,
                stdin=subprocess.DEVNULL,
                stdout=output,
                stderr=output,
                cwd=str(cwd) if cwd is not None else None,
                **_detach_kwargs(),
            )
        except OSError as exc:
            raise SpawnError(f"could not start {command_line!r}: {exc}") from exc
    pid = process.pid
    if not pid:
        raise SpawnError(f"no pid for {command_line!r}")
    logger.debug("Spawned pid %s for %s (log=%s)", pid, args[0], log_file)
    return pid


def _win32_pid_exists(pid: int) -> bool:
    import ctypes

    kernel32 = ctypes.windll.kernel32
    SYNCHRONIZE = 0x00100000
    handle = kernel32.OpenProcess(SYNCHRONIZE, 0, pid)
    if handle == 0:
        return False
    kernel32.CloseHandle(handle)
    return True


def is_alive(pid: int) -> bool:
    """Check whether pid exists in the process table and is ours to signal."""
    if pid <= 0:
        return False
    if sys.platform == "win32":
        # os.kill(pid, 0) sends CTRL_C_EVENT on Windows.
        return _win32_pid_exists(pid)
    try:
        os.kill(pid, 0)
    except ProcessLookupError:
        return False
    except PermissionError:
        return False
    except OSError as exc:
        logger.error("Error checking process with PID %s: %s", pid, exc)
        return False
    return True


def terminate(pid: int) -> None:
    """Send a kill signal to pid without waiting for it to exit."""
    logger.info("Killing pid %s", pid)
    try:
        os.kill(pid, KILL_SIGNAL)
    except ProcessLookupError:
        logger.debug("Process %s already gone", pid)
    except PermissionError as exc:
        logger.warning("Not permitted to kill pid %s: %s", pid, exc)


def terminate_if_alive(pid: int | None) -> bool:
    if not pid:
        return False
    if not is_alive(pid):
        return False
    terminate(pid)
    return True

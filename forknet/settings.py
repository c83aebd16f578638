"""Runtime configuration: state file locations and external commands."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

from dotenv import find_dotenv, load_dotenv

FORKS_FILE = "runningForks.json"
GLUE_CONFIG_FILE = "glueConfig.json"
GLUE_PID_FILE = "glue.pid"
LOG_DIR_NAME = ".forks"
DEFAULT_FORK_BIN = "anvil"
DEFAULT_GLUE_CMD = "forknet-glue"
DEFAULT_CHAIN = "ethereum"


def load_env(env_path: Path | None = None) -> None:
    """Load `.env` into the process environment without overriding set values.

    Without an explicit path the search starts in the working directory.
    """
    load_dotenv(dotenv_path=env_path or find_dotenv(usecwd=True), override=False)


@dataclass(frozen=True)
class Settings:
    """Resolved file locations and external commands for one invocation."""

    state_dir: Path
    fork_bin: str = DEFAULT_FORK_BIN
    glue_cmd: str = DEFAULT_GLUE_CMD

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "Settings":
        env = os.environ if environ is None else environ
        state_dir = Path(env.get("FORKNET_STATE_DIR") or Path.cwd())
        return cls(
            state_dir=state_dir,
            fork_bin=(env.get("FORKNET_FORK_BIN") or DEFAULT_FORK_BIN).strip(),
            glue_cmd=(env.get("FORKNET_GLUE_CMD") or DEFAULT_GLUE_CMD).strip(),
        )

    @property
    def forks_file(self) -> Path:
        return self.state_dir / FORKS_FILE

    @property
    def glue_config_file(self) -> Path:
        return self.state_dir / GLUE_CONFIG_FILE

    @property
    def glue_pid_file(self) -> Path:
        return self.state_dir / GLUE_PID_FILE

    @property
    def log_dir(self) -> Path:
        return self.state_dir / LOG_DIR_NAME

    def fork_log_file(self, chain: str) -> Path:
        return self.log_dir / f"{chain}.log"

    @property
    def glue_log_file(self) -> Path:
        return self.log_dir / "glue.log"

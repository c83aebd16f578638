"""Glue (RPC aggregator) configuration publishing and process lifecycle."""

from __future__ import annotations

import logging
from typing import Any, Iterable

from forknet.chains import chain_id_of
from forknet.settings import Settings
from forknet.supervisor import process
from forknet.supervisor.registry import ForkRecord, ForkRegistry
from forknet.supervisor.state import read_json_object, remove_file, write_json_atomic

logger = logging.getLogger("forknet.supervisor.glue")

LOCAL_RPC_HOST = "127.0.0.1"


def local_rpc_url(port: int) -> str:
    return f"http://{LOCAL_RPC_HOST}:{port}"


def build_glue_config(records: Iterable[ForkRecord]) -> dict[str, Any]:
    """Project fork records into the glue config document.

    Every alias is resolved before anything is returned, so an unknown
    alias fails the whole build rather than producing a partial config.
    """
    chains = [
        {"id": chain_id_of(record.chain), "rpc": local_rpc_url(record.port)}
        for record in records
    ]
    return {"chains": chains}


class GluePublisher:
    """Writes the glue config and starts/stops the singleton glue process."""

    def __init__(self, settings: Settings) -> None:
        self.settings = settings

    async def publish(self, registry: ForkRegistry) -> dict[str, Any]:
        """Regenerate glueConfig.json from the reconciled registry."""
        forks = await registry.load()
        config = build_glue_config(forks.values())
        write_json_atomic(self.settings.glue_config_file, config)
        logger.info(
            "Wrote glue config with %d chains to %s",
            len(config["chains"]),
            self.settings.glue_config_file,
        )
        return config

    def read_handle(self) -> int | None:
        payload = read_json_object(self.settings.glue_pid_file)
        if payload is None:
            return None
        try:
            return int(payload["pid"])
        except (KeyError, TypeError, ValueError):
            logger.warning("Ignoring malformed glue handle: %r", payload)
            return None

    def write_handle(self, pid: int) -> None:
        write_json_atomic(self.settings.glue_pid_file, {"pid": pid})

    def is_running(self) -> bool:
        pid = self.read_handle()
        return pid is not None and process.is_alive(pid)

    async def stop(self) -> bool:
        """Kill the glue if its recorded pid is alive and drop the handle."""
        pid = self.read_handle()
        stopped = process.terminate_if_alive(pid)
        if stopped:
            logger.info("Stopped glue (pid %s)", pid)
        elif pid is not None:
            logger.info("Glue pid %s not running", pid)
        remove_file(self.settings.glue_pid_file)
        return stopped

    async def restart(self) -> int:
        """Stop any running glue and start a fresh one; does not wait for readiness."""
        await self.stop()
        pid = process.spawn(
            self.settings.glue_cmd,
            self.settings.glue_log_file,
            cwd=self.settings.state_dir,
        )
        self.write_handle(pid)
        logger.info("Started glue (pid %s)", pid)
        return pid

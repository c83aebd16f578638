"""Fork lifecycle operations dispatched from the CLI."""

from __future__ import annotations

import logging

from forknet.chains import chain_id_of, rpc_of
from forknet.errors import ForkAlreadyRunningError, SpawnError
from forknet.settings import DEFAULT_CHAIN, Settings
from forknet.supervisor import process
from forknet.supervisor.glue import GluePublisher
from forknet.supervisor.ports import next_free_port
from forknet.supervisor.registry import ForkRecord, ForkRegistry

logger = logging.getLogger("forknet.supervisor.forks")


def parse_chain_list(chains: str) -> list[str]:
    """Split a comma-separated alias list, dropping blanks and repeats."""
    parsed: list[str] = []
    for raw in chains.split(","):
        chain = raw.strip()
        if chain and chain not in parsed:
            parsed.append(chain)
    return parsed


class ForkManager:
    """Coordinates the fork registry, process supervisor and glue publisher."""

    def __init__(
        self,
        settings: Settings,
        registry: ForkRegistry | None = None,
        glue: GluePublisher | None = None,
    ) -> None:
        self.settings = settings
        self.registry = registry or ForkRegistry(settings.forks_file)
        self.glue = glue or GluePublisher(settings)

    def fork_command(self, port: int, rpc: str, extra_args: str = "") -> str:
        command = f"{self.settings.fork_bin} -p {port} -f {rpc}"
        if extra_args.strip():
            command = f"{command} {extra_args.strip()}"
        return command

    def _resolve_chain(self, chain: str) -> str:
        """Validate the alias and return its upstream RPC; raises ConfigError."""
        chain_id_of(chain)
        return rpc_of(chain)

    def _check_not_running(self, chain: str) -> None:
        if self.registry.get(chain) is not None:
            raise ForkAlreadyRunningError(chain)

    def _spawn_fork(self, chain: str, port: int | None, rpc: str, extra_args: str) -> ForkRecord:
        free_port = next_free_port(port, self.registry.ports_in_use())
        pid = process.spawn(
            self.fork_command(free_port, rpc, extra_args),
            self.settings.fork_log_file(chain),
            cwd=self.settings.state_dir,
        )
        record = ForkRecord(chain=chain, port=free_port, pid=pid)
        self.registry.upsert(chain, record)
        logger.info("Started new fork %s on port %s (pid %s)", chain, free_port, pid)
        return record

    async def _publish_and_persist(self) -> None:
        # Persist even when the glue step fails so spawned forks stay tracked.
        try:
            await self.glue.publish(self.registry)
            await self.glue.restart()
        finally:
            await self.registry.persist()

    async def start_fork(
        self,
        chain: str = DEFAULT_CHAIN,
        port: int | None = None,
        extra_args: str = "",
    ) -> ForkRecord:
        """Start one fork; a live fork for the same chain is a user error."""
        rpc = self._resolve_chain(chain)
        await self.registry.load()
        self._check_not_running(chain)
        record = self._spawn_fork(chain, port, rpc, extra_args)
        await self._publish_and_persist()
        return record

    async def start_forks(self, chains: list[str]) -> list[ForkRecord]:
        """Start several forks, validating every alias before spawning any."""
        if not chains:
            return []
        await self.registry.load()
        plan: list[tuple[str, str]] = []
        for chain in chains:
            rpc = self._resolve_chain(chain)
            self._check_not_running(chain)
            plan.append((chain, rpc))

        started: list[ForkRecord] = []
        try:
            for chain, rpc in plan:
                started.append(self._spawn_fork(chain, None, rpc, ""))
        except SpawnError:
            if started:
                await self.registry.persist()
            raise
        await self._publish_and_persist()
        return started

    async def list_forks(self) -> list[ForkRecord]:
        forks = await self.registry.load()
        return list(forks.values())

    async def stop_fork(self, chain: str) -> ForkRecord | None:
        """Kill a fork and drop it from the registry; returns None if unknown.

        The record is removed right after the kill signal is sent, without
        waiting to confirm the process exited.
        """
        await self.registry.load()
        record = self.registry.get(chain)
        if record is None:
            logger.info("no pid found: %s", chain)
            return None
        process.terminate(record.pid)
        self.registry.remove(chain)
        try:
            await self.glue.publish(self.registry)
            if self.glue.is_running():
                await self.glue.restart()
        finally:
            await self.registry.persist()
        return record

    async def stop_all_forks(self) -> list[ForkRecord]:
        forks = await self.registry.load()
        stopped: list[ForkRecord] = []
        for chain, record in forks.items():
            process.terminate(record.pid)
            self.registry.remove(chain)
            stopped.append(record)
        await self.glue.stop()
        await self.registry.persist()
        return stopped

    async def start_glue(self) -> int:
        await self.registry.load()
        try:
            await self.glue.publish(self.registry)
            pid = await self.glue.restart()
        finally:
            await self.registry.persist()
        return pid

    async def stop_glue(self) -> bool:
        return await self.glue.stop()

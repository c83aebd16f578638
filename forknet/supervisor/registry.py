"""Persisted table of running forks, reconciled against live processes."""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Callable

from forknet.supervisor import process
from forknet.supervisor.state import read_json_object, write_json_atomic

logger = logging.getLogger("forknet.supervisor.registry")


@dataclass(frozen=True)
class ForkRecord:
    """One running fork process."""

    chain: str
    port: int
    pid: int

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, chain: str, raw: Any) -> "ForkRecord | None":
        """Parse a persisted entry; returns None when required fields are unusable."""
        if not isinstance(raw, dict):
            return None
        try:
            port = int(raw["port"])
            pid = int(raw["pid"])
        except (KeyError, TypeError, ValueError):
            return None
        return cls(chain=chain, port=port, pid=pid)


class ForkRegistry:
    """In-memory fork table backed by one JSON file.

    The file is read once per instance; every load() re-checks each pid so
    callers always see forks that are actually running. There is no file
    locking, so two concurrent invocations race and the last persist wins.
    """

    def __init__(
        self,
        path: Path,
        *,
        is_alive: Callable[[int], bool] | None = None,
    ) -> None:
        self.path = path
        self._is_alive = is_alive
        self._forks: dict[str, ForkRecord] = {}
        self._hydrated = False

    def _alive(self, pid: int) -> bool:
        probe = self._is_alive or process.is_alive
        return probe(pid)

    def _hydrate(self) -> None:
        raw = read_json_object(self.path) or {}
        for chain, entry in raw.items():
            if chain in self._forks:
                continue
            record = ForkRecord.from_dict(str(chain), entry)
            if record is None:
                logger.warning("Dropping malformed fork entry for %s: %r", chain, entry)
                continue
            self._forks[record.chain] = record
        self._hydrated = True
        logger.debug("Loaded %d fork entries from %s", len(self._forks), self.path)

    def _reconcile(self) -> None:
        for chain, record in list(self._forks.items()):
            if not self._alive(record.pid):
                logger.warning("fork %s does not exist, removing.", chain)
                del self._forks[chain]

    async def load(self) -> dict[str, ForkRecord]:
        """Return the reconciled fork table, reading the backing file on first use."""
        if not self._hydrated:
            self._hydrate()
        self._reconcile()
        return dict(self._forks)

    def get(self, chain: str) -> ForkRecord | None:
        return self._forks.get(chain)

    def upsert(self, chain: str, record: ForkRecord) -> None:
        self._forks[chain] = record

    def remove(self, chain: str) -> ForkRecord | None:
        return self._forks.pop(chain, None)

    def ports_in_use(self) -> set[int]:
        return {record.port for record in self._forks.values()}

    async def persist(self) -> None:
        """Reconcile, then overwrite the backing file with the full table."""
        await self.load()
        payload = {chain: record.to_dict() for chain, record in self._forks.items()}
        write_json_atomic(self.path, payload)
        logger.debug("Persisted %d fork entries to %s", len(payload), self.path)

"""Local port allocation for fork processes."""

from __future__ import annotations

from typing import AbstractSet

DEFAULT_FORK_PORT = 8545


def next_free_port(requested: int | None, in_use: AbstractSet[int]) -> int:
    """Return the lowest port at or above requested that is not in use.

    There is no upper bound; callers are expected to run a handful of forks.
    """
    port = DEFAULT_FORK_PORT if requested is None else int(requested)
    while port in in_use:
        port += 1
    return port

"""Process-wide distributed environment settings."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass
class DistEnv:
    """World size, rank and communicator handles of this process."""

    world_size: int = 0
    rank: int = 0
    comms: Any = None


_env = DistEnv()


def dist_init(world_size: int, rank: int, comms: Any) -> None:
    """Initialise the distributed environment; it may be initialised only once."""
    global _env
    if _env.world_size > 0:
        raise RuntimeError("distributed env already initialized")
    _env = DistEnv(world_size, rank, comms)


def get_world_size() -> int:
    return _env.world_size


def get_rank() -> int:
    return _env.rank


def get_comms() -> Any:
    """Communicator handles given to dist_init."""
    if _env.comms is None:
        raise RuntimeError("distributed env has no communicators")
    return _env.comms


def dist_reset() -> None:
    """Return the distributed environment to its uninitialised state."""
    global _env
    _env = DistEnv()
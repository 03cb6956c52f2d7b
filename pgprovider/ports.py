"""Local tunnel port selection for jump-host forwarding."""

from __future__ import annotations

import random
import time

MIN_TUNNEL_PORT = 1024
MAX_TUNNEL_PORT = 65535


class TunnelPortAllocator:
    """Derives a stable pseudo-random local port per host/port pair.

    The allocator is seeded once; every derivation mixes that seed with the
    target address, so the same pair maps to the same port for the lifetime
    of the allocator. Already-bound ports are not detected.
    """

    def __init__(self, seed: int | str | None = None) -> None:
        self._seed = time.time_ns() if seed is None else seed

    @property
    def seed(self) -> int | str:
        return self._seed

    def port_for(self, host: str, port: int) -> int:
        rng = random.Random(f"{self._seed}:{host}{port}")
        return rng.randint(MIN_TUNNEL_PORT, MAX_TUNNEL_PORT)


# Seeded at import so each process gets its own mapping.
DEFAULT_PORT_ALLOCATOR = TunnelPortAllocator()


__all__ = [
    "DEFAULT_PORT_ALLOCATOR",
    "MAX_TUNNEL_PORT",
    "MIN_TUNNEL_PORT",
    "TunnelPortAllocator",
]

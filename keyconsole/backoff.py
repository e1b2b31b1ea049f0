from __future__ import annotations

from dataclasses import dataclass

DEFAULT_FLOOR_MS = 1000
DEFAULT_CEILING_MS = 10000
DEFAULT_GROWTH_FACTOR = 1.5


@dataclass(frozen=True)
class BackoffPolicy:
    """Bounded multiplicative backoff without jitter.

    d0 = floor, dn = min(d(n-1) * growth_factor, ceiling).
    """

    floor_ms: float = DEFAULT_FLOOR_MS
    ceiling_ms: float = DEFAULT_CEILING_MS
    growth_factor: float = DEFAULT_GROWTH_FACTOR

    def __post_init__(self) -> None:
        if self.floor_ms <= 0:
            raise ValueError("floor_ms must be positive")
        if self.ceiling_ms < self.floor_ms:
            raise ValueError("ceiling_ms must be >= floor_ms")
        if self.growth_factor < 1.0:
            raise ValueError("growth_factor must be >= 1.0")

    @classmethod
    def from_config(cls, config) -> BackoffPolicy:
        return cls(
            floor_ms=config.poll_floor_ms,
            ceiling_ms=config.poll_ceiling_ms,
            growth_factor=config.poll_growth_factor,
        )

    def initial(self) -> float:
        return self.floor_ms

    def next(self, previous_ms: float) -> float:
        return min(previous_ms * self.growth_factor, self.ceiling_ms)

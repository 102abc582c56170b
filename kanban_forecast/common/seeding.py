from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np


@dataclass
class NumpyRandomIndexSource:
    """Random index source backed by a numpy Generator.

    Not thread-safe; give each concurrent trial its own instance.
    """

    rng: np.random.Generator = field(default_factory=np.random.default_rng)

    @classmethod
    def from_seed(cls, seed: int | None) -> "NumpyRandomIndexSource":
        return cls(rng=np.random.default_rng(seed))

    def random_index(self, count: int) -> int:
        if count < 1:
            raise ValueError(f"count must be at least 1, got {count}")
        return int(self.rng.integers(0, count))

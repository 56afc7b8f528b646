"""Explicit RNG handle shared by every random draw of a run."""

from __future__ import annotations

import random
import secrets
from dataclasses import dataclass, field


@dataclass
class DeterministicRNG:
    """Owns the run's random stream without touching global random state.

    When ``seed`` is ``None`` a seed is drawn once from the OS entropy source
    and kept, so any run can be replayed from its recorded seed.
    """

    seed: int | None = None
    python_rng: random.Random = field(init=False, repr=False)

    def __post_init__(self) -> None:
        if self.seed is None:
            self.seed = secrets.randbits(32)
        self.seed = int(self.seed)
        self.python_rng = random.Random(self.seed)

    def reseed(self, seed: int) -> None:
        """Restart the stream from ``seed``."""
        self.seed = int(seed)
        self.python_rng = random.Random(self.seed)

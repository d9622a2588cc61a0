from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

import numpy as np

RngType = Literal["pcg64", "mt19937"]

_BIT_GENERATORS = {
    "pcg64": np.random.PCG64,
    "mt19937": np.random.MT19937,
}


@dataclass(frozen=True, slots=True)
class RandomConfig:
    seed: int | None = 0
    rng_type: RngType = "pcg64"

    def __post_init__(self) -> None:
        if self.rng_type not in _BIT_GENERATORS:
            raise ValueError(
                f"Unknown rng_type '{self.rng_type}'. Available: {', '.join(sorted(_BIT_GENERATORS))}"
            )


@dataclass(frozen=True, slots=True)
class MCConfig:
    """Monte Carlo settings for path-based pricing.

    ``n_steps`` is the number of uniform time steps per path. The constant
    coefficient dynamics are integrated exactly in log space by the Euler
    scheme, so a single step suffices for terminal payoffs; more steps are
    only needed when quotes may be bumped during the run.
    """

    n_paths: int = 100_000
    n_steps: int = 1
    antithetic: bool = False
    random: RandomConfig = field(default_factory=RandomConfig)

    def __post_init__(self) -> None:
        if self.n_paths <= 0:
            raise ValueError("n_paths must be > 0")
        if self.n_steps <= 0:
            raise ValueError("n_steps must be > 0")
        if self.antithetic and self.n_paths % 2 != 0:
            raise ValueError("antithetic=True requires an even n_paths")


def make_rng(cfg: RandomConfig | None = None) -> np.random.Generator:
    """Build a numpy Generator from a :class:`RandomConfig`."""
    if cfg is None:
        cfg = RandomConfig()
    bit_generator = _BIT_GENERATORS[cfg.rng_type](cfg.seed)
    return np.random.Generator(bit_generator)

from __future__ import annotations

import logging
from dataclasses import dataclass, field

import numpy as np

from ..typing import FloatArray
from .stochastic_processes import StochasticProcess1D

__all__ = ["TimeGrid", "PathGenerator"]

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True, eq=False)
class TimeGrid:
    """Strictly increasing simulation times starting at 0.

    Parameters
    ----------
    times : array_like
        Grid points ``t_0 = 0 < t_1 < ... < t_n``.
    """

    times: FloatArray

    def __post_init__(self) -> None:
        t = np.asarray(self.times, dtype=np.float64)
        if t.ndim != 1 or t.size < 2:
            raise ValueError("times must be 1D with at least two points")
        if not np.all(np.isfinite(t)):
            raise ValueError("times must be finite")
        if t[0] != 0.0:
            raise ValueError("times must start at 0")
        if np.any(np.diff(t) <= 0.0):
            raise ValueError("times must be strictly increasing")
        t.setflags(write=False)
        object.__setattr__(self, "times", t)

    @classmethod
    def uniform(cls, T: float, n_steps: int) -> TimeGrid:
        if T <= 0.0:
            raise ValueError("T must be positive")
        if n_steps <= 0:
            raise ValueError("n_steps must be positive")
        return cls(np.linspace(0.0, float(T), int(n_steps) + 1))

    @property
    def n_steps(self) -> int:
        return int(self.times.size - 1)

    @property
    def T(self) -> float:
        return float(self.times[-1])

    @property
    def dt(self) -> FloatArray:
        return np.diff(self.times)


@dataclass(slots=True)
class PathGenerator:
    """Generate paths of a 1D process on a time grid.

    Each call to :meth:`next` starts every path at ``process.x0()`` and
    advances all paths together with ``process.evolve(t_i, x_i, dt_i, z_i)``,
    one step at a time in increasing time order. The process is queried at
    every step, so quotes bumped while a simulation runs are picked up from
    the following step on.

    Parameters
    ----------
    process
        The process to simulate.
    grid
        Simulation times.
    rng
        NumPy random number generator. If None, a new default_rng() is created.
    antithetic
        If True, pair each normal draw ``z`` with ``-z`` (paths ``i`` and
        ``i + n_paths/2``).
    """

    process: StochasticProcess1D
    grid: TimeGrid
    rng: np.random.Generator = field(default_factory=np.random.default_rng, repr=False)
    antithetic: bool = False

    def draws(self, n_paths: int) -> FloatArray:
        """Standard normal draws of shape ``(n_paths, n_steps)``."""
        n_paths = int(n_paths)
        if n_paths <= 0:
            raise ValueError("n_paths must be positive")
        n_steps = self.grid.n_steps
        if not self.antithetic:
            return self.rng.standard_normal((n_paths, n_steps))
        if n_paths % 2 != 0:
            raise ValueError("antithetic=True requires an even n_paths (paired samples).")
        Z = self.rng.standard_normal((n_paths // 2, n_steps))
        return np.concatenate([Z, -Z], axis=0)

    def next(self, n_paths: int) -> FloatArray:
        """Simulate ``n_paths`` paths.

        Returns
        -------
        ndarray, shape (n_paths, n_steps + 1)
            Column ``i`` holds the levels at ``grid.times[i]``.
        """
        Z = self.draws(n_paths)
        return self.paths_from_draws(Z)

    def paths_from_draws(self, Z: FloatArray) -> FloatArray:
        """Build paths from given normal draws (shape ``(n_paths, n_steps)``)."""
        Z = np.asarray(Z, dtype=np.float64)
        if Z.ndim != 2 or Z.shape[1] != self.grid.n_steps:
            raise ValueError(
                f"draws must have shape (n_paths, {self.grid.n_steps}) got {Z.shape}"
            )
        n_paths = Z.shape[0]
        times = self.grid.times
        dts = self.grid.dt

        paths = np.empty((n_paths, times.size), dtype=np.float64)
        paths[:, 0] = self.process.x0()
        for i, (t, dt) in enumerate(zip(times[:-1], dts)):
            paths[:, i + 1] = self.process.evolve(float(t), paths[:, i], float(dt), Z[:, i])

        LOGGER.debug(
            "generated %d paths over %d steps (T=%g)", n_paths, self.grid.n_steps, self.grid.T
        )
        return paths

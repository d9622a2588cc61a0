"""One-dimensional stochastic processes and their discretizations.

A 1D process follows

    dx_t = mu(t, x_t) dt + sigma(t, x_t) dW_t

and exposes four primitives: the initial value ``x0()``, the drift
``mu(t, x)``, the diffusion ``sigma(t, x)`` and ``apply(x, dx)``, which
combines a level with an increment. Everything a path generator needs
(``evolve``, ``expectation``, ``std_deviation``, ``variance``) is derived from
those primitives by :class:`StochasticProcess1D` together with a pluggable
single-step :class:`Discretization`.

:class:`ConstantBlackScholesProcess` specialises this to

    d ln S_t = (r - q - sigma^2 / 2) dt + sigma dW_t

with ``r``, ``q`` and ``sigma`` constant in time and state but read through
:class:`~constant_bs.market.quotes.Handle` objects, so bumping a quote is
seen by the very next call.
"""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

import numpy as np

from ..market.quotes import Handle, Quote
from ..typing import Level

__all__ = [
    "Discretization",
    "EulerDiscretization",
    "StochasticProcess1D",
    "ConstantBlackScholesProcess",
]


def _as_level(x):
    """Collapse 0-d numpy results to a plain float; keep arrays as arrays."""
    if np.ndim(x) == 0:
        return float(x)
    return x


@runtime_checkable
class Discretization(Protocol):
    """Single-step integration scheme for a :class:`StochasticProcess1D`.

    ``drift``/``diffusion``/``variance`` describe the step over ``dt``
    starting at ``(t0, x0)``; ``increment`` turns a standard normal draw
    ``dw`` into the increment handed to :meth:`StochasticProcess1D.apply`.
    """

    def drift(
        self, process: StochasticProcess1D, t0: float, x0: Level, dt: float
    ) -> Level:  # pragma: no cover
        ...

    def diffusion(
        self, process: StochasticProcess1D, t0: float, x0: Level, dt: float
    ) -> Level:  # pragma: no cover
        ...

    def variance(
        self, process: StochasticProcess1D, t0: float, x0: Level, dt: float
    ) -> Level:  # pragma: no cover
        ...

    def increment(
        self,
        process: StochasticProcess1D,
        t0: float,
        x0: Level,
        dt: float,
        dw: Level,
    ) -> Level:  # pragma: no cover
        ...


@dataclass(frozen=True, slots=True)
class EulerDiscretization:
    """Explicit Euler-Maruyama scheme.

    increment = mu(t0, x0) * dt + sigma(t0, x0) * sqrt(dt) * dw
    """

    @property
    def name(self) -> str:
        return "euler"

    def drift(self, process, t0, x0, dt):
        return process.drift(t0, x0) * dt

    def diffusion(self, process, t0, x0, dt):
        return process.diffusion(t0, x0) * math.sqrt(dt)

    def variance(self, process, t0, x0, dt):
        sigma = process.diffusion(t0, x0)
        return sigma * sigma * dt

    def increment(self, process, t0, x0, dt, dw):
        return self.drift(process, t0, x0, dt) + self.diffusion(
            process, t0, x0, dt
        ) * np.asarray(dw, dtype=np.float64)


class StochasticProcess1D(ABC):
    """Base class for 1D processes.

    Subclasses implement :meth:`x0`, :meth:`drift` and :meth:`diffusion`, and
    override :meth:`apply` when the state is not combined additively with its
    increment. The remaining methods are generic and delegate the
    single-step numerics to :attr:`discretization`.

    ``x0`` and ``dw`` may be numpy arrays (one entry per path), in which case
    the derived methods return arrays of the same shape.
    """

    def __init__(self, discretization: Discretization | None = None) -> None:
        if discretization is None:
            discretization = EulerDiscretization()
        elif not isinstance(discretization, Discretization):
            raise TypeError(
                "discretization must provide drift, diffusion, variance and increment"
            )
        self._discretization = discretization

    @property
    def discretization(self) -> Discretization:
        return self._discretization

    # ---- primitives
    @abstractmethod
    def x0(self) -> float: ...

    @abstractmethod
    def drift(self, t: float, x: Level) -> float: ...

    @abstractmethod
    def diffusion(self, t: float, x: Level) -> float: ...

    def apply(self, x0: Level, dx: Level) -> Level:
        return _as_level(np.add(x0, dx))

    # ---- derived
    def expectation(self, t0: float, x0: Level, dt: float) -> Level:
        """E[x_{t0+dt} | x_{t0} = x0] as given by the discretization."""
        return self.apply(x0, self._discretization.drift(self, t0, x0, dt))

    def std_deviation(self, t0: float, x0: Level, dt: float) -> Level:
        return _as_level(self._discretization.diffusion(self, t0, x0, dt))

    def variance(self, t0: float, x0: Level, dt: float) -> Level:
        return _as_level(self._discretization.variance(self, t0, x0, dt))

    def evolve(self, t0: float, x0: Level, dt: float, dw: Level) -> Level:
        """Level at ``t0 + dt`` given the level ``x0`` at ``t0`` and a N(0,1) draw ``dw``."""
        return self.apply(x0, self._discretization.increment(self, t0, x0, dt, dw))


class ConstantBlackScholesProcess(StochasticProcess1D):
    """Black-Scholes process with constant rate, dividend yield and volatility.

    The process tracks ``ln S`` internally and exposes ``S`` itself:

        d ln S_t = (r - q - sigma^2 / 2) dt + sigma dW_t

    Parameters
    ----------
    x0 : Handle | Quote | float
        Initial level ``S_0``.
    dividend_yield : Handle | Quote | float
        Continuously-compounded dividend yield ``q``.
    risk_free_rate : Handle | Quote | float
        Continuously-compounded risk-free rate ``r``.
    volatility : Handle | Quote | float
        Black volatility ``sigma``.
    discretization : Discretization, optional
        Single-step scheme; defaults to :class:`EulerDiscretization`.

    Notes
    -----
    - Handles are stored as given (shared, not copied by value); quotes and
      plain numbers are wrapped in a fresh handle.
    - Every primitive reads its handles on each call. Nothing is cached, so
      a quote bumped between two steps of a path affects the second step.
    - No sign checks: a negative volatility or non-positive spot propagates
      into the results unchanged.
    - Reading through an unbound handle raises
      :class:`~constant_bs.exceptions.UnboundParameterError`.
    """

    def __init__(
        self,
        x0: Handle | Quote | float,
        dividend_yield: Handle | Quote | float,
        risk_free_rate: Handle | Quote | float,
        volatility: Handle | Quote | float,
        discretization: Discretization | None = None,
    ) -> None:
        super().__init__(discretization)
        self._x0 = _as_handle(x0, "x0")
        self._dividend_yield = _as_handle(dividend_yield, "dividend_yield")
        self._risk_free_rate = _as_handle(risk_free_rate, "risk_free_rate")
        self._volatility = _as_handle(volatility, "volatility")

    # Handles are exposed read-only; relink through the handle itself.
    @property
    def initial_level(self) -> Handle:
        return self._x0

    @property
    def dividend_yield(self) -> Handle:
        return self._dividend_yield

    @property
    def risk_free_rate(self) -> Handle:
        return self._risk_free_rate

    @property
    def volatility(self) -> Handle:
        return self._volatility

    def x0(self) -> float:
        return self._x0.read()

    def drift(self, t: float, x: Level) -> float:
        # t and x are unused: the coefficients are constant.
        sigma = self._volatility.read()
        return (
            self._risk_free_rate.read()
            - self._dividend_yield.read()
            - 0.5 * sigma * sigma
        )

    def diffusion(self, t: float, x: Level) -> float:
        # t and x are unused: the coefficients are constant.
        return self._volatility.read()

    def apply(self, x0: Level, dx: Level) -> Level:
        # dx is a log-space increment
        return _as_level(np.multiply(x0, np.exp(dx)))

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(x0={self._x0!r}, dividend_yield={self._dividend_yield!r}, "
            f"risk_free_rate={self._risk_free_rate!r}, volatility={self._volatility!r}, "
            f"discretization={self.discretization!r})"
        )


def _as_handle(source: Handle | Quote | float, name: str) -> Handle:
    if isinstance(source, Handle):
        return source
    return Handle(source, name=name)

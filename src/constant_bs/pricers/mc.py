from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field

import numpy as np
from numpy.typing import NDArray

from ..config import MCConfig, make_rng
from ..models.path_generator import PathGenerator, TimeGrid
from ..models.stochastic_processes import ConstantBlackScholesProcess
from ..types import OptionSpec
from ..vanilla import make_vanilla_payoff

LOGGER = logging.getLogger(__name__)


def _apply_control_variate(X: np.ndarray, Y: np.ndarray, EY: float) -> np.ndarray:
    # Guard against degenerate controls
    var_y = float(np.var(Y, ddof=1)) if Y.size > 1 else 0.0
    if var_y <= 0.0:
        return X

    cov = float(np.cov(X, Y, ddof=1)[0, 1])
    b = cov / var_y
    return X - b * (Y - float(EY))


@dataclass(frozen=True, slots=True)
class ControlVariate:
    """
    Control variate specification for variance reduction.

    Attributes
    ----------
    values
        Function mapping terminal prices ``ST`` (shape ``(n_paths,)``) to control
        variate samples ``Y(ST)`` (same shape).
    mean
        The known expectation of the control variate under the pricing measure,
        i.e. ``E[Y]``.
    """

    values: Callable[[NDArray[np.float64]], NDArray[np.float64]]
    mean: float


@dataclass(frozen=True, slots=True)
class McProcessModel:
    """
    Path-based Monte Carlo pricer driven by a :class:`ConstantBlackScholesProcess`.

    Terminal prices come from a :class:`PathGenerator` stepping the process
    over ``grid``; payoffs are discounted with ``exp(-r * T)`` where ``r`` is
    read from the process when :meth:`price_european` runs.

    Parameters
    ----------
    process
        The underlying process. Its quotes must be bound.
    grid
        Simulation time grid; ``grid.T`` is the payoff date.
    n_paths
        Number of Monte Carlo paths. If ``antithetic=True``, must be even.
    antithetic
        If ``True``, use antithetic variates by pairing ``Z`` and ``-Z``.
    rng
        NumPy random number generator used for sampling.
    """

    process: ConstantBlackScholesProcess
    grid: TimeGrid
    n_paths: int
    antithetic: bool = False
    rng: np.random.Generator = field(
        default_factory=np.random.default_rng,
        repr=False,
    )

    def __post_init__(self) -> None:
        if self.n_paths <= 0:
            raise ValueError("n_paths must be positive")
        if self.antithetic and (self.n_paths % 2 != 0):
            raise ValueError(
                "antithetic=True requires an even n_paths (paired samples)."
            )

    @property
    def generator(self) -> PathGenerator:
        return PathGenerator(
            self.process, self.grid, rng=self.rng, antithetic=self.antithetic
        )

    def simulate_paths(self) -> np.ndarray:
        """Full paths, shape ``(n_paths, n_steps + 1)``."""
        return self.generator.next(self.n_paths)

    def simulate_terminal(self) -> np.ndarray:
        """Terminal levels ``S_T``, shape ``(n_paths,)``."""
        return np.ascontiguousarray(self.simulate_paths()[:, -1])

    def price_european(
        self,
        payoff: Callable[[np.ndarray], np.ndarray],
        *,
        control: ControlVariate | None = None,
    ) -> tuple[float, float]:
        """
        Price a European payoff via Monte Carlo, with optional variance reduction.

        Returns
        -------
        (price, stderr) : tuple[float, float]
            ``price`` is the discounted Monte Carlo estimate of E[payoff(S_T)].
            ``stderr`` is the estimated standard error of the *discounted*
            estimator.

        Notes
        -----
        - With ``antithetic=True``, estimates are formed from pair-averaged
          samples and the standard error uses ``n_paths/2`` observations.
        - Sample standard deviation uses ``ddof=1``; with a single effective
          observation the returned standard error is 0.0.
        """
        ST = self.simulate_terminal()
        payoff_vals = np.asarray(payoff(ST), dtype=np.float64)

        disc = float(np.exp(-self.process.risk_free_rate.read() * self.grid.T))

        if not self.antithetic:
            X_eff = payoff_vals
            if control is not None:
                X_eff = _apply_control_variate(X_eff, control.values(ST), control.mean)
            n_eff = self.n_paths
        else:
            n_eff = self.n_paths // 2
            X_eff = 0.5 * (payoff_vals[:n_eff] + payoff_vals[n_eff:])
            if control is not None:
                Y_vals = control.values(ST)
                Yp = 0.5 * (Y_vals[:n_eff] + Y_vals[n_eff:])
                X_eff = _apply_control_variate(X_eff, Yp, control.mean)

        mean = float(X_eff.mean())
        std = float(X_eff.std(ddof=1)) if n_eff > 1 else 0.0

        price = disc * mean
        std_err = disc * std / float(np.sqrt(n_eff))
        LOGGER.debug(
            "mc price %.6g +/- %.3g (n_paths=%d, antithetic=%s, control=%s)",
            price,
            std_err,
            self.n_paths,
            self.antithetic,
            control is not None,
        )
        return price, std_err


def forward_control(process: ConstantBlackScholesProcess, T: float) -> ControlVariate:
    """Terminal level ``S_T`` as a control, with mean ``S0 e^{(r-q) T}``."""
    mean = process.x0() * float(
        np.exp((process.risk_free_rate.read() - process.dividend_yield.read()) * T)
    )
    return ControlVariate(values=lambda ST: ST, mean=mean)


def mc_price(
    process: ConstantBlackScholesProcess,
    spec: OptionSpec,
    *,
    cfg: MCConfig | None = None,
    rng: np.random.Generator | None = None,
    control: bool = False,
) -> tuple[float, float]:
    """
    Price a European vanilla option by simulating paths of ``process``.

    Parameters
    ----------
    process : ConstantBlackScholesProcess
        Underlying dynamics; quotes are read during the call.
    spec : OptionSpec
        Option type, strike and expiry (measured from ``t = 0``).
    cfg : MCConfig, optional
        Path count, steps, antithetic flag and seeding. Defaults to ``MCConfig()``.
    rng : np.random.Generator, optional
        If provided, takes precedence over ``cfg.random``.
    control : bool, default False
        Use the terminal level as a control variate.

    Returns
    -------
    (price, stderr) : tuple[float, float]

    Examples
    --------
    >>> quotes = MarketQuotes.from_values(spot=100.0, rate=0.05, volatility=0.2)
    >>> spec = OptionSpec(OptionType.CALL, strike=100.0, expiry=1.0)
    >>> price, err = mc_price(quotes.process(), spec, cfg=MCConfig(n_paths=200_000))
    """
    if cfg is None:
        cfg = MCConfig()
    model = McProcessModel(
        process=process,
        grid=TimeGrid.uniform(spec.expiry, cfg.n_steps),
        n_paths=int(cfg.n_paths),
        antithetic=bool(cfg.antithetic),
        rng=rng if rng is not None else make_rng(cfg.random),
    )

    payoff = make_vanilla_payoff(spec.kind, K=spec.strike)
    cv = forward_control(process, spec.expiry) if control else None
    return model.price_european(payoff, control=cv)

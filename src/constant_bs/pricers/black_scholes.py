"""Closed-form references for the constant Black-Scholes process.

These read the process quotes at call time, the same way the Monte Carlo
pricer does, so the two can be compared after any quote bump.
"""

from __future__ import annotations

import math

from scipy.stats import norm

from ..models.stochastic_processes import ConstantBlackScholesProcess
from ..types import OptionSpec, OptionType


def _quotes(process: ConstantBlackScholesProcess) -> tuple[float, float, float, float]:
    return (
        process.x0(),
        process.risk_free_rate.read(),
        process.dividend_yield.read(),
        process.volatility.read(),
    )


def d1_d2(
    *, spot: float, strike: float, r: float, q: float, sigma: float, tau: float
) -> tuple[float, float]:
    if spot <= 0.0:
        raise ValueError("spot must be positive")
    if strike <= 0.0:
        raise ValueError("strike must be positive")
    if sigma <= 0.0:
        raise ValueError("sigma must be positive")
    if tau <= 0.0:
        raise ValueError("tau must be positive")
    vol_sqrt_t = sigma * math.sqrt(tau)
    d1 = (math.log(spot / strike) + (r - q + 0.5 * sigma * sigma) * tau) / vol_sqrt_t
    return d1, d1 - vol_sqrt_t


def bs_price(process: ConstantBlackScholesProcess, spec: OptionSpec) -> float:
    """
    Black-Scholes price of a European option on the process underlying.

        C = S e^{-q T} N(d1) - K e^{-r T} N(d2)
        P = K e^{-r T} N(-d2) - S e^{-q T} N(-d1)
    """
    S, r, q, sigma = _quotes(process)
    K, T = spec.strike, spec.expiry
    d1, d2 = d1_d2(spot=S, strike=K, r=r, q=q, sigma=sigma, tau=T)
    df_r = math.exp(-r * T)
    df_q = math.exp(-q * T)

    if spec.kind == OptionType.CALL:
        return float(S * df_q * norm.cdf(d1) - K * df_r * norm.cdf(d2))
    if spec.kind == OptionType.PUT:
        return float(K * df_r * norm.cdf(-d2) - S * df_q * norm.cdf(-d1))
    raise ValueError(f"Unsupported option kind: {spec.kind}")


def process_terminal_moments(
    process: ConstantBlackScholesProcess, T: float
) -> tuple[float, float]:
    """
    Exact mean and variance of S_T under the process dynamics.

        E[S_T]   = S0 e^{(r-q) T}
        Var[S_T] = E[S_T]^2 (e^{sigma^2 T} - 1)
    """
    if T < 0.0:
        raise ValueError("T must be >= 0")
    S, r, q, sigma = _quotes(process)
    mean = S * math.exp((r - q) * T)
    return mean, mean * mean * math.expm1(sigma * sigma * T)

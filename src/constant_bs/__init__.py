"""
constant_bs

Black-Scholes process with constant, quote-driven coefficients for path-based
Monte Carlo simulation.

The main objects are exposed at the top level, so you can write, for example:

    from constant_bs import MarketQuotes, OptionSpec, OptionType, mc_price
"""

from .config import MCConfig, RandomConfig, make_rng
from .exceptions import InvalidQuoteError, UnboundParameterError
from .market.quotes import Handle, Quote, SimpleQuote
from .models.path_generator import PathGenerator, TimeGrid
from .models.stochastic_processes import (
    ConstantBlackScholesProcess,
    Discretization,
    EulerDiscretization,
    StochasticProcess1D,
)
from .pricers.black_scholes import bs_price
from .pricers.mc import mc_price
from .types import MarketQuotes, OptionSpec, OptionType

__all__ = [
    # Quotes
    "Quote",
    "SimpleQuote",
    "Handle",
    "UnboundParameterError",
    "InvalidQuoteError",
    # Processes
    "StochasticProcess1D",
    "Discretization",
    "EulerDiscretization",
    "ConstantBlackScholesProcess",
    "TimeGrid",
    "PathGenerator",
    # Types / config
    "OptionType",
    "OptionSpec",
    "MarketQuotes",
    "MCConfig",
    "RandomConfig",
    "make_rng",
    # Pricers
    "bs_price",
    "mc_price",
]

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from .market.quotes import Handle, SimpleQuote
from .models.stochastic_processes import ConstantBlackScholesProcess, Discretization


class OptionType(str, Enum):
    """Option contract type.

    Attributes
    ----------
    CALL : str
        Call option ("call").
    PUT : str
        Put option ("put").
    """

    CALL = "call"
    PUT = "put"


@dataclass(frozen=True, slots=True)
class OptionSpec:
    """Specification of a plain-vanilla European option.

    Parameters
    ----------
    kind : OptionType
        Option type (call or put).
    strike : float
        Strike price of the option, typically denoted :math:`K`.
    expiry : float
        Time to expiry, in the same units as the process rates (commonly
        years). Simulation always starts at ``t = 0``.
    """

    kind: OptionType
    strike: float
    expiry: float

    def __post_init__(self) -> None:
        if self.strike <= 0.0:
            raise ValueError("strike must be positive")
        if self.expiry <= 0.0:
            raise ValueError("expiry must be positive")


@dataclass(frozen=True, slots=True)
class MarketQuotes:
    """The four market inputs of a constant Black-Scholes process.

    Each field is a :class:`~constant_bs.market.quotes.Handle`, so the bundle
    itself is immutable while the values behind it are not. Processes built
    with :meth:`process` share these handles; relinking one here is seen by
    all of them.

    Parameters
    ----------
    spot : Handle
        Current level of the underlying, :math:`S_0`.
    dividend_yield : Handle
        Continuously-compounded dividend yield :math:`q`.
    rate : Handle
        Continuously-compounded risk-free rate :math:`r`.
    volatility : Handle
        Black volatility :math:`\\sigma`.
    """

    spot: Handle
    dividend_yield: Handle
    rate: Handle
    volatility: Handle

    @classmethod
    def from_values(
        cls,
        *,
        spot: float,
        rate: float,
        volatility: float,
        dividend_yield: float = 0.0,
    ) -> MarketQuotes:
        """Build handles over fresh :class:`SimpleQuote` objects."""
        return cls(
            spot=Handle(SimpleQuote(spot), name="spot"),
            dividend_yield=Handle(SimpleQuote(dividend_yield), name="dividend_yield"),
            rate=Handle(SimpleQuote(rate), name="rate"),
            volatility=Handle(SimpleQuote(volatility), name="volatility"),
        )

    @classmethod
    def unbound(cls) -> MarketQuotes:
        return cls(
            spot=Handle(name="spot"),
            dividend_yield=Handle(name="dividend_yield"),
            rate=Handle(name="rate"),
            volatility=Handle(name="volatility"),
        )

    def is_bound(self) -> bool:
        return all(
            h.is_bound() for h in (self.spot, self.dividend_yield, self.rate, self.volatility)
        )

    def process(
        self, discretization: Discretization | None = None
    ) -> ConstantBlackScholesProcess:
        return ConstantBlackScholesProcess(
            self.spot,
            self.dividend_yield,
            self.rate,
            self.volatility,
            discretization=discretization,
        )

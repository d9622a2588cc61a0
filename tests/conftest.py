"""Pytest helpers for the constant_bs library."""

from __future__ import annotations

import numpy as np
import pytest

from constant_bs.types import MarketQuotes


@pytest.fixture
def base_params() -> dict:
    """A small set of canonical parameters used across tests."""
    return {
        "S": 100.0,
        "q": 0.02,
        "r": 0.05,
        "sigma": 0.2,
    }


@pytest.fixture
def quotes(base_params) -> MarketQuotes:
    """Bound handles over SimpleQuotes holding ``base_params``."""
    return MarketQuotes.from_values(
        spot=base_params["S"],
        dividend_yield=base_params["q"],
        rate=base_params["r"],
        volatility=base_params["sigma"],
    )


@pytest.fixture
def process(quotes):
    return quotes.process()


@pytest.fixture
def rng():
    """Seeded RNG factory."""

    def _rng(seed: int) -> np.random.Generator:
        return np.random.default_rng(seed)

    return _rng

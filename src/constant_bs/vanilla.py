from __future__ import annotations

from collections.abc import Callable

import numpy as np

from constant_bs.types import OptionType


def call_payoff(ST: np.ndarray, *, K: float) -> np.ndarray:
    return np.maximum(ST - K, 0.0)


def put_payoff(ST: np.ndarray, *, K: float) -> np.ndarray:
    return np.maximum(K - ST, 0.0)


def make_vanilla_payoff(
    kind: OptionType, *, K: float
) -> Callable[[np.ndarray], np.ndarray]:
    if kind == OptionType.CALL:
        return lambda ST: call_payoff(ST, K=K)
    if kind == OptionType.PUT:
        return lambda ST: put_payoff(ST, K=K)
    raise ValueError(f"Unsupported option kind: {kind}")

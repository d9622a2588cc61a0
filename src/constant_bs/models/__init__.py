"""Process models and path generation."""

from .path_generator import PathGenerator, TimeGrid
from .stochastic_processes import (
    ConstantBlackScholesProcess,
    Discretization,
    EulerDiscretization,
    StochasticProcess1D,
)

__all__ = [
    "StochasticProcess1D",
    "Discretization",
    "EulerDiscretization",
    "ConstantBlackScholesProcess",
    "TimeGrid",
    "PathGenerator",
]

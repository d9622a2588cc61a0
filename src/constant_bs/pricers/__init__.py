from .black_scholes import bs_price, process_terminal_moments
from .mc import ControlVariate, McProcessModel, forward_control, mc_price

__all__ = [
    "bs_price",
    "process_terminal_moments",
    "ControlVariate",
    "McProcessModel",
    "forward_control",
    "mc_price",
]

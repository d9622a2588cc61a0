"""Market inputs: observable quotes and the handles that share them."""

from .quotes import Handle, Observable, Quote, SimpleQuote, as_quote

__all__ = [
    "Observable",
    "Quote",
    "SimpleQuote",
    "Handle",
    "as_quote",
]

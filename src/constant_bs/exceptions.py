class UnboundParameterError(LookupError):
    """Raised when a :class:`~constant_bs.market.quotes.Handle` is read while unbound.

    Every primitive of :class:`~constant_bs.models.stochastic_processes.ConstantBlackScholesProcess`
    reads its quotes through handles, so this error surfaces from ``x0``,
    ``drift``, ``diffusion`` and everything built on top of them (``evolve``,
    path generation, Monte Carlo pricing) until all four handles are bound.

    Notes
    -----
    The error is not recoverable locally. Bind the handle (or the quote it
    links to) and retry the whole computation; a partially generated path is
    never valid.
    """

    reason = "is not bound to a quote"

    def __init__(self, name: str | None = None) -> None:
        self.name = name
        subject = f"handle '{name}'" if name else "handle"
        super().__init__(f"{subject} {self.reason}")


class InvalidQuoteError(UnboundParameterError):
    """Raised when the quote behind a handle has no valid value.

    This is the case for a :class:`~constant_bs.market.quotes.SimpleQuote`
    constructed without a value or after :meth:`SimpleQuote.reset`.
    """

    reason = "is linked to a quote with no valid value"

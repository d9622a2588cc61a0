"""Observable market quotes and shared handles.

A :class:`Quote` is a source of a single real number (a spot level, a rate, a
volatility, ...). A :class:`Handle` is a shared indirection to a quote: every
copy of a handle points to the same link, so relinking it through any copy is
seen by all of them on their next read. Consumers such as
:class:`~constant_bs.models.stochastic_processes.ConstantBlackScholesProcess`
hold handles, never values, which is what allows re-pricing a scenario by
bumping a quote instead of rebuilding the process.

Example
-------
>>> spot = SimpleQuote(100.0)
>>> h = Handle(spot)
>>> h2 = h.copy()
>>> spot.set_value(101.0)
>>> h2.read()
101.0
>>> h.bind(SimpleQuote(99.0))
>>> h2.read()
99.0
"""

from __future__ import annotations

import inspect
import logging
import math
import threading
import weakref
from collections.abc import Callable
from typing import Protocol, runtime_checkable

from ..exceptions import InvalidQuoteError, UnboundParameterError
from ..typing import Observer

__all__ = ["Observable", "Quote", "SimpleQuote", "Handle", "as_quote"]

LOGGER = logging.getLogger(__name__)


def _observer_ref(callback: Observer) -> Callable[[], Observer | None]:
    # Bound methods are held weakly so an observer's registration dies with it.
    if inspect.ismethod(callback):
        return weakref.WeakMethod(callback)
    return lambda: callback


class Observable:
    """Minimal observer registry.

    Callbacks take no arguments. Bound methods are held through
    :class:`weakref.WeakMethod`, so registering ``obj.method`` does not keep
    ``obj`` alive; entries whose owner has been collected are dropped on the
    next registration or notification. Other callables (functions, lambdas)
    are held strongly until unregistered.

    Registration is guarded by a lock so that quotes shared between threads
    can be observed and notified safely; callbacks themselves run outside the
    lock.
    """

    __slots__ = ("_observers", "_lock")

    def __init__(self) -> None:
        self._observers: list[Callable[[], Observer | None]] = []
        self._lock = threading.Lock()

    def _live(self) -> list[Observer]:
        # caller holds the lock
        pairs = [(ref, ref()) for ref in self._observers]
        self._observers = [ref for ref, cb in pairs if cb is not None]
        return [cb for _, cb in pairs if cb is not None]

    def register_observer(self, callback: Observer) -> None:
        with self._lock:
            if callback not in self._live():
                self._observers.append(_observer_ref(callback))

    def unregister_observer(self, callback: Observer) -> None:
        with self._lock:
            self._observers = [
                ref for ref in self._observers if ref() not in (None, callback)
            ]

    @property
    def n_observers(self) -> int:
        """Number of observers still alive."""
        with self._lock:
            return len(self._live())

    def notify_observers(self) -> None:
        with self._lock:
            observers = self._live()
        for cb in observers:
            cb()


@runtime_checkable
class Quote(Protocol):
    """Source of a single real number, read on demand."""

    def value(self) -> float:  # pragma: no cover
        ...

    def is_valid(self) -> bool:  # pragma: no cover
        ...

    def register_observer(self, callback: Observer) -> None:  # pragma: no cover
        ...

    def unregister_observer(self, callback: Observer) -> None:  # pragma: no cover
        ...


class SimpleQuote(Observable):
    """Settable quote.

    Parameters
    ----------
    value : float, optional
        Initial value. A quote created without a value is invalid until
        :meth:`set_value` is called.

    Notes
    -----
    Observers are notified only when the stored value actually changes.
    Storing a Python float is a single reference assignment, so a concurrent
    reader sees either the old or the new number.
    """

    __slots__ = ("_value",)

    def __init__(self, value: float | None = None) -> None:
        super().__init__()
        self._value: float | None = None if value is None else float(value)

    def value(self) -> float:
        v = self._value
        if v is None:
            raise InvalidQuoteError()
        return v

    def is_valid(self) -> bool:
        return self._value is not None

    def set_value(self, value: float) -> float:
        """Store ``value`` and return the difference to the previous value.

        The difference is ``nan`` when the quote was previously invalid.
        """
        new = float(value)
        old = self._value
        if old == new:
            return 0.0
        self._value = new
        self.notify_observers()
        return math.nan if old is None else new - old

    def reset(self) -> None:
        """Invalidate the quote."""
        if self._value is not None:
            self._value = None
            self.notify_observers()

    def __repr__(self) -> str:
        return f"SimpleQuote({self._value!r})"


def as_quote(source: Quote | Handle | float) -> Quote:
    """Return ``source`` itself if it is a quote, else wrap the number.

    A :class:`Handle` resolves to the quote it currently links to; an empty
    handle has nothing to share, so passing one raises
    :class:`~constant_bs.exceptions.UnboundParameterError`. Use
    :meth:`Handle.unbind` to clear a link.
    """
    if isinstance(source, Quote):
        return source
    if isinstance(source, Handle):
        return source.quote
    if isinstance(source, bool):
        raise TypeError("quote value must be a real number, got bool")
    try:
        return SimpleQuote(float(source))
    except (TypeError, ValueError) as e:
        raise TypeError(
            f"cannot bind {type(source).__name__!r}; expected a Quote or a real number"
        ) from e


class _Link(Observable):
    """The shared cell behind every copy of a :class:`Handle`.

    The link observes its current quote and forwards the quote's
    notifications to the link's own observers.
    """

    __slots__ = ("quote", "name", "__weakref__")

    def __init__(self, quote: Quote | None, name: str | None) -> None:
        super().__init__()
        self.quote: Quote | None = None
        self.name = name
        if quote is not None:
            self.link_to(quote, notify=False)

    def _forward(self) -> None:
        self.notify_observers()

    def link_to(self, quote: Quote | None, *, notify: bool = True) -> None:
        old = self.quote
        if old is quote:
            return
        if old is not None:
            old.unregister_observer(self._forward)
        if quote is not None:
            quote.register_observer(self._forward)
        self.quote = quote
        LOGGER.debug("handle %r relinked: %r -> %r", self.name, old, quote)
        if notify:
            self.notify_observers()


class Handle:
    """Shared, rebindable reference to a :class:`Quote`.

    Parameters
    ----------
    source : Quote | Handle | float, optional
        Initial target. Plain numbers are wrapped in a :class:`SimpleQuote`.
        Omit to create an unbound handle.
    name : str, optional
        Label used in error messages and debug logs.

    Notes
    -----
    ``copy.copy`` and ``copy.deepcopy`` both return a handle sharing this
    handle's link: a handle is a reference, and copying it never snapshots
    the value. Handles constructed separately are independent even when they
    start out pointing to the same quote.
    """

    __slots__ = ("_link",)

    def __init__(
        self, source: Quote | Handle | float | None = None, *, name: str | None = None
    ) -> None:
        quote = None if source is None else as_quote(source)
        self._link = _Link(quote, name)

    @property
    def name(self) -> str | None:
        return self._link.name

    # ---- binding
    def bind(self, source: Quote | Handle | float) -> None:
        """Link this handle (and every copy of it) to ``source``.

        Binding to an unbound :class:`Handle` raises
        :class:`~constant_bs.exceptions.UnboundParameterError` and leaves the
        current link untouched.
        """
        self._link.link_to(as_quote(source))

    def unbind(self) -> None:
        """Drop the current link; subsequent reads raise."""
        self._link.link_to(None)

    def is_bound(self) -> bool:
        """Whether :meth:`read` would succeed."""
        q = self._link.quote
        return q is not None and q.is_valid()

    @property
    def quote(self) -> Quote:
        """The quote currently linked, raising if there is none."""
        q = self._link.quote
        if q is None:
            raise UnboundParameterError(self.name)
        return q

    # ---- reading
    def read(self) -> float:
        """Current value of the linked quote."""
        q = self._link.quote  # single load; a concurrent rebind cannot tear it
        if q is None:
            raise UnboundParameterError(self.name)
        if not q.is_valid():
            raise InvalidQuoteError(self.name)
        return float(q.value())

    def __float__(self) -> float:
        return self.read()

    # ---- observers
    def register_observer(self, callback: Observer) -> None:
        """Call ``callback()`` on relinking or when the linked quote changes."""
        self._link.register_observer(callback)

    def unregister_observer(self, callback: Observer) -> None:
        self._link.unregister_observer(callback)

    # ---- sharing
    def copy(self) -> Handle:
        h = Handle.__new__(Handle)
        h._link = self._link
        return h

    def __copy__(self) -> Handle:
        return self.copy()

    def __deepcopy__(self, memo: dict) -> Handle:
        return self.copy()

    def shares_link_with(self, other: Handle) -> bool:
        return self._link is other._link

    def __repr__(self) -> str:
        label = f"{self.name!r}, " if self.name else ""
        return f"Handle({label}{self._link.quote!r})"

import math

import numpy as np
import pytest

from constant_bs.exceptions import UnboundParameterError
from constant_bs.market.quotes import SimpleQuote
from constant_bs.models.path_generator import PathGenerator, TimeGrid
from constant_bs.types import MarketQuotes


def test_uniform_grid():
    grid = TimeGrid.uniform(1.0, 4)

    assert grid.n_steps == 4
    assert grid.T == 1.0
    np.testing.assert_allclose(grid.times, [0.0, 0.25, 0.5, 0.75, 1.0])
    np.testing.assert_allclose(grid.dt, 0.25)


@pytest.mark.parametrize(
    "times",
    [[0.0], [0.1, 0.2], [0.0, 0.5, 0.5], [0.0, 1.0, 0.5], [[0.0, 1.0]], [0.0, np.inf]],
)
def test_grid_rejects_bad_times(times):
    with pytest.raises(ValueError):
        TimeGrid(times)


def test_paths_start_at_x0(process, rng):
    gen = PathGenerator(process, TimeGrid.uniform(1.0, 10), rng=rng(1))
    paths = gen.next(500)

    assert paths.shape == (500, 11)
    assert np.all(paths[:, 0] == 100.0)
    assert np.all(paths > 0.0)


def test_paths_from_zero_draws_follow_drift(process):
    grid = TimeGrid.uniform(2.0, 8)
    gen = PathGenerator(process, grid)
    paths = gen.paths_from_draws(np.zeros((3, grid.n_steps)))

    expected = 100.0 * np.exp(0.01 * grid.times)
    np.testing.assert_allclose(paths, np.broadcast_to(expected, paths.shape))


def test_draw_shape_is_checked(process):
    gen = PathGenerator(process, TimeGrid.uniform(1.0, 4))
    with pytest.raises(ValueError, match="draws must have shape"):
        gen.paths_from_draws(np.zeros((3, 5)))


def test_antithetic_pairs(process, rng):
    gen = PathGenerator(process, TimeGrid.uniform(1.0, 5), rng=rng(3), antithetic=True)
    Z = gen.draws(6)
    np.testing.assert_array_equal(Z[:3], -Z[3:])

    with pytest.raises(ValueError, match="even"):
        gen.next(5)


def test_non_positive_path_count_rejected(process):
    gen = PathGenerator(process, TimeGrid.uniform(1.0, 2))
    with pytest.raises(ValueError):
        gen.next(0)


def test_same_seed_same_paths(process, rng):
    grid = TimeGrid.uniform(1.0, 12)
    a = PathGenerator(process, grid, rng=rng(42)).next(100)
    b = PathGenerator(process, grid, rng=rng(42)).next(100)
    np.testing.assert_array_equal(a, b)


def test_terminal_log_return_mean_and_variance(process, rng):
    """ln(S_T/S0) ~ N((r - q - sigma^2/2) T, sigma^2 T) for any step count."""
    T = 1.5
    n_paths = 50_000
    gen = PathGenerator(process, TimeGrid.uniform(T, 6), rng=rng(123))
    ST = gen.next(n_paths)[:, -1]

    logR = np.log(ST / 100.0)
    theo_mean = 0.01 * T
    theo_var = 0.04 * T

    se_mean = (theo_var / n_paths) ** 0.5
    se_var = (2.0 / (n_paths - 1)) ** 0.5 * theo_var

    assert abs(float(np.mean(logR)) - theo_mean) <= 5.0 * se_mean
    assert abs(float(np.var(logR, ddof=1)) - theo_var) <= 5.0 * se_var


class _BumpingQuote:
    """Volatility quote that switches value after a number of reads."""

    def __init__(self, before: float, after: float, switch_after: int) -> None:
        self._inner = SimpleQuote(before)
        self._after = after
        self._left = switch_after

    def value(self) -> float:
        if self._left == 0:
            self._inner.set_value(self._after)
        self._left -= 1
        return self._inner.value()

    def is_valid(self) -> bool:
        return True

    def register_observer(self, callback) -> None:
        self._inner.register_observer(callback)

    def unregister_observer(self, callback) -> None:
        self._inner.unregister_observer(callback)


def test_mid_path_rebind_is_picked_up_on_next_step():
    quotes = MarketQuotes.from_values(spot=100.0, rate=0.05, volatility=0.2)
    process = quotes.process()
    grid = TimeGrid.uniform(2.0, 2)
    gen = PathGenerator(process, grid)

    # Euler reads volatility twice per step (drift and diffusion).
    quotes.volatility.bind(_BumpingQuote(0.2, 0.3, switch_after=2))
    path = gen.paths_from_draws(np.ones((1, 2)))[0]

    first = 100.0 * math.exp(0.05 - 0.02 + 0.2)
    second = first * math.exp(0.05 - 0.045 + 0.3)
    assert path[1] == pytest.approx(first)
    assert path[2] == pytest.approx(second)


def test_unbound_process_cannot_generate(rng):
    process = MarketQuotes.unbound().process()
    gen = PathGenerator(process, TimeGrid.uniform(1.0, 2), rng=rng(0))

    with pytest.raises(UnboundParameterError):
        gen.next(10)

import numpy as np
import pytest

from constant_bs.config import MCConfig, RandomConfig
from constant_bs.exceptions import UnboundParameterError
from constant_bs.models.path_generator import TimeGrid
from constant_bs.pricers.black_scholes import bs_price
from constant_bs.pricers.mc import (
    ControlVariate,
    McProcessModel,
    _apply_control_variate,
    forward_control,
    mc_price,
)
from constant_bs.types import MarketQuotes, OptionSpec, OptionType
from constant_bs.vanilla import call_payoff


@pytest.mark.parametrize("kind", [OptionType.CALL, OptionType.PUT])
def test_mc_matches_bs_within_a_few_standard_errors(process, kind):
    """MC price should agree with BS within a few reported SEs."""
    spec = OptionSpec(kind=kind, strike=110.0, expiry=1.0)

    bs = bs_price(process, spec)
    cfg = MCConfig(n_paths=40_000, random=RandomConfig(seed=7))
    mc, se = mc_price(process, spec, cfg=cfg)

    assert se > 0.0
    assert abs(mc - bs) <= (3.0 * se + 2e-3)


def test_multi_step_paths_price_the_same(process):
    spec = OptionSpec(kind=OptionType.CALL, strike=100.0, expiry=1.0)
    bs = bs_price(process, spec)

    cfg = MCConfig(n_paths=20_000, n_steps=12, random=RandomConfig(seed=5))
    mc, se = mc_price(process, spec, cfg=cfg)
    assert abs(mc - bs) <= (3.0 * se + 2e-3)


def test_mc_standard_error_scales_like_inverse_sqrt_n(process):
    """SE should scale ~ 1/sqrt(N) (approx; allow generous tolerance)."""
    spec = OptionSpec(kind=OptionType.CALL, strike=100.0, expiry=1.0)

    N1 = 5_000
    N2 = 20_000  # 4x more paths => SE should be ~ half

    _, se1 = mc_price(process, spec, cfg=MCConfig(n_paths=N1, random=RandomConfig(seed=11)))
    _, se2 = mc_price(process, spec, cfg=MCConfig(n_paths=N2, random=RandomConfig(seed=12)))

    ratio = se1 / se2
    assert 1.4 <= ratio <= 2.8


def test_antithetic_and_control_reduce_error(process):
    spec = OptionSpec(kind=OptionType.CALL, strike=100.0, expiry=1.0)
    bs = bs_price(process, spec)

    _, se_plain = mc_price(process, spec, cfg=MCConfig(n_paths=20_000, random=RandomConfig(seed=3)))
    mc_cv, se_cv = mc_price(
        process,
        spec,
        cfg=MCConfig(n_paths=20_000, antithetic=True, random=RandomConfig(seed=3)),
        control=True,
    )

    assert se_cv < se_plain
    assert abs(mc_cv - bs) <= (3.0 * se_cv + 2e-3)


def test_seeded_runs_are_reproducible(process):
    spec = OptionSpec(kind=OptionType.PUT, strike=95.0, expiry=0.5)
    cfg = MCConfig(n_paths=2_000, random=RandomConfig(seed=99))
    assert mc_price(process, spec, cfg=cfg) == mc_price(process, spec, cfg=cfg)


def test_explicit_rng_takes_precedence(process, rng):
    spec = OptionSpec(kind=OptionType.CALL, strike=100.0, expiry=1.0)
    cfg = MCConfig(n_paths=1_000, random=RandomConfig(seed=1))

    a = mc_price(process, spec, cfg=cfg, rng=rng(2))
    b = mc_price(process, spec, cfg=MCConfig(n_paths=1_000, random=RandomConfig(seed=2)))
    assert a == b


def test_repricing_after_quote_bump_without_rebuilding(quotes):
    process = quotes.process()
    spec = OptionSpec(kind=OptionType.CALL, strike=100.0, expiry=1.0)
    cfg = MCConfig(n_paths=20_000, random=RandomConfig(seed=21))

    low, _ = mc_price(process, spec, cfg=cfg)
    quotes.volatility.bind(0.3)
    high, se = mc_price(process, spec, cfg=cfg)

    assert high > low
    assert abs(high - bs_price(process, spec)) <= 3.0 * se + 2e-3


def test_discounting_reads_rate_at_pricing_time(process, quotes):
    model = McProcessModel(process=process, grid=TimeGrid.uniform(1.0, 1), n_paths=10)
    one = lambda ST: np.ones_like(ST)  # noqa: E731

    price, se = model.price_european(one)
    assert price == pytest.approx(np.exp(-0.05))
    assert se == 0.0

    quotes.rate.bind(0.0)
    price, _ = model.price_european(one)
    assert price == pytest.approx(1.0)


def test_model_validation(process):
    grid = TimeGrid.uniform(1.0, 1)
    with pytest.raises(ValueError):
        McProcessModel(process=process, grid=grid, n_paths=0)
    with pytest.raises(ValueError):
        McProcessModel(process=process, grid=grid, n_paths=3, antithetic=True)


def test_simulate_terminal_shape(process, rng):
    model = McProcessModel(
        process=process, grid=TimeGrid.uniform(1.0, 4), n_paths=64, rng=rng(0)
    )
    ST = model.simulate_terminal()
    assert ST.shape == (64,)
    assert np.all(ST > 0.0)


def test_forward_control_mean(process):
    cv = forward_control(process, 2.0)
    assert cv.mean == pytest.approx(100.0 * np.exp(0.03 * 2.0))
    np.testing.assert_array_equal(cv.values(np.array([1.0, 2.0])), [1.0, 2.0])


def test_degenerate_control_is_ignored():
    X = np.array([1.0, 2.0, 3.0])
    Y = np.full(3, 5.0)
    np.testing.assert_array_equal(_apply_control_variate(X, Y, 5.0), X)


def test_control_variate_with_exact_linear_payoff(process, rng):
    model = McProcessModel(
        process=process, grid=TimeGrid.uniform(1.0, 1), n_paths=1_000, rng=rng(4)
    )
    cv = forward_control(process, 1.0)
    price, se = model.price_european(lambda ST: ST, control=cv)

    assert price == pytest.approx(np.exp(-0.05) * cv.mean)
    assert se == pytest.approx(0.0, abs=1e-9)


def test_call_payoff_with_control_variate_object(process, rng):
    model = McProcessModel(
        process=process, grid=TimeGrid.uniform(1.0, 1), n_paths=10_000, rng=rng(8)
    )
    spec = OptionSpec(kind=OptionType.CALL, strike=100.0, expiry=1.0)
    cv = ControlVariate(values=lambda ST: ST, mean=forward_control(process, 1.0).mean)
    price, se = model.price_european(lambda ST: call_payoff(ST, K=100.0), control=cv)

    assert abs(price - bs_price(process, spec)) <= 3.0 * se + 2e-3


def test_unbound_quotes_fail_pricing():
    process = MarketQuotes.unbound().process()
    spec = OptionSpec(kind=OptionType.CALL, strike=100.0, expiry=1.0)
    with pytest.raises(UnboundParameterError):
        mc_price(process, spec, cfg=MCConfig(n_paths=10))

from __future__ import annotations


def main() -> None:
    # [START README_QUICKSTART]
    from constant_bs import (
        MarketQuotes,
        MCConfig,
        OptionSpec,
        OptionType,
        RandomConfig,
        bs_price,
        mc_price,
    )

    quotes = MarketQuotes.from_values(
        spot=100.0, rate=0.05, dividend_yield=0.02, volatility=0.20
    )
    process = quotes.process()
    spec = OptionSpec(kind=OptionType.CALL, strike=100.0, expiry=1.0)
    cfg = MCConfig(n_paths=200_000, antithetic=True, random=RandomConfig(seed=0))

    print("BS:", bs_price(process, spec))
    price_mc, se = mc_price(process, spec, cfg=cfg)
    print("MC:", price_mc, "(SE=", se, ")")

    # Re-price a vol scenario without rebuilding the process
    quotes.volatility.bind(0.30)
    print("BS (vol 30%):", bs_price(process, spec))
    price_mc, se = mc_price(process, spec, cfg=cfg)
    print("MC (vol 30%):", price_mc, "(SE=", se, ")")
    # [END README_QUICKSTART]


if __name__ == "__main__":
    main()

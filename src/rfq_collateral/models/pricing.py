# rfq_collateral/models/pricing.py
from decimal import Decimal
from typing import assert_never

import numpy as np
from scipy.stats import norm

from ..constants import SECONDS_PER_YEAR
from .instruments import (
    Instrument,
    OptionInstrument,
    OptionType,
    PerpFutureInstrument,
    ResolvedLeg,
    SpotInstrument,
    TermFutureInstrument,
)


# ---------- Black-Scholes ----------


def black_scholes(
    spot: float,
    strike: float,
    years: float,
    volatility: float,
    interest_rate: float,
    option_type: OptionType,
) -> float:
    """
    European option price.

    Expired options are worth their intrinsic value; with no volatility the
    option is worth the intrinsic value against the discounted strike.
    """
    is_call = option_type == OptionType.CALL

    if years <= 0:
        return max(0.0, spot - strike) if is_call else max(0.0, strike - spot)

    discounted_strike = strike * np.exp(-interest_rate * years)

    if volatility <= 0 or spot <= 0 or strike <= 0:
        if is_call:
            return float(max(0.0, spot - discounted_strike))
        return float(max(0.0, discounted_strike - spot))

    vol_sqrt_t = volatility * np.sqrt(years)
    d1 = (np.log(spot / strike) + (interest_rate + volatility**2 / 2) * years) / vol_sqrt_t
    d2 = d1 - vol_sqrt_t

    if is_call:
        price = spot * norm.cdf(d1) - discounted_strike * norm.cdf(d2)
    else:
        price = discounted_strike * norm.cdf(-d2) - spot * norm.cdf(-d1)
    return float(price)


def years_till_expiration(expiration_timestamp: int, now: int) -> float:
    return max(0, expiration_timestamp - now) / SECONDS_PER_YEAR


# ---------- Instrument valuation ----------


def value_unit(
    instrument: Instrument,
    price: Decimal,
    volatility: Decimal,
    interest_rate: Decimal,
    now: int,
) -> Decimal:
    """Value of one instrument unit at the given market state."""
    match instrument:
        case SpotInstrument():
            return price
        case TermFutureInstrument() | PerpFutureInstrument():
            return price * instrument.underlying_amount_per_contract
        case OptionInstrument():
            option_price = black_scholes(
                float(price),
                float(instrument.strike_price),
                years_till_expiration(instrument.expiration_timestamp, now),
                float(volatility),
                float(interest_rate),
                instrument.option_type,
            )
            return Decimal(repr(option_price)) * instrument.underlying_amount_per_contract
        case _:
            assert_never(instrument)


def value_leg(
    leg: ResolvedLeg,
    price: Decimal,
    volatility: Decimal,
    interest_rate: Decimal,
    now: int,
) -> Decimal:
    return value_unit(leg.instrument, price, volatility, interest_rate, now) * leg.signed_amount

import asyncio
from decimal import Decimal
from pathlib import Path

import pytest

from rfq_collateral import (
    AuthoritySide,
    ConfigurationError,
    InputError,
    InstrumentType,
    LegSide,
    QuoteSide,
    RiskCategory,
    UnregisteredInstrument,
)
from rfq_collateral.config_loader import (
    build_base_assets,
    build_case,
    build_collateral_config,
    build_leg,
    build_registry,
    build_risk_category_info,
    build_risk_category_table,
    build_scenario,
    load_config,
)
from rfq_collateral.models import OptionType, PerpFutureInstrument, decode_instrument_data

EXAMPLE_CONFIG = Path(__file__).resolve().parent.parent / "configs" / "btc_straddle.yaml"


def test_build_collateral_config():
    cfg = {
        "safety_price_shift_factor": 0.02,
        "overall_safety_factor": 0.1,
        "min_collateral_requirement": 5_000_000,
        "collateral_mint_decimals": 6,
    }

    config = build_collateral_config(cfg)

    assert config.safety_price_shift_factor == Decimal("0.02")
    assert config.overall_safety_factor == Decimal("0.1")
    assert config.min_collateral == Decimal(5)
    assert config.collateral_for_variable_size_rfq_creation == 0


def test_build_scenario_forms():
    assert build_scenario({"price": 0.1, "volatility": 0.2}).base_asset_price_change == Decimal("0.1")
    assert build_scenario([0.1, 0.2]).volatility_change == Decimal("0.2")
    assert build_scenario({"price": 0.05}).volatility_change == 0


def test_risk_category_needs_six_scenarios():
    with pytest.raises(ConfigurationError, match="Expected 6 scenarios"):
        build_risk_category_info({"scenarios": [[0.1, 0.1]] * 5})


def test_unknown_risk_category():
    info = {"scenarios": [[0.1, 0.1]] * 6}
    table = build_risk_category_table({"Medium": info})
    assert list(table) == [RiskCategory.MEDIUM]

    with pytest.raises(ConfigurationError, match="Unknown risk category type: extreme"):
        build_risk_category_table({"extreme": info})


def test_risk_category_camel_case_names():
    info = {"scenarios": [[0.1, 0.1]] * 6}

    table = build_risk_category_table({"veryLow": info, "VeryHigh": info, "very_low": info})
    assert set(table) == {RiskCategory.VERY_LOW, RiskCategory.VERY_HIGH}

    profiles, _ = build_base_assets([{"index": 0, "risk_category": "veryHigh"}])
    assert asyncio.run(profiles.get(0)).risk_category == RiskCategory.VERY_HIGH

    case = build_case({"authority": "MAKER", "side": "Bid"})
    assert case.authority_side == AuthoritySide.MAKER
    assert case.quote_side == QuoteSide.BID


def test_build_registry_by_name_or_number():
    registry = build_registry({"spot-prog": "spot", "perp-prog": 4})

    assert registry.resolve("spot-prog") == InstrumentType.SPOT
    assert registry.resolve("perp-prog") == InstrumentType.PERP_FUTURE
    with pytest.raises(UnregisteredInstrument):
        registry.resolve("other")

    with pytest.raises(ConfigurationError, match="Unknown instrument type"):
        build_registry({"x": "swap"})
    with pytest.raises(ConfigurationError, match="Unknown instrument type"):
        build_registry({"x": 9})


@pytest.mark.asyncio
async def test_build_base_assets():
    profiles, oracle = build_base_assets(
        [
            {"index": 0, "risk_category": "low", "price": 100},
            {"index": 1, "risk_category": "high", "oracle": "eth", "price": {"mantissa": 12345, "scale": 1}},
        ]
    )

    btc = await profiles.get(0)
    eth = await profiles.get(1)
    assert btc.oracle_address == "oracle-0"
    assert eth.risk_category == RiskCategory.HIGH
    assert await oracle.get_price("eth") == Decimal("1234.5")


def test_build_leg_with_instrument_payloads():
    option_leg = build_leg(
        {
            "base_asset": 0,
            "amount": 2,
            "side": "short",
            "instrument": "opt",
            "option": {"type": "put", "strike": 25000, "expiration": 1_700_000_000},
        }
    )
    future_leg = build_leg(
        {"base_asset": 0, "amount": 1, "instrument": "perp", "future": {"amount_per_contract": 0.25}}
    )
    raw_leg = build_leg({"base_asset": 0, "amount": 1, "instrument": "perp", "data": "00ca9a3b00000000"})

    option = decode_instrument_data(InstrumentType.OPTION, option_leg.instrument_data)
    assert option_leg.side == LegSide.SHORT
    assert option.option_type == OptionType.PUT
    assert option.strike_price == Decimal(25000)

    assert future_leg.side == LegSide.LONG
    assert decode_instrument_data(InstrumentType.PERP_FUTURE, future_leg.instrument_data) == (
        PerpFutureInstrument(Decimal("0.25"))
    )
    # 1_000_000_000 little-endian
    assert decode_instrument_data(InstrumentType.PERP_FUTURE, raw_leg.instrument_data) == (
        PerpFutureInstrument(Decimal(1))
    )


def test_build_leg_rejects_bad_payloads():
    with pytest.raises(InputError, match="not valid hex"):
        build_leg({"base_asset": 0, "amount": 1, "instrument": "x", "data": "zz"})
    with pytest.raises(InputError, match="Unknown option type"):
        build_leg(
            {
                "base_asset": 0,
                "amount": 1,
                "instrument": "x",
                "option": {"type": "straddle", "strike": 1, "expiration": 0},
            }
        )


def test_build_case_defaults():
    case = build_case({})
    assert case.legs_multiplier == 1
    assert case.authority_side == AuthoritySide.TAKER
    assert case.quote_side == QuoteSide.ASK

    with pytest.raises(ConfigurationError, match="Unknown quote side type"):
        build_case({"side": "middle"})


# ------------------------------------------------------------
# Example config
# ------------------------------------------------------------


def test_load_example_config():
    loaded = load_config(EXAMPLE_CONFIG)

    assert loaded.name == "btc_straddle_hedged"
    assert loaded.settlement_period == 7200
    assert loaded.now == 1_700_000_000
    assert len(loaded.legs) == 4
    assert len(loaded.cases) == 3
    assert set(loaded.risk_categories) == {RiskCategory.MEDIUM, RiskCategory.HIGH}
    assert loaded.config.min_collateral == Decimal("0.1")


@pytest.mark.asyncio
async def test_example_config_evaluates():
    loaded = load_config(EXAMPLE_CONFIG)

    report = await loaded.calculator().evaluate(loaded.legs, loaded.cases, loaded.settlement_period)

    assert report.evaluated_at == 1_700_000_000
    assert report.base_assets[1].price == Decimal("1800.25")
    assert report.base_asset_statistics[0].scenario_count == 4
    assert report.base_asset_statistics[1].scenario_count == 2
    assert len(report.required_collateral) == 3
    assert all(r >= Decimal("0.1") for r in report.required_collateral)


def test_example_config_sync():
    loaded = load_config(EXAMPLE_CONFIG)

    first = loaded.calculator().calculate_risk_sync(loaded.legs, loaded.cases, loaded.settlement_period)
    second = loaded.calculator().calculate_risk_sync(loaded.legs, loaded.cases, loaded.settlement_period)

    assert first == second

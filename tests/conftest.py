import pytest

from rfq_collateral import (
    BaseAssetRiskProfile,
    CollateralCalculator,
    CollateralConfig,
    InstrumentType,
    RiskCategory,
    RiskCategoryInfo,
    Scenario,
    StaticInstrumentRegistry,
    StaticPriceOracle,
    StaticRiskProfileProvider,
)

NOW = 1_700_000_000

SPOT_PROGRAM = "SpotInstrumentProgram"
OPTION_PROGRAM = "OptionInstrumentProgram"
TERM_FUTURE_PROGRAM = "TermFutureProgram"
PERP_FUTURE_PROGRAM = "PerpFutureProgram"


def _flat_category(price_change, volatility_change=0, volatility=0, interest_rate=0):
    return RiskCategoryInfo(
        interest_rate=interest_rate,
        annualized_30_day_volatility=volatility,
        scenario_per_settlement_period=[Scenario(price_change, volatility_change)] * 6,
    )


@pytest.fixture
def flat_category():
    """Risk category using the same scenario for every settlement bucket."""
    return _flat_category


@pytest.fixture
def registry():
    return StaticInstrumentRegistry(
        {
            SPOT_PROGRAM: InstrumentType.SPOT,
            OPTION_PROGRAM: InstrumentType.OPTION,
            TERM_FUTURE_PROGRAM: InstrumentType.TERM_FUTURE,
            PERP_FUTURE_PROGRAM: InstrumentType.PERP_FUTURE,
        }
    )


@pytest.fixture
def make_calculator(registry):
    """
    Build a calculator over static data.

    ``assets`` maps base asset index -> (risk category, oracle price).
    """

    def _make(assets, risk_categories=None, config=None):
        profiles = {
            index: BaseAssetRiskProfile(index, category, f"oracle-{index}")
            for index, (category, _) in assets.items()
        }
        prices = {f"oracle-{index}": price for index, (_, price) in assets.items()}
        if risk_categories is None:
            risk_categories = {RiskCategory.MEDIUM: _flat_category("0.1")}
        return CollateralCalculator(
            config=config or CollateralConfig(),
            risk_categories=risk_categories,
            registry=registry,
            profiles=StaticRiskProfileProvider(profiles),
            oracle=StaticPriceOracle(prices),
            clock=lambda: NOW,
        )

    return _make

# rfq_collateral/models/scenarios.py
import logging
from typing import List, Sequence

from ..constants import SETTLEMENT_WINDOW_BREAKPOINTS, SETTLEMENT_WINDOW_PERIODS
from ..data_structures import RiskCategoryInfo, Scenario
from .instruments import ResolvedLeg

logger = logging.getLogger(__name__)


def settlement_period_bucket(settlement_period: int) -> int:
    for i, breakpoint in enumerate(SETTLEMENT_WINDOW_BREAKPOINTS):
        if settlement_period < breakpoint:
            return i
    return SETTLEMENT_WINDOW_PERIODS - 1


def select_scenarios(
    legs: Sequence[ResolvedLeg],
    risk_category_info: RiskCategoryInfo,
    settlement_period: int,
) -> List[Scenario]:
    """
    Shock scenarios for one base-asset group.

    Groups holding an option are stressed on both price and volatility:
    the base scenario, flipped volatility, flipped price, and both flipped.
    Without options volatility has no effect, so only the two price moves
    are evaluated.
    """
    bucket = settlement_period_bucket(settlement_period)
    base = risk_category_info.scenario_per_settlement_period[bucket]
    price_change = base.base_asset_price_change
    vol_change = base.volatility_change

    if any(leg.is_option for leg in legs):
        scenarios = [
            base,
            Scenario(price_change, -vol_change),
            Scenario(-price_change, vol_change),
            Scenario(-price_change, -vol_change),
        ]
    else:
        scenarios = [
            Scenario(price_change, 0),
            Scenario(-price_change, 0),
        ]

    logger.debug(
        "Settlement period %ss -> bucket %d, %d scenarios",
        settlement_period,
        bucket,
        len(scenarios),
    )
    return scenarios

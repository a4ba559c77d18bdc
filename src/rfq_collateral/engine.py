# ============================================================
#  engine.py: scenario-based portfolio risk aggregation
# ============================================================

import logging
from collections import defaultdict
from decimal import Decimal
from typing import Dict, Iterable, Mapping, Sequence

from .data_structures import (
    BaseAssetInfo,
    BaseAssetStatistics,
    CollateralConfig,
    PortfolioStatistics,
    RiskCategory,
    RiskCategoryInfo,
)
from .errors import ConfigurationError
from .models import ResolvedLeg, select_scenarios, value_leg

logger = logging.getLogger(__name__)


def group_legs_by_base_asset(legs: Iterable) -> Dict[int, list]:
    """Partition legs by base asset index, keeping first-seen order."""
    groups = defaultdict(list)
    for leg in legs:
        groups[leg.base_asset_index].append(leg)
    return dict(groups)


# ============================================================
#  Per base asset
# ============================================================


def compute_base_asset_statistics(
    legs: Sequence[ResolvedLeg],
    base_asset_info: BaseAssetInfo,
    risk_category_info: RiskCategoryInfo,
    settlement_period: int,
    now: int,
) -> BaseAssetStatistics:
    """
    Best and worst P&L of one base-asset group across its shock scenarios.

    Every leg is valued at the current price and volatility, then revalued
    under each scenario; the group's P&L for a scenario is the sum of the
    per-leg value changes.
    """
    price = base_asset_info.price
    volatility = risk_category_info.annualized_30_day_volatility
    rate = risk_category_info.interest_rate

    leg_values = [value_leg(leg, price, volatility, rate, now) for leg in legs]
    scenarios = select_scenarios(legs, risk_category_info, settlement_period)

    biggest_profit = Decimal("-Infinity")
    biggest_loss = Decimal("Infinity")
    for scenario in scenarios:
        shocked_price = price * (1 + scenario.base_asset_price_change)
        shocked_volatility = volatility * (1 + scenario.volatility_change)

        pnl = sum(
            (
                value_leg(leg, shocked_price, shocked_volatility, rate, now) - value
                for leg, value in zip(legs, leg_values)
            ),
            Decimal(0),
        )
        logger.debug(
            "Base asset %d scenario (%s, %s): pnl=%s",
            base_asset_info.index,
            scenario.base_asset_price_change,
            scenario.volatility_change,
            pnl,
        )

        biggest_profit = max(biggest_profit, pnl)
        biggest_loss = min(biggest_loss, pnl)

    absolute_value_of_legs = sum((abs(v) for v in leg_values), Decimal(0))

    return BaseAssetStatistics(
        biggest_profit=biggest_profit,
        biggest_loss=biggest_loss,
        absolute_value_of_legs=absolute_value_of_legs,
        scenario_count=len(scenarios),
    )


# ============================================================
#  Portfolio roll-up
# ============================================================


def aggregate_portfolio(
    groups: Iterable[BaseAssetStatistics], config: CollateralConfig
) -> PortfolioStatistics:
    all_profits = Decimal(0)
    all_losses = Decimal(0)
    total_leg_value = Decimal(0)

    for stats in groups:
        all_profits += stats.biggest_profit
        all_losses -= stats.biggest_loss
        total_leg_value += stats.absolute_value_of_legs

    # Symmetric buffer proportional to gross notional.
    price_shift = total_leg_value * config.safety_price_shift_factor
    all_profits += price_shift
    all_losses += price_shift

    overall = 1 + config.overall_safety_factor
    return PortfolioStatistics(
        max_loss=all_losses * overall,
        max_profit=all_profits * overall,
    )


def calculate_portfolio_statistics(
    legs: Sequence[ResolvedLeg],
    base_assets: Mapping[int, BaseAssetInfo],
    risk_categories: Mapping[RiskCategory, RiskCategoryInfo],
    config: CollateralConfig,
    settlement_period: int,
    now: int,
):
    """
    Run the per-asset statistics for every group and roll them up.

    Returns ``(per_asset_statistics, portfolio_statistics)``.
    """
    per_asset: Dict[int, BaseAssetStatistics] = {}
    for index, group in group_legs_by_base_asset(legs).items():
        info = base_assets[index]
        try:
            category_info = risk_categories[info.risk_category]
        except KeyError:
            raise ConfigurationError(
                f"Risk category {info.risk_category.value} is missing from risk engine config!"
            ) from None
        per_asset[index] = compute_base_asset_statistics(
            group, info, category_info, settlement_period, now
        )

    portfolio = aggregate_portfolio(per_asset.values(), config)
    logger.debug(
        "Portfolio over %d base assets: max_loss=%s max_profit=%s",
        len(per_asset),
        portfolio.max_loss,
        portfolio.max_profit,
    )
    return per_asset, portfolio

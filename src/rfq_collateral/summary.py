from decimal import Decimal
from typing import Mapping, Sequence

import pandas as pd

from .calculator import is_portfolio_inverted
from .data_structures import BaseAssetInfo, RiskCategory, RiskCategoryInfo, RiskReport
from .engine import group_legs_by_base_asset
from .models import ResolvedLeg, select_scenarios, settlement_period_bucket


# ------------------------------------------------------------
# Formatting helpers
# ------------------------------------------------------------


def _format_amount(val: Decimal) -> str:
    return f"{val:,.4f}"


def _format_pct(val: Decimal) -> str:
    return f"{val * 100:+.2f}%"


# ------------------------------------------------------------
# Tables
# ------------------------------------------------------------


def base_asset_frame(report: RiskReport) -> pd.DataFrame:
    rows = []
    for index, stats in sorted(report.base_asset_statistics.items()):
        info = report.base_assets[index]
        rows.append(
            {
                "base_asset": index,
                "risk_category": info.risk_category.value,
                "price": _format_amount(info.price),
                "scenarios": stats.scenario_count,
                "biggest_profit": _format_amount(stats.biggest_profit),
                "biggest_loss": _format_amount(stats.biggest_loss),
                "abs_leg_value": _format_amount(stats.absolute_value_of_legs),
            }
        )
    return pd.DataFrame(
        rows,
        columns=[
            "base_asset",
            "risk_category",
            "price",
            "scenarios",
            "biggest_profit",
            "biggest_loss",
            "abs_leg_value",
        ],
    )


def cases_frame(report: RiskReport) -> pd.DataFrame:
    rows = []
    for case, required in zip(report.cases, report.required_collateral):
        rows.append(
            {
                "legs_multiplier": str(case.legs_multiplier),
                "authority": case.authority_side.value,
                "side": case.quote_side.value,
                "statistic": "max_profit" if is_portfolio_inverted(case) else "max_loss",
                "required_collateral": str(required),
            }
        )
    return pd.DataFrame(
        rows,
        columns=["legs_multiplier", "authority", "side", "statistic", "required_collateral"],
    )


def scenario_frame(
    legs: Sequence[ResolvedLeg],
    base_assets: Mapping[int, BaseAssetInfo],
    risk_categories: Mapping[RiskCategory, RiskCategoryInfo],
    settlement_period: int,
) -> pd.DataFrame:
    """One row per (base asset, scenario) the engine would evaluate."""
    bucket = settlement_period_bucket(settlement_period)
    rows = []
    for index, group in sorted(group_legs_by_base_asset(legs).items()):
        info = base_assets[index]
        category_info = risk_categories[info.risk_category]
        for scenario in select_scenarios(group, category_info, settlement_period):
            rows.append(
                {
                    "base_asset": index,
                    "bucket": bucket,
                    "price_change": _format_pct(scenario.base_asset_price_change),
                    "volatility_change": _format_pct(scenario.volatility_change),
                    "shocked_price": _format_amount(
                        info.price * (1 + scenario.base_asset_price_change)
                    ),
                }
            )
    return pd.DataFrame(
        rows,
        columns=["base_asset", "bucket", "price_change", "volatility_change", "shocked_price"],
    )


# ------------------------------------------------------------
# Text report
# ------------------------------------------------------------


def format_report(report: RiskReport, name: str = "portfolio") -> str:
    lines = [
        f"=== Collateral estimate: {name} ===",
        f"Settlement period: {report.settlement_period}s",
        f"Valued at: {report.evaluated_at}",
        "",
    ]

    assets = base_asset_frame(report)
    if assets.empty:
        lines.append("(no legs)")
    else:
        lines.append(assets.to_string(index=False))
    lines.append("")

    lines.append(f"Max loss:   {_format_amount(report.portfolio.max_loss)}")
    lines.append(f"Max profit: {_format_amount(report.portfolio.max_profit)}")
    lines.append("")

    cases = cases_frame(report)
    if cases.empty:
        lines.append("(no cases)")
    else:
        lines.append(cases.to_string(index=False))
    return "\n".join(lines)

# rfq_collateral/calculator.py
from __future__ import annotations

import asyncio
import logging
import time
from decimal import Decimal
from typing import Callable, Dict, Iterable, List, Optional, Sequence

from .data_structures import (
    AuthoritySide,
    BaseAssetInfo,
    CalculationCase,
    CollateralConfig,
    Leg,
    PortfolioStatistics,
    QuoteSide,
    RiskReport,
)
from .engine import calculate_portfolio_statistics
from .models import ResolvedLeg, resolve_leg
from .sources import (
    BaseAssetRiskProfileProvider,
    InstrumentTypeRegistry,
    PriceOracleReader,
    RiskCategoryTable,
)

logger = logging.getLogger(__name__)


# ------------------------------------------------------------
# Per-case collateral
# ------------------------------------------------------------


def is_portfolio_inverted(case: CalculationCase) -> bool:
    """A bid quote or a taker authority each flip the portfolio's direction."""
    return (case.quote_side == QuoteSide.BID) != (case.authority_side == AuthoritySide.TAKER)


def compute_required_collateral(
    stats: PortfolioStatistics, case: CalculationCase, config: CollateralConfig
) -> Decimal:
    risk = stats.max_profit if is_portfolio_inverted(case) else stats.max_loss
    risk = max(risk, Decimal(0))

    return max(risk * case.legs_multiplier, config.min_collateral)


# ------------------------------------------------------------
# External data
# ------------------------------------------------------------


async def fetch_base_asset_info(
    index: int,
    profiles: BaseAssetRiskProfileProvider,
    oracle: PriceOracleReader,
) -> BaseAssetInfo:
    profile = await profiles.get(index)
    price = await oracle.get_price(profile.oracle_address)
    logger.debug("Base asset %d: category=%s price=%s", index, profile.risk_category.value, price)
    return BaseAssetInfo(index=index, risk_category=profile.risk_category, price=price)


async def fetch_base_asset_infos(
    indices: Iterable[int],
    profiles: BaseAssetRiskProfileProvider,
    oracle: PriceOracleReader,
) -> Dict[int, BaseAssetInfo]:
    """
    Fetch every base asset concurrently.

    The first failure cancels the fetches still in flight and is re-raised
    as is, not wrapped in an ExceptionGroup.
    """
    indices = list(dict.fromkeys(indices))
    try:
        async with asyncio.TaskGroup() as tg:
            tasks = [
                tg.create_task(fetch_base_asset_info(index, profiles, oracle))
                for index in indices
            ]
    except ExceptionGroup as eg:
        raise eg.exceptions[0]
    return {index: task.result() for index, task in zip(indices, tasks)}


def resolve_legs(legs: Iterable[Leg], registry: InstrumentTypeRegistry) -> List[ResolvedLeg]:
    return [resolve_leg(leg, registry.resolve(leg.instrument_program)) for leg in legs]


# ------------------------------------------------------------
# Entry points
# ------------------------------------------------------------


async def evaluate(
    legs: Sequence[Leg],
    cases: Sequence[CalculationCase],
    settlement_period: int,
    *,
    config: CollateralConfig,
    risk_categories: RiskCategoryTable,
    registry: InstrumentTypeRegistry,
    profiles: BaseAssetRiskProfileProvider,
    oracle: PriceOracleReader,
    now: Optional[int] = None,
) -> RiskReport:
    """
    Full risk evaluation of a set of legs.

    Legs are resolved through ``registry`` first, then every unique base
    asset is fetched concurrently. Aggregation only starts once all of them
    are in. ``now`` pins the valuation instant for option expiries; it
    defaults to the wall clock and is shared by the whole run.
    """
    if now is None:
        now = int(time.time())

    resolved = resolve_legs(legs, registry)
    base_assets = await fetch_base_asset_infos(
        (leg.base_asset_index for leg in resolved), profiles, oracle
    )

    per_asset, portfolio = calculate_portfolio_statistics(
        resolved, base_assets, risk_categories, config, settlement_period, now
    )
    required = [compute_required_collateral(portfolio, case, config) for case in cases]

    logger.info(
        "Collateral for %d legs over %d base assets: %s",
        len(resolved),
        len(base_assets),
        ", ".join(str(r) for r in required),
    )
    return RiskReport(
        base_assets=base_assets,
        base_asset_statistics=per_asset,
        portfolio=portfolio,
        cases=list(cases),
        required_collateral=required,
        settlement_period=settlement_period,
        evaluated_at=now,
    )


async def calculate_risk(
    legs: Sequence[Leg],
    cases: Sequence[CalculationCase],
    settlement_period: int,
    *,
    config: CollateralConfig,
    risk_categories: RiskCategoryTable,
    registry: InstrumentTypeRegistry,
    profiles: BaseAssetRiskProfileProvider,
    oracle: PriceOracleReader,
    now: Optional[int] = None,
) -> List[Decimal]:
    """One required-collateral figure per case, in input order."""
    report = await evaluate(
        legs,
        cases,
        settlement_period,
        config=config,
        risk_categories=risk_categories,
        registry=registry,
        profiles=profiles,
        oracle=oracle,
        now=now,
    )
    return report.required_collateral


class CollateralCalculator:
    """
    Binds the risk engine config and external collaborators once.

    Holds no per-call state, so one instance can serve concurrent
    calculations.
    """

    def __init__(
        self,
        config: CollateralConfig,
        risk_categories: RiskCategoryTable,
        registry: InstrumentTypeRegistry,
        profiles: BaseAssetRiskProfileProvider,
        oracle: PriceOracleReader,
        clock: Callable[[], float] = time.time,
    ):
        self.config = config
        self.risk_categories = risk_categories
        self.registry = registry
        self.profiles = profiles
        self.oracle = oracle
        self.clock = clock

    async def evaluate(
        self,
        legs: Sequence[Leg],
        cases: Sequence[CalculationCase],
        settlement_period: int,
    ) -> RiskReport:
        return await evaluate(
            legs,
            cases,
            settlement_period,
            config=self.config,
            risk_categories=self.risk_categories,
            registry=self.registry,
            profiles=self.profiles,
            oracle=self.oracle,
            now=int(self.clock()),
        )

    async def calculate_risk(
        self,
        legs: Sequence[Leg],
        cases: Sequence[CalculationCase],
        settlement_period: int,
    ) -> List[Decimal]:
        report = await self.evaluate(legs, cases, settlement_period)
        return report.required_collateral

    def calculate_risk_sync(
        self,
        legs: Sequence[Leg],
        cases: Sequence[CalculationCase],
        settlement_period: int,
    ) -> List[Decimal]:
        return asyncio.run(self.calculate_risk(legs, cases, settlement_period))

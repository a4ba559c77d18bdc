from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Dict, List, Optional, Tuple, Union

from .constants import (
    DEFAULT_COLLATERAL_FOR_FIXED_QUOTE_AMOUNT_RFQ,
    DEFAULT_COLLATERAL_FOR_VARIABLE_SIZE_RFQ,
    DEFAULT_MIN_COLLATERAL_REQUIREMENT,
    DEFAULT_MINT_DECIMALS,
    DEFAULT_OVERALL_SAFETY_FACTOR,
    DEFAULT_SAFETY_PRICE_SHIFT_FACTOR,
    SETTLEMENT_WINDOW_PERIODS,
)
from .conversions import remove_decimals, to_decimal
from .errors import ConfigurationError, InputError


# ----------------------------------------------------------------------
# Sides and categories
# ----------------------------------------------------------------------


class LegSide(Enum):
    LONG = "long"
    SHORT = "short"


class AuthoritySide(Enum):
    MAKER = "maker"
    TAKER = "taker"


class QuoteSide(Enum):
    BID = "bid"
    ASK = "ask"


class OrderType(Enum):
    BUY = "buy"
    SELL = "sell"
    TWO_WAY = "two-way"


class RiskCategory(Enum):
    VERY_LOW = "very_low"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    VERY_HIGH = "very_high"


# ----------------------------------------------------------------------
# Trade legs
# ----------------------------------------------------------------------


@dataclass(frozen=True)
class Leg:
    """
    One instrument exposure of an RFQ.

    ``amount`` is the unsigned number of instrument units; ``instrument_data``
    is the raw fixed-point payload, interpreted once the registry tells us
    which instrument type ``instrument_program`` is.
    """

    base_asset_index: int
    amount: Decimal
    side: LegSide
    instrument_program: str
    instrument_data: bytes = b""

    def __post_init__(self):
        amount = to_decimal(self.amount)
        if amount < 0:
            raise InputError(
                f"Leg amount must be unsigned, got {amount}; use side for direction"
            )
        object.__setattr__(self, "amount", amount)

    @classmethod
    def from_raw(
        cls,
        base_asset_index: int,
        instrument_amount: int,
        instrument_decimals: int,
        side: LegSide,
        instrument_program: str,
        instrument_data: bytes = b"",
    ) -> "Leg":
        return cls(
            base_asset_index=base_asset_index,
            amount=remove_decimals(instrument_amount, instrument_decimals),
            side=side,
            instrument_program=instrument_program,
            instrument_data=instrument_data,
        )


# ----------------------------------------------------------------------
# Risk parameters
# ----------------------------------------------------------------------


@dataclass(frozen=True)
class Scenario:
    """Relative joint shock: +0.08 price change means the price rises 8%."""

    base_asset_price_change: Decimal
    volatility_change: Decimal

    def __post_init__(self):
        object.__setattr__(
            self, "base_asset_price_change", to_decimal(self.base_asset_price_change)
        )
        object.__setattr__(self, "volatility_change", to_decimal(self.volatility_change))


@dataclass(frozen=True)
class RiskCategoryInfo:
    interest_rate: Decimal
    annualized_30_day_volatility: Decimal
    scenario_per_settlement_period: Tuple[Scenario, ...]

    def __post_init__(self):
        object.__setattr__(self, "interest_rate", to_decimal(self.interest_rate))
        object.__setattr__(
            self,
            "annualized_30_day_volatility",
            to_decimal(self.annualized_30_day_volatility),
        )
        scenarios = tuple(self.scenario_per_settlement_period)
        if len(scenarios) != SETTLEMENT_WINDOW_PERIODS:
            raise ConfigurationError(
                f"Expected {SETTLEMENT_WINDOW_PERIODS} scenarios per settlement "
                f"period, got {len(scenarios)}"
            )
        object.__setattr__(self, "scenario_per_settlement_period", scenarios)


@dataclass(frozen=True)
class BaseAssetRiskProfile:
    index: int
    risk_category: RiskCategory
    oracle_address: str


@dataclass(frozen=True)
class BaseAssetInfo:
    """Risk profile joined with the freshly fetched oracle price."""

    index: int
    risk_category: RiskCategory
    price: Decimal


@dataclass(frozen=True)
class CollateralConfig:
    """
    Risk engine parameters. Collateral amounts are integers in the
    collateral mint's base units.
    """

    safety_price_shift_factor: Decimal = DEFAULT_SAFETY_PRICE_SHIFT_FACTOR
    overall_safety_factor: Decimal = DEFAULT_OVERALL_SAFETY_FACTOR
    min_collateral_requirement: int = DEFAULT_MIN_COLLATERAL_REQUIREMENT
    collateral_mint_decimals: int = DEFAULT_MINT_DECIMALS
    collateral_for_variable_size_rfq_creation: int = DEFAULT_COLLATERAL_FOR_VARIABLE_SIZE_RFQ
    collateral_for_fixed_quote_amount_rfq_creation: int = (
        DEFAULT_COLLATERAL_FOR_FIXED_QUOTE_AMOUNT_RFQ
    )

    def __post_init__(self):
        object.__setattr__(
            self, "safety_price_shift_factor", to_decimal(self.safety_price_shift_factor)
        )
        object.__setattr__(
            self, "overall_safety_factor", to_decimal(self.overall_safety_factor)
        )

    @property
    def min_collateral(self) -> Decimal:
        return remove_decimals(
            self.min_collateral_requirement, self.collateral_mint_decimals
        )


@dataclass(frozen=True)
class CalculationCase:
    legs_multiplier: Decimal
    authority_side: AuthoritySide
    quote_side: QuoteSide

    def __post_init__(self):
        object.__setattr__(self, "legs_multiplier", to_decimal(self.legs_multiplier))


# ----------------------------------------------------------------------
# Statistics
# ----------------------------------------------------------------------


@dataclass(frozen=True)
class BaseAssetStatistics:
    biggest_profit: Decimal
    biggest_loss: Decimal
    absolute_value_of_legs: Decimal
    scenario_count: int = 0


@dataclass(frozen=True)
class PortfolioStatistics:
    """Portfolio-wide worst/best P&L after safety buffers, not clamped."""

    max_loss: Decimal
    max_profit: Decimal


@dataclass
class RiskReport:
    """Everything one ``evaluate`` call produced."""

    base_assets: Dict[int, BaseAssetInfo]
    base_asset_statistics: Dict[int, BaseAssetStatistics]
    portfolio: PortfolioStatistics
    cases: List[CalculationCase]
    required_collateral: List[Decimal]
    settlement_period: int
    evaluated_at: int


# ----------------------------------------------------------------------
# RFQ surface used by the collateral operations
# ----------------------------------------------------------------------


@dataclass(frozen=True)
class FixedSizeNone:
    """Variable-size RFQ: the maker picks the legs multiplier."""


@dataclass(frozen=True)
class FixedSizeBaseAsset:
    legs_multiplier: Decimal

    def __post_init__(self):
        object.__setattr__(self, "legs_multiplier", to_decimal(self.legs_multiplier))


@dataclass(frozen=True)
class FixedSizeQuoteAsset:
    quote_amount: Decimal

    def __post_init__(self):
        object.__setattr__(self, "quote_amount", to_decimal(self.quote_amount))


FixedSize = Union[FixedSizeNone, FixedSizeBaseAsset, FixedSizeQuoteAsset]


@dataclass(frozen=True)
class StandardQuote:
    price: Decimal
    legs_multiplier: Decimal

    def __post_init__(self):
        object.__setattr__(self, "price", to_decimal(self.price))
        object.__setattr__(self, "legs_multiplier", to_decimal(self.legs_multiplier))


@dataclass(frozen=True)
class FixedSizeQuote:
    price: Decimal

    def __post_init__(self):
        object.__setattr__(self, "price", to_decimal(self.price))


Quote = Union[StandardQuote, FixedSizeQuote]


@dataclass(frozen=True)
class Rfq:
    legs: Tuple[Leg, ...]
    fixed_size: FixedSize
    order_type: OrderType
    settlement_period: int

    def __post_init__(self):
        object.__setattr__(self, "legs", tuple(self.legs))


@dataclass(frozen=True)
class Response:
    bid: Optional[Quote] = None
    ask: Optional[Quote] = None

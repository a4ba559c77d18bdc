from .data_structures import (
    LegSide,
    AuthoritySide,
    QuoteSide,
    OrderType,
    RiskCategory,
    Leg,
    Scenario,
    RiskCategoryInfo,
    BaseAssetRiskProfile,
    BaseAssetInfo,
    CollateralConfig,
    CalculationCase,
    BaseAssetStatistics,
    PortfolioStatistics,
    RiskReport,
    FixedSizeNone,
    FixedSizeBaseAsset,
    FixedSizeQuoteAsset,
    StandardQuote,
    FixedSizeQuote,
    Rfq,
    Response,
)
from .errors import (
    RiskEngineError,
    ConfigurationError,
    UnregisteredInstrument,
    DataUnavailableError,
    OracleUnavailable,
    OracleUndecodable,
    InputError,
)
from .models import InstrumentType, OptionType
from .calculator import (
    CollateralCalculator,
    calculate_risk,
    compute_required_collateral,
    evaluate,
)
from .engine import aggregate_portfolio, compute_base_asset_statistics
from .sources import (
    StaticInstrumentRegistry,
    StaticPriceOracle,
    StaticRiskProfileProvider,
    SwitchboardDecimal,
)

# rfq_collateral/constants.py
from decimal import Decimal

SECONDS_PER_YEAR = 365 * 24 * 60 * 60

# Settlement window buckets, in seconds. A period below breakpoint[i] selects
# scenario i, anything longer falls into the last bucket.
SETTLEMENT_WINDOW_PERIODS = 6
SETTLEMENT_WINDOW_BREAKPOINTS = (
    60 * 60,
    4 * 60 * 60,
    12 * 60 * 60,
    24 * 60 * 60,
    48 * 60 * 60,
)

FUTURE_UNDERLYING_AMOUNT_PER_CONTRACT_DECIMALS = 9
OPTION_UNDERLYING_AMOUNT_PER_CONTRACT_DECIMALS = 9
OPTION_STRIKE_PRICE_DECIMALS = 9

LEG_MULTIPLIER_DECIMALS = 9

DEFAULT_MIN_COLLATERAL_REQUIREMENT = 0
DEFAULT_COLLATERAL_FOR_VARIABLE_SIZE_RFQ = 0
DEFAULT_COLLATERAL_FOR_FIXED_QUOTE_AMOUNT_RFQ = 0
DEFAULT_MINT_DECIMALS = 9
DEFAULT_SAFETY_PRICE_SHIFT_FACTOR = Decimal("0")
DEFAULT_OVERALL_SAFETY_FACTOR = Decimal("0")

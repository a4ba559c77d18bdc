# rfq_collateral/operations.py
"""
Collateral estimates for the three moments of an RFQ's life: creation by
the taker, a maker's response, and the taker's confirmation.
"""
import logging
from decimal import Decimal
from typing import List, Optional

from .calculator import CollateralCalculator
from .constants import LEG_MULTIPLIER_DECIMALS
from .conversions import remove_decimals, to_decimal, truncate
from .data_structures import (
    AuthoritySide,
    CalculationCase,
    FixedSizeBaseAsset,
    FixedSizeNone,
    FixedSizeQuote,
    FixedSizeQuoteAsset,
    OrderType,
    Quote,
    QuoteSide,
    Response,
    Rfq,
    StandardQuote,
)
from .errors import InputError

logger = logging.getLogger(__name__)


def extract_legs_multiplier(rfq: Rfq, quote: Quote) -> Decimal:
    """Legs multiplier a quote commits to, given the RFQ's size restriction."""
    fixed_size = rfq.fixed_size

    if isinstance(fixed_size, FixedSizeNone):
        if not isinstance(quote, StandardQuote):
            raise InputError("Fixed size quote cannot be provided to non-fixed size rfq")
        return quote.legs_multiplier

    if isinstance(fixed_size, FixedSizeBaseAsset):
        if not isinstance(quote, FixedSizeQuote):
            raise InputError("Non fixed size quote cannot be provided to fixed size rfq")
        return fixed_size.legs_multiplier

    if isinstance(fixed_size, FixedSizeQuoteAsset):
        if not isinstance(quote, FixedSizeQuote):
            raise InputError("Non fixed size quote cannot be provided to fixed size rfq")
        if quote.price < 0:
            raise InputError("Negative prices are not allowed for fixed quote amount rfq")
        if quote.price == 0:
            raise InputError("Zero price cannot size a fixed quote amount rfq")
        return truncate(fixed_size.quote_amount / quote.price, LEG_MULTIPLIER_DECIMALS)

    raise InputError(f"Invalid fixed size: {fixed_size!r}")


def _taker_sides(order_type: OrderType) -> List[QuoteSide]:
    if order_type == OrderType.BUY:
        return [QuoteSide.ASK]
    if order_type == OrderType.SELL:
        return [QuoteSide.BID]
    if order_type == OrderType.TWO_WAY:
        return [QuoteSide.ASK, QuoteSide.BID]
    raise InputError(f"Invalid order type: {order_type!r}")


async def collateral_for_rfq(calculator: CollateralCalculator, rfq: Rfq) -> Decimal:
    """
    Collateral the taker locks when creating ``rfq``.

    Only base-asset fixed size RFQs are risk-evaluated; the other size
    restrictions use the flat amounts from the risk engine config.
    """
    config = calculator.config
    fixed_size = rfq.fixed_size

    if isinstance(fixed_size, FixedSizeNone):
        return remove_decimals(
            config.collateral_for_variable_size_rfq_creation, config.collateral_mint_decimals
        )
    if isinstance(fixed_size, FixedSizeQuoteAsset):
        return remove_decimals(
            config.collateral_for_fixed_quote_amount_rfq_creation,
            config.collateral_mint_decimals,
        )
    if not isinstance(fixed_size, FixedSizeBaseAsset):
        raise InputError(f"Invalid fixed size: {fixed_size!r}")

    cases = [
        CalculationCase(fixed_size.legs_multiplier, AuthoritySide.TAKER, side)
        for side in _taker_sides(rfq.order_type)
    ]
    risks = await calculator.calculate_risk(list(rfq.legs), cases, rfq.settlement_period)
    return max(risks, default=Decimal(0))


async def collateral_for_response(
    calculator: CollateralCalculator,
    rfq: Rfq,
    bid: Optional[Quote] = None,
    ask: Optional[Quote] = None,
) -> Decimal:
    """Collateral a maker locks when answering ``rfq`` with ``bid`` and/or ``ask``."""
    cases = []
    for side, quote in ((QuoteSide.BID, bid), (QuoteSide.ASK, ask)):
        if quote is None:
            continue
        multiplier = extract_legs_multiplier(rfq, quote)
        cases.append(CalculationCase(multiplier, AuthoritySide.MAKER, side))

    if not cases:
        raise InputError("A response needs at least one of bid or ask")

    risks = await calculator.calculate_risk(list(rfq.legs), cases, rfq.settlement_period)
    return max(risks)


async def collateral_for_confirmation(
    calculator: CollateralCalculator,
    rfq: Rfq,
    response: Response,
    side: QuoteSide,
    override_legs_multiplier=None,
) -> Decimal:
    """Collateral the taker locks when confirming ``side`` of ``response``."""
    if override_legs_multiplier is None:
        confirmed = response.bid if side == QuoteSide.BID else response.ask
        if confirmed is None:
            raise InputError("Cannot confirm a missing quote!")
        legs_multiplier = extract_legs_multiplier(rfq, confirmed)
    else:
        legs_multiplier = truncate(to_decimal(override_legs_multiplier), LEG_MULTIPLIER_DECIMALS)

    case = CalculationCase(legs_multiplier, AuthoritySide.TAKER, side)
    logger.debug("Confirmation case: %s", case)
    [required] = await calculator.calculate_risk(list(rfq.legs), [case], rfq.settlement_period)
    return required

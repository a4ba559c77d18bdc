# rfq_collateral/models/instruments.py
from __future__ import annotations

import struct
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Union

from ..constants import (
    FUTURE_UNDERLYING_AMOUNT_PER_CONTRACT_DECIMALS,
    OPTION_STRIKE_PRICE_DECIMALS,
    OPTION_UNDERLYING_AMOUNT_PER_CONTRACT_DECIMALS,
)
from ..conversions import add_decimals, remove_decimals, to_decimal
from ..data_structures import Leg, LegSide
from ..errors import ConfigurationError, InputError


class InstrumentType(Enum):
    SPOT = "spot"
    OPTION = "option"
    TERM_FUTURE = "term-future"
    PERP_FUTURE = "perp-future"

    def to_number(self) -> int:
        return _TYPE_TO_NUMBER[self]

    @classmethod
    def from_number(cls, value: int) -> "InstrumentType":
        for instrument_type, number in _TYPE_TO_NUMBER.items():
            if number == value:
                return instrument_type
        raise ConfigurationError(f"Unknown instrument type: {value}")


_TYPE_TO_NUMBER = {
    InstrumentType.SPOT: 1,
    InstrumentType.OPTION: 2,
    InstrumentType.TERM_FUTURE: 3,
    InstrumentType.PERP_FUTURE: 4,
}


class OptionType(Enum):
    CALL = 0
    PUT = 1


# ---------- Instrument variants ----------


@dataclass(frozen=True)
class SpotInstrument:
    pass


@dataclass(frozen=True)
class TermFutureInstrument:
    underlying_amount_per_contract: Decimal


@dataclass(frozen=True)
class PerpFutureInstrument:
    underlying_amount_per_contract: Decimal


@dataclass(frozen=True)
class OptionInstrument:
    option_type: OptionType
    underlying_amount_per_contract: Decimal
    strike_price: Decimal
    expiration_timestamp: int


Instrument = Union[
    SpotInstrument, TermFutureInstrument, PerpFutureInstrument, OptionInstrument
]


@dataclass(frozen=True)
class ResolvedLeg:
    """A leg whose instrument program was resolved and whose data was decoded."""

    base_asset_index: int
    amount: Decimal
    side: LegSide
    instrument: Instrument

    @property
    def signed_amount(self) -> Decimal:
        # P&L viewpoint: long exposure counts negative.
        return -self.amount if self.side == LegSide.LONG else self.amount

    @property
    def is_option(self) -> bool:
        return isinstance(self.instrument, OptionInstrument)


# ---------- Binary layouts (little-endian, Borsh) ----------

# u64 underlying_amount_per_contract
_FUTURE_LAYOUT = struct.Struct("<Q")
# u8 option_type, u64 amount, u8 amount decimals, u64 strike, u8 strike decimals, i64 expiration
_OPTION_LAYOUT = struct.Struct("<BQBQBq")


def decode_instrument_data(instrument_type: InstrumentType, data: bytes) -> Instrument:
    """Decode a leg's raw instrument payload into its typed variant."""
    if instrument_type == InstrumentType.SPOT:
        return SpotInstrument()

    if instrument_type in (InstrumentType.TERM_FUTURE, InstrumentType.PERP_FUTURE):
        try:
            (raw_amount,) = _FUTURE_LAYOUT.unpack_from(data)
        except struct.error as e:
            raise InputError(f"Malformed {instrument_type.value} instrument data: {e}") from e
        amount = remove_decimals(raw_amount, FUTURE_UNDERLYING_AMOUNT_PER_CONTRACT_DECIMALS)
        if instrument_type == InstrumentType.TERM_FUTURE:
            return TermFutureInstrument(underlying_amount_per_contract=amount)
        return PerpFutureInstrument(underlying_amount_per_contract=amount)

    if instrument_type == InstrumentType.OPTION:
        try:
            (
                raw_option_type,
                raw_amount,
                amount_decimals,
                raw_strike,
                strike_decimals,
                expiration,
            ) = _OPTION_LAYOUT.unpack_from(data)
        except struct.error as e:
            raise InputError(f"Malformed option instrument data: {e}") from e
        try:
            option_type = OptionType(raw_option_type)
        except ValueError as e:
            raise InputError(f"Unknown option type: {raw_option_type}") from e
        return OptionInstrument(
            option_type=option_type,
            underlying_amount_per_contract=remove_decimals(raw_amount, amount_decimals),
            strike_price=remove_decimals(raw_strike, strike_decimals),
            expiration_timestamp=expiration,
        )

    raise ConfigurationError(f"Unknown instrument type: {instrument_type}")


def encode_future_data(underlying_amount_per_contract) -> bytes:
    raw = add_decimals(underlying_amount_per_contract, FUTURE_UNDERLYING_AMOUNT_PER_CONTRACT_DECIMALS)
    try:
        return _FUTURE_LAYOUT.pack(raw)
    except struct.error as e:
        raise InputError(f"Future amount out of range: {e}") from e


def encode_option_data(
    option_type: OptionType,
    underlying_amount_per_contract,
    strike_price,
    expiration_timestamp: int,
    amount_decimals: int = OPTION_UNDERLYING_AMOUNT_PER_CONTRACT_DECIMALS,
    strike_decimals: int = OPTION_STRIKE_PRICE_DECIMALS,
) -> bytes:
    try:
        return _OPTION_LAYOUT.pack(
            option_type.value,
            add_decimals(to_decimal(underlying_amount_per_contract), amount_decimals),
            amount_decimals,
            add_decimals(to_decimal(strike_price), strike_decimals),
            strike_decimals,
            int(expiration_timestamp),
        )
    except struct.error as e:
        raise InputError(f"Option fields out of range: {e}") from e


def resolve_leg(leg: Leg, instrument_type: InstrumentType) -> ResolvedLeg:
    return ResolvedLeg(
        base_asset_index=leg.base_asset_index,
        amount=leg.amount,
        side=leg.side,
        instrument=decode_instrument_data(instrument_type, leg.instrument_data),
    )

# rfq_collateral/sources.py
"""
External collaborators of the calculator.

The calculator only sees the Protocols below. The static implementations
serve configs, the CLI and tests; a blockchain client supplies its own.
"""
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Mapping, Optional, Protocol, Union

from .conversions import to_decimal
from .data_structures import BaseAssetRiskProfile, RiskCategory, RiskCategoryInfo
from .errors import (
    DataUnavailableError,
    OracleUnavailable,
    OracleUndecodable,
    UnregisteredInstrument,
)
from .models import InstrumentType


# ------------------------------------------------------------
# Interfaces
# ------------------------------------------------------------


class PriceOracleReader(Protocol):
    async def get_price(self, oracle_address: str) -> Decimal:
        ...


class BaseAssetRiskProfileProvider(Protocol):
    async def get(self, base_asset_index: int) -> BaseAssetRiskProfile:
        ...


class InstrumentTypeRegistry(Protocol):
    def resolve(self, program_id: str) -> InstrumentType:
        ...


RiskCategoryTable = Mapping[RiskCategory, RiskCategoryInfo]


# ------------------------------------------------------------
# Oracle values
# ------------------------------------------------------------


@dataclass(frozen=True)
class SwitchboardDecimal:
    """Aggregator value: ``mantissa * 10 ** -scale``."""

    mantissa: int
    scale: int

    def to_decimal(self) -> Decimal:
        return Decimal(int(self.mantissa)).scaleb(-int(self.scale))


OracleValue = Union[Decimal, int, float, str, SwitchboardDecimal, Mapping, None]


def decode_oracle_value(oracle_address: str, value: OracleValue) -> Decimal:
    if value is None:
        raise OracleUndecodable(oracle_address)
    try:
        if isinstance(value, SwitchboardDecimal):
            price = value.to_decimal()
        elif isinstance(value, Mapping):
            price = SwitchboardDecimal(int(value["mantissa"]), int(value["scale"])).to_decimal()
        else:
            price = to_decimal(value)
    except (KeyError, TypeError, ValueError, InvalidOperation) as e:
        raise OracleUndecodable(oracle_address) from e

    if not price.is_finite():
        raise OracleUndecodable(oracle_address)
    return price


# ------------------------------------------------------------
# Static implementations
# ------------------------------------------------------------


class StaticPriceOracle:
    def __init__(self, prices: Mapping[str, OracleValue]):
        self._prices = dict(prices)

    async def get_price(self, oracle_address: str) -> Decimal:
        if oracle_address not in self._prices:
            raise OracleUnavailable(oracle_address)
        return decode_oracle_value(oracle_address, self._prices[oracle_address])


class StaticRiskProfileProvider:
    def __init__(self, profiles: Mapping[int, BaseAssetRiskProfile]):
        self._profiles = dict(profiles)

    async def get(self, base_asset_index: int) -> BaseAssetRiskProfile:
        try:
            return self._profiles[base_asset_index]
        except KeyError:
            raise DataUnavailableError(
                f"Base asset {base_asset_index} has no risk profile"
            ) from None


class StaticInstrumentRegistry:
    def __init__(self, mapping: Optional[Mapping[str, InstrumentType]] = None):
        self._mapping = dict(mapping or {})

    def register(self, program_id: str, instrument_type: InstrumentType):
        self._mapping[program_id] = instrument_type

    def resolve(self, program_id: str) -> InstrumentType:
        try:
            return self._mapping[program_id]
        except KeyError:
            raise UnregisteredInstrument(program_id) from None

    def __len__(self):
        return len(self._mapping)

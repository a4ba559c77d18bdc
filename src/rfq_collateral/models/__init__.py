from .instruments import (
    InstrumentType,
    OptionType,
    SpotInstrument,
    TermFutureInstrument,
    PerpFutureInstrument,
    OptionInstrument,
    Instrument,
    ResolvedLeg,
    decode_instrument_data,
    encode_future_data,
    encode_option_data,
    resolve_leg,
)
from .pricing import black_scholes, value_unit, value_leg
from .scenarios import select_scenarios, settlement_period_bucket

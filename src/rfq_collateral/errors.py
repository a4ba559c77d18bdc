# rfq_collateral/errors.py


class RiskEngineError(Exception):
    """Base class for every failure of a collateral calculation."""


# ---------- Configuration ----------


class ConfigurationError(RiskEngineError, ValueError):
    pass


class UnregisteredInstrument(ConfigurationError):
    def __init__(self, program_id: str):
        super().__init__(
            f"Instrument {program_id} is missing from risk engine config!"
        )
        self.program_id = program_id


# ---------- External data ----------


class DataUnavailableError(RiskEngineError):
    pass


class OracleUnavailable(DataUnavailableError):
    def __init__(self, oracle_address: str):
        super().__init__(
            f"Expected price aggregator at address {oracle_address}, but the account is missing"
        )
        self.oracle_address = oracle_address


class OracleUndecodable(DataUnavailableError):
    def __init__(self, oracle_address: str):
        super().__init__(
            f"Price from the aggregator at address {oracle_address} can't be parsed!"
        )
        self.oracle_address = oracle_address


# ---------- Caller input ----------


class InputError(RiskEngineError, ValueError):
    pass

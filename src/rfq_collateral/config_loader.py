# rfq_collateral/config_loader.py
"""
YAML configuration loader.

One ``build_*`` function per component, each taking the matching section of
the parsed YAML document. ``load_config`` assembles them into a
``LoadedConfig``.
"""
import logging
import re
import time
from dataclasses import dataclass, field
from typing import Dict, List, Optional

import yaml

from .calculator import CollateralCalculator
from .data_structures import (
    AuthoritySide,
    BaseAssetRiskProfile,
    CalculationCase,
    CollateralConfig,
    Leg,
    LegSide,
    QuoteSide,
    RiskCategory,
    RiskCategoryInfo,
    Scenario,
)
from .errors import ConfigurationError, InputError
from .models import InstrumentType, OptionType, encode_future_data, encode_option_data
from .sources import StaticInstrumentRegistry, StaticPriceOracle, StaticRiskProfileProvider

logger = logging.getLogger(__name__)


# ------------------------------------------------------------
# Helpers
# ------------------------------------------------------------


def _enum_value(enum_cls, value, what: str):
    # veryLow / VeryHigh -> very_low / very_high
    name = re.sub(r"([a-z0-9])([A-Z])", r"\1_\2", str(value)).lower()
    try:
        return enum_cls(name)
    except ValueError:
        raise ConfigurationError(f"Unknown {what} type: {value}") from None


# ------------------------------------------------------------
# Component builders
# ------------------------------------------------------------


def build_collateral_config(cfg: dict) -> CollateralConfig:
    return CollateralConfig(
        safety_price_shift_factor=cfg.get("safety_price_shift_factor", 0),
        overall_safety_factor=cfg.get("overall_safety_factor", 0),
        min_collateral_requirement=int(cfg.get("min_collateral_requirement", 0)),
        collateral_mint_decimals=int(cfg.get("collateral_mint_decimals", 9)),
        collateral_for_variable_size_rfq_creation=int(
            cfg.get("collateral_for_variable_size_rfq_creation", 0)
        ),
        collateral_for_fixed_quote_amount_rfq_creation=int(
            cfg.get("collateral_for_fixed_quote_amount_rfq_creation", 0)
        ),
    )


def build_scenario(cfg) -> Scenario:
    # Either {price: .., volatility: ..} or a [price, volatility] pair
    if isinstance(cfg, dict):
        return Scenario(cfg.get("price", 0), cfg.get("volatility", 0))
    price, volatility = cfg
    return Scenario(price, volatility)


def build_risk_category_info(cfg: dict) -> RiskCategoryInfo:
    return RiskCategoryInfo(
        interest_rate=cfg.get("interest_rate", 0),
        annualized_30_day_volatility=cfg.get("annualized_30_day_volatility", 0),
        scenario_per_settlement_period=[build_scenario(s) for s in cfg.get("scenarios", [])],
    )


def build_risk_category_table(cfg: dict) -> Dict[RiskCategory, RiskCategoryInfo]:
    return {
        _enum_value(RiskCategory, name, "risk category"): build_risk_category_info(info)
        for name, info in cfg.items()
    }


def build_registry(cfg: dict) -> StaticInstrumentRegistry:
    registry = StaticInstrumentRegistry()
    for program_id, t in cfg.items():
        if isinstance(t, int):
            registry.register(str(program_id), InstrumentType.from_number(t))
        else:
            registry.register(str(program_id), _enum_value(InstrumentType, t, "instrument"))
    return registry


def build_base_assets(cfg: list):
    """Risk profiles plus a static oracle holding each asset's configured price."""
    profiles = {}
    prices = {}
    for entry in cfg:
        index = int(entry["index"])
        oracle_address = str(entry.get("oracle", f"oracle-{index}"))
        profiles[index] = BaseAssetRiskProfile(
            index=index,
            risk_category=_enum_value(RiskCategory, entry["risk_category"], "risk category"),
            oracle_address=oracle_address,
        )
        if "price" in entry:
            prices[oracle_address] = entry["price"]
    return StaticRiskProfileProvider(profiles), StaticPriceOracle(prices)


def build_instrument_data(cfg: dict) -> bytes:
    if "data" in cfg:
        try:
            return bytes.fromhex(cfg["data"])
        except (TypeError, ValueError) as e:
            raise InputError(f"Instrument data is not valid hex: {cfg['data']!r}") from e

    if "option" in cfg:
        o = cfg["option"]
        try:
            option_type = OptionType[str(o.get("type", "call")).upper()]
        except KeyError:
            raise InputError(f"Unknown option type: {o.get('type')}") from None
        return encode_option_data(
            option_type,
            o.get("amount_per_contract", 1),
            o["strike"],
            int(o["expiration"]),
        )

    if "future" in cfg:
        return encode_future_data(cfg["future"].get("amount_per_contract", 1))

    return b""


def build_leg(cfg: dict) -> Leg:
    return Leg(
        base_asset_index=int(cfg["base_asset"]),
        amount=cfg["amount"],
        side=_enum_value(LegSide, cfg.get("side", "long"), "leg side"),
        instrument_program=str(cfg["instrument"]),
        instrument_data=build_instrument_data(cfg),
    )


def build_case(cfg: dict) -> CalculationCase:
    return CalculationCase(
        legs_multiplier=cfg.get("legs_multiplier", 1),
        authority_side=_enum_value(AuthoritySide, cfg.get("authority", "taker"), "authority side"),
        quote_side=_enum_value(QuoteSide, cfg.get("side", "ask"), "quote side"),
    )


# ------------------------------------------------------------
# Whole document
# ------------------------------------------------------------


@dataclass
class LoadedConfig:
    name: str
    config: CollateralConfig
    risk_categories: Dict[RiskCategory, RiskCategoryInfo]
    registry: StaticInstrumentRegistry
    profiles: StaticRiskProfileProvider
    oracle: StaticPriceOracle
    legs: List[Leg] = field(default_factory=list)
    cases: List[CalculationCase] = field(default_factory=list)
    settlement_period: int = 0
    now: Optional[int] = None

    def calculator(self) -> CollateralCalculator:
        clock = time.time if self.now is None else (lambda: self.now)
        return CollateralCalculator(
            config=self.config,
            risk_categories=self.risk_categories,
            registry=self.registry,
            profiles=self.profiles,
            oracle=self.oracle,
            clock=clock,
        )


def build_loaded_config(cfg: dict) -> LoadedConfig:
    profiles, oracle = build_base_assets(cfg.get("base_assets", []))
    loaded = LoadedConfig(
        name=cfg.get("name", "portfolio"),
        config=build_collateral_config(cfg.get("collateral", {})),
        risk_categories=build_risk_category_table(cfg.get("risk_categories", {})),
        registry=build_registry(cfg.get("instruments", {})),
        profiles=profiles,
        oracle=oracle,
        legs=[build_leg(leg) for leg in cfg.get("legs", [])],
        cases=[build_case(case) for case in cfg.get("cases", [])],
        settlement_period=int(cfg.get("settlement_period", 0)),
        now=int(cfg["now"]) if "now" in cfg else None,
    )
    logger.debug(
        "Loaded %s: %d legs, %d cases, %d instrument programs",
        loaded.name,
        len(loaded.legs),
        len(loaded.cases),
        len(loaded.registry),
    )
    return loaded


def load_config(config_file: str) -> LoadedConfig:
    with open(config_file, "r") as f:
        cfg = yaml.safe_load(f) or {}
    return build_loaded_config(cfg)

import argparse
import asyncio
import logging

from .calculator import fetch_base_asset_infos, resolve_legs
from .config_loader import load_config
from .errors import RiskEngineError
from .summary import format_report, scenario_frame

logger = logging.getLogger(__name__)


def estimate(config_file: str):
    loaded = load_config(config_file)
    calculator = loaded.calculator()
    report = asyncio.run(
        calculator.evaluate(loaded.legs, loaded.cases, loaded.settlement_period)
    )
    print(format_report(report, loaded.name))


def scenarios(config_file: str):
    loaded = load_config(config_file)
    legs = resolve_legs(loaded.legs, loaded.registry)
    base_assets = asyncio.run(
        fetch_base_asset_infos(
            (leg.base_asset_index for leg in legs), loaded.profiles, loaded.oracle
        )
    )
    frame = scenario_frame(legs, base_assets, loaded.risk_categories, loaded.settlement_period)
    print(f"\n=== Scenarios: {loaded.name} ===")
    print("(no legs)" if frame.empty else frame.to_string(index=False))


def describe(config_file: str):
    loaded = load_config(config_file)
    cfg = loaded.config
    print(f"\n=== Config: {loaded.name} ===")
    print(f"Safety price shift factor: {cfg.safety_price_shift_factor}")
    print(f"Overall safety factor:     {cfg.overall_safety_factor}")
    print(f"Min collateral:            {cfg.min_collateral}")
    print(f"Collateral mint decimals:  {cfg.collateral_mint_decimals}")
    print(f"Risk categories: {[c.value for c in loaded.risk_categories]}")
    print(f"Instrument programs: {len(loaded.registry)}")
    print(f"Legs: {len(loaded.legs)}  Cases: {len(loaded.cases)}")
    print(f"Settlement period: {loaded.settlement_period}s")


def main(argv=None):
    parser = argparse.ArgumentParser(description="RFQ collateral estimator")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    sub = parser.add_subparsers(dest="cmd")

    # ------------------------------------------------------------------
    # estimate
    # ------------------------------------------------------------------
    p_est = sub.add_parser("estimate", help="Required collateral for each case in a YAML config")
    p_est.add_argument("config", type=str, help="Path to .yaml config file")

    # ------------------------------------------------------------------
    # scenarios
    # ------------------------------------------------------------------
    p_scn = sub.add_parser("scenarios", help="Shock scenarios evaluated per base asset")
    p_scn.add_argument("config", type=str, help="Path to .yaml config file")

    # ------------------------------------------------------------------
    # describe
    # ------------------------------------------------------------------
    p_desc = sub.add_parser("describe", help="Summarise a YAML config")
    p_desc.add_argument("config", type=str, help="Path to .yaml config file")

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    commands = {"estimate": estimate, "scenarios": scenarios, "describe": describe}
    if args.cmd not in commands:
        parser.print_help()
        return 0

    try:
        commands[args.cmd](args.config)
    except RiskEngineError as e:
        logger.error("%s", e)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

import asyncio
from decimal import Decimal
from pathlib import Path

from rfq_collateral import AuthoritySide, CalculationCase, Leg, LegSide, QuoteSide, RiskCategory
from rfq_collateral.cli import main
from rfq_collateral.summary import base_asset_frame, cases_frame, format_report

EXAMPLE_CONFIG = Path(__file__).resolve().parent.parent / "configs" / "btc_straddle.yaml"

CASES = [
    CalculationCase(1, AuthoritySide.TAKER, QuoteSide.BID),
    CalculationCase(2, AuthoritySide.MAKER, QuoteSide.BID),
]


def _evaluate(calculator, legs, cases):
    return asyncio.run(calculator.evaluate(legs, cases, 0))


def test_frames(make_calculator):
    calculator = make_calculator({0: (RiskCategory.MEDIUM, 100)})
    legs = [Leg(0, Decimal(1), LegSide.SHORT, "SpotInstrumentProgram")]
    report = _evaluate(calculator, legs, CASES)

    assets = base_asset_frame(report)
    cases = cases_frame(report)

    assert list(assets["base_asset"]) == [0]
    assert assets.loc[0, "abs_leg_value"] == "100.0000"
    assert list(cases["statistic"]) == ["max_loss", "max_profit"]
    assert [Decimal(r) for r in cases["required_collateral"]] == [10, 20]


def test_format_report(make_calculator):
    calculator = make_calculator({0: (RiskCategory.MEDIUM, 100)})
    legs = [Leg(0, Decimal(1), LegSide.SHORT, "SpotInstrumentProgram")]
    text = format_report(_evaluate(calculator, legs, CASES), "short_btc")

    assert text.startswith("=== Collateral estimate: short_btc ===")
    assert "Max loss:   10.0000" in text
    assert "Max profit: 10.0000" in text


def test_format_empty_report(make_calculator):
    text = format_report(_evaluate(make_calculator({}), [], []))

    assert "(no legs)" in text
    assert "(no cases)" in text


# ------------------------------------------------------------
# CLI
# ------------------------------------------------------------


def test_cli_estimate(capsys):
    assert main(["estimate", str(EXAMPLE_CONFIG)]) == 0

    out = capsys.readouterr().out
    assert "=== Collateral estimate: btc_straddle_hedged ===" in out
    assert "max_profit" in out


def test_cli_scenarios(capsys):
    assert main(["scenarios", str(EXAMPLE_CONFIG)]) == 0

    out = capsys.readouterr().out
    assert "=== Scenarios: btc_straddle_hedged ===" in out
    assert "shocked_price" in out


def test_cli_describe(capsys):
    assert main(["describe", str(EXAMPLE_CONFIG)]) == 0

    out = capsys.readouterr().out
    assert "=== Config: btc_straddle_hedged ===" in out
    assert "Legs: 4  Cases: 3" in out


def test_cli_without_command(capsys):
    assert main([]) == 0
    assert "estimate" in capsys.readouterr().out


def test_cli_reports_engine_errors(tmp_path):
    config = tmp_path / "broken.yaml"
    config.write_text(
        "\n".join(
            [
                "name: broken",
                "instruments: {}",
                "base_assets:",
                "  - {index: 0, risk_category: medium, price: 100}",
                "legs:",
                "  - {base_asset: 0, amount: 1, side: short, instrument: Unknown}",
                "cases:",
                "  - {legs_multiplier: 1}",
            ]
        )
    )

    assert main(["estimate", str(config)]) == 1

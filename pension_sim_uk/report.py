"""Template-based comparison report generator.

Builds a ReportContext from simulation results and renders an HTML report
using Python f-strings (no Jinja2 dependency).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from html import escape
from pathlib import Path

from pension_sim_uk.comparison import (
    best_totals,
    lowest_tax,
    run_comparison,
    snapshot_at,
    total_tax_paid,
    validate_target_ages,
)
from pension_sim_uk.params import DEFAULT_RULES, HUNDRED, TaxRuleSet, round_money, to_money
from pension_sim_uk.simulation import YearSnapshot, validate_adhoc_withdrawals
from pension_sim_uk.strategies import build_all_strategies

logger = logging.getLogger(__name__)

REPORT_PREFIX = "pension-strategy-comparison"

# ---------------------------------------------------------------------------
# Format helpers
# ---------------------------------------------------------------------------

def fmt_gbp(v: Decimal) -> str:
    """Decimal("1234.5") → "£1,234.50" """
    return f"£{v:,.2f}"


def fmt_pct(v: Decimal) -> str:
    """Decimal("0.04") → "4.00%" """
    return f"{round_money(v * HUNDRED)}%"


# ---------------------------------------------------------------------------
# ReportContext
# ---------------------------------------------------------------------------

@dataclass
class ReportContext:
    # Input parameters
    savings: Decimal
    pension: Decimal
    required_amounts: list[Decimal]
    target_ages: list[int]
    adhoc: dict[int, Decimal]
    rules: TaxRuleSet
    generated_at: datetime

    # Simulation results: {strategy_name: [timeline per required amount]}
    results: dict[str, list[list[YearSnapshot]]]
    descriptions: dict[str, str] = field(default_factory=dict)


def build_report_context(
    savings,
    pension,
    required_amounts,
    target_ages=None,
    adhoc_withdrawals=None,
    rules: TaxRuleSet = DEFAULT_RULES,
    contribute: bool = True,
    generated_at: datetime | None = None,
) -> ReportContext:
    """Validate inputs, run every strategy for every amount and collect the results.

    target_ages defaults to [rules.end_age] when None or empty.
    """
    savings = to_money(savings, "savings")
    pension = to_money(pension, "pension")
    if required_amounts is None:
        raise TypeError("required_amounts must not be None")
    amounts = [to_money(a, "required_amounts item") for a in required_amounts]
    ages = validate_target_ages(target_ages, rules) if target_ages else [rules.end_age]
    adhoc = validate_adhoc_withdrawals(adhoc_withdrawals)

    results = run_comparison(savings, pension, amounts, adhoc, rules, contribute=contribute)
    descriptions = {s.name: s.description for s in build_all_strategies(contribute=contribute)}
    return ReportContext(
        savings=savings,
        pension=pension,
        required_amounts=amounts,
        target_ages=ages,
        adhoc=adhoc,
        rules=rules,
        generated_at=generated_at or datetime.now(),
        results=results,
        descriptions=descriptions,
    )


# ---------------------------------------------------------------------------
# Sections
# ---------------------------------------------------------------------------

_STYLE = """\
        body { font-family: Arial, sans-serif; margin: 20px; background-color: #f5f5f5; }
        .container { max-width: 1200px; margin: 0 auto; background-color: white; padding: 20px; border-radius: 8px; box-shadow: 0 2px 4px rgba(0,0,0,0.1); }
        h1 { color: #2c3e50; text-align: center; margin-bottom: 30px; }
        .summary { background-color: #ecf0f1; padding: 15px; border-radius: 5px; margin-bottom: 30px; }
        .summary h2 { color: #34495e; margin-top: 0; }
        .summary p { margin: 8px 0; font-size: 16px; }
        h2.age-title { color: #2c3e50; margin-top: 24px; }
        table { width: 100%; border-collapse: collapse; margin-top: 10px; }
        th, td { border: 1px solid #ddd; padding: 8px; text-align: right; }
        th { background-color: #3498db; color: white; font-weight: bold; }
        tr:nth-child(even) { background-color: #f2f2f2; }
        tr:hover { background-color: #e8f4f8; }
        .strategy-1 { background-color: #ffeaa7 !important; }
        .strategy-2 { background-color: #fab1a0 !important; }
        .strategy-3 { background-color: #fd79a8 !important; }
        .strategy-3a { background-color: #fdcb6e !important; }
        .strategy-4 { background-color: #6c5ce7 !important; color: white; }
        .strategy-5 { background-color: #00b894 !important; color: white; }
        .currency { font-family: 'Courier New', monospace; }
        .strategy-column { text-align: left; font-weight: bold; }
        .best { outline: 3px solid #ffffff; box-shadow: inset 0 0 0 2px #ffffff; font-weight: bold; }
        .footer { margin-top: 30px; padding: 15px; background-color: #d5dbdb; border-radius: 5px; font-size: 14px; color: #2c3e50; }
"""


def _row_class(strategy_name: str) -> str:
    """Strategy3A → strategy-3a"""
    return "strategy-" + strategy_name.removeprefix("Strategy").lower()


def _render_head() -> str:
    return f"""<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>Pension Strategy Comparison Report</title>
    <style>
{_STYLE}    </style>
</head>"""


def _render_summary(ctx: ReportContext) -> str:
    amounts = ", ".join(fmt_gbp(a) for a in ctx.required_amounts)
    ages = ", ".join(str(a) for a in ctx.target_ages)
    if ctx.adhoc:
        adhoc = "; ".join(f"Age {age}: {fmt_gbp(amt)}" for age, amt in sorted(ctx.adhoc.items()))
    else:
        adhoc = "None"
    return f"""        <div class="summary">
            <h2>Initial Parameters</h2>
            <p><strong>Initial Savings:</strong> {fmt_gbp(ctx.savings)}</p>
            <p><strong>Initial Pension:</strong> {fmt_gbp(ctx.pension)}</p>
            <p><strong>Example Annual Spending Amounts:</strong> {amounts}</p>
            <p><strong>Target Ages:</strong> {ages}</p>
            <p><strong>Ad hoc withdrawals applied:</strong> {adhoc}</p>
        </div>"""


def _render_table(
    ctx: ReportContext, title: str, cell_values: dict[str, list[Decimal]], best: list[Decimal],
) -> str:
    header = "\n".join(f"                    <th>{fmt_gbp(a)}</th>" for a in ctx.required_amounts)
    rows = []
    for sname, values in cell_values.items():
        cells = []
        for value, best_value in zip(values, best):
            extra = " best" if value == best_value else ""
            cells.append(f'                    <td class="currency{extra}">{fmt_gbp(value)}</td>')
        rows.append(
            f'                <tr class="{_row_class(sname)}">\n'
            f'                    <td class="strategy-column">{escape(sname)}</td>\n'
            + "\n".join(cells)
            + "\n                </tr>"
        )
    return f"""        <h2 class="age-title">{title}</h2>
        <table>
            <thead>
                <tr>
                    <th class="strategy-column">Strategy</th>
{header}
                </tr>
            </thead>
            <tbody>
{chr(10).join(rows)}
            </tbody>
        </table>"""


def _render_age_table(ctx: ReportContext, age: int) -> str:
    values = {
        sname: [snapshot_at(t, age, ctx.rules).total_end for t in timelines]
        for sname, timelines in ctx.results.items()
    }
    return _render_table(ctx, f"Results at Age {age}", values, best_totals(ctx.results, age, ctx.rules))


def _render_tax_table(ctx: ReportContext) -> str:
    values = {
        sname: [total_tax_paid(t) for t in timelines]
        for sname, timelines in ctx.results.items()
    }
    title = f"Total Tax Paid, Age {ctx.rules.start_age} to {ctx.rules.end_age}"
    return _render_table(ctx, title, values, lowest_tax(ctx.results))


def _render_footer(ctx: ReportContext) -> str:
    r = ctx.rules
    descriptions = "\n".join(
        f"                <li><strong>{escape(name)}:</strong> {escape(text)}</li>"
        for name, text in ctx.descriptions.items()
    )
    return f"""        <div class="footer">
            <h3>Strategy Descriptions:</h3>
            <ul>
{descriptions}
            </ul>
            <h3>Assumptions</h3>
            <ul>
                <li><strong>Pension growth rate above inflation:</strong> {fmt_pct(r.growth_rate)}</li>
                <li><strong>Personal allowance:</strong> {fmt_gbp(r.personal_allowance)}</li>
                <li><strong>State pension (annual):</strong> {fmt_gbp(r.state_pension)} from age {r.state_pension_age}</li>
                <li><strong>Basic rate:</strong> {fmt_pct(r.basic_rate)}</li>
                <li><strong>Basic-rate band width:</strong> {fmt_gbp(r.basic_rate_band)}</li>
                <li><strong>Savings interest:</strong> None - but no inflation either</li>
            </ul>
            <p><em>Generated on: {ctx.generated_at:%Y-%m-%d %H:%M:%S}</em></p>
        </div>"""


def render_report(ctx: ReportContext) -> str:
    """Render a complete HTML report from a ReportContext."""
    body = [
        "        <h1>Pension Strategy Comparison Report</h1>",
        _render_summary(ctx),
        *(_render_age_table(ctx, age) for age in ctx.target_ages),
        _render_tax_table(ctx),
        _render_footer(ctx),
    ]
    return "\n".join([
        _render_head(),
        "<body>",
        '    <div class="container">',
        "\n".join(body),
        "    </div>",
        "</body>",
        "</html>",
    ]) + "\n"


def save_report(content: str, output_dir: Path, now: datetime | None = None) -> Path:
    """Write the report as <prefix>-YYYYMMDD-HHMMSS.html and return its path."""
    now = now or datetime.now()
    output_dir.mkdir(parents=True, exist_ok=True)
    path = output_dir / f"{REPORT_PREFIX}-{now:%Y%m%d-%H%M%S}.html"
    path.write_text(content, encoding="utf-8")
    logger.info("Pension strategy comparison report saved to: %s", path.resolve())
    return path

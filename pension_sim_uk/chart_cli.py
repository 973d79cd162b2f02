"""CLI entry point for chart generation."""

import sys
from pathlib import Path

from pension_sim_uk import log_config
from pension_sim_uk.charts import plot_account_split, plot_cumulative_tax, plot_trajectory
from pension_sim_uk.config import create_parser, build_rules, load_config, parse_adhoc_withdrawals, parse_money, resolve
from pension_sim_uk.simulation import simulate_strategy
from pension_sim_uk.strategies import build_all_strategies


def _build_parser():
    parser = create_parser("Pension drawdown chart generation")
    parser.add_argument(
        "--output", type=Path, default=Path("reports/charts"),
        help="Output directory (default: reports/charts)",
    )
    parser.add_argument(
        "--name", type=str, default="",
        help="Output filename suffix (e.g. 23000 → trajectory-23000.png)",
    )
    return parser


def main():
    parser = _build_parser()
    args = parser.parse_args()
    log_config.setup(verbose=args.verbose)
    config_file = load_config(args.config)
    r = resolve(args, config_file)
    try:
        rules = build_rules(config_file)
        savings = parse_money(r["savings"], "savings")
        pension = parse_money(r["pension"], "pension")
        required = parse_money(r["required"], "required")
        adhoc = parse_adhoc_withdrawals(r["adhoc_withdrawals"])
    except (TypeError, ValueError) as e:
        parser.error(str(e))

    print(f"Simulating {rules.start_age}→{rules.end_age} at £{required:,.2f}/year...", file=sys.stderr)
    results = {
        strategy.name: simulate_strategy(strategy, savings, pension, required, adhoc, rules)
        for strategy in build_all_strategies(contribute=not r["no_contribution"])
    }

    paths = [
        plot_trajectory(results, args.output, args.name, event_markers=adhoc),
        plot_cumulative_tax(results, args.output, args.name),
        plot_account_split(results, args.output, args.name),
    ]
    for p in paths:
        print(f"  → {p}", file=sys.stderr)


if __name__ == "__main__":
    main()

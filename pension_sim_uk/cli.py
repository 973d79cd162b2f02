"""CLI entry point for single simulation (year-by-year timeline per strategy)."""

import argparse
import sys
from decimal import Decimal

from pension_sim_uk import log_config
from pension_sim_uk.comparison import total_tax_paid
from pension_sim_uk.config import parse_adhoc_withdrawals, parse_args, parse_money
from pension_sim_uk.params import TaxRuleSet
from pension_sim_uk.simulation import YearSnapshot, simulate_strategy
from pension_sim_uk.strategies import build_all_strategies


def _fmt(v: Decimal) -> str:
    return f"£{v:,.2f}"


def _print_header(savings: Decimal, pension: Decimal, required: Decimal,
                  rules: TaxRuleSet, adhoc: dict[int, Decimal]):
    print("=" * 100)
    print(f"Pension drawdown simulation (age {rules.start_age}-{rules.end_age}, {rules.years} years)")
    print(f"  Savings: {_fmt(savings)} / Pension: {_fmt(pension)} / Required net income: {_fmt(required)}")
    print(f"  Growth {rules.growth_rate * 100:.2f}% / Personal allowance {_fmt(rules.personal_allowance)} / "
          f"State pension {_fmt(rules.state_pension)} from {rules.state_pension_age}")
    if adhoc:
        parts = [f"{age}:{_fmt(amount)}" for age, amount in sorted(adhoc.items())]
        print(f"  Ad hoc withdrawals: {', '.join(parts)}")
    print("=" * 100)


def _print_timeline(name: str, description: str, timeline: list[YearSnapshot]):
    print(f"\n[{name}] {description}")
    header = (
        f"{'Age':>4} {'Pension start':>15} {'Pension end':>15} {'Savings start':>15} "
        f"{'Savings end':>15} {'Total end':>15} {'Tax':>11} {'Extra':>11}"
    )
    print("-" * len(header))
    print(header)
    print("-" * len(header))
    for s in timeline:
        print(
            f"{s.age:>4} {s.pension_start:>15,.2f} {s.pension_end:>15,.2f} {s.savings_start:>15,.2f} "
            f"{s.savings_end:>15,.2f} {s.total_end:>15,.2f} {s.tax_paid:>11,.2f} {s.extra_spending:>11,.2f}"
        )


def _print_summary(results: list[tuple[str, list[YearSnapshot]]]):
    print("\n" + "=" * 100)
    print("Summary at end age")
    print("=" * 100)
    for name, timeline in results:
        last = timeline[-1]
        print(f"  {name:<12} total {_fmt(last.total_end):>16}   lifetime tax {_fmt(total_tax_paid(timeline)):>14}")


def _add_args(parser: argparse.ArgumentParser):
    parser.add_argument("--strategy", type=str, default=None,
                        help="Only show one strategy (e.g. Strategy3A). Default: all")
    parser.add_argument("--summary-only", action="store_true", help="Skip the year-by-year tables")


def main():
    r, rules, args = parse_args("UK pension drawdown simulation", _add_args)
    log_config.setup(verbose=args.verbose)

    try:
        savings = parse_money(r["savings"], "savings")
        pension = parse_money(r["pension"], "pension")
        required = parse_money(r["required"], "required")
        adhoc = parse_adhoc_withdrawals(r["adhoc_withdrawals"])
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        raise SystemExit(1)

    strategies = build_all_strategies(contribute=not r["no_contribution"])
    if args.strategy:
        strategies = [s for s in strategies if s.name.lower() == args.strategy.lower()]
        if not strategies:
            print(f"Unknown strategy: {args.strategy}", file=sys.stderr)
            raise SystemExit(2)

    _print_header(savings, pension, required, rules, adhoc)

    results = []
    for strategy in strategies:
        try:
            timeline = simulate_strategy(strategy, savings, pension, required, adhoc, rules)
        except (TypeError, ValueError) as e:
            print(f"Error: {e}", file=sys.stderr)
            raise SystemExit(1)
        results.append((strategy.name, timeline))
        if not args.summary_only:
            _print_timeline(strategy.name, strategy.description, timeline)

    _print_summary(results)


if __name__ == "__main__":
    main()

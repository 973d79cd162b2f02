"""Run every strategy across several spending levels for side-by-side comparison."""

import logging
from collections.abc import Iterable, Mapping
from decimal import Decimal

from pension_sim_uk.params import DEFAULT_RULES, ZERO, TaxRuleSet, to_money
from pension_sim_uk.simulation import (
    YearSnapshot,
    simulate_strategy,
    validate_adhoc_withdrawals,
    validate_params,
)
from pension_sim_uk.strategies import build_all_strategies

logger = logging.getLogger(__name__)


def validate_target_ages(target_ages: Iterable[int] | None, rules: TaxRuleSet = DEFAULT_RULES) -> list[int]:
    """Target ages must be non-empty and inside the simulated range."""
    if target_ages is None:
        raise TypeError("target_ages must not be None")
    ages = list(target_ages)
    if not ages:
        raise ValueError("target_ages must not be empty")
    for age in ages:
        if not rules.start_age <= age <= rules.end_age:
            raise ValueError(
                f"target age {age} must be between {rules.start_age} and {rules.end_age} inclusive"
            )
    return ages


def run_comparison(
    savings,
    pension,
    required_amounts: Iterable,
    adhoc_withdrawals: Mapping | None = None,
    rules: TaxRuleSet = DEFAULT_RULES,
    contribute: bool = True,
) -> dict[str, list[list[YearSnapshot]]]:
    """Simulate all six strategies for each required amount.

    Returns {strategy_name: [timeline for required_amounts[0], ...]} in
    strategy order. Every input is validated before anything runs.
    """
    if required_amounts is None:
        raise TypeError("required_amounts must not be None")
    amounts = [to_money(a, "required_amounts item") for a in required_amounts]
    if not amounts:
        raise ValueError("required_amounts must not be empty")
    for amount in amounts:
        validate_params(savings, pension, amount)
    validate_adhoc_withdrawals(adhoc_withdrawals)

    results: dict[str, list[list[YearSnapshot]]] = {}
    for strategy in build_all_strategies(contribute=contribute):
        logger.info("Simulating %s for %d spending levels", strategy.name, len(amounts))
        results[strategy.name] = [
            simulate_strategy(strategy, savings, pension, amount, adhoc_withdrawals, rules)
            for amount in amounts
        ]
    return results


def snapshot_at(timeline: list[YearSnapshot], age: int, rules: TaxRuleSet = DEFAULT_RULES) -> YearSnapshot:
    """Snapshot for an age, clamped to the ends of the timeline."""
    idx = min(max(age - rules.start_age, 0), len(timeline) - 1)
    return timeline[idx]


def total_tax_paid(timeline: list[YearSnapshot], up_to_age: int | None = None) -> Decimal:
    """Sum of tax paid over the timeline, optionally only up to an age."""
    return sum(
        (s.tax_paid for s in timeline if up_to_age is None or s.age <= up_to_age),
        ZERO,
    )


def best_totals(
    results: dict[str, list[list[YearSnapshot]]], age: int, rules: TaxRuleSet = DEFAULT_RULES,
) -> list[Decimal]:
    """Highest total wealth at `age` for each spending column."""
    columns = zip(*results.values())
    return [
        max(snapshot_at(timeline, age, rules).total_end for timeline in column)
        for column in columns
    ]


def lowest_tax(
    results: dict[str, list[list[YearSnapshot]]], up_to_age: int | None = None,
) -> list[Decimal]:
    """Lowest cumulative tax for each spending column."""
    columns = zip(*results.values())
    return [min(total_tax_paid(timeline, up_to_age) for timeline in column) for column in columns]

"""Year-by-year drawdown simulation engine."""

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from decimal import Decimal

from pension_sim_uk.params import (
    DEFAULT_RULES,
    MIN_AGE,
    ONE,
    ZERO,
    TaxRuleSet,
    add,
    multiply,
    round_money,
    subtract,
    to_money,
)
from pension_sim_uk.strategies import (
    AllowanceFirst,
    AllowanceFirstWithContribution,
    BasicBandFiller,
    DrawdownState,
    PensionFirstUfpls,
    SavingsFirstLumpSum,
    SavingsFirstUfpls,
    Strategy,
)
from pension_sim_uk.tax import allowance_remaining, relief_at_source, state_pension_income

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class YearSnapshot:
    """Balances at the start and end of one simulated age, rounded to pence."""

    age: int
    pension_start: Decimal
    pension_end: Decimal
    savings_start: Decimal
    savings_end: Decimal
    tax_paid: Decimal = ZERO
    extra_spending: Decimal = ZERO

    def __post_init__(self):
        if self.age < MIN_AGE:
            raise ValueError(f"age must be >= {MIN_AGE}, got {self.age}")
        for name in (
            "pension_start",
            "pension_end",
            "savings_start",
            "savings_end",
            "tax_paid",
            "extra_spending",
        ):
            value = getattr(self, name)
            if value is None:
                raise TypeError(f"{name} must not be None")
            if value < 0:
                raise ValueError(f"{name} must be >= 0")

    @property
    def total_start(self) -> Decimal:
        return self.pension_start + self.savings_start

    @property
    def total_end(self) -> Decimal:
        return self.pension_end + self.savings_end


@dataclass(frozen=True)
class TransferResult:
    """Outcome of moving money from savings into a pension."""

    savings_end: Decimal
    pension_end: Decimal
    gross_contribution_added: Decimal
    tax_relief_added: Decimal


def validate_params(savings, pension, required_amount) -> tuple[Decimal, Decimal, Decimal]:
    """Check starting balances and required amount. Returns them as Decimals.

    None raises TypeError, a negative amount raises ValueError.
    """
    savings = to_money(savings, "savings")
    pension = to_money(pension, "pension")
    required_amount = to_money(required_amount, "required_amount")
    if savings < 0:
        raise ValueError("savings must be >= 0")
    if pension < 0:
        raise ValueError("pension must be >= 0")
    if required_amount < 0:
        raise ValueError("required_amount must be >= 0")
    return savings, pension, required_amount


def validate_adhoc_withdrawals(adhoc: Mapping | None) -> dict[int, Decimal]:
    """Check the per-age extra withdrawals. Returns a normalized copy."""
    if adhoc is None:
        return {}
    result: dict[int, Decimal] = {}
    for age, amount in adhoc.items():
        amount = to_money(amount, f"ad hoc withdrawal for age {age}")
        if amount < 0:
            raise ValueError(f"Ad hoc withdrawal for age {age} must be >= 0")
        result[int(age)] = amount
    return result


def simulate_strategy(
    strategy: Strategy,
    savings,
    pension,
    required_amount,
    adhoc_withdrawals: Mapping | None = None,
    rules: TaxRuleSet = DEFAULT_RULES,
) -> list[YearSnapshot]:
    """Run a drawdown strategy from rules.start_age to rules.end_age inclusive.

    Each year: state pension offsets the need, the strategy draws from savings
    and pension, then the pension grows by rules.growth_rate. Shortfalls are
    not errors; the unmet part of the need is dropped.
    """
    savings, pension, required_amount = validate_params(savings, pension, required_amount)
    adhoc = validate_adhoc_withdrawals(adhoc_withdrawals)
    ignored = sorted(a for a in adhoc if not rules.start_age <= a <= rules.end_age)
    if ignored:
        logger.warning("Ignoring ad hoc withdrawals outside ages %d-%d: %s",
                       rules.start_age, rules.end_age, ignored)

    growth_factor = add(ONE, rules.growth_rate)
    state = DrawdownState(pension=pension, savings=savings)
    timeline: list[YearSnapshot] = []

    for age in range(rules.start_age, rules.end_age + 1):
        pension_start = round_money(state.pension)
        savings_start = round_money(state.savings)
        extra = adhoc.get(age, ZERO)

        state.age = age
        state.need = max(ZERO, required_amount + extra - state_pension_income(age, rules))
        state.allowance = allowance_remaining(age, rules)
        state.tax_paid = ZERO

        strategy.draw(state, rules)
        if state.need > 0:
            logger.debug("%s age %d: shortfall %s", strategy.name, age, round_money(state.need))

        state.pension = multiply(max(ZERO, state.pension), growth_factor)
        state.savings = max(ZERO, state.savings)

        timeline.append(YearSnapshot(
            age=age,
            pension_start=pension_start,
            pension_end=round_money(state.pension),
            savings_start=savings_start,
            savings_end=round_money(state.savings),
            tax_paid=round_money(state.tax_paid),
            extra_spending=round_money(extra),
        ))

    return timeline


def strategy1(savings, pension, required_amount, adhoc_withdrawals=None,
              rules: TaxRuleSet = DEFAULT_RULES) -> list[YearSnapshot]:
    """Savings first, then a one-off 25% lump sum, then taxable drawdown."""
    return simulate_strategy(SavingsFirstLumpSum(), savings, pension, required_amount,
                             adhoc_withdrawals, rules)


def strategy2(savings, pension, required_amount, adhoc_withdrawals=None,
              rules: TaxRuleSet = DEFAULT_RULES) -> list[YearSnapshot]:
    """Savings first, then UFPLS drawdown."""
    return simulate_strategy(SavingsFirstUfpls(), savings, pension, required_amount,
                             adhoc_withdrawals, rules)


def strategy3(savings, pension, required_amount, adhoc_withdrawals=None,
              rules: TaxRuleSet = DEFAULT_RULES) -> list[YearSnapshot]:
    """Tax-free pension within allowance, then savings, then taxed UFPLS."""
    return simulate_strategy(AllowanceFirst(), savings, pension, required_amount,
                             adhoc_withdrawals, rules)


def strategy3a(savings, pension, required_amount, adhoc_withdrawals=None,
               rules: TaxRuleSet = DEFAULT_RULES, contribute: bool = True) -> list[YearSnapshot]:
    """Strategy 3 plus an annual relief-at-source contribution from savings."""
    return simulate_strategy(AllowanceFirstWithContribution(contribute=contribute),
                             savings, pension, required_amount, adhoc_withdrawals, rules)


def strategy4(savings, pension, required_amount, adhoc_withdrawals=None,
              rules: TaxRuleSet = DEFAULT_RULES) -> list[YearSnapshot]:
    """Fill the allowance and basic-rate band every year; bank the surplus."""
    return simulate_strategy(BasicBandFiller(), savings, pension, required_amount,
                             adhoc_withdrawals, rules)


def strategy5(savings, pension, required_amount, adhoc_withdrawals=None,
              rules: TaxRuleSet = DEFAULT_RULES) -> list[YearSnapshot]:
    """Pension first via UFPLS; savings only cover a shortfall."""
    return simulate_strategy(PensionFirstUfpls(), savings, pension, required_amount,
                             adhoc_withdrawals, rules)


def contribute_from_savings_to_pension(
    savings,
    pension,
    requested_net,
    age: int,
    apply_cap: bool,
    rules: TaxRuleSet = DEFAULT_RULES,
) -> TransferResult:
    """Move a net amount from savings into a pension with relief at source.

    Below the relief cutoff age, paying 2,880 from savings adds 3,600 to the
    pension (720 relief). From the cutoff age the amount moves 1:1. With
    apply_cap the net amount is limited to the no-income cap (2,880).
    """
    savings = to_money(savings, "savings")
    pension = to_money(pension, "pension")
    requested_net = to_money(requested_net, "requested_net")
    if savings < 0 or pension < 0 or requested_net < 0:
        raise ValueError("balances and requested amount must be >= 0")

    if savings == 0 or requested_net == 0:
        return TransferResult(round_money(savings), round_money(pension),
                              round_money(ZERO), round_money(ZERO))

    net, gross = relief_at_source(requested_net, savings, age, rules, apply_cap)
    relief = subtract(gross, net)
    return TransferResult(
        savings_end=round_money(savings - net),
        pension_end=round_money(pension + gross),
        gross_contribution_added=round_money(gross),
        tax_relief_added=round_money(relief),
    )

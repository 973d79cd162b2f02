"""Drawdown strategy classes.

Every strategy is a different ordering of the same few draw primitives. The
primitives mutate a DrawdownState that belongs to a single simulation run, so
strategy instances themselves carry no per-run state and can be reused.
"""

from dataclasses import dataclass
from decimal import Decimal

from pension_sim_uk.params import (
    ZERO,
    TaxRuleSet,
    add,
    divide,
    multiply,
    round_money,
)
from pension_sim_uk.tax import (
    basic_band_remaining,
    relief_gross,
    taxable_gross_for_net,
    taxable_tax,
    ufpls_gross_for_net,
    ufpls_tax,
)


@dataclass
class DrawdownState:
    """Running balances for one simulation run.

    need, allowance and tax_paid are reset every year by the year loop;
    lump_sum_taken is set at most once and never reset.
    """

    pension: Decimal
    savings: Decimal
    age: int = 0
    need: Decimal = ZERO
    allowance: Decimal = ZERO
    tax_paid: Decimal = ZERO
    lump_sum_taken: bool = False


def _cap_to_balance(amount: Decimal, balance: Decimal) -> Decimal:
    """Round a withdrawal to pence; a draw that would empty the pot takes all of it."""
    if amount >= balance:
        return balance
    return min(round_money(amount), balance)


# ---------------------------------------------------------------------------
# Draw primitives
# ---------------------------------------------------------------------------

def draw_savings(state: DrawdownState) -> None:
    """Cover as much of the remaining need as savings allow."""
    taken = min(state.need, state.savings)
    state.savings -= taken
    state.need -= taken


def spend_net(state: DrawdownState, net: Decimal, bank_surplus: bool = False) -> None:
    """Apply net pension proceeds to the need; optionally bank any surplus in savings."""
    spent = min(net, state.need)
    state.need -= spent
    surplus = net - spent
    if bank_surplus and surplus > 0:
        state.savings += surplus


def take_lump_sum(state: DrawdownState, rules: TaxRuleSet) -> None:
    """Move the one-off tax-free lump sum (25% of pension) into savings."""
    if state.need <= 0 or state.lump_sum_taken or state.pension <= 0:
        return
    lump = round_money(multiply(state.pension, rules.tax_free_fraction))
    state.pension -= lump
    state.savings += lump
    state.lump_sum_taken = True


def withdraw_within_allowance(
    state: DrawdownState, rules: TaxRuleSet, limit: Decimal | None = None,
) -> Decimal:
    """Zero-tax UFPLS withdrawal keeping the taxed 75% inside the allowance.

    Draws up to `limit` gross when given, otherwise as much as the allowance
    permits. Returns the net received, which equals the gross.
    """
    if state.pension <= 0:
        return ZERO
    cap = divide(state.allowance, rules.taxed_fraction)
    if limit is not None:
        cap = min(cap, limit)
    gross = _cap_to_balance(cap, state.pension)
    if gross <= 0:
        return ZERO
    taxable = multiply(gross, rules.taxed_fraction)
    state.pension -= gross
    state.allowance = max(ZERO, state.allowance - min(taxable, state.allowance))
    return gross


def withdraw_ufpls(state: DrawdownState, rules: TaxRuleSet, gross_target: Decimal) -> Decimal:
    """UFPLS withdrawal of `gross_target` (capped at the pension). Returns net received."""
    if state.pension <= 0:
        return ZERO
    gross = _cap_to_balance(gross_target, state.pension)
    if gross <= 0:
        return ZERO
    tax, allowance_used = ufpls_tax(gross, state.allowance, rules)
    state.pension -= gross
    state.allowance = max(ZERO, state.allowance - allowance_used)
    state.tax_paid += tax
    return gross - tax


def withdraw_ufpls_for_need(state: DrawdownState, rules: TaxRuleSet) -> Decimal:
    """UFPLS withdrawal sized to net the remaining need. Returns net received."""
    if state.need <= 0:
        return ZERO
    return withdraw_ufpls(state, rules, ufpls_gross_for_net(state.need, state.allowance, rules))


def withdraw_taxable_for_need(state: DrawdownState, rules: TaxRuleSet) -> Decimal:
    """Fully taxable withdrawal sized to net the remaining need. Returns net received."""
    if state.need <= 0 or state.pension <= 0:
        return ZERO
    gross = _cap_to_balance(
        taxable_gross_for_net(state.need, state.allowance, rules), state.pension,
    )
    net, tax = taxable_tax(gross, state.allowance, rules)
    state.pension -= gross
    state.allowance = max(ZERO, state.allowance - min(gross, state.allowance))
    state.tax_paid += tax
    return net


def contribute_net(state: DrawdownState, rules: TaxRuleSet, requested: Decimal) -> Decimal:
    """Pay up to `requested` net from savings into pension with relief at source.

    Capped at available savings and at the no-income limit. Returns the gross
    amount added to the pension.
    """
    if state.savings <= 0 or requested <= 0:
        return ZERO
    net = min(requested, state.savings, rules.net_contribution_cap)
    gross = relief_gross(net, rules)
    state.savings -= net
    state.pension += gross
    return gross


# ---------------------------------------------------------------------------
# Strategies
# ---------------------------------------------------------------------------

class Strategy:
    """Base class for drawdown strategies."""

    name: str = ""
    description: str = ""

    def draw(self, state: DrawdownState, rules: TaxRuleSet) -> None:
        """Apply this year's withdrawals to state. Growth is applied by the caller."""
        raise NotImplementedError

    def __repr__(self):
        return f"{type(self).__name__}()"


class SavingsFirstLumpSum(Strategy):
    name = "Strategy1"
    description = (
        "Use savings first. When savings are gone, take a one-off 25% tax-free "
        "lump sum into savings. When that is spent, draw the remaining pension "
        "taxed above the personal allowance."
    )

    def draw(self, state, rules):
        draw_savings(state)
        take_lump_sum(state, rules)
        draw_savings(state)
        net = withdraw_taxable_for_need(state, rules)
        spend_net(state, net)


class SavingsFirstUfpls(Strategy):
    name = "Strategy2"
    description = (
        "Use savings first, then draw from pension with 25% tax-free and 75% taxed."
    )

    def draw(self, state, rules):
        draw_savings(state)
        net = withdraw_ufpls_for_need(state, rules)
        spend_net(state, net)


class AllowanceFirst(Strategy):
    name = "Strategy3"
    description = (
        "Draw from pension while staying inside the personal allowance, use savings "
        "for the rest. When savings run out, draw pension 25% tax-free, 75% taxed."
    )

    def draw(self, state, rules):
        net = withdraw_within_allowance(state, rules, limit=state.need)
        spend_net(state, net)
        draw_savings(state)
        net = withdraw_ufpls_for_need(state, rules)
        spend_net(state, net)
        draw_savings(state)


class AllowanceFirstWithContribution(AllowanceFirst):
    name = "Strategy3A"
    description = (
        "Same as Strategy 3 but also pay the no-income maximum (3,600 gross) from "
        "savings into the pension each year while savings last."
    )

    def __init__(self, contribute: bool = True):
        self.contribute = contribute

    def draw(self, state, rules):
        if self.contribute:
            contribute_net(state, rules, rules.net_contribution_cap)
        super().draw(state, rules)

    def __repr__(self):
        return f"{type(self).__name__}(contribute={self.contribute})"


class BasicBandFiller(Strategy):
    name = "Strategy4"
    description = (
        "Draw the most possible without going into the higher-rate band, "
        "25% tax-free and 75% taxed. Anything not spent goes into savings."
    )

    def draw(self, state, rules):
        net_total = withdraw_within_allowance(state, rules)
        band = basic_band_remaining(state.age, rules)
        if state.pension > 0 and band > 0:
            # max(0, 0.75 * G - allowance) = band
            gross_target = divide(add(band, state.allowance), rules.taxed_fraction)
            net_total += withdraw_ufpls(state, rules, gross_target)
        spend_net(state, net_total, bank_surplus=True)
        draw_savings(state)


class PensionFirstUfpls(Strategy):
    name = "Strategy5"
    description = (
        "Draw from pension 25% tax-free, 75% taxed, and avoid touching savings "
        "except to cover a shortfall."
    )

    def draw(self, state, rules):
        net = withdraw_ufpls_for_need(state, rules)
        spend_net(state, net, bank_surplus=True)
        draw_savings(state)


def build_all_strategies(contribute: bool = True) -> list[Strategy]:
    """All six strategies in report order."""
    return [
        SavingsFirstLumpSum(),
        SavingsFirstUfpls(),
        AllowanceFirst(),
        AllowanceFirstWithContribution(contribute=contribute),
        BasicBandFiller(),
        PensionFirstUfpls(),
    ]

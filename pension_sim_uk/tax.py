"""UK income tax calculations for pension withdrawals."""

from decimal import Decimal

from pension_sim_uk.params import (
    ZERO,
    TaxRuleSet,
    divide,
    multiply,
    round_money,
    subtract,
)


def state_pension_income(age: int, rules: TaxRuleSet) -> Decimal:
    """Annual state pension received at this age (0 before state pension age)."""
    if age >= rules.state_pension_age:
        return rules.state_pension
    return ZERO


def allowance_remaining(age: int, rules: TaxRuleSet) -> Decimal:
    """Personal allowance left after state pension income is taxed first."""
    return max(ZERO, rules.personal_allowance - state_pension_income(age, rules))


def basic_band_remaining(age: int, rules: TaxRuleSet) -> Decimal:
    """Basic-rate band left after state pension above the allowance uses part of it."""
    taxable_state_pension = max(ZERO, state_pension_income(age, rules) - rules.personal_allowance)
    return max(ZERO, rules.basic_rate_band - taxable_state_pension)


def ufpls_gross_for_net(net: Decimal, allowance: Decimal, rules: TaxRuleSet) -> Decimal:
    """Gross UFPLS withdrawal needed to receive `net` after tax (unrounded).

    Only the taxed fraction counts against the allowance, so up to
    allowance / 0.75 can be drawn tax-free. Above that:
        net = 0.85 * gross + 0.20 * allowance
    """
    if net <= divide(allowance, rules.taxed_fraction):
        return net
    adjusted = max(ZERO, subtract(net, multiply(allowance, rules.basic_rate)))
    return divide(adjusted, rules.ufpls_net_factor)


def ufpls_tax(gross: Decimal, allowance: Decimal, rules: TaxRuleSet) -> tuple[Decimal, Decimal]:
    """Tax on a UFPLS withdrawal. Returns (tax rounded to pence, allowance used)."""
    taxable = multiply(gross, rules.taxed_fraction)
    allowance_used = min(taxable, allowance)
    above_allowance = max(ZERO, taxable - allowance_used)
    return round_money(multiply(above_allowance, rules.basic_rate)), allowance_used


def taxable_gross_for_net(net: Decimal, allowance: Decimal, rules: TaxRuleSet) -> Decimal:
    """Gross needed to net `net` from a withdrawal taxed in full above the allowance.

    Used once the 25% lump sum has been taken and nothing else is tax-free.
    """
    if net <= allowance:
        return net
    return allowance + divide(net - allowance, rules.net_rate)


def taxable_tax(gross: Decimal, allowance: Decimal, rules: TaxRuleSet) -> tuple[Decimal, Decimal]:
    """Tax on a fully taxable withdrawal. Returns (net received, tax rounded to pence)."""
    within_allowance = min(gross, allowance)
    basic = max(ZERO, gross - within_allowance)
    net = within_allowance + multiply(basic, rules.net_rate)
    return net, round_money(multiply(basic, rules.basic_rate))


def relief_gross(net: Decimal, rules: TaxRuleSet) -> Decimal:
    """Gross credited to the pension for a net contribution with basic-rate relief (unrounded)."""
    return divide(net, rules.net_rate)


def relief_at_source(
    requested_net: Decimal, savings: Decimal, age: int, rules: TaxRuleSet, apply_cap: bool,
) -> tuple[Decimal, Decimal]:
    """Net paid from savings and gross credited to pension for a contribution (unrounded).

    The net amount is capped at savings and, with apply_cap, at the no-income
    limit after relief. From the relief cutoff age the contribution moves 1:1.
    """
    net = min(requested_net, savings)
    if age >= rules.relief_cutoff_age:
        return net, net
    if apply_cap:
        net = min(net, rules.net_contribution_cap)
    return net, relief_gross(net, rules)

"""UK Pension Drawdown Simulation Package."""

from pension_sim_uk.params import (
    TaxRuleSet,
    DEFAULT_RULES,
    MIN_AGE,
    WORKING_CONTEXT,
    project_balance,
    round_money,
)
from pension_sim_uk.strategies import (
    Strategy,
    DrawdownState,
    SavingsFirstLumpSum,
    SavingsFirstUfpls,
    AllowanceFirst,
    AllowanceFirstWithContribution,
    BasicBandFiller,
    PensionFirstUfpls,
    build_all_strategies,
)
from pension_sim_uk.simulation import (
    YearSnapshot,
    TransferResult,
    simulate_strategy,
    strategy1,
    strategy2,
    strategy3,
    strategy3a,
    strategy4,
    strategy5,
    contribute_from_savings_to_pension,
    validate_params,
    validate_adhoc_withdrawals,
)
from pension_sim_uk.comparison import (
    run_comparison,
    validate_target_ages,
    snapshot_at,
    best_totals,
    total_tax_paid,
)
from pension_sim_uk.tax import (
    state_pension_income,
    allowance_remaining,
    basic_band_remaining,
    ufpls_gross_for_net,
    ufpls_tax,
    taxable_gross_for_net,
    taxable_tax,
    relief_gross,
    relief_at_source,
)

__all__ = [
    "TaxRuleSet",
    "DEFAULT_RULES",
    "MIN_AGE",
    "WORKING_CONTEXT",
    "project_balance",
    "round_money",
    "Strategy",
    "DrawdownState",
    "SavingsFirstLumpSum",
    "SavingsFirstUfpls",
    "AllowanceFirst",
    "AllowanceFirstWithContribution",
    "BasicBandFiller",
    "PensionFirstUfpls",
    "build_all_strategies",
    "YearSnapshot",
    "TransferResult",
    "simulate_strategy",
    "strategy1",
    "strategy2",
    "strategy3",
    "strategy3a",
    "strategy4",
    "strategy5",
    "contribute_from_savings_to_pension",
    "validate_params",
    "validate_adhoc_withdrawals",
    "run_comparison",
    "validate_target_ages",
    "snapshot_at",
    "best_totals",
    "total_tax_paid",
    "state_pension_income",
    "allowance_remaining",
    "basic_band_remaining",
    "ufpls_gross_for_net",
    "ufpls_tax",
    "taxable_gross_for_net",
    "taxable_tax",
    "relief_gross",
    "relief_at_source",
]

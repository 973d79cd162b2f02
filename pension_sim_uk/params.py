"""Tax rule set and decimal money helpers."""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Context, Decimal, InvalidOperation

# Working precision for every multiply/divide in the model (12 significant digits).
WORKING_CONTEXT = Context(prec=12, rounding=ROUND_HALF_UP)

ZERO = Decimal("0")
ONE = Decimal("1")
HUNDRED = Decimal("100")
CENT = Decimal("0.01")

MIN_AGE = 55  # normal minimum pension age


def multiply(a: Decimal, b: Decimal) -> Decimal:
    return WORKING_CONTEXT.multiply(a, b)


def divide(a: Decimal, b: Decimal) -> Decimal:
    return WORKING_CONTEXT.divide(a, b)


def add(a: Decimal, b: Decimal) -> Decimal:
    return WORKING_CONTEXT.add(a, b)


def subtract(a: Decimal, b: Decimal) -> Decimal:
    return WORKING_CONTEXT.subtract(a, b)


def round_money(value: Decimal) -> Decimal:
    """Round to pence, half-up."""
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def to_money(value, name: str) -> Decimal:
    """Convert a monetary argument to a finite Decimal.

    Floats go through str() so 0.1 stays 0.1. None raises TypeError so callers
    can tell a missing argument from an invalid one; NaN and infinities raise
    ValueError.
    """
    money = _to_decimal(value, name)
    if not money.is_finite():
        raise ValueError(f"{name} must be a finite number")
    return money


def _to_decimal(value, name: str) -> Decimal:
    if value is None:
        raise TypeError(f"{name} must not be None")
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        raise TypeError(f"{name} must be a number, got bool")
    if isinstance(value, int):
        return Decimal(value)
    if isinstance(value, str):
        try:
            return Decimal(value.strip())
        except InvalidOperation:
            raise ValueError(f"{name} is not a number: {value!r}") from None
    if isinstance(value, float):
        return Decimal(str(value))
    raise TypeError(f"{name} must be a number, got {type(value).__name__}")


@dataclass(frozen=True)
class TaxRuleSet:
    """UK income tax and pension rules for one simulation run.

    Frozen so that a rule set shared across strategies and threads can't be
    changed mid-run; use dataclasses.replace() to derive variants.
    """

    # Simulation range (inclusive)
    start_age: int = 61
    end_age: int = 99

    # Pension growth above inflation. Savings earn nothing.
    growth_rate: Decimal = Decimal("0.04")

    # Income tax
    personal_allowance: Decimal = Decimal("12570.00")
    basic_rate: Decimal = Decimal("0.20")
    basic_rate_band: Decimal = Decimal("37700.00")

    # State pension
    state_pension: Decimal = Decimal("11973.00")
    state_pension_age: int = 67

    # Share of each UFPLS draw (and of the one-off lump sum) that is tax-free
    tax_free_fraction: Decimal = Decimal("0.25")

    # Relief-at-source contributions
    no_income_contribution_limit: Decimal = Decimal("3600.00")  # gross, per year
    relief_cutoff_age: int = 75

    def __post_init__(self):
        if self.start_age < MIN_AGE:
            raise ValueError(f"start_age must be >= {MIN_AGE}, got {self.start_age}")
        if self.end_age < self.start_age:
            raise ValueError(
                f"end_age ({self.end_age}) must be >= start_age ({self.start_age})"
            )
        for name in (
            "personal_allowance",
            "basic_rate_band",
            "state_pension",
            "no_income_contribution_limit",
        ):
            value = getattr(self, name)
            if not isinstance(value, Decimal):
                raise TypeError(f"{name} must be a Decimal")
            if value < 0:
                raise ValueError(f"{name} must be >= 0")
        for name in ("basic_rate", "tax_free_fraction"):
            value = getattr(self, name)
            if not isinstance(value, Decimal):
                raise TypeError(f"{name} must be a Decimal")
            if not ZERO <= value < ONE:
                raise ValueError(f"{name} must be in [0, 1), got {value}")
        if not isinstance(self.growth_rate, Decimal):
            raise TypeError("growth_rate must be a Decimal")
        if self.growth_rate <= -ONE:
            raise ValueError(f"growth_rate must be > -1, got {self.growth_rate}")

    @property
    def years(self) -> int:
        return self.end_age - self.start_age + 1

    @property
    def taxed_fraction(self) -> Decimal:
        """Taxable share of a UFPLS draw (0.75)."""
        return ONE - self.tax_free_fraction

    @property
    def net_rate(self) -> Decimal:
        """Net received per pound taxed at the basic rate (0.80)."""
        return ONE - self.basic_rate

    @property
    def ufpls_net_factor(self) -> Decimal:
        """Net per gross pound of a UFPLS draw above the allowance (0.85)."""
        return self.tax_free_fraction + multiply(self.taxed_fraction, self.net_rate)

    @property
    def net_contribution_cap(self) -> Decimal:
        """Most that can be paid in net under the no-income limit (2880.00)."""
        return multiply(self.no_income_contribution_limit, self.net_rate)


DEFAULT_RULES = TaxRuleSet()


def project_balance(starting_balance, annual_rate_percent, years: int) -> Decimal:
    """Compound a balance at a flat annual percentage; only the result is rounded.

    project_balance(Decimal("1000.00"), 5, 2) → Decimal("1102.50")
    """
    balance = to_money(starting_balance, "starting_balance")
    rate_percent = to_money(annual_rate_percent, "annual_rate_percent")
    if years is None:
        raise TypeError("years must not be None")
    if balance < 0:
        raise ValueError("starting_balance must be >= 0")
    if years < 0:
        raise ValueError("years must be >= 0")

    factor = add(ONE, divide(rate_percent, HUNDRED))
    for _ in range(years):
        balance = multiply(balance, factor)
    return round_money(balance)

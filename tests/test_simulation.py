"""Tests for the simulation year loop, snapshots and contribution transfer."""

import dataclasses
import logging
from decimal import Decimal

import pytest
from pension_sim_uk import (
    DEFAULT_RULES,
    YearSnapshot,
    contribute_from_savings_to_pension,
    project_balance,
    simulate_strategy,
    strategy1,
    strategy2,
    strategy3,
    strategy3a,
    strategy4,
    strategy5,
    validate_adhoc_withdrawals,
)
from pension_sim_uk.strategies import AllowanceFirst

SAVINGS = Decimal("74000.00")
PENSION = Decimal("425000.00")
REQUIRED = Decimal("23000.00")

ALL_STRATEGY_FUNCTIONS = [strategy1, strategy2, strategy3, strategy3a, strategy4, strategy5]
# Strategies whose draws are driven only by the spending need
NEED_DRIVEN = [strategy1, strategy2, strategy3, strategy5]


class TestYearSnapshot:
    def _snapshot(self, **overrides):
        values = dict(
            age=61,
            pension_start=Decimal("100.00"),
            pension_end=Decimal("104.00"),
            savings_start=Decimal("50.00"),
            savings_end=Decimal("40.00"),
        )
        values.update(overrides)
        return YearSnapshot(**values)

    def test_totals(self):
        s = self._snapshot()
        assert s.total_start == Decimal("150.00")
        assert s.total_end == Decimal("144.00")

    def test_defaults(self):
        s = self._snapshot()
        assert s.tax_paid == 0
        assert s.extra_spending == 0

    def test_immutable(self):
        s = self._snapshot()
        with pytest.raises(dataclasses.FrozenInstanceError):
            s.savings_end = Decimal("0")

    def test_age_below_minimum(self):
        with pytest.raises(ValueError, match="age"):
            self._snapshot(age=54)

    def test_none_amount(self):
        with pytest.raises(TypeError, match="pension_end"):
            self._snapshot(pension_end=None)

    def test_negative_amount(self):
        with pytest.raises(ValueError, match="savings_end"):
            self._snapshot(savings_end=Decimal("-0.01"))


class TestTimelineShape:
    @pytest.mark.parametrize("fn", ALL_STRATEGY_FUNCTIONS)
    def test_length(self, fn):
        assert len(fn(SAVINGS, PENSION, REQUIRED)) == 39

    @pytest.mark.parametrize("fn", ALL_STRATEGY_FUNCTIONS)
    def test_ages_increase_by_one(self, fn):
        ages = [s.age for s in fn(SAVINGS, PENSION, REQUIRED)]
        assert ages == list(range(61, 100))

    @pytest.mark.parametrize("fn", ALL_STRATEGY_FUNCTIONS)
    def test_deterministic(self, fn):
        assert fn(SAVINGS, PENSION, REQUIRED) == fn(SAVINGS, PENSION, REQUIRED)

    @pytest.mark.parametrize("fn", ALL_STRATEGY_FUNCTIONS)
    def test_start_matches_previous_end(self, fn):
        timeline = fn(SAVINGS, PENSION, REQUIRED)
        for prev, cur in zip(timeline, timeline[1:]):
            assert cur.pension_start == prev.pension_end
            assert cur.savings_start == prev.savings_end

    @pytest.mark.parametrize("fn", ALL_STRATEGY_FUNCTIONS)
    def test_two_decimal_places(self, fn):
        for s in fn(SAVINGS, PENSION, REQUIRED):
            for value in (s.pension_end, s.savings_end, s.tax_paid):
                assert value.as_tuple().exponent == -2

    def test_custom_age_range(self):
        rules = dataclasses.replace(DEFAULT_RULES, start_age=55, end_age=60)
        timeline = strategy2(SAVINGS, PENSION, REQUIRED, rules=rules)
        assert [s.age for s in timeline] == [55, 56, 57, 58, 59, 60]


class TestNonNegative:
    @pytest.mark.parametrize("fn", ALL_STRATEGY_FUNCTIONS)
    @pytest.mark.parametrize(
        "savings, pension, required",
        [
            ("0", "0", "23000"),
            ("1000", "5000", "23000"),
            ("0", "30000.005", "40000"),
            ("74000", "425000", "60000"),
        ],
    )
    def test_balances_never_negative(self, fn, savings, pension, required):
        for s in fn(Decimal(savings), Decimal(pension), Decimal(required)):
            assert s.savings_end >= 0
            assert s.pension_end >= 0
            assert s.tax_paid >= 0

    @pytest.mark.parametrize("fn", ALL_STRATEGY_FUNCTIONS)
    def test_empty_accounts_stay_empty(self, fn):
        for s in fn(0, 0, REQUIRED):
            assert s.total_end == 0


class TestZeroNeed:
    @pytest.mark.parametrize("fn", NEED_DRIVEN)
    def test_only_growth(self, fn):
        timeline = fn(SAVINGS, PENSION, Decimal("0"))
        for i, s in enumerate(timeline):
            assert s.pension_end == project_balance(PENSION, Decimal("4"), i + 1)
            assert s.savings_end == SAVINGS
            assert s.tax_paid == 0

    def test_strategy3a_without_contribution(self):
        timeline = strategy3a(SAVINGS, PENSION, Decimal("0"), contribute=False)
        assert all(s.savings_end == SAVINGS for s in timeline)

    def test_state_pension_covers_need(self):
        """From 67 a need below the state pension draws nothing."""
        timeline = strategy2(Decimal("0"), PENSION, Decimal("10000"))
        s = timeline[6]
        assert s.age == 67
        assert s.pension_end > s.pension_start
        assert s.savings_end == 0
        assert s.tax_paid == 0


class TestAdhocWithdrawals:
    def test_extra_spending_recorded(self):
        timeline = strategy2(SAVINGS, PENSION, REQUIRED, {62: Decimal("5000")})
        assert timeline[0].extra_spending == 0
        assert timeline[1].extra_spending == Decimal("5000.00")
        assert timeline[1].savings_end == Decimal("23000.00")

    def test_extra_spending_without_base_need(self):
        timeline = strategy1(SAVINGS, PENSION, 0, {61: 1000})
        assert timeline[0].savings_end == Decimal("73000.00")
        assert timeline[1].savings_end == Decimal("73000.00")

    def test_negative_rejected_before_simulating(self):
        with pytest.raises(ValueError, match="Ad hoc withdrawal for age 70 must be >= 0"):
            strategy3(SAVINGS, PENSION, REQUIRED, {70: Decimal("-1")})

    def test_none_value_rejected(self):
        with pytest.raises(TypeError):
            strategy3(SAVINGS, PENSION, REQUIRED, {70: None})

    def test_out_of_range_ignored_with_warning(self, caplog):
        with caplog.at_level(logging.WARNING, logger="pension_sim_uk.simulation"):
            timeline = strategy2(SAVINGS, PENSION, REQUIRED, {40: Decimal("100")})
        assert timeline == strategy2(SAVINGS, PENSION, REQUIRED)
        assert "outside ages" in caplog.text

    def test_normalized_copy(self):
        adhoc = {"62": "5000"}
        assert validate_adhoc_withdrawals(adhoc) == {62: Decimal("5000")}
        assert adhoc == {"62": "5000"}


class TestValidation:
    @pytest.mark.parametrize("fn", ALL_STRATEGY_FUNCTIONS)
    @pytest.mark.parametrize(
        "args, name",
        [
            ((None, PENSION, REQUIRED), "savings"),
            ((SAVINGS, None, REQUIRED), "pension"),
            ((SAVINGS, PENSION, None), "required_amount"),
        ],
    )
    def test_none_is_type_error(self, fn, args, name):
        with pytest.raises(TypeError, match=f"{name} must not be None"):
            fn(*args)

    @pytest.mark.parametrize("fn", ALL_STRATEGY_FUNCTIONS)
    @pytest.mark.parametrize(
        "args, name",
        [
            ((Decimal("-1"), PENSION, REQUIRED), "savings"),
            ((SAVINGS, Decimal("-0.01"), REQUIRED), "pension"),
            ((SAVINGS, PENSION, Decimal("-5")), "required_amount"),
        ],
    )
    def test_negative_is_value_error(self, fn, args, name):
        with pytest.raises(ValueError, match=f"{name} must be >= 0"):
            fn(*args)

    @pytest.mark.parametrize("fn", ALL_STRATEGY_FUNCTIONS)
    @pytest.mark.parametrize("bad", [Decimal("NaN"), Decimal("sNaN"), Decimal("Infinity"), Decimal("-Infinity")])
    def test_non_finite_is_value_error(self, fn, bad):
        for args, name in (
            ((bad, PENSION, REQUIRED), "savings"),
            ((SAVINGS, bad, REQUIRED), "pension"),
            ((SAVINGS, PENSION, bad), "required_amount"),
        ):
            with pytest.raises(ValueError, match=f"{name} must be a finite number"):
                fn(*args)

    def test_non_finite_adhoc_rejected(self):
        with pytest.raises(ValueError, match="finite"):
            strategy2(SAVINGS, PENSION, REQUIRED, {62: Decimal("Infinity")})

    def test_strategy_instance_reusable(self):
        strategy = AllowanceFirst()
        first = simulate_strategy(strategy, SAVINGS, PENSION, REQUIRED)
        second = simulate_strategy(strategy, SAVINGS, PENSION, REQUIRED)
        assert first == second


class TestContributeFromSavingsToPension:
    def test_relief_at_source(self):
        r = contribute_from_savings_to_pension(Decimal("10000"), Decimal("50000"), Decimal("2880"), 60, True)
        assert r.savings_end == Decimal("7120.00")
        assert r.pension_end == Decimal("53600.00")
        assert r.gross_contribution_added == Decimal("3600.00")
        assert r.tax_relief_added == Decimal("720.00")

    def test_cap_applied(self):
        r = contribute_from_savings_to_pension(Decimal("10000"), Decimal("50000"), Decimal("5000"), 60, True)
        assert r.savings_end == Decimal("7120.00")
        assert r.gross_contribution_added == Decimal("3600.00")

    def test_cap_not_applied(self):
        r = contribute_from_savings_to_pension(Decimal("10000"), Decimal("50000"), Decimal("5000"), 60, False)
        assert r.savings_end == Decimal("5000.00")
        assert r.pension_end == Decimal("56250.00")
        assert r.gross_contribution_added == Decimal("6250.00")
        assert r.tax_relief_added == Decimal("1250.00")

    def test_no_relief_from_75(self):
        r = contribute_from_savings_to_pension(Decimal("10000"), Decimal("50000"), Decimal("5000"), 75, True)
        assert r.savings_end == Decimal("5000.00")
        assert r.pension_end == Decimal("55000.00")
        assert r.gross_contribution_added == Decimal("5000.00")
        assert r.tax_relief_added == Decimal("0.00")

    def test_limited_by_savings(self):
        r = contribute_from_savings_to_pension(Decimal("1000"), Decimal("50000"), Decimal("2880"), 60, True)
        assert r.savings_end == Decimal("0.00")
        assert r.pension_end == Decimal("51250.00")
        assert r.tax_relief_added == Decimal("250.00")

    @pytest.mark.parametrize("savings, requested", [("0", "100"), ("100", "0")])
    def test_nothing_to_move(self, savings, requested):
        r = contribute_from_savings_to_pension(Decimal(savings), Decimal("50000.004"), Decimal(requested), 60, True)
        assert r.savings_end == Decimal(savings)
        assert r.pension_end == Decimal("50000.00")
        assert r.gross_contribution_added == Decimal("0.00")
        assert r.tax_relief_added == Decimal("0.00")

    def test_idempotent(self):
        args = (Decimal("10000"), Decimal("50000"), Decimal("2880"), 60, True)
        assert contribute_from_savings_to_pension(*args) == contribute_from_savings_to_pension(*args)

    def test_none_rejected(self):
        with pytest.raises(TypeError, match="requested_net must not be None"):
            contribute_from_savings_to_pension(Decimal("1"), Decimal("1"), None, 60, True)

    def test_negative_rejected(self):
        with pytest.raises(ValueError, match="must be >= 0"):
            contribute_from_savings_to_pension(Decimal("-1"), Decimal("1"), Decimal("1"), 60, True)

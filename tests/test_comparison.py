"""Tests for comparison.py."""

from decimal import Decimal

import pytest
from pension_sim_uk.comparison import (
    best_totals,
    lowest_tax,
    run_comparison,
    snapshot_at,
    total_tax_paid,
    validate_target_ages,
)

SAVINGS = Decimal("74000.00")
PENSION = Decimal("425000.00")


class TestRunComparison:
    def setup_method(self):
        self.results = run_comparison(SAVINGS, PENSION, [Decimal("20000"), Decimal("23000")])

    def test_all_strategies_in_order(self):
        assert list(self.results) == [
            "Strategy1", "Strategy2", "Strategy3", "Strategy3A", "Strategy4", "Strategy5",
        ]

    def test_one_timeline_per_amount(self):
        for name, timelines in self.results.items():
            assert len(timelines) == 2, f"{name} should have 2 timelines"
            assert all(len(t) == 39 for t in timelines)

    def test_empty_amounts(self):
        with pytest.raises(ValueError, match="required_amounts must not be empty"):
            run_comparison(SAVINGS, PENSION, [])

    def test_invalid_amount_fails_before_running(self):
        with pytest.raises(ValueError, match="required_amount must be >= 0"):
            run_comparison(SAVINGS, PENSION, [Decimal("20000"), Decimal("-1")])

    def test_none_amounts(self):
        with pytest.raises(TypeError):
            run_comparison(SAVINGS, PENSION, None)


class TestBestTotals:
    """Column maxima at age 61 for 23,000/year."""

    def setup_method(self):
        self.results = run_comparison(SAVINGS, PENSION, [Decimal("23000")])

    def test_first_year_totals(self):
        totals = {name: snapshot_at(t[0], 61).total_end for name, t in self.results.items()}
        assert totals == {
            "Strategy1": Decimal("493000.00"),
            "Strategy2": Decimal("493000.00"),
            "Strategy3": Decimal("492329.60"),
            "Strategy3A": Decimal("493193.60"),
            "Strategy4": Decimal("482778.93"),
            "Strategy5": Decimal("490934.77"),
        }

    def test_best_at_61(self):
        assert best_totals(self.results, 61) == [Decimal("493193.60")]

    def test_lowest_tax_is_column_minimum(self):
        taxes = [total_tax_paid(t[0]) for t in self.results.values()]
        assert lowest_tax(self.results) == [min(taxes)]


class TestSnapshotAt:
    def setup_method(self):
        self.timeline = run_comparison(SAVINGS, PENSION, [Decimal("23000")])["Strategy2"][0]

    def test_exact_age(self):
        assert snapshot_at(self.timeline, 64).age == 64

    def test_clamped_low(self):
        assert snapshot_at(self.timeline, 40).age == 61

    def test_clamped_high(self):
        assert snapshot_at(self.timeline, 120).age == 99


class TestTotalTaxPaid:
    def setup_method(self):
        self.timeline = run_comparison(SAVINGS, PENSION, [Decimal("23000")])["Strategy2"][0]

    def test_up_to_age(self):
        assert total_tax_paid(self.timeline, up_to_age=63) == 0
        assert total_tax_paid(self.timeline, up_to_age=64) == Decimal("218.82")

    def test_whole_run_includes_later_years(self):
        assert total_tax_paid(self.timeline) > Decimal("218.82")


class TestValidateTargetAges:
    def test_valid(self):
        assert validate_target_ages([61, 80, 99]) == [61, 80, 99]

    def test_empty(self):
        with pytest.raises(ValueError, match="must not be empty"):
            validate_target_ages([])

    def test_none(self):
        with pytest.raises(TypeError):
            validate_target_ages(None)

    @pytest.mark.parametrize("age", [60, 100])
    def test_out_of_range(self, age):
        with pytest.raises(ValueError, match=f"target age {age} must be between 61 and 99"):
            validate_target_ages([70, age])

from datetime import date
from decimal import Decimal

import pytest

from hr_admin.utils.loan_rules import (
    CAR_LOAN,
    HOUSING_LOAN,
    SALARY_LOAN,
    build_monthly_schedule,
    check_eligibility,
    first_deduction_date,
)


def test_class_c_only_salary_loans():
    assert check_eligibility("Class C", SALARY_LOAN, []) == (True, None)
    ok, reason = check_eligibility("Class C", CAR_LOAN, [])
    assert not ok
    assert "Salary Loans" in reason


def test_one_active_loan_per_type():
    ok, reason = check_eligibility("Class B", SALARY_LOAN, [SALARY_LOAN])
    assert not ok
    assert "already" in reason


@pytest.mark.parametrize(
    "wanted, active",
    [
        (HOUSING_LOAN, [SALARY_LOAN]),
        (HOUSING_LOAN, [CAR_LOAN]),
        (SALARY_LOAN, [HOUSING_LOAN]),
        (CAR_LOAN, [HOUSING_LOAN]),
    ],
)
def test_housing_does_not_combine(wanted, active):
    ok, _ = check_eligibility("Class A", wanted, active)
    assert not ok


def test_salary_and_car_can_be_combined():
    assert check_eligibility("Class B", CAR_LOAN, [SALARY_LOAN]) == (True, None)


def test_schedule_sums_to_amount_with_rounding_on_last_row():
    rows = build_monthly_schedule(Decimal("10000"), 3, date(2031, 1, 15))

    assert [d for d, _ in rows] == [date(2031, 1, 15), date(2031, 2, 15), date(2031, 3, 15)]
    assert [a for _, a in rows] == [Decimal("3333.33"), Decimal("3333.33"), Decimal("3333.34")]
    assert sum(a for _, a in rows) == Decimal("10000.00")


def test_schedule_crosses_year_end():
    rows = build_monthly_schedule(1200, 2, date(2031, 12, 15))
    assert [d for d, _ in rows] == [date(2031, 12, 15), date(2032, 1, 15)]


def test_schedule_needs_a_term():
    with pytest.raises(ValueError):
        build_monthly_schedule(1000, 0, date(2031, 1, 15))


def test_schedule_never_has_a_negative_row_on_small_long_loans():
    rows = build_monthly_schedule(Decimal("1.80"), 120, date(2026, 1, 15))

    assert all(a > 0 for _, a in rows)
    assert sum(a for _, a in rows) == Decimal("1.80")
    assert rows[0][1] == Decimal("0.01")
    assert rows[-1] == (date(2035, 12, 15), Decimal("0.61"))


def test_schedule_rejects_amount_below_a_cent_per_month():
    with pytest.raises(ValueError):
        build_monthly_schedule(Decimal("1.00"), 120, date(2026, 1, 15))


def test_first_deduction_is_the_15th_of_next_month():
    assert first_deduction_date(date(2031, 1, 31)) == date(2031, 2, 15)
    assert first_deduction_date(date(2031, 12, 3)) == date(2032, 1, 15)

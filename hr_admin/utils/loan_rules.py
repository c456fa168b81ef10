from calendar import monthrange
from datetime import date
from decimal import ROUND_DOWN, Decimal
from typing import Iterable, List, Optional, Tuple

from hr_admin.utils.money import money

SALARY_LOAN = "Salary Loan"
HOUSING_LOAN = "Housing Loan"
CAR_LOAN = "Car Loan"

LOAN_TYPES = (SALARY_LOAN, HOUSING_LOAN, CAR_LOAN)

CENT = Decimal("0.01")

# short names used in query strings / approval routes
LOAN_TYPE_SLUGS = {
    "salary": SALARY_LOAN,
    "housing": HOUSING_LOAN,
    "car": CAR_LOAN,
}

# loan type -> types it cannot be held together with (besides itself)
_INCOMPATIBLE = {
    SALARY_LOAN: (HOUSING_LOAN,),
    HOUSING_LOAN: (CAR_LOAN, SALARY_LOAN),
    CAR_LOAN: (HOUSING_LOAN,),
}


def check_eligibility(
        role_class: Optional[str],
        loan_type: str,
        active_types: Iterable[str],
) -> Tuple[bool, Optional[str]]:
    """
    Whether an employee may apply for ``loan_type``.

    ``active_types`` are the types of the employee's Pending/Approved loans.
    Returns (eligible, reason).
    """
    if role_class == "Class C" and loan_type != SALARY_LOAN:
        return False, "Class C employees can only apply for Salary Loans."

    active = set(active_types)
    for other in _INCOMPATIBLE[loan_type]:
        if other in active:
            return False, (
                f"You have an active or pending {other}. "
                f"{loan_type} cannot be combined with {other}."
            )

    if loan_type in active:
        return False, f"You already have an active or pending {loan_type}."

    return True, None


def _add_months(d: date, months: int) -> date:
    month_index = d.month - 1 + months
    year = d.year + month_index // 12
    month = month_index % 12 + 1
    day = min(d.day, monthrange(year, month)[1])
    return date(year, month, day)


def build_monthly_schedule(
        amount,
        term_months: int,
        start: date,
) -> List[Tuple[date, Decimal]]:
    """
    Monthly deductions starting ``start``.

    Every row is amount/term truncated to cents; the last row takes the
    remainder so the schedule sums to ``amount`` and no row is negative.
    """
    amount = money(amount)
    months = int(term_months)
    if months <= 0:
        raise ValueError("term_months must be > 0")
    if amount < CENT * months:
        raise ValueError(f"amount must be at least {CENT * months} for a {months}-month term")

    per_month = (amount / months).quantize(CENT, rounding=ROUND_DOWN)
    rows = []
    for i in range(months):
        rows.append((_add_months(start, i), per_month))

    last_date, _ = rows[-1]
    rows[-1] = (last_date, money(amount - per_month * (months - 1)))
    return rows


def first_deduction_date(approved_on: date) -> date:
    """Deductions start on the 15th of the month after approval."""
    return _add_months(approved_on.replace(day=15), 1)

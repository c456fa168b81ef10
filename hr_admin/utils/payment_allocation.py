import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Callable, Iterable, List, Optional, Sequence, Union

from hr_admin.core.exceptions import InvalidAmount, NoOutstandingInstallments
from hr_admin.utils.money import money

logger = logging.getLogger(__name__)


class InstallmentStatus(str, Enum):
    UNPAID = "Unpaid"
    PARTIALLY_PAID = "PartiallyPaid"
    PAID = "Paid"


@dataclass(frozen=True)
class Installment:
    id: int
    due_date: date
    scheduled_amount: Decimal
    status: InstallmentStatus = InstallmentStatus.UNPAID
    paid_amount: Decimal = Decimal("0.00")
    payment_date: Optional[date] = None
    notes: Optional[str] = None

    @property
    def outstanding(self) -> Decimal:
        return money(money(self.scheduled_amount) - money(self.paid_amount))


@dataclass(frozen=True)
class RowAllocation:
    installment_id: int
    applied_amount: Decimal
    resulting_status: InstallmentStatus
    payment_date: date
    notes: Optional[str]


@dataclass(frozen=True)
class AllocationResult:
    allocations: List[RowAllocation]
    leftover_amount: Decimal

    @property
    def applied_total(self) -> Decimal:
        return money(sum((a.applied_amount for a in self.allocations), Decimal("0")))


def allocate(
        payment_amount,
        outstanding: Sequence[Installment],
        note: Optional[str] = None,
        today: Optional[date] = None,
) -> AllocationResult:
    """
    Plans how a payment is spread over outstanding installments.

    ``outstanding`` must already exclude paid rows and be sorted by due
    date (earliest first); this function neither filters nor reorders.

    Any amount left after the last row is returned as ``leftover_amount``;
    no row absorbs it.

    The payment is rounded to cents before it is checked, so anything
    under half a cent counts as zero and raises ``InvalidAmount``.
    """
    amount = money(payment_amount)
    if amount <= 0:
        raise InvalidAmount()
    if not outstanding:
        raise NoOutstandingInstallments()

    pay_day = today or date.today()
    remaining = amount
    allocations: List[RowAllocation] = []

    for inst in outstanding:
        if remaining <= 0:
            break

        due_left = inst.outstanding
        if due_left <= 0:
            continue

        applied = remaining if remaining < due_left else due_left

        if money(inst.paid_amount) + applied >= money(inst.scheduled_amount):
            resulting = InstallmentStatus.PAID
        else:
            resulting = InstallmentStatus.PARTIALLY_PAID

        allocations.append(
            RowAllocation(
                installment_id=inst.id,
                applied_amount=applied,
                resulting_status=resulting,
                payment_date=pay_day,
                notes=note,
            )
        )
        remaining = money(remaining - applied)

    return AllocationResult(allocations=allocations, leftover_amount=remaining)


# -------------------------------------------------
# Sequential execution of a plan
# -------------------------------------------------
@dataclass(frozen=True)
class Applied:
    installment_id: int
    amount: Decimal


@dataclass(frozen=True)
class Failed:
    installment_id: int
    reason: str


RowResult = Union[Applied, Failed]


def apply_allocations(
        allocations: Iterable[RowAllocation],
        write_row: Callable[[RowAllocation], None],
) -> List[RowResult]:
    """
    Writes each planned row in order, one at a time.

    The first write that raises is tagged ``Failed`` and ends the run;
    rows written before it stay written.
    """
    results: List[RowResult] = []
    for alloc in allocations:
        try:
            write_row(alloc)
        except Exception as exc:
            logger.warning(
                "Allocation to deduction %s failed: %s", alloc.installment_id, exc
            )
            results.append(Failed(installment_id=alloc.installment_id, reason=str(exc)))
            break
        results.append(Applied(installment_id=alloc.installment_id, amount=alloc.applied_amount))
    return results

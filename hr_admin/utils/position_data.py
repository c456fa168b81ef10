import re
from decimal import Decimal
from typing import Iterable, NamedTuple, Optional, Tuple


class Position(NamedTuple):
    name: str
    salary: int
    prefix: str
    role_class: str


POSITIONS = [
    Position("Analyst", 35000, "AN", "Class C"),
    Position("Assistant", 20000, "AST", "Class C"),
    Position("Assistant Manager", 75000, "AM", "Class B"),
    Position("Clerk", 25000, "CLK", "Class C"),
    Position("Department Supervisor", 90000, "SUP", "Class B"),
    Position("Division Manager", 120000, "DM", "Class B"),
    Position("HR Manager", 100000, "HRM", "Class B"),
    Position("HR Staff", 45000, "HRS", "Class C"),
    Position("Intern", 15000, "INT", "Class C"),
    Position("Manager", 85000, "MGR", "Class B"),
    Position("Senior Manager", 140000, "SM", "Class A"),
    Position("System Administrator", 80000, "ADM", "Class A"),
    Position("Technician", 28000, "TECH", "Class C"),
]

DEPARTMENTS = ["Admin", "Finance", "HR", "IT", "Maintenance", "Marketing", "Operations"]

DEFAULT_PREFIX = "EMP"
DEFAULT_ROLE_CLASS = "Class C"

# role class -> (package, yearly allowance)
BENEFITS_PACKAGES = {
    "Class A": ("Package B", Decimal("200000.00")),
    "Class B": ("Package B", Decimal("200000.00")),
    "Class C": ("Package A", Decimal("100000.00")),
}

_POSITIONS_BY_NAME = {p.name: p for p in POSITIONS}


def find_position(name: Optional[str]) -> Optional[Position]:
    return _POSITIONS_BY_NAME.get(name or "")


def position_salary(name: Optional[str]) -> int:
    pos = find_position(name)
    return pos.salary if pos else 0


def role_class(name: Optional[str]) -> str:
    pos = find_position(name)
    return pos.role_class if pos else DEFAULT_ROLE_CLASS


def next_employee_id(position: Optional[str], existing_ids: Iterable[str]) -> str:
    """
    Next sequential ID for a position, e.g. ``MGR004`` after ``MGR003``.

    Only IDs sharing the position's prefix are considered; the first
    digit run of each is the sequence number.
    """
    pos = find_position(position)
    prefix = pos.prefix if pos else DEFAULT_PREFIX

    highest = 0
    for emp_id in existing_ids:
        if not emp_id or not emp_id.startswith(prefix):
            continue
        m = re.search(r"\d+", emp_id)
        if m:
            highest = max(highest, int(m.group(0)))

    return f"{prefix}{highest + 1:03d}"


def benefits_for(role: Optional[str]) -> Tuple[str, Decimal]:
    """(package name, allowance) for a role class; unknown classes get nothing."""
    return BENEFITS_PACKAGES.get(role or "", ("", Decimal("0.00")))

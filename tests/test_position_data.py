from decimal import Decimal

from hr_admin.utils.position_data import (
    POSITIONS,
    benefits_for,
    next_employee_id,
    position_salary,
    role_class,
)


def test_next_id_uses_highest_suffix_of_the_same_prefix():
    assert next_employee_id("Manager", ["MGR001", "MGR003", "AST002"]) == "MGR004"


def test_next_id_starts_at_001():
    assert next_employee_id("Clerk", ["MGR001"]) == "CLK001"
    assert next_employee_id("Clerk", []) == "CLK001"


def test_next_id_unknown_position_uses_default_prefix():
    assert next_employee_id("Astronaut", ["EMP007"]) == "EMP008"


def test_next_id_grows_past_three_digits():
    assert next_employee_id("Intern", ["INT999"]) == "INT1000"


def test_salary_and_role_lookup():
    assert position_salary("Manager") == 85000
    assert position_salary("Nope") == 0
    assert role_class("Senior Manager") == "Class A"
    assert role_class("HR Manager") == "Class B"
    assert role_class("Nope") == "Class C"


def test_every_position_has_a_unique_prefix():
    prefixes = [p.prefix for p in POSITIONS]
    assert len(prefixes) == len(set(prefixes))


def test_benefits_by_role_class():
    assert benefits_for("Class A") == ("Package B", Decimal("200000.00"))
    assert benefits_for("Class B") == ("Package B", Decimal("200000.00"))
    assert benefits_for("Class C") == ("Package A", Decimal("100000.00"))
    assert benefits_for("Class Z") == ("", Decimal("0.00"))
    assert benefits_for(None) == ("", Decimal("0.00"))

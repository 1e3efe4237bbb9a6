from conftest import item
from quotation.constants import DEPARTMENTS
from quotation.services.departments import order_departments, sort_equipment


def test_canonical_first_then_custom_alphabetical():
    present = ["zeta", DEPARTMENTS[3], "Alpha", DEPARTMENTS[0], "beta"]
    assert order_departments(present) == [DEPARTMENTS[0], DEPARTMENTS[3], "Alpha", "beta", "zeta"]


def test_duplicates_and_blanks_collapse():
    assert order_departments([DEPARTMENTS[2], DEPARTMENTS[2], "", None]) == [DEPARTMENTS[2]]


def test_custom_canonical_list():
    assert order_departments(["b", "x", "a"], canonical=["x"]) == ["x", "a", "b"]


def test_sort_equipment_is_stable_within_department():
    items = [
        item("c1", 1, department="Custom"),
        item("l1", 1, department=DEPARTMENTS[2]),
        item("h1", 1, department=DEPARTMENTS[0]),
        item("l2", 1, department=DEPARTMENTS[2]),
    ]
    assert [e.id for e in sort_equipment(items)] == ["h1", "l1", "l2", "c1"]

from quotation.constants import (
    ASSET_CUSTOMER,
    ASSET_UTILITY,
    DEPARTMENTS,
    INITIAL_EQUIPMENT_ITEMS,
    INVESTMENT_CUSTOMER,
    INVESTMENT_UTILITY,
    SCHEMA_VERSION,
)
from quotation.services.migration import migrate_project_data, migrate_store, upgrade_project_dict

LV = DEPARTMENTS[2]
PL = DEPARTMENTS[3]


def test_empty_blob_gets_default_catalog():
    data = migrate_project_data(None)
    assert len(data.equipment) == len(INITIAL_EQUIPMENT_ITEMS)
    assert data.jobs == []


def test_v0_rows_are_cleaned():
    raw = {"equipment": [
        {"id": 7, "name": " Cable ", "price": "12.5", "unit": "m"},
        {"id": 8, "name": "", "price": 1},
        {"id": 9, "name": "Bad price", "price": "n/a", "department": PL},
    ]}
    data = migrate_project_data(raw)
    assert [e.id for e in data.equipment] == ["7", "9"]
    cable = data.catalog()["7"]
    assert (cable.name, cable.price, cable.department, cable.code) == ("Cable", 12.5, LV, "")
    assert data.catalog()["9"].price == 0


def test_invalid_parents_are_cleared():
    raw = {"equipment": [
        {"id": "a", "name": "A", "price": 1, "department": LV},
        {"id": "b", "name": "B", "price": 1, "department": LV, "parentId": "a"},
        {"id": "c", "name": "C", "price": 1, "department": LV, "parentId": "b"},
        {"id": "d", "name": "D", "price": 1, "department": LV, "parentId": "d"},
        {"id": "e", "name": "E", "price": 1, "department": LV, "parentId": "missing"},
    ]}
    parents = {e.id: e.parent_id for e in migrate_project_data(raw).equipment}
    assert parents == {"a": None, "b": "a", "c": None, "d": None, "e": None}


def test_parent_check_does_not_depend_on_row_order():
    a = {"id": "a", "name": "A", "price": 1, "department": LV, "parentId": "gone"}
    b = {"id": "b", "name": "B", "price": 1, "department": LV, "parentId": "a"}
    for rows in ([a, b], [b, a]):
        parents = {e.id: e.parent_id for e in migrate_project_data({"equipment": rows}).equipment}
        assert parents == {"a": None, "b": "a"}


def test_flat_quotation_becomes_one_job_per_department():
    raw = {
        "equipment": [
            {"id": "1", "name": "Pole", "price": 100, "department": LV},
            {"id": "2", "name": "Lamp", "price": 50, "department": PL},
        ],
        "quotation": {"1": 3, "2": 0, "ghost": 4},
        "profitMargin": 12,
    }
    data = migrate_project_data(raw)
    assert len(data.jobs) == 1
    (j,) = data.jobs
    assert (j.id, j.department, j.investment, j.asset) == ("legacy-1", LV, INVESTMENT_CUSTOMER, ASSET_CUSTOMER)
    assert j.profit_margin == 12
    assert j.items["1"].install == 3


def test_per_department_margins_replace_single_margin():
    raw = {
        "equipment": [
            {"id": "1", "name": "Pole", "price": 100, "department": LV},
            {"id": "2", "name": "Lamp", "price": 50, "department": PL},
        ],
        "quotation": {"2": 1, "1": 1},
        "profitMargins": {PL: 7},
        "profitMargin": 3,
    }
    jobs = migrate_project_data(raw).jobs
    assert [(j.department, j.profit_margin) for j in jobs] == [(LV, 0), (PL, 7)]


def test_single_margin_skips_custom_departments():
    raw = {
        "equipment": [
            {"id": "1", "name": "Pole", "price": 100, "department": LV},
            {"id": "2", "name": "Solar", "price": 50, "department": "Solar team"},
        ],
        "quotation": {"1": 1, "2": 1},
        "profitMargin": 15,
    }
    margins = {j.department: j.profit_margin for j in migrate_project_data(raw).jobs}
    assert margins == {LV: 15, "Solar team": 0}


def test_jobs_are_normalized():
    raw = {
        "equipment": [{"id": "1", "name": "Pole", "price": 100, "department": LV}],
        "jobs": [
            {"id": "x", "name": "x", "department": LV, "investment": INVESTMENT_UTILITY,
             "asset": ASSET_CUSTOMER, "profitMargin": 5, "items": {"1": 2, "2": {"install": 0}}},
            {"id": "y", "department": LV, "investment": "???", "profitMargin": -4,
             "items": {"1": {"install": "3", "remove": 1.0}}},
            "garbage",
        ],
    }
    x, y = migrate_project_data(raw).jobs
    assert x.asset == ASSET_UTILITY
    assert x.profit_margin is None
    assert set(x.items) == {"1"} and x.items["1"].install == 2
    assert (y.name, y.investment, y.profit_margin) == (LV, INVESTMENT_CUSTOMER, 0)
    assert (y.items["1"].install, y.items["1"].remove) == (3, 1)


def test_migration_is_idempotent():
    raw = {
        "equipment": [{"id": "1", "name": "Pole", "price": 100}],
        "quotation": {"1": 2},
        "profitMargin": 10,
    }
    once = migrate_project_data(raw)
    twice = migrate_project_data(once.to_dict())
    assert once == twice
    assert upgrade_project_dict(raw)["schemaVersion"] == SCHEMA_VERSION
    assert "quotation" not in upgrade_project_dict(raw)


def test_store_drops_bad_projects_and_dangling_last_id():
    raw = {
        "projects": [
            {"id": "p1", "name": "Site A", "lastModified": "2024-01-01T00:00:00", "data": {}},
            {"name": "no id"},
            None,
        ],
        "lastProjectId": "gone",
    }
    store = migrate_store(raw)
    assert [p.id for p in store.projects] == ["p1"]
    assert store.last_project_id is None
    assert migrate_store("nonsense").projects == []

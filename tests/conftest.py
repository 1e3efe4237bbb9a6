import os
# Ensure the app factory picks the Testing config & SQLite memory DB
os.environ.setdefault("APP_ENV", "testing")
os.environ.setdefault("TEST_DATABASE_URL", "sqlite:///:memory:")

import pytest
from quotation import create_app
from quotation.constants import ASSET_CUSTOMER, DEPARTMENTS, INVESTMENT_CUSTOMER
from quotation.domain import EquipmentItem, ItemQuantities, Job, ProjectData
from quotation.extensions import db
import quotation.models  # noqa: F401  (registers app_state on the metadata)

LV = DEPARTMENTS[2]
HV = DEPARTMENTS[0]

@pytest.fixture(scope="session")
def app():
    app = create_app({
        "TESTING": True,
        "SQLALCHEMY_DATABASE_URI": "sqlite:///:memory:",
        "WTF_CSRF_ENABLED": False,
    })
    with app.app_context():
        db.create_all()
    yield app
    with app.app_context():
        db.drop_all()

@pytest.fixture()
def client(app):
    return app.test_client()

@pytest.fixture()
def ctx(app):
    with app.app_context():
        yield app

@pytest.fixture(autouse=True)
def _db_clean(app):
    # Clean BEFORE each test
    with app.app_context():
        db.session.rollback()
        for tbl in reversed(db.metadata.sorted_tables):
            db.session.execute(tbl.delete())
        db.session.commit()
    yield
    # And AFTER each test (keeps state hermetic even if a test fails mid-transaction)
    with app.app_context():
        db.session.rollback()
        for tbl in reversed(db.metadata.sorted_tables):
            db.session.execute(tbl.delete())
        db.session.commit()

# ---- plain domain builders (no app needed) --------------------------------

def item(id, price, *, code=None, department=LV, parent_id=None, unit="ชุด", name=None):
    return EquipmentItem(
        id=id,
        code=code if code is not None else id.upper(),
        name=name or f"item {id}",
        price=price,
        unit=unit,
        department=department,
        parent_id=parent_id,
    )

def job(id="j1", *, department=LV, investment=INVESTMENT_CUSTOMER, asset=ASSET_CUSTOMER, margin=None, **quantities):
    items = {}
    for item_id, q in quantities.items():
        items[item_id] = ItemQuantities(install=q) if isinstance(q, int) else ItemQuantities(**q)
    return Job(id=id, name=f"job {id}", department=department, investment=investment,
               asset=asset, profit_margin=margin, items=items)

@pytest.fixture()
def example_project():
    """A (100) with sub-item B (50); one customer job at 10% with A×5, B×2."""
    equipment = [item("a", 100), item("b", 50, parent_id="a")]
    jobs = [job("j1", margin=10, a=5, b=2)]
    return ProjectData(equipment=equipment, jobs=jobs)

import pytest

from conftest import HV, LV, item, job
from quotation.constants import (
    ASSET_CUSTOMER,
    ASSET_UTILITY,
    INVESTMENT_COFUNDED,
    INVESTMENT_UTILITY,
)
from quotation.services.calculations import calc_departments, calc_job, calc_totals, job_lines, summarize


def test_example_scenario_job(example_project):
    cost = calc_job(example_project.jobs[0], example_project.catalog())
    assert cost["base_cost"] == 600
    assert cost["charged_cost"] == 600
    assert cost["profit"] == pytest.approx(60)
    assert cost["total"] == pytest.approx(660)


def test_example_scenario_totals(example_project):
    totals = calc_totals(example_project.jobs, example_project.catalog())
    assert totals["sub_total"] == 600
    assert totals["profit_amount"] == pytest.approx(60)
    assert totals["total_before_vat"] == pytest.approx(660)
    assert totals["vat_amount"] == pytest.approx(46.2)
    assert totals["grand_total"] == pytest.approx(706.2)


def test_only_install_is_priced():
    catalog = {"a": item("a", 100)}
    j = job(a={"install": 1, "remove": 4, "reuse": 9})
    assert calc_job(j, catalog)["base_cost"] == 100


def test_cost_never_decreases_when_install_grows():
    catalog = {"a": item("a", 37.5), "b": item("b", 12)}
    previous = -1
    for n in range(0, 6):
        cost = calc_job(job(a=n, b=2), catalog)["base_cost"]
        assert cost >= previous
        previous = cost


def test_cofunded_job_is_halved_and_never_earns_profit():
    catalog = {"a": item("a", 100)}
    j = job(investment=INVESTMENT_COFUNDED, asset=ASSET_UTILITY, margin=25, a=3)
    cost = calc_job(j, catalog)
    assert cost["charged_cost"] == 300 * 0.5
    assert cost["profit"] == 0
    assert cost["total"] == 150


def test_donated_job_totals_zero():
    catalog = {"a": item("a", 999)}
    j = job(investment=INVESTMENT_UTILITY, asset=ASSET_UTILITY, a=4)
    cost = calc_job(j, catalog)
    assert cost["base_cost"] == 3996
    assert cost["total"] == 0


def test_customer_funded_utility_asset_has_no_profit():
    catalog = {"a": item("a", 100)}
    j = job(asset=ASSET_UTILITY, margin=50, a=2)
    cost = calc_job(j, catalog)
    assert cost["profit"] == 0
    assert cost["total"] == 200


def test_vat_identity_over_mixed_jobs():
    catalog = {"a": item("a", 123.45), "b": item("b", 0.1, department=HV)}
    jobs = [
        job("j1", margin=12.5, a=3),
        job("j2", department=HV, investment=INVESTMENT_COFUNDED, asset=ASSET_UTILITY, b=7),
        job("j3", investment=INVESTMENT_UTILITY, asset=ASSET_UTILITY, a=1),
    ]
    t = calc_totals(jobs, catalog)
    assert t["grand_total"] == pytest.approx((t["sub_total"] + t["profit_amount"]) * 1.07)


def test_dangling_reference_is_ignored(example_project):
    catalog = example_project.catalog()
    del catalog["b"]
    cost = calc_job(example_project.jobs[0], catalog)
    assert cost["base_cost"] == 500
    assert cost["total"] == pytest.approx(550)


def test_departments_follow_display_order_and_sum_totals():
    catalog = {"a": item("a", 10), "h": item("h", 20, department=HV), "x": item("x", 5, department="ZZ custom")}
    jobs = [
        job("j1", department="ZZ custom", x=2),
        job("j2", a=1, margin=10),
        job("j3", department=HV, h=3),
    ]
    deps = calc_departments(jobs, catalog)
    assert list(deps) == [HV, LV, "ZZ custom"]
    assert deps[LV]["subtotal"] == pytest.approx(11)
    assert deps[LV]["profit"] == pytest.approx(1)
    assert deps[HV]["job_ids"] == ["j3"]


def test_job_lines_sorted_by_code():
    catalog = {"a": item("a", 1, code="Z-9"), "b": item("b", 2, code="A-1")}
    lines = job_lines(job(a=1, b=2), catalog)
    assert [li["item"].code for li in lines] == ["A-1", "Z-9"]
    assert lines[0]["line_total"] == 4


def test_summarize_bundles_everything(example_project):
    s = summarize(example_project.jobs, example_project.catalog())
    assert set(s) == {"jobs", "departments", "totals"}
    assert s["jobs"]["j1"]["total"] == pytest.approx(660)
    assert s["departments"][LV]["subtotal"] == pytest.approx(660)

import io

import pytest
from openpyxl import Workbook, load_workbook

from quotation.constants import ASSET_CUSTOMER, ASSET_UTILITY, DEPARTMENTS, INVESTMENT_CUSTOMER, INVESTMENT_UTILITY

LV = DEPARTMENTS[2]


def _add_item(client, **over):
    payload = {"code": "T-1", "name": "Test pole", "price": 100, "unit": "ต้น", "department": LV}
    payload.update(over)
    r = client.post("/catalog/", json=payload)
    assert r.status_code == 201
    return r.get_json()["item"]


def _add_job(client, **over):
    payload = {"name": "Job 1", "department": LV, "investment": INVESTMENT_CUSTOMER,
               "asset": ASSET_CUSTOMER, "profit_margin": 10}
    payload.update(over)
    r = client.post("/jobs/", json=payload)
    assert r.status_code == 201
    return r.get_json()["job"]


def test_healthz_and_index(client):
    assert client.get("/healthz").get_json() == {"status": "ok"}
    body = client.get("/").get_json()
    assert body["ok"] is True
    assert body["departments"][:4] == DEPARTMENTS
    assert body["vat_rate"] == 0.07


def test_unknown_route_is_json_404(client):
    r = client.get("/nope")
    assert r.status_code == 404
    assert r.get_json()["error"] == "not_found"


def test_catalog_crud(client):
    created = _add_item(client)
    rows = client.get("/catalog/", query_string={"department": LV}).get_json()["rows"]
    assert created["id"] in {r["id"] for r in rows}

    r = client.put(f"/catalog/{created['id']}", json={**created, "price": 120})
    assert r.get_json()["item"]["price"] == 120

    r = client.post("/catalog/", json={"name": ""})
    assert r.status_code == 400
    body = r.get_json()
    assert body["ok"] is False and "name" in body["errors"]

    assert client.delete(f"/catalog/{created['id']}").status_code == 200
    assert client.delete(f"/catalog/{created['id']}").status_code == 404


def test_example_scenario_over_http(client):
    a = _add_item(client, code="A", price=100)
    b = _add_item(client, code="B", name="Sub pole", price=50, parentId=a["id"])
    j = _add_job(client)

    client.post(f"/jobs/{j['id']}/items", json={"item_id": a["id"], "install": 5})
    r = client.post(f"/jobs/{j['id']}/items", json={"item_id": b["id"], "install": 2})
    assert r.get_json()["job"]["cost"]["total"] == pytest.approx(660)

    summary = client.get("/quotation/summary.json").get_json()
    assert summary["totals"]["grand_total"] == pytest.approx(706.2)
    assert summary["departments"][0]["department"] == LV

    lines = client.get("/quotation/lines.json").get_json()["departments"][0]["chargeable"]
    assert [(ln["id"], ln["quantity"]) for ln in lines] == [(a["id"], 7)]


def test_job_validation_and_profit_rules(client):
    r = client.post("/jobs/", json={"name": "x", "department": LV,
                                    "investment": INVESTMENT_UTILITY, "asset": ASSET_CUSTOMER})
    assert r.status_code == 400
    assert "asset" in r.get_json()["errors"]

    j = _add_job(client, investment=INVESTMENT_UTILITY, asset=ASSET_UTILITY, profit_margin=None)
    r = client.put(f"/jobs/{j['id']}/profit", json={"profit_margin": 5})
    assert r.status_code == 400

    r = client.put(f"/jobs/{j['id']}/classification", json={"investment": INVESTMENT_CUSTOMER, "asset": ASSET_CUSTOMER})
    assert r.status_code == 200
    r = client.post("/jobs/global-profit", json={"profit_margin": 8})
    assert r.get_json()["updated"] == 1

    assert client.delete(f"/jobs/{j['id']}").status_code == 200
    assert client.get(f"/jobs/{j['id']}").status_code == 404


def test_breakdown_endpoint(client):
    parent = _add_item(client, code="P", price=10)
    child = _add_item(client, code="C", name="Child", price=4, parent_id=parent["id"])
    j = _add_job(client)
    client.post(f"/jobs/{j['id']}/items", json={"item_id": parent["id"], "install": 3})

    url = f"/jobs/{j['id']}/items/{parent['id']}/breakdown"
    r = client.post(url, json={"allocations": {child["id"]: 2}})
    assert r.status_code == 400

    r = client.post(url, json={"allocations": {child["id"]: 3}})
    lines = {ln["id"]: ln for ln in r.get_json()["job"]["lines"]}
    assert parent["id"] not in lines
    assert lines[child["id"]]["install"] == 3


def test_item_quantities_and_removal(client):
    a = _add_item(client)
    j = _add_job(client)
    url = f"/jobs/{j['id']}/items/{a['id']}"
    r = client.put(url, json={"install": 2, "remove": 1})
    (line,) = r.get_json()["job"]["lines"]
    assert (line["install"], line["remove"]) == (2, 1)
    r = client.delete(url)
    assert r.get_json()["job"]["lines"] == []


def test_info_round_trip(client):
    r = client.put("/quotation/info", json={"companyInfo": {"name": "ACME", "phone": "02-123-4567"},
                                            "clientInfo": {"name": "Somchai", "project": "Site A"}})
    assert r.status_code == 200
    info = client.get("/quotation/info").get_json()
    assert info["companyInfo"]["phone"] == "021234567"
    assert info["clientInfo"]["project"] == "Site A"

    r = client.put("/quotation/info", json={"companyInfo": {"phone": "12"}})
    assert r.status_code == 400


def test_exports(client):
    a = _add_item(client, code="A")
    j = _add_job(client)
    client.post(f"/jobs/{j['id']}/items", json={"item_id": a["id"], "install": 1})

    for url in ("/quotation/export/quotation.xlsx", "/quotation/export/usage.xlsx", "/catalog/export.xlsx"):
        r = client.get(url)
        assert r.status_code == 200
        assert "attachment" in r.headers["Content-Disposition"]
        load_workbook(io.BytesIO(r.data))


def test_catalog_import_upload(client):
    wb = Workbook()
    ws = wb.active
    ws.append(["name", "price", "unit", "department"])
    ws.append(["Imported lamp", 55, "ชุด", LV])
    buf = io.BytesIO()
    wb.save(buf)
    buf.seek(0)

    r = client.post("/catalog/import", data={"file": (buf, "prices.xlsx")}, content_type="multipart/form-data")
    assert r.status_code == 200
    assert r.get_json()["result"]["added"] == 1

    r = client.post("/catalog/import", data={}, content_type="multipart/form-data")
    assert r.status_code == 400
    r = client.post("/catalog/import", data={"file": (io.BytesIO(b"x"), "prices.csv")}, content_type="multipart/form-data")
    assert r.status_code == 400


def test_catalog_import_rejects_legacy_xls(client):
    before = client.get("/catalog/").get_json()["rows"]
    r = client.post("/catalog/import", data={"file": (io.BytesIO(b"\xd0\xcf\x11\xe0"), "prices.xls")},
                    content_type="multipart/form-data")
    assert r.status_code == 400
    assert ".xlsx" in r.get_json()["errors"]["file"]
    assert client.get("/catalog/").get_json()["rows"] == before


def test_restore_defaults(client):
    _add_item(client)
    before = client.get("/").get_json()["counts"]["equipment"]
    r = client.post("/catalog/restore-defaults")
    assert r.get_json()["count"] == before - 1


def test_project_manager_flow(client):
    r = client.post("/projects/save")
    assert r.status_code == 400

    r = client.post("/projects/", json={"name": "Site A"})
    assert r.status_code == 201
    pid = r.get_json()["project"]["id"]

    assert client.post("/projects/save").status_code == 200
    assert client.put(f"/projects/{pid}", json={"name": "Site B"}).get_json()["project"]["name"] == "Site B"

    client.post("/projects/new")
    assert client.get("/projects/").get_json()["current_project_id"] is None
    assert client.post(f"/projects/{pid}/load").status_code == 200
    assert client.get("/projects/current.json").get_json()["current_project_id"] == pid

    assert client.delete(f"/projects/{pid}").status_code == 200
    assert client.get("/projects/").get_json()["rows"] == []
    assert client.post(f"/projects/{pid}/load").status_code == 404

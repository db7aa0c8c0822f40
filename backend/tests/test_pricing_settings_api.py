from tradequote.core.permissions import Permissions

from factories import client, login, make_company, make_job, make_member, specialty_id, trade_id


def test_estimate_uses_trade_wide_rule_and_redacts_for_users():
    company = make_company()
    _, owner = make_member(company, "OWNER")
    _, username = make_member(company, "USER")
    body = {"unit": "LF", "length": "10"}

    r = client.post("/pricing/estimate", json=body, headers=login(owner))
    assert r.status_code == 200, r.text
    est = r.json()
    # MA carpentry LF base 8.00 x 1.15 anchor x 1.15 standard
    assert est["unit_price"] == "10.58"
    assert est["total"] == "105.80"
    assert est["low"] == "92.00"

    r = client.post("/pricing/estimate", json=body, headers=login(username))
    est = r.json()
    assert est["unit_price"] is None
    assert est["total"] is None
    assert est["quantity"] == 10.0


def test_estimate_prefers_specialty_rule():
    company = make_company()
    _, owner = make_member(company, "OWNER")
    headers = login(owner)
    regions = client.get("/regions", headers=headers).json()
    ri = next(r for r in regions if r["code"] == "RI")
    stairs = specialty_id("stairs")

    for spec, price in ((None, "10.00"), (stairs, "20.00")):
        r = client.post("/pricing-rules", json={
            "region_id": ri["id"], "trade_id": trade_id(), "specialty_id": spec, "unit": "EA", "base_price": price,
        }, headers=headers)
        assert r.status_code == 201, r.text

    exact = client.post("/pricing/estimate", json={"region_id": ri["id"], "unit": "EA", "specialty_id": stairs}, headers=headers).json()
    assert exact["unit_price"] == "26.45"
    fallback = client.post("/pricing/estimate", json={"region_id": ri["id"], "unit": "EA", "specialty_id": specialty_id("deck")}, headers=headers).json()
    assert fallback["unit_price"] == "13.23"


def test_estimate_without_rule_is_404():
    company = make_company()
    _, owner = make_member(company, "OWNER")
    r = client.post("/pricing/estimate", json={"unit": "SQ", "length": "10", "width": "10"}, headers=login(owner))
    assert r.status_code == 404


def test_pricing_rule_update_and_listing():
    company = make_company()
    _, owner = make_member(company, "OWNER")
    _, username = make_member(company, "USER")
    headers = login(owner)
    rules = client.get(f"/pricing-rules?trade_id={trade_id('tile')}&unit=SF", headers=headers).json()
    assert len(rules) >= 1
    rule = rules[0]
    r = client.put(f"/pricing-rules/{rule['id']}", json={"enabled": True, "base_price": rule["base_price"]}, headers=headers)
    assert r.status_code == 200
    assert client.get("/pricing-rules", headers=login(username)).status_code == 403


def test_pricing_rule_base_prices_follow_company_view_prices():
    company = make_company()
    _, blind = make_member(company, "ADMIN")
    _, viewer = make_member(company, "ADMIN", permissions=Permissions(can_view_prices=True))
    query = f"/pricing-rules?trade_id={trade_id()}&unit=LF"

    est = client.post("/pricing/estimate", json={"unit": "LF", "length": "10"}, headers=login(blind)).json()
    assert est["unit_price"] is None and est["base_price"] is None
    rules = client.get(query, headers=login(blind)).json()
    assert rules and all(r["base_price"] is None for r in rules)

    rules = client.get(query, headers=login(viewer)).json()
    assert "8.00" in {r["base_price"] for r in rules}


def test_pricing_rule_writes_require_edit_prices():
    company = make_company()
    _, viewer = make_member(company, "ADMIN", permissions=Permissions(can_view_prices=True))
    _, editor = make_member(company, "ADMIN", permissions=Permissions(can_edit_prices=True))
    regions = client.get("/regions", headers=login(viewer)).json()
    ri = next(r for r in regions if r["code"] == "RI")
    body = {"region_id": ri["id"], "trade_id": trade_id("painting"), "unit": "HR", "base_price": "55.00"}

    assert client.post("/pricing-rules", json=body, headers=login(viewer)).status_code == 403
    r = client.post("/pricing-rules", json=body, headers=login(editor))
    assert r.status_code == 201, r.text
    # editing does not imply viewing
    assert r.json()["base_price"] is None
    rule_id = r.json()["id"]
    assert client.put(f"/pricing-rules/{rule_id}", json={"enabled": False}, headers=login(viewer)).status_code == 403
    assert client.put(f"/pricing-rules/{rule_id}", json={"enabled": False}, headers=login(editor)).status_code == 200


def test_user_estimate_limited_to_allowed_specialties():
    company = make_company()
    _, username = make_member(company, "USER", specialties=("stairs",))
    headers = login(username)
    body = {"unit": "LF", "length": "4"}
    r = client.post("/pricing/estimate", json={**body, "specialty_id": specialty_id("stairs")}, headers=headers)
    assert r.status_code == 200, r.text
    r = client.post("/pricing/estimate", json={**body, "specialty_id": specialty_id("deck")}, headers=headers)
    assert r.status_code == 403
    r = client.post("/pricing/estimate", json={**body, "specialty_id": specialty_id("general", "painting")}, headers=headers)
    assert r.status_code == 400


def test_settings_feed_job_totals():
    company = make_company()
    _, owner = make_member(company, "OWNER")
    _, username = make_member(company, "USER")
    headers = login(owner)
    assert client.get("/settings/", headers=headers).json()["tax_rate"] == 0

    r = client.post("/settings/", json={"tax_rate": "10", "profit_rate": "5"}, headers=headers)
    assert r.status_code == 200, r.text
    assert r.json()["tax_rate"] == 10.0
    assert client.post("/settings/", json={"tax_rate": "1"}, headers=login(username)).status_code == 403

    job = make_job(company, "deck", items=(("2", "50.00"),))
    totals = client.get(f"/jobs/{job}", headers=headers).json()["totals"]
    assert totals == {"subtotal": "100.00", "tax": "10.00", "overhead": "0.00", "profit": "5.00", "total": "115.00"}


def test_schedule_range():
    company = make_company()
    _, owner = make_member(company, "OWNER")
    may = make_job(company, "deck", status="SCHEDULED", scheduled_at="2030-05-10")
    make_job(company, "deck", status="SCHEDULED", scheduled_at="2030-06-02")
    make_job(company, "deck")
    headers = login(owner)
    r = client.get("/schedule/jobs?start=2030-05-01&end=2030-05-31", headers=headers)
    assert r.status_code == 200
    assert [j["id"] for j in r.json()] == [may]
    assert r.json()[0]["assignments"] == []
    assert client.get("/schedule/jobs?start=soon&end=later", headers=headers).status_code == 400

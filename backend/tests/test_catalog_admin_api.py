from tradequote.core.permissions import Permissions

from factories import client, login, make_company, make_member, make_service, specialty_id


def test_health():
    r = client.get("/health/")
    assert r.status_code == 200
    assert r.json() == {"status": "ok"}


def test_login_errors():
    company = make_company()
    _, username = make_member(company, "USER")
    assert client.post("/auth/login-json", json={"username": username, "password": "nope"}).status_code == 401
    assert client.post("/auth/login-json", json={"username": "ghost_user", "password": "x"}).status_code == 401
    _, inactive = make_member(company, "USER", is_active=False)
    assert client.post("/auth/login-json", json={"username": inactive, "password": "testpass"}).status_code == 403


def test_form_login():
    company = make_company()
    _, username = make_member(company, "OWNER")
    r = client.post("/auth/login", data={"username": username, "password": "testpass"})
    assert r.status_code == 200, r.text
    assert r.json()["token_type"] == "bearer"


def test_requests_without_token_are_rejected():
    assert client.get("/jobs/").status_code == 401
    assert client.get("/jobs/", headers={"Authorization": "Bearer garbage"}).status_code == 401


def test_deactivation_takes_effect_on_existing_token():
    company = make_company()
    _, owner = make_member(company, "OWNER")
    user_id, username = make_member(company, "USER")
    headers = login(username)
    assert client.get("/auth/me", headers=headers).status_code == 200
    r = client.put(f"/employees/{user_id}/active", json={"is_active": False}, headers=login(owner))
    assert r.status_code == 200
    assert client.get("/auth/me", headers=headers).status_code == 403


def test_me_and_onboarding():
    company = make_company()
    _, username = make_member(company, "USER")
    headers = login(username)
    me = client.get("/auth/me", headers=headers).json()
    assert me["role"] == "USER"
    assert me["trade_slug"] == "carpentry"
    assert me["needs_onboarding"] is True

    r = client.post("/onboarding/specialties", json={"specialty_ids": [specialty_id("stairs")]}, headers=headers)
    assert r.status_code == 200, r.text
    assert client.get("/auth/me", headers=headers).json()["needs_onboarding"] is False
    mine = client.get("/user/specialties", headers=headers).json()
    assert mine["specialty_ids"] == [specialty_id("stairs")]

    bad = client.post("/onboarding/specialties", json={"specialty_ids": [specialty_id("general", "tile")]}, headers=headers)
    assert bad.status_code == 400


def test_services_limited_to_allowed_specialties_and_redacted():
    company = make_company()
    stairs_svc = make_service(company, "stairs", "120.00")
    deck_svc = make_service(company, "deck", "90.00")
    _, username = make_member(company, "USER", specialties=("stairs",))
    _, owner = make_member(company, "OWNER")

    rows = client.get("/services", headers=login(username)).json()
    assert [s["id"] for s in rows] == [stairs_svc]
    assert rows[0]["unit_price"] is None

    rows = client.get("/services", headers=login(owner)).json()
    prices = {s["id"]: s["unit_price"] for s in rows}
    assert prices == {stairs_svc: "120.00", deck_svc: "90.00"}

    by_spec = client.get(f"/services/by-specialty/{specialty_id('deck')}", headers=login(username)).json()
    assert by_spec == []


def test_user_with_view_prices_sees_service_prices():
    company = make_company()
    svc = make_service(company, "doors", "450.00")
    _, username = make_member(company, "USER", permissions=Permissions(can_view_prices=True), specialties=("doors",))
    rows = client.get("/services/available", headers=login(username)).json()
    assert rows[0]["id"] == svc
    assert rows[0]["unit_price"] == "450.00"


def test_admin_with_view_all_gets_every_specialty():
    company = make_company()
    make_service(company, "roofing", "450.00")
    _, narrow = make_member(company, "ADMIN")
    _, wide = make_member(company, "ADMIN", permissions=Permissions(can_view_all_specialties=True))
    assert client.get("/services", headers=login(narrow)).json() == []
    assert len(client.get("/services", headers=login(wide)).json()) == 1


def test_catalog_lookups():
    company = make_company()
    _, username = make_member(company, "USER")
    headers = login(username)
    slugs = {t["slug"] for t in client.get("/trades", headers=headers).json()}
    assert {"carpentry", "painting", "tile", "house_cleaning"} <= slugs
    carpentry = next(t for t in client.get("/trades", headers=headers).json() if t["slug"] == "carpentry")
    specs = client.get(f"/specialties/by-trade/{carpentry['id']}", headers=headers).json()
    assert {"stairs", "deck", "finish"} <= {s["slug"] for s in specs}
    assert client.get(f"/specialties?trade_id={carpentry['id']}", headers=headers).json() == specs


def test_admin_users_requires_manage_users():
    company = make_company()
    _, plain = make_member(company, "USER")
    _, manager = make_member(company, "USER", permissions=Permissions(can_manage_users=True))
    assert client.get("/admin/users", headers=login(plain)).status_code == 403
    r = client.get("/admin/users", headers=login(manager))
    assert r.status_code == 200
    assert len(r.json()) == 2


def test_admin_patch_permissions_is_partial_and_validated():
    company = make_company()
    _, owner = make_member(company, "OWNER")
    target_id, _ = make_member(company, "USER", permissions=Permissions(can_audit=True))
    headers = login(owner)

    r = client.patch(f"/admin/users/{target_id}/permissions", json={"can_view_prices": True}, headers=headers)
    assert r.status_code == 200, r.text
    perms = r.json()["permissions"]
    assert perms["can_view_prices"] is True
    assert perms["can_audit"] is True

    assert client.patch(f"/admin/users/{target_id}/permissions", json={"is_god": True}, headers=headers).status_code == 422
    stored = client.get(f"/admin/users/{target_id}/permissions", headers=headers).json()["permissions"]
    assert stored == perms


def test_admin_cannot_reach_other_company_users():
    company, other = make_company(), make_company()
    _, owner = make_member(company, "OWNER")
    outsider_id, _ = make_member(other, "USER")
    headers = login(owner)
    assert client.get(f"/admin/users/{outsider_id}/permissions", headers=headers).status_code == 404
    assert client.patch(f"/admin/users/{outsider_id}/active", json={"is_active": False}, headers=headers).status_code == 404


def test_admin_active_and_password_reset():
    company = make_company()
    owner_id, owner = make_member(company, "OWNER")
    target_id, target = make_member(company, "USER")
    headers = login(owner)
    assert client.patch(f"/admin/users/{owner_id}/active", json={"is_active": False}, headers=headers).status_code == 400

    r = client.patch(f"/admin/users/{target_id}/reset-password", json={"new_password": "fresh-pass"}, headers=headers)
    assert r.status_code == 200
    login(target, "fresh-pass")


def test_only_owner_can_reset_owner_password():
    company = make_company()
    owner_id, owner = make_member(company, "OWNER")
    _, manager = make_member(company, "USER", permissions=Permissions(can_manage_users=True))
    _, admin = make_member(company, "ADMIN", permissions=Permissions(can_manage_users=True))
    body = {"new_password": "taken-over"}

    for username in (manager, admin):
        r = client.patch(f"/admin/users/{owner_id}/reset-password", json=body, headers=login(username))
        assert r.status_code == 403
    assert client.post("/auth/login-json", json={"username": owner, "password": "taken-over"}).status_code == 401
    login(owner)

    r = client.patch(f"/admin/users/{owner_id}/reset-password", json=body, headers=login(owner))
    assert r.status_code == 200
    login(owner, "taken-over")


def test_admin_user_specialties():
    company = make_company()
    _, owner = make_member(company, "OWNER")
    target_id, _ = make_member(company, "USER")
    headers = login(owner)
    wanted = sorted([specialty_id("deck"), specialty_id("stairs")])
    r = client.put(f"/admin/users/{target_id}/specialties", json={"specialty_ids": wanted}, headers=headers)
    assert r.status_code == 200
    assert client.get(f"/admin/users/{target_id}/specialties", headers=headers).json()["specialty_ids"] == wanted
    bad = client.put(f"/admin/users/{target_id}/specialties", json={"specialty_ids": [specialty_id("general", "painting")]}, headers=headers)
    assert bad.status_code == 400


def test_service_pricing_requires_edit_prices():
    company = make_company()
    svc = make_service(company, "stairs", "75.00")
    _, owner = make_member(company, "OWNER")
    _, admin = make_member(company, "ADMIN")
    body = {"pricing_unit": "EA", "unit_price": "80.00"}
    assert client.patch(f"/admin/services/{svc}/pricing", json=body, headers=login(admin)).status_code == 403
    r = client.patch(f"/admin/services/{svc}/pricing", json=body, headers=login(owner))
    assert r.status_code == 200
    assert r.json()["unit_price"] == "80.00"


def test_register_adds_member_to_company():
    company = make_company()
    _, owner = make_member(company, "OWNER")
    _, plain = make_member(company, "USER")
    headers = login(owner)
    r = client.post("/auth/register", json={"username": "new_hire_one", "password": "secret1"}, headers=headers)
    assert r.status_code == 200, r.text
    assert r.json()["company_id"] == company
    assert client.post("/auth/register", json={"username": "new_hire_one", "password": "secret1"}, headers=headers).status_code == 409
    assert client.post("/auth/register", json={"username": "new_hire_two", "password": "secret1"}, headers=login(plain)).status_code == 403
    login("new_hire_one", "secret1")


def test_employees_listing():
    company = make_company()
    _, owner = make_member(company, "OWNER")
    user_id, username = make_member(company, "USER")
    rows = client.get("/employees/", headers=login(owner)).json()
    assert user_id in {r["user_id"] for r in rows}
    assert client.get("/employees/", headers=login(username)).status_code == 403

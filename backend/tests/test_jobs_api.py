from tradequote.core.permissions import ALL_PERMISSIONS, Permissions

from factories import assign, client, login, make_company, make_job, make_member, specialty_id

VIEW = Permissions(can_view_prices=True)
VIEW_EDIT = Permissions(can_view_prices=True, can_edit_prices=True)


def job_ids(headers):
    r = client.get("/jobs/", headers=headers)
    assert r.status_code == 200, r.text
    return {j["id"] for j in r.json()["items"]}, r.json()["stats"]


def test_user_sees_only_allowed_specialty_until_assigned():
    company = make_company()
    stairs = make_job(company, "stairs")
    deck = make_job(company, "deck")
    loose = make_job(company, None)
    user_id, username = make_member(company, "USER", specialties=("stairs",))
    headers = login(username)

    ids, stats = job_ids(headers)
    assert ids == {stairs}
    assert stats["total"] == 1 and stats["draft"] == 1

    assign(deck, user_id)
    ids, _ = job_ids(headers)
    assert ids == {stairs, deck}

    assign(loose, user_id)
    ids, stats = job_ids(headers)
    assert ids == {stairs, deck, loose}
    assert stats["total"] == 3


def test_owner_and_admin_see_all_jobs_support_sees_none():
    company = make_company()
    created = {make_job(company, "stairs", status="SENT"), make_job(company, "deck"), make_job(company, None, status="DONE")}
    _, owner = make_member(company, "OWNER")
    _, admin = make_member(company, "ADMIN")
    _, support = make_member(company, "SUPPORT")

    ids, stats = job_ids(login(owner))
    assert ids == created
    assert (stats["sent"], stats["draft"], stats["done"]) == (1, 1, 1)
    assert job_ids(login(admin))[0] == created

    ids, stats = job_ids(login(support))
    assert ids == set()
    assert stats["total"] == 0


def test_jobs_never_leak_across_companies():
    mine, other = make_company(), make_company()
    foreign = make_job(other, "stairs")
    _, owner = make_member(mine, "OWNER")
    headers = login(owner)
    assert foreign not in job_ids(headers)[0]
    assert client.get(f"/jobs/{foreign}", headers=headers).status_code == 404


def test_user_without_specialties_gets_404_for_unassigned_job():
    company = make_company()
    job = make_job(company, "deck")
    _, username = make_member(company, "USER")
    assert client.get(f"/jobs/{job}", headers=login(username)).status_code == 404


def test_job_detail_prices_follow_capped_permissions():
    company = make_company()
    job = make_job(company, "stairs", items=(("2", "75.00"),))
    user_id, username = make_member(company, "USER", permissions=VIEW, specialties=("stairs",))
    headers = login(username)

    # visible via specialty but no job grant: effective view_prices is false
    data = client.get(f"/jobs/{job}", headers=headers).json()
    assert data["permissions"]["can_view_prices"] is False
    assert data["company_permissions"]["can_view_prices"] is True
    assert data["items"][0]["unit_price"] is None
    assert data["items"][0]["line_total"] is None
    assert data["totals"] is None

    assign(job, user_id, VIEW)
    data = client.get(f"/jobs/{job}", headers=headers).json()
    assert data["my_role"] == "USER"
    assert data["items"][0]["unit_price"] == "75.00"
    assert data["items"][0]["line_total"] == "150.00"
    assert data["totals"]["subtotal"] == "150.00"


def test_job_grant_is_capped_by_company_ceiling():
    company = make_company()
    job = make_job(company, "stairs", items=(("1", "40.00"),))
    user_id, username = make_member(company, "USER", specialties=("stairs",))
    assign(job, user_id, ALL_PERMISSIONS)
    data = client.get(f"/jobs/{job}", headers=login(username)).json()
    assert data["permissions"] == {
        "can_manage_users": False,
        "can_view_all_specialties": False,
        "can_view_prices": False,
        "can_edit_prices": False,
        "can_audit": False,
    }
    assert data["items"][0]["unit_price"] is None


def test_owner_creates_job_with_server_side_totals_and_audit():
    company = make_company()
    _, owner = make_member(company, "OWNER")
    headers = login(owner)
    payload = {
        "client_name": "Ana",
        "specialty_id": specialty_id("stairs"),
        "items": [{"qty": "3", "unit_price": "10.50", "pricing_unit": "EA"}],
    }
    r = client.post("/jobs/", json=payload, headers=headers)
    assert r.status_code == 201, r.text
    data = r.json()
    assert data["items"][0]["line_total"] == "31.50"
    assert data["status"] == "DRAFT"

    audit = client.get(f"/jobs/{data['id']}/audit", headers=headers)
    assert audit.status_code == 200
    assert "JOB_CREATED" in [a["action"] for a in audit.json()]


def test_create_job_validates_specialty_and_trade():
    company = make_company()
    _, owner = make_member(company, "OWNER")
    headers = login(owner)
    r = client.post("/jobs/", json={"specialty_id": specialty_id("general", "painting")}, headers=headers)
    assert r.status_code == 400

    bare = make_company(trade=None)
    _, bare_owner = make_member(bare, "OWNER")
    assert client.post("/jobs/", json={"client_name": "x"}, headers=login(bare_owner)).status_code == 400


def test_user_cannot_create_job_outside_allowed_specialties():
    company = make_company()
    _, username = make_member(company, "USER", specialties=("stairs",))
    r = client.post("/jobs/", json={"specialty_id": specialty_id("deck")}, headers=login(username))
    assert r.status_code == 403


def test_replacing_items_requires_effective_edit_prices():
    company = make_company()
    job = make_job(company, "stairs", items=(("1", "50.00"),))
    user_id, username = make_member(company, "USER", permissions=VIEW_EDIT, specialties=("stairs",))
    headers = login(username)
    body = {"items": [{"qty": "2", "unit_price": "60.00"}]}
    assert client.put(f"/jobs/{job}", json=body, headers=headers).status_code == 403

    assign(job, user_id, VIEW_EDIT)
    r = client.put(f"/jobs/{job}", json=body, headers=headers)
    assert r.status_code == 200, r.text
    assert r.json()["items"][0]["line_total"] == "120.00"


def test_status_change_is_audited():
    company = make_company()
    job = make_job(company, "deck")
    _, owner = make_member(company, "OWNER")
    headers = login(owner)
    r = client.put(f"/jobs/{job}", json={"status": "SENT"}, headers=headers)
    assert r.status_code == 200
    assert r.json()["status"] == "SENT"
    actions = [a["action"] for a in client.get(f"/jobs/{job}/audit", headers=headers).json()]
    assert "STATUS_CHANGED:SENT" in actions


def test_audit_requires_can_audit():
    company = make_company()
    job = make_job(company, "stairs")
    user_id, username = make_member(company, "USER", specialties=("stairs",))
    assign(job, user_id, Permissions(can_audit=True))
    assert client.get(f"/jobs/{job}/audit", headers=login(username)).status_code == 403


def test_only_managers_delete_jobs():
    company = make_company()
    job = make_job(company, "stairs")
    _, username = make_member(company, "USER", specialties=("stairs",))
    _, owner = make_member(company, "OWNER")
    assert client.delete(f"/jobs/{job}", headers=login(username)).status_code == 403
    owner_headers = login(owner)
    assert client.delete(f"/jobs/{job}", headers=owner_headers).status_code == 204
    assert client.get(f"/jobs/{job}", headers=owner_headers).status_code == 404


def test_assignment_flow():
    company = make_company()
    job = make_job(company, "deck")
    _, owner = make_member(company, "OWNER")
    worker_id, worker = make_member(company, "USER", permissions=VIEW)
    owner_headers = login(owner)

    r = client.post(
        f"/jobs/{job}/assignments",
        json={"user_id": worker_id, "permissions": {"can_view_prices": True, "can_audit": True}},
        headers=owner_headers,
    )
    assert r.status_code == 201, r.text
    body = r.json()
    assert body["permissions"]["can_audit"] is True
    assert body["effective_permissions"] == {
        "can_manage_users": False,
        "can_view_all_specialties": False,
        "can_view_prices": True,
        "can_edit_prices": False,
        "can_audit": False,
    }
    assert job in job_ids(login(worker))[0]

    r = client.patch(f"/jobs/{job}/assignments/{worker_id}/permissions", json={"can_view_prices": False}, headers=owner_headers)
    assert r.status_code == 200
    assert r.json()["permissions"]["can_view_prices"] is False
    assert r.json()["permissions"]["can_audit"] is True

    listed = client.get(f"/jobs/{job}/assignments", headers=owner_headers).json()
    assert [a["user_id"] for a in listed] == [worker_id]


def test_assignment_permission_patch_rejects_unknown_flags():
    company = make_company()
    job = make_job(company, "deck")
    _, owner = make_member(company, "OWNER")
    worker_id, _ = make_member(company, "USER")
    assign(job, worker_id)
    r = client.patch(f"/jobs/{job}/assignments/{worker_id}/permissions", json={"can_fly": True}, headers=login(owner))
    assert r.status_code == 422


def test_assignment_rules():
    company, other = make_company(), make_company()
    job = make_job(company, "deck")
    _, owner = make_member(company, "OWNER")
    outsider_id, _ = make_member(other, "USER")
    member_id, member = make_member(company, "USER", specialties=("deck",))
    owner_headers = login(owner)

    assert client.post(f"/jobs/{job}/assignments", json={"user_id": outsider_id}, headers=owner_headers).status_code == 400
    assert client.patch(f"/jobs/{job}/assignments/{member_id}/permissions", json={}, headers=owner_headers).status_code == 404
    # plain USER lacks manage-users authority
    assert client.post(f"/jobs/{job}/assignments", json={"user_id": member_id}, headers=login(member)).status_code == 403


def test_photos():
    company = make_company()
    job = make_job(company, "stairs")
    _, owner = make_member(company, "OWNER")
    headers = login(owner)
    r = client.post("/jobs/estimate-photos", json={"job_id": job, "url": "data:image/png;base64,AAA"}, headers=headers)
    assert r.status_code == 201, r.text
    photos = client.get(f"/jobs/{job}/photos", headers=headers).json()
    assert [p["url"] for p in photos] == ["data:image/png;base64,AAA"]

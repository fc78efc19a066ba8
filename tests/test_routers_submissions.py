"""
test_routers_submissions.py — Tests for templates, submissions and supplier views

Called by: pytest
Depends on: boqcore.routers.templates, tests/conftest.py (client fixtures)
"""

from boqcore.models import Material, MaterialSubmission


def test_list_templates(client, template):
    resp = client.get("/api/material-templates")
    assert resp.status_code == 200
    tpl = resp.json()["templates"][0]
    assert (tpl["name"], tpl["code"], tpl["category"]) == ("Cement", "CEM-01", "Concrete")


def test_create_template(client, category):
    resp = client.post("/api/material-templates", json={"name": "Sand", "code": "SAND-01", "category": "Concrete"})
    assert resp.status_code == 201
    assert resp.json()["template"]["code"] == "SAND-01"


def test_create_template_duplicate_code(client, template):
    resp = client.post("/api/material-templates", json={"name": "Cement 43", "code": "CEM-01"})
    assert resp.status_code == 409


def test_supplier_cannot_create_template(supplier_client):
    resp = supplier_client.post("/api/material-templates", json={"name": "Sand", "code": "SAND-01"})
    assert resp.status_code == 403


def test_update_and_delete_template(client, template):
    resp = client.put(f"/api/material-templates/{template.id}", json={"code": "CEM-OPC"})
    assert resp.json()["template"]["code"] == "CEM-OPC"
    resp = client.delete(f"/api/material-templates/{template.id}")
    assert resp.status_code == 200
    assert client.get("/api/material-templates").json() == {"templates": []}


def test_submission_approve_end_to_end(client, login_as, supplier_user, admin_user, template, shop, db_session):
    """Supplier submits Cement at 350/bag; staff approval publishes exactly one material."""
    login_as(supplier_user)
    resp = client.post(
        "/api/material-submissions",
        json={"templateId": template.id, "shopId": shop.id, "rate": 350, "unit": "bag", "brandName": "ACC"},
    )
    assert resp.status_code == 201
    submission = resp.json()["submission"]
    assert submission["status"] == "pending"
    assert submission["template_name"] == "Cement"
    assert submission["submitted_by"] == supplier_user.id

    login_as(admin_user)

    pending = client.get("/api/material-submissions-pending-approval").json()["submissions"]
    assert [(p["id"], p["status"]) for p in pending] == [(submission["id"], "pending")]

    resp = client.post(f"/api/material-submissions/{submission['id']}/approve")
    assert resp.status_code == 200
    body = resp.json()
    assert body["submission"]["status"] == "approved"
    material_id = body["material"]["id"]

    public = client.get("/api/materials").json()["materials"]
    assert [(m["id"], m["name"], m["code"], m["rate"], m["source"]) for m in public] == [
        (material_id, "Cement", "CEM-01", 350.0, "submission")
    ]

    again = client.post(f"/api/material-submissions/{submission['id']}/approve")
    assert again.status_code == 409
    assert db_session.query(Material).count() == 1


def test_submission_missing_template_id(supplier_client, shop, db_session):
    resp = supplier_client.post("/api/material-submissions", json={"shopId": shop.id, "rate": 10})
    assert resp.status_code == 400
    assert db_session.query(MaterialSubmission).count() == 0


def test_submission_unknown_shop(supplier_client, template):
    resp = supplier_client.post("/api/material-submissions", json={"templateId": template.id, "shopId": 999})
    assert resp.status_code == 404


def test_plain_user_cannot_submit(user_client, template, shop):
    resp = user_client.post("/api/material-submissions", json={"templateId": template.id, "shopId": shop.id})
    assert resp.status_code == 403


def test_reject_submission(client, submission, db_session):
    resp = client.post(f"/api/material-submissions/{submission.id}/reject", json={"reason": "Rate too high"})
    assert resp.status_code == 200
    assert resp.json()["submission"]["status"] == "rejected"
    assert db_session.query(Material).count() == 0
    assert client.get("/api/material-submissions-pending-approval").json() == {"submissions": []}


def test_reject_submission_without_reason(client, submission):
    resp = client.post(f"/api/material-submissions/{submission.id}/reject", json={})
    assert resp.status_code == 400


def test_approve_unknown_submission(client):
    assert client.post("/api/material-submissions/777/approve").status_code == 404


def test_supplier_views(supplier_client, submission, shop):
    subs = supplier_client.get("/api/supplier/my-submissions").json()["submissions"]
    assert [(s["id"], s["status"], s["shop_name"]) for s in subs] == [
        (submission.id, "pending", "Acme Building Supplies")
    ]
    shops = supplier_client.get("/api/supplier/my-shops").json()["shops"]
    assert [s["id"] for s in shops] == [shop.id]


def test_supplier_views_reject_other_roles(client):
    assert client.get("/api/supplier/my-submissions").status_code == 403
    assert client.get("/api/supplier/my-shops").status_code == 403

"""
test_routers_boq.py — Tests for /api/boq-projects, /api/boq-versions, /api/boq-items

Called by: pytest
Depends on: boqcore.routers.boq, tests/conftest.py (client fixtures)
"""


def test_project_crud(client):
    resp = client.post("/api/boq-projects", json={"name": "Villa 7", "client": "Mr. Rao", "budget": "1200000"})
    assert resp.status_code == 201
    project = resp.json()
    assert project["status"] == "draft"

    assert client.get(f"/api/boq-projects/{project['id']}").json()["name"] == "Villa 7"
    assert [p["id"] for p in client.get("/api/boq-projects").json()["projects"]] == [project["id"]]

    resp = client.put(f"/api/boq-projects/{project['id']}", json={"location": "Goa", "status": "submitted"})
    assert resp.json()["location"] == "Goa"
    assert resp.json()["status"] == "submitted"

    assert client.delete(f"/api/boq-projects/{project['id']}").status_code == 200
    assert client.get(f"/api/boq-projects/{project['id']}").status_code == 404


def test_project_backward_status_rejected(client, project):
    client.put(f"/api/boq-projects/{project.id}", json={"status": "finalized"})
    resp = client.put(f"/api/boq-projects/{project.id}", json={"status": "draft"})
    assert resp.status_code == 409


def test_project_unknown_status_is_validation_error(client, project):
    resp = client.put(f"/api/boq-projects/{project.id}", json={"status": "archived"})
    assert resp.status_code == 422
    body = resp.json()
    assert body["error"] == "Validation error"
    assert body["detail"]


def test_projects_require_login(anon_client):
    assert anon_client.get("/api/boq-projects").status_code == 401


def test_version_flow(client, project, version, items):
    resp = client.post("/api/boq-versions", json={"project_id": project.id, "copy_from_version": version.id})
    assert resp.status_code == 201
    new = resp.json()
    assert new["version_number"] == 2
    assert new["project_name"] == "Tower A"

    versions = client.get(f"/api/boq-versions/{project.id}").json()["versions"]
    assert [v["version_number"] for v in versions] == [2, 1]

    copied = client.get(f"/api/boq-items/version/{new['id']}").json()["items"]
    assert [i["estimator"] for i in copied] == ["flooring", "painting"]

    resp = client.put(f"/api/boq-versions/{new['id']}", json={"status": "submitted"})
    assert resp.json()["status"] == "submitted"
    assert client.put(f"/api/boq-versions/{new['id']}", json={"status": "draft"}).status_code == 409


def test_delete_version_scenario(client, project, version, items):
    """Deleting v1 keeps v2 and its copied items; the next version is v3."""
    v2 = client.post("/api/boq-versions", json={"project_id": project.id, "copy_from_version": version.id}).json()

    assert client.delete(f"/api/boq-versions/{version.id}").status_code == 200

    versions = client.get(f"/api/boq-versions/{project.id}").json()["versions"]
    assert [v["id"] for v in versions] == [v2["id"]]
    assert len(client.get(f"/api/boq-items/version/{v2['id']}").json()["items"]) == 2
    assert client.get(f"/api/boq-items/version/{version.id}").status_code == 404

    v3 = client.post("/api/boq-versions", json={"project_id": project.id}).json()
    assert v3["version_number"] == 3


def test_create_version_copy_from_foreign_version(client, project, version):
    other = client.post("/api/boq-projects", json={"name": "Tower B"}).json()
    resp = client.post("/api/boq-versions", json={"project_id": other["id"], "copy_from_version": version.id})
    assert resp.status_code == 404


def test_version_edits(client, version):
    assert client.get(f"/api/boq-versions/{version.id}/edits").json() == {"editedFields": {}}
    edits = {"12": {"rate": 48.5}}
    resp = client.post(f"/api/boq-versions/{version.id}/save-edits", json={"editedFields": edits})
    assert resp.status_code == 200
    assert client.get(f"/api/boq-versions/{version.id}/edits").json() == {"editedFields": edits}


def test_item_flow(client, project, version):
    resp = client.post(
        "/api/boq-items",
        json={
            "project_id": project.id,
            "version_id": version.id,
            "estimator": "doors",
            "table_data": {"product_name": "Flush Door", "step11_items": []},
        },
    )
    assert resp.status_code == 201
    item = resp.json()
    assert item["user_added"] is True

    project_items = client.get(f"/api/boq-items/project/{project.id}").json()["items"]
    assert [i["id"] for i in project_items] == [item["id"]]

    resp = client.put(f"/api/boq-items/{item['id']}", json={"table_data": {"product_name": "Teak Door"}})
    assert resp.json()["table_data"] == {"product_name": "Teak Door"}

    assert client.delete(f"/api/boq-items/{item['id']}").status_code == 200
    assert client.get(f"/api/boq-items/version/{version.id}").json() == {"items": []}


def test_add_item_unknown_version(client, project):
    resp = client.post(
        "/api/boq-items",
        json={"project_id": project.id, "version_id": 999, "estimator": "doors", "table_data": {}},
    )
    assert resp.status_code == 404


def test_listings_for_unknown_parent_are_404(client):
    resp = client.get("/api/boq-versions/999")
    assert resp.status_code == 404
    assert resp.json()["error"] == "Project not found"
    assert client.get("/api/boq-items/version/999").json()["error"] == "Version not found"
    assert client.get("/api/boq-items/project/999").status_code == 404

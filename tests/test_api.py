"""
End-to-end tests through the FastAPI routes.
"""

import re

import pytest

from clarity_api.core import access
from clarity_api.core.errors import PolicyDenied
from clarity_api.models import Project, ProjectMember

from conftest import auth_headers, enroll, make_image, make_profile

REJECTED = {"detail": "Operation rejected"}


@pytest.fixture
def users(db):
    return {
        "owner": make_profile(db, name="owner"),
        "other": make_profile(db, name="other"),
        "reviewer": make_profile(db, role="reviewer", name="reviewer"),
    }


@pytest.fixture
def headers(users):
    return {name: auth_headers(profile) for name, profile in users.items()}


def create_project(client, headers, name="Streets"):
    resp = client.post("/projects", json={"name": name, "description": "city scenes"}, headers=headers)
    assert resp.status_code == 200, resp.text
    return resp.json()


def create_label(client, headers, project_id, name="car"):
    resp = client.post(
        f"/projects/{project_id}/labels",
        json={"name": name, "color": "#EF4444", "annotation_type": "bounding_box"},
        headers=headers,
    )
    assert resp.status_code == 200, resp.text
    return resp.json()


def register_image(client, headers, project_id, name="street.PNG"):
    resp = client.post(
        f"/projects/{project_id}/images",
        json={"original_filename": name, "file_size": 2048, "width": 800, "height": 600},
        headers=headers,
    )
    assert resp.status_code == 200, resp.text
    return resp.json()


def create_annotation(client, headers, image_id, label_id):
    resp = client.post(
        f"/images/{image_id}/annotations",
        json={
            "label_id": label_id,
            "annotation_type": "bounding_box",
            "annotation_data": {"x": 0.1, "y": 0.2, "width": 0.3, "height": 0.4},
        },
        headers=headers,
    )
    assert resp.status_code == 200, resp.text
    return resp.json()


def test_health(client):
    assert client.get("/health").json() == {"ok": True}


class TestAuth:
    def test_register_login_me(self, client):
        resp = client.post("/auth/register", json={
            "email": "ana@example.com", "password": "s3cret", "full_name": "Ana",
        })
        assert resp.status_code == 200
        assert resp.json()["role"] == "annotator"

        resp = client.post("/auth/login", json={"email": "ana@example.com", "password": "s3cret"})
        assert resp.status_code == 200
        token = resp.json()["access_token"]

        me = client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert me.status_code == 200
        assert me.json()["email"] == "ana@example.com"

        again = client.post("/auth/register", json={"email": "ana@example.com", "password": "x"})
        assert again.status_code == 400

        bad = client.post("/auth/login", json={"email": "ana@example.com", "password": "wrong"})
        assert bad.status_code == 401

    def test_missing_token(self, client):
        assert client.get("/projects").status_code == 401

    def test_invalid_token(self, client):
        resp = client.get("/projects", headers={"Authorization": "Bearer not-a-jwt"})
        assert resp.status_code == 401

    def test_token_for_unknown_profile(self, client):
        class Ghost:
            id = "ghost"
        assert client.get("/projects", headers=auth_headers(Ghost)).status_code == 401


class TestProfiles:
    def test_update_own_name_but_not_role(self, client, headers):
        resp = client.patch("/profiles/me", json={"full_name": "Renamed", "role": "admin"}, headers=headers["owner"])
        assert resp.status_code == 200
        assert resp.json()["full_name"] == "Renamed"
        assert resp.json()["role"] == "annotator"


class TestProjects:
    def test_create_and_list(self, client, headers, users):
        project = create_project(client, headers["owner"])
        assert project["created_by"] == users["owner"].id
        assert project["status"] == "active"

        owned = client.get("/projects", headers=headers["owner"]).json()
        assert [p["id"] for p in owned] == [project["id"]]
        assert client.get("/projects", headers=headers["other"]).json() == []

    def test_creator_is_enrolled(self, client, headers, users):
        project = create_project(client, headers["owner"])
        members = client.get(f"/projects/{project['id']}/members", headers=headers["owner"]).json()
        assert [m["user_id"] for m in members] == [users["owner"].id]

    def test_project_and_enrollment_are_written_together(self, client, headers, db, monkeypatch):
        real_insert = access.insert

        def refuse_enrollment(db_, principal, kind, payload, **kwargs):
            if kind == "project_member":
                raise PolicyDenied(principal.id, "insert", kind)
            return real_insert(db_, principal, kind, payload, **kwargs)

        monkeypatch.setattr(access, "insert", refuse_enrollment)
        resp = client.post("/projects", json={"name": "Half"}, headers=headers["owner"])
        assert resp.status_code == 403

        assert db.query(Project).count() == 0
        assert db.query(ProjectMember).count() == 0

    def test_enrolling_others_is_rejected(self, client, headers, users):
        project = create_project(client, headers["owner"])
        resp = client.post(
            f"/projects/{project['id']}/members",
            json={"user_id": users["other"].id},
            headers=headers["owner"],
        )
        assert resp.status_code == 403

    def test_denied_and_missing_look_the_same(self, client, headers):
        project = create_project(client, headers["owner"])
        denied = client.get(f"/projects/{project['id']}", headers=headers["other"])
        missing = client.get("/projects/does-not-exist", headers=headers["other"])
        assert denied.status_code == missing.status_code == 403
        assert denied.json() == missing.json() == REJECTED

    def test_update_and_delete(self, client, headers):
        project = create_project(client, headers["owner"])
        pid = project["id"]

        resp = client.patch(f"/projects/{pid}", json={"status": "paused"}, headers=headers["owner"])
        assert resp.json()["status"] == "paused"
        assert client.patch(f"/projects/{pid}", json={"name": "x"}, headers=headers["other"]).status_code == 403

        assert client.delete(f"/projects/{pid}", headers=headers["other"]).status_code == 403
        assert client.delete(f"/projects/{pid}", headers=headers["owner"]).json() == {"ok": True}
        assert client.get(f"/projects/{pid}", headers=headers["owner"]).status_code == 403

    def test_dashboard_stats(self, client, headers, db, users):
        first = create_project(client, headers["owner"], name="First")
        create_project(client, headers["owner"], name="Second")
        register_image(client, headers["owner"], first["id"])
        register_image(client, headers["owner"], first["id"])
        image = register_image(client, headers["owner"], first["id"])
        client.patch(f"/images/{image['id']}", json={"status": "completed"}, headers=headers["owner"])

        stats = client.get("/projects/stats", headers=headers["owner"]).json()
        assert stats["total_projects"] == 2
        assert stats["total_images"] == 3
        assert stats["completed_images"] == 1
        assert stats["completion_rate"] == 33
        counts = {p["name"]: p["image_count"] for p in stats["recent_projects"]}
        assert counts == {"First": 3, "Second": 0}

        empty = client.get("/projects/stats", headers=headers["other"]).json()
        assert empty["total_projects"] == 0
        assert empty["completion_rate"] == 0


class TestLabels:
    def test_crud(self, client, headers):
        project = create_project(client, headers["owner"])
        label = create_label(client, headers["owner"], project["id"])
        assert label["color"] == "#EF4444"

        dup = client.post(
            f"/projects/{project['id']}/labels",
            json={"name": "car", "annotation_type": "polygon"},
            headers=headers["owner"],
        )
        assert dup.status_code == 409

        resp = client.patch(f"/labels/{label['id']}", json={"name": "vehicle"}, headers=headers["owner"])
        assert resp.json()["name"] == "vehicle"

        listed = client.get(f"/projects/{project['id']}/labels", headers=headers["owner"]).json()
        assert [l["name"] for l in listed] == ["vehicle"]
        assert client.get(f"/projects/{project['id']}/labels", headers=headers["other"]).json() == []

        assert client.delete(f"/labels/{label['id']}", headers=headers["owner"]).status_code == 200

    def test_bad_color(self, client, headers):
        project = create_project(client, headers["owner"])
        resp = client.post(
            f"/projects/{project['id']}/labels",
            json={"name": "car", "color": "red", "annotation_type": "polygon"},
            headers=headers["owner"],
        )
        assert resp.status_code == 422

    def test_foreign_project(self, client, headers):
        project = create_project(client, headers["owner"])
        resp = client.post(
            f"/projects/{project['id']}/labels",
            json={"name": "car", "annotation_type": "polygon"},
            headers=headers["other"],
        )
        assert resp.status_code == 403


class TestImages:
    def test_register_generates_storage_path(self, client, headers, users):
        project = create_project(client, headers["owner"])
        image = register_image(client, headers["owner"], project["id"])

        assert image["original_filename"] == "street.PNG"
        assert re.fullmatch(r"\d+-[0-9a-f]{9}\.png", image["filename"])
        assert image["file_path"] == f"{project['id']}/{image['filename']}"
        assert image["uploaded_by"] == users["owner"].id
        assert image["status"] == "pending"

    def test_status_filter_and_assignment(self, client, headers, users):
        project = create_project(client, headers["owner"])
        image = register_image(client, headers["owner"], project["id"])
        register_image(client, headers["owner"], project["id"])

        resp = client.patch(
            f"/images/{image['id']}",
            json={"status": "in_progress", "assigned_to": users["owner"].id},
            headers=headers["owner"],
        )
        assert resp.json()["assigned_to"] == users["owner"].id

        listed = client.get(
            f"/projects/{project['id']}/images", params={"status": "in_progress"}, headers=headers["owner"]
        ).json()
        assert [i["id"] for i in listed] == [image["id"]]

        assert client.get(f"/images/{image['id']}", headers=headers["other"]).status_code == 403

    def test_assignee_must_be_project_member(self, client, headers, users):
        project = create_project(client, headers["owner"])
        image = register_image(client, headers["owner"], project["id"])
        url = f"/images/{image['id']}"

        outsider = client.patch(url, json={"assigned_to": users["other"].id}, headers=headers["owner"])
        unknown = client.patch(url, json={"assigned_to": "nobody"}, headers=headers["owner"])
        assert outsider.status_code == unknown.status_code == 403
        assert outsider.json() == unknown.json() == REJECTED

    def test_non_image_file_is_rejected(self, client, headers):
        project = create_project(client, headers["owner"])
        resp = client.post(
            f"/projects/{project['id']}/images",
            json={"original_filename": "notes.txt", "file_size": 12},
            headers=headers["owner"],
        )
        assert resp.status_code == 422


class TestAnnotations:
    def test_annotate_and_review(self, client, headers, users):
        project = create_project(client, headers["owner"])
        label = create_label(client, headers["owner"], project["id"])
        image = register_image(client, headers["owner"], project["id"])
        annotation = create_annotation(client, headers["owner"], image["id"], label["id"])

        assert annotation["created_by"] == users["owner"].id
        assert annotation["is_approved"] is None

        assert client.get(f"/annotations/{annotation['id']}", headers=headers["other"]).status_code == 403

        resp = client.post(
            f"/annotations/{annotation['id']}/review",
            json={"is_approved": True, "notes": "looks right"},
            headers=headers["reviewer"],
        )
        assert resp.status_code == 200
        body = resp.json()
        assert body["is_approved"] is True
        assert body["reviewed_by"] == users["reviewer"].id
        assert body["notes"] == "looks right"

        listed = client.get(f"/images/{image['id']}/annotations", headers=headers["reviewer"]).json()
        assert [a["id"] for a in listed] == [annotation["id"]]

    def test_only_project_creator_annotates(self, client, headers):
        project = create_project(client, headers["owner"])
        label = create_label(client, headers["owner"], project["id"])
        image = register_image(client, headers["owner"], project["id"])
        resp = client.post(
            f"/images/{image['id']}/annotations",
            json={"label_id": label["id"], "annotation_type": "bounding_box", "annotation_data": {}},
            headers=headers["reviewer"],
        )
        assert resp.status_code == 403

    def test_foreign_and_missing_labels_look_the_same(self, client, headers):
        project = create_project(client, headers["owner"])
        image = register_image(client, headers["owner"], project["id"])
        foreign = create_label(client, headers["other"], create_project(client, headers["other"])["id"])

        def annotate(label_id):
            return client.post(
                f"/images/{image['id']}/annotations",
                json={"label_id": label_id, "annotation_type": "bounding_box", "annotation_data": {}},
                headers=headers["owner"],
            )

        borrowed, missing = annotate(foreign["id"]), annotate("nope")
        assert borrowed.status_code == missing.status_code == 403
        assert borrowed.json() == missing.json() == REJECTED

    def test_label_cannot_be_swapped_for_a_foreign_one(self, client, headers):
        project = create_project(client, headers["owner"])
        label = create_label(client, headers["owner"], project["id"])
        image = register_image(client, headers["owner"], project["id"])
        annotation = create_annotation(client, headers["owner"], image["id"], label["id"])
        foreign = create_label(client, headers["other"], create_project(client, headers["other"])["id"])

        resp = client.patch(
            f"/annotations/{annotation['id']}", json={"label_id": foreign["id"]}, headers=headers["owner"]
        )
        assert resp.status_code == 403

        # removing someone else's label never touches this annotation
        assert client.delete(f"/labels/{foreign['id']}", headers=headers["other"]).status_code == 200
        resp = client.get(f"/annotations/{annotation['id']}", headers=headers["owner"])
        assert resp.status_code == 200
        assert resp.json()["label_id"] == label["id"]

    def test_update_and_delete(self, client, headers):
        project = create_project(client, headers["owner"])
        label = create_label(client, headers["owner"], project["id"])
        image = register_image(client, headers["owner"], project["id"])
        annotation = create_annotation(client, headers["owner"], image["id"], label["id"])
        aid = annotation["id"]

        resp = client.patch(
            f"/annotations/{aid}", json={"annotation_data": {"points": [[1, 2]]}}, headers=headers["owner"]
        )
        assert resp.json()["annotation_data"] == {"points": [[1, 2]]}

        assert client.delete(f"/annotations/{aid}", headers=headers["reviewer"]).status_code == 403
        assert client.delete(f"/annotations/{aid}", headers=headers["owner"]).status_code == 200

    def test_deleting_image_removes_annotations(self, client, headers):
        project = create_project(client, headers["owner"])
        label = create_label(client, headers["owner"], project["id"])
        image = register_image(client, headers["owner"], project["id"])
        annotation = create_annotation(client, headers["owner"], image["id"], label["id"])

        assert client.delete(f"/images/{image['id']}", headers=headers["owner"]).status_code == 200
        assert client.get(f"/annotations/{annotation['id']}", headers=headers["owner"]).status_code == 403

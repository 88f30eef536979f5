"""Tests for the /api/docs endpoints and document branches."""

from tests.conftest import make_document


def _create(client, **overrides) -> dict:
    resp = client.post("/api/docs", json=make_document(**overrides))
    assert resp.status_code == 201
    return resp.json()


class TestDocumentsCRUD:

    def test_create_returns_document_with_main_branch(self, client):
        doc = _create(client, title="Draft")
        assert doc["title"] == "Draft"
        assert doc["author_id"] == "author-1"
        assert [b["name"] for b in doc["branches"]] == ["Main Branch"]
        assert doc["branches"][0]["is_main_branch"] is True

    def test_blank_title_rejected(self, client):
        resp = client.post("/api/docs", json=make_document(title="   "))
        assert resp.status_code == 422

    def test_get_document(self, client):
        doc_id = _create(client)["id"]
        resp = client.get(f"/api/docs/{doc_id}")
        assert resp.status_code == 200
        assert resp.json()["id"] == doc_id

    def test_get_missing_document_404(self, client):
        resp = client.get("/api/docs/missing")
        assert resp.status_code == 404
        body = resp.json()
        assert body["error"] == "DOCUMENT_NOT_FOUND"
        assert body["details"] == {"doc_id": "missing"}

    def test_update_document(self, client):
        doc_id = _create(client)["id"]
        resp = client.put(
            f"/api/docs/{doc_id}",
            json={"title": "Renamed", "synopsis": "New synopsis", "cover_image_path": "cover.png"},
        )
        assert resp.status_code == 200
        data = resp.json()
        assert data["title"] == "Renamed"
        assert data["cover_image_path"] == "cover.png"

    def test_update_missing_document_404(self, client):
        resp = client.put("/api/docs/missing", json={"title": "x"})
        assert resp.status_code == 404

    def test_delete_document(self, client):
        doc_id = _create(client)["id"]
        assert client.delete(f"/api/docs/{doc_id}").status_code == 204
        assert client.get(f"/api/docs/{doc_id}").status_code == 404
        assert client.delete(f"/api/docs/{doc_id}").status_code == 404

    def test_list_and_search(self, client):
        _create(client, title="The Long Winter")
        _create(client, title="Summer Stories")

        listed = client.get("/api/docs").json()
        assert len(listed) == 2

        found = client.get("/api/docs", params={"q": "winter"}).json()
        assert [d["title"] for d in found] == ["The Long Winter"]

    def test_list_pagination(self, client):
        for i in range(3):
            _create(client, title=f"Doc {i}")
        assert len(client.get("/api/docs", params={"skip": 1, "limit": 1}).json()) == 1


class TestDocumentBranches:

    def test_list_branches(self, client):
        doc_id = _create(client)["id"]
        resp = client.get(f"/api/docs/{doc_id}/branches")
        assert resp.status_code == 200
        assert len(resp.json()) == 1

    def test_list_branches_missing_document_404(self, client):
        assert client.get("/api/docs/missing/branches").status_code == 404

    def test_create_branch_seeded_with_content(self, client):
        doc_id = _create(client)["id"]
        resp = client.post(
            f"/api/docs/{doc_id}/branches",
            json={"name": "Alternate", "source_content": "A different ending."},
        )
        assert resp.status_code == 201
        branch = resp.json()
        assert branch["is_main_branch"] is False

        latest = client.get(f"/api/branches/{branch['id']}/versions/latest").json()
        assert latest["content"] == "A different ending."

    def test_create_branch_with_both_seeds_400(self, client):
        doc_id = _create(client)["id"]
        resp = client.post(
            f"/api/docs/{doc_id}/branches",
            json={"name": "Bad", "source_content": "x", "source_version_id": "y"},
        )
        assert resp.status_code == 400
        assert resp.json()["error"] == "VALIDATION_ERROR"

    def test_create_branch_missing_document_404(self, client):
        resp = client.post("/api/docs/missing/branches", json={"name": "Side"})
        assert resp.status_code == 404

    def test_main_branch_switches(self, client):
        doc_id = _create(client)["id"]
        side = client.post(f"/api/docs/{doc_id}/branches", json={"name": "Side"}).json()

        resp = client.post(f"/api/branches/{side['id']}/main")
        assert resp.status_code == 200
        assert resp.json()["is_main_branch"] is True

        main = client.get(f"/api/docs/{doc_id}/branches/main").json()
        assert main["id"] == side["id"]


class TestBranches:

    def test_rename_branch(self, client):
        branch_id = _create(client)["branches"][0]["id"]
        resp = client.put(f"/api/branches/{branch_id}", json={"name": "Trunk"})
        assert resp.status_code == 200
        assert resp.json()["name"] == "Trunk"

    def test_missing_branch_404(self, client):
        resp = client.get("/api/branches/missing")
        assert resp.status_code == 404
        assert resp.json()["error"] == "BRANCH_NOT_FOUND"

    def test_delete_main_branch_promotes_other(self, client):
        doc = _create(client)
        main_id = doc["branches"][0]["id"]
        side = client.post(f"/api/docs/{doc['id']}/branches", json={"name": "Side"}).json()

        assert client.delete(f"/api/branches/{main_id}").status_code == 204

        main = client.get(f"/api/docs/{doc['id']}/branches/main").json()
        assert main["id"] == side["id"]

    def test_no_main_branch_left_404(self, client):
        doc = _create(client)
        client.delete(f"/api/branches/{doc['branches'][0]['id']}")
        assert client.get(f"/api/docs/{doc['id']}/branches/main").status_code == 404

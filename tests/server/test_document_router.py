"""Tests for the document, directory and search endpoints."""

import os
import uuid

import pytest
from fastapi.testclient import TestClient

from json2db.server.api import create_app
from json2db.server.config import Config
from json2db.server.dependencies import get_config, get_document_store
from json2db.store import LocalDocumentStore


@pytest.fixture
def config(tmp_path):
    return Config(root_path=tmp_path / "data")


@pytest.fixture
def store(config):
    return LocalDocumentStore(config.root_path, max_depth=config.max_depth)


@pytest.fixture
def client(config, store):
    """Create a test client wired to a temporary store."""
    app = create_app(config)
    app.dependency_overrides[get_document_store] = lambda: store
    app.dependency_overrides[get_config] = lambda: config
    yield TestClient(app)
    app.dependency_overrides.clear()


def _create(client, collection, body, **headers):
    return client.post(f"/api/documents/{collection}", json=body, headers=headers)


class TestCreate:
    def test_create_with_explicit_id(self, client, store):
        response = _create(client, "users", {"name": "ana"}, **{"X-Set-Id": "u1"})

        assert response.status_code == 201
        assert response.json() == "u1"
        assert os.path.isfile(os.path.join(store.root, "users", "u1.json"))

    def test_create_generates_an_id(self, client):
        response = _create(client, "users", {"name": "ana"})

        assert response.status_code == 201
        assert uuid.UUID(response.json()).version == 1

    def test_create_complete_record(self, client):
        response = _create(
            client,
            "users",
            {"name": "ana"},
            **{"X-Set-Id": "u1", "X-Complete-Record": "1"},
        )

        assert response.json() == {"id": "u1", "name": "ana"}

    def test_create_without_body_stores_empty_object(self, client):
        response = client.post("/api/documents/users", headers={"X-Set-Id": "u1"})

        assert response.status_code == 201
        assert client.get("/api/documents/users/u1.json").json() == {}

    def test_create_existing_id_conflicts(self, client):
        _create(client, "users", {"v": 1}, **{"X-Set-Id": "u1"})

        response = _create(client, "users", {"v": 2}, **{"X-Set-Id": "u1"})

        assert response.status_code == 409
        assert client.get("/api/documents/users/u1.json").json() == {"v": 1}

    def test_create_raw_document(self, client):
        response = _create(
            client,
            "scripts",
            "console.log(1);",
            **{"X-Set-Id": "s1", "X-File-Extension": "js"},
        )

        assert response.status_code == 201
        read = client.get("/api/documents/scripts/s1.js")
        assert read.text == "console.log(1);"
        assert read.headers["content-type"].startswith("text/plain")

    def test_create_raw_document_requires_text(self, client):
        response = _create(
            client, "scripts", {"a": 1}, **{"X-File-Extension": "js"}
        )

        assert response.status_code == 400


class TestReadAndList:
    def test_read(self, client):
        _create(client, "users", {"name": "ana"}, **{"X-Set-Id": "u1"})

        response = client.get("/api/documents/users/u1.json")

        assert response.status_code == 200
        assert response.json() == {"name": "ana"}

    def test_read_missing_is_404(self, client):
        response = client.get("/api/documents/users/nobody.json")

        assert response.status_code == 404
        assert "detail" in response.json()

    def test_list_documents_and_directories(self, client):
        _create(client, "users", {}, **{"X-Set-Id": "u1"})
        _create(client, "users/admins", {}, **{"X-Set-Id": "a1"})

        assert client.get("/api/documents/users/list").json() == ["u1.json"]
        assert client.get("/api/documents/users/listdir").json() == ["admins"]
        assert client.get("/api/documents/dirs").json() == ["users"]
        assert client.get("/api/documents").json() == []

    def test_list_missing_collection_is_404(self, client):
        assert client.get("/api/documents/nope/list").status_code == 404


class TestUpdate:
    def test_patch_deep_merges(self, client):
        _create(
            client, "users", {"name": "ana", "prefs": {"a": 1}}, **{"X-Set-Id": "u1"}
        )

        response = client.patch(
            "/api/documents/users/u1.json", json={"prefs": {"b": 2}}
        )

        assert response.status_code == 200
        assert response.json() == {"success": True}
        assert client.get("/api/documents/users/u1.json").json() == {
            "name": "ana",
            "prefs": {"a": 1, "b": 2},
        }

    def test_patch_with_rename_header(self, client):
        _create(client, "users", {"name": "ana"}, **{"X-Set-Id": "u1"})

        response = client.patch(
            "/api/documents/users/u1.json", json={}, headers={"X-Rename": "u2"}
        )

        assert response.status_code == 200
        assert client.get("/api/documents/users/u2.json").json() == {"name": "ana"}
        assert client.get("/api/documents/users/u1.json").status_code == 404

    def test_patch_missing_is_404(self, client):
        response = client.patch("/api/documents/users/u1.json", json={"a": 1})

        assert response.status_code == 404

    def test_put_replaces(self, client):
        _create(client, "users", {"name": "ana", "age": 3}, **{"X-Set-Id": "u1"})

        client.put("/api/documents/users/u1.json", json={"name": "bob"})

        assert client.get("/api/documents/users/u1.json").json() == {"name": "bob"}

    def test_delete(self, client):
        _create(client, "users", {}, **{"X-Set-Id": "u1"})

        assert client.delete("/api/documents/users/u1.json").status_code == 200
        assert client.delete("/api/documents/users/u1.json").status_code == 404


class TestDirectories:
    def test_create_with_parents(self, client, store):
        response = client.post("/api/directories/a/b/c", params={"parents": True})

        assert response.status_code == 201
        assert os.path.isdir(os.path.join(store.root, "a", "b", "c"))

    def test_create_without_parents_needs_parent(self, client):
        response = client.post("/api/directories/a/b/c")

        assert response.status_code == 404

    def test_create_existing_conflicts(self, client):
        client.post("/api/directories/a")

        assert client.post("/api/directories/a").status_code == 409

    def test_too_deep_is_rejected(self, tmp_path):
        config = Config(root_path=tmp_path / "data", max_depth=2)
        app = create_app(config)
        store = LocalDocumentStore(config.root_path, max_depth=config.max_depth)
        app.dependency_overrides[get_document_store] = lambda: store
        client = TestClient(app)

        response = client.post("/api/directories/a/b/c", params={"parents": True})

        assert response.status_code == 400

    def test_remove_empty_and_non_empty(self, client, store):
        _create(client, "col/sub", {}, **{"X-Set-Id": "d1"})

        assert client.delete("/api/directories/col").status_code == 400
        response = client.delete("/api/directories/col", params={"recursive": True})
        assert response.status_code == 200
        assert not os.path.exists(os.path.join(store.root, "col"))

    def test_recursive_remove_of_missing_directory_succeeds(self, client):
        response = client.delete("/api/directories/nope", params={"recursive": True})

        assert response.status_code == 200


class TestSearch:
    @pytest.fixture(autouse=True)
    def users(self, client):
        _create(client, "users", {"name": "ana", "age": 30}, **{"X-Set-Id": "u1"})
        _create(client, "users", {"name": "bob", "age": 17}, **{"X-Set-Id": "u2"})
        _create(
            client, "users", {"id": "custom", "name": "cy", "age": 45},
            **{"X-Set-Id": "u3"},
        )

    def test_filters_and_fills_ids(self, client):
        response = client.post(
            "/api/search/users",
            json={"ids": ["u1", "u2.json", "u3.txt"], "filter": {"age": {"$gte": 18}}},
        )

        assert response.status_code == 200
        assert response.json() == {
            "total": 2,
            "output": [
                {"name": "ana", "age": 30, "id": "u1"},
                {"id": "custom", "name": "cy", "age": 45},
            ],
        }

    def test_count_limits_output_not_total(self, client):
        response = client.post(
            "/api/search/users", json={"ids": ["u1", "u2", "u3"], "count": 1}
        )

        body = response.json()
        assert body["total"] == 3
        assert len(body["output"]) == 1

    def test_unknown_ids_are_skipped(self, client):
        response = client.post("/api/search/users", json={"ids": ["u1", 42]})

        assert response.json()["total"] == 1

    def test_ids_are_required(self, client):
        response = client.post("/api/search/users", json={"filter": {}})

        assert response.status_code == 400

    @pytest.mark.parametrize(
        "flt", [{"name": {"$bogus": 1}}, {"name": {"$regex": "("}}]
    )
    def test_malformed_filter_is_400(self, client, flt):
        response = client.post("/api/search/users", json={"ids": ["u1"], "filter": flt})

        assert response.status_code == 400
        assert "detail" in response.json()

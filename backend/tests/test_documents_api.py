"""
Entity document API tests.

Verifies:
- Multi-file upload creates one row and one blob per file
- Listing is scoped to (entity_type, entity_id), newest first
- Invalid entity types, empty uploads, too many files and disallowed
  extensions are rejected before anything is stored
- A document is only reachable through the entity it belongs to
- Download returns the stored bytes as an attachment
- Delete removes both row and blob
"""

import io
import os

import pytest

from rentdesk.extensions import db
from rentdesk.models import Document


def _upload(client, headers, path, files, **form):
    data = {"documents": [(io.BytesIO(content), name) for name, content in files]}
    data.update(form)
    return client.post(path, headers=headers, data=data, content_type="multipart/form-data")


def _blob_path(settings, document_id):
    document = db.session.get(Document, document_id)
    return os.path.join(settings.upload_folder, document.file_path)


@pytest.fixture
def uploaded(client, alice_headers):
    """Two documents on shop 5: a.txt then b.pdf."""
    resp = _upload(client, alice_headers, "/api/shop/5/documents", [
        ("a.txt", b"lease terms"),
        ("b.pdf", b"%PDF-1.4 receipt"),
    ])
    assert resp.status_code == 201
    return resp.get_json()["items"]


# =============================================================================
# Upload
# =============================================================================

class TestUpload:

    def test_upload_two_files(self, client, alice, alice_headers, settings):
        resp = _upload(
            client, alice_headers, "/api/shop/5/documents",
            [("a.txt", b"lease terms"), ("b.pdf", b"%PDF-1.4 receipt")],
            description="Lease paperwork", tags="lease,2026",
        )
        assert resp.status_code == 201
        body = resp.get_json()
        assert body["count"] == 2
        assert [d["original_name"] for d in body["items"]] == ["a.txt", "b.pdf"]

        for item in body["items"]:
            assert item["entity_type"] == "shop"
            assert item["entity_id"] == 5
            assert item["uploaded_by"] == alice.id
            assert item["description"] == "Lease paperwork"
            assert item["tags"] == "lease,2026"
            assert item["file_name"] != item["original_name"]
            assert "file_path" not in item
            assert os.path.isfile(_blob_path(settings, item["id"]))

        assert body["items"][0]["file_size"] == len(b"lease terms")
        assert body["items"][1]["mime_type"] == "application/pdf"

    def test_entity_type_is_case_insensitive(self, client, alice_headers):
        resp = _upload(client, alice_headers, "/api/Shop/5/documents", [("a.txt", b"x")])
        assert resp.status_code == 201
        assert resp.get_json()["items"][0]["entity_type"] == "shop"

    def test_invalid_entity_type(self, client, alice_headers, settings):
        resp = _upload(client, alice_headers, "/api/vehicle/5/documents", [("a.txt", b"x")])
        assert resp.status_code == 400
        assert "Invalid entity type" in resp.get_json()["error"]
        assert db.session.query(Document).count() == 0
        assert list(os.walk(settings.upload_folder))[0][1:] == ([], [])

    def test_no_files(self, client, alice_headers):
        resp = client.post(
            "/api/shop/5/documents", headers=alice_headers,
            data={"description": "nothing"}, content_type="multipart/form-data",
        )
        assert resp.status_code == 400
        assert resp.get_json()["error"] == "No files were uploaded"

    def test_too_many_files(self, client, alice_headers):
        files = [(f"f{i}.txt", b"x") for i in range(11)]
        resp = _upload(client, alice_headers, "/api/shop/5/documents", files)
        assert resp.status_code == 400
        assert "Too many files" in resp.get_json()["error"]
        assert db.session.query(Document).count() == 0

    def test_disallowed_extension_rejects_whole_batch(self, client, alice_headers):
        resp = _upload(client, alice_headers, "/api/shop/5/documents", [
            ("a.txt", b"ok"),
            ("run.exe", b"MZ"),
        ])
        assert resp.status_code == 400
        assert "File type not allowed: run.exe" in resp.get_json()["error"]
        assert db.session.query(Document).count() == 0

    def test_upload_requires_auth(self, client):
        resp = _upload(client, {}, "/api/shop/5/documents", [("a.txt", b"x")])
        assert resp.status_code == 401


# =============================================================================
# List / Get
# =============================================================================

class TestListAndGet:

    def test_list_scoped_to_entity(self, client, alice_headers, uploaded):
        resp = client.get("/api/shop/5/documents", headers=alice_headers)
        assert resp.status_code == 200
        body = resp.get_json()
        assert body["count"] == 2
        # Same upload timestamp, so newest id first
        assert [d["original_name"] for d in body["items"]] == ["b.pdf", "a.txt"]

        resp = client.get("/api/shop/6/documents", headers=alice_headers)
        assert resp.get_json() == {"count": 0, "items": []}

        resp = client.get("/api/apartment/5/documents", headers=alice_headers)
        assert resp.get_json()["count"] == 0

    def test_list_invalid_entity_type(self, client, alice_headers):
        resp = client.get("/api/vehicle/5/documents", headers=alice_headers)
        assert resp.status_code == 400

    def test_get_document(self, client, alice_headers, uploaded):
        doc_id = uploaded[0]["id"]
        resp = client.get(f"/api/shop/5/documents/{doc_id}", headers=alice_headers)
        assert resp.status_code == 200
        assert resp.get_json()["document"]["original_name"] == "a.txt"

    def test_get_through_other_entity_is_not_found(self, client, alice_headers, uploaded):
        doc_id = uploaded[0]["id"]
        for path in (
            f"/api/shop/6/documents/{doc_id}",
            f"/api/apartment/5/documents/{doc_id}",
        ):
            resp = client.get(path, headers=alice_headers)
            assert resp.status_code == 404
            assert resp.get_json()["error"] == "Document not found"

    def test_get_unknown_id(self, client, alice_headers):
        resp = client.get("/api/shop/5/documents/999", headers=alice_headers)
        assert resp.status_code == 404


# =============================================================================
# Download
# =============================================================================

class TestDownload:

    def test_download_returns_attachment(self, client, alice_headers, uploaded):
        doc_id = uploaded[0]["id"]
        resp = client.get(f"/api/shop/5/documents/{doc_id}/download", headers=alice_headers)
        assert resp.status_code == 200
        assert resp.data == b"lease terms"
        disposition = resp.headers["Content-Disposition"]
        assert disposition.startswith("attachment")
        assert "a.txt" in disposition
        resp.close()

    def test_download_through_other_entity(self, client, alice_headers, uploaded):
        doc_id = uploaded[0]["id"]
        resp = client.get(f"/api/shop/6/documents/{doc_id}/download", headers=alice_headers)
        assert resp.status_code == 404

    def test_download_missing_blob(self, client, alice_headers, uploaded, settings):
        doc_id = uploaded[0]["id"]
        os.remove(_blob_path(settings, doc_id))

        resp = client.get(f"/api/shop/5/documents/{doc_id}/download", headers=alice_headers)
        assert resp.status_code == 404
        assert resp.get_json()["error"] == "File not found on disk"


# =============================================================================
# Delete
# =============================================================================

class TestDelete:

    def test_delete_removes_row_and_blob(self, client, alice_headers, uploaded, settings):
        doc_id = uploaded[0]["id"]
        path = _blob_path(settings, doc_id)

        resp = client.delete(f"/api/shop/5/documents/{doc_id}", headers=alice_headers)
        assert resp.status_code == 200
        assert resp.get_json()["message"] == "Document deleted successfully"

        assert db.session.get(Document, doc_id) is None
        assert not os.path.exists(path)

        resp = client.get(f"/api/shop/5/documents/{doc_id}", headers=alice_headers)
        assert resp.status_code == 404

        resp = client.get("/api/shop/5/documents", headers=alice_headers)
        assert resp.get_json()["count"] == 1

    def test_delete_through_other_entity_keeps_document(self, client, alice_headers, uploaded, settings):
        doc_id = uploaded[0]["id"]
        path = _blob_path(settings, doc_id)

        resp = client.delete(f"/api/shop/6/documents/{doc_id}", headers=alice_headers)
        assert resp.status_code == 404

        assert db.session.get(Document, doc_id) is not None
        assert os.path.isfile(path)

    def test_delete_with_missing_blob(self, client, alice_headers, uploaded, settings):
        doc_id = uploaded[0]["id"]
        os.remove(_blob_path(settings, doc_id))

        resp = client.delete(f"/api/shop/5/documents/{doc_id}", headers=alice_headers)
        assert resp.status_code == 200
        assert db.session.get(Document, doc_id) is None

    def test_delete_invalid_entity_type(self, client, alice_headers, uploaded):
        doc_id = uploaded[0]["id"]
        resp = client.delete(f"/api/vehicle/5/documents/{doc_id}", headers=alice_headers)
        assert resp.status_code == 400
        assert db.session.get(Document, doc_id) is not None

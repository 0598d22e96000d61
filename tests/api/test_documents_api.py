"""
Tests for document endpoints.

Uploads run through the real queue, so indexing happens in the background
on the TestClient event loop; join_queue waits for it.
"""

import uuid
from pathlib import Path

from fastapi.testclient import TestClient

from tests.api.conftest import API_PREFIX

DOCUMENTS = f"{API_PREFIX}/documents"


def upload(client: TestClient, name: str, content: bytes, description: str | None = None):
    data = {"description": description} if description is not None else {}
    return client.post(
        DOCUMENTS,
        files={"file": (name, content, "text/plain")},
        data=data,
    )


class TestUpload:
    """Tests for POST /documents."""

    def test_upload_should_return_201_and_start_indexing(
        self, client: TestClient, join_queue
    ) -> None:
        # Act
        response = upload(client, "notes.txt", b"cell biology lecture notes", "week 1")

        # Assert
        assert response.status_code == 201
        body = response.json()
        assert body["message"] == "Document uploaded successfully and indexing started"
        assert body["indexing"] == "in_progress"
        assert body["document"]["original_name"] == "notes.txt"
        assert body["document"]["description"] == "week 1"
        assert body["document"]["size"] == len(b"cell biology lecture notes")
        assert Path(body["document"]["path"]).exists()

        join_queue()
        status = client.get(f"{DOCUMENTS}/{body['document']['id']}/index-status").json()
        assert status["status"] == "indexed"
        assert status["chunks_processed"] == 1
        assert status["completed_at"] is not None

    def test_upload_unsupported_type_should_return_400(self, client: TestClient) -> None:
        response = upload(client, "picture.png", b"\x89PNG")

        assert response.status_code == 400
        assert "Unsupported file type" in response.json()["detail"]

    def test_upload_empty_file_should_return_400(self, client: TestClient) -> None:
        assert upload(client, "empty.txt", b"").status_code == 400

    def test_upload_oversized_file_should_return_400(self, client: TestClient) -> None:
        assert upload(client, "big.txt", b"x" * 5000).status_code == 400

    def test_upload_without_file_should_return_422(self, client: TestClient) -> None:
        assert client.post(DOCUMENTS, data={"description": "nothing"}).status_code == 422


class TestReadDocuments:
    """Tests for GET /documents endpoints."""

    def test_list_should_return_uploaded_documents(self, client: TestClient, join_queue) -> None:
        first = upload(client, "a.txt", b"first").json()["document"]["id"]
        second = upload(client, "b.md", b"# second").json()["document"]["id"]
        join_queue()

        response = client.get(DOCUMENTS)

        assert response.status_code == 200
        assert {d["id"] for d in response.json()} == {first, second}

    def test_get_document_should_return_record(self, client: TestClient, join_queue) -> None:
        document_id = upload(client, "a.txt", b"some words").json()["document"]["id"]
        join_queue()

        response = client.get(f"{DOCUMENTS}/{document_id}")

        assert response.status_code == 200
        assert response.json()["id"] == document_id
        assert response.json()["indexed"] is True

    def test_get_unknown_document_should_return_404(self, client: TestClient) -> None:
        response = client.get(f"{DOCUMENTS}/{uuid.uuid4()}")

        assert response.status_code == 404

    def test_get_invalid_id_should_return_422(self, client: TestClient) -> None:
        assert client.get(f"{DOCUMENTS}/not-a-uuid").status_code == 422

    def test_index_status_of_failed_document_should_carry_error(
        self, client: TestClient, join_queue
    ) -> None:
        document_id = upload(client, "blank.txt", b"    ").json()["document"]["id"]
        join_queue()

        status = client.get(f"{DOCUMENTS}/{document_id}/index-status").json()

        assert status["status"] == "failed"
        assert status["error_message"] == "No text could be extracted"


class TestDeleteDocument:
    """Tests for DELETE /documents/{id}."""

    def test_delete_should_remove_document(
        self, client: TestClient, join_queue, api_vector_index
    ) -> None:
        # Arrange
        body = upload(client, "a.txt", b"short lived").json()["document"]
        join_queue()

        # Act
        response = client.delete(f"{DOCUMENTS}/{body['id']}")

        # Assert
        assert response.status_code == 204
        assert client.get(f"{DOCUMENTS}/{body['id']}").status_code == 404
        assert not Path(body["path"]).exists()
        assert api_vector_index.count("test_chunks") == 0

    def test_delete_unknown_document_should_return_404(self, client: TestClient) -> None:
        assert client.delete(f"{DOCUMENTS}/{uuid.uuid4()}").status_code == 404

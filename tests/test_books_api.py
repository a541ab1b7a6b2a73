"""
Booky - Book API Endpoint Tests
===============================

What:  End-to-end tests through the FastAPI app: routing, status codes,
       JSON shapes and error mapping.
How:   HTTPX AsyncClient over ASGITransport, collection dependency replaced
       by the in-memory fake (see conftest.py).
"""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from bson import ObjectId
from pymongo.errors import AutoReconnect

from booky.database import get_collection

BOOK = {
    "name": "Dune",
    "author": "Frank Herbert",
    "num_pages": 412,
    "tags": ["sci-fi", "classic"],
}


class TestBookCrudRoundTrip:

    @pytest.mark.asyncio
    async def test_list_empty(self, test_client):
        response = await test_client.get("/book")

        assert response.status_code == 200
        assert response.json() == []

    @pytest.mark.asyncio
    async def test_create_then_list_contains_it(self, test_client):
        response = await test_client.post("/book", json=BOOK)

        assert response.status_code == 201
        created = response.json()
        assert ObjectId.is_valid(created["id"])
        assert {k: created[k] for k in BOOK} == BOOK
        assert "added_at" in created

        listed = (await test_client.get("/book")).json()
        assert listed == [created]

    @pytest.mark.asyncio
    async def test_client_supplied_id_and_added_at_are_ignored(self, test_client):
        body = dict(BOOK, id="65a1f0c2b3d4e5f601234567", added_at="1999-01-01T00:00:00Z")

        created = (await test_client.post("/book", json=body)).json()

        assert created["id"] != "65a1f0c2b3d4e5f601234567"
        assert not created["added_at"].startswith("1999")

    @pytest.mark.asyncio
    async def test_update_changes_fields(self, test_client):
        created = (await test_client.post("/book", json=BOOK)).json()
        replacement = {"name": "Dune Messiah", "author": "Frank Herbert", "num_pages": 256, "tags": []}

        response = await test_client.put(f"/book/{created['id']}", json=replacement)

        assert response.status_code == 200
        updated = response.json()
        assert updated["id"] == created["id"]
        assert {k: updated[k] for k in replacement} == replacement

        listed = (await test_client.get("/book")).json()
        assert listed == [updated]

    @pytest.mark.asyncio
    async def test_delete_removes_it(self, test_client):
        created = (await test_client.post("/book", json=BOOK)).json()

        response = await test_client.delete(f"/book/{created['id']}")

        assert response.status_code == 200
        assert response.content == b""
        assert (await test_client.get("/book")).json() == []

    @pytest.mark.asyncio
    async def test_tag_order_preserved(self, test_client):
        tags = ["z", "a", "m", "a"]
        await test_client.post("/book", json=dict(BOOK, tags=tags))

        listed = (await test_client.get("/book")).json()
        assert listed[0]["tags"] == tags


class TestBookClientErrors:

    @pytest.mark.asyncio
    async def test_update_invalid_id(self, test_client):
        response = await test_client.put("/book/not-an-id", json=BOOK)

        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "invalid_id"
        assert body["details"] == {"book_id": "not-an-id"}

    @pytest.mark.asyncio
    async def test_delete_invalid_id(self, test_client):
        response = await test_client.delete("/book/12345")

        assert response.status_code == 400
        assert response.json()["error"] == "invalid_id"

    @pytest.mark.asyncio
    async def test_update_unknown_id(self, test_client):
        response = await test_client.put(f"/book/{ObjectId()}", json=BOOK)

        assert response.status_code == 404
        assert response.json()["error"] == "not_found"

    @pytest.mark.asyncio
    async def test_delete_unknown_id(self, test_client):
        response = await test_client.delete(f"/book/{ObjectId()}")

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_delete_twice(self, test_client):
        created = (await test_client.post("/book", json=BOOK)).json()

        assert (await test_client.delete(f"/book/{created['id']}")).status_code == 200
        assert (await test_client.delete(f"/book/{created['id']}")).status_code == 404

    @pytest.mark.asyncio
    async def test_negative_num_pages_rejected(self, test_client):
        response = await test_client.post("/book", json=dict(BOOK, num_pages=-5))

        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "validation_error"
        assert [e["field"] for e in body["details"]["errors"]] == ["num_pages"]

    @pytest.mark.asyncio
    async def test_missing_field_rejected(self, test_client):
        body = {k: v for k, v in BOOK.items() if k != "author"}

        response = await test_client.post("/book", json=body)

        assert response.status_code == 400
        assert response.json()["details"]["errors"][0]["field"] == "author"

    @pytest.mark.asyncio
    async def test_malformed_json_rejected(self, test_client):
        response = await test_client.post(
            "/book", content=b"{not json", headers={"Content-Type": "application/json"}
        )

        assert response.status_code == 400
        assert response.json()["error"] == "validation_error"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("num_pages", ["412", 3.0])
    async def test_non_integer_num_pages_rejected(self, test_client, num_pages):
        response = await test_client.post("/book", json=dict(BOOK, num_pages=num_pages))

        assert response.status_code == 400
        assert [e["field"] for e in response.json()["details"]["errors"]] == ["num_pages"]
        assert (await test_client.get("/book")).json() == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "body, field",
        [
            (b'{"name":"\\ud800","author":"A","num_pages":1,"tags":[]}', "name"),
            (b'{"name":"N","author":"\\udfff","num_pages":1,"tags":[]}', "author"),
            (b'{"name":"N","author":"A","num_pages":1,"tags":["ok","\\ud83d"]}', "tags"),
        ],
    )
    async def test_lone_surrogate_rejected_on_create(self, test_client, body, field):
        response = await test_client.post(
            "/book", content=body, headers={"Content-Type": "application/json"}
        )

        assert response.status_code == 400
        body_json = response.json()
        assert body_json["error"] == "validation_error"
        assert body_json["details"]["errors"][0]["field"].startswith(field)

    @pytest.mark.asyncio
    async def test_lone_surrogate_rejected_on_update(self, test_client):
        created = (await test_client.post("/book", json=BOOK)).json()

        response = await test_client.put(
            f"/book/{created['id']}",
            content=b'{"name":"\\ud800","author":"A","num_pages":1,"tags":[]}',
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 400
        assert (await test_client.get("/book")).json() == [created]

    @pytest.mark.asyncio
    async def test_unsupported_method(self, test_client):
        response = await test_client.patch("/book", json=BOOK)

        assert response.status_code == 405


class TestBookServerErrors:

    @pytest.mark.asyncio
    async def test_store_failure_is_500(self, test_client):
        from booky.main import app

        broken = MagicMock()
        broken.insert_one = AsyncMock(side_effect=AutoReconnect("primary stepped down"))
        app.dependency_overrides[get_collection] = lambda: broken

        response = await test_client.post("/book", json=BOOK)

        assert response.status_code == 500
        body = response.json()
        assert body["error"] == "server_error"
        assert "stepped down" not in body["message"]

    @pytest.mark.asyncio
    async def test_malformed_stored_document_is_500(self, test_client, fake_collection):
        oid = ObjectId()
        fake_collection.documents[oid] = {"_id": oid, "name": "Dune"}

        response = await test_client.get("/book")

        assert response.status_code == 500
        assert response.json()["error"] == "server_error"


class TestRequestId:

    @pytest.mark.asyncio
    async def test_request_id_generated(self, test_client):
        response = await test_client.get("/book")

        assert len(response.headers["X-Request-ID"]) == 8

    @pytest.mark.asyncio
    async def test_unexpected_error_keeps_request_id(self, test_client):
        from booky.main import app

        broken = MagicMock()
        broken.insert_one = AsyncMock(side_effect=RuntimeError("boom"))
        app.dependency_overrides[get_collection] = lambda: broken

        response = await test_client.post("/book", json=BOOK, headers={"X-Request-ID": "trace-9"})

        assert response.status_code == 500
        assert response.headers["X-Request-ID"] == "trace-9"
        body = response.json()
        assert body["error"] == "internal_server_error"
        assert body["request_id"] == "trace-9"
        assert "boom" not in body["message"]

    @pytest.mark.asyncio
    async def test_request_id_echoed_in_header_and_error_body(self, test_client):
        response = await test_client.delete("/book/bad", headers={"X-Request-ID": "trace-42"})

        assert response.headers["X-Request-ID"] == "trace-42"
        assert response.json()["request_id"] == "trace-42"


class TestHealth:

    @pytest.mark.asyncio
    async def test_healthy(self, test_client):
        with patch("booky.routes.health.ping", new=AsyncMock(return_value=None)):
            response = await test_client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["database"] == "connected"

    @pytest.mark.asyncio
    async def test_unhealthy_when_database_unreachable(self, test_client):
        with patch("booky.routes.health.ping", new=AsyncMock(side_effect=AutoReconnect("down"))):
            response = await test_client.get("/health")

        assert response.status_code == 503
        assert response.json()["database"] == "disconnected"

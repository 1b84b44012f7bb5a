"""
API Base — Example API Tests
=============================

What we test:
    ✅ Full CRUD round trip over HTTP against a temporary SQLite database
    ✅ Response envelope: data, message, status, camelCase timestamps
    ✅ Pagination metadata (total, page, limit, totalPages)
    ✅ Duplicate name → 400 duplicate_name
    ✅ Unknown ID → 404, malformed ID → 400 validation_error
    ✅ Unknown or invalid body fields → 400 with validationErrors
    ✅ Name search, count, existence and exact-name lookups
    ✅ Health endpoint
"""

from uuid import uuid4

import pytest

from api_base.schemas.example import NAME_PATTERN_MESSAGE


async def create(client, name="First Example", description="A sample description"):
    payload = {"name": name}
    if description is not None:
        payload["description"] = description
    return await client.post("/examples", json=payload)


class TestCreateExample:
    @pytest.mark.asyncio
    async def test_create_returns_201_envelope(self, client):
        response = await create(client)

        assert response.status_code == 201
        body = response.json()
        assert body["status"] == 201
        assert body["message"] == "Resource created successfully"
        data = body["data"]
        assert data["name"] == "First Example"
        assert data["description"] == "A sample description"
        assert len(data["id"]) == 36
        assert "createdAt" in data and "updatedAt" in data

    @pytest.mark.asyncio
    async def test_description_is_optional(self, client):
        response = await create(client, description=None)

        assert response.status_code == 201
        assert response.json()["data"]["description"] is None

    @pytest.mark.asyncio
    async def test_duplicate_name(self, client):
        await create(client)
        response = await create(client, description="Another description")

        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "duplicate_name"
        assert body["message"] == "Example with name 'First Example' already exists"
        assert body["data"] is None

    @pytest.mark.asyncio
    async def test_name_pattern_enforced(self, client):
        response = await create(client, name="Bad@Name")

        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "validation_error"
        assert body["message"] == "Request validation failed"
        assert body["details"]["validationErrors"]["name"] == [NAME_PATTERN_MESSAGE]

    @pytest.mark.asyncio
    async def test_unknown_field_rejected(self, client):
        response = await client.post("/examples", json={"name": "Valid Name", "color": "blue"})

        assert response.status_code == 400
        assert "color" in response.json()["details"]["validationErrors"]

    @pytest.mark.asyncio
    async def test_missing_name_rejected(self, client):
        response = await client.post("/examples", json={"description": "A sample description"})

        assert response.status_code == 400
        assert "name" in response.json()["details"]["validationErrors"]


class TestReadExamples:
    @pytest.mark.asyncio
    async def test_get_by_id(self, client):
        created = (await create(client)).json()["data"]

        response = await client.get(f"/examples/{created['id']}")

        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "Resource retrieved successfully"
        assert body["data"]["id"] == created["id"]

    @pytest.mark.asyncio
    async def test_unknown_id_is_404(self, client):
        missing = str(uuid4())
        response = await client.get(f"/examples/{missing}")

        assert response.status_code == 404
        body = response.json()
        assert body["error"] == "not_found"
        assert body["message"] == f"Example with ID {missing} not found"

    @pytest.mark.asyncio
    async def test_malformed_id_is_400(self, client):
        response = await client.get("/examples/not-a-uuid")

        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "validation_error"
        assert "example_id" in body["details"]["validationErrors"]

    @pytest.mark.asyncio
    async def test_list_paginates(self, client):
        for name in ("First Example", "Second Example", "Third Example"):
            await create(client, name=name)

        first = (await client.get("/examples", params={"page": 1, "limit": 2})).json()
        second = (await client.get("/examples", params={"page": 2, "limit": 2})).json()

        assert first["message"] == "Resources retrieved successfully"
        assert first["data"]["total"] == 3
        assert first["data"]["totalPages"] == 2
        assert first["data"]["page"] == 1
        assert first["data"]["limit"] == 2
        assert len(first["data"]["data"]) == 2
        assert len(second["data"]["data"]) == 1
        names = {row["name"] for row in first["data"]["data"] + second["data"]["data"]}
        assert names == {"First Example", "Second Example", "Third Example"}

    @pytest.mark.asyncio
    async def test_empty_list(self, client):
        response = await client.get("/examples")

        assert response.status_code == 200
        page = response.json()["data"]
        assert page["data"] == []
        assert page["total"] == 0
        assert page["totalPages"] == 0

    @pytest.mark.asyncio
    async def test_limit_above_maximum_rejected(self, client):
        response = await client.get("/examples", params={"limit": 101})

        assert response.status_code == 400
        assert "limit" in response.json()["details"]["validationErrors"]


class TestRepositoryReads:
    @pytest.mark.asyncio
    async def test_search_by_name_fragment(self, client):
        for name in ("Third Example", "First Example", "Second Example"):
            await create(client, name=name)

        response = await client.get("/examples/search", params={"name": "Example"})
        narrowed = await client.get("/examples/search", params={"name": "cond"})

        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "Resources retrieved successfully"
        assert [row["name"] for row in body["data"]] == [
            "First Example",
            "Second Example",
            "Third Example",
        ]
        assert [row["name"] for row in narrowed.json()["data"]] == ["Second Example"]

    @pytest.mark.asyncio
    async def test_search_without_match_is_empty(self, client):
        await create(client)

        response = await client.get("/examples/search", params={"name": "Nothing"})

        assert response.status_code == 200
        assert response.json()["data"] == []

    @pytest.mark.asyncio
    async def test_search_requires_name(self, client):
        response = await client.get("/examples/search")

        assert response.status_code == 400
        assert "name" in response.json()["details"]["validationErrors"]

    @pytest.mark.asyncio
    async def test_count_follows_writes(self, client):
        await create(client)
        before = await client.get("/examples/count")

        await create(client, name="Second Example")
        after = await client.get("/examples/count")

        assert before.json()["data"] == {"count": 1}
        assert after.json()["data"] == {"count": 2}
        assert after.headers["x-cache"] == "MISS"

    @pytest.mark.asyncio
    async def test_exists(self, client):
        created = (await create(client)).json()["data"]

        present = await client.get(f"/examples/{created['id']}/exists")
        absent = await client.get(f"/examples/{uuid4()}/exists")

        assert present.status_code == absent.status_code == 200
        assert present.json()["data"] == {"exists": True}
        assert absent.json()["data"] == {"exists": False}
        assert "x-cache" not in present.headers

    @pytest.mark.asyncio
    async def test_by_name(self, client):
        created = (await create(client, name="Second Example")).json()["data"]

        response = await client.get("/examples/by-name/Second Example")

        assert response.status_code == 200
        assert response.json()["data"]["id"] == created["id"]

    @pytest.mark.asyncio
    async def test_by_name_is_exact(self, client):
        await create(client, name="Second Example")

        response = await client.get("/examples/by-name/Second")

        assert response.status_code == 404
        body = response.json()
        assert body["error"] == "not_found"
        assert body["message"] == "The requested Example was not found"


class TestUpdateExample:
    @pytest.mark.asyncio
    async def test_partial_update(self, client):
        created = (await create(client)).json()["data"]

        response = await client.put(f"/examples/{created['id']}", json={"name": "Renamed Example"})

        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "Resource updated successfully"
        assert body["data"]["name"] == "Renamed Example"
        assert body["data"]["description"] == "A sample description"

    @pytest.mark.asyncio
    async def test_update_to_taken_name(self, client):
        await create(client, name="First Example")
        second = (await create(client, name="Second Example")).json()["data"]

        response = await client.put(f"/examples/{second['id']}", json={"name": "First Example"})

        assert response.status_code == 400
        assert response.json()["error"] == "duplicate_name"

    @pytest.mark.asyncio
    async def test_keeping_own_name_is_allowed(self, client):
        created = (await create(client)).json()["data"]

        response = await client.put(
            f"/examples/{created['id']}",
            json={"name": "First Example", "description": "Changed text"},
        )

        assert response.status_code == 200
        assert response.json()["data"]["description"] == "Changed text"

    @pytest.mark.asyncio
    async def test_update_unknown_id(self, client):
        response = await client.put(f"/examples/{uuid4()}", json={"name": "Renamed Example"})

        assert response.status_code == 404


class TestDeleteExample:
    @pytest.mark.asyncio
    async def test_delete_then_get_is_404(self, client):
        created = (await create(client)).json()["data"]

        response = await client.delete(f"/examples/{created['id']}")

        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "Resource deleted successfully"
        assert body["data"] == {"id": created["id"]}

        assert (await client.get(f"/examples/{created['id']}")).status_code == 404

    @pytest.mark.asyncio
    async def test_delete_unknown_id(self, client):
        response = await client.delete(f"/examples/{uuid4()}")

        assert response.status_code == 404
        assert response.json()["error"] == "not_found"


class TestHealth:
    @pytest.mark.asyncio
    async def test_health_reports_database_and_flags(self, client):
        response = await client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["database"] == "connected"
        assert body["environment"] == "test"
        assert body["securityEnabled"] is True
        assert body["uptimeSeconds"] >= 0

    @pytest.mark.asyncio
    async def test_unknown_route_uses_envelope(self, client):
        response = await client.get("/nowhere")

        assert response.status_code == 404
        body = response.json()
        assert body["error"] == "not_found"
        assert body["data"] is None

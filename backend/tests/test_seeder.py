"""
API Base — Seeder Tests
========================

What we test:
    ✅ Seeding an empty table inserts the three sample rows
    ✅ Seeding again is a no-op
    ✅ The seeded rows are visible through the API
"""

import pytest

from api_base.database import async_session_factory
from api_base.repositories.example_repository import ExampleRepository
from api_base.seeders.example_seeder import SAMPLE_EXAMPLES, ExampleSeeder, seed


class TestExampleSeeder:
    @pytest.mark.asyncio
    async def test_seeds_empty_table_once(self, database):
        async with async_session_factory() as session:
            created = await ExampleSeeder(session).run()
            await session.commit()

        assert [e.name for e in created] == [s["name"] for s in SAMPLE_EXAMPLES]

        async with async_session_factory() as session:
            assert await ExampleSeeder(session).run() == []
            assert await ExampleRepository(session).count() == 3

    @pytest.mark.asyncio
    async def test_seed_entrypoint(self, database):
        assert await seed() == 3
        assert await seed() == 0

    @pytest.mark.asyncio
    async def test_seeded_rows_listed(self, client):
        await seed()

        response = await client.get("/examples")

        assert response.json()["data"]["total"] == len(SAMPLE_EXAMPLES)

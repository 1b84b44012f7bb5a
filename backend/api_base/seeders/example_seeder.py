"""
Seed the `examples` table with three sample rows.

Usage:
    python -m api_base.seeders.example_seeder

Does nothing when the table already has rows.
"""

import asyncio
import logging
import sys
from typing import List

from sqlalchemy.ext.asyncio import AsyncSession

from api_base.database import async_session_factory, create_tables, dispose_engine
from api_base.models.example import Example
from api_base.repositories.example_repository import ExampleRepository

logger = logging.getLogger(__name__)

SAMPLE_EXAMPLES = [
    {"name": "First Example", "description": "This is the first example item"},
    {"name": "Second Example", "description": "This is the second example item"},
    {"name": "Third Example", "description": "This is the third example item"},
]


class ExampleSeeder:
    def __init__(self, session: AsyncSession):
        self.repository = ExampleRepository(session)

    async def run(self) -> List[Example]:
        """Insert the sample rows; returns what was created (empty when skipped)."""
        if await self.repository.count() > 0:
            logger.info("Example data already exists, skipping seeding")
            return []

        created = []
        for data in SAMPLE_EXAMPLES:
            example = await self.repository.create(data["name"], data["description"])
            logger.info("Created example: %s", example.name)
            created.append(example)
        return created


async def seed() -> int:
    await create_tables()
    try:
        async with async_session_factory() as session:
            created = await ExampleSeeder(session).run()
            await session.commit()
        logger.info("Example seeding completed (%d rows)", len(created))
        return len(created)
    finally:
        await dispose_engine()


def main() -> int:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        stream=sys.stdout,
    )
    try:
        asyncio.run(seed())
    except Exception:
        logger.exception("Seeding failed")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())

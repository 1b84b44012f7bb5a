"""
API Base — Example Repository
==============================

What:  All SQL for the `examples` table.
Why:   Command and query handlers express intent ("find by name") and stay
       free of SQLAlchemy details; tests can replace the repository or the
       session underneath it.
How:   Thin async methods over an AsyncSession. Writes flush but do not
       commit; the session owner (get_db_session or the seeder) commits.
"""

import math
from typing import Any, Dict, List, Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from api_base.models.example import Example

MAX_PAGE_SIZE = 100


class ExampleRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    # ── Reads ─────────────────────────────────────────────────────────────

    async def find_by_id(self, example_id: str) -> Optional[Example]:
        return await self.session.get(Example, example_id)

    async def find_by_name(self, name: str) -> Optional[Example]:
        result = await self.session.execute(select(Example).where(Example.name == name))
        return result.scalar_one_or_none()

    async def find_by_name_containing(self, fragment: str) -> List[Example]:
        stmt = (
            select(Example)
            .where(Example.name.contains(fragment, autoescape=True))
            .order_by(Example.name)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def find_with_pagination(self, page: int, limit: int) -> Dict[str, Any]:
        """
        Newest-first page of Examples.

        page is raised to at least 1 and limit clamped to [1, 100] before
        querying, so callers outside HTTP validation cannot request the
        whole table.

        Returns:
            {"data": [...], "total": int, "page": int, "limit": int, "total_pages": int}
        """
        safe_limit = min(max(limit, 1), MAX_PAGE_SIZE)
        safe_page = max(page, 1)
        offset = (safe_page - 1) * safe_limit

        total = await self.count()
        stmt = (
            select(Example)
            .order_by(Example.created_at.desc(), Example.id)
            .offset(offset)
            .limit(safe_limit)
        )
        result = await self.session.execute(stmt)

        return {
            "data": list(result.scalars().all()),
            "total": total,
            "page": safe_page,
            "limit": safe_limit,
            "total_pages": math.ceil(total / safe_limit),
        }

    async def count(self) -> int:
        result = await self.session.execute(select(func.count()).select_from(Example))
        return result.scalar_one()

    async def exists(self, example_id: str) -> bool:
        stmt = select(Example.id).where(Example.id == example_id).limit(1)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none() is not None

    # ── Writes ────────────────────────────────────────────────────────────

    async def create(self, name: str, description: Optional[str] = None) -> Example:
        example = Example(name=name, description=description)
        self.session.add(example)
        await self.session.flush()
        await self.session.refresh(example)
        return example

    async def update(self, example: Example, changes: Dict[str, Any]) -> Example:
        """Apply `changes` (field → value) to a loaded row; updated_at is refreshed on flush."""
        for field, value in changes.items():
            setattr(example, field, value)
        await self.session.flush()
        await self.session.refresh(example)
        return example

    async def delete(self, example: Example) -> None:
        await self.session.delete(example)
        await self.session.flush()

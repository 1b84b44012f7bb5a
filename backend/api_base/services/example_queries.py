"""
API Base — Example Queries (reads)
===================================

What:  Read operations for the Example resource.
How:   Same shape as the command handlers: a frozen query object, a handler
       bound to a session, results converted to response schemas here so
       routes never see ORM objects.
"""

import logging
from dataclasses import dataclass
from typing import List

from sqlalchemy.ext.asyncio import AsyncSession

from api_base.exceptions import AppError, DatabaseError, NotFoundError
from api_base.repositories.example_repository import ExampleRepository
from api_base.schemas.example import ExampleCount, ExampleExists, ExamplePage, ExampleResponse

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GetExampleByIdQuery:
    id: str


@dataclass(frozen=True)
class ListExamplesQuery:
    page: int = 1
    limit: int = 10


@dataclass(frozen=True)
class GetExampleByNameQuery:
    name: str


@dataclass(frozen=True)
class SearchExamplesQuery:
    name: str


@dataclass(frozen=True)
class ExampleExistsQuery:
    id: str


class GetExampleByIdHandler:
    def __init__(self, session: AsyncSession):
        self.repository = ExampleRepository(session)

    async def execute(self, query: GetExampleByIdQuery) -> ExampleResponse:
        try:
            example = await self.repository.find_by_id(query.id)
            if example is None:
                raise NotFoundError(resource="Example", resource_id=query.id)
            return ExampleResponse.model_validate(example)
        except AppError:
            raise
        except Exception as e:
            logger.error("Database error fetching example %s: %s", query.id, str(e))
            raise DatabaseError(context={"operation": "get_example", "id": query.id})


class ListExamplesHandler:
    def __init__(self, session: AsyncSession):
        self.repository = ExampleRepository(session)

    async def execute(self, query: ListExamplesQuery) -> ExamplePage:
        try:
            page = await self.repository.find_with_pagination(query.page, query.limit)
        except Exception as e:
            logger.error("Database error listing examples: %s", str(e), exc_info=True)
            raise DatabaseError(context={"operation": "list_examples"})

        return ExamplePage(
            data=[ExampleResponse.model_validate(row) for row in page["data"]],
            total=page["total"],
            page=page["page"],
            limit=page["limit"],
            total_pages=page["total_pages"],
        )


class GetExampleByNameHandler:
    """Exact, case-sensitive name match; names are unique."""

    def __init__(self, session: AsyncSession):
        self.repository = ExampleRepository(session)

    async def execute(self, query: GetExampleByNameQuery) -> ExampleResponse:
        try:
            example = await self.repository.find_by_name(query.name)
            if example is None:
                raise NotFoundError(resource="Example", context={"name": query.name})
            return ExampleResponse.model_validate(example)
        except AppError:
            raise
        except Exception as e:
            logger.error("Database error fetching example by name: %s", str(e))
            raise DatabaseError(context={"operation": "get_example_by_name"})


class SearchExamplesHandler:
    """Examples whose name contains the fragment, ordered by name."""

    def __init__(self, session: AsyncSession):
        self.repository = ExampleRepository(session)

    async def execute(self, query: SearchExamplesQuery) -> List[ExampleResponse]:
        try:
            rows = await self.repository.find_by_name_containing(query.name)
        except Exception as e:
            logger.error("Database error searching examples: %s", str(e), exc_info=True)
            raise DatabaseError(context={"operation": "search_examples"})
        return [ExampleResponse.model_validate(row) for row in rows]


class CountExamplesHandler:
    def __init__(self, session: AsyncSession):
        self.repository = ExampleRepository(session)

    async def execute(self) -> ExampleCount:
        try:
            return ExampleCount(count=await self.repository.count())
        except Exception as e:
            logger.error("Database error counting examples: %s", str(e))
            raise DatabaseError(context={"operation": "count_examples"})


class ExampleExistsHandler:
    def __init__(self, session: AsyncSession):
        self.repository = ExampleRepository(session)

    async def execute(self, query: ExampleExistsQuery) -> ExampleExists:
        try:
            return ExampleExists(exists=await self.repository.exists(query.id))
        except Exception as e:
            logger.error("Database error checking example %s: %s", query.id, str(e))
            raise DatabaseError(context={"operation": "example_exists", "id": query.id})

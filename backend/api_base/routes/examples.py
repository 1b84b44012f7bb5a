"""
API Base — Example Route Handlers
==================================

What:  CRUD endpoints for the Example resource under /examples.
How:   Each route builds a command or query, runs its handler on the request's
       session and wraps the result in the response envelope.

Caching Strategy:
    - GET /examples:              30s (list changes whenever anything is written)
    - GET /examples/{id}:         60s
    - search, count, by-name:     CACHE_DEFAULT_TTL (60s unless configured)
    - GET /examples/{id}/exists:  never cached
    - POST / PUT / DELETE:        never cached; they invalidate every /examples entry
      after the transaction is committed
"""

import logging
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from api_base.auth import authenticate
from api_base.database import get_db_session
from api_base.middleware.cache import CachedRoute, cache_response
from api_base.responses import ApiResponse, default_message
from api_base.schemas.common import ErrorResponse
from api_base.schemas.example import (
    CreateExampleRequest,
    DeletedExample,
    ExampleCount,
    ExampleExists,
    ExamplePage,
    ExampleResponse,
    UpdateExampleRequest,
)
from api_base.services.example_commands import (
    CreateExampleCommand,
    CreateExampleHandler,
    DeleteExampleCommand,
    DeleteExampleHandler,
    UpdateExampleCommand,
    UpdateExampleHandler,
)
from api_base.services.example_queries import (
    CountExamplesHandler,
    ExampleExistsHandler,
    ExampleExistsQuery,
    GetExampleByIdHandler,
    GetExampleByIdQuery,
    GetExampleByNameHandler,
    GetExampleByNameQuery,
    ListExamplesHandler,
    ListExamplesQuery,
    SearchExamplesHandler,
    SearchExamplesQuery,
)

logger = logging.getLogger(__name__)

CACHE_PREFIX = "/examples"

# ── Router Configuration ──────────────────────────────────────────────────
router = APIRouter(
    prefix="/examples",
    tags=["Examples"],
    dependencies=[Depends(authenticate)],
    route_class=CachedRoute,
    responses={
        400: {"description": "Validation error or security violation", "model": ErrorResponse},
        401: {"description": "Missing or invalid access token", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
)


async def _persist_and_invalidate(request: Request, db: AsyncSession) -> None:
    await db.commit()
    await request.app.state.response_cache.invalidate(CACHE_PREFIX)


@router.post(
    "",
    status_code=201,
    response_model=ApiResponse[ExampleResponse],
    summary="Create an example",
)
async def create_example(
    request: Request,
    body: CreateExampleRequest,
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[ExampleResponse]:
    example = await CreateExampleHandler(db).execute(
        CreateExampleCommand(name=body.name, description=body.description)
    )
    data = ExampleResponse.model_validate(example)
    await _persist_and_invalidate(request, db)
    return ApiResponse.success(data, default_message("POST", 201), 201)


@router.get(
    "",
    response_model=ApiResponse[ExamplePage],
    summary="List examples (paginated, newest first)",
)
@cache_response(ttl=30)
async def list_examples(
    page: int = Query(default=1, ge=1, description="Page number (starts at 1)"),
    limit: int = Query(default=10, ge=1, le=100, description="Items per page (max 100)"),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[ExamplePage]:
    result = await ListExamplesHandler(db).execute(ListExamplesQuery(page=page, limit=limit))
    return ApiResponse.success(result, "Resources retrieved successfully")


@router.get(
    "/search",
    response_model=ApiResponse[List[ExampleResponse]],
    summary="Search examples by name fragment",
)
@cache_response()
async def search_examples(
    name: str = Query(min_length=1, max_length=255, description="Part of the name to match"),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[List[ExampleResponse]]:
    data = await SearchExamplesHandler(db).execute(SearchExamplesQuery(name=name))
    return ApiResponse.success(data, default_message("GET", 200, data))


@router.get(
    "/count",
    response_model=ApiResponse[ExampleCount],
    summary="Count examples",
)
@cache_response()
async def count_examples(
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[ExampleCount]:
    data = await CountExamplesHandler(db).execute()
    return ApiResponse.success(data, default_message("GET", 200, data))


@router.get(
    "/by-name/{name}",
    response_model=ApiResponse[ExampleResponse],
    responses={404: {"description": "Example not found", "model": ErrorResponse}},
    summary="Get an example by its exact name",
)
@cache_response()
async def get_example_by_name(
    name: str,
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[ExampleResponse]:
    data = await GetExampleByNameHandler(db).execute(GetExampleByNameQuery(name=name))
    return ApiResponse.success(data, default_message("GET", 200, data))


@router.get(
    "/{example_id}/exists",
    response_model=ApiResponse[ExampleExists],
    summary="Check whether an example exists",
)
async def example_exists(
    example_id: UUID,
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[ExampleExists]:
    data = await ExampleExistsHandler(db).execute(ExampleExistsQuery(id=str(example_id)))
    return ApiResponse.success(data, default_message("GET", 200, data))


@router.get(
    "/{example_id}",
    response_model=ApiResponse[ExampleResponse],
    responses={404: {"description": "Example not found", "model": ErrorResponse}},
    summary="Get an example by ID",
)
@cache_response(ttl=60)
async def get_example(
    example_id: UUID,
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[ExampleResponse]:
    data = await GetExampleByIdHandler(db).execute(GetExampleByIdQuery(id=str(example_id)))
    return ApiResponse.success(data, default_message("GET", 200, data))


@router.put(
    "/{example_id}",
    response_model=ApiResponse[ExampleResponse],
    responses={404: {"description": "Example not found", "model": ErrorResponse}},
    summary="Update an example",
)
async def update_example(
    request: Request,
    example_id: UUID,
    body: UpdateExampleRequest,
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[ExampleResponse]:
    example = await UpdateExampleHandler(db).execute(
        UpdateExampleCommand(id=str(example_id), name=body.name, description=body.description)
    )
    data = ExampleResponse.model_validate(example)
    await _persist_and_invalidate(request, db)
    return ApiResponse.success(data, default_message("PUT", 200))


@router.delete(
    "/{example_id}",
    response_model=ApiResponse[DeletedExample],
    responses={404: {"description": "Example not found", "model": ErrorResponse}},
    summary="Delete an example",
)
async def delete_example(
    request: Request,
    example_id: UUID,
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[DeletedExample]:
    result = await DeleteExampleHandler(db).execute(DeleteExampleCommand(id=str(example_id)))
    await _persist_and_invalidate(request, db)
    return ApiResponse.success(DeletedExample(**result), default_message("DELETE", 200))

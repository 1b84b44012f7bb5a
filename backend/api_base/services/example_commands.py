"""
API Base — Example Commands (writes)
=====================================

What:  Create, update and delete operations for the Example resource.
Why:   Each write is a small command object plus one handler, so the route
       only translates HTTP into a command and the handler owns the rules.
How:   Handlers receive an AsyncSession, build an ExampleRepository on it and
       enforce business rules (unique names, existence) before writing.

Error translation:
    Our own exceptions (NotFoundError, DuplicateNameError) propagate as-is.
    A unique-constraint race on insert/update becomes DuplicateNameError.
    Anything else is logged and wrapped in DatabaseError (generic message).
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from api_base.exceptions import AppError, DatabaseError, DuplicateNameError, NotFoundError
from api_base.models.example import Example
from api_base.repositories.example_repository import ExampleRepository

logger = logging.getLogger(__name__)

RESOURCE = "Example"


# ── Commands ──────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class CreateExampleCommand:
    name: str
    description: Optional[str] = None


@dataclass(frozen=True)
class UpdateExampleCommand:
    id: str
    name: Optional[str] = None
    description: Optional[str] = None

    def changes(self) -> Dict[str, Any]:
        """Only the fields the client actually sent."""
        return {
            field: value
            for field, value in (("name", self.name), ("description", self.description))
            if value is not None
        }


@dataclass(frozen=True)
class DeleteExampleCommand:
    id: str


# ── Handlers ──────────────────────────────────────────────────────────────


class CreateExampleHandler:
    def __init__(self, session: AsyncSession):
        self.repository = ExampleRepository(session)

    async def execute(self, command: CreateExampleCommand) -> Example:
        try:
            if await self.repository.find_by_name(command.name) is not None:
                raise DuplicateNameError(command.name)

            example = await self.repository.create(command.name, command.description)
            logger.info("Example created: %s (%s)", example.id, example.name)
            return example
        except AppError:
            raise
        except IntegrityError:
            raise DuplicateNameError(command.name)
        except Exception as e:
            logger.error("Error creating example: %s", str(e), exc_info=True)
            raise DatabaseError(context={"operation": "create_example"})


class UpdateExampleHandler:
    def __init__(self, session: AsyncSession):
        self.repository = ExampleRepository(session)

    async def execute(self, command: UpdateExampleCommand) -> Example:
        try:
            example = await self.repository.find_by_id(command.id)
            if example is None:
                raise NotFoundError(resource=RESOURCE, resource_id=command.id)

            changes = command.changes()
            new_name = changes.get("name")
            if new_name is not None and new_name != example.name:
                other = await self.repository.find_by_name(new_name)
                if other is not None and other.id != example.id:
                    raise DuplicateNameError(new_name)

            if not changes:
                return example

            example = await self.repository.update(example, changes)
            logger.info("Example updated: %s (fields: %s)", example.id, ", ".join(sorted(changes)))
            return example
        except AppError:
            raise
        except IntegrityError:
            raise DuplicateNameError(command.name or "")
        except Exception as e:
            logger.error("Error updating example %s: %s", command.id, str(e), exc_info=True)
            raise DatabaseError(context={"operation": "update_example", "id": command.id})


class DeleteExampleHandler:
    def __init__(self, session: AsyncSession):
        self.repository = ExampleRepository(session)

    async def execute(self, command: DeleteExampleCommand) -> Dict[str, str]:
        try:
            example = await self.repository.find_by_id(command.id)
            if example is None:
                raise NotFoundError(resource=RESOURCE, resource_id=command.id)

            await self.repository.delete(example)
            logger.info("Example deleted: %s", command.id)
            return {"id": command.id}
        except AppError:
            raise
        except Exception as e:
            logger.error("Error deleting example %s: %s", command.id, str(e), exc_info=True)
            raise DatabaseError(context={"operation": "delete_example", "id": command.id})

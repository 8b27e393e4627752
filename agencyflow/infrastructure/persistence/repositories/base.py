"""Base repository: session handling shared by the workflow and invoice repositories."""

from typing import Any, Generic, TypeVar

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from agencyflow.infrastructure.persistence.database import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """Generic tenant-scoped lookup plus a single write path (_save).

    Request-scoped repositories run inside get_db_transactional and only
    flush; the request commits. Engine repositories are built with
    autocommit=True so every write is durable on its own, and a failed
    commit is rolled back before re-raising so the session stays usable.
    """

    def __init__(
        self,
        db: AsyncSession,
        model: type[ModelType],
        *,
        autocommit: bool = False,
    ) -> None:
        self.db = db
        self.model = model
        self._autocommit = autocommit

    async def _get_scoped(self, entity_id: str, tenant_id: str) -> ModelType | None:
        """Return the row with this id in this tenant, or None."""
        model: Any = self.model
        result = await self.db.execute(
            select(self.model).where(model.id == entity_id, model.tenant_id == tenant_id)
        )
        return result.scalar_one_or_none()

    async def _save(self) -> None:
        try:
            if self._autocommit:
                await self.db.commit()
            else:
                await self.db.flush()
        except SQLAlchemyError:
            await self.db.rollback()
            raise

"""Async read-only repository pattern for database access.

Provides a generic base repository with paginated listing. Domain packages
subclass it to add their own queries. Nothing here writes: the catalogs read
through it are owned by another system.

Example: PromotionRepository extending ReadOnlyRepository.
"""

from typing import Generic, TypeVar

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from core.models.base import Base

# ---------------------------------------------------------------------------
# Type variable for model classes
# ---------------------------------------------------------------------------

ModelT = TypeVar("ModelT", bound=Base)


# ---------------------------------------------------------------------------
# Base repository
# ---------------------------------------------------------------------------

class ReadOnlyRepository(Generic[ModelT]):
    """Generic async repository with pagination.

    Subclass and set `model` to your SQLAlchemy model::

        class PromotionRepository(ReadOnlyRepository[PromotionRow]):
            model = PromotionRow
    """

    model: type[ModelT]

    def __init__(self, session: AsyncSession):
        self.session = session

    # -- List with pagination --

    async def list(self, page: int = 1, limit: int = 50) -> tuple[list[ModelT], int]:
        """List one page of rows in primary key order.

        Returns (rows, total_count).
        """
        offset = (page - 1) * limit
        stmt = select(self.model).order_by(self.model.id).offset(offset).limit(limit)
        result = await self.session.execute(stmt)
        rows = list(result.scalars().all())

        count_stmt = select(func.count()).select_from(self.model)
        count_result = await self.session.execute(count_stmt)
        total = count_result.scalar() or 0

        return rows, total

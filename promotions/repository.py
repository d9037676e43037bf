"""Promotion repository: read-only async access to the promotions table."""

from patterns.repository import ReadOnlyRepository
from promotions.models.db_models import PromotionRow


class PromotionRepository(ReadOnlyRepository[PromotionRow]):
    """Queries the engine needs from the promotions table."""

    model = PromotionRow

    async def list_records(self, page_size: int = 100) -> list[dict]:
        """Every promotion as a flat record, in id order, fetched a page at a time."""
        records: list[dict] = []
        page = 1
        while True:
            rows, total = await self.list(page=page, limit=page_size)
            records.extend(row.to_record() for row in rows)
            if not rows or len(records) >= total:
                return records
            page += 1

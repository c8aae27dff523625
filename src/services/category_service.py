"""Service layer for category listings."""
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from models.prompt import Prompt
from schemas.user import CategoryCount
from services.utils import with_storage_timeout


async def get_category_counts(db: AsyncSession) -> list[CategoryCount]:
    """Published prompt counts per category, most populated first. Empty categories are omitted."""
    count = func.count(Prompt.id).label("count")
    stmt = (
        select(Prompt.category, count)
        .where(Prompt.published.is_(True))
        .group_by(Prompt.category)
        .order_by(count.desc(), Prompt.category)
    )
    rows = (await with_storage_timeout(db.execute(stmt))).all()
    return [CategoryCount(category=category, count=n) for category, n in rows]

"""Category listing endpoint."""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import get_async_session
from schemas.user import CategoryCount
from services import category_service

router = APIRouter(prefix="/categories", tags=["categories"])


@router.get("", response_model=list[CategoryCount])
async def list_categories(
    db: AsyncSession = Depends(get_async_session),
) -> list[CategoryCount]:
    """Published prompt counts per category, most populated first."""
    return await category_service.get_category_counts(db)

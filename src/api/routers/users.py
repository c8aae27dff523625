"""User endpoints for the authenticated user's profile and content."""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import commit_session, get_async_session, get_current_user
from models.user import User
from schemas.interaction import SuccessResponse
from schemas.prompt import PromptSummary
from schemas.user import UserResponse, UserStats, UserUpdate
from services import prompt_service, user_service

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/me", response_model=UserResponse)
async def get_current_user_info(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
) -> User:
    """
    Get the current authenticated user's information.

    Creates the user record on first access from identity provider claims.
    """
    await commit_session(db)
    return current_user


@router.put("/me", response_model=UserResponse)
async def update_current_user(
    data: UserUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
) -> User:
    """Update your name, bio or avatar image."""
    user = await user_service.update_profile(db, current_user, data)
    await commit_session(db)
    return user


@router.delete("/me", response_model=SuccessResponse)
async def delete_current_user(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
) -> SuccessResponse:
    """Delete your account and everything you created."""
    await user_service.delete_account(db, current_user)
    await commit_session(db)
    return SuccessResponse()


@router.get("/me/prompts", response_model=list[PromptSummary])
async def list_my_prompts(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
) -> list[PromptSummary]:
    """List every prompt you authored, drafts included, newest first."""
    return await prompt_service.list_user_prompts(db, current_user.id)


@router.get("/me/bookmarks", response_model=list[PromptSummary])
async def list_my_bookmarks(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
) -> list[PromptSummary]:
    """List your saved prompts, most recently saved first."""
    return await user_service.list_bookmarked_prompts(db, current_user.id)


@router.get("/me/stats", response_model=UserStats)
async def get_my_stats(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
) -> UserStats:
    """Totals of prompts, upvotes received, views and copies across your prompts."""
    return await user_service.get_user_stats(db, current_user.id)

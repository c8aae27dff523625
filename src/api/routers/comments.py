"""Comment endpoints."""
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import (
    commit_session,
    get_async_session,
    get_current_user,
    get_current_user_optional,
)
from models.user import User
from schemas.comment import CommentCreate, CommentResponse
from schemas.interaction import SuccessResponse
from services import comment_service

router = APIRouter(tags=["comments"])


@router.get("/prompts/{prompt_id}/comments", response_model=list[CommentResponse])
async def list_comments(
    prompt_id: UUID,
    current_user: User | None = Depends(get_current_user_optional),
    db: AsyncSession = Depends(get_async_session),
) -> list[CommentResponse]:
    """List a prompt's comments, newest first."""
    viewer_id = current_user.id if current_user else None
    comments = await comment_service.list_comments(db, prompt_id, viewer_id)
    return [CommentResponse.model_validate(c) for c in comments]


@router.post(
    "/prompts/{prompt_id}/comments",
    response_model=CommentResponse,
    status_code=201,
)
async def create_comment(
    prompt_id: UUID,
    data: CommentCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
) -> CommentResponse:
    """Comment on a prompt."""
    comment = await comment_service.create_comment(db, current_user.id, prompt_id, data.content)
    await commit_session(db)
    return CommentResponse.model_validate(comment)


@router.delete("/comments/{comment_id}", response_model=SuccessResponse)
async def delete_comment(
    comment_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
) -> SuccessResponse:
    """Delete one of your own comments."""
    await comment_service.delete_comment(db, current_user.id, comment_id)
    await commit_session(db)
    return SuccessResponse()

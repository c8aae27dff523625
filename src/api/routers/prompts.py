"""Prompt feed, CRUD, and interaction endpoints."""
import logging
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import (
    commit_session,
    get_async_session,
    get_current_user,
    get_current_user_optional,
)
from models.user import User
from schemas.feed import FeedQuery, FeedResponse, InteractionStateResponse
from schemas.interaction import BookmarkToggleResponse, SuccessResponse, UpvoteToggleResponse
from schemas.prompt import PromptCreate, PromptDetail, PromptUpdate
from services import feed_service, mutation_service, prompt_service
from services.interaction_service import resolve_interaction_state

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/prompts", tags=["prompts"])


@router.get("", response_model=FeedResponse)
async def get_feed(
    category: list[str] = Query(
        default=[],
        description="Category filter; comma-joined or repeated values match any",
    ),
    ai_tool: list[str] = Query(
        default=[],
        alias="aiTool",
        description="Target AI tool filter; comma-joined or repeated values match any",
    ),
    difficulty: str | None = Query(default=None, description="Difficulty filter"),
    search: str | None = Query(
        default=None,
        description="Case-insensitive match on title, description, content, or exact tag",
    ),
    sort: str | None = Query(
        default=None,
        description="trending (default), newest, oldest, upvotes, saved, views, copies",
    ),
    page: int = Query(default=1, description="1-based page number"),
    limit: int | None = Query(default=None, description="Page size"),
    user_id: UUID | None = Query(
        default=None,
        alias="userId",
        description="Viewer whose interaction state to include; must match the caller",
    ),
    current_user: User | None = Depends(get_current_user_optional),
    db: AsyncSession = Depends(get_async_session),
) -> FeedResponse:
    """
    Get a page of published prompts with filters, sorting and pagination.

    - **category** / **aiTool**: match any of the listed values
    - **search**: matches title, description or content (case-insensitive), or a tag exactly
    - **sort**: defaults to trending (most upvoted, newest first on ties)

    The response includes which prompts on the page the caller has upvoted and
    bookmarked. Anonymous callers get empty interaction state.
    """
    try:
        query = FeedQuery(
            category=category,
            ai_tool=ai_tool,
            difficulty=difficulty,
            search=search,
            sort=sort,
            page=page,
            limit=limit,
        )
    except ValidationError as e:
        raise HTTPException(
            status_code=422,
            detail=e.errors(include_url=False, include_context=False),
        )

    feed_page = await feed_service.get_prompts(db, query)

    viewer_id = None
    if current_user is not None and (user_id is None or user_id == current_user.id):
        viewer_id = current_user.id
    state = await resolve_interaction_state(
        db, viewer_id, [prompt.id for prompt in feed_page.prompts],
    )
    return FeedResponse(
        prompts=feed_page.prompts,
        total=feed_page.total,
        page=feed_page.page,
        total_pages=feed_page.total_pages,
        interaction_state=InteractionStateResponse.from_state(state),
    )


@router.post("", response_model=PromptDetail, status_code=201)
async def create_prompt(
    data: PromptCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
) -> PromptDetail:
    """Create a new prompt."""
    prompt = await prompt_service.create_prompt(db, current_user.id, data)
    await commit_session(db)
    return prompt


@router.get("/{prompt_id}", response_model=PromptDetail)
async def get_prompt(
    prompt_id: UUID,
    current_user: User | None = Depends(get_current_user_optional),
    db: AsyncSession = Depends(get_async_session),
) -> PromptDetail:
    """
    Get a prompt with its author, results and comments.

    Each call records one view. Drafts are only visible to their author.
    """
    viewer_id = current_user.id if current_user else None
    detail = await prompt_service.get_prompt_detail(db, prompt_id, viewer_id)
    await commit_session(db)
    return detail


@router.put("/{prompt_id}", response_model=PromptDetail)
async def update_prompt(
    prompt_id: UUID,
    data: PromptUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
) -> PromptDetail:
    """Update a prompt you own. Omitted fields are left unchanged."""
    prompt = await prompt_service.update_prompt(db, current_user.id, prompt_id, data)
    await commit_session(db)
    return prompt


@router.delete("/{prompt_id}", response_model=SuccessResponse)
async def delete_prompt(
    prompt_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
) -> SuccessResponse:
    """Delete a prompt you own, along with its upvotes, bookmarks and comments."""
    await prompt_service.delete_prompt(db, current_user.id, prompt_id)
    await commit_session(db)
    return SuccessResponse()


@router.post("/{prompt_id}/upvote", response_model=UpvoteToggleResponse)
async def toggle_upvote(
    prompt_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
) -> UpvoteToggleResponse:
    """Upvote the prompt, or remove your upvote if it already exists."""
    upvoted, count = await mutation_service.toggle_upvote(db, current_user.id, prompt_id)
    await commit_session(db)
    return UpvoteToggleResponse(upvoted=upvoted, count=count)


@router.post("/{prompt_id}/bookmark", response_model=BookmarkToggleResponse)
async def toggle_bookmark(
    prompt_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
) -> BookmarkToggleResponse:
    """Save the prompt, or remove it from your saved prompts if already saved."""
    bookmarked = await mutation_service.toggle_bookmark(db, current_user.id, prompt_id)
    await commit_session(db)
    return BookmarkToggleResponse(bookmarked=bookmarked)


@router.post("/{prompt_id}/copy", response_model=SuccessResponse)
async def track_copy(
    prompt_id: UUID,
    db: AsyncSession = Depends(get_async_session),
) -> SuccessResponse:
    """Record that the prompt's content was copied. No authentication required."""
    await mutation_service.increment_copy(db, prompt_id)
    await commit_session(db)
    return SuccessResponse()

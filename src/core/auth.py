"""Authentication module for session tokens issued by the identity provider."""
import logging

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from core.config import Settings, get_settings
from db.session import get_async_session
from models.user import User

logger = logging.getLogger(__name__)


# HTTP Bearer token scheme
security = HTTPBearer(auto_error=False)

DEV_USER_EXTERNAL_ID = "dev|local-development-user"


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def decode_jwt(token: str, settings: Settings) -> dict:
    """
    Decode and validate a session token.

    Raises:
        HTTPException: If token is invalid, expired, or has the wrong audience.
    """
    if not settings.auth_jwt_secret:
        logger.error("AUTH_JWT_SECRET is not configured; rejecting all tokens")
        raise _unauthorized("Invalid token")

    try:
        return jwt.decode(
            token,
            settings.auth_jwt_secret,
            algorithms=[settings.auth_jwt_algorithm],
            audience=settings.auth_jwt_audience,
            options={"verify_aud": settings.auth_jwt_audience is not None},
        )
    except jwt.ExpiredSignatureError:
        raise _unauthorized("Token has expired")
    except jwt.InvalidAudienceError:
        raise _unauthorized("Invalid audience")
    except jwt.PyJWTError as e:
        # Log full details for debugging (server-side only)
        logger.warning("JWT validation failed: %s", e)
        raise _unauthorized("Invalid token")


async def get_or_create_user(
    db: AsyncSession,
    external_id: str,
    email: str | None = None,
    name: str | None = None,
    image: str | None = None,
) -> User:
    """
    Get existing user or create new one from identity provider claims.

    Handles race conditions where multiple concurrent requests may try to create
    the same user simultaneously. If an IntegrityError occurs (due to unique
    constraint on external_id), the function rolls back and fetches the existing user.

    Note: Uses flush(), not commit. Session generator handles commit at request end.

    Important: This function is called during authentication before any other
    database operations in the request. The rollback on IntegrityError is safe
    because no prior work exists to be undone.
    """
    result = await db.execute(select(User).where(User.external_id == external_id))
    user = result.scalar_one_or_none()

    if user is None:
        user = User(external_id=external_id, email=email, name=name, image=image)
        db.add(user)
        try:
            await db.flush()
            logger.info("user_created user_id=%s", user.id)
        except IntegrityError:
            # Race condition: another request created the user between our SELECT
            # and INSERT. Rollback and fetch the existing user.
            await db.rollback()
            result = await db.execute(select(User).where(User.external_id == external_id))
            user = result.scalar_one()

    # Keep email in sync with the identity provider; name and image are
    # user-editable so they are only seeded on creation
    if email and user.email != email:
        user.email = email
        await db.flush()

    return user


async def get_or_create_dev_user(db: AsyncSession) -> User:
    """Get or create a development user for DEV_MODE."""
    return await get_or_create_user(
        db,
        external_id=DEV_USER_EXTERNAL_ID,
        email="dev@localhost",
        name="Local Developer",
    )


async def _authenticate_user(
    credentials: HTTPAuthorizationCredentials | None,
    db: AsyncSession,
    settings: Settings,
) -> User | None:
    """
    Internal: resolve the viewer from the bearer token.

    Returns None when no token was sent. In DEV_MODE, bypasses auth and returns
    the development user.
    """
    if settings.dev_mode:
        return await get_or_create_dev_user(db)

    if credentials is None:
        return None

    payload = decode_jwt(credentials.credentials, settings)

    external_id = payload.get("sub")
    if not external_id:
        raise _unauthorized("Invalid token: missing sub claim")

    return await get_or_create_user(
        db,
        external_id=external_id,
        email=payload.get("email"),
        name=payload.get("name"),
        image=payload.get("picture"),
    )


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    db: AsyncSession = Depends(get_async_session),
    settings: Settings = Depends(get_settings),
) -> User:
    """Dependency that validates the token and returns the current user (401 if absent)."""
    user = await _authenticate_user(credentials, db, settings)
    if user is None:
        raise _unauthorized("Not authenticated")
    return user


async def get_current_user_optional(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    db: AsyncSession = Depends(get_async_session),
    settings: Settings = Depends(get_settings),
) -> User | None:
    """
    Dependency for routes open to anonymous viewers.

    Returns None without a token. A token that is present but invalid is still
    rejected with 401 rather than silently downgraded to anonymous.
    """
    return await _authenticate_user(credentials, db, settings)

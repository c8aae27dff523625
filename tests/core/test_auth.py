"""
Tests for session token validation and viewer resolution.

Imports from core.auth happen at module level; conftest sets DATABASE_URL
before collection, so Settings validation succeeds.
"""
from collections.abc import Callable
from datetime import timedelta

import jwt
import pytest
from fastapi import HTTPException
from fastapi.security import HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession

from core.auth import (
    DEV_USER_EXTERNAL_ID,
    decode_jwt,
    get_current_user,
    get_current_user_optional,
    get_or_create_user,
)
from core.config import Settings, get_settings
from models.user import User


def bearer(token: str) -> HTTPAuthorizationCredentials:
    return HTTPAuthorizationCredentials(scheme="Bearer", credentials=token)


def settings_with(**overrides: object) -> Settings:
    return get_settings().model_copy(update=overrides)


class TestDecodeJwt:
    """Tests for decode_jwt."""

    def test__decode_jwt__valid_token(self, make_token: Callable[..., str]) -> None:
        payload = decode_jwt(make_token("idp|123", email="a@example.com"), get_settings())

        assert payload["sub"] == "idp|123"
        assert payload["email"] == "a@example.com"

    def test__decode_jwt__expired(self, make_token: Callable[..., str]) -> None:
        token = make_token("idp|123", expires_in=timedelta(minutes=-5))

        with pytest.raises(HTTPException) as exc_info:
            decode_jwt(token, get_settings())

        assert exc_info.value.status_code == 401
        assert exc_info.value.detail == "Token has expired"

    def test__decode_jwt__wrong_signature(self) -> None:
        token = jwt.encode({"sub": "idp|123"}, "some-other-secret-that-is-long-enough", "HS256")

        with pytest.raises(HTTPException) as exc_info:
            decode_jwt(token, get_settings())

        assert exc_info.value.status_code == 401
        assert exc_info.value.detail == "Invalid token"

    def test__decode_jwt__garbage(self) -> None:
        with pytest.raises(HTTPException) as exc_info:
            decode_jwt("not-a-jwt", get_settings())

        assert exc_info.value.detail == "Invalid token"

    def test__decode_jwt__audience_checked_when_configured(
        self, make_token: Callable[..., str],
    ) -> None:
        settings = settings_with(auth_jwt_audience="prompts-api")

        with pytest.raises(HTTPException) as exc_info:
            decode_jwt(make_token("idp|123", aud="someone-else"), settings)
        assert exc_info.value.detail == "Invalid audience"

        payload = decode_jwt(make_token("idp|123", aud="prompts-api"), settings)
        assert payload["aud"] == "prompts-api"

    def test__decode_jwt__no_secret_rejects_everything(
        self, make_token: Callable[..., str],
    ) -> None:
        with pytest.raises(HTTPException) as exc_info:
            decode_jwt(make_token("idp|123"), settings_with(auth_jwt_secret=""))

        assert exc_info.value.status_code == 401


class TestGetOrCreateUser:
    """Tests for get_or_create_user."""

    async def test__get_or_create_user__creates_once(self, db_session: AsyncSession) -> None:
        first = await get_or_create_user(
            db_session, "idp|new", email="new@example.com", name="New", image="http://img",
        )
        second = await get_or_create_user(db_session, "idp|new")

        assert first.id == second.id
        assert first.name == "New"
        assert first.image == "http://img"

    async def test__get_or_create_user__syncs_email_only(self, db_session: AsyncSession) -> None:
        await get_or_create_user(db_session, "idp|sync", email="old@example.com", name="Chosen")

        user = await get_or_create_user(
            db_session, "idp|sync", email="new@example.com", name="Provider name",
        )

        assert user.email == "new@example.com"
        assert user.name == "Chosen"


class TestCurrentUserDependencies:
    """Tests for get_current_user and get_current_user_optional."""

    async def test__get_current_user__resolves_token_subject(
        self, db_session: AsyncSession, user: User, make_token: Callable[..., str],
    ) -> None:
        resolved = await get_current_user(
            credentials=bearer(make_token(user.external_id)),
            db=db_session,
            settings=get_settings(),
        )

        assert resolved.id == user.id

    async def test__get_current_user__no_token_is_401(self, db_session: AsyncSession) -> None:
        with pytest.raises(HTTPException) as exc_info:
            await get_current_user(credentials=None, db=db_session, settings=get_settings())

        assert exc_info.value.status_code == 401
        assert exc_info.value.detail == "Not authenticated"

    async def test__get_current_user__missing_sub_is_401(self, db_session: AsyncSession) -> None:
        settings = get_settings()
        token = jwt.encode({"email": "x@example.com"}, settings.auth_jwt_secret, "HS256")

        with pytest.raises(HTTPException) as exc_info:
            await get_current_user(credentials=bearer(token), db=db_session, settings=settings)

        assert exc_info.value.status_code == 401

    async def test__get_current_user_optional__anonymous(self, db_session: AsyncSession) -> None:
        viewer = await get_current_user_optional(
            credentials=None, db=db_session, settings=get_settings(),
        )

        assert viewer is None

    async def test__get_current_user_optional__bad_token_still_rejected(
        self, db_session: AsyncSession,
    ) -> None:
        with pytest.raises(HTTPException) as exc_info:
            await get_current_user_optional(
                credentials=bearer("garbage"), db=db_session, settings=get_settings(),
            )

        assert exc_info.value.status_code == 401

    async def test__dev_mode__returns_dev_user_without_token(
        self, db_session: AsyncSession,
    ) -> None:
        viewer = await get_current_user(
            credentials=None, db=db_session, settings=settings_with(dev_mode=True),
        )

        assert viewer.external_id == DEV_USER_EXTERNAL_ID

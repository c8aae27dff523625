"""Tests for /users/me, /categories and /health endpoints."""
from collections.abc import Awaitable, Callable
from datetime import timedelta

from httpx import AsyncClient

from models.enums import Category
from models.prompt import Prompt
from models.user import User

MakePrompt = Callable[..., Awaitable[Prompt]]
Headers = Callable[[User], dict[str, str]]


async def test_get_me_creates_user_from_claims(
    client: AsyncClient, make_token: Callable[..., str],
) -> None:
    """Test that the first authenticated request provisions the user."""
    token = make_token(
        "idp|first-login", email="first@example.com", name="First Login", picture="http://img",
    )

    response = await client.get("/users/me", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 200
    data = response.json()
    assert data["email"] == "first@example.com"
    assert data["name"] == "First Login"
    assert data["image"] == "http://img"
    assert data["role"] == "USER"
    assert data["bio"] is None


async def test_get_me_requires_auth(client: AsyncClient) -> None:
    """Test that /users/me rejects anonymous requests."""
    response = await client.get("/users/me")

    assert response.status_code == 401


async def test_get_me_expired_token(
    client: AsyncClient, user: User, make_token: Callable[..., str],
) -> None:
    """Test that an expired session token is rejected with a specific message."""
    token = make_token(user.external_id, expires_in=timedelta(seconds=-30))

    response = await client.get("/users/me", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 401
    assert response.json() == {"detail": "Token has expired"}


async def test_update_me(client: AsyncClient, user: User, auth_headers: Headers) -> None:
    """Test updating the profile bio without touching the name."""
    response = await client.put(
        "/users/me", json={"bio": "I write prompts"}, headers=auth_headers(user),
    )

    assert response.status_code == 200
    data = response.json()
    assert data["bio"] == "I write prompts"
    assert data["name"] == "Alice"


async def test_delete_me(
    client: AsyncClient, make_user: Callable[..., Awaitable[User]], auth_headers: Headers,
) -> None:
    """Test that deleting the account removes the user record."""
    doomed = await make_user(name="Doomed")
    old_id = str(doomed.id)
    headers = auth_headers(doomed)

    response = await client.delete("/users/me", headers=headers)
    recreated = await client.get("/users/me", headers=headers)

    assert response.json() == {"success": True}
    # The same identity signs in again as a brand new user
    assert recreated.json()["id"] != old_id


async def test_my_prompts_include_drafts(
    client: AsyncClient,
    user: User,
    other_user: User,
    make_prompt: MakePrompt,
    auth_headers: Headers,
) -> None:
    """Test listing your own prompts, drafts included, newest first."""
    await make_prompt(user, "Published", age_minutes=5)
    await make_prompt(user, "Draft", published=False)
    await make_prompt(other_user, "Not mine")

    response = await client.get("/users/me/prompts", headers=auth_headers(user))

    assert [p["title"] for p in response.json()] == ["Draft", "Published"]


async def test_my_bookmarks(
    client: AsyncClient,
    user: User,
    make_prompt: MakePrompt,
    auth_headers: Headers,
) -> None:
    """Test that saved prompts embed the caller's membership markers."""
    prompt = await make_prompt(user, "Saved one")
    await client.post(f"/prompts/{prompt.id}/bookmark", headers=auth_headers(user))
    await client.post(f"/prompts/{prompt.id}/upvote", headers=auth_headers(user))

    response = await client.get("/users/me/bookmarks", headers=auth_headers(user))

    (item,) = response.json()
    assert item["title"] == "Saved one"
    assert item["bookmarks"] == [{"userId": str(user.id)}]
    assert item["upvotes"] == [{"userId": str(user.id)}]


async def test_my_stats(
    client: AsyncClient,
    user: User,
    other_user: User,
    make_prompt: MakePrompt,
    add_upvotes: Callable[..., Awaitable[None]],
    auth_headers: Headers,
) -> None:
    """Test totals across the caller's prompts."""
    first = await make_prompt(user, views=10, copy_count=1)
    await make_prompt(user, views=5, copy_count=2, published=False)
    await add_upvotes(first, user, other_user)

    response = await client.get("/users/me/stats", headers=auth_headers(user))

    assert response.json() == {
        "totalPrompts": 2,
        "totalUpvotes": 2,
        "totalViews": 15,
        "totalCopies": 3,
    }


async def test_categories(client: AsyncClient, user: User, make_prompt: MakePrompt) -> None:
    """Test published prompt counts per category, most populated first."""
    await make_prompt(user, category=Category.WRITING)
    await make_prompt(user, category=Category.CODING)
    await make_prompt(user, category=Category.CODING)
    await make_prompt(user, category=Category.MARKETING, published=False)

    response = await client.get("/categories")

    assert response.status_code == 200
    assert response.json() == [
        {"category": "Coding", "_count": 2},
        {"category": "Writing", "_count": 1},
    ]


async def test_health(client: AsyncClient) -> None:
    """Test the health check without a cache configured."""
    response = await client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "healthy", "database": "healthy", "cache": "disabled"}

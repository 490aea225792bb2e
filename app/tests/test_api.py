"""
Route tests for the users, login and likes endpoints

Requests go through an httpx client bound to the ASGI app, with the
database session dependency pointed at the test session.
"""
import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession
from main import app
from infrastructure.postgres_connection import get_db_session


@pytest.fixture
async def client(db_session: AsyncSession):
    """HTTP client bound to the app, with the test session injected"""
    async def override_get_db_session():
        yield db_session

    app.dependency_overrides[get_db_session] = override_get_db_session
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.mark.unit
class TestUserRoutes:
    """Test suite for /v1/users and /v1/login"""

    async def test_create_and_fetch_user(self, client: AsyncClient):
        response = await client.post(
            "/v1/users",
            json={"nickname": "ann ", "email": "ann@example.com", "password": "secret123"}
        )

        assert response.status_code == 201
        body = response.json()
        assert body["nickname"] == "ann"
        assert "password" not in body

        response = await client.get(f"/v1/users/{body['id']}")
        assert response.status_code == 200
        assert response.json()["email"] == "ann@example.com"
        assert "password" not in response.json()

    async def test_create_user_validation_error(self, client: AsyncClient):
        response = await client.post(
            "/v1/users",
            json={"nickname": "", "email": "nope", "password": ""}
        )

        assert response.status_code == 422
        body = response.json()
        assert body["error"] == "ValidationException"
        assert body["details"]["errors"] == ["Required Nickname", "Required Password", "Invalid Email"]

    async def test_create_user_conflict(self, client: AsyncClient, test_user_1):
        response = await client.post(
            "/v1/users",
            json={"nickname": "Other", "email": "user1@example.com", "password": "secret123"}
        )

        assert response.status_code == 409
        assert response.json()["details"]["field"] == "email"

    async def test_list_users(self, client: AsyncClient, test_user_1, test_user_2):
        response = await client.get("/v1/users")

        assert response.status_code == 200
        users = response.json()
        assert [user["nickname"] for user in users] == ["TestUser1", "TestUser2"]
        assert all("password" not in user for user in users)

    async def test_get_missing_user(self, client: AsyncClient):
        response = await client.get("/v1/users/99999")

        assert response.status_code == 404
        assert response.json()["message"] == "User not found"
        assert response.json()["path"] == "/v1/users/99999"

    async def test_update_user(self, client: AsyncClient, test_user_1):
        user_id = test_user_1.id

        response = await client.put(
            f"/v1/users/{user_id}",
            json={"nickname": "Renamed", "email": "renamed@example.com", "password": "new_password"}
        )

        assert response.status_code == 200
        assert response.json()["nickname"] == "Renamed"

        response = await client.post(
            "/v1/login",
            json={"email": "renamed@example.com", "password": "new_password"}
        )
        assert response.status_code == 200
        assert response.json()["id"] == user_id

    async def test_delete_user(self, client: AsyncClient, test_user_1):
        user_id = test_user_1.id

        response = await client.delete(f"/v1/users/{user_id}")
        assert response.status_code == 200
        assert response.json() == {"rows_affected": 1}

        response = await client.delete(f"/v1/users/{user_id}")
        assert response.status_code == 200
        assert response.json() == {"rows_affected": 0}

    async def test_login_wrong_password(self, client: AsyncClient, test_user_1):
        response = await client.post(
            "/v1/login",
            json={"email": "user1@example.com", "password": "wrong"}
        )

        assert response.status_code == 401
        assert response.json()["error"] == "UnauthorizedException"


@pytest.mark.unit
class TestLikeRoutes:
    """Test suite for /v1/likes and /v1/posts/{post_id}/likes"""

    async def test_like_flow(self, client: AsyncClient):
        response = await client.post("/v1/likes", json={"user_id": 1, "post_id": 42})
        assert response.status_code == 201
        assert response.json()["user_id"] == 1

        response = await client.get("/v1/posts/42/likes")
        assert response.status_code == 200
        assert [like["user_id"] for like in response.json()] == [1]

        response = await client.get("/v1/posts/42/likes/info", params={"user_id": 1})
        assert response.json() == {"post_id": 42, "likes_count": 1, "liked_by_user": True}

        response = await client.delete("/v1/likes", params={"user_id": 1, "post_id": 42})
        assert response.json() == {"rows_affected": 1}

        response = await client.get("/v1/posts/42/likes/info", params={"user_id": 1})
        assert response.json() == {"post_id": 42, "likes_count": 0, "liked_by_user": False}

    async def test_duplicate_like(self, client: AsyncClient):
        await client.post("/v1/likes", json={"user_id": 1, "post_id": 42})

        response = await client.post("/v1/likes", json={"user_id": 1, "post_id": 42})

        assert response.status_code == 409
        assert response.json()["message"] == "Post already liked"

    async def test_health(self, client: AsyncClient):
        response = await client.get("/health")

        assert response.json() == {"status": "healthy"}

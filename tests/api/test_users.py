# tests/api/test_users.py

import pytest
from httpx import AsyncClient
from fastapi import status

from tests.conftest import UserContext, stored_files, file_for

pytestmark = pytest.mark.asyncio


class TestPublicProfile:
    """GET /api/users/{uuid}"""

    async def test_get_profile(self, client: AsyncClient, creator: UserContext):
        response = await client.get(f"/api/users/{creator.user.uuid}")

        assert response.status_code == status.HTTP_200_OK
        data = response.json()["data"]
        assert data["name"] == creator.user.name
        assert "password_hash" not in data

    async def test_unknown_user(self, client: AsyncClient):
        response = await client.get("/api/users/unknown-uuid")

        assert response.status_code == status.HTTP_404_NOT_FOUND


class TestUpdateProfile:
    """PUT /api/users/profile"""

    async def test_update_fields(self, client: AsyncClient, creator: UserContext):
        response = await client.put(
            "/api/users/profile",
            data={"bio": "I make presets.", "store_name": "Warm Light Studio", "name": ""},
            headers=creator.headers,
        )

        assert response.status_code == status.HTTP_200_OK
        data = response.json()["data"]
        assert data["bio"] == "I make presets."
        assert data["store_name"] == "Warm Light Studio"
        # blank fields keep their stored value
        assert data["name"] == creator.user.name

    async def test_replacing_profile_image_releases_old_one(self, client: AsyncClient, creator: UserContext, upload_dir):
        first = await client.put(
            "/api/users/profile",
            files={"profile_image": ("me.png", b"first", "image/png")},
            headers=creator.headers,
        )
        first_ref = first.json()["data"]["profile_image"]
        assert file_for(upload_dir, first_ref).read_bytes() == b"first"

        second = await client.put(
            "/api/users/profile",
            files={"profile_image": ("me2.png", b"second", "image/png")},
            headers=creator.headers,
        )

        assert second.status_code == status.HTTP_200_OK
        second_ref = second.json()["data"]["profile_image"]
        assert stored_files(upload_dir) == [file_for(upload_dir, second_ref).name]

    async def test_email_must_stay_unique(self, client: AsyncClient, creator: UserContext, other_user: UserContext, upload_dir):
        response = await client.put(
            "/api/users/profile",
            data={"email": other_user.user.email},
            files={"profile_image": ("me.png", b"img", "image/png")},
            headers=creator.headers,
        )

        assert response.status_code == status.HTTP_409_CONFLICT
        assert stored_files(upload_dir) == []

    async def test_invalid_email(self, client: AsyncClient, creator: UserContext):
        response = await client.put("/api/users/profile", data={"email": "nope"}, headers=creator.headers)

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["data"]["errors"][0]["field"] == "email"

    async def test_requires_auth(self, client: AsyncClient):
        response = await client.put("/api/users/profile", data={"bio": "anonymous"})

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

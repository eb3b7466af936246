"""
Tests for following users and projects
"""
import pytest
from httpx import AsyncClient

from agriportal.repositories.follow_repository import FollowRepository


async def _post(client: AsyncClient, token: str, title: str):
    response = await client.post(
        "/api/v1/posts",
        headers={"Authorization": f"Bearer {token}"},
        json={"title": title, "content": "Kinh nghiệm giữ nước ngọt", "category": "experience"}
    )
    assert response.status_code == 201, response.text
    return response.json()


@pytest.mark.api
@pytest.mark.asyncio
class TestFollowUsersAPI:

    async def test_follow_notifies_target(self, test_client: AsyncClient, farmer_token: str, business_user):
        response = await test_client.post(
            f"/api/v1/follows/users/{business_user.id}", headers={"Authorization": f"Bearer {farmer_token}"}
        )
        assert response.status_code == 200
        assert response.json() == {"following": True}

        business_token = (await test_client.post(
            "/api/v1/auth/login", json={"username": "doanhnghiep", "password": "testpass123"}
        )).json()["access_token"]
        notifications = (await test_client.get(
            "/api/v1/notifications", headers={"Authorization": f"Bearer {business_token}"}
        )).json()
        assert [n["type"] for n in notifications] == ["FOLLOW"]
        assert notifications[0]["message"] == "nongdan đã bắt đầu theo dõi bạn"
        assert notifications[0]["link"] == "/users/nongdan"

    async def test_follow_twice_notifies_once(
        self, test_client: AsyncClient, farmer_token: str, business_token: str, business_user
    ):
        for _ in range(2):
            response = await test_client.post(
                f"/api/v1/follows/users/{business_user.id}", headers={"Authorization": f"Bearer {farmer_token}"}
            )
            assert response.status_code == 200

        stats = (await test_client.get(f"/api/v1/follows/users/{business_user.id}/stats")).json()
        assert stats["followers_count"] == 1
        unread = await test_client.get(
            "/api/v1/notifications/unread-count", headers={"Authorization": f"Bearer {business_token}"}
        )
        assert unread.json()["count"] == 1

    @pytest.mark.edge_case
    async def test_cannot_follow_self(self, test_client: AsyncClient, farmer_token: str, farmer_user):
        response = await test_client.post(
            f"/api/v1/follows/users/{farmer_user.id}", headers={"Authorization": f"Bearer {farmer_token}"}
        )
        assert response.status_code == 400
        assert response.json()["detail"] == "Không thể follow chính mình"

    @pytest.mark.edge_case
    async def test_follow_unknown_user(self, test_client: AsyncClient, farmer_token: str):
        response = await test_client.post(
            "/api/v1/follows/users/999", headers={"Authorization": f"Bearer {farmer_token}"}
        )
        assert response.status_code == 404

    async def test_follow_requires_auth(self, test_client: AsyncClient, business_user):
        response = await test_client.post(f"/api/v1/follows/users/{business_user.id}")
        assert response.status_code == 401

    async def test_stats_from_viewer_perspective(
        self, test_client: AsyncClient, farmer_token: str, business_token: str, farmer_user, business_user
    ):
        await test_client.post(
            f"/api/v1/follows/users/{business_user.id}", headers={"Authorization": f"Bearer {farmer_token}"}
        )
        stats = (await test_client.get(
            f"/api/v1/follows/users/{farmer_user.id}/stats", headers={"Authorization": f"Bearer {business_token}"}
        )).json()
        assert stats == {
            "followers_count": 0,
            "following_count": 1,
            "is_following": False,
            "is_followed_by": True,
        }

    async def test_lists_and_unfollow(
        self, test_client: AsyncClient, farmer_token: str, farmer_user, business_user
    ):
        headers = {"Authorization": f"Bearer {farmer_token}"}
        await test_client.post(f"/api/v1/follows/users/{business_user.id}", headers=headers)

        followers = (await test_client.get(f"/api/v1/follows/users/{business_user.id}/followers")).json()
        assert [f["user"]["username"] for f in followers] == ["nongdan"]
        following = (await test_client.get(f"/api/v1/follows/users/{farmer_user.id}/following")).json()
        assert [f["user"]["username"] for f in following] == ["doanhnghiep"]

        response = await test_client.delete(f"/api/v1/follows/users/{business_user.id}", headers=headers)
        assert response.json() == {"following": False}
        assert (await test_client.get(f"/api/v1/follows/users/{business_user.id}/followers")).json() == []

        # Unfollowing again is harmless
        again = await test_client.delete(f"/api/v1/follows/users/{business_user.id}", headers=headers)
        assert again.status_code == 200


@pytest.mark.api
@pytest.mark.asyncio
class TestFollowingFeed:

    async def test_feed_shows_followed_authors_only(
        self, test_client: AsyncClient, farmer_token: str, business_token: str, admin_token: str, business_user
    ):
        await _post(test_client, business_token, "Giá lúa tuần này")
        await _post(test_client, admin_token, "Thông báo hệ thống")
        await _post(test_client, business_token, "Thu mua dừa sáp")

        headers = {"Authorization": f"Bearer {farmer_token}"}
        assert (await test_client.get("/api/v1/follows/feed", headers=headers)).json() == []

        await test_client.post(f"/api/v1/follows/users/{business_user.id}", headers=headers)
        feed = (await test_client.get("/api/v1/follows/feed", headers=headers)).json()
        assert [p["title"] for p in feed] == ["Thu mua dừa sáp", "Giá lúa tuần này"]
        assert feed[0]["author_username"] == "doanhnghiep"

    async def test_rejected_posts_left_out(
        self, test_client: AsyncClient, farmer_token: str, business_token: str, admin_token: str, business_user
    ):
        kept = await _post(test_client, business_token, "Giá lúa tuần này")
        rejected = await _post(test_client, business_token, "Quảng cáo vay tiền")
        moderated = await test_client.post(
            f"/api/v1/admin/content/post/{rejected['id']}/moderate",
            headers={"Authorization": f"Bearer {admin_token}"},
            json={"new_status": "rejected", "note": "Spam"},
        )
        assert moderated.status_code == 200

        headers = {"Authorization": f"Bearer {farmer_token}"}
        await test_client.post(f"/api/v1/follows/users/{business_user.id}", headers=headers)
        feed = (await test_client.get("/api/v1/follows/feed", headers=headers)).json()
        assert [p["id"] for p in feed] == [kept["id"]]


@pytest.mark.api
@pytest.mark.asyncio
class TestFollowProjectsAPI:

    async def test_follow_project(
        self, test_client: AsyncClient, business_token: str, business_user, project: dict
    ):
        headers = {"Authorization": f"Bearer {business_token}"}
        response = await test_client.post(f"/api/v1/follows/projects/{project['id']}", headers=headers)
        assert response.json() == {"following": True}

        stats = (await test_client.get(f"/api/v1/follows/projects/{project['id']}/stats", headers=headers)).json()
        assert stats == {"followers_count": 1, "is_following": True}
        anonymous = (await test_client.get(f"/api/v1/follows/projects/{project['id']}/stats")).json()
        assert anonymous["is_following"] is False

        followers = (await test_client.get(f"/api/v1/follows/projects/{project['id']}/followers")).json()
        assert [f["user"]["username"] for f in followers] == ["doanhnghiep"]
        followed = (await test_client.get(f"/api/v1/follows/users/{business_user.id}/projects")).json()
        assert [f["project"]["title"] for f in followed] == [project["title"]]

        await test_client.delete(f"/api/v1/follows/projects/{project['id']}", headers=headers)
        stats = (await test_client.get(f"/api/v1/follows/projects/{project['id']}/stats")).json()
        assert stats["followers_count"] == 0

    @pytest.mark.edge_case
    async def test_follow_unknown_project(self, test_client: AsyncClient, business_token: str):
        response = await test_client.post(
            "/api/v1/follows/projects/999", headers={"Authorization": f"Bearer {business_token}"}
        )
        assert response.status_code == 404
        assert response.json()["detail"] == "Không tìm thấy dự án"

    async def test_project_deletion_drops_follows(
        self, test_client: AsyncClient, test_db, farmer_token: str, business_token: str, project: dict
    ):
        await test_client.post(
            f"/api/v1/follows/projects/{project['id']}", headers={"Authorization": f"Bearer {business_token}"}
        )
        deleted = await test_client.delete(
            f"/api/v1/projects/{project['id']}", headers={"Authorization": f"Bearer {farmer_token}"}
        )
        assert deleted.status_code == 204
        assert await FollowRepository(test_db).project_follower_count(project["id"]) == 0


@pytest.mark.integration
@pytest.mark.asyncio
class TestFollowCleanup:

    async def test_account_deletion_removes_follows(
        self, test_client: AsyncClient, test_db, farmer_token: str, business_token: str,
        farmer_user, business_user, project: dict
    ):
        farmer_id, business_id = farmer_user.id, business_user.id
        await test_client.post(
            f"/api/v1/follows/users/{business_id}", headers={"Authorization": f"Bearer {farmer_token}"}
        )
        await test_client.post(
            f"/api/v1/follows/users/{farmer_id}", headers={"Authorization": f"Bearer {business_token}"}
        )
        await test_client.post(
            f"/api/v1/follows/projects/{project['id']}", headers={"Authorization": f"Bearer {business_token}"}
        )

        response = await test_client.delete(
            "/api/v1/settings/account", headers={"Authorization": f"Bearer {farmer_token}"}
        )
        assert response.status_code == 204

        follows = FollowRepository(test_db)
        assert await follows.follower_count(business_id) == 0
        assert await follows.following_count(business_id) == 0
        assert await follows.project_follower_count(project["id"]) == 0

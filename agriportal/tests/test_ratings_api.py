"""
Tests for project ratings and the project leaderboard
"""
import pytest
from httpx import AsyncClient


async def _invest(client: AsyncClient, token: str, project_id: int, amount: int, investor_details: dict):
    response = await client.post(
        f"/api/v1/projects/{project_id}/investments",
        headers={"Authorization": f"Bearer {token}"},
        json={**investor_details, "amount": amount}
    )
    assert response.status_code == 201, response.text


async def _rate(client: AsyncClient, token: str, project_id: int, rating, review: str | None = None):
    return await client.post(
        f"/api/v1/projects/{project_id}/ratings",
        headers={"Authorization": f"Bearer {token}"},
        json={"rating": rating, "review": review}
    )


@pytest.mark.api
@pytest.mark.asyncio
class TestRatingsAPI:

    async def test_must_invest_before_rating(self, test_client: AsyncClient, business_token: str, project: dict):
        can_rate = await test_client.get(
            f"/api/v1/projects/{project['id']}/ratings/can-rate",
            headers={"Authorization": f"Bearer {business_token}"}
        )
        assert can_rate.json() == {"can_rate": False}

        response = await _rate(test_client, business_token, project["id"], 5)
        assert response.status_code == 400
        assert response.json()["detail"] == "Bạn cần đầu tư vào dự án trước khi đánh giá"

    async def test_rate_and_rerate(
        self,
        test_client: AsyncClient,
        farmer_token: str,
        business_token: str,
        project: dict,
        investor_details: dict,
    ):
        await _invest(test_client, business_token, project["id"], 500_000, investor_details)

        first = await _rate(test_client, business_token, project["id"], 5, "Dự án rất tốt")
        assert first.status_code == 200, first.text
        assert first.json()["rating"] == 5

        second = await _rate(test_client, business_token, project["id"], 3)
        assert second.status_code == 200
        assert second.json()["id"] == first.json()["id"]
        assert second.json()["rating"] == 3
        assert second.json()["review"] is None

        mine = await test_client.get(
            f"/api/v1/projects/{project['id']}/ratings/me",
            headers={"Authorization": f"Bearer {business_token}"}
        )
        assert mine.json()["rating"] == 3

        page = await test_client.get(f"/api/v1/projects/{project['id']}/ratings")
        assert page.json()["total"] == 1
        assert page.json()["items"][0]["username"] == "doanhnghiep"

        # Only the first rating notifies the owner
        notifications = await test_client.get(
            "/api/v1/notifications", headers={"Authorization": f"Bearer {farmer_token}"}
        )
        types = [n["type"] for n in notifications.json()]
        assert types.count("PROJECT_RATING") == 1

    @pytest.mark.edge_case
    @pytest.mark.parametrize("rating", [0, 6, -1])
    async def test_rating_out_of_range(
        self, test_client: AsyncClient, business_token: str, project: dict, investor_details: dict, rating
    ):
        await _invest(test_client, business_token, project["id"], 1000, investor_details)
        response = await _rate(test_client, business_token, project["id"], rating)
        assert response.status_code == 400
        assert response.json()["detail"] == "Vui lòng chọn số sao từ 1 đến 5"

    async def test_rate_missing_project(self, test_client: AsyncClient, business_token: str):
        response = await _rate(test_client, business_token, 777, 4)
        assert response.status_code == 404

    async def test_rating_stats(
        self, test_client: AsyncClient, business_token: str, project: dict, investor_details: dict
    ):
        empty = await test_client.get(f"/api/v1/projects/{project['id']}/ratings/stats")
        assert empty.json() == {"avg_rating": 0.0, "total_ratings": 0, "rating_score": 0.0}

        await _invest(test_client, business_token, project["id"], 500_000, investor_details)
        await _rate(test_client, business_token, project["id"], 4)
        stats = (await test_client.get(f"/api/v1/projects/{project['id']}/ratings/stats")).json()
        assert stats["avg_rating"] == 4.0
        assert stats["total_ratings"] == 1
        # 0.7 * 4 + 0.3 * 50 / 20
        assert stats["rating_score"] == 3.55


@pytest.mark.api
@pytest.mark.asyncio
class TestLeaderboardAPI:

    async def _project(self, client: AsyncClient, token: str, payload: dict, title: str) -> int:
        response = await client.post(
            "/api/v1/projects",
            headers={"Authorization": f"Bearer {token}"},
            json={**payload, "title": title}
        )
        return response.json()["id"]

    async def test_empty_leaderboard(self, test_client: AsyncClient, project: dict):
        response = await test_client.get("/api/v1/leaderboard/projects")
        assert response.status_code == 200
        assert response.json() == []

    async def test_ordering_and_tie_break(
        self,
        test_client: AsyncClient,
        farmer_token: str,
        business_token: str,
        project_payload: dict,
        investor_details: dict,
    ):
        first = await self._project(test_client, farmer_token, project_payload, "Dự án một")
        second = await self._project(test_client, farmer_token, project_payload, "Dự án hai")
        third = await self._project(test_client, farmer_token, project_payload, "Dự án ba")
        unrated = await self._project(test_client, farmer_token, project_payload, "Chưa đánh giá")

        # first and third end up with identical score and count
        for project_id, amount, stars in ((first, 500_000, 4), (second, 100_000, 5), (third, 500_000, 4)):
            await _invest(test_client, business_token, project_id, amount, investor_details)
            await _rate(test_client, business_token, project_id, stars)
        await _invest(test_client, business_token, unrated, 900_000, investor_details)

        response = await test_client.get("/api/v1/leaderboard/projects")
        data = response.json()
        assert [p["project_id"] for p in data] == [second, first, third]
        assert data[0]["rating_score"] == 3.65
        assert data[1]["rating_score"] == data[2]["rating_score"] == 3.55
        assert data[0]["creator_username"] == "nongdan"
        assert data[0]["funding_progress"] == 10.0

        limited = await test_client.get("/api/v1/leaderboard/projects", params={"limit": 2})
        assert [p["project_id"] for p in limited.json()] == [second, first]

    @pytest.mark.edge_case
    async def test_more_ratings_win_ties(
        self,
        test_client: AsyncClient,
        farmer_token: str,
        business_token: str,
        admin_token: str,
        project_payload: dict,
        investor_details: dict,
    ):
        single = await self._project(test_client, farmer_token, project_payload, "Một đánh giá")
        double = await self._project(test_client, farmer_token, project_payload, "Hai đánh giá")

        await _invest(test_client, business_token, single, 200_000, investor_details)
        await _rate(test_client, business_token, single, 4)
        for token in (business_token, admin_token):
            await _invest(test_client, token, double, 100_000, investor_details)
            await _rate(test_client, token, double, 4)

        data = (await test_client.get("/api/v1/leaderboard/projects")).json()
        assert [p["project_id"] for p in data] == [double, single]
        assert data[0]["total_ratings"] == 2
        assert data[0]["rating_score"] == data[1]["rating_score"]

    async def test_overfunded_progress_is_capped_in_score(
        self,
        test_client: AsyncClient,
        farmer_token: str,
        business_token: str,
        admin_token: str,
        project_payload: dict,
        investor_details: dict,
    ):
        # Goal lowered below the confirmed funding after the fact
        project_id = await self._project(test_client, farmer_token, project_payload, "Vượt mục tiêu")
        await _invest(test_client, business_token, project_id, 1_000_000, investor_details)
        await _rate(test_client, business_token, project_id, 5)
        await test_client.put(
            f"/api/v1/projects/{project_id}",
            headers={"Authorization": f"Bearer {farmer_token}"},
            json={"funding_goal": 500_000}
        )

        entry = (await test_client.get("/api/v1/leaderboard/projects")).json()[0]
        assert entry["funding_progress"] == 200.0
        assert entry["rating_score"] == 5.0

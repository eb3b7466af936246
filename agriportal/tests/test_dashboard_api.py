"""
Tests for dashboard aggregates
"""
import pytest
from httpx import AsyncClient

from agriportal.services.dashboard_service import trending_score


@pytest.mark.api
@pytest.mark.asyncio
class TestDashboardAPI:

    async def test_user_stats(
        self,
        test_client: AsyncClient,
        farmer_token: str,
        business_token: str,
        project: dict,
        investor_details: dict,
    ):
        farmer = {"Authorization": f"Bearer {farmer_token}"}
        business = {"Authorization": f"Bearer {business_token}"}
        post = (await test_client.post(
            "/api/v1/posts", headers=farmer,
            json={"title": "Mùa khô", "content": "Chuẩn bị trữ nước", "category": "experience"}
        )).json()
        await test_client.post(f"/api/v1/posts/{post['id']}/like", headers=business)
        await test_client.post(
            f"/api/v1/projects/{project['id']}/investments",
            headers=business,
            json={**investor_details, "amount": 150_000}
        )

        farmer_stats = (await test_client.get("/api/v1/dashboard/stats", headers=farmer)).json()
        assert farmer_stats["posts_count"] == 1
        assert farmer_stats["likes_received"] == 1
        assert farmer_stats["projects_count"] == 1
        assert farmer_stats["unread_notifications"] == 2
        assert farmer_stats["points"] == 13

        business_stats = (await test_client.get("/api/v1/dashboard/stats", headers=business)).json()
        assert business_stats["investments_count"] == 1
        assert business_stats["total_invested"] == 150_000

    async def test_recent_activities(
        self,
        test_client: AsyncClient,
        business_token: str,
        project: dict,
        investor_details: dict,
    ):
        headers = {"Authorization": f"Bearer {business_token}"}
        await test_client.post(
            "/api/v1/products", headers=headers,
            json={"name": "Dừa xiêm", "description": "Dừa Bến Tre", "price": 15_000, "category": "fruit",
                  "contact": "0912345678"}
        )
        await test_client.post(
            f"/api/v1/projects/{project['id']}/investments",
            headers=headers,
            json={**investor_details, "amount": 20_000}
        )

        activities = (await test_client.get("/api/v1/dashboard/activities", headers=headers)).json()
        assert [a["type"] for a in activities] == ["PROJECT_INVESTED", "PRODUCT_CREATED"]
        assert activities[0]["description"] == "20.000 ₫"
        assert activities[1]["description"] == "Dừa xiêm - 15.000 ₫"

        limited = (await test_client.get("/api/v1/dashboard/activities", headers=headers, params={"limit": 1})).json()
        assert len(limited) == 1

    async def test_trending_posts(self, test_client: AsyncClient, farmer_token: str, business_token: str):
        farmer = {"Authorization": f"Bearer {farmer_token}"}
        quiet = (await test_client.post(
            "/api/v1/posts", headers=farmer, json={"title": "Ít người xem", "content": "...", "category": "experience"}
        )).json()
        popular = (await test_client.post(
            "/api/v1/posts", headers=farmer, json={"title": "Nổi bật", "content": "...", "category": "experience"}
        )).json()
        await test_client.post(
            f"/api/v1/posts/{popular['id']}/like", headers={"Authorization": f"Bearer {business_token}"}
        )
        for _ in range(3):
            await test_client.post(f"/api/v1/posts/{quiet['id']}/view")

        trending = (await test_client.get("/api/v1/dashboard/trending-posts")).json()
        assert [p["id"] for p in trending] == [popular["id"], quiet["id"]]
        assert trending[0]["trending_score"] == 3.0
        assert trending[1]["trending_score"] == 0.3

    async def test_active_projects_exclude_fully_funded(
        self,
        test_client: AsyncClient,
        business_token: str,
        project: dict,
        investor_details: dict,
    ):
        active = (await test_client.get("/api/v1/dashboard/active-projects")).json()
        assert [p["id"] for p in active] == [project["id"]]

        await test_client.post(
            f"/api/v1/projects/{project['id']}/investments",
            headers={"Authorization": f"Bearer {business_token}"},
            json={**investor_details, "amount": project["funding_goal"]}
        )
        assert (await test_client.get("/api/v1/dashboard/active-projects")).json() == []

    async def test_recent_products(self, test_client: AsyncClient, farmer_token: str):
        headers = {"Authorization": f"Bearer {farmer_token}"}
        for name in ("Một", "Hai", "Ba", "Bốn", "Năm"):
            await test_client.post(
                "/api/v1/products", headers=headers,
                json={"name": name, "description": "-", "price": 1000, "category": "rice", "contact": "0912345678"}
            )
        recent = (await test_client.get("/api/v1/dashboard/recent-products")).json()
        assert [p["name"] for p in recent] == ["Năm", "Bốn", "Ba", "Hai"]

    @pytest.mark.unit
    async def test_trending_score(self):
        assert trending_score(likes=2, comments=1, views=15) == 9.5

"""
Tests for the admin audit trail
"""
import pytest
from httpx import AsyncClient


@pytest.mark.api
@pytest.mark.asyncio
class TestAuditLogsAPI:

    async def test_admin_only(self, test_client: AsyncClient, farmer_token: str):
        response = await test_client.get("/api/v1/audit-logs", headers={"Authorization": f"Bearer {farmer_token}"})
        assert response.status_code == 403

    async def test_project_and_investment_actions_are_logged(
        self,
        test_client: AsyncClient,
        admin_token: str,
        business_token: str,
        project: dict,
        investor_details: dict,
    ):
        await test_client.post(
            f"/api/v1/projects/{project['id']}/investments",
            headers={"Authorization": f"Bearer {business_token}"},
            json={**investor_details, "amount": 5000}
        )
        headers = {"Authorization": f"Bearer {admin_token}"}

        everything = (await test_client.get("/api/v1/audit-logs", headers=headers)).json()
        assert everything["total"] == 2
        assert [(i["entity"], i["action"]) for i in everything["items"]] == [
            ("investment", "create"), ("project", "create"),
        ]
        assert everything["items"][0]["details"]["amount"] == 5000

        projects = (await test_client.get("/api/v1/audit-logs", headers=headers, params={"entity": "project"})).json()
        assert projects["total"] == 1
        assert projects["items"][0]["entity_id"] == str(project["id"])
        assert projects["items"][0]["details"]["title"] == project["title"]

        by_id = (await test_client.get(
            "/api/v1/audit-logs", headers=headers, params={"entity": "project", "entity_id": "999"}
        )).json()
        assert by_id == {"items": [], "total": 0}

    @pytest.mark.edge_case
    async def test_unknown_entity_rejected(self, test_client: AsyncClient, admin_token: str):
        response = await test_client.get(
            "/api/v1/audit-logs",
            headers={"Authorization": f"Bearer {admin_token}"},
            params={"entity": "transaction"}
        )
        assert response.status_code == 422

    async def test_account_deletion_keeps_trail(
        self,
        test_client: AsyncClient,
        admin_token: str,
        farmer_token: str,
        farmer_user,
        project: dict,
    ):
        farmer_id = farmer_user.id
        response = await test_client.delete(
            "/api/v1/settings/account", headers={"Authorization": f"Bearer {farmer_token}"}
        )
        assert response.status_code == 204

        logs = (await test_client.get(
            "/api/v1/audit-logs", headers={"Authorization": f"Bearer {admin_token}"}
        )).json()
        account, created = logs["items"]
        assert (account["entity"], account["action"], account["user_id"]) == ("account", "delete", None)
        assert account["entity_id"] == str(farmer_id)
        assert account["details"] == {"username": "nongdan"}
        # The project row is gone but its creation entry stays, detached from the user
        assert (created["entity"], created["user_id"]) == ("project", None)

"""
Tests for role-gated navigation
"""
import pytest
from httpx import AsyncClient

from agriportal.portal.navigation import (
    ALL_PAGES,
    NavigationState,
    Page,
    Role,
    allowed_pages,
    home_page,
    is_allowed,
)

BUSINESS_PAGES = {
    "invest", "profile", "settings", "create-project", "edit-project", "products", "business-dashboard",
}


@pytest.mark.unit
class TestNavigationRules:

    def test_business_allow_list(self):
        assert {p.value for p in allowed_pages(Role.BUSINESS)} == BUSINESS_PAGES

    def test_farmer_reaches_every_page(self):
        assert set(allowed_pages("farmer")) == set(ALL_PAGES)

    @pytest.mark.parametrize("page", ["dashboard", "salinity", "prophet", "posts", "admin", "analytics"])
    def test_business_blocked(self, page):
        assert not is_allowed("business", page)

    @pytest.mark.edge_case
    def test_unknown_role_navigates_as_farmer(self):
        assert is_allowed(None, "admin")
        assert is_allowed("investor", "salinity")
        assert home_page("whatever") == Page.DASHBOARD

    @pytest.mark.edge_case
    def test_unknown_page(self):
        assert not is_allowed("business", "secret-page")
        assert is_allowed("farmer", "secret-page")


@pytest.mark.unit
class TestNavigationState:

    def test_navigate_calls_scroll_hook(self):
        scrolled = []
        state = NavigationState(role="farmer", on_scroll_top=lambda: scrolled.append(True))
        assert state.navigate(Page.SALINITY)
        assert state.current_page == "salinity"
        assert scrolled == [True]

    def test_blocked_navigation_is_silent_noop(self):
        scrolled = []
        state = NavigationState(role="business", current_page="invest", on_scroll_top=lambda: scrolled.append(True))
        assert state.navigate("dashboard") is False
        assert state.current_page == "invest"
        assert scrolled == []

    def test_role_change_redirects_once(self):
        state = NavigationState(current_page="salinity")
        assert state.set_role("business") is True
        assert state.current_page == "business-dashboard"
        assert state.redirect_count == 1

        # Already on an allowed page, the guard is a no-op
        assert state.enforce() is False
        assert state.redirect_count == 1

    def test_farmer_is_never_redirected(self):
        state = NavigationState(current_page="admin")
        assert state.set_role("farmer") is False
        assert state.current_page == "admin"

    def test_restored_page_is_guarded(self):
        state = NavigationState(role="business", current_page="invest")
        assert state.set_page("analytics") is True
        assert state.current_page == "business-dashboard"

    def test_product_and_project_shortcuts(self):
        state = NavigationState(role="business", current_page="invest")
        assert state.navigate_to_product(7)
        assert (state.current_page, state.selected_product_id) == ("products", 7)
        assert state.edit_project(3)
        assert (state.current_page, state.editing_project_id) == ("edit-project", 3)

    def test_reset(self):
        state = NavigationState(role="business", current_page="products", selected_product_id=1)
        state.reset()
        assert state.role is None
        assert state.current_page == "dashboard"
        assert state.selected_product_id is None


@pytest.mark.api
@pytest.mark.asyncio
class TestNavigationAPI:

    async def test_navigation_info(self, test_client: AsyncClient, business_token: str, farmer_token: str):
        business = await test_client.get("/api/v1/navigation", headers={"Authorization": f"Bearer {business_token}"})
        assert business.json()["home_page"] == "business-dashboard"
        assert set(business.json()["allowed_pages"]) == BUSINESS_PAGES

        farmer = await test_client.get("/api/v1/navigation", headers={"Authorization": f"Bearer {farmer_token}"})
        assert farmer.json()["role"] == "farmer"
        assert len(farmer.json()["allowed_pages"]) == len(ALL_PAGES)

    async def test_resolve(self, test_client: AsyncClient, business_token: str):
        headers = {"Authorization": f"Bearer {business_token}"}
        blocked = await test_client.post(
            "/api/v1/navigation/resolve", headers=headers,
            json={"current_page": "invest", "target_page": "salinity"}
        )
        assert blocked.json() == {"page": "invest", "changed": False}

        allowed = await test_client.post(
            "/api/v1/navigation/resolve", headers=headers,
            json={"current_page": "invest", "target_page": "products"}
        )
        assert allowed.json() == {"page": "products", "changed": True}

        redirected = await test_client.post(
            "/api/v1/navigation/resolve", headers=headers,
            json={"current_page": "dashboard", "target_page": "admin"}
        )
        assert redirected.json() == {"page": "business-dashboard", "changed": True}

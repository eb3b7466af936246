"""
Tests for salinity forecasts and crop recommendations
"""
from datetime import date

import pytest
from httpx import AsyncClient

from agriportal.core.seed import PROVINCE_PEAK_SALINITY, build_salinity_rows, monthly_salinity, seed_salinity
from agriportal.services.salinity_service import get_recommendations, get_salinity_level


@pytest.fixture
async def seeded(test_db):
    return await seed_salinity(test_db)


@pytest.mark.api
@pytest.mark.asyncio
class TestSalinityAPI:

    async def test_seed_runs_once(self, test_db, seeded):
        assert seeded == len(PROVINCE_PEAK_SALINITY) * 3 * 12
        assert await seed_salinity(test_db) == 0

    async def test_average(self, test_client: AsyncClient, seeded):
        response = await test_client.get("/api/v1/salinity/average", params={"province": "bến tre", "year": 2025})
        data = response.json()
        assert data["count"] == 12
        expected = sum(monthly_salinity(PROVINCE_PEAK_SALINITY["Bến Tre"], m) for m in range(1, 13)) / 12
        assert data["average"] == round(expected, 2)

    async def test_average_without_data(self, test_client: AsyncClient, seeded):
        response = await test_client.get("/api/v1/salinity/average", params={"province": "Hà Nội", "year": 2025})
        assert response.json() == {"province": "Hà Nội", "year": 2025, "average": None, "count": 0}

    async def test_series_range(self, test_client: AsyncClient, seeded):
        response = await test_client.get(
            "/api/v1/salinity/series",
            params={"province": "Cà Mau", "start": "2026-01-01", "end": "2026-03-31"}
        )
        data = response.json()
        assert [p["forecast_date"] for p in data] == ["2026-01-15", "2026-02-15", "2026-03-15"]
        assert all(p["is_forecast"] for p in data)
        assert data[2]["salinity"] == PROVINCE_PEAK_SALINITY["Cà Mau"]

    async def test_affected_areas(self, test_client: AsyncClient, seeded):
        areas = (await test_client.get("/api/v1/salinity/affected-areas")).json()
        assert len(areas) == len(PROVINCE_PEAK_SALINITY)
        assert {a["forecast_date"] for a in areas} == {"2026-12-15"}
        by_province = {a["province"]: a for a in areas}
        assert by_province["An Giang"]["level"] == "safe"

    async def test_recommendations(self, test_client: AsyncClient):
        response = await test_client.get("/api/v1/salinity/recommendations", params={"salinity": 3.2})
        data = response.json()
        assert data["level"] == "warning"
        assert data["label"] == "Chịu Mặn Trung Bình"

    async def test_my_province(self, test_client: AsyncClient, farmer_token: str):
        response = await test_client.get(
            "/api/v1/salinity/my-province", headers={"Authorization": f"Bearer {farmer_token}"}
        )
        assert response.json() == {"province": "Bến Tre"}

    async def test_config(self, test_client: AsyncClient):
        response = await test_client.get("/api/v1/salinity/config")
        assert response.json()["default_province"] == "An Giang"


@pytest.mark.unit
class TestSalinityRules:

    @pytest.mark.parametrize("salinity,level", [(0, "safe"), (0.99, "safe"), (1, "warning"), (3.99, "warning"), (4, "danger")])
    def test_levels(self, salinity, level):
        assert get_salinity_level(salinity) == level

    @pytest.mark.parametrize("salinity,label", [
        (0.5, "Vùng Ngọt Hóa"),
        (1.0, "Vùng Ngọt Hóa"),
        (2.5, "Chịu Mặn Nhẹ"),
        (4.0, "Chịu Mặn Trung Bình"),
        (4.1, "Vùng Mặn Cao"),
    ])
    def test_crop_tiers(self, salinity, label):
        assert get_recommendations(salinity).label == label

    def test_seed_rows_mark_forecasts(self):
        rows = build_salinity_rows()
        assert all(r.is_forecast == (r.forecast_date >= date(2026, 1, 1)) for r in rows)

    def test_curve_peaks_in_march(self):
        values = [monthly_salinity(10.0, m) for m in range(1, 13)]
        assert max(values) == values[2] == 10.0
        assert min(values) == values[8] == 1.5

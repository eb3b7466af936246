"""
Tests for the investment, rating and project forms
"""
import asyncio

import pytest

from agriportal.portal.api_client import ServiceResult
from agriportal.portal.forms import (
    FormOutcome,
    FormStatus,
    InvestmentForm,
    ProjectDraft,
    ProjectForm,
    RatingForm,
)
from agriportal.portal.navigation import NavigationState, Page
from agriportal.services.storage_service import UploadedImage


class FakeClient:
    """Records calls and answers with a preset ServiceResult"""

    def __init__(self, result: ServiceResult | None = None, upload_result: ServiceResult | None = None):
        self.result = result or ServiceResult(data={"id": 1})
        self.upload_result = upload_result or ServiceResult(data={"id": 1, "image_url": "/uploads/x.png"})
        self.calls = []
        self.gate: asyncio.Event | None = None

    async def _answer(self, name, *args):
        self.calls.append((name, *args))
        if self.gate is not None:
            await self.gate.wait()
        return self.result

    async def invest(self, project_id, payload):
        return await self._answer("invest", project_id, payload)

    async def rate_project(self, project_id, rating, review=None):
        return await self._answer("rate_project", project_id, rating, review)

    async def create_project(self, data):
        return await self._answer("create_project", data)

    async def upload_project_image(self, project_id, content, content_type, filename="image"):
        self.calls.append(("upload_project_image", project_id, content_type))
        return self.upload_result


class FakeSleep:
    def __init__(self):
        self.delays = []

    async def __call__(self, delay):
        self.delays.append(delay)


PROJECT = {"id": 3, "funding_goal": 1_000_000, "current_funding": 400_000}


def _investment_form(client, project=PROJECT, **fields) -> InvestmentForm:
    form = InvestmentForm(client, project)
    form.amount = 100_000
    form.investor_name = "Công ty Xanh"
    form.investor_email = "dautu@example.com"
    form.agree_terms = True
    for key, value in fields.items():
        setattr(form, key, value)
    return form


@pytest.mark.unit
@pytest.mark.asyncio
class TestInvestmentForm:

    @pytest.mark.parametrize("fields,message", [
        ({"amount": None}, "Vui lòng nhập số tiền đầu tư"),
        ({"amount": ""}, "Vui lòng nhập số tiền đầu tư"),
        ({"amount": 0}, "Vui lòng nhập số tiền đầu tư"),
        ({"amount": -5}, "Vui lòng nhập số tiền đầu tư"),
        ({"amount": "abc"}, "Vui lòng nhập số tiền đầu tư"),
        ({"amount": "1.5"}, "Vui lòng nhập số tiền đầu tư"),
        ({"amount": "12,34"}, "Vui lòng nhập số tiền đầu tư"),
        ({"amount": 2.7}, "Vui lòng nhập số tiền đầu tư"),
        ({"investor_name": " "}, "Vui lòng điền đầy đủ thông tin"),
        ({"investor_email": ""}, "Vui lòng điền đầy đủ thông tin"),
        ({"agree_terms": False}, "Vui lòng đồng ý với điều khoản"),
        ({"amount": 600_001}, "Số tiền đầu tư vượt quá số tiền còn thiếu (600.000 VNĐ)"),
    ])
    async def test_rejections_never_call_service(self, fields, message):
        client = FakeClient()
        outcome = await _investment_form(client, **fields).submit()
        assert outcome.status == FormStatus.INVALID
        assert outcome.error == message
        assert client.calls == []

    async def test_first_failing_rule_wins(self):
        client = FakeClient()
        outcome = await _investment_form(client, amount=0, investor_name="", agree_terms=False).submit()
        assert outcome.error == "Vui lòng nhập số tiền đầu tư"

    async def test_fully_funded(self):
        funded = {"id": 3, "funding_goal": 1_000_000, "current_funding": 1_000_000}
        outcome = await _investment_form(FakeClient(), project=funded).submit()
        assert outcome.error == "Dự án đã hoàn thành gọi vốn 100%. Không thể đầu tư thêm."

    async def test_exact_remaining_is_accepted(self):
        client = FakeClient()
        outcome = await _investment_form(client, amount="600.000").submit()
        assert outcome.status == FormStatus.SUCCESS
        assert outcome.success_delay == 2.0
        assert outcome.redirect_page is None
        name, project_id, payload = client.calls[0]
        assert (name, project_id, payload["amount"]) == ("invest", 3, 600_000)

    @pytest.mark.parametrize("amount,expected", [
        ("1.250", 1_250),
        ("250,000", 250_000),
        (" 75000 ", 75_000),
        (50_000.0, 50_000),
    ])
    async def test_whole_amounts_accepted(self, amount, expected):
        client = FakeClient()
        outcome = await _investment_form(client, amount=amount).submit()
        assert outcome.status == FormStatus.SUCCESS
        assert client.calls[0][2]["amount"] == expected

    async def test_service_error_shown_verbatim(self):
        client = FakeClient(ServiceResult(error="Dự án không còn nhận đầu tư"))
        outcome = await _investment_form(client).submit()
        assert outcome.status == FormStatus.FAILED
        assert outcome.error == "Dự án không còn nhận đầu tư"

    async def test_unexpected_exception(self):
        client = FakeClient()

        async def boom(*args):
            raise RuntimeError("socket closed")

        client.invest = boom
        form = _investment_form(client)
        outcome = await form.submit()
        assert outcome.status == FormStatus.FAILED
        assert outcome.error == "Đã xảy ra lỗi không mong muốn"
        assert form.submitting is False

    async def test_duplicate_submit_blocked(self):
        client = FakeClient()
        client.gate = asyncio.Event()
        form = _investment_form(client)

        first = asyncio.create_task(form.submit())
        await asyncio.sleep(0)
        assert form.submitting is True
        second = await form.submit()
        assert second.status == FormStatus.SUBMITTING

        client.gate.set()
        assert (await first).status == FormStatus.SUCCESS
        assert len(client.calls) == 1

    async def test_finish_waits_and_stays(self):
        sleep = FakeSleep()
        navigation = NavigationState(role="business", current_page="invest")
        outcome = await _investment_form(FakeClient()).submit()
        assert await outcome.finish(navigation, sleep=sleep) is False
        assert sleep.delays == [2.0]
        assert navigation.current_page == "invest"


@pytest.mark.unit
@pytest.mark.asyncio
class TestRatingForm:

    @pytest.mark.parametrize("rating", [0, 6, 3.5, "4", None, True])
    async def test_invalid_rating(self, rating):
        client = FakeClient()
        form = RatingForm(client, project_id=3)
        form.rating = rating
        outcome = await form.submit()
        assert outcome.error == "Vui lòng chọn số sao từ 1 đến 5"
        assert client.calls == []

    async def test_submit(self):
        client = FakeClient(ServiceResult(data={"id": 1, "rating": 4}))
        form = RatingForm(client, project_id=3)
        form.rating = 4
        form.review = "  Tốt  "
        outcome = await form.submit()
        assert outcome.ok
        assert outcome.success_delay == 0
        assert client.calls == [("rate_project", 3, 4, "Tốt")]

    async def test_fallback_message(self):
        form = RatingForm(FakeClient(ServiceResult(error="")), project_id=3)
        form.rating = 5
        outcome = await form.submit()
        assert outcome.error == "Không thể gửi đánh giá"


def _draft(**fields) -> ProjectDraft:
    values = dict(
        title="Lúa tôm",
        description="Mô hình lúa tôm",
        area="Cà Mau",
        funding_goal=500_000,
        farmers_impacted=12,
    )
    values.update(fields)
    return ProjectDraft(**values)


@pytest.mark.unit
@pytest.mark.asyncio
class TestProjectForm:

    @pytest.mark.parametrize("fields,message", [
        ({"title": ""}, "Vui lòng điền đầy đủ thông tin bắt buộc"),
        ({"area": "  "}, "Vui lòng điền đầy đủ thông tin bắt buộc"),
        ({"funding_goal": None}, "Vui lòng điền đầy đủ thông tin bắt buộc"),
        ({"farmers_impacted": None}, "Vui lòng điền đầy đủ thông tin bắt buộc"),
        ({"funding_goal": 0}, "Mục tiêu vốn phải lớn hơn 0"),
        ({"farmers_impacted": -1}, "Số nông dân hưởng lợi phải lớn hơn 0"),
        ({"funding_goal": "2.5"}, "Vui lòng điền đầy đủ thông tin bắt buộc"),
        ({"farmers_impacted": 12.5}, "Vui lòng điền đầy đủ thông tin bắt buộc"),
        ({"image": UploadedImage(b"0" * (5 * 1024 * 1024 + 1), "image/png")},
         "Kích thước ảnh không được vượt quá 5MB"),
        ({"image": UploadedImage(b"%PDF", "application/pdf")}, "Chỉ chấp nhận ảnh JPG, PNG, WEBP hoặc GIF"),
    ])
    async def test_rejections(self, fields, message):
        client = FakeClient()
        outcome = await ProjectForm(client, _draft(**fields)).submit()
        assert outcome.status == FormStatus.INVALID
        assert outcome.error == message
        assert client.calls == []

    async def test_success_redirects_to_invest_after_delay(self):
        client = FakeClient(ServiceResult(data={"id": 9}))
        outcome = await ProjectForm(client, _draft()).submit()
        assert outcome.ok
        assert outcome.success_delay == 2.0
        assert outcome.redirect_page == Page.INVEST

        sleep = FakeSleep()
        navigation = NavigationState(role="farmer", current_page="create-project")
        assert await outcome.finish(navigation, sleep=sleep) is True
        assert sleep.delays == [2.0]
        assert navigation.current_page == "invest"

    async def test_image_uploaded_after_create(self):
        client = FakeClient(ServiceResult(data={"id": 9}))
        image = UploadedImage(b"\x89PNG", "image/png", "field.png")
        outcome = await ProjectForm(client, _draft(image=image)).submit()
        assert outcome.ok
        assert [c[0] for c in client.calls] == ["create_project", "upload_project_image"]
        assert client.calls[1][1] == 9

    async def test_failed_image_upload_keeps_project(self):
        client = FakeClient(ServiceResult(data={"id": 9}), upload_result=ServiceResult(error="Tệp ảnh rỗng"))
        form = ProjectForm(client, _draft(image=UploadedImage(b"x", "image/png")))
        outcome = await form.submit()
        assert outcome.ok
        assert outcome.result == {"id": 9}
        assert form.image_error == "Tệp ảnh rỗng"

    async def test_service_error(self):
        client = FakeClient(ServiceResult(error="Ngày kết thúc phải sau ngày bắt đầu"))
        outcome = await ProjectForm(client, _draft()).submit()
        assert outcome.status == FormStatus.FAILED
        assert outcome.error == "Ngày kết thúc phải sau ngày bắt đầu"

    async def test_failed_outcome_does_not_navigate(self):
        sleep = FakeSleep()
        navigation = NavigationState(role="farmer", current_page="create-project")
        outcome = FormOutcome(FormStatus.FAILED, error="x", redirect_page=Page.INVEST, success_delay=2.0)
        assert await outcome.finish(navigation, sleep=sleep) is False
        assert sleep.delays == []
        assert navigation.current_page == "create-project"

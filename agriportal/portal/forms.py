"""
Submission forms for investing, rating and creating projects.

Each form validates locally first and stops at the first failing rule, so a
rejected submission yields exactly one message and never reaches the API.
Errors coming back from the API are shown verbatim.
"""
import asyncio
import logging
import re
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any, Awaitable, Callable, Optional

from agriportal.core.config import settings
from agriportal.portal.api_client import PortalClient, ServiceResult, UNEXPECTED_ERROR
from agriportal.portal.navigation import NavigationState, Page
from agriportal.services.investment_service import FULLY_FUNDED_MESSAGE, exceeds_remaining_message
from agriportal.services.project_service import calculate_progress
from agriportal.services.storage_service import ALLOWED_IMAGE_TYPES, UploadedImage

logger = logging.getLogger(__name__)

AMOUNT_REQUIRED = "Vui lòng nhập số tiền đầu tư"
CONTACT_REQUIRED = "Vui lòng điền đầy đủ thông tin"
TERMS_REQUIRED = "Vui lòng đồng ý với điều khoản"
RATING_OUT_OF_RANGE = "Vui lòng chọn số sao từ 1 đến 5"
PROJECT_FIELDS_REQUIRED = "Vui lòng điền đầy đủ thông tin bắt buộc"
GOAL_NOT_POSITIVE = "Mục tiêu vốn phải lớn hơn 0"
FARMERS_NOT_POSITIVE = "Số nông dân hưởng lợi phải lớn hơn 0"
IMAGE_TYPE_NOT_ALLOWED = "Chỉ chấp nhận ảnh JPG, PNG, WEBP hoặc GIF"

# Plain digits, or digits grouped in thousands by "." or ","
_WHOLE_AMOUNT = re.compile(r"^(\d+|\d{1,3}([.,]\d{3})+)$")


def image_too_large_message() -> str:
    return f"Kích thước ảnh không được vượt quá {settings.MAX_IMAGE_SIZE_MB}MB"


class FormStatus(str, Enum):
    IDLE = "idle"
    INVALID = "invalid"
    SUBMITTING = "submitting"
    SUCCESS = "success"
    FAILED = "failed"


@dataclass
class FormOutcome:
    status: FormStatus
    error: Optional[str] = None
    success_delay: float = 0.0
    redirect_page: Optional[Page] = None
    result: Any = None

    @property
    def ok(self) -> bool:
        return self.status == FormStatus.SUCCESS

    async def finish(
        self,
        navigation: NavigationState | None = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> bool:
        """Keep the success panel up for success_delay, then follow the redirect if any.

        Returns True when a navigation happened.
        """
        if not self.ok:
            return False
        if self.success_delay > 0:
            await sleep(self.success_delay)
        if self.redirect_page is None or navigation is None:
            return False
        return navigation.navigate(self.redirect_page)


def _to_int(value: Any) -> Optional[int]:
    """Whole VND amount from form input, or None when it is not a whole number.

    Strings may group thousands with "." or "," ("1.250.000"); anything with a
    fractional part ("1.5", 2.7) is rejected rather than rounded.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    if isinstance(value, str):
        value = value.strip()
        if not _WHOLE_AMOUNT.match(value):
            return None
        return int(value.replace(".", "").replace(",", ""))
    return None


def _blank(value: Optional[str]) -> bool:
    return value is None or not str(value).strip()


class _Form:
    fallback_error = UNEXPECTED_ERROR
    success_delay = 0.0
    redirect_page: Optional[Page] = None

    def __init__(self, client: PortalClient):
        self.client = client
        self.submitting = False

    def validate(self) -> Optional[str]:
        raise NotImplementedError

    async def _send(self) -> ServiceResult:
        raise NotImplementedError

    async def submit(self) -> FormOutcome:
        if self.submitting:
            return FormOutcome(FormStatus.SUBMITTING)
        error = self.validate()
        if error:
            return FormOutcome(FormStatus.INVALID, error=error)

        self.submitting = True
        try:
            result = await self._send()
        except Exception:
            logger.exception("%s submission failed", type(self).__name__)
            return FormOutcome(FormStatus.FAILED, error=UNEXPECTED_ERROR)
        finally:
            self.submitting = False

        if not result.ok:
            return FormOutcome(FormStatus.FAILED, error=result.error or self.fallback_error)
        return FormOutcome(
            FormStatus.SUCCESS,
            success_delay=self.success_delay,
            redirect_page=self.redirect_page,
            result=result.data,
        )


class InvestmentForm(_Form):
    fallback_error = "Không thể thực hiện đầu tư"

    def __init__(self, client: PortalClient, project: dict[str, Any]):
        super().__init__(client)
        self.project = project
        self.amount: Any = None
        self.investor_name = ""
        self.investor_email = ""
        self.investor_phone = ""
        self.message = ""
        self.agree_terms = False
        self.success_delay = settings.INVESTMENT_SUCCESS_DELAY_SECONDS

    @property
    def remaining(self) -> int:
        return max(0, (self.project.get("funding_goal") or 0) - (self.project.get("current_funding") or 0))

    def validate(self) -> Optional[str]:
        amount = _to_int(self.amount)
        if amount is None or amount <= 0:
            return AMOUNT_REQUIRED
        if _blank(self.investor_name) or _blank(self.investor_email):
            return CONTACT_REQUIRED
        if not self.agree_terms:
            return TERMS_REQUIRED
        progress = calculate_progress(self.project.get("current_funding"), self.project.get("funding_goal"))
        if progress >= 100:
            return FULLY_FUNDED_MESSAGE
        if amount > self.remaining:
            return exceeds_remaining_message(self.remaining)
        return None

    async def _send(self) -> ServiceResult:
        payload = {
            "amount": _to_int(self.amount),
            "investor_name": self.investor_name.strip(),
            "investor_email": self.investor_email.strip(),
            "investor_phone": self.investor_phone.strip() or None,
            "message": self.message.strip() or None,
        }
        return await self.client.invest(self.project["id"], payload)


class RatingForm(_Form):
    fallback_error = "Không thể gửi đánh giá"

    def __init__(self, client: PortalClient, project_id: int):
        super().__init__(client)
        self.project_id = project_id
        self.rating: Any = 0
        self.review = ""

    def validate(self) -> Optional[str]:
        if isinstance(self.rating, bool) or not isinstance(self.rating, int):
            return RATING_OUT_OF_RANGE
        if not 1 <= self.rating <= 5:
            return RATING_OUT_OF_RANGE
        return None

    async def _send(self) -> ServiceResult:
        return await self.client.rate_project(self.project_id, self.rating, self.review.strip() or None)


@dataclass
class ProjectDraft:
    title: str = ""
    description: str = ""
    area: str = ""
    funding_goal: Any = None
    farmers_impacted: Any = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    image: Optional[UploadedImage] = field(default=None, repr=False)

    def payload(self) -> dict[str, Any]:
        return {
            "title": self.title.strip(),
            "description": self.description.strip(),
            "area": self.area.strip(),
            "funding_goal": _to_int(self.funding_goal),
            "farmers_impacted": _to_int(self.farmers_impacted),
            "start_date": self.start_date.isoformat() if self.start_date else None,
            "end_date": self.end_date.isoformat() if self.end_date else None,
        }


class ProjectForm(_Form):
    fallback_error = "Không thể tạo dự án"
    redirect_page = Page.INVEST

    def __init__(self, client: PortalClient, draft: ProjectDraft | None = None):
        super().__init__(client)
        self.draft = draft or ProjectDraft()
        self.success_delay = settings.PROJECT_SUCCESS_DELAY_SECONDS
        # Set when the project was created but its image could not be stored
        self.image_error: Optional[str] = None

    def validate(self) -> Optional[str]:
        d = self.draft
        goal = _to_int(d.funding_goal)
        farmers = _to_int(d.farmers_impacted)
        if _blank(d.title) or _blank(d.description) or _blank(d.area) or goal is None or farmers is None:
            return PROJECT_FIELDS_REQUIRED
        if goal <= 0:
            return GOAL_NOT_POSITIVE
        if farmers <= 0:
            return FARMERS_NOT_POSITIVE
        if d.image is not None:
            if d.image.size > settings.max_image_size_bytes:
                return image_too_large_message()
            if d.image.content_type not in ALLOWED_IMAGE_TYPES:
                return IMAGE_TYPE_NOT_ALLOWED
        return None

    async def _send(self) -> ServiceResult:
        self.image_error = None
        created = await self.client.create_project(self.draft.payload())
        if not created.ok or self.draft.image is None:
            return created

        image = self.draft.image
        uploaded = await self.client.upload_project_image(
            created.data["id"], image.content, image.content_type, image.filename or "image"
        )
        if not uploaded.ok:
            logger.warning("Project %s created without image: %s", created.data["id"], uploaded.error)
            self.image_error = uploaded.error
            return created
        return uploaded

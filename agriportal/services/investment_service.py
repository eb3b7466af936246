import logging
from typing import Any
from sqlalchemy.ext.asyncio import AsyncSession

from agriportal.core.config import settings
from agriportal.core.formatting import format_vnd
from agriportal.models.investment import ProjectInvestment, InvestmentStatus
from agriportal.models.notification import NotificationType
from agriportal.models.project import InvestmentProject, ProjectStatus
from agriportal.models.user import User
from agriportal.repositories.investment_repository import InvestmentRepository
from agriportal.repositories.project_repository import ProjectRepository
from agriportal.services.audit_service import AuditService
from agriportal.services.notification_service import NotificationService
from agriportal.services.project_service import calculate_progress, remaining_funding
from agriportal.services.realtime import NotificationBroker

logger = logging.getLogger(__name__)

FULLY_FUNDED_MESSAGE = "Dự án đã hoàn thành gọi vốn 100%. Không thể đầu tư thêm."


def exceeds_remaining_message(remaining: int) -> str:
    return f"Số tiền đầu tư vượt quá số tiền còn thiếu ({format_vnd(remaining)} VNĐ)"


# (from, to) pairs that may be applied to an existing investment
ALLOWED_TRANSITIONS = {
    (InvestmentStatus.PENDING.value, InvestmentStatus.CONFIRMED.value),
    (InvestmentStatus.PENDING.value, InvestmentStatus.CANCELLED.value),
}


class InvestmentService:
    def __init__(self, db: AsyncSession, broker: NotificationBroker | None = None):
        self.db = db
        self.investments = InvestmentRepository(db)
        self.projects = ProjectRepository(db)
        self.notifications = NotificationService(db, broker)

    @staticmethod
    def check_investable(project: InvestmentProject, amount: int) -> None:
        if project.status != ProjectStatus.ACTIVE.value:
            raise ValueError("Dự án không còn nhận đầu tư")
        if calculate_progress(project.current_funding, project.funding_goal) >= 100:
            raise ValueError(FULLY_FUNDED_MESSAGE)
        remaining = remaining_funding(project)
        if amount > remaining:
            raise ValueError(exceeds_remaining_message(remaining))

    async def invest(self, investor: User, project_id: int, data: dict[str, Any]) -> ProjectInvestment:
        project = await self.projects.get_for_update(project_id)
        if project is None:
            raise LookupError("Không tìm thấy dự án")

        amount = data.get("amount")
        if not amount or amount <= 0:
            raise ValueError("Vui lòng nhập số tiền đầu tư")
        name = (data.get("investor_name") or "").strip()
        email = (data.get("investor_email") or "").strip()
        if not name or not email:
            raise ValueError("Vui lòng điền đầy đủ thông tin")
        self.check_investable(project, amount)

        status = InvestmentStatus.CONFIRMED.value if settings.AUTO_CONFIRM_INVESTMENTS else InvestmentStatus.PENDING.value
        investment = ProjectInvestment(
            project_id=project.id,
            investor_id=investor.id,
            amount=amount,
            investor_name=name,
            investor_email=email,
            investor_phone=data.get("investor_phone") or None,
            message=data.get("message") or None,
            status=status,
        )
        if status == InvestmentStatus.CONFIRMED.value:
            project.current_funding = (project.current_funding or 0) + amount
        investment = await self.investments.create(investment)

        await AuditService(self.db).log_investment_action(
            investor.id, "create", investment.id,
            {"project_id": project.id, "amount": amount, "status": status},
        )
        logger.info("Investment %s of %s VND into project %s (%s)", investment.id, amount, project.id, status)

        if project.user_id != investor.id:
            await self.notifications.create_notification(
                user_id=project.user_id,
                type=NotificationType.PROJECT_INVESTMENT,
                title="Có nhà đầu tư mới",
                message=f"{name} đã đầu tư {format_vnd(amount)} VNĐ vào dự án \"{project.title}\"",
                link=f"/invest?project={project.id}",
                actor_id=investor.id,
            )
        return investment

    async def list_project_investments(self, project_id: int) -> list[ProjectInvestment]:
        return await self.investments.list_by_project(project_id)

    async def list_user_investments(self, user_id: int) -> list[ProjectInvestment]:
        return await self.investments.list_by_investor(user_id)

    async def update_status(self, actor: User, investment_id: int, status: str) -> ProjectInvestment | None:
        investment = await self.investments.get_by_id(investment_id)
        if investment is None:
            return None
        project = await self.projects.get_for_update(investment.project_id)
        # Another confirm may have committed while waiting for the lock
        await self.db.refresh(investment)
        if project.user_id != actor.id and not actor.is_admin:
            raise PermissionError("Bạn không có quyền cập nhật khoản đầu tư này")
        previous = investment.status
        if previous == status:
            return investment
        if (previous, status) not in ALLOWED_TRANSITIONS:
            raise ValueError(f"Không thể chuyển trạng thái từ {previous} sang {status}")

        if status == InvestmentStatus.CONFIRMED.value:
            remaining = remaining_funding(project)
            if investment.amount > remaining:
                raise ValueError(exceeds_remaining_message(remaining))
            project.current_funding = (project.current_funding or 0) + investment.amount
        investment.status = status
        investment = await self.investments.update(investment)
        await AuditService(self.db).log_investment_action(
            actor.id, "status", investment.id, {"from": previous, "to": status}
        )
        logger.info("Investment %s status %s -> %s", investment.id, previous, status)
        return investment

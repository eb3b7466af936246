import logging
from datetime import datetime
from typing import Any
from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from agriportal.models.user import User
from agriportal.models.user_settings import UserSettings
from agriportal.models.post import Post, PostLike, PostComment
from agriportal.models.product import Product
from agriportal.models.notification import Notification
from agriportal.models.project import InvestmentProject
from agriportal.models.investment import ProjectInvestment
from agriportal.models.rating import ProjectRating
from agriportal.models.audit_log import AuditLog
from agriportal.repositories.settings_repository import SettingsRepository
from agriportal.services.audit_service import AuditService
from agriportal.repositories.user_repository import UserRepository
from agriportal.repositories.post_repository import PostRepository
from agriportal.repositories.product_repository import ProductRepository
from agriportal.repositories.investment_repository import InvestmentRepository
from agriportal.repositories.follow_repository import FollowRepository
from agriportal.repositories.report_repository import ReportRepository
from agriportal.schemas.user import UserOut
from agriportal.schemas.settings import SettingsOut
from agriportal.schemas.product import ProductOut
from agriportal.schemas.investment import InvestmentOut

logger = logging.getLogger(__name__)


class SettingsService:
    def __init__(self, db: AsyncSession):
        self.db = db
        self.settings = SettingsRepository(db)

    async def get_user_settings(self, user: User) -> UserSettings:
        user_settings = await self.settings.get_by_user(user.id)
        if user_settings is None:
            user_settings = await self.settings.create(UserSettings(user_id=user.id))
        return user_settings

    async def update_user_settings(self, user: User, **updates: Any) -> UserSettings:
        user_settings = await self.get_user_settings(user)
        for key, value in updates.items():
            if value is not None and hasattr(user_settings, key):
                setattr(user_settings, key, value)
        return await self.settings.update(user_settings)

    async def export_user_data(self, user: User) -> dict[str, Any]:
        user_settings = await self.get_user_settings(user)
        posts = await PostRepository(self.db).list(user_id=user.id, limit=None)
        comments = await PostRepository(self.db).list_comments_by_user(user.id)
        products = await ProductRepository(self.db).list(user_id=user.id, limit=None)
        investments = await InvestmentRepository(self.db).list_by_investor(user.id)
        return {
            "profile": UserOut.model_validate(user).model_dump(mode="json"),
            "settings": SettingsOut.model_validate(user_settings).model_dump(mode="json"),
            "posts": [
                {
                    "id": p.id,
                    "title": p.title,
                    "content": p.content,
                    "category": p.category,
                    "created_at": p.created_at.isoformat(),
                }
                for p in posts
            ],
            "comments": [
                {"id": c.id, "post_id": c.post_id, "content": c.content, "created_at": c.created_at.isoformat()}
                for c in comments
            ],
            "products": [ProductOut.model_validate(p).model_dump(mode="json") for p in products],
            "investments": [InvestmentOut.model_validate(i).model_dump(mode="json") for i in investments],
            "export_date": datetime.utcnow(),
        }

    async def delete_user_account(self, user: User) -> None:
        """Delete the user and everything they own"""
        user_id, username = user.id, user.username
        project_ids = list((await self.db.execute(
            select(InvestmentProject.id).where(InvestmentProject.user_id == user_id)
        )).scalars().all())
        post_ids = list((await self.db.execute(
            select(Post.id).where(Post.user_id == user_id)
        )).scalars().all())

        if project_ids:
            await self.db.execute(delete(ProjectInvestment).where(ProjectInvestment.project_id.in_(project_ids)))
            await self.db.execute(delete(ProjectRating).where(ProjectRating.project_id.in_(project_ids)))
        if post_ids:
            await self.db.execute(delete(PostLike).where(PostLike.post_id.in_(post_ids)))
            await self.db.execute(delete(PostComment).where(PostComment.post_id.in_(post_ids)))

        for model in (ProjectInvestment, ProjectRating, PostLike, PostComment, Notification, Product, UserSettings):
            column = model.investor_id if model is ProjectInvestment else model.user_id
            await self.db.execute(delete(model).where(column == user_id))
        await self.db.execute(update(Notification).where(Notification.actor_id == user_id).values(actor_id=None))
        await self.db.execute(update(AuditLog).where(AuditLog.user_id == user_id).values(user_id=None))
        await FollowRepository(self.db).delete_for_user(user_id, project_ids)
        reports = ReportRepository(self.db)
        await reports.detach_user(user_id)
        await reports.delete_about_user(user_id)
        await self.db.execute(delete(Post).where(Post.user_id == user_id))
        await self.db.execute(delete(InvestmentProject).where(InvestmentProject.user_id == user_id))
        await UserRepository(self.db).delete(user)
        await AuditService(self.db).log_account_deleted(user_id, username)
        logger.info("Deleted account %s", user_id)

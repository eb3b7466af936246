"""
Administrator moderation: banning accounts, changing roles, reviewing and
deleting community content, and working through user reports.

Every action is written to the audit trail, and owners are told through a
SYSTEM notification when their content is rejected or removed.
"""
import logging
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from agriportal.models.moderation import ContentReport, ModerationStatus, ReportStatus
from agriportal.models.notification import NotificationType
from agriportal.models.user import User
from agriportal.repositories.moderation_repository import ModerationRepository
from agriportal.repositories.post_repository import PostRepository
from agriportal.repositories.product_repository import ProductRepository
from agriportal.repositories.report_repository import ReportRepository
from agriportal.repositories.user_repository import UserRepository
from agriportal.schemas.admin import AdminStats, AdminUserOut, ModerationItem, ReportOut
from agriportal.services.audit_service import AuditEntity, AuditService
from agriportal.services.contributor_service import ContributorService
from agriportal.services.notification_service import NotificationService
from agriportal.services.realtime import NotificationBroker
from agriportal.services.storage_service import StorageService

logger = logging.getLogger(__name__)

USER_NOT_FOUND = "Không tìm thấy người dùng"
CONTENT_NOT_FOUND = "Không tìm thấy nội dung"
REPORT_NOT_FOUND = "Không tìm thấy báo cáo"

CONTENT_LABELS = {
    "post": "Bài viết",
    "product": "Sản phẩm",
    "project": "Dự án",
    "comment": "Bình luận",
}

AUDIT_ENTITIES = {
    "post": AuditEntity.POST,
    "product": AuditEntity.PRODUCT,
    "project": AuditEntity.PROJECT,
    "comment": AuditEntity.COMMENT,
}


def content_title(content_type: str, item) -> str:
    if content_type == "product":
        return item.name
    return item.title


class AdminService:
    def __init__(self, db: AsyncSession, broker: NotificationBroker | None = None):
        self.db = db
        self.users = UserRepository(db)
        self.content = ModerationRepository(db)
        self.reports = ReportRepository(db)
        self.notifications = NotificationService(db, broker)
        self.audit = AuditService(db)

    async def get_stats(self) -> AdminStats:
        total_users = await self.users.count()
        banned_users = await self.users.count(banned=True)
        pending = ModerationStatus.PENDING.value
        return AdminStats(
            total_users=total_users,
            active_users=total_users - banned_users,
            banned_users=banned_users,
            total_posts=await self.content.count("post"),
            pending_posts=await self.content.count("post", pending),
            total_products=await self.content.count("product"),
            pending_products=await self.content.count("product", pending),
            total_projects=await self.content.count("project"),
            pending_projects=await self.content.count("project", pending),
            total_reports=await self.reports.count(),
            pending_reports=await self.reports.count(ReportStatus.PENDING.value),
            total_investments=await self.content.count_investments(),
            total_comments=await self.content.count_comments(),
        )

    # Users

    async def _admin_views(self, users: list[User]) -> list[AdminUserOut]:
        user_ids = {u.id for u in users}
        points = await ContributorService(self.db).points_by_user(user_ids) if user_ids else {}
        posts = await PostRepository(self.db).count_by_user(user_ids) if user_ids else {}
        products = await ProductRepository(self.db).count_by_user(user_ids) if user_ids else {}
        return [
            AdminUserOut.model_validate(u).model_copy(update={
                "points": points.get(u.id, 0),
                "total_posts": posts.get(u.id, 0),
                "total_products": products.get(u.id, 0),
            })
            for u in users
        ]

    async def list_users(
        self,
        search: str | None = None,
        role: str | None = None,
        status: str | None = None,
        limit: int = 20,
        offset: int = 0,
    ) -> list[AdminUserOut]:
        users = await self.users.search(search=search, role=role, status=status, limit=limit, offset=offset)
        return await self._admin_views(users)

    async def _target(self, user_id: int) -> User:
        user = await self.users.get_by_id(user_id)
        if user is None:
            raise LookupError(USER_NOT_FOUND)
        return user

    async def set_ban(self, admin: User, user_id: int, banned: bool, reason: str | None = None) -> AdminUserOut:
        if admin.id == user_id:
            raise ValueError("Không thể khóa tài khoản của chính mình")
        user = await self._target(user_id)
        user.is_banned = banned
        user.banned_reason = ((reason or "").strip() or None) if banned else None
        user = await self.users.update(user)
        action = "ban" if banned else "unban"
        await self.audit.record(admin.id, action, AuditEntity.ACCOUNT, user.id, {"reason": user.banned_reason})
        logger.info("Admin %s: %s user %s", admin.id, action, user.id)
        return (await self._admin_views([user]))[0]

    async def change_role(self, admin: User, user_id: int, new_role: str, make_admin: bool = False) -> AdminUserOut:
        if admin.id == user_id:
            raise ValueError("Không thể thay đổi quyền của chính mình")
        user = await self._target(user_id)
        previous = {"role": user.role, "is_admin": user.is_admin}
        user.role = new_role
        user.is_admin = make_admin
        user = await self.users.update(user)
        await self.audit.record(
            admin.id, "change_role", AuditEntity.ACCOUNT, user.id,
            {"from": previous, "to": {"role": user.role, "is_admin": user.is_admin}},
        )
        return (await self._admin_views([user]))[0]

    # Content

    async def _moderation_items(self, content_type: str, items: list) -> list[ModerationItem]:
        usernames = await self.users.usernames_by_ids({i.user_id for i in items})
        return [
            ModerationItem(
                id=i.id,
                content_type=content_type,
                title=content_title(content_type, i),
                user_id=i.user_id,
                author_username=usernames.get(i.user_id),
                moderation_status=i.moderation_status,
                moderation_note=i.moderation_note,
                moderated_at=i.moderated_at,
                created_at=i.created_at,
            )
            for i in items
        ]

    async def list_content(
        self, content_type: str, status: str | None = None, limit: int = 20, offset: int = 0
    ) -> list[ModerationItem]:
        items = await self.content.list(content_type, status=status, limit=limit, offset=offset)
        return await self._moderation_items(content_type, items)

    async def moderate(
        self, admin: User, content_type: str, content_id: int, new_status: str, note: str | None = None
    ) -> ModerationItem:
        item = await self.content.get(content_type, content_id)
        if item is None:
            raise LookupError(CONTENT_NOT_FOUND)
        item.moderation_status = new_status
        item.moderation_note = (note or "").strip() or None
        item.moderated_at = datetime.utcnow()
        item = await self.content.update(item)
        await self.audit.record(
            admin.id, f"moderate_{new_status}", AUDIT_ENTITIES[content_type], item.id, {"note": item.moderation_note}
        )
        if new_status == ModerationStatus.REJECTED.value and item.user_id != admin.id:
            label = CONTENT_LABELS[content_type]
            message = f"{label} \"{content_title(content_type, item)}\" đã bị từ chối"
            if item.moderation_note:
                message += f". Lý do: {item.moderation_note}"
            await self.notifications.create_notification(
                user_id=item.user_id,
                type=NotificationType.SYSTEM,
                title="Nội dung bị từ chối",
                message=message,
                actor_id=admin.id,
            )
        return (await self._moderation_items(content_type, [item]))[0]

    async def delete_content(self, admin: User, content_type: str, content_id: int, reason: str) -> None:
        reason = (reason or "").strip()
        if not reason:
            raise ValueError("Vui lòng nhập lý do xóa")
        if content_type == "comment":
            posts = PostRepository(self.db)
            comment = await posts.get_comment(content_id)
            if comment is None:
                raise LookupError(CONTENT_NOT_FOUND)
            owner_id, title = comment.user_id, comment.content[:50]
            await posts.delete_comment(comment)
        else:
            item = await self.content.get(content_type, content_id)
            if item is None:
                raise LookupError(CONTENT_NOT_FOUND)
            owner_id, title, image_url = item.user_id, content_title(content_type, item), item.image_url
            # Likes, comments, investments, ratings and follows go through the ORM cascade
            await self.content.delete(item)
            StorageService().delete_file(image_url)

        await self.audit.record(
            admin.id, "admin_delete", AUDIT_ENTITIES[content_type], content_id,
            {"reason": reason, "owner_id": owner_id, "title": title},
        )
        logger.info("Admin %s deleted %s %s", admin.id, content_type, content_id)
        if owner_id != admin.id:
            await self.notifications.create_notification(
                user_id=owner_id,
                type=NotificationType.SYSTEM,
                title="Nội dung đã bị xóa",
                message=f"{CONTENT_LABELS[content_type]} \"{title}\" đã bị quản trị viên xóa. Lý do: {reason}",
                actor_id=admin.id,
            )

    # Reports

    async def _report_views(self, reports: list[ContentReport]) -> list[ReportOut]:
        ids = {r.reporter_id for r in reports} | {r.resolved_by for r in reports}
        usernames = await self.users.usernames_by_ids({i for i in ids if i is not None})
        return [
            ReportOut.model_validate(r).model_copy(update={
                "reporter_username": usernames.get(r.reporter_id),
                "resolver_username": usernames.get(r.resolved_by),
            })
            for r in reports
        ]

    async def _content_exists(self, content_type: str, content_id: int) -> bool:
        if content_type == "user":
            return await self.users.get_by_id(content_id) is not None
        if content_type == "comment":
            return await PostRepository(self.db).get_comment(content_id) is not None
        return await self.content.get(content_type, content_id) is not None

    async def create_report(
        self, reporter: User, content_type: str, content_id: int, reason: str, description: str | None = None
    ) -> ReportOut:
        if not await self._content_exists(content_type, content_id):
            raise LookupError(CONTENT_NOT_FOUND)
        report = await self.reports.create(ContentReport(
            reporter_id=reporter.id,
            content_type=content_type,
            content_id=content_id,
            reason=reason,
            description=(description or "").strip() or None,
            status=ReportStatus.PENDING.value,
        ))
        logger.info("User %s reported %s %s (%s)", reporter.id, content_type, content_id, reason)
        return (await self._report_views([report]))[0]

    async def list_reports(self, status: str | None = None, limit: int = 20, offset: int = 0) -> list[ReportOut]:
        return await self._report_views(await self.reports.list(status=status, limit=limit, offset=offset))

    async def resolve_report(
        self, admin: User, report_id: int, new_status: str, resolution_note: str | None = None
    ) -> ReportOut:
        report = await self.reports.get_by_id(report_id)
        if report is None:
            raise LookupError(REPORT_NOT_FOUND)
        if report.status in (ReportStatus.RESOLVED.value, ReportStatus.DISMISSED.value):
            raise ValueError("Báo cáo đã được xử lý")
        report.status = new_status
        report.resolved_by = admin.id
        report.resolved_at = datetime.utcnow()
        report.resolution_note = (resolution_note or "").strip() or None
        report = await self.reports.update(report)
        await self.audit.record(admin.id, new_status, AuditEntity.REPORT, report.id, {"note": report.resolution_note})
        return (await self._report_views([report]))[0]

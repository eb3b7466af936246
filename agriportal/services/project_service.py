import logging
from typing import Any
from sqlalchemy.ext.asyncio import AsyncSession

from agriportal.models.project import InvestmentProject, ProjectStatus
from agriportal.models.user import User
from agriportal.repositories.project_repository import ProjectRepository
from agriportal.repositories.user_repository import UserRepository
from agriportal.schemas.project import ProjectWithStats, ProjectOut
from agriportal.services.audit_service import AuditService
from agriportal.services.storage_service import StorageService, UploadedImage

logger = logging.getLogger(__name__)

PROJECT_STATUSES = {s.value for s in ProjectStatus}
UPDATABLE_FIELDS = (
    "title", "description", "funding_goal", "farmers_impacted",
    "area", "image_url", "start_date", "end_date",
)


def calculate_progress(current_funding: int | None, funding_goal: int | None) -> float:
    """Funding progress in percent, two decimals, not clamped"""
    if not funding_goal or funding_goal <= 0:
        return 0.0
    return round((current_funding or 0) / funding_goal * 100, 2)


def remaining_funding(project: InvestmentProject) -> int:
    return max((project.funding_goal or 0) - (project.current_funding or 0), 0)


def _require_text(value: str | None) -> bool:
    return bool(value and value.strip())


def validate_project_fields(data: dict[str, Any], creating: bool) -> None:
    if creating and not all(_require_text(data.get(f)) for f in ("title", "description", "area")):
        raise ValueError("Vui lòng điền đầy đủ thông tin bắt buộc")
    if not creating:
        for field in ("title", "description", "area"):
            if field in data and data[field] is not None and not _require_text(data[field]):
                raise ValueError("Vui lòng điền đầy đủ thông tin bắt buộc")
    if (creating or data.get("funding_goal") is not None) and (data.get("funding_goal") or 0) <= 0:
        raise ValueError("Mục tiêu vốn phải lớn hơn 0")
    if (creating or data.get("farmers_impacted") is not None) and (data.get("farmers_impacted") or 0) <= 0:
        raise ValueError("Số nông dân hưởng lợi phải lớn hơn 0")
    start, end = data.get("start_date"), data.get("end_date")
    if start and end and end < start:
        raise ValueError("Ngày kết thúc phải sau ngày bắt đầu")


class ProjectService:
    def __init__(self, db: AsyncSession, storage: StorageService | None = None):
        self.db = db
        self.projects = ProjectRepository(db)
        self.storage = storage or StorageService()

    async def with_stats(self, projects: list[InvestmentProject]) -> list[ProjectWithStats]:
        usernames = await UserRepository(self.db).usernames_by_ids({p.user_id for p in projects})
        investors = await self.projects.investor_counts([p.id for p in projects])
        return [
            ProjectWithStats(
                **ProjectOut.model_validate(p).model_dump(),
                creator_username=usernames.get(p.user_id),
                investors_count=investors.get(p.id, 0),
                progress_percentage=calculate_progress(p.current_funding, p.funding_goal),
            )
            for p in projects
        ]

    async def _one_with_stats(self, project: InvestmentProject) -> ProjectWithStats:
        return (await self.with_stats([project]))[0]

    async def create_project(
        self,
        owner: User,
        data: dict[str, Any],
        image: UploadedImage | None = None,
    ) -> ProjectWithStats:
        validate_project_fields(data, creating=True)
        image_url = data.get("image_url")
        if image is not None:
            image_url = self.storage.upload_image(bucket="project-images", user_id=owner.id, image=image)

        project = InvestmentProject(
            user_id=owner.id,
            title=data["title"].strip(),
            description=data["description"].strip(),
            funding_goal=data["funding_goal"],
            current_funding=0,
            farmers_impacted=data["farmers_impacted"],
            area=data["area"].strip(),
            status=ProjectStatus.ACTIVE.value,
            image_url=image_url,
            start_date=data.get("start_date"),
            end_date=data.get("end_date"),
        )
        project = await self.projects.create(project)
        await AuditService(self.db).log_project_action(
            owner.id, "create", project.id, {"title": project.title, "funding_goal": project.funding_goal}
        )
        logger.info("Project %s created by user %s", project.id, owner.id)
        return await self._one_with_stats(project)

    async def list_projects(self, status: str | None = None, limit: int = 20, offset: int = 0) -> list[ProjectWithStats]:
        projects = await self.projects.list(status=status, limit=limit, offset=offset, exclude_rejected=True)
        return await self.with_stats(projects)

    async def get_project(self, project_id: int) -> ProjectWithStats | None:
        project = await self.projects.get_by_id(project_id)
        if project is None:
            return None
        return await self._one_with_stats(project)

    async def list_user_projects(self, user_id: int) -> list[ProjectWithStats]:
        return await self.with_stats(await self.projects.list_by_owner(user_id))

    async def _get_or_none(self, project_id: int) -> InvestmentProject | None:
        return await self.projects.get_by_id(project_id)

    async def update_project(self, actor: User, project_id: int, updates: dict[str, Any]) -> ProjectWithStats | None:
        project = await self._get_or_none(project_id)
        if project is None:
            return None
        new_status = updates.pop("status", None)
        field_updates = {k: v for k, v in updates.items() if k in UPDATABLE_FIELDS and v is not None}
        if field_updates and project.user_id != actor.id:
            raise PermissionError("Bạn không có quyền chỉnh sửa dự án này")
        if new_status is not None and project.user_id != actor.id and not actor.is_admin:
            raise PermissionError("Bạn không có quyền chỉnh sửa dự án này")

        merged = {"start_date": project.start_date, "end_date": project.end_date, **field_updates}
        validate_project_fields(merged, creating=False)
        for key, value in field_updates.items():
            setattr(project, key, value.strip() if isinstance(value, str) else value)
        if new_status is not None:
            self._apply_status(project, new_status)
        project = await self.projects.update(project)
        await AuditService(self.db).log_project_action(
            actor.id, "update", project.id, {"fields": sorted(field_updates), "status": new_status}
        )
        return await self._one_with_stats(project)

    @staticmethod
    def _apply_status(project: InvestmentProject, status: str) -> None:
        if status not in PROJECT_STATUSES:
            raise ValueError("Trạng thái dự án không hợp lệ")
        project.status = status

    async def set_status(self, actor: User, project_id: int, status: str) -> ProjectWithStats | None:
        """Owner or administrator sets the lifecycle status explicitly"""
        project = await self._get_or_none(project_id)
        if project is None:
            return None
        if project.user_id != actor.id and not actor.is_admin:
            raise PermissionError("Bạn không có quyền thay đổi trạng thái dự án này")
        previous = project.status
        self._apply_status(project, status)
        project = await self.projects.update(project)
        await AuditService(self.db).log_project_action(
            actor.id, "status", project.id, {"from": previous, "to": status}
        )
        logger.info("Project %s status %s -> %s by user %s", project.id, previous, status, actor.id)
        return await self._one_with_stats(project)

    async def set_image(self, owner: User, project_id: int, image: UploadedImage) -> ProjectWithStats | None:
        project = await self._get_or_none(project_id)
        if project is None:
            return None
        if project.user_id != owner.id:
            raise PermissionError("Bạn không có quyền chỉnh sửa dự án này")
        old_url = project.image_url
        project.image_url = self.storage.upload_image(bucket="project-images", user_id=owner.id, image=image)
        project = await self.projects.update(project)
        self.storage.delete_file(old_url)
        return await self._one_with_stats(project)

    async def delete_project(self, owner: User, project_id: int) -> bool:
        project = await self._get_or_none(project_id)
        if project is None:
            return False
        if project.user_id != owner.id:
            raise PermissionError("Bạn không có quyền xóa dự án này")
        image_url, title = project.image_url, project.title
        # Investments and ratings go with the project through the ORM cascade
        await self.projects.delete(project)
        self.storage.delete_file(image_url)
        await AuditService(self.db).log_project_action(owner.id, "delete", project_id, {"title": title})
        logger.info("Project %s deleted by user %s", project_id, owner.id)
        return True

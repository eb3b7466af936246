import logging
from sqlalchemy.ext.asyncio import AsyncSession

from agriportal.core.config import settings
from agriportal.models.notification import NotificationType
from agriportal.models.rating import ProjectRating
from agriportal.models.user import User
from agriportal.repositories.investment_repository import InvestmentRepository
from agriportal.repositories.project_repository import ProjectRepository
from agriportal.repositories.rating_repository import RatingRepository
from agriportal.repositories.user_repository import UserRepository
from agriportal.schemas.rating import LeaderboardProject, RatingOut, RatingStats
from agriportal.services.audit_service import AuditService
from agriportal.services.notification_service import NotificationService
from agriportal.services.project_service import calculate_progress
from agriportal.services.realtime import NotificationBroker

logger = logging.getLogger(__name__)


def rating_score(avg_rating: float, funding_progress: float) -> float:
    """
    Composite 0-5 ranking value.

    The average rating and the funding progress (clamped to 100% and rescaled
    to 0-5) are blended with the configured weights.
    """
    funding_component = min(max(funding_progress, 0.0), 100.0) / 20
    score = settings.LEADERBOARD_RATING_WEIGHT * avg_rating + settings.LEADERBOARD_FUNDING_WEIGHT * funding_component
    return round(score, 2)


class RatingService:
    def __init__(self, db: AsyncSession, broker: NotificationBroker | None = None):
        self.db = db
        self.ratings = RatingRepository(db)
        self.projects = ProjectRepository(db)
        self.notifications = NotificationService(db, broker)

    async def can_user_rate(self, user: User, project_id: int) -> bool:
        return await InvestmentRepository(self.db).has_confirmed(user.id, project_id)

    async def get_user_rating(self, user: User, project_id: int) -> ProjectRating | None:
        return await self.ratings.get_for_user(project_id, user.id)

    async def rate_project(self, user: User, project_id: int, rating: int, review: str | None = None) -> ProjectRating:
        if not isinstance(rating, int) or isinstance(rating, bool) or not 1 <= rating <= 5:
            raise ValueError("Vui lòng chọn số sao từ 1 đến 5")
        project = await self.projects.get_by_id(project_id)
        if project is None:
            raise LookupError("Không tìm thấy dự án")
        if not await self.can_user_rate(user, project_id):
            raise ValueError("Bạn cần đầu tư vào dự án trước khi đánh giá")

        review = review.strip() if review and review.strip() else None
        existing = await self.ratings.get_for_user(project_id, user.id)
        if existing is not None:
            existing.rating = rating
            existing.review = review
            saved = await self.ratings.update(existing)
            action = "update"
        else:
            saved = await self.ratings.create(
                ProjectRating(project_id=project_id, user_id=user.id, rating=rating, review=review)
            )
            action = "create"
            if project.user_id != user.id:
                await self.notifications.create_notification(
                    user_id=project.user_id,
                    type=NotificationType.PROJECT_RATING,
                    title="Dự án nhận được đánh giá mới",
                    message=f"{user.username} đã đánh giá {rating} sao cho dự án \"{project.title}\"",
                    link=f"/invest?project={project.id}",
                    actor_id=user.id,
                )
        await AuditService(self.db).log_rating_action(
            user.id, action, saved.id, {"project_id": project_id, "rating": rating}
        )
        logger.info("User %s %sd rating %s for project %s", user.id, action, rating, project_id)
        return saved

    async def get_project_rating_stats(self, project_id: int) -> RatingStats:
        avg, total = await self.ratings.stats(project_id)
        if total == 0:
            return RatingStats()
        project = await self.projects.get_by_id(project_id)
        progress = calculate_progress(project.current_funding, project.funding_goal) if project else 0.0
        return RatingStats(
            avg_rating=round(avg, 2),
            total_ratings=total,
            rating_score=rating_score(avg, progress),
        )

    async def get_project_ratings(self, project_id: int, page: int = 1, page_size: int = 10) -> tuple[list[RatingOut], int]:
        page = max(page, 1)
        page_size = max(min(page_size, 100), 1)
        ratings = await self.ratings.list_by_project(project_id, limit=page_size, offset=(page - 1) * page_size)
        total = await self.ratings.count_by_project(project_id)
        usernames = await UserRepository(self.db).usernames_by_ids({r.user_id for r in ratings})
        items = [
            RatingOut.model_validate(r).model_copy(update={"username": usernames.get(r.user_id)})
            for r in ratings
        ]
        return items, total

    async def get_project_leaderboard(self, limit: int | None = None) -> list[LeaderboardProject]:
        """Rated projects ordered by score, then number of ratings, then id"""
        limit = limit or settings.LEADERBOARD_DEFAULT_LIMIT
        aggregates = await self.ratings.aggregate_by_project()
        if not aggregates:
            return []
        projects = {p.id: p for p in await self.projects.list_by_ids({a[0] for a in aggregates})}
        usernames = await UserRepository(self.db).usernames_by_ids({p.user_id for p in projects.values()})

        entries = []
        for project_id, avg, total in aggregates:
            project = projects.get(project_id)
            if project is None:
                continue
            progress = calculate_progress(project.current_funding, project.funding_goal)
            entries.append(
                LeaderboardProject(
                    project_id=project.id,
                    title=project.title,
                    creator_username=usernames.get(project.user_id),
                    avg_rating=round(avg, 2),
                    total_ratings=total,
                    funding_progress=progress,
                    rating_score=rating_score(avg, progress),
                )
            )
        entries.sort(key=lambda e: (-e.rating_score, -e.total_ratings, e.project_id))
        return entries[:limit]

from datetime import datetime, timedelta
from sqlalchemy.ext.asyncio import AsyncSession

from agriportal.models.investment import InvestmentStatus
from agriportal.models.project import ProjectStatus
from agriportal.models.user import User
from agriportal.repositories.investment_repository import InvestmentRepository
from agriportal.repositories.notification_repository import NotificationRepository
from agriportal.repositories.post_repository import PostRepository
from agriportal.repositories.product_repository import ProductRepository
from agriportal.repositories.project_repository import ProjectRepository
from agriportal.schemas.dashboard import Activity, UserStats
from agriportal.schemas.post import TrendingPost
from agriportal.schemas.product import ProductOut
from agriportal.schemas.project import ProjectWithStats
from agriportal.services.contributor_service import ContributorService
from agriportal.services.post_service import PostService
from agriportal.core.formatting import format_price
from agriportal.services.product_service import ProductService
from agriportal.services.project_service import ProjectService

TRENDING_WINDOW_DAYS = 7
# How many of each kind of event are pulled before merging
ACTIVITY_SOURCE_LIMITS = {"posts": 3, "products": 3, "comments": 3, "likes": 2, "investments": 3}


def trending_score(likes: int, comments: int, views: int) -> float:
    return round(likes * 3 + comments * 2 + views * 0.1, 2)


class DashboardService:
    def __init__(self, db: AsyncSession):
        self.db = db
        self.posts = PostRepository(db)

    async def get_user_stats(self, user: User) -> UserStats:
        posts = await self.posts.count_by_user()
        products = await ProductRepository(self.db).count_by_user()
        comments = await self.posts.comment_count_by_user()
        likes = await self.posts.likes_received_by_user()
        investments = [
            i for i in await InvestmentRepository(self.db).list_by_investor(user.id)
            if i.status == InvestmentStatus.CONFIRMED.value
        ]
        return UserStats(
            posts_count=posts.get(user.id, 0),
            products_count=products.get(user.id, 0),
            comments_count=comments.get(user.id, 0),
            likes_received=likes.get(user.id, 0),
            projects_count=len(await ProjectRepository(self.db).list_by_owner(user.id)),
            investments_count=len(investments),
            total_invested=sum(i.amount for i in investments),
            unread_notifications=await NotificationRepository(self.db).count_unread(user.id),
            points=await ContributorService(self.db).get_user_points(user.id),
        )

    async def get_recent_activities(self, user: User, limit: int = 10) -> list[Activity]:
        activities: list[Activity] = []
        for post in await self.posts.list(user_id=user.id, limit=ACTIVITY_SOURCE_LIMITS["posts"]):
            activities.append(Activity(
                id=f"post-{post.id}", type="POST_CREATED", title="Đăng bài viết mới",
                description=post.title, link=f"/posts/{post.id}", created_at=post.created_at,
            ))
        for product in await ProductRepository(self.db).list(user_id=user.id, limit=ACTIVITY_SOURCE_LIMITS["products"]):
            activities.append(Activity(
                id=f"product-{product.id}", type="PRODUCT_CREATED", title="Đăng sản phẩm mới",
                description=f"{product.name} - {format_price(product.price)}",
                link=f"/products/{product.id}", created_at=product.created_at,
            ))
        for comment in await self.posts.list_comments_by_user(user.id, limit=ACTIVITY_SOURCE_LIMITS["comments"]):
            activities.append(Activity(
                id=f"comment-{comment.id}", type="COMMENT_CREATED", title="Bình luận bài viết",
                description=comment.content[:100], link=f"/posts/{comment.post_id}", created_at=comment.created_at,
            ))
        for like in await self.posts.list_likes_by_user(user.id, limit=ACTIVITY_SOURCE_LIMITS["likes"]):
            post = await self.posts.get_by_id(like.post_id)
            activities.append(Activity(
                id=f"like-{like.id}", type="POST_LIKED", title="Thích bài viết",
                description=post.title if post else "Bài viết", link=f"/posts/{like.post_id}",
                created_at=like.created_at,
            ))
        for investment in await InvestmentRepository(self.db).list_by_investor(
            user.id, limit=ACTIVITY_SOURCE_LIMITS["investments"]
        ):
            activities.append(Activity(
                id=f"investment-{investment.id}", type="PROJECT_INVESTED", title="Đầu tư dự án",
                description=format_price(investment.amount), link=f"/invest?project={investment.project_id}",
                created_at=investment.created_at,
            ))
        activities.sort(key=lambda a: a.created_at, reverse=True)
        return activities[:limit]

    async def get_trending_posts(self, viewer: User | None = None, limit: int = 5) -> list[TrendingPost]:
        since = datetime.utcnow() - timedelta(days=TRENDING_WINDOW_DAYS)
        recent = await self.posts.list(since=since, limit=None, exclude_rejected=True)
        posts = await PostService(self.db).decorate(recent, viewer)
        scored = [
            TrendingPost(
                **p.model_dump(),
                trending_score=trending_score(p.likes_count, p.comments_count, p.views_count),
            )
            for p in posts
        ]
        scored.sort(key=lambda p: (-p.trending_score, -p.id))
        return scored[:limit]

    async def get_recent_products(self, limit: int = 4) -> list[ProductOut]:
        return await ProductService(self.db).list_products(limit=limit)

    async def get_active_projects(self, limit: int = 3) -> list[ProjectWithStats]:
        projects = await ProjectService(self.db).list_projects(status=ProjectStatus.ACTIVE.value, limit=100)
        return [p for p in projects if p.progress_percentage < 100][:limit]

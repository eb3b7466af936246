from sqlalchemy.ext.asyncio import AsyncSession

from agriportal.models.user import User
from agriportal.repositories.post_repository import PostRepository
from agriportal.repositories.product_repository import ProductRepository
from agriportal.repositories.user_repository import UserRepository
from agriportal.schemas.contributor import ContributorOut, UserRank

POINTS_PER_POST = 10
POINTS_PER_PRODUCT = 5
POINTS_PER_COMMENT = 2
POINTS_PER_LIKE_RECEIVED = 3


def contribution_points(posts: int, products: int, comments: int, likes_received: int) -> int:
    return (
        POINTS_PER_POST * posts
        + POINTS_PER_PRODUCT * products
        + POINTS_PER_COMMENT * comments
        + POINTS_PER_LIKE_RECEIVED * likes_received
    )


class ContributorService:
    def __init__(self, db: AsyncSession):
        self.db = db
        self.posts = PostRepository(db)
        self.products = ProductRepository(db)

    async def _counts(self, user_ids: set[int] | None = None) -> dict[str, dict[int, int]]:
        return {
            "posts": await self.posts.count_by_user(user_ids),
            "products": await self.products.count_by_user(user_ids),
            "comments": await self.posts.comment_count_by_user(user_ids),
            "likes": await self.posts.likes_received_by_user(user_ids),
        }

    async def points_by_user(self, user_ids: set[int] | None = None) -> dict[int, int]:
        """Points per user; pass user_ids to aggregate only those users"""
        counts = await self._counts(user_ids)
        user_ids = set().union(*(c.keys() for c in counts.values()))
        return {
            user_id: contribution_points(
                counts["posts"].get(user_id, 0),
                counts["products"].get(user_id, 0),
                counts["comments"].get(user_id, 0),
                counts["likes"].get(user_id, 0),
            )
            for user_id in user_ids
        }

    async def get_user_points(self, user_id: int) -> int:
        return (await self.points_by_user({user_id})).get(user_id, 0)

    async def get_top_contributors(self, limit: int = 10) -> list[ContributorOut]:
        counts = await self._counts()
        points = await self.points_by_user()
        ranked = sorted((uid for uid, p in points.items() if p > 0), key=lambda uid: (-points[uid], uid))[:limit]
        users = {u.id: u for u in await UserRepository(self.db).list()} if ranked else {}
        result = []
        for user_id in ranked:
            user = users.get(user_id)
            if user is None:
                continue
            result.append(
                ContributorOut(
                    user_id=user_id,
                    username=user.username,
                    avatar_url=user.avatar_url,
                    points=points[user_id],
                    posts_count=counts["posts"].get(user_id, 0),
                    products_count=counts["products"].get(user_id, 0),
                    comments_count=counts["comments"].get(user_id, 0),
                    likes_received=counts["likes"].get(user_id, 0),
                )
            )
        return result

    async def get_user_rank(self, user: User) -> UserRank:
        points = await self.points_by_user()
        ranked = sorted((uid for uid, p in points.items() if p > 0), key=lambda uid: (-points[uid], uid))
        rank = ranked.index(user.id) + 1 if user.id in ranked else None
        return UserRank(rank=rank, points=points.get(user.id, 0), total_contributors=len(ranked))

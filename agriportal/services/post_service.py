import logging
from typing import Any
from sqlalchemy.ext.asyncio import AsyncSession

from agriportal.models.notification import NotificationType
from agriportal.models.post import Post, PostLike, PostComment, PostCategory
from agriportal.models.user import User
from agriportal.repositories.post_repository import PostRepository
from agriportal.repositories.user_repository import UserRepository
from agriportal.schemas.post import PostOut, CommentOut
from agriportal.services.contributor_service import ContributorService
from agriportal.services.notification_service import NotificationService
from agriportal.services.realtime import NotificationBroker

logger = logging.getLogger(__name__)

POST_CATEGORIES = {c.value for c in PostCategory}


def build_comment_tree(comments: list[CommentOut]) -> list[CommentOut]:
    """Nest replies under their parent comment; orphans are kept at the top level"""
    by_id = {c.id: c.model_copy(update={"replies": []}) for c in comments}
    roots: list[CommentOut] = []
    for comment in comments:
        node = by_id[comment.id]
        parent = by_id.get(comment.parent_comment_id) if comment.parent_comment_id else None
        if parent is not None:
            parent.replies.append(node)
        else:
            roots.append(node)
    return roots


class PostService:
    def __init__(self, db: AsyncSession, broker: NotificationBroker | None = None):
        self.db = db
        self.posts = PostRepository(db)
        self.notifications = NotificationService(db, broker)

    async def decorate(self, posts: list[Post], viewer: User | None = None) -> list[PostOut]:
        post_ids = [p.id for p in posts]
        likes = await self.posts.like_counts(post_ids)
        comments = await self.posts.comment_counts(post_ids)
        liked = await self.posts.liked_post_ids(viewer.id, post_ids) if viewer else set()
        usernames = await UserRepository(self.db).usernames_by_ids({p.user_id for p in posts})
        authors = {p.user_id for p in posts}
        points = await ContributorService(self.db).points_by_user(authors) if authors else {}
        return [
            PostOut.model_validate(p).model_copy(update={
                "author_username": usernames.get(p.user_id),
                "author_points": points.get(p.user_id, 0),
                "likes_count": likes.get(p.id, 0),
                "comments_count": comments.get(p.id, 0),
                "is_liked": p.id in liked,
            })
            for p in posts
        ]

    async def create_post(self, author: User, data: dict[str, Any]) -> PostOut:
        if data.get("category") not in POST_CATEGORIES:
            raise ValueError("Danh mục bài viết không hợp lệ")
        post = await self.posts.create(Post(user_id=author.id, views_count=0, **data))
        logger.info("Post %s created by user %s", post.id, author.id)
        return (await self.decorate([post], author))[0]

    async def list_posts(
        self,
        viewer: User | None = None,
        category: str | None = None,
        limit: int = 20,
        offset: int = 0,
    ) -> list[PostOut]:
        posts = await self.posts.list(category=category, limit=limit, offset=offset, exclude_rejected=True)
        return await self.decorate(posts, viewer)

    async def get_post(self, post_id: int, viewer: User | None = None) -> PostOut | None:
        post = await self.posts.get_by_id(post_id)
        if post is None:
            return None
        return (await self.decorate([post], viewer))[0]

    async def _owned(self, user: User, post_id: int) -> Post | None:
        post = await self.posts.get_by_id(post_id)
        if post is None:
            return None
        if post.user_id != user.id:
            raise PermissionError("Bạn không có quyền chỉnh sửa bài viết này")
        return post

    async def update_post(self, user: User, post_id: int, updates: dict[str, Any]) -> PostOut | None:
        post = await self._owned(user, post_id)
        if post is None:
            return None
        for key, value in updates.items():
            if value is not None:
                setattr(post, key, value)
        post = await self.posts.update(post)
        return (await self.decorate([post], user))[0]

    async def delete_post(self, user: User, post_id: int) -> bool:
        post = await self._owned(user, post_id)
        if post is None:
            return False
        await self.posts.delete(post)
        logger.info("Post %s deleted by user %s", post_id, user.id)
        return True

    async def track_view(self, post_id: int) -> int | None:
        post = await self.posts.get_by_id(post_id)
        if post is None:
            return None
        post.views_count = (post.views_count or 0) + 1
        post = await self.posts.update(post)
        return post.views_count

    async def like_post(self, user: User, post_id: int) -> tuple[bool, int]:
        post = await self.posts.get_by_id(post_id)
        if post is None:
            raise LookupError("Không tìm thấy bài viết")
        if await self.posts.get_like(post_id, user.id) is None:
            await self.posts.add_like(PostLike(post_id=post_id, user_id=user.id))
            if post.user_id != user.id:
                await self.notifications.create_notification(
                    user_id=post.user_id,
                    type=NotificationType.POST_LIKE,
                    title="Bài viết được thích",
                    message=f"{user.username} đã thích bài viết \"{post.title}\"",
                    link=f"/posts?post={post.id}",
                    actor_id=user.id,
                )
        return True, (await self.posts.like_counts([post_id])).get(post_id, 0)

    async def unlike_post(self, user: User, post_id: int) -> tuple[bool, int]:
        if await self.posts.get_by_id(post_id) is None:
            raise LookupError("Không tìm thấy bài viết")
        like = await self.posts.get_like(post_id, user.id)
        if like is not None:
            await self.posts.remove_like(like)
        return False, (await self.posts.like_counts([post_id])).get(post_id, 0)

    async def get_comments(self, post_id: int) -> list[CommentOut]:
        comments = await self.posts.list_comments(post_id)
        usernames = await UserRepository(self.db).usernames_by_ids({c.user_id for c in comments})
        flat = [
            CommentOut.model_validate(c).model_copy(update={"username": usernames.get(c.user_id), "replies": []})
            for c in comments
        ]
        return build_comment_tree(flat)

    async def add_comment(self, user: User, post_id: int, content: str, parent_comment_id: int | None = None) -> CommentOut:
        post = await self.posts.get_by_id(post_id)
        if post is None:
            raise LookupError("Không tìm thấy bài viết")
        content = (content or "").strip()
        if not content:
            raise ValueError("Nội dung bình luận không được để trống")
        parent = None
        if parent_comment_id is not None:
            parent = await self.posts.get_comment(parent_comment_id)
            if parent is None or parent.post_id != post_id:
                raise ValueError("Bình luận gốc không tồn tại")

        comment = await self.posts.add_comment(
            PostComment(post_id=post_id, user_id=user.id, content=content, parent_comment_id=parent_comment_id)
        )
        if parent is not None and parent.user_id != user.id:
            await self.notifications.create_notification(
                user_id=parent.user_id,
                type=NotificationType.COMMENT_REPLY,
                title="Có người trả lời bình luận của bạn",
                message=f"{user.username}: {content[:100]}",
                link=f"/posts?post={post.id}",
                actor_id=user.id,
            )
        elif parent is None and post.user_id != user.id:
            await self.notifications.create_notification(
                user_id=post.user_id,
                type=NotificationType.POST_COMMENT,
                title="Bình luận mới",
                message=f"{user.username} đã bình luận về \"{post.title}\"",
                link=f"/posts?post={post.id}",
                actor_id=user.id,
            )
        return CommentOut.model_validate(comment).model_copy(update={"username": user.username, "replies": []})

    async def delete_comment(self, user: User, comment_id: int) -> bool:
        comment = await self.posts.get_comment(comment_id)
        if comment is None:
            return False
        if comment.user_id != user.id:
            raise PermissionError("Bạn không có quyền xóa bình luận này")
        await self.posts.delete_comment(comment)
        return True

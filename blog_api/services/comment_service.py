"""
Comment service — comments attached to a Post.

A comment can only be created under a live post, and only its author
may delete it.  Deletion is soft, like posts.
"""
import logging

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import joinedload

from blog_api.auth.policy import ensure_can_mutate
from blog_api.errors import NotFoundError
from blog_api.models import Comment, Post
from blog_api.schemas import CommentCreate

logger = logging.getLogger(__name__)


async def _ensure_post_exists(db: AsyncSession, post_id: int) -> None:
    q = select(Post.id).where(Post.id == post_id, Post.deleted_at.is_(None))
    if (await db.execute(q)).scalar_one_or_none() is None:
        raise NotFoundError("post not found")


async def get_comment(db: AsyncSession, comment_id: int) -> Comment:
    q = (
        select(Comment)
        .where(Comment.id == comment_id, Comment.deleted_at.is_(None))
        .options(joinedload(Comment.author))
        .execution_options(populate_existing=True)
    )
    result = await db.execute(q)
    comment = result.unique().scalar_one_or_none()
    if comment is None:
        raise NotFoundError("comment not found")
    return comment


async def create_comment(
    db: AsyncSession,
    actor_id: int,
    post_id: int,
    data: CommentCreate,
) -> Comment:
    """
    Attach a new comment by *actor_id* to the post identified by *post_id*.

    Raises ``NotFoundError`` when the post does not exist or has been
    deleted.
    """
    await _ensure_post_exists(db, post_id)

    comment = Comment(content=data.content, user_id=actor_id, post_id=post_id)
    db.add(comment)
    await db.flush()

    logger.info(
        "User %d commented on post %d (comment %d)",
        actor_id,
        post_id,
        comment.id,
        extra={"user_id": actor_id},
    )
    return await get_comment(db, comment.id)


async def list_post_comments(
    db: AsyncSession, post_id: int, page: int = 1, page_size: int = 20
) -> tuple[list[Comment], int]:
    """Return one page of a post's live comments, newest first, plus the total."""
    await _ensure_post_exists(db, post_id)

    criteria = (Comment.post_id == post_id, Comment.deleted_at.is_(None))
    count_q = select(func.count()).select_from(Comment).where(*criteria)
    total: int = (await db.execute(count_q)).scalar_one()

    q = (
        select(Comment)
        .where(*criteria)
        .options(joinedload(Comment.author))
        .order_by(Comment.created_at.desc(), Comment.id.desc())
        .offset((page - 1) * page_size)
        .limit(page_size)
    )
    result = await db.execute(q)
    return list(result.unique().scalars().all()), total


async def delete_comment(db: AsyncSession, actor_id: int, comment_id: int) -> None:
    comment = await get_comment(db, comment_id)
    ensure_can_mutate(actor_id, comment, "comment", action="delete")

    comment.soft_delete()
    await db.flush()
    logger.info("User %d deleted comment %d", actor_id, comment_id, extra={"user_id": actor_id})

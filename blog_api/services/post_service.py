"""
Post service — business logic for the Post aggregate.

Design notes
------------
- Every read filters out soft-deleted rows (``deleted_at IS NULL``),
  including the comments eager-loaded into the detail view.
- Eager loading via ``joinedload`` (many-to-one: author) and
  ``selectinload`` (one-to-many: comments) keeps the detail view to a
  fixed number of queries.
- Mutations follow the same order everywhere: load, 404 if missing,
  ownership check (403), apply, flush.
- Service functions flush but do not commit; the transaction boundary
  is owned by the ``get_db`` dependency in the router layer.
"""
import logging

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import joinedload, selectinload

from blog_api.auth.policy import ensure_can_mutate
from blog_api.errors import NotFoundError
from blog_api.models import Comment, Post, utcnow
from blog_api.schemas import PostCreate, PostUpdate

logger = logging.getLogger(__name__)


def _live_posts():
    return select(Post).where(Post.deleted_at.is_(None))


async def _load_post(db: AsyncSession, post_id: int, detail: bool = False) -> Post:
    q = _live_posts().where(Post.id == post_id).options(joinedload(Post.author))
    if detail:
        q = q.options(
            selectinload(Post.comments.and_(Comment.deleted_at.is_(None))).joinedload(
                Comment.author
            )
        )
    # Re-populate instances already in the identity map (e.g. right after a flush).
    q = q.execution_options(populate_existing=True)
    result = await db.execute(q)
    post = result.unique().scalar_one_or_none()
    if post is None:
        raise NotFoundError("post not found")
    return post


async def _paginate(db: AsyncSession, criteria: list, page: int, page_size: int) -> tuple[list[Post], int]:
    count_q = select(func.count()).select_from(Post).where(Post.deleted_at.is_(None), *criteria)
    total: int = (await db.execute(count_q)).scalar_one()

    posts_q = (
        _live_posts()
        .where(*criteria)
        .options(joinedload(Post.author))
        .order_by(Post.created_at.desc(), Post.id.desc())
        .offset((page - 1) * page_size)
        .limit(page_size)
    )
    result = await db.execute(posts_q)
    return list(result.unique().scalars().all()), total


# ---------------------------------------------------------------------------
# Public service functions
# ---------------------------------------------------------------------------

async def create_post(db: AsyncSession, actor_id: int, data: PostCreate) -> Post:
    post = Post(title=data.title, content=data.content, user_id=actor_id)
    db.add(post)
    await db.flush()
    logger.info("User %d created post %d", actor_id, post.id, extra={"user_id": actor_id})
    return await _load_post(db, post.id, detail=True)


async def get_post(db: AsyncSession, post_id: int) -> Post:
    """Return the post with its author and live comments, or raise ``NotFoundError``."""
    return await _load_post(db, post_id, detail=True)


async def list_posts(db: AsyncSession, page: int = 1, page_size: int = 10) -> tuple[list[Post], int]:
    """Return one page of live posts, newest first, plus the total count."""
    return await _paginate(db, [], page, page_size)


async def list_user_posts(
    db: AsyncSession, user_id: int, page: int = 1, page_size: int = 10
) -> tuple[list[Post], int]:
    return await _paginate(db, [Post.user_id == user_id], page, page_size)


async def update_post(db: AsyncSession, actor_id: int, post_id: int, data: PostUpdate) -> Post:
    post = await _load_post(db, post_id)
    ensure_can_mutate(actor_id, post, "post", action="update")

    post.title = data.title
    post.content = data.content
    post.updated_at = utcnow()
    await db.flush()

    logger.info("User %d updated post %d", actor_id, post_id, extra={"user_id": actor_id})
    return await _load_post(db, post_id, detail=True)


async def delete_post(db: AsyncSession, actor_id: int, post_id: int) -> None:
    post = await _load_post(db, post_id)
    ensure_can_mutate(actor_id, post, "post", action="delete")

    post.soft_delete()
    await db.flush()
    logger.info("User %d deleted post %d", actor_id, post_id, extra={"user_id": actor_id})

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from blog_api.auth.dependencies import get_current_user_id
from blog_api.database import get_db
from blog_api.dependencies import PostPagination, ResourceId
from blog_api.schemas import (
    MessageResponse,
    Pagination,
    PostCreate,
    PostDetail,
    PostList,
    PostUpdate,
    PostWritten,
)
from blog_api.services import post_service

router = APIRouter(prefix="/api", tags=["posts"])


@router.get("/posts", response_model=PostList)
async def list_posts(
    pagination: PostPagination = Depends(),
    db: AsyncSession = Depends(get_db),
):
    posts, total = await post_service.list_posts(db, pagination.page, pagination.page_size)
    return {
        "posts": posts,
        "pagination": Pagination.build(total, pagination.page, pagination.page_size),
    }


@router.get("/posts/{post_id}", response_model=PostDetail)
async def get_post(post_id: ResourceId, db: AsyncSession = Depends(get_db)):
    return await post_service.get_post(db, post_id)


@router.get("/users-posts/{user_id}/posts", response_model=PostList)
async def list_user_posts(
    user_id: ResourceId,
    pagination: PostPagination = Depends(),
    db: AsyncSession = Depends(get_db),
):
    posts, total = await post_service.list_user_posts(
        db, user_id, pagination.page, pagination.page_size
    )
    return {
        "posts": posts,
        "pagination": Pagination.build(total, pagination.page, pagination.page_size),
    }


@router.post("/posts", status_code=201, response_model=PostWritten)
async def create_post(
    data: PostCreate,
    actor_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    post = await post_service.create_post(db, actor_id, data)
    return {"message": "post created", "post": post}


@router.put("/posts/{post_id}", response_model=PostWritten)
async def update_post(
    post_id: ResourceId,
    data: PostUpdate,
    actor_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    post = await post_service.update_post(db, actor_id, post_id, data)
    return {"message": "post updated", "post": post}


@router.delete("/posts/{post_id}", response_model=MessageResponse)
async def delete_post(
    post_id: ResourceId,
    actor_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    await post_service.delete_post(db, actor_id, post_id)
    return {"message": "post deleted"}

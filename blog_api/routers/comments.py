from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from blog_api.auth.dependencies import get_current_user_id
from blog_api.database import get_db
from blog_api.dependencies import CommentPagination, ResourceId
from blog_api.schemas import CommentCreate, CommentCreated, CommentList, MessageResponse, Pagination
from blog_api.services import comment_service

router = APIRouter(prefix="/api", tags=["comments"])


@router.get("/posts-comments/{post_id}/comments", response_model=CommentList)
async def list_post_comments(
    post_id: ResourceId,
    pagination: CommentPagination = Depends(),
    db: AsyncSession = Depends(get_db),
):
    comments, total = await comment_service.list_post_comments(
        db, post_id, pagination.page, pagination.page_size
    )
    return {
        "comments": comments,
        "pagination": Pagination.build(total, pagination.page, pagination.page_size),
    }


@router.post("/posts-comments/{post_id}/comments", status_code=201, response_model=CommentCreated)
async def create_comment(
    post_id: ResourceId,
    data: CommentCreate,
    actor_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    comment = await comment_service.create_comment(db, actor_id, post_id, data)
    return {"message": "comment created", "comment": comment}


@router.delete("/comments/{comment_id}", response_model=MessageResponse)
async def delete_comment(
    comment_id: ResourceId,
    actor_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    await comment_service.delete_comment(db, actor_id, comment_id)
    return {"message": "comment deleted"}
